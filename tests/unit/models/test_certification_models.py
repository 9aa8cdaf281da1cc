"""Tests for probe output and certification result models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from azmp.vm_certification.models.certification import (
    CertificationResults,
    PerformanceBenchmark,
    SecurityScan,
    VHDValidation,
)
from azmp.vm_certification.models.test_result import TestStatus


def test_vhd_validation_valid_without_errors() -> None:
    """is_valid is True when no errors were recorded."""
    validation = VHDValidation(
        format="VHD",
        size_gb=0.5,
        has_correct_alignment=True,
        warnings=["VHD size (0.500GB) is very small - verify this is correct"],
    )
    assert validation.is_valid is True


def test_vhd_validation_invalid_with_errors() -> None:
    """is_valid is False as soon as an error is recorded."""
    validation = VHDValidation(
        format="VHDX",
        size_gb=10,
        has_correct_alignment=True,
        errors=["VHD must be in .vhd format (not VHDX)"],
    )
    assert validation.is_valid is False


def test_vhd_validation_dump_includes_is_valid() -> None:
    """Serialized validation includes the derived is_valid flag."""
    validation = VHDValidation(format="VHD", size_gb=10, has_correct_alignment=True)
    assert validation.model_dump() == {
        "format": "VHD",
        "size_gb": 10,
        "has_correct_alignment": True,
        "errors": [],
        "warnings": [],
        "is_valid": True,
    }


def test_security_scan_defaults_to_no_vulnerabilities() -> None:
    """SecurityScan vulnerabilities default to an empty list."""
    scan = SecurityScan(
        has_no_default_credentials=True,
        has_no_malware=True,
        has_no_unauthorized_software=True,
        has_secure_configuration=True,
    )
    assert scan.vulnerabilities == []


@pytest.mark.parametrize(
    "field", ["boot_time_seconds", "disk_read_mbps", "disk_write_mbps", "disk_iops"]
)
def test_performance_benchmark_rejects_non_positive_metrics(field: str) -> None:
    """Every benchmark metric must be strictly positive."""
    values: dict[str, object] = {
        "boot_time_seconds": 45,
        "disk_read_mbps": 125,
        "disk_write_mbps": 100,
        "disk_iops": 5000,
        "meets_minimum_requirements": True,
    }
    values[field] = 0
    with pytest.raises(ValidationError) as exc_info:
        PerformanceBenchmark.model_validate(values)
    assert field in str(exc_info.value)


def _results(**overrides: object) -> CertificationResults:
    now = datetime.now(timezone.utc)
    values: dict[str, object] = {
        "overall_status": TestStatus.PASSED,
        "score": 100,
        "total_tests": 1,
        "passed_tests": 1,
        "failed_tests": 0,
        "warning_tests": 0,
        "skipped_tests": 0,
        "start_time": now,
        "end_time": now,
        "duration": 0.0,
    }
    values.update(overrides)
    return CertificationResults.model_validate(values)


def test_certification_results_rejects_skipped_overall_status() -> None:
    """The aggregate status is never skipped."""
    with pytest.raises(ValidationError) as exc_info:
        _results(overall_status=TestStatus.SKIPPED)
    assert "overall status cannot be skipped" in str(exc_info.value)


def test_certification_results_rejects_out_of_range_score() -> None:
    """Scores are bounded to 0-100."""
    with pytest.raises(ValidationError):
        _results(score=101)


def test_certification_results_accepts_zero_duration() -> None:
    """A zero-duration run is valid."""
    assert _results(duration=0.0).duration == 0.0
