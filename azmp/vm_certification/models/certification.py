"""Models for probe outputs and aggregated certification results."""

from datetime import datetime

from pydantic import BaseModel, Field, computed_field, field_validator

from azmp.vm_certification.models.test_result import TestResult, TestStatus


class VHDValidation(BaseModel):
    """Format, size and alignment findings for a VHD file."""

    format: str = Field(..., description="Detected container format (VHD or VHDX)")
    size_gb: float = Field(..., description="Size in binary gigabytes")
    has_correct_alignment: bool = Field(
        ..., description="True if the size is a multiple of 1 MiB"
    )
    errors: list[str] = Field(
        default_factory=list, description="Hard failures, in detection order"
    )
    warnings: list[str] = Field(
        default_factory=list, description="Soft failures that do not gate validity"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_valid(self) -> bool:
        """True if no errors were produced."""
        return not self.errors


class SecurityScan(BaseModel):
    """Security posture findings for an image."""

    has_no_default_credentials: bool = Field(
        ..., description="No default usernames or passwords present"
    )
    has_no_malware: bool = Field(..., description="No malicious files detected")
    has_no_unauthorized_software: bool = Field(
        ..., description="All installed software is licensed for distribution"
    )
    has_secure_configuration: bool = Field(
        ..., description="Firewall, services and hardening settings are acceptable"
    )
    vulnerabilities: list[str] = Field(
        default_factory=list, description="Individual vulnerability descriptions"
    )


class PerformanceBenchmark(BaseModel):
    """Boot and disk I/O measurements with the threshold verdict."""

    boot_time_seconds: float = Field(..., gt=0, description="Time to boot")
    disk_read_mbps: float = Field(..., gt=0, description="Sequential read MB/s")
    disk_write_mbps: float = Field(..., gt=0, description="Sequential write MB/s")
    disk_iops: float = Field(..., gt=0, description="I/O operations per second")
    meets_minimum_requirements: bool = Field(
        ..., description="True if every metric clears its threshold"
    )
    warnings: list[str] = Field(
        default_factory=list, description="One entry per metric below threshold"
    )


class CertificationResults(BaseModel):
    """Aggregated verdict of one certification run."""

    overall_status: TestStatus = Field(..., description="Aggregate status")
    score: int = Field(..., ge=0, le=100, description="Percentage of passed checks")
    total_tests: int = Field(..., ge=0, description="Number of test results")
    passed_tests: int = Field(..., ge=0)
    failed_tests: int = Field(..., ge=0)
    warning_tests: int = Field(..., ge=0)
    skipped_tests: int = Field(..., ge=0)
    test_results: list[TestResult] = Field(
        default_factory=list, description="All results in production order"
    )
    recommendations: list[str] = Field(
        default_factory=list, description="Advisory follow-up actions"
    )
    errors: list[str] = Field(
        default_factory=list, description="Messages of every failed result"
    )
    start_time: datetime = Field(..., description="Run start (UTC)")
    end_time: datetime = Field(..., description="Run end (UTC)")
    duration: float = Field(..., ge=0, description="Run duration in seconds")

    @field_validator("overall_status")
    @classmethod
    def _not_skipped(cls, value: TestStatus) -> TestStatus:
        if value == TestStatus.SKIPPED:
            raise ValueError("overall status cannot be skipped")
        return value
