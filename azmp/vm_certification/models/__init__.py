"""Data models for certification configuration, checks and results."""

from azmp.vm_certification.models.certification import (
    CertificationResults,
    PerformanceBenchmark,
    SecurityScan,
    VHDValidation,
)
from azmp.vm_certification.models.config import (
    CertificationConfig,
    CertificationOptions,
    ReportFormat,
)
from azmp.vm_certification.models.test_result import (
    TestCategory,
    TestResult,
    TestStatus,
)

__all__ = [
    "CertificationConfig",
    "CertificationOptions",
    "CertificationResults",
    "PerformanceBenchmark",
    "ReportFormat",
    "SecurityScan",
    "TestCategory",
    "TestResult",
    "TestStatus",
    "VHDValidation",
]
