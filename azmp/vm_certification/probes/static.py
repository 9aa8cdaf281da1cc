"""Probes that report publisher-declared findings instead of inspecting images.

These are the defaults used when no inspection tooling is plugged in. Each
probe returns the values it was constructed with, so a run is deterministic
and reflects what the publisher asserts about the image.
"""

import logging
from collections.abc import Mapping

from azmp.vm_certification.models.certification import SecurityScan
from azmp.vm_certification.models.config import CertificationConfig
from azmp.vm_certification.probes.base import (
    ComplianceProbe,
    GeneralizationProbe,
    PerformanceMetrics,
    PerformanceProbe,
    SecurityProbe,
)

logger = logging.getLogger(__name__)

DEFAULT_COMPLIANCE_CHECKS: Mapping[str, bool] = {
    "marketplace-policy": True,
    "licensing": True,
    "privacy": True,
}


class StaticSecurityProbe(SecurityProbe):
    """Security probe returning a fixed scan."""

    def __init__(self, scan: SecurityScan | None = None) -> None:
        """Initialize with the scan to report (clean by default)."""
        self._scan = scan or SecurityScan(
            has_no_default_credentials=True,
            has_no_malware=True,
            has_no_unauthorized_software=True,
            has_secure_configuration=True,
        )

    async def scan(self, config: CertificationConfig) -> SecurityScan:
        """Return a copy of the declared scan."""
        return self._scan.model_copy(deep=True)


class StaticGeneralizationProbe(GeneralizationProbe):
    """Generalization probe returning a fixed verdict."""

    def __init__(self, generalized: bool = True) -> None:
        """Initialize with the declared generalization state."""
        self._generalized = generalized

    async def check(self, config: CertificationConfig) -> bool:
        """Return the declared generalization state."""
        return self._generalized


class StaticPerformanceProbe(PerformanceProbe):
    """Performance probe returning fixed measurements."""

    def __init__(self, metrics: PerformanceMetrics | None = None) -> None:
        """Initialize with the measurements to report.

        The default measurements describe a Standard_D2s_v3 class VM on
        premium storage.
        """
        self._metrics = metrics or PerformanceMetrics(
            boot_time_seconds=45,
            disk_read_mbps=125,
            disk_write_mbps=100,
            disk_iops=5000,
        )

    async def measure(self, config: CertificationConfig) -> PerformanceMetrics:
        """Return the declared measurements."""
        return self._metrics


class ChecklistComplianceProbe(ComplianceProbe):
    """Compliance probe rolling up a named checklist."""

    def __init__(self, checks: Mapping[str, bool] | None = None) -> None:
        """Initialize with check name to outcome pairs."""
        self.checks = dict(DEFAULT_COMPLIANCE_CHECKS if checks is None else checks)

    async def check(self, config: CertificationConfig) -> bool:
        """Return True if every checklist item passed."""
        failed = [name for name, passed in self.checks.items() if not passed]
        if failed:
            logger.info(f"Compliance checks failed: {', '.join(failed)}")
        return not failed
