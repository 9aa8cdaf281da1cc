"""Abstract base classes for certification probes."""

import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from azmp.vm_certification.models.certification import (
    PerformanceBenchmark,
    SecurityScan,
)
from azmp.vm_certification.models.config import CertificationConfig

logger = logging.getLogger(__name__)

MAX_BOOT_TIME_SECONDS = 60
MIN_DISK_READ_MBPS = 100
MIN_DISK_WRITE_MBPS = 80
MIN_DISK_IOPS = 1000


class SecurityProbe(ABC):
    """Scans an image for insecure defaults."""

    @abstractmethod
    async def scan(self, config: CertificationConfig) -> SecurityScan:
        """Scan the image and report security findings.

        Args:
            config: Configuration of the run, including the VHD path

        Returns:
            Security findings for the image

        """


class GeneralizationProbe(ABC):
    """Determines whether an image was generalized before capture."""

    @abstractmethod
    async def check(self, config: CertificationConfig) -> bool:
        """Return True if no machine-specific identity remains in the image."""


class ConfigurationProbe(ABC):
    """Validates declared VM configuration against marketplace rules."""

    @abstractmethod
    async def validate(self, config: CertificationConfig) -> bool:
        """Return True if the declared configuration is acceptable."""


class ComplianceProbe(ABC):
    """Rolls up marketplace policy requirements."""

    @abstractmethod
    async def check(self, config: CertificationConfig) -> bool:
        """Return True if every policy requirement is satisfied."""


class PerformanceMetrics(BaseModel):
    """Raw measurements reported by a performance probe."""

    boot_time_seconds: float = Field(..., gt=0)
    disk_read_mbps: float = Field(..., gt=0)
    disk_write_mbps: float = Field(..., gt=0)
    disk_iops: float = Field(..., gt=0)


class PerformanceProbe(ABC):
    """Benchmarks boot time and disk I/O."""

    @abstractmethod
    async def measure(self, config: CertificationConfig) -> PerformanceMetrics:
        """Collect raw boot and disk measurements for the image."""

    async def benchmark(self, config: CertificationConfig) -> PerformanceBenchmark:
        """Measure the image and compare the metrics to minimum thresholds.

        Args:
            config: Configuration of the run, including the VHD path

        Returns:
            Benchmark with the threshold verdict and one warning per
            metric that missed its threshold

        """
        metrics = await self.measure(config)

        warnings: list[str] = []
        if metrics.boot_time_seconds >= MAX_BOOT_TIME_SECONDS:
            warnings.append(
                f"Boot time exceeds {MAX_BOOT_TIME_SECONDS} seconds - "
                "optimize startup services"
            )
        if metrics.disk_read_mbps <= MIN_DISK_READ_MBPS:
            warnings.append(
                f"Disk read performance below {MIN_DISK_READ_MBPS} MB/s - "
                "check disk configuration"
            )
        if metrics.disk_write_mbps <= MIN_DISK_WRITE_MBPS:
            warnings.append(
                f"Disk write performance below {MIN_DISK_WRITE_MBPS} MB/s - "
                "check disk configuration"
            )
        if metrics.disk_iops <= MIN_DISK_IOPS:
            warnings.append(
                f"Disk IOPS below {MIN_DISK_IOPS} - check disk configuration"
            )

        for warning in warnings:
            logger.info(f"Performance threshold missed: {warning}")

        return PerformanceBenchmark(
            boot_time_seconds=metrics.boot_time_seconds,
            disk_read_mbps=metrics.disk_read_mbps,
            disk_write_mbps=metrics.disk_write_mbps,
            disk_iops=metrics.disk_iops,
            meets_minimum_requirements=not warnings,
            warnings=warnings,
        )
