"""Marketplace configuration probe."""

import logging
import re

from azmp.vm_certification.models.config import CertificationConfig
from azmp.vm_certification.probes.base import ConfigurationProbe

logger = logging.getLogger(__name__)

VM_SIZE_PATTERN = re.compile(r"^(Standard|Basic)_[A-Za-z0-9_-]+$")
REGION_PATTERN = re.compile(r"^[a-z][a-z0-9]*$")


class MarketplaceConfigurationProbe(ConfigurationProbe):
    """Validates image configuration and declared deployment metadata.

    The guest agent, network, storage and boot settings are asserted by the
    publisher. The declared VM size and region, when present, must be
    well-formed Azure names.
    """

    def __init__(
        self,
        guest_agent_installed: bool = True,
        network_configured: bool = True,
        storage_configured: bool = True,
        boot_configured: bool = True,
    ) -> None:
        """Initialize with the publisher-asserted image settings."""
        self.image_checks = {
            "Azure Guest Agent": guest_agent_installed,
            "Network": network_configured,
            "Storage": storage_configured,
            "Boot": boot_configured,
        }

    async def validate(self, config: CertificationConfig) -> bool:
        """Return True if every image check and metadata check passes."""
        issues = self.find_issues(config)
        for issue in issues:
            logger.info(f"Configuration issue: {issue}")
        return not issues

    def find_issues(self, config: CertificationConfig) -> list[str]:
        """List every configuration problem, in check order."""
        issues = [
            f"{name} configuration check failed"
            for name, passed in self.image_checks.items()
            if not passed
        ]

        if config.vm_size is not None and not VM_SIZE_PATTERN.match(config.vm_size):
            issues.append(f"Unrecognized VM size: {config.vm_size!r}")

        if config.region is not None and not REGION_PATTERN.match(config.region):
            issues.append(f"Unrecognized region: {config.region!r}")

        return issues
