"""Exception hierarchy for VM certification tooling errors.

Certification findings (a non-compliant image) are never raised; they are
reported as failed or warning test results. Everything in this module
signals that the tool itself could not do its job.
"""


class CertificationError(Exception):
    """Base exception for all certification tooling errors."""


class InvalidConfigError(CertificationError, ValueError):
    """Run configuration is missing required values."""


class VHDNotFoundError(CertificationError, FileNotFoundError):
    """The VHD file to certify does not exist."""

    def __init__(self, vhd_path: str) -> None:
        self.vhd_path = vhd_path
        super().__init__(f"VHD file not found: {vhd_path}")


class NoResultsError(CertificationError, RuntimeError):
    """A summary was requested before any certification run completed."""


class ProbeTimeoutError(CertificationError, TimeoutError):
    """A probe did not complete within the configured timeout."""

    def __init__(self, probe: str, timeout: float) -> None:
        self.probe = probe
        self.timeout = timeout
        super().__init__(f"{probe} did not complete within {timeout} seconds")
