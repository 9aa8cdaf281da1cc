"""Configuration models for certification runs."""

from enum import Enum

from pydantic import BaseModel, Field


class ReportFormat(str, Enum):
    """Report output format."""

    HTML = "html"
    JSON = "json"
    XML = "xml"
    MARKDOWN = "markdown"


class CertificationOptions(BaseModel):
    """Run options shared by every image in a run."""

    output_dir: str | None = Field(
        default=None, description="Directory for reports, created if missing"
    )
    skip_security_scan: bool = Field(default=False, description="Skip security scan")
    skip_performance_test: bool = Field(
        default=False, description="Skip performance benchmark"
    )
    verbose_output: bool = Field(
        default=False, description="Log every test result as it is produced"
    )
    vm_size: str | None = Field(
        default=None, description="Declared Azure VM size (e.g. Standard_D2s_v3)"
    )
    region: str | None = Field(
        default=None, description="Declared Azure region (e.g. eastus)"
    )
    probe_timeout: float | None = Field(
        default=None, gt=0, description="Per-probe timeout in seconds"
    )
    company: str | None = Field(
        default=None, description="Company name printed in report headers"
    )
    report_formats: list[ReportFormat] = Field(
        default_factory=lambda: [ReportFormat.JSON, ReportFormat.MARKDOWN],
        description="Report formats written to output_dir",
    )


class CertificationConfig(CertificationOptions):
    """Configuration for certifying a single VHD."""

    vhd_path: str = Field(..., description="Path to the VHD file")
