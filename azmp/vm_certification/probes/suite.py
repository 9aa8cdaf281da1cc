"""Bundle of probes used by a certification run."""

from dataclasses import dataclass, field

from azmp.vm_certification.probes.base import (
    ComplianceProbe,
    ConfigurationProbe,
    GeneralizationProbe,
    PerformanceProbe,
    SecurityProbe,
)
from azmp.vm_certification.probes.configuration import MarketplaceConfigurationProbe
from azmp.vm_certification.probes.static import (
    ChecklistComplianceProbe,
    StaticGeneralizationProbe,
    StaticPerformanceProbe,
    StaticSecurityProbe,
)


@dataclass
class ProbeSuite:
    """Probes executed by the certification runner."""

    security: SecurityProbe = field(default_factory=StaticSecurityProbe)
    generalization: GeneralizationProbe = field(
        default_factory=StaticGeneralizationProbe
    )
    configuration: ConfigurationProbe = field(
        default_factory=MarketplaceConfigurationProbe
    )
    performance: PerformanceProbe = field(default_factory=StaticPerformanceProbe)
    compliance: ComplianceProbe = field(default_factory=ChecklistComplianceProbe)
