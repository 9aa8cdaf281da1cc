"""Certification test runner for VHD images."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TypeVar

from azmp.vm_certification.aggregation import build_results, format_summary
from azmp.vm_certification.exceptions import (
    InvalidConfigError,
    NoResultsError,
    ProbeTimeoutError,
    VHDNotFoundError,
)
from azmp.vm_certification.filesystem import FileSystem, LocalFileSystem
from azmp.vm_certification.models.certification import (
    CertificationResults,
    PerformanceBenchmark,
    SecurityScan,
    VHDValidation,
)
from azmp.vm_certification.models.config import (
    CertificationConfig,
    CertificationOptions,
)
from azmp.vm_certification.models.test_result import (
    TestCategory,
    TestResult,
    TestStatus,
)
from azmp.vm_certification.probes.suite import ProbeSuite
from azmp.vm_certification.vhd_validation import validate_vhd

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Security flag -> (check name, finding, remediation)
SECURITY_FINDINGS: dict[str, tuple[str, str, str]] = {
    "has_no_default_credentials": (
        "Default Credentials Check",
        "Default credentials detected",
        "Remove all default credentials and ensure only user-configured "
        "credentials are present",
    ),
    "has_no_malware": (
        "Malware Scan",
        "Malware or suspicious files detected",
        "Clean the VHD and ensure no malicious software is present",
    ),
    "has_no_unauthorized_software": (
        "Software Licensing Check",
        "Software not licensed for Azure Marketplace distribution detected",
        "Remove or license all software before publishing",
    ),
    "has_secure_configuration": (
        "Secure Configuration Check",
        "Insecure configuration detected",
        "Ensure firewall is enabled, unnecessary services are disabled, and "
        "security best practices are followed",
    ),
}


def format_result_line(result: TestResult) -> str:
    """Format a test result as a single log line."""
    return f"[{result.status.value.upper()}] {result.name}: {result.message}"


class CertificationTestRunner:
    """Runs the certification checks against a single VHD."""

    __test__ = False

    def __init__(
        self,
        config: CertificationConfig,
        *,
        filesystem: FileSystem | None = None,
        probes: ProbeSuite | None = None,
        log_line: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the runner and validate the VHD path.

        Args:
            config: Run configuration
            filesystem: File-system capability (defaults to the local disk)
            probes: Probes to execute (defaults to declared-value probes)
            log_line: Sink for verbose per-result lines (defaults to logger)

        Raises:
            InvalidConfigError: If the VHD path is empty
            VHDNotFoundError: If the VHD file does not exist

        """
        self.config = config
        self.filesystem = filesystem or LocalFileSystem()
        self.probes = probes or ProbeSuite()
        self._log_line = log_line or logger.info
        self._last_results: CertificationResults | None = None

        self._validate_config()

    def _validate_config(self) -> None:
        if not self.config.vhd_path:
            raise InvalidConfigError("VHD path is required")

        if not self.filesystem.exists(self.config.vhd_path):
            raise VHDNotFoundError(self.config.vhd_path)

        output_dir = self.config.output_dir
        if output_dir and not self.filesystem.exists(output_dir):
            logger.info(f"Creating output directory: {output_dir}")
            self.filesystem.make_dirs(output_dir)

    @property
    def last_results(self) -> CertificationResults | None:
        """Results of the most recent run_all() call."""
        return self._last_results

    async def run_all(self) -> CertificationResults:
        """Run every enabled check and aggregate the results.

        Probe exceptions are not converted into failed results; they
        propagate and abort the run.
        """
        start_time = datetime.now(timezone.utc)
        started = time.monotonic()
        test_results: list[TestResult] = []

        logger.info(f"Starting certification run for {self.config.vhd_path}")

        self._collect(test_results, await self._vhd_format_results())
        self._collect(test_results, await self._generalization_results())
        self._collect(test_results, await self._configuration_results())

        if self.config.skip_security_scan:
            logger.info("Security scan skipped")
        else:
            self._collect(test_results, await self._security_results())

        if self.config.skip_performance_test:
            logger.info("Performance benchmark skipped")
        else:
            self._collect(test_results, await self._performance_results())

        self._collect(test_results, await self._compliance_results())

        duration = time.monotonic() - started
        end_time = max(datetime.now(timezone.utc), start_time)

        results = build_results(test_results, start_time, end_time, duration)
        logger.info(
            f"Certification run completed: {results.overall_status.value} "
            f"(score {results.score}/100, {results.total_tests} tests)"
        )

        self._last_results = results
        return results

    async def run_vhd_validation(self) -> VHDValidation:
        """Validate VHD format, size and alignment.

        Raises:
            OSError: If the VHD file cannot be inspected

        """
        logger.info(f"Validating VHD format: {self.config.vhd_path}")
        return validate_vhd(self.config.vhd_path, self.filesystem)

    async def run_security_scan(self) -> SecurityScan:
        """Scan the image for insecure defaults."""
        logger.info("Running security scan...")
        return await self._call_probe(
            "Security scan", self.probes.security.scan(self.config)
        )

    async def run_generalization_check(self) -> bool:
        """Check that the image was generalized before capture."""
        logger.info("Running generalization check...")
        return await self._call_probe(
            "Generalization check", self.probes.generalization.check(self.config)
        )

    async def run_configuration_validation(self) -> bool:
        """Validate the declared configuration against marketplace rules."""
        logger.info("Running configuration validation...")
        return await self._call_probe(
            "Configuration validation",
            self.probes.configuration.validate(self.config),
        )

    async def run_performance_benchmark(self) -> PerformanceBenchmark:
        """Benchmark boot time and disk I/O."""
        logger.info("Running performance benchmark...")
        return await self._call_probe(
            "Performance benchmark", self.probes.performance.benchmark(self.config)
        )

    async def run_compliance_checks(self) -> bool:
        """Roll up marketplace policy compliance."""
        logger.info("Running compliance checks...")
        return await self._call_probe(
            "Compliance checks", self.probes.compliance.check(self.config)
        )

    def get_summary(self) -> str:
        """Return a plain-text summary of the most recent run.

        Raises:
            NoResultsError: If run_all() has not completed yet

        """
        if self._last_results is None:
            raise NoResultsError(
                "No certification results yet - call run_all() first"
            )
        return format_summary(self._last_results)

    async def _call_probe(self, name: str, probe_call: Awaitable[T]) -> T:
        """Await a probe call, bounded by the configured timeout."""
        timeout = self.config.probe_timeout
        if timeout is None:
            return await probe_call

        try:
            return await asyncio.wait_for(probe_call, timeout)
        except asyncio.TimeoutError as e:
            raise ProbeTimeoutError(name, timeout) from e

    def _collect(
        self, test_results: list[TestResult], new_results: list[TestResult]
    ) -> None:
        for result in new_results:
            test_results.append(result)
            if self.config.verbose_output:
                self._log_line(format_result_line(result))

    async def _vhd_format_results(self) -> list[TestResult]:
        started = time.monotonic()
        validation = await self.run_vhd_validation()
        duration = time.monotonic() - started
        name = "VHD Format Check"

        results = [
            TestResult(
                name=name,
                category=TestCategory.VHD_FORMAT,
                status=TestStatus.FAILED,
                message=error,
                duration=duration,
            )
            for error in validation.errors
        ]
        results.extend(
            TestResult(
                name=name,
                category=TestCategory.VHD_FORMAT,
                status=TestStatus.WARNING,
                message=warning,
                duration=duration,
            )
            for warning in validation.warnings
        )

        if not results:
            results.append(
                TestResult(
                    name=name,
                    category=TestCategory.VHD_FORMAT,
                    status=TestStatus.PASSED,
                    message=(
                        f"VHD format valid ({validation.format}, "
                        f"{validation.size_gb}GB, 1MB aligned)"
                    ),
                    duration=duration,
                )
            )
        return results

    async def _generalization_results(self) -> list[TestResult]:
        started = time.monotonic()
        is_generalized = await self.run_generalization_check()

        if is_generalized:
            result = TestResult(
                name="Generalization Check",
                category=TestCategory.GENERALIZATION,
                status=TestStatus.PASSED,
                message="VHD is properly generalized",
                details=(
                    "VHD passed generalization checks "
                    "(no computer name, SID, or SSH keys found)"
                ),
            )
        else:
            result = TestResult(
                name="Generalization Check",
                category=TestCategory.GENERALIZATION,
                status=TestStatus.FAILED,
                message="VHD is not generalized - machine-specific data detected",
                details=(
                    "VHD must be generalized using sysprep (Windows) or "
                    "waagent (Linux) before certification"
                ),
            )
        result.duration = time.monotonic() - started
        return [result]

    async def _configuration_results(self) -> list[TestResult]:
        started = time.monotonic()
        is_valid = await self.run_configuration_validation()

        return [
            TestResult(
                name="Configuration Validation",
                category=TestCategory.CONFIGURATION,
                status=TestStatus.PASSED if is_valid else TestStatus.FAILED,
                message=(
                    "Configuration validation passed"
                    if is_valid
                    else "Configuration does not meet marketplace requirements"
                ),
                details="Checked: Azure Guest Agent, Network, Storage, Boot, "
                "VM size and region metadata",
                duration=time.monotonic() - started,
            )
        ]

    async def _security_results(self) -> list[TestResult]:
        started = time.monotonic()
        scan = await self.run_security_scan()
        duration = time.monotonic() - started

        results: list[TestResult] = []
        for flag, (name, finding, remediation) in SECURITY_FINDINGS.items():
            if not getattr(scan, flag):
                results.append(
                    TestResult(
                        name=name,
                        category=TestCategory.SECURITY,
                        status=TestStatus.FAILED,
                        message=finding,
                        details=remediation,
                        duration=duration,
                    )
                )

        results.extend(
            TestResult(
                name="Security Vulnerability",
                category=TestCategory.SECURITY,
                status=TestStatus.FAILED,
                message=f"Vulnerability found: {vulnerability}",
                duration=duration,
            )
            for vulnerability in scan.vulnerabilities
        )

        if not results:
            results.append(
                TestResult(
                    name="Security Scan",
                    category=TestCategory.SECURITY,
                    status=TestStatus.PASSED,
                    message="Security scan passed - no issues detected",
                    duration=duration,
                )
            )
        return results

    async def _performance_results(self) -> list[TestResult]:
        started = time.monotonic()
        benchmark = await self.run_performance_benchmark()

        if benchmark.meets_minimum_requirements:
            message = "Performance meets minimum requirements"
        else:
            message = "Performance below minimum thresholds: " + "; ".join(
                benchmark.warnings
            )

        return [
            TestResult(
                name="Performance Benchmark",
                category=TestCategory.PERFORMANCE,
                status=(
                    TestStatus.PASSED
                    if benchmark.meets_minimum_requirements
                    else TestStatus.FAILED
                ),
                message=message,
                details=benchmark.model_dump_json(indent=2),
                duration=time.monotonic() - started,
            )
        ]

    async def _compliance_results(self) -> list[TestResult]:
        started = time.monotonic()
        is_compliant = await self.run_compliance_checks()

        return [
            TestResult(
                name="Compliance Checks",
                category=TestCategory.COMPLIANCE,
                status=TestStatus.PASSED if is_compliant else TestStatus.FAILED,
                message=(
                    "Compliance checks passed"
                    if is_compliant
                    else "Compliance issues detected - review marketplace, "
                    "licensing and privacy requirements"
                ),
                details="Checked: Marketplace policies, Licensing, Privacy",
                duration=time.monotonic() - started,
            )
        ]


async def run_batch_tests(
    vhd_paths: list[str],
    options: CertificationOptions | None = None,
    *,
    filesystem: FileSystem | None = None,
    probes: ProbeSuite | None = None,
) -> dict[str, CertificationResults | Exception]:
    """Certify several VHDs concurrently.

    Args:
        vhd_paths: Paths of the VHD files to certify
        options: Run options applied to every image
        filesystem: File-system capability shared by the runners
        probes: Probes shared by the runners

    Returns:
        Mapping of path to its results, or to the exception that stopped
        that path's run. Iteration order is not significant.

    """
    options = options or CertificationOptions()
    unique_paths = list(dict.fromkeys(vhd_paths))

    async def _run_single(vhd_path: str) -> CertificationResults:
        config = CertificationConfig(
            vhd_path=vhd_path, **options.model_dump(exclude={"vhd_path"})
        )
        runner = CertificationTestRunner(
            config, filesystem=filesystem, probes=probes
        )
        return await runner.run_all()

    logger.info(f"Running batch certification for {len(unique_paths)} VHDs")
    outcomes = await asyncio.gather(
        *(_run_single(path) for path in unique_paths), return_exceptions=True
    )

    return _process_outcomes(unique_paths, list(outcomes))


def _process_outcomes(
    vhd_paths: list[str], outcomes: list[CertificationResults | BaseException]
) -> dict[str, CertificationResults | Exception]:
    """Pair batch outcomes with their paths, logging per-path failures."""
    final: dict[str, CertificationResults | Exception] = {}
    for vhd_path, outcome in zip(vhd_paths, outcomes):
        if isinstance(outcome, CertificationResults):
            logger.info(
                f"Batch result: {vhd_path} = {outcome.overall_status.value} "
                f"({outcome.score}/100)"
            )
            final[vhd_path] = outcome
        elif isinstance(outcome, Exception):
            logger.error(
                f"Certification error for {vhd_path}: "
                f"{type(outcome).__name__}: {outcome}",
                exc_info=outcome,
            )
            final[vhd_path] = outcome
        else:
            raise outcome
    return final


async def quick_validate(
    vhd_path: str, *, filesystem: FileSystem | None = None
) -> VHDValidation:
    """Validate only the VHD format, size and alignment."""
    runner = CertificationTestRunner(
        CertificationConfig(
            vhd_path=vhd_path, skip_security_scan=True, skip_performance_test=True
        ),
        filesystem=filesystem,
    )
    return await runner.run_vhd_validation()
