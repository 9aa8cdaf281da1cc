"""CLI entry point for VM certification tests."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from azmp.vm_certification.config_loader import load_options, merge_options
from azmp.vm_certification.models.certification import (
    CertificationResults,
    VHDValidation,
)
from azmp.vm_certification.models.config import (
    CertificationConfig,
    CertificationOptions,
    ReportFormat,
)
from azmp.vm_certification.models.test_result import TestStatus
from azmp.vm_certification.report import (
    DEFAULT_REPORT_TITLE,
    CertificationReportGenerator,
    ReportMetadata,
)
from azmp.vm_certification.runner import (
    CertificationTestRunner,
    quick_validate,
    run_batch_tests,
)
from azmp.vm_certification.vhd_validation import detect_format

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
    force=True,
)
logger = logging.getLogger(__name__)

EXIT_CERTIFICATION_FAILED = 1
EXIT_TOOL_ERROR = 2

app = typer.Typer()


@app.command()
def main(  # noqa: C901
    vhd_path: Path = typer.Argument(..., help="VHD file, or directory of VHD files"),  # noqa: B008
    quick: bool = typer.Option(
        False, "--quick", "-q", help="Validate VHD format and size only"
    ),
    batch: bool = typer.Option(
        False, "--batch", "-b", help="Certify every .vhd file in a directory"
    ),
    config: Optional[Path] = typer.Option(  # noqa: B008
        None, "--config", "-c", help="YAML file with run options"
    ),
    output_dir: Optional[Path] = typer.Option(  # noqa: B008
        None, "--output-dir", "-o", help="Directory for certification reports"
    ),
    skip_security: bool = typer.Option(
        False, "--skip-security", help="Skip the security scan"
    ),
    skip_performance: bool = typer.Option(
        False, "--skip-performance", help="Skip the performance benchmark"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log every test result"),
    vm_size: Optional[str] = typer.Option(
        None, "--vm-size", help="Azure VM size (e.g. Standard_D2s_v3)"
    ),
    region: Optional[str] = typer.Option(
        None, "--region", "-r", help="Azure region (e.g. eastus)"
    ),
    probe_timeout: Optional[float] = typer.Option(
        None, "--probe-timeout", help="Per-probe timeout in seconds"
    ),
    company: Optional[str] = typer.Option(
        None, "--company", help="Company name for report headers"
    ),
    formats: Optional[list[ReportFormat]] = typer.Option(  # noqa: B008
        None, "--format", "-f", help="Report format (repeatable)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
) -> None:
    """Run Azure Marketplace certification tests on VHD images."""
    logger.info("=" * 80)
    logger.info("Azure VM Certification Test Tool - Starting")
    logger.info("=" * 80)
    logger.info(f"VHD path: {vhd_path}")

    try:
        base_options = load_options(config) if config else CertificationOptions()
        options = merge_options(
            base_options,
            output_dir=str(output_dir) if output_dir else None,
            skip_security_scan=True if skip_security else None,
            skip_performance_test=True if skip_performance else None,
            verbose_output=True if verbose else None,
            vm_size=vm_size,
            region=region,
            probe_timeout=probe_timeout,
            company=company,
            report_formats=formats or None,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to load options: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_TOOL_ERROR)

    if quick:
        _run_quick(vhd_path, as_json)
    elif batch or vhd_path.is_dir():
        _run_batch(vhd_path, options, as_json)
    else:
        _run_single(vhd_path, options, as_json)


def _run_quick(vhd_path: Path, as_json: bool) -> None:
    """Validate format and size only."""
    logger.info("Running quick VHD validation...")
    try:
        validation = asyncio.run(quick_validate(str(vhd_path)))
    except Exception as e:
        logger.exception("Quick validation failed")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_TOOL_ERROR)

    if as_json:
        typer.echo(validation.model_dump_json(indent=2))
    else:
        typer.echo(_format_validation(validation))

    if not validation.is_valid:
        raise typer.Exit(code=EXIT_CERTIFICATION_FAILED)


def _run_single(vhd_path: Path, options: CertificationOptions, as_json: bool) -> None:
    """Certify one VHD and print its summary."""
    try:
        runner = CertificationTestRunner(
            CertificationConfig(vhd_path=str(vhd_path), **options.model_dump())
        )
        logger.info("Running certification tests...")
        results = asyncio.run(runner.run_all())
    except Exception as e:
        logger.exception("Certification run failed")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_TOOL_ERROR)

    if as_json:
        typer.echo(results.model_dump_json(indent=2))
    else:
        typer.echo(runner.get_summary())

    if options.output_dir:
        _write_reports(results, Path(options.output_dir), str(vhd_path), options)

    if results.overall_status == TestStatus.FAILED:
        logger.error("Certification tests FAILED")
        raise typer.Exit(code=EXIT_CERTIFICATION_FAILED)


def _run_batch(vhd_path: Path, options: CertificationOptions, as_json: bool) -> None:
    """Certify every VHD in a directory (or a single file)."""
    if vhd_path.is_dir():
        vhd_files = sorted(
            str(p)
            for p in vhd_path.iterdir()
            if p.is_file() and detect_format(str(p)) == "VHD"
        )
    else:
        vhd_files = [str(vhd_path)]

    if not vhd_files:
        typer.echo(f"Error: No VHD files found in {vhd_path}", err=True)
        raise typer.Exit(code=EXIT_TOOL_ERROR)

    logger.info(f"Found {len(vhd_files)} VHD file(s)")
    outcomes = asyncio.run(run_batch_tests(vhd_files, options))

    tool_errors = 0
    failed = 0
    output: dict[str, object] = {}
    for path in vhd_files:
        outcome = outcomes[path]
        name = Path(path).name
        if isinstance(outcome, Exception):
            tool_errors += 1
            output[path] = {"error": str(outcome)}
            if not as_json:
                typer.echo(f"! {name}: tool error: {outcome}")
            continue

        if outcome.overall_status == TestStatus.FAILED:
            failed += 1
        output[path] = outcome.model_dump(mode="json")
        if not as_json:
            icon = "✗" if outcome.overall_status == TestStatus.FAILED else "✓"
            typer.echo(
                f"{icon} {name}: {outcome.score}/100 ({outcome.overall_status.value})"
            )

        if options.output_dir:
            _write_reports(
                outcome,
                Path(options.output_dir) / Path(path).stem,
                path,
                options,
                title=f"Certification Report: {name}",
            )

    if as_json:
        typer.echo(json.dumps(output, indent=2))
    else:
        passed = len(vhd_files) - failed - tool_errors
        typer.echo(
            f"Total: {passed} passed, {failed} failed, {tool_errors} tool errors"
        )

    if tool_errors:
        raise typer.Exit(code=EXIT_TOOL_ERROR)
    if failed:
        raise typer.Exit(code=EXIT_CERTIFICATION_FAILED)


def _write_reports(
    results: CertificationResults,
    output_dir: Path,
    vhd_path: str,
    options: CertificationOptions,
    title: str = DEFAULT_REPORT_TITLE,
) -> None:
    metadata = ReportMetadata(
        title=title,
        vhd_path=vhd_path,
        company_name=options.company,
        vm_size=options.vm_size,
        region=options.region,
    )
    try:
        generator = CertificationReportGenerator(
            results, output_dir, metadata, formats=options.report_formats
        )
        generated = generator.generate_all()
    except OSError as e:
        logger.error(f"Failed to write reports to {output_dir}: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_TOOL_ERROR)

    for file_path in generated:
        logger.info(f"Report generated: {file_path}")


def _format_validation(validation: VHDValidation) -> str:
    """Render quick validation results as text."""
    lines = [
        "Quick Validation Results:",
        f"  Format: {validation.format}",
        f"  Size: {validation.size_gb} GB",
        f"  1MB Aligned: {'✓' if validation.has_correct_alignment else '✗'}",
        f"  Valid: {'✓ YES' if validation.is_valid else '✗ NO'}",
    ]
    if validation.errors:
        lines.append("Errors:")
        lines.extend(f"  ✗ {error}" for error in validation.errors)
    if validation.warnings:
        lines.append("Warnings:")
        lines.extend(f"  ⚠ {warning}" for warning in validation.warnings)
    return "\n".join(lines)


if __name__ == "__main__":  # pragma: no cover
    app()
