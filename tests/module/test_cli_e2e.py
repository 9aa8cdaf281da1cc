"""End-to-end tests for the certification CLI against real sparse files."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from azmp.vm_certification.cli import app
from azmp.vm_certification.vhd_validation import ALIGNMENT_BYTES, BYTES_PER_GB

runner = CliRunner()


def _sparse_file(path: Path, size: int) -> Path:
    with path.open("wb") as f:
        f.truncate(size)
    return path


@pytest.fixture
def images(tmp_path: Path) -> Path:
    """Create a directory of sparse VHD images."""
    image_dir = tmp_path / "images"
    image_dir.mkdir()
    _sparse_file(image_dir / "ubuntu.vhd", 2 * BYTES_PER_GB)
    _sparse_file(image_dir / "tiny.vhd", 64 * ALIGNMENT_BYTES)
    _sparse_file(image_dir / "unaligned.vhd", 2 * BYTES_PER_GB + 4096)
    _sparse_file(image_dir / "windows.vhdx", 2 * BYTES_PER_GB)
    return image_dir


def test_certify_single_image(images: Path, tmp_path: Path) -> None:
    """A clean image passes and both reports are written."""
    output_dir = tmp_path / "reports"

    result = runner.invoke(
        app,
        [
            str(images / "ubuntu.vhd"),
            "--output-dir",
            str(output_dir),
            "--vm-size",
            "Standard_D2s_v3",
            "--region",
            "eastus",
        ],
    )

    assert result.exit_code == 0
    assert "Overall Status: PASSED" in result.stdout
    assert "Score: 100/100" in result.stdout

    report = json.loads((output_dir / "certification-report.json").read_text())
    assert report["summary"]["total_tests"] == 6
    assert report["metadata"]["vm_size"] == "Standard_D2s_v3"
    markdown = (output_dir / "certification-report.md").read_text()
    assert "## Executive Summary" in markdown


def test_certify_small_image_warns(images: Path) -> None:
    """A very small image passes with a warning."""
    result = runner.invoke(app, [str(images / "tiny.vhd"), "--json"])

    assert result.exit_code == 0
    output = json.loads(result.stdout)
    assert output["overall_status"] == "warning"
    assert output["warning_tests"] == 1


def test_certify_vhdx_fails(images: Path) -> None:
    """A VHDX image fails certification."""
    result = runner.invoke(
        app, [str(images / "windows.vhdx"), "--skip-security", "--skip-performance"]
    )

    assert result.exit_code == 1
    assert "VHD must be in .vhd format (not VHDX)" in result.stdout


def test_certify_missing_image(tmp_path: Path) -> None:
    """A missing image is a tool error."""
    result = runner.invoke(app, [str(tmp_path / "absent.vhd")])

    assert result.exit_code == 2


def test_quick_validation_unaligned(images: Path) -> None:
    """Quick validation reports misalignment."""
    result = runner.invoke(app, [str(images / "unaligned.vhd"), "--quick", "--json"])

    assert result.exit_code == 1
    output = json.loads(result.stdout)
    assert output["format"] == "VHD"
    assert output["has_correct_alignment"] is False
    assert output["errors"] == ["VHD size must be 1MB aligned"]


def test_batch_directory(images: Path, tmp_path: Path) -> None:
    """Batch mode certifies every .vhd in the directory."""
    output_dir = tmp_path / "reports"

    result = runner.invoke(
        app, [str(images), "--batch", "--output-dir", str(output_dir), "-f", "json"]
    )

    assert result.exit_code == 1
    assert "✓ ubuntu.vhd: 100/100 (passed)" in result.stdout
    assert "✓ tiny.vhd" in result.stdout
    assert "✗ unaligned.vhd" in result.stdout
    assert "windows.vhdx" not in result.stdout
    assert "Total: 2 passed, 1 failed, 0 tool errors" in result.stdout
    assert (output_dir / "ubuntu" / "certification-report.json").exists()
    assert not (output_dir / "ubuntu" / "certification-report.md").exists()
