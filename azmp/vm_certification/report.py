"""Write certification results to report files."""

import json
import logging
import xml.etree.ElementTree as ET
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Template
from pydantic import BaseModel, Field

from azmp.vm_certification.models.certification import CertificationResults
from azmp.vm_certification.models.config import ReportFormat
from azmp.vm_certification.models.test_result import TestResult, TestStatus

logger = logging.getLogger(__name__)

DEFAULT_REPORT_TITLE = "Azure VM Certification Report"

STATUS_ICONS = {
    TestStatus.PASSED: "✓",
    TestStatus.FAILED: "✗",
    TestStatus.WARNING: "⚠",
    TestStatus.SKIPPED: "○",
}

FILE_EXTENSIONS = {
    ReportFormat.HTML: "html",
    ReportFormat.JSON: "json",
    ReportFormat.XML: "xml",
    ReportFormat.MARKDOWN: "md",
}

SUMMARY_FIELDS = (
    "overall_status",
    "score",
    "total_tests",
    "passed_tests",
    "failed_tests",
    "warning_tests",
    "skipped_tests",
    "duration",
    "start_time",
    "end_time",
)

HTML_TEMPLATE = Template(
    """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{ metadata.title }}</title>
  <style>
    body { font-family: -apple-system, "Segoe UI", Roboto, sans-serif;
           color: #333; background: #f5f5f5; margin: 0; padding: 20px; }
    .container { max-width: 1200px; margin: 0 auto; background: white;
                 border-radius: 8px; overflow: hidden; }
    .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
              color: white; padding: 40px; }
    .content { padding: 40px; }
    .summary { display: grid; gap: 20px; margin-bottom: 40px;
               grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); }
    .summary-card { padding: 20px; border-radius: 8px; background: #f8f9fa;
                    border-left: 4px solid #667eea; }
    .summary-card .value { font-size: 32px; font-weight: bold; }
    .test-item { padding: 15px; margin-bottom: 10px; border-radius: 6px;
                 background: #f8f9fa; border-left: 4px solid #6c757d;
                 list-style: none; }
    .passed { border-left-color: #28a745; }
    .failed { border-left-color: #dc3545; }
    .warning { border-left-color: #ffc107; }
    .badge { padding: 4px 12px; border-radius: 12px; font-size: 12px;
             font-weight: 600; text-transform: uppercase; color: white; }
    .badge-passed { background: #28a745; }
    .badge-failed { background: #dc3545; }
    .badge-warning { background: #ffc107; color: #333; }
    .badge-skipped { background: #6c757d; }
    .recommendations { background: #e7f3ff; border-radius: 6px; padding: 20px; }
    .errors { background: #ffe7e7; border-radius: 6px; padding: 20px; color: #dc3545; }
    .footer { text-align: center; padding: 20px; color: #666; font-size: 14px; }
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>{{ metadata.title }}</h1>
      <p>Generated: {{ metadata.generated_date.isoformat() }}</p>
      {% if metadata.company_name %}
      <p>Company: {{ metadata.company_name }}</p>
      {% endif %}
      {% if metadata.project_name %}
      <p>Project: {{ metadata.project_name }}</p>
      {% endif %}
      <p>VHD Path: {{ metadata.vhd_path }}</p>
      {% if metadata.vm_size %}<p>VM Size: {{ metadata.vm_size }}</p>{% endif %}
      {% if metadata.region %}<p>Region: {{ metadata.region }}</p>{% endif %}
    </div>
    <div class="content">
      <div class="summary">
        <div class="summary-card {{ results.overall_status.value }}">
          <h3>Overall Status</h3>
          <div class="value">
            {{ icons[results.overall_status] }} {{ results.overall_status.value }}
          </div>
        </div>
        <div class="summary-card">
          <h3>Score</h3>
          <div class="value">{{ results.score }}/100</div>
        </div>
        <div class="summary-card passed">
          <h3>Passed Tests</h3>
          <div class="value">{{ results.passed_tests }}</div>
        </div>
        <div class="summary-card failed">
          <h3>Failed Tests</h3>
          <div class="value">{{ results.failed_tests }}</div>
        </div>
      </div>
      {% for category, tests in tests_by_category.items() %}
      <section>
        <h2>{{ category }}</h2>
        <ul>
          {% for test in tests %}
          <li class="test-item {{ test.status.value }}">
            {% set status = test.status.value %}
            <span class="badge badge-{{ status }}">{{ status }}</span>
            <strong>{{ test.name }}</strong>
            <div>{{ test.message }}</div>
          </li>
          {% endfor %}
        </ul>
      </section>
      {% endfor %}
      {% if results.recommendations %}
      <section>
        <h2>Recommendations</h2>
        <ul class="recommendations">
          {% for rec in results.recommendations %}<li>{{ rec }}</li>
          {% endfor %}
        </ul>
      </section>
      {% endif %}
      {% if results.errors %}
      <section>
        <h2>Errors</h2>
        <ul class="errors">
          {% for error in results.errors %}<li>{{ error }}</li>
          {% endfor %}
        </ul>
      </section>
      {% endif %}
    </div>
    <div class="footer">
      <p>{{ metadata.title }} &bull;
        Duration: {{ "%.2f"|format(results.duration) }}s</p>
    </div>
  </div>
</body>
</html>
""",
    autoescape=True,
)


class ReportMetadata(BaseModel):
    """Header information printed at the top of a report."""

    title: str = Field(default=DEFAULT_REPORT_TITLE)
    vhd_path: str = Field(..., description="Certified VHD")
    generated_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    company_name: str | None = Field(default=None)
    project_name: str | None = Field(default=None)
    vm_size: str | None = Field(default=None)
    region: str | None = Field(default=None)


def group_by_category(
    test_results: Sequence[TestResult],
) -> dict[str, list[TestResult]]:
    """Group results by category, keeping first-seen category order."""
    grouped: dict[str, list[TestResult]] = {}
    for result in test_results:
        grouped.setdefault(result.category.value, []).append(result)
    return grouped


def _sub_element(parent: ET.Element, tag: str, text: object) -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = str(text)
    return element


class CertificationReportGenerator:
    """Renders CertificationResults as HTML, JSON, XML and Markdown files."""

    def __init__(
        self,
        results: CertificationResults,
        output_dir: Path,
        metadata: ReportMetadata,
        formats: Sequence[ReportFormat] = (ReportFormat.JSON, ReportFormat.MARKDOWN),
        filename: str = "certification-report",
    ) -> None:
        """Initialize the generator and create the output directory."""
        self.results = results
        self.output_dir = output_dir
        self.metadata = metadata
        self.formats = list(formats)
        self.filename = filename

        self.output_dir.mkdir(parents=True, exist_ok=True)

    def generate_all(self) -> list[Path]:
        """Write every configured format and return the file paths."""
        return [self.generate(report_format) for report_format in self.formats]

    def generate(self, report_format: ReportFormat) -> Path:
        """Write one report format and return its path."""
        renderers: dict[ReportFormat, Callable[[], str]] = {
            ReportFormat.HTML: self.render_html,
            ReportFormat.JSON: self.render_json,
            ReportFormat.XML: self.render_xml,
            ReportFormat.MARKDOWN: self.render_markdown,
        }
        content = renderers[report_format]()

        file_path = self.output_dir / (
            f"{self.filename}.{FILE_EXTENSIONS[report_format]}"
        )
        file_path.write_text(content, encoding="utf-8")
        logger.info(f"Wrote {report_format.value} report: {file_path}")
        return file_path

    def render_html(self) -> str:
        """Render the report as a standalone HTML page."""
        return HTML_TEMPLATE.render(
            metadata=self.metadata,
            results=self.results,
            icons=STATUS_ICONS,
            tests_by_category=group_by_category(self.results.test_results),
        )

    def render_json(self) -> str:
        """Render the report as a JSON document."""
        results = self.results.model_dump(mode="json")
        report = {
            "metadata": self.metadata.model_dump(mode="json"),
            "summary": {key: results[key] for key in SUMMARY_FIELDS},
            "test_results": results["test_results"],
            "recommendations": results["recommendations"],
            "errors": results["errors"],
            "tests_by_category": {
                category: [test.name for test in tests]
                for category, tests in group_by_category(
                    self.results.test_results
                ).items()
            },
        }
        return json.dumps(report, indent=2)

    def render_xml(self) -> str:
        """Render the report as an XML document.

        Element names follow the JSON report keys; optional metadata and
        test details are omitted when unset, as are empty recommendation
        and error lists.
        """
        root = ET.Element("certification_report")

        metadata = ET.SubElement(root, "metadata")
        for key, value in self.metadata.model_dump(mode="json").items():
            if value is not None:
                _sub_element(metadata, key, value)

        summary = ET.SubElement(root, "summary")
        results = self.results.model_dump(mode="json")
        for key in SUMMARY_FIELDS:
            _sub_element(summary, key, results[key])

        test_results = ET.SubElement(root, "test_results")
        for test in results["test_results"]:
            element = ET.SubElement(test_results, "test")
            for key in ("name", "category", "status", "message", "details"):
                if test[key] is not None:
                    _sub_element(element, key, test[key])
            _sub_element(element, "duration", test["duration"])
            _sub_element(element, "timestamp", test["timestamp"])

        if self.results.recommendations:
            recommendations = ET.SubElement(root, "recommendations")
            for rec in self.results.recommendations:
                _sub_element(recommendations, "recommendation", rec)

        if self.results.errors:
            errors = ET.SubElement(root, "errors")
            for error in self.results.errors:
                _sub_element(errors, "error", error)

        ET.indent(root, space="  ")
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(
            root, encoding="unicode"
        )

    def render_markdown(self) -> str:
        """Render the report as Markdown."""
        results = self.results
        metadata = self.metadata

        lines = [f"# {metadata.title}", ""]
        lines.append(f"**Generated:** {metadata.generated_date.isoformat()}")
        if metadata.company_name:
            lines.append(f"**Company:** {metadata.company_name}")
        if metadata.project_name:
            lines.append(f"**Project:** {metadata.project_name}")
        lines.append(f"**VHD Path:** {metadata.vhd_path}")
        if metadata.vm_size:
            lines.append(f"**VM Size:** {metadata.vm_size}")
        if metadata.region:
            lines.append(f"**Region:** {metadata.region}")
        lines.append("")

        lines.extend(["## Executive Summary", ""])
        lines.append(
            f"**Overall Status:** {STATUS_ICONS[results.overall_status]} "
            f"{results.overall_status.value.upper()}"
        )
        lines.append(f"**Score:** {results.score}/100")
        lines.append("")

        lines.extend(["## Test Summary", ""])
        lines.append(f"- Total Tests: {results.total_tests}")
        lines.append(f"- Passed: {results.passed_tests}")
        lines.append(f"- Failed: {results.failed_tests}")
        lines.append(f"- Warnings: {results.warning_tests}")
        lines.append(f"- Skipped: {results.skipped_tests}")
        lines.append(f"- Duration: {results.duration:.2f}s")
        lines.append("")

        lines.extend(["## Test Results by Category", ""])
        for category, tests in group_by_category(results.test_results).items():
            lines.extend([f"### {category}", ""])
            for test in tests:
                icon = STATUS_ICONS[test.status]
                lines.append(f"- {icon} **{test.name}** - {test.status.value}")
                lines.append(f"  - {test.message}")
            lines.append("")

        if results.recommendations:
            lines.extend(["## Recommendations", ""])
            lines.extend(f"- {rec}" for rec in results.recommendations)
            lines.append("")

        if results.errors:
            lines.extend(["## Errors", ""])
            lines.extend(f"- ✗ {error}" for error in results.errors)
            lines.append("")

        return "\n".join(lines)
