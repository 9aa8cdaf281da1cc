"""Reduce individual test results into a scored certification verdict."""

from collections import Counter
from collections.abc import Sequence
from datetime import datetime

from azmp.vm_certification.models.certification import CertificationResults
from azmp.vm_certification.models.test_result import TestResult, TestStatus

READY_RECOMMENDATION = "VHD is ready for Azure Marketplace certification submission"
FIX_FAILURES_RECOMMENDATION = (
    "Fix all failed tests before submitting to Azure Marketplace"
)
REVIEW_WARNINGS_RECOMMENDATION = (
    "Review warning tests and address issues for optimal performance"
)
NO_TESTS_RECOMMENDATION = "No certification tests were run - check the run options"
READY_SCORE = 90


def compute_score(passed_tests: int, total_tests: int) -> int:
    """Return the percentage of passed tests, rounded half up."""
    if total_tests == 0:
        return 0
    return int(passed_tests * 100 / total_tests + 0.5)


def overall_status(failed_tests: int, warning_tests: int) -> TestStatus:
    """Return the aggregate status; failures take precedence over warnings."""
    if failed_tests > 0:
        return TestStatus.FAILED
    if warning_tests > 0:
        return TestStatus.WARNING
    return TestStatus.PASSED


def build_recommendations(
    test_results: Sequence[TestResult], score: int
) -> list[str]:
    """Derive advisory follow-up actions from the results."""
    recommendations = [
        f"{result.name}: {result.message}"
        for result in test_results
        if result.status == TestStatus.WARNING
    ]

    statuses = {result.status for result in test_results}
    if TestStatus.FAILED in statuses:
        recommendations.append(FIX_FAILURES_RECOMMENDATION)
    if TestStatus.WARNING in statuses:
        recommendations.append(REVIEW_WARNINGS_RECOMMENDATION)
    if test_results and score >= READY_SCORE:
        recommendations.append(READY_RECOMMENDATION)

    if not recommendations:
        recommendations.append(NO_TESTS_RECOMMENDATION)

    return recommendations


def build_results(
    test_results: Sequence[TestResult],
    start_time: datetime,
    end_time: datetime,
    duration: float,
) -> CertificationResults:
    """Aggregate test results into a CertificationResults record.

    Args:
        test_results: Results in the order the checks produced them
        start_time: When the run started
        end_time: When the run finished
        duration: Run duration in seconds

    Returns:
        Scored certification verdict

    """
    counts = Counter(result.status for result in test_results)
    total_tests = len(test_results)
    passed_tests = counts[TestStatus.PASSED]
    failed_tests = counts[TestStatus.FAILED]
    warning_tests = counts[TestStatus.WARNING]
    skipped_tests = counts[TestStatus.SKIPPED]

    score = compute_score(passed_tests, total_tests)

    return CertificationResults(
        overall_status=overall_status(failed_tests, warning_tests),
        score=score,
        total_tests=total_tests,
        passed_tests=passed_tests,
        failed_tests=failed_tests,
        warning_tests=warning_tests,
        skipped_tests=skipped_tests,
        test_results=list(test_results),
        recommendations=build_recommendations(test_results, score),
        errors=[r.message for r in test_results if r.status == TestStatus.FAILED],
        start_time=start_time,
        end_time=end_time,
        duration=max(duration, 0.0),
    )


def format_summary(results: CertificationResults) -> str:
    """Render a plain-text summary of a certification run."""
    lines = [
        "Certification Test Summary",
        "==========================",
        f"Overall Status: {results.overall_status.value.upper()}",
        f"Score: {results.score}/100",
        "",
        "Test Results:",
        f"- Total Tests: {results.total_tests}",
        f"- Passed: {results.passed_tests}",
        f"- Failed: {results.failed_tests}",
        f"- Warnings: {results.warning_tests}",
        f"- Skipped: {results.skipped_tests}",
        "",
        f"Duration: {results.duration:.2f}s",
    ]

    if results.failed_tests > 0:
        lines.extend(["", "Errors:"])
        lines.extend(f"- {error}" for error in results.errors)

    lines.extend(["", "Recommendations:"])
    lines.extend(f"- {rec}" for rec in results.recommendations)

    return "\n".join(lines)
