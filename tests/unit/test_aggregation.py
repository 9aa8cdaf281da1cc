"""Tests for certification result aggregation."""

from datetime import datetime, timedelta, timezone

import pytest

from azmp.vm_certification.aggregation import (
    FIX_FAILURES_RECOMMENDATION,
    NO_TESTS_RECOMMENDATION,
    READY_RECOMMENDATION,
    REVIEW_WARNINGS_RECOMMENDATION,
    build_recommendations,
    build_results,
    compute_score,
    format_summary,
    overall_status,
)
from azmp.vm_certification.models.test_result import (
    TestCategory,
    TestResult,
    TestStatus,
)

START = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
END = START + timedelta(seconds=3)


def _result(status: TestStatus, message: str = "msg", name: str = "check") -> TestResult:
    return TestResult(
        name=name,
        category=TestCategory.CONFIGURATION,
        status=status,
        message=message,
    )


@pytest.mark.parametrize(
    ("passed", "total", "expected"),
    [
        (0, 0, 0),
        (0, 5, 0),
        (5, 5, 100),
        (2, 3, 67),
        (1, 3, 33),
        (5, 8, 63),
        (1, 8, 13),
    ],
)
def test_compute_score(passed: int, total: int, expected: int) -> None:
    """Score is the passed percentage rounded half up."""
    assert compute_score(passed, total) == expected


@pytest.mark.parametrize(
    ("failed", "warnings", "expected"),
    [
        (0, 0, TestStatus.PASSED),
        (0, 2, TestStatus.WARNING),
        (1, 0, TestStatus.FAILED),
        (1, 3, TestStatus.FAILED),
    ],
)
def test_overall_status_precedence(
    failed: int, warnings: int, expected: TestStatus
) -> None:
    """Failures win over warnings, which win over passes."""
    assert overall_status(failed, warnings) == expected


def test_build_results_counts_and_errors() -> None:
    """build_results tallies statuses and collects failed messages in order."""
    results = build_results(
        [
            _result(TestStatus.PASSED),
            _result(TestStatus.FAILED, "first failure"),
            _result(TestStatus.WARNING, "a warning"),
            _result(TestStatus.SKIPPED),
            _result(TestStatus.FAILED, "second failure"),
        ],
        START,
        END,
        3.0,
    )

    assert results.total_tests == 5
    assert results.passed_tests == 1
    assert results.failed_tests == 2
    assert results.warning_tests == 1
    assert results.skipped_tests == 1
    assert (
        results.passed_tests
        + results.failed_tests
        + results.warning_tests
        + results.skipped_tests
        == results.total_tests
    )
    assert results.score == 20
    assert results.overall_status == TestStatus.FAILED
    assert results.errors == ["first failure", "second failure"]
    assert results.start_time == START
    assert results.end_time == END
    assert results.duration == 3.0


def test_build_results_warning_only() -> None:
    """Warnings without failures produce a warning verdict."""
    results = build_results(
        [_result(TestStatus.PASSED), _result(TestStatus.WARNING)], START, END, 0.0
    )

    assert results.overall_status == TestStatus.WARNING
    assert results.errors == []


def test_build_results_all_passed_is_ready() -> None:
    """A clean run scores 100 and is ready for submission."""
    results = build_results([_result(TestStatus.PASSED)] * 6, START, END, 0.0)

    assert results.overall_status == TestStatus.PASSED
    assert results.score == 100
    assert results.recommendations == [READY_RECOMMENDATION]


def test_build_results_clamps_negative_duration() -> None:
    """Duration is never negative."""
    results = build_results([_result(TestStatus.PASSED)], START, START, -0.5)
    assert results.duration == 0.0


def test_recommendations_for_warnings_and_failures() -> None:
    """Warnings are itemised and general advice follows."""
    recommendations = build_recommendations(
        [
            _result(TestStatus.FAILED),
            _result(TestStatus.WARNING, "VHD size is very small", "VHD Format Check"),
        ],
        score=0,
    )

    assert recommendations == [
        "VHD Format Check: VHD size is very small",
        FIX_FAILURES_RECOMMENDATION,
        REVIEW_WARNINGS_RECOMMENDATION,
    ]


def test_recommendations_ready_with_high_score_and_warning() -> None:
    """A score of 90 or more includes the readiness entry even with warnings."""
    results = [_result(TestStatus.PASSED)] * 9 + [_result(TestStatus.WARNING)]
    recommendations = build_recommendations(results, compute_score(9, 10))

    assert READY_RECOMMENDATION in recommendations
    assert REVIEW_WARNINGS_RECOMMENDATION in recommendations


def test_recommendations_never_empty() -> None:
    """An empty run still yields a recommendation."""
    assert build_recommendations([], score=0) == [NO_TESTS_RECOMMENDATION]


def test_format_summary_sections_with_errors() -> None:
    """The summary lists errors when tests failed."""
    results = build_results(
        [_result(TestStatus.PASSED), _result(TestStatus.FAILED, "bad image")],
        START,
        END,
        1.5,
    )

    summary = format_summary(results)

    assert summary.startswith("Certification Test Summary")
    assert "Overall Status: FAILED" in summary
    assert "Score: 50/100" in summary
    assert "Test Results:" in summary
    assert "- Failed: 1" in summary
    assert "Duration: 1.50s" in summary
    assert "Errors:\n- bad image" in summary
    assert "Recommendations:" in summary


def test_format_summary_omits_errors_when_none_failed() -> None:
    """The Errors section only appears when a test failed."""
    results = build_results([_result(TestStatus.PASSED)], START, END, 0.0)

    summary = format_summary(results)

    assert "Errors:" not in summary
    assert "Recommendations:" in summary
    assert "Overall Status: PASSED" in summary
