"""
Unit tests for findings and the run summary.
"""

import pytest
from pydantic import ValidationError

from flowguard.validators.models import Category, Finding, RunSummary, Severity


def finding(category, severity, message):
    return Finding(category=category, severity=severity, message=message, source_validator="Test")


class TestFinding:
    """Tests for Finding."""

    def test_frozen(self):
        """Test findings are immutable."""
        f = finding(Category.SECURITY, Severity.ERROR, "x")
        with pytest.raises(ValidationError):
            f.message = "y"


class TestRunSummary:
    """Tests for RunSummary.build()."""

    def test_sorts_by_category_then_severity_then_index(self):
        """Test the deterministic ordering of findings."""
        summary = RunSummary.build([
            finding(Category.SECURITY, Severity.PASS, "s-pass"),
            finding(Category.STRUCTURE, Severity.WARNING, "t-warn-1"),
            finding(Category.SECURITY, Severity.ERROR, "s-err"),
            finding(Category.STRUCTURE, Severity.WARNING, "t-warn-2"),
            finding(Category.STRUCTURE, Severity.ERROR, "t-err"),
        ])
        assert [f.message for f in summary.findings] == ["t-err", "t-warn-1", "t-warn-2", "s-err", "s-pass"]

    def test_counts(self):
        """Test counts by severity and the success flag."""
        summary = RunSummary.build([
            finding(Category.STRUCTURE, Severity.PASS, "a"),
            finding(Category.STRUCTURE, Severity.PASS, "b"),
            finding(Category.TESTS, Severity.WARNING, "c"),
            finding(Category.TESTS, Severity.INFO, "d"),
        ])
        assert summary.counts == {"error": 0, "warning": 1, "info": 1, "pass": 2}
        assert summary.passed == 2
        assert summary.success

    def test_fatal(self):
        """Test a fatal summary is aborted and unsuccessful."""
        summary = RunSummary.fatal(finding(Category.STRUCTURE, Severity.ERROR, "broken"), total_ms=1.0)
        assert summary.aborted
        assert not summary.success
        assert summary.errors == 1

    def test_empty(self):
        """Test an empty summary succeeds."""
        summary = RunSummary.build([])
        assert summary.success
        assert summary.findings == ()

    def test_by_category(self):
        """Test grouping preserves the sorted order."""
        summary = RunSummary.build([
            finding(Category.DOCUMENTATION, Severity.WARNING, "d"),
            finding(Category.STRUCTURE, Severity.PASS, "s"),
        ])
        assert list(summary.by_category()) == [Category.STRUCTURE, Category.DOCUMENTATION]
