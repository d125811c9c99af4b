"""
Unit tests for the console reporter.
"""

from io import StringIO

from rich.console import Console

from flowguard.reporting import exit_code, render_report
from flowguard.validators.models import Category, Finding, RunSummary, Severity, ValidatorTiming


def finding(severity, message, category=Category.STRUCTURE, detail=None):
    return Finding(category=category, severity=severity, message=message, detail=detail, source_validator="Test")


def render(summary, **kwargs) -> str:
    buffer = StringIO()
    console = Console(file=buffer, width=120, force_terminal=False, color_system=None)
    render_report(summary, console, **kwargs)
    return buffer.getvalue()


class TestRenderReport:
    """Tests for render_report()."""

    def test_groups_by_category(self):
        """Test findings print under their category headers in category order."""
        summary = RunSummary.build([
            finding(Severity.WARNING, "docs thin", Category.DOCUMENTATION),
            finding(Severity.PASS, "name ok", Category.STRUCTURE),
        ])
        output = render(summary)
        assert output.index("Structure") < output.index("name ok") < output.index("Documentation")
        assert "docs thin" in output

    def test_summary_and_verdict(self):
        """Test counts and the failing verdict line."""
        summary = RunSummary.build([
            finding(Severity.ERROR, "bad"),
            finding(Severity.WARNING, "meh"),
            finding(Severity.PASS, "good"),
        ])
        output = render(summary)
        assert "Passed:   1" in output
        assert "Warnings: 1" in output
        assert "Errors:   1" in output
        assert "failed with 1 error(s)" in output

    def test_passing_verdicts(self):
        """Test the clean and warning-only verdicts."""
        assert "Workflow validation passed" in render(RunSummary.build([finding(Severity.PASS, "ok")]))
        assert "passed with 1 warning(s)" in render(RunSummary.build([finding(Severity.WARNING, "meh")]))

    def test_details_only_in_verbose(self):
        """Test finding details print only in verbose mode."""
        summary = RunSummary.build([finding(Severity.ERROR, "secret", detail="password = 'x' [password_literal]")])
        assert "password_literal" not in render(summary)
        assert "password_literal" in render(summary, verbose=True)

    def test_markup_is_escaped(self):
        """Test bracketed text in messages is printed literally."""
        output = render(RunSummary.build([finding(Severity.INFO, "value [red]x[/red]")]))
        assert "[red]x[/red]" in output

    def test_timing_table(self):
        """Test the timing table lists each step and a TOTAL row."""
        summary = RunSummary.build(
            [finding(Severity.PASS, "ok")],
            timings=[ValidatorTiming(name="StructureValidator", duration_ms=1.5)],
            total_ms=2.25,
        )
        output = render(summary, show_timing=True)
        assert "StructureValidator" in output
        assert "1.50" in output
        assert "TOTAL" in output
        assert "2.25" in output
        assert "TOTAL" not in render(summary)

    def test_aborted_banner(self):
        """Test aborted runs are labelled."""
        summary = RunSummary.fatal(finding(Severity.ERROR, "workflow.json has invalid JSON syntax"))
        output = render(summary)
        assert "Validation aborted" in output
        assert "invalid JSON" in output


class TestExitCode:
    """Tests for exit_code()."""

    def test_zero_without_errors(self):
        """Test warnings alone do not fail the run."""
        assert exit_code(RunSummary.build([finding(Severity.WARNING, "meh")])) == 0

    def test_one_with_errors(self):
        """Test any error fails the run."""
        assert exit_code(RunSummary.build([finding(Severity.ERROR, "bad")])) == 1
