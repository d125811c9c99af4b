"""Console report for a RunSummary."""

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from flowguard.validators.models import Category, RunSummary, Severity

SEVERITY_STYLE = {
    Severity.ERROR: ("❌", "red"),
    Severity.WARNING: ("⚠️ ", "yellow"),
    Severity.INFO: ("ℹ️ ", "blue"),
    Severity.PASS: ("✅", "green"),
}

CATEGORY_TITLE = {
    Category.STRUCTURE: "Structure",
    Category.SECURITY: "Security",
    Category.PERFORMANCE: "Performance",
    Category.DOCUMENTATION: "Documentation",
    Category.TESTS: "Companion Scripts",
}


def render_report(
    summary: RunSummary,
    console: Console,
    verbose: bool = False,
    show_timing: bool = False,
) -> None:
    """Print findings grouped by category, the totals, optional timings and the verdict."""
    if summary.aborted:
        console.print("[bold red]Validation aborted[/bold red]")

    for category, findings in summary.by_category().items():
        console.print(f"\n[bold]── {CATEGORY_TITLE[category]} ──[/bold]")
        for finding in findings:
            icon, color = SEVERITY_STYLE[finding.severity]
            console.print(f"{icon} [{color}]{escape(finding.message)}[/{color}]")
            if verbose and finding.detail:
                for line in finding.detail.splitlines():
                    console.print(f"    [dim]{escape(line)}[/dim]")

    counts = summary.counts
    console.print("\n[bold]Summary[/bold]")
    console.print(f"  [green]Passed:   {counts[Severity.PASS.value]}[/green]")
    console.print(f"  [yellow]Warnings: {counts[Severity.WARNING.value]}[/yellow]")
    console.print(f"  [red]Errors:   {counts[Severity.ERROR.value]}[/red]")
    console.print(f"  [blue]Info:     {counts[Severity.INFO.value]}[/blue]")

    if show_timing:
        console.print(build_timing_table(summary))

    if summary.success and summary.warnings == 0:
        console.print("\n[bold green]✅ Workflow validation passed[/bold green]")
    elif summary.success:
        console.print(
            f"\n[bold yellow]⚠️  Workflow validation passed with {summary.warnings} warning(s)[/bold yellow]"
        )
    else:
        console.print(
            f"\n[bold red]❌ Workflow validation failed with {summary.errors} error(s)[/bold red]"
        )


def build_timing_table(summary: RunSummary) -> Table:
    table = Table(title="Timing", box=box.ROUNDED)
    table.add_column("Step", style="cyan")
    table.add_column("Duration (ms)", justify="right")

    for timing in summary.timings:
        table.add_row(timing.name, f"{timing.duration_ms:.2f}")
    table.add_section()
    table.add_row("TOTAL", f"{summary.total_ms:.2f}", style="bold")
    return table


def exit_code(summary: RunSummary) -> int:
    """0 when the run produced no error findings, else 1."""
    return 0 if summary.success else 1
