#!/usr/bin/env python3
"""
flowguard CLI
Validates an automation workflow file and its companion project files.
"""

import sys
from typing import Optional

import click
from rich.console import Console

from flowguard import __version__
from flowguard.config import get_settings
from flowguard.logging_config import configure_logging
from flowguard.reporting import exit_code, render_report
from flowguard.validators.engine import ValidationEngine
from flowguard.validators.models import ValidatorKind

ONLY_OPTIONS = {
    "structure_only": ValidatorKind.STRUCTURE,
    "security_only": ValidatorKind.SECURITY,
    "performance_only": ValidatorKind.PERFORMANCE,
    "docs_only": ValidatorKind.DOCUMENTATION,
    "tests_only": ValidatorKind.COMPANION_SCRIPTS,
}


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="flowguard")
@click.option("--structure-only", is_flag=True, help="Run only the structure checks")
@click.option("--security-only", is_flag=True, help="Run only the security checks")
@click.option("--performance-only", is_flag=True, help="Run only the performance checks")
@click.option("--docs-only", is_flag=True, help="Run only the documentation checks")
@click.option("--tests-only", is_flag=True, help="Run only the companion script checks")
@click.option(
    "--file",
    "file_path",
    default="workflow.json",
    show_default=True,
    help="Workflow file to validate",
)
@click.option("--timing", is_flag=True, help="Show per-validator timing")
@click.option("--verbose", "-v", is_flag=True, help="Show finding details and info logs")
@click.option("--no-parallel", is_flag=True, help="Run validators sequentially")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Abort the run after this many seconds",
)
@click.pass_context
def cli(ctx, file_path, timing, verbose, no_parallel, timeout, **only_flags):
    """Validate an automation workflow for structure, security, performance and documentation."""
    selected = [ONLY_OPTIONS[name] for name, enabled in only_flags.items() if enabled]
    if len(selected) > 1:
        raise click.UsageError(
            "--structure-only, --security-only, --performance-only, --docs-only and "
            "--tests-only are mutually exclusive",
            ctx=ctx,
        )

    settings = get_settings()
    configure_logging("info" if verbose else settings.LOG_LEVEL, debug=settings.DEBUG)

    console = Console(highlight=False)
    engine = ValidationEngine(settings=settings, verbose=verbose)
    summary = engine.run(
        file_path,
        kinds=selected or None,
        parallel=not no_parallel,
        timeout=timeout,
    )

    render_report(summary, console, verbose=verbose, show_timing=timing)
    ctx.exit(exit_code(summary))


def main(argv: Optional[list[str]] = None) -> int:
    """Run the CLI and return its exit code. Usage errors exit with 1."""
    try:
        code = cli.main(args=argv, prog_name="flowguard", standalone_mode=False)
    except click.UsageError as e:
        e.show()
        return 1
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1
    return code or 0


def run():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
