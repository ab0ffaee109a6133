"""
Report command implementation.

Thin wrapper around ReporterService that handles CLI argument parsing
and delegates business logic to the service layer.
"""
import sys
from typing import Optional

import typer

from flakebot_reporter.core.reporter import ReporterService
from flakebot_reporter.rich_utils.ui_helpers import configure_logging


def report_command(
    path: str = typer.Argument(..., help="Report file or directory of .xml reports"),
    api_url: Optional[str] = typer.Option(None, "-a", "--api", help="Override the Flakebot API Url"),
    config_path: Optional[str] = typer.Option(None, "-c", "--config", help="Path to config YAML"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
):
    """Send your test reports to Flakebot for processing and analysis."""

    # Delegate to service layer
    report_service = ReporterService()
    configure_logging(verbose, console=report_service.console)

    exit_code = report_service.execute_report(
        path=path,
        api_url=api_url,
        config_path=config_path
    )

    # Exit with appropriate code
    if exit_code != 0:
        sys.exit(exit_code)
