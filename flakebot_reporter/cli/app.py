"""
Main CLI application for the Flakebot reporter.

Defines the Typer application and registers its single command.
"""
import typer

from flakebot_reporter.cli.commands.report import report_command


# Initialize Typer app
app = typer.Typer(help="Reporting tool for Flakebot", add_completion=False)

# A lone command runs without a subcommand name: `flakebot-reporter PATH`
app.command(help="Send your test reports to Flakebot for processing and analysis.")(report_command)
