import logging
import os
import sys

from rich.console import Console
from rich.logging import RichHandler

def is_ci_environment():
    return (
        os.getenv('CI') is not None or
        os.getenv('CIRCLECI') is not None or
        os.getenv('GITHUB_ACTIONS') is not None or
        not sys.stdout.isatty()
    )

def get_console() -> Console:
    """Detect environment and create console."""
    if is_ci_environment():
        # CI/automated environment - no colors, no interactive elements
        return Console(force_terminal=False, no_color=True)
    return Console()

def configure_logging(verbose: bool = False, console: Console = None) -> None:
    """Route log records through rich; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # urllib3 is chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO if verbose else logging.WARNING)
