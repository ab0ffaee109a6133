"""
Report service for the Flakebot reporter.

Resolves configuration, runs the report pipeline and maps its outcome to a
process exit code.
"""
import os
from typing import Mapping, Optional

from rich.console import Console

from flakebot_reporter.rich_utils.ui_helpers import get_console
from flakebot_reporter.core.config_manager import ConfigManager
from flakebot_reporter.upload.exceptions import MissingAPIKeyError, ReporterError
from flakebot_reporter.upload.report_orchestrator import ReportOrchestrator


class ReporterService:
    """Service for sending test reports to Flakebot."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None, console: Optional[Console] = None):
        self.environ = os.environ if environ is None else environ
        self.config_manager = ConfigManager(self.environ)
        self.console = console or get_console()

    def execute_report(
        self,
        path: str,
        api_url: Optional[str] = None,
        config_path: Optional[str] = None,
    ) -> int:
        """Execute report workflow and return exit code."""
        try:
            config = self.config_manager.build_reporter_config(
                api_url=api_url, config_path=config_path, require_key=False
            )

            orchestrator = ReportOrchestrator(config, environ=self.environ, console=self.console)
            result = orchestrator.execute(path)

        except MissingAPIKeyError as e:
            self.console.print(f"❌ {e.message}", style="bold red")
            self.console.print(f"   Set {e.variable} to your reporter key", style="dim")
            return 1
        except ReporterError as e:
            self.console.print(f"❌ {e.message}", style="bold red")
            return 1
        except OSError as e:
            self.console.print(f"❌ {e}", style="bold red")
            return 1
        except Exception as e:
            self.console.print(f"💥 Unexpected error: {str(e)}", style="bold red")
            return 1

        self.console.print(f"🔗 Archive key: {result.archive}", style="dim")
        return 0
