"""
Report Orchestrator

Runs the report submission pipeline end to end: validate the path, obtain a
presigned upload, build and upload the archive, detect the CI provider and
submit the correlated report. The first failing stage stops the run and its
error is re-raised as is; nothing already written is rolled back.
"""

import logging
import os
import time
from contextlib import nullcontext
from typing import Mapping, Optional

from rich.console import Console

from .api_client import FlakebotAPIClient
from .archive_builder import ArchiveBuilder
from .exceptions import MissingAPIKeyError
from .models import Report, ReporterConfig, ReportResult
from .path_validator import PathValidator
from .providers import ProviderDetector

logger = logging.getLogger(__name__)


class ReportOrchestrator:
    """Coordinates the report submission workflow"""

    def __init__(
        self,
        config: ReporterConfig,
        environ: Optional[Mapping[str, str]] = None,
        console: Optional[Console] = None,
        client: Optional[FlakebotAPIClient] = None,
        working_dir: Optional[str] = None,
    ):
        self.config = config
        self.environ = os.environ if environ is None else environ
        self.console = console or Console()
        self.client = client
        self.validator = PathValidator(config.report_pattern)
        self.builder = ArchiveBuilder(config.archive_name, working_dir=working_dir)
        self.detector = ProviderDetector()

    def execute(self, path: str) -> ReportResult:
        """Execute the full pipeline for ``path``"""
        start_time = time.time()

        self.validator.validate(path)

        if not self.config.api_key:
            raise MissingAPIKeyError()
        logger.info(f"Reporting {path} to {self.config.api_url} (key {self.config.masked_key()})")

        with self._client() as client:
            self.console.print("📡 Requesting upload URL...", style="cyan")
            presigned = client.request_presigned_upload()

            archive_path = self.builder.build(path)
            self.console.print(f"📦 Built archive {archive_path}", style="cyan")

            client.upload_archive(archive_path, presigned)
            self.console.print("📤 Archive uploaded", style="green")

            provider = self.detector.detect(self.environ)
            report = Report(
                archive=presigned.fields.key,
                provider=provider.name,
                metadata=provider.collect(self.environ),
            )

            client.submit_report(report)

        total_time = time.time() - start_time
        self.console.print(f"✅ Report submitted ({provider.label})", style="green")

        return ReportResult(
            archive=report.archive,
            provider=report.provider,
            archive_path=archive_path,
            total_time_seconds=total_time,
        )

    def _client(self):
        # An injected client belongs to the caller, only close our own
        if self.client is not None:
            return nullcontext(self.client)
        return FlakebotAPIClient(self.config)
