"""
Flakebot Report Upload Module

Sends local test reports to Flakebot through a two-phase upload followed by
a report submission.

Phase 1: Upload URL - Get a presigned storage POST for the archive
Phase 2: Upload - Post the zipped reports to storage
Phase 3: Report - Submit CI metadata correlated to the uploaded archive
"""

from .api_client import FlakebotAPIClient
from .archive_builder import ArchiveBuilder
from .path_validator import PathValidator
from .providers import PROVIDERS, ProviderDetector
from .report_orchestrator import ReportOrchestrator
from .exceptions import (
    ReporterError,
    PathValidationError,
    NotFoundError,
    EmptyDirectoryError,
    NoMatchingFilesError,
    UnsupportedFileTypeError,
    ConfigError,
    MissingAPIKeyError,
    TransportError,
    BadStatusError,
    DecodeError,
    UnsupportedProviderError,
)

__all__ = [
    'FlakebotAPIClient',
    'ArchiveBuilder',
    'PathValidator',
    'PROVIDERS',
    'ProviderDetector',
    'ReportOrchestrator',
    'ReporterError',
    'PathValidationError',
    'NotFoundError',
    'EmptyDirectoryError',
    'NoMatchingFilesError',
    'UnsupportedFileTypeError',
    'ConfigError',
    'MissingAPIKeyError',
    'TransportError',
    'BadStatusError',
    'DecodeError',
    'UnsupportedProviderError',
]
