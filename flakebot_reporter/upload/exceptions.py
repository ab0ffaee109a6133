"""
Exceptions for the report submission pipeline.

Every stage raises a subclass of ReporterError; the orchestrator lets them
propagate untouched so the CLI can print the message and exit non-zero.
"""

from typing import Optional


class ReporterError(Exception):
    """Base reporter error."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PathValidationError(ReporterError):
    """Input path is not acceptable for archiving."""
    pass


class NotFoundError(PathValidationError):
    """Input path does not exist."""

    def __init__(self, path: str):
        super().__init__("Provided path does not exist.")
        self.path = path


class EmptyDirectoryError(PathValidationError):
    """Input directory has no entries."""

    def __init__(self, path: str):
        super().__init__("Directory is empty.")
        self.path = path


class NoMatchingFilesError(PathValidationError):
    """Input directory holds no report files."""

    def __init__(self, path: str):
        super().__init__("No valid .xml files in directory.")
        self.path = path


class UnsupportedFileTypeError(PathValidationError):
    """Input file is not a report file."""

    def __init__(self, path: str):
        super().__init__("Path is not valid .xml file.")
        self.path = path


class ConfigError(ReporterError):
    """Configuration is missing or invalid."""
    pass


class MissingAPIKeyError(ConfigError):
    """Reporter key is not set in the environment."""

    def __init__(self, variable: str = "FLAKEBOT_REPORTER_KEY"):
        super().__init__(f"Could not find environment variable, {variable}")
        self.variable = variable


class TransportError(ReporterError):
    """Network-level failure talking to an endpoint."""

    def __init__(self, message: str, endpoint: Optional[str] = None,
                 original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.original_exception = original_exception


class BadStatusError(ReporterError):
    """Endpoint answered with an unexpected HTTP status."""

    def __init__(self, status_code: int, reason: Optional[str] = None,
                 endpoint: Optional[str] = None):
        status = f"{status_code} {reason}" if reason else str(status_code)
        super().__init__(f"Bad Status: {status}")
        self.status_code = status_code
        self.reason = reason
        self.endpoint = endpoint


class DecodeError(ReporterError):
    """Response body could not be decoded."""

    def __init__(self, message: str, endpoint: Optional[str] = None):
        super().__init__(message)
        self.endpoint = endpoint


class UnsupportedProviderError(ReporterError):
    """No supported CI provider was detected."""

    def __init__(self, supported: Optional[str] = None):
        supported = supported or "CircleCI, GitHub Actions"
        super().__init__(
            f"Environment does not appear to be a supported CI provider ({supported})"
        )
