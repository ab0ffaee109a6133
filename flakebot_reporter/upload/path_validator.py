"""
Path Validator for Report Archiving

Checks that the path handed to the reporter is something worth archiving:
an existing report file, or a directory with at least one report file in it.
Only existence and directory listings are inspected, never file contents.
"""

import logging
import os
import re

from .exceptions import (
    EmptyDirectoryError,
    NoMatchingFilesError,
    NotFoundError,
    UnsupportedFileTypeError,
)

logger = logging.getLogger(__name__)


class PathValidator:
    """Validates the input path before an archive is built"""

    DEFAULT_PATTERN = ".xml"

    def __init__(self, pattern: str = DEFAULT_PATTERN):
        # Unanchored search: ".xml" also accepts names like "result_xml.log"
        self.pattern = re.compile(pattern)

    def matches(self, name: str) -> bool:
        """Check a file name against the report pattern"""
        return bool(self.pattern.search(name))

    def validate(self, path: str) -> None:
        """Raise a PathValidationError subclass if the path is unusable"""
        if not os.path.exists(path):
            raise NotFoundError(path)

        if os.path.isdir(path):
            self._validate_directory(path)
        elif not self.matches(path):
            raise UnsupportedFileTypeError(path)

        logger.debug(f"Validated report path {path}")

    def _validate_directory(self, path: str) -> None:
        with os.scandir(path) as it:
            entries = list(it)

        if not entries:
            raise EmptyDirectoryError(path)

        for entry in entries:
            if not entry.is_dir() and self.matches(entry.name):
                return

        raise NoMatchingFilesError(path)
