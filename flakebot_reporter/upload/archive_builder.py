"""
Archive Builder for Report Uploads

Packages a validated report path into a single zip archive in the working
directory. Directory inputs keep their traversal paths as entry names,
single files are stored by base name only.
"""

import logging
import os
import zipfile
from typing import Iterator, Optional, Tuple

logger = logging.getLogger(__name__)


def _raise(error: OSError):
    raise error


class ArchiveBuilder:
    """Builds the report archive uploaded to storage"""

    DEFAULT_ARCHIVE_NAME = "report.zip"

    def __init__(self, archive_name: str = DEFAULT_ARCHIVE_NAME, working_dir: Optional[str] = None):
        self.archive_name = archive_name
        self.working_dir = working_dir

    @property
    def archive_path(self) -> str:
        if self.working_dir:
            return os.path.join(self.working_dir, self.archive_name)
        return self.archive_name

    def build(self, path: str) -> str:
        """Write the archive for ``path`` and return the archive path.

        The archive name is fixed, so two runs sharing a working directory
        overwrite each other. A failure part-way through leaves the partial
        archive on disk.
        """
        archive_path = self.archive_path

        # Pre-1980 mtimes (reproducible builds) are clamped instead of rejected
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED,
                             strict_timestamps=False) as zf:
            count = 0
            for file_path, arcname in self._iter_entries(path):
                zf.write(file_path, arcname=arcname)
                logger.debug(f"Added {file_path} as {arcname}")
                count += 1

        logger.info(f"Built archive {archive_path} with {count} entries")
        return archive_path

    def _iter_entries(self, path: str) -> Iterator[Tuple[str, str]]:
        if not os.path.isdir(path):
            yield path, os.path.basename(path)
            return

        own_archive = os.path.abspath(self.archive_path)
        for root, dirs, files in os.walk(path, onerror=_raise):
            dirs.sort()
            for name in sorted(files):
                file_path = os.path.join(root, name)
                if os.path.abspath(file_path) == own_archive:
                    continue
                yield file_path, self._entry_name(file_path)

    @staticmethod
    def _entry_name(file_path: str) -> str:
        # zip entries always use forward slashes
        return os.path.normpath(file_path).replace(os.sep, "/")
