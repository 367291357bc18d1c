"""
File Set Discoverer - Lists every file of one logical log stream.

The set is recomputed on every call so it always reflects the directory
as it is right now. Nothing is cached between calls.
"""

import logging
import os

from datetime import datetime

from ..errors import DiscoveryError
from ..types import LogFilePath, LogFileSet
from .namer import FileNamer

logger = logging.getLogger(__name__)


class FileSetDiscoverer:
    """
    Discovers rotated and active log files, ordered oldest -> newest.

    Usage:
        discoverer = FileSetDiscoverer("/var/log/app.log")
        for log_file in discoverer.list_files():
            print(log_file.path)
    """

    def __init__(self, base_file_path: str, include_compressed: bool = True):
        """
        Initialize the discoverer.

        Args:
            base_file_path: Path of the active log file (no rotation suffix)
            include_compressed: Include `.gz` rotated files in the set
        """
        self.base_file_path = os.path.abspath(base_file_path)
        self.directory = os.path.dirname(self.base_file_path)
        self.include_compressed = include_compressed
        self.namer = FileNamer(os.path.basename(self.base_file_path))

    def list_files(self, include_current: bool = True) -> LogFileSet:
        """
        List the files of this log stream.

        Args:
            include_current: Append the active file as the final entry

        Returns:
            Immutable ordered snapshot; the active file is always last

        Raises:
            DiscoveryError: If the directory cannot be read
        """
        rotated = sorted(self._scan_rotated(), key=LogFilePath.ordering)

        if include_current:
            rotated.append(self._active_entry())

        logger.debug(f"Discovered {len(rotated)} file(s) for {self.base_file_path}")
        return tuple(rotated)

    def list_paths(self, include_current: bool = True) -> list[str]:
        """Same as list_files(), as absolute path strings."""
        return [entry.path for entry in self.list_files(include_current=include_current)]

    def _scan_rotated(self) -> list[LogFilePath]:
        """Collect rotated siblings; order is whatever the filesystem returns."""
        try:
            with os.scandir(self.directory) as entries:
                candidates = [
                    entry
                    for entry in entries
                    if self.namer.is_candidate(entry.name) and entry.is_file()
                ]
        except OSError as e:
            raise DiscoveryError(
                f"Cannot read log directory {self.directory}: {e}",
                path=self.directory,
                cause=e,
            ) from e

        found = []
        for entry in candidates:
            compressed = self.namer.is_compressed(entry.name)
            if compressed and not self.include_compressed:
                continue

            parsed = self.namer.parse(entry.name)
            if parsed is not None:
                sort_key, counter = parsed
            else:
                try:
                    sort_key = datetime.fromtimestamp(entry.stat().st_mtime)
                except FileNotFoundError:
                    # Removed between listing and stat: no longer a member
                    continue
                except OSError as e:
                    raise DiscoveryError(
                        f"Cannot stat rotated file {entry.path}: {e}",
                        path=entry.path,
                        cause=e,
                    ) from e
                counter = 0
                logger.debug(f"Unparseable rotation timestamp, using mtime: {entry.name}")

            found.append(LogFilePath(
                path=os.path.join(self.directory, entry.name),
                sort_key=sort_key,
                counter=counter,
                is_compressed=compressed,
            ))

        return found

    def _active_entry(self) -> LogFilePath:
        """The active file, appended whether or not it exists yet."""
        try:
            modified = datetime.fromtimestamp(os.stat(self.base_file_path).st_mtime)
        except FileNotFoundError:
            modified = datetime.now()

        return LogFilePath(path=self.base_file_path, sort_key=modified, is_active=True)
