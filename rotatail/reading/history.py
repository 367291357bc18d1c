"""
Historical Line Reader - Replays a rotated log stream as one line sequence.

Supports:
- Full replay, oldest file first
- Last-N lines across file boundaries
- Modification-time filtering
- Gzip-compressed rotated files

Every call rediscovers the file set, so sequences are restartable.
"""

import gzip
import logging
import os

from collections.abc import Generator
from datetime import datetime

from ..discovery import FileSetDiscoverer
from ..errors import ReadError
from ..types import LogFilePath, TailerConfig
from .lines import split_content

logger = logging.getLogger(__name__)


class HistoricalLineReader:
    """
    Reads every line of a log stream, rotated files first, active file last.

    Usage:
        reader = HistoricalLineReader("/var/log/app.log")
        for line in reader.read_logs():
            print(line)
    """

    def __init__(
        self,
        base_file_path: str,
        config: TailerConfig | None = None,
        discoverer: FileSetDiscoverer | None = None,
    ):
        """
        Initialize the reader.

        Args:
            base_file_path: Path of the active log file
            config: Decoding and discovery settings (defaults if not provided)
            discoverer: Discoverer to use (built from the path if not provided)
        """
        self.config = config or TailerConfig()
        self.discoverer = discoverer or FileSetDiscoverer(
            base_file_path,
            include_compressed=self.config.include_compressed,
        )

    def read_logs(
        self,
        last_lines: int | None = None,
        since: datetime | None = None,
    ) -> Generator[str, None, None]:
        """
        Stream lines from all files of the log stream, oldest to newest.

        Nothing is read until the first line is requested.

        Args:
            last_lines: Only yield the last N lines across all files
            since: Only read files modified at or after this time

        Raises:
            DiscoveryError: If the log directory cannot be read
            ReadError: If any file in the set cannot be read or decoded
        """
        if last_lines is not None:
            return self._stream_last(last_lines, since)
        return self._stream_all(since)

    def read_lines(
        self,
        last_lines: int | None = None,
        since: datetime | None = None,
    ) -> list[str]:
        """Same as read_logs(), materialized."""
        return list(self.read_logs(last_lines=last_lines, since=since))

    def _stream_all(self, since: datetime | None) -> Generator[str, None, None]:
        for log_file in self._select_files(since):
            yield from self._read_file(log_file)

    def _stream_last(self, last_lines: int, since: datetime | None) -> Generator[str, None, None]:
        if last_lines <= 0:
            return

        remaining = last_lines
        chunks: list[list[str]] = []

        # Newest first, stop as soon as enough lines are collected
        for log_file in reversed(self._select_files(since)):
            if remaining <= 0:
                break

            lines = self._read_file(log_file)
            if len(lines) > remaining:
                lines = lines[len(lines) - remaining:]
            chunks.append(lines)
            remaining -= len(lines)

        for chunk in reversed(chunks):
            yield from chunk

    def _select_files(self, since: datetime | None) -> list[LogFilePath]:
        files = list(self.discoverer.list_files())
        if since is None:
            return files
        return [f for f in files if self._modified_since(f, since)]

    def _modified_since(self, log_file: LogFilePath, since: datetime) -> bool:
        try:
            modified = datetime.fromtimestamp(os.stat(log_file.path).st_mtime)
        except FileNotFoundError as e:
            if log_file.is_active:
                return False
            raise ReadError(f"Log file disappeared: {log_file.path}", path=log_file.path, cause=e) from e
        except OSError as e:
            raise ReadError(f"Cannot stat {log_file.path}: {e}", path=log_file.path, cause=e) from e
        return modified >= since

    def _read_file(self, log_file: LogFilePath) -> list[str]:
        """Read one file fully; the handle is closed before returning."""
        try:
            if log_file.is_compressed:
                with gzip.open(log_file.path, "rb") as f:
                    data = f.read()
            else:
                with open(log_file.path, "rb") as f:
                    data = f.read()
        except FileNotFoundError as e:
            if log_file.is_active:
                # Not created yet, or mid-rotation
                logger.debug(f"Active log file does not exist yet: {log_file.path}")
                return []
            raise ReadError(f"Log file disappeared: {log_file.path}", path=log_file.path, cause=e) from e
        except (OSError, EOFError) as e:
            raise ReadError(f"Cannot read {log_file.path}: {e}", path=log_file.path, cause=e) from e

        try:
            text = data.decode(self.config.encoding, self.config.decode_errors)
        except UnicodeDecodeError as e:
            raise ReadError(f"Cannot decode {log_file.path}: {e}", path=log_file.path, cause=e) from e

        lines = split_content(text)
        logger.debug(f"Read {len(lines)} line(s) from {log_file.path}")
        return lines
