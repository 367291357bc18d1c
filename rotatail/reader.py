"""
Rotating File Reader - Main entry point.

Binds discovery, historical reading and live tailing to one base path
and one configuration.
"""

from collections.abc import Callable, Generator
from datetime import datetime

from .config import load_config
from .discovery import FileSetDiscoverer
from .errors import WatchError
from .reading import HistoricalLineReader
from .tailing import LiveTailer, TailSubscription
from .types import LogFileSet, RotationEvent, TailerConfig


class RotatingFileReader:
    """
    Reads and tails the log files of one rotating log stream.

    Usage:
        reader = RotatingFileReader("/var/log/app.log")

        # Every rotated and active file, oldest first
        paths = reader.list_files()

        # Replay everything
        for line in reader.read():
            print(line)

        # Follow new lines
        with reader.tail(last_lines=20) as lines:
            for line in lines:
                print(line)
    """

    def __init__(self, base_file_path: str, config: TailerConfig | None = None):
        """
        Initialize the reader.

        Args:
            base_file_path: Path of the active log file, e.g. /var/log/app.log
            config: Configuration (loads from file if not provided)
        """
        self.config = config or load_config()

        self.discoverer = FileSetDiscoverer(
            base_file_path,
            include_compressed=self.config.include_compressed,
        )
        self.history = HistoricalLineReader(
            base_file_path,
            config=self.config,
            discoverer=self.discoverer,
        )
        self.tailer = LiveTailer(base_file_path, config=self.config)

    @property
    def base_file_path(self) -> str:
        return self.discoverer.base_file_path

    def list_files(self, include_current: bool = True) -> list[str]:
        """
        Absolute paths of the stream's files, sorted oldest -> newest.

        Args:
            include_current: Include the active file (always last)
        """
        return self.discoverer.list_paths(include_current=include_current)

    def list_entries(self, include_current: bool = True) -> LogFileSet:
        """Same as list_files(), with ordering keys."""
        return self.discoverer.list_files(include_current=include_current)

    def read(
        self,
        last_lines: int | None = None,
        since: datetime | None = None,
    ) -> Generator[str, None, None]:
        """
        Finite stream of every line, oldest file first.

        Args:
            last_lines: Only the last N lines across all files
            since: Only files modified at or after this time
        """
        return self.history.read_logs(last_lines=last_lines, since=since)

    def tail(
        self,
        last_lines: int | None = None,
        on_rotation: Callable[[RotationEvent], None] | None = None,
        on_watch_error: Callable[[WatchError], None] | None = None,
    ) -> TailSubscription:
        """
        Follow the active file.

        Args:
            last_lines: Lines already present to emit first (defaults to
                config.default_last_lines)
            on_rotation: Called when the active file is replaced or truncated
            on_watch_error: Called when notifications fail and polling takes over
        """
        if last_lines is None:
            last_lines = self.config.default_last_lines

        return self.tailer.tail(
            last_lines=last_lines,
            on_rotation=on_rotation,
            on_watch_error=on_watch_error,
        )


def list_log_files(
    base_file_path: str,
    include_current: bool = True,
    config: TailerConfig | None = None,
) -> list[str]:
    """List the files of the log stream at `base_file_path`, oldest first."""
    return RotatingFileReader(base_file_path, config or TailerConfig()).list_files(
        include_current=include_current
    )


def read_logs(
    base_file_path: str,
    last_lines: int | None = None,
    since: datetime | None = None,
    config: TailerConfig | None = None,
) -> Generator[str, None, None]:
    """Stream every line of the log stream at `base_file_path`."""
    return RotatingFileReader(base_file_path, config or TailerConfig()).read(
        last_lines=last_lines,
        since=since,
    )
