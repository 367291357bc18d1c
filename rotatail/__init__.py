"""
rotatail - Read and follow rotating log files.

Replays a log stream split across timestamp-rotated files, then follows
the active file without losing or repeating lines when it is rotated.

Quick Start:
    >>> from rotatail import RotatingFileReader
    >>> reader = RotatingFileReader("/var/log/app.log")
    >>> reader.list_files()
    >>> lines = list(reader.read(last_lines=100))

Following:
    >>> with reader.tail(last_lines=10) as subscription:
    ...     for line in subscription:
    ...         print(line)

Key Components:
    - RotatingFileReader: Main entry point (list, read, tail)
    - FileSetDiscoverer: Rotated + active files, oldest first
    - HistoricalLineReader: Finite replay of the whole stream
    - LiveTailer / TailSubscription: Cancellable follow across rotation
    - RotationDetector: Classifies changes of the active file

Rotated file naming:
    app.log -> app.2024-01-15_10-30-45.log[.gz]

License: MIT
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Configuration
from rotatail.config import load_config, save_config

# Components
from rotatail.discovery import FileNamer, FileSetDiscoverer
from rotatail.errors import DiscoveryError, ReadError, RotatailError, WatchError
from rotatail.reader import RotatingFileReader, list_log_files, read_logs
from rotatail.reading import HistoricalLineReader
from rotatail.tailing import LiveTailer, RotationDetector, TailSubscription
from rotatail.types import (
    FileIdentity,
    FileSnapshot,
    LogFilePath,
    RotationEvent,
    TailerConfig,
    TailPhase,
    Transition,
)

__all__ = [
    # Errors
    "DiscoveryError",
    # Types
    "FileIdentity",
    # Components
    "FileNamer",
    "FileSetDiscoverer",
    "FileSnapshot",
    "HistoricalLineReader",
    "LiveTailer",
    "LogFilePath",
    "ReadError",
    "RotatailError",
    "RotatingFileReader",
    "RotationDetector",
    "RotationEvent",
    "TailPhase",
    "TailSubscription",
    # Configuration
    "TailerConfig",
    "Transition",
    "WatchError",
    "__license__",
    # Version info
    "__version__",
    "list_log_files",
    "load_config",
    "read_logs",
    "save_config",
]
