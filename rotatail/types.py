"""
Core type definitions for rotatail.

This module defines the data structures shared by discovery, reading
and tailing.
Design principles:
- Immutable where possible (frozen dataclasses)
- Explicit validation at construction time
- Serialization/deserialization with explicit methods
- No magic strings - all states are enums
"""

from __future__ import annotations

import codecs
import logging
import os

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Final

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

ROTATED_TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d_%H-%M-%S"
COMPRESSED_SUFFIX: Final[str] = ".gz"
LINE_TERMINATOR: Final[bytes] = b"\n"
DEFAULT_POLL_INTERVAL_SECONDS: Final[float] = 1.0
DEFAULT_LAST_LINES: Final[int] = 10

LineConsumer = Callable[[str], None]
"""Downstream collaborator that accepts emitted lines one at a time."""


# =============================================================================
# ENUMS
# =============================================================================

class Transition(str, Enum):
    """
    State transition of the active file between two observations.

    ROTATED and TRUNCATED are handled the same way by the tailer: both
    reopen the file from offset zero. They cannot be told apart reliably
    from metadata alone on every platform.
    """

    NO_CHANGE = "no_change"
    """Same file, same size as the recorded offset."""

    APPENDED = "appended"
    """Same file, grown past the recorded offset."""

    ROTATED = "rotated"
    """A different file now lives at the path."""

    TRUNCATED = "truncated"
    """Same file, shrunk below the recorded offset."""

    def __str__(self) -> str:
        return self.value

    @property
    def requires_reopen(self) -> bool:
        """Returns True if the reader position must restart at zero."""
        return self in (Transition.ROTATED, Transition.TRUNCATED)


class TailPhase(str, Enum):
    """
    Lifecycle of a tail subscription.

    SEEDING -> WATCHING -> (rotation) REOPENING -> WATCHING -> ... -> CANCELLED
    CANCELLED is terminal and reachable from any phase.
    """

    SEEDING = "seeding"
    WATCHING = "watching"
    REOPENING = "reopening"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# FILE METADATA
# =============================================================================

@dataclass(frozen=True)
class FileIdentity:
    """
    Durable OS-level identity of a file (device + inode).

    Survives renames, so a path whose identity changes has been replaced.
    """

    device: int
    inode: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> FileIdentity:
        return cls(device=st.st_dev, inode=st.st_ino)

    def __str__(self) -> str:
        return f"{self.device}:{self.inode}"


@dataclass(frozen=True)
class FileSnapshot:
    """Identity and size of a file at one point in time."""

    identity: FileIdentity
    size: int
    modified: datetime

    @classmethod
    def from_stat(cls, st: os.stat_result) -> FileSnapshot:
        return cls(
            identity=FileIdentity.from_stat(st),
            size=st.st_size,
            modified=datetime.fromtimestamp(st.st_mtime),
        )


@dataclass(frozen=True)
class LogFilePath:
    """
    One member of a log file set.

    Attributes:
        path: Absolute path of the file.
        sort_key: Timestamp parsed from the filename, or the file's
            modification time when the name does not parse.
        counter: Same-second rotation counter from the filename.
        is_active: True for the base file that is still being written.
        is_compressed: True for gzip-compressed rotated files.
    """

    path: str
    sort_key: datetime
    counter: int = 0
    is_active: bool = False
    is_compressed: bool = False

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    def ordering(self) -> tuple[int, datetime, int, str]:
        """Sort tuple; the active file always sorts last."""
        return (1 if self.is_active else 0, self.sort_key, self.counter, self.name)

    def __str__(self) -> str:
        return self.path


LogFileSet = tuple[LogFilePath, ...]
"""Ordered oldest -> newest snapshot of a log stream's files."""


@dataclass(frozen=True)
class RotationEvent:
    """
    Record of a reopen-from-zero observed by a tail subscription.

    Bytes that were still unread in the previous file when this happened
    are not recovered.
    """

    previous_identity: FileIdentity | None
    new_path: str
    transition: Transition = Transition.ROTATED
    detected_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for logging."""
        return {
            "previous_identity": str(self.previous_identity) if self.previous_identity else None,
            "new_path": self.new_path,
            "transition": self.transition.value,
            "detected_at": self.detected_at.isoformat(),
        }


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class TailerConfig:
    """
    Configuration for discovery, reading and tailing.

    All fields have defaults suitable for local log files.
    """

    MIN_POLL_INTERVAL: ClassVar[float] = 0.01
    MAX_POLL_INTERVAL: ClassVar[float] = 60.0
    DECODE_ERROR_MODES: ClassVar[tuple[str, ...]] = (
        "strict",
        "replace",
        "ignore",
        "backslashreplace",
    )

    # Tailing
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    use_native_watch: bool = True
    default_last_lines: int = DEFAULT_LAST_LINES

    # Decoding
    encoding: str = "utf-8"
    decode_errors: str = "replace"

    # Discovery
    include_compressed: bool = True

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not (self.MIN_POLL_INTERVAL <= self.poll_interval_seconds <= self.MAX_POLL_INTERVAL):
            raise ValueError(
                f"poll_interval_seconds must be between {self.MIN_POLL_INTERVAL} and "
                f"{self.MAX_POLL_INTERVAL}, got {self.poll_interval_seconds}"
            )

        if self.default_last_lines < 0:
            raise ValueError(
                f"default_last_lines must be non-negative, got {self.default_last_lines}"
            )

        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ValueError(f"Unknown encoding: {self.encoding!r}") from None

        # Lines are split on raw bytes before decoding
        if "\n".encode(self.encoding) != LINE_TERMINATOR:
            raise ValueError(
                f"encoding must encode newline as a single byte, got {self.encoding!r}"
            )

        if self.decode_errors not in self.DECODE_ERROR_MODES:
            raise ValueError(
                f"decode_errors must be one of {', '.join(self.DECODE_ERROR_MODES)}, "
                f"got {self.decode_errors!r}"
            )

        if self.decode_errors == "strict":
            logger.debug("Strict decoding enabled: undecodable bytes raise ReadError")

    def to_dict(self) -> dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "poll_interval_seconds": self.poll_interval_seconds,
            "use_native_watch": self.use_native_watch,
            "default_last_lines": self.default_last_lines,
            "encoding": self.encoding,
            "decode_errors": self.decode_errors,
            "include_compressed": self.include_compressed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TailerConfig:
        """
        Create configuration from dictionary.

        Unknown keys are rejected so typos do not pass silently.
        """
        known = set(cls().to_dict())
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)
