"""
Live Tailer - Follows the active log file across rotation and truncation.

Each call to LiveTailer.tail() returns an independent TailSubscription
with its own state, wake source and reader position.

Design principles:
- File handles live for one read only, never across a wait
- A line is emitted only once its terminator has been written
- Rotation and truncation both restart at offset zero; bytes still unread
  in the replaced file at that moment are lost, and that is reported
- Cancellation is immediate: nothing is emitted after cancel() returns
"""

import logging
import os
import threading

from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from ..errors import ReadError, WatchError
from ..reading.lines import decode_line, split_complete_lines
from ..types import (
    FileIdentity,
    FileSnapshot,
    LineConsumer,
    RotationEvent,
    TailerConfig,
    TailPhase,
    Transition,
)
from .rotation import RotationDetector
from .watcher import ChangeWatcher

logger = logging.getLogger(__name__)

# Most recent RotationEvents kept on a subscription; on_rotation sees them all
MAX_RECENT_ROTATIONS = 100


@dataclass
class _TailState:
    """Reader position of one subscription. Never shared."""

    active_file_path: str
    file_identity: FileIdentity | None = None
    read_offset: int = 0
    pending_partial_line: bytes = b""

    def reset(self, identity: FileIdentity) -> None:
        self.file_identity = identity
        self.read_offset = 0
        self.pending_partial_line = b""


class TailSubscription:
    """
    Infinite, cancellable stream of lines appended to the active file.

    Iterate it to receive lines; iteration blocks between changes and
    ends only after cancel().

    Usage:
        with LiveTailer("/var/log/app.log").tail(last_lines=20) as lines:
            for line in lines:
                print(line)
    """

    def __init__(
        self,
        path: str,
        config: TailerConfig,
        last_lines: int | None,
        detector: RotationDetector | None = None,
        on_rotation: Callable[[RotationEvent], None] | None = None,
        on_watch_error: Callable[[WatchError], None] | None = None,
    ):
        self.config = config
        self.last_lines = last_lines
        self.on_rotation = on_rotation
        self.on_watch_error = on_watch_error
        self.rotations: deque[RotationEvent] = deque(maxlen=MAX_RECENT_ROTATIONS)

        self._detector = detector or RotationDetector()
        self._state = _TailState(active_file_path=os.path.abspath(path))
        self._phase = TailPhase.SEEDING
        self._ready: deque[str] = deque()
        self._lock = threading.RLock()
        self._watcher = ChangeWatcher(
            self._state.active_file_path,
            poll_interval=config.poll_interval_seconds,
            use_native=config.use_native_watch,
            on_error=self._handle_watch_error,
        )

    @property
    def path(self) -> str:
        return self._state.active_file_path

    @property
    def phase(self) -> TailPhase:
        return self._phase

    @property
    def is_cancelled(self) -> bool:
        return self._phase is TailPhase.CANCELLED

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        while True:
            with self._lock:
                if self._phase is TailPhase.CANCELLED:
                    raise StopIteration
                if self._ready:
                    return self._ready.popleft()
                seeding = self._phase is TailPhase.SEEDING

            if seeding:
                self._seed()
            else:
                self._watcher.wait()
                self._on_wake()

    def cancel(self) -> None:
        """
        Stop tailing.

        Waits for an in-progress read to close its handle, deregisters the
        watch and drops queued lines. Safe to call more than once and from
        any thread.
        """
        with self._lock:
            if self._phase is TailPhase.CANCELLED:
                return
            self._phase = TailPhase.CANCELLED
            self._ready.clear()
            self._state.pending_partial_line = b""

        self._watcher.close()
        logger.debug(f"Tail of {self.path} cancelled")

    close = cancel

    def __enter__(self) -> "TailSubscription":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.cancel()

    def drain_to(self, consumer: LineConsumer) -> int:
        """
        Hand every line to `consumer` until cancelled.

        Returns:
            Number of lines delivered
        """
        delivered = 0
        for line in self:
            consumer(line)
            delivered += 1
        return delivered

    def _seed(self) -> None:
        """Queue the last lines already present, then start watching."""
        with self._lock:
            if self._phase is not TailPhase.SEEDING:
                return

            lines = self._read_new(seeding=True)
            if self.last_lines is not None:
                lines = lines[-self.last_lines:] if self.last_lines > 0 else []
            self._ready.extend(lines)
            # Started under the lock; cancel() closes whatever was started
            self._watcher.start()
            self._phase = TailPhase.WATCHING

        logger.debug(f"Seeded {len(lines)} line(s) from {self.path}")

    def _on_wake(self) -> None:
        with self._lock:
            if self._phase is TailPhase.CANCELLED:
                return
            self._ready.extend(self._read_new(seeding=False))

    def _read_new(self, seeding: bool) -> list[str]:
        """
        One read cycle: open, classify, read the new byte range, close.

        Must hold the lock.
        """
        state = self._state
        try:
            with open(state.active_file_path, "rb") as f:
                current = FileSnapshot.from_stat(os.fstat(f.fileno()))

                if seeding:
                    state.reset(current.identity)
                    transition = Transition.APPENDED
                else:
                    transition = self._detector.classify(
                        state.file_identity, state.read_offset, current
                    )

                if transition.requires_reopen:
                    self._reopen(current, transition)
                elif transition is Transition.NO_CHANGE:
                    return []

                f.seek(state.read_offset)
                data = f.read(current.size - state.read_offset)
        except FileNotFoundError:
            # Between rotation and recreation; keep the old identity
            return []
        except OSError as e:
            self.cancel()
            raise ReadError(
                f"Cannot read {state.active_file_path}: {e}",
                path=state.active_file_path,
                cause=e,
            ) from e

        state.read_offset += len(data)
        raw_lines, state.pending_partial_line = split_complete_lines(
            state.pending_partial_line, data
        )

        try:
            return [
                decode_line(raw, self.config.encoding, self.config.decode_errors)
                for raw in raw_lines
            ]
        except UnicodeDecodeError as e:
            self.cancel()
            raise ReadError(
                f"Cannot decode {state.active_file_path}: {e}",
                path=state.active_file_path,
                cause=e,
            ) from e

    def _reopen(self, current: FileSnapshot, transition: Transition) -> None:
        """Restart at offset zero under the new identity."""
        self._phase = TailPhase.REOPENING
        event = self._detector.rotation_event(
            self._state.file_identity, self._state.active_file_path, transition
        )

        if self._state.pending_partial_line:
            logger.warning(
                f"Discarding {len(self._state.pending_partial_line)} unterminated byte(s) "
                f"of {self.path} on {transition}"
            )
        self._state.reset(current.identity)
        self.rotations.append(event)
        logger.info(f"Log file {transition}: {self.path} (previous {event.previous_identity})")

        if self.on_rotation is not None:
            self.on_rotation(event)
        if self._phase is TailPhase.REOPENING:
            self._phase = TailPhase.WATCHING

    def _handle_watch_error(self, error: WatchError) -> None:
        if self.on_watch_error is not None:
            self.on_watch_error(error)


class LiveTailer:
    """
    Starts tail subscriptions on one active log file.

    Usage:
        tailer = LiveTailer("/var/log/app.log")
        subscription = tailer.tail(last_lines=10)
        for line in subscription:
            ...
        subscription.cancel()  # from any thread
    """

    def __init__(self, base_file_path: str, config: TailerConfig | None = None):
        """
        Initialize the tailer.

        Args:
            base_file_path: Path of the active log file (may not exist yet)
            config: Polling and decoding settings (defaults if not provided)
        """
        self.base_file_path = os.path.abspath(base_file_path)
        self.config = config or TailerConfig()

    def tail(
        self,
        last_lines: int | None = None,
        on_rotation: Callable[[RotationEvent], None] | None = None,
        on_watch_error: Callable[[WatchError], None] | None = None,
    ) -> TailSubscription:
        """
        Follow the active file.

        Nothing is read until the subscription is first iterated.

        Args:
            last_lines: Lines already in the file to emit first; None for
                all of them, 0 to start at the end
            on_rotation: Called with each RotationEvent
            on_watch_error: Called when notifications fail and polling takes over

        Returns:
            A new, independent TailSubscription
        """
        if last_lines is not None and last_lines < 0:
            raise ValueError(f"last_lines must be non-negative, got {last_lines}")

        return TailSubscription(
            self.base_file_path,
            self.config,
            last_lines=last_lines,
            on_rotation=on_rotation,
            on_watch_error=on_watch_error,
        )
