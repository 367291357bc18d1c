"""
Change Watcher - Wake source for a tail subscription.

A watchdog observer on the parent directory signals changes to the active
path. The wait is always bounded by the poll interval, so a missed or
failed notification only delays the next read.
"""

import logging
import os
import threading

from collections.abc import Callable

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from ..errors import WatchError

logger = logging.getLogger(__name__)

# Opened/closed-without-write events come from our own reads
_WAKE_EVENT_TYPES = frozenset({
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
})


class _ActivePathHandler(FileSystemEventHandler):
    """Forwards events touching one path to a callback."""

    def __init__(self, path: str, callback: Callable[[], None]):
        super().__init__()
        self._paths = {path, os.path.realpath(path)}
        self._callback = callback

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in _WAKE_EVENT_TYPES:
            return

        touched = (event.src_path, getattr(event, "dest_path", ""))
        if any(p and os.fsdecode(p) in self._paths for p in touched):
            self._callback()


class ChangeWatcher:
    """
    Blocks a tailer until the active file may have changed.

    Usage:
        watcher = ChangeWatcher("/var/log/app.log", poll_interval=1.0)
        watcher.start()
        while running:
            watcher.wait()
            ...read...
        watcher.close()
    """

    def __init__(
        self,
        path: str,
        poll_interval: float,
        use_native: bool = True,
        on_error: Callable[[WatchError], None] | None = None,
    ):
        """
        Initialize the watcher.

        Args:
            path: Active log file path
            poll_interval: Upper bound on how long wait() blocks
            use_native: Try filesystem notifications before plain polling
            on_error: Receives a WatchError when notifications fail
        """
        self.path = os.path.abspath(path)
        self.poll_interval = poll_interval
        self.use_native = use_native
        self.on_error = on_error

        self._wake = threading.Event()
        self._observer: Observer | None = None
        self._closed = False

    @property
    def is_native(self) -> bool:
        """True while filesystem notifications are in use."""
        return self._observer is not None

    def start(self) -> None:
        """Register the native watch, falling back to polling on failure."""
        if self._closed:
            return
        if not self.use_native:
            logger.debug(f"Polling {self.path} every {self.poll_interval}s")
            return

        try:
            self._observer = self._start_observer()
        except WatchError as e:
            self._fall_back(e)

    def wait(self) -> bool:
        """
        Block until a notification, a poll tick, or wake().

        Returns:
            True if woken by a notification or wake(), False on a poll tick
        """
        observer = self._observer
        if observer is not None and not observer.is_alive() and not self._closed:
            self._stop_observer()
            self._fall_back(WatchError(f"Watch on {self.path} stopped unexpectedly", path=self.path))

        woken = self._wake.wait(self.poll_interval)
        self._wake.clear()
        return woken

    def wake(self) -> None:
        """Release a pending wait() immediately."""
        self._wake.set()

    def close(self) -> None:
        """Deregister the watch. No callback reaches this watcher afterwards."""
        self._closed = True
        self._stop_observer()
        self._wake.set()

    def _start_observer(self) -> Observer:
        observer = Observer()
        handler = _ActivePathHandler(self.path, self._wake.set)
        directory = os.path.dirname(self.path)

        try:
            observer.schedule(handler, directory, recursive=False)
            observer.start()
        except (OSError, RuntimeError) as e:
            if observer.is_alive():
                observer.stop()
            raise WatchError(f"Cannot watch {directory}: {e}", path=directory, cause=e) from e

        logger.debug(f"Watching {directory} for changes to {self.path}")
        return observer

    def _stop_observer(self) -> None:
        observer, self._observer = self._observer, None
        if observer is None:
            return

        observer.unschedule_all()
        observer.stop()
        if observer is not threading.current_thread():
            observer.join()

    def _fall_back(self, error: WatchError) -> None:
        logger.warning(f"{error}; falling back to polling every {self.poll_interval}s")
        if self.on_error is not None:
            self.on_error(error)
