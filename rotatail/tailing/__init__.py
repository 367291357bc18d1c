"""
Tailing subsystem for rotatail.

Follows the active log file and survives rotation and truncation.
"""

from .rotation import RotationDetector
from .tailer import LiveTailer, TailSubscription
from .watcher import ChangeWatcher

__all__ = ["ChangeWatcher", "LiveTailer", "RotationDetector", "TailSubscription"]
