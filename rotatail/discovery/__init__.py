"""
Discovery subsystem for rotatail.

Finds the rotated and active files of one log stream.
"""

from .file_set import FileSetDiscoverer
from .namer import FileNamer

__all__ = ["FileNamer", "FileSetDiscoverer"]
