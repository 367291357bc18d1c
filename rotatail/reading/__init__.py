"""
Reading subsystem for rotatail.

Replays rotated log files as a single finite line stream.
"""

from .history import HistoricalLineReader
from .lines import decode_line, split_complete_lines, split_content

__all__ = ["HistoricalLineReader", "decode_line", "split_complete_lines", "split_content"]
