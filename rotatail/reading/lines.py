"""
Line splitting shared by historical reads and live tailing.

Lines end at `\\n`; a `\\r` right before it is dropped too. Empty lines
inside content are kept.
"""

from ..types import LINE_TERMINATOR


def split_content(text: str) -> list[str]:
    """
    Split a whole file's decoded content into lines.

    One trailing empty line is dropped when the content ends with a
    terminator, so "a\\nb\\n" gives ["a", "b"] and "" gives [].
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [_strip_cr(line) for line in lines]


def split_complete_lines(pending: bytes, data: bytes) -> tuple[list[bytes], bytes]:
    """
    Split newly read bytes into complete lines.

    Args:
        pending: Unterminated bytes carried over from the previous read
        data: Bytes just read

    Returns:
        (complete lines without terminator, new unterminated remainder)
    """
    parts = (pending + data).split(LINE_TERMINATOR)
    remainder = parts.pop()
    return parts, remainder


def decode_line(raw: bytes, encoding: str = "utf-8", errors: str = "replace") -> str:
    """Decode one complete line. Raises UnicodeDecodeError only for errors='strict'."""
    return _strip_cr(raw.decode(encoding, errors))


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line
