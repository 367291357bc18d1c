"""
File Namer - Rotated log file naming convention.

Rotated siblings of `app.log` are named:

    app.2024-01-15_10-30-45.log        rotated at that second
    app.2024-01-15_10-30-45_1.log      second rotation within the same second
    app.2024-01-15_10-30-45.log.gz     compressed after rotation
"""

import re

from datetime import datetime

from ..types import COMPRESSED_SUFFIX, ROTATED_TIMESTAMP_FORMAT

_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


class FileNamer:
    """
    Recognizes rotated siblings of one base file and extracts their ordering key.

    Usage:
        namer = FileNamer("app.log")
        namer.parse("app.2024-01-15_10-30-45.log")  # (datetime(...), 0)
    """

    def __init__(self, base_name: str):
        """
        Initialize the namer.

        Args:
            base_name: File name (not path) of the active log file
        """
        self.base_name = base_name
        self.stem, self.extension = split_base_name(base_name)

        self._rotated_pattern = re.compile(
            rf"^{re.escape(self.stem)}\."
            r"(?P<timestamp>\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2})"
            r"(?:_(?P<counter>\d+))?"
            rf"{re.escape(self.extension)}"
            rf"(?P<compressed>{re.escape(COMPRESSED_SUFFIX)})?$"
        )

    def is_candidate(self, name: str) -> bool:
        """
        Check whether a sibling name belongs to this log stream.

        Looser than parse(): a name whose suffix starts with a date but
        carries a malformed timestamp is still a member and is ordered by
        mtime. Rotations of another stream sharing the stem, such as
        `app.error.<date>.log` next to `app.log`, are not.
        """
        if name == self.base_name:
            return False
        if name == f"{self.base_name}{COMPRESSED_SUFFIX}":
            return True
        if not name.startswith(f"{self.stem}."):
            return False

        rest = name[len(self.stem) + 1:]
        return bool(_DATE_PATTERN.match(rest))

    def parse(self, name: str) -> tuple[datetime, int] | None:
        """
        Extract (timestamp, counter) from a rotated file name.

        Returns:
            The ordering key, or None if the name does not follow the
            convention exactly or the timestamp is not a real date
        """
        match = self._rotated_pattern.match(name)
        if match is None:
            return None

        try:
            timestamp = datetime.strptime(match.group("timestamp"), ROTATED_TIMESTAMP_FORMAT)
        except ValueError:
            return None

        counter = int(match.group("counter") or 0)
        return timestamp, counter

    def is_compressed(self, name: str) -> bool:
        return name.endswith(COMPRESSED_SUFFIX)

    def rotated_name(self, timestamp: datetime, counter: int = 0, compressed: bool = False) -> str:
        """Build the rotated file name for a rotation at `timestamp`."""
        name = f"{self.stem}.{timestamp.strftime(ROTATED_TIMESTAMP_FORMAT)}"
        if counter:
            name += f"_{counter}"
        name += self.extension
        if compressed:
            name += COMPRESSED_SUFFIX
        return name


def split_base_name(base_name: str) -> tuple[str, str]:
    """Split `app.log` into (`app`, `.log`). A leading dot is not an extension."""
    dot = base_name.rfind(".")
    if dot <= 0:
        return base_name, ""
    return base_name[:dot], base_name[dot:]
