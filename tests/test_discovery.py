"""
Tests for log file set discovery.
"""

import contextlib
import os
import random

from datetime import datetime

import pytest

from rotatail.discovery import FileSetDiscoverer
from rotatail.errors import DiscoveryError


def touch(path, content="", mtime: float | None = None):
    """Create a file, optionally with a fixed modification time."""
    path.write_text(content, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


class TestListFiles:
    """Tests for ordering and membership."""

    def test_rotated_then_current_oldest_first(self, tmp_path):
        """Sorted by filename timestamp regardless of creation order."""
        names = [
            "app.2024-01-03_00-00-00.log",
            "app.2024-01-01_00-00-00.log",
            "app.2024-01-02_12-00-00.log",
            "app.2023-12-31_23-59-59.log",
        ]
        random.Random(7).shuffle(names)
        for name in names:
            touch(tmp_path / name)
        touch(tmp_path / "app.log")

        paths = FileSetDiscoverer(str(tmp_path / "app.log")).list_paths()

        assert [os.path.basename(p) for p in paths] == [
            "app.2023-12-31_23-59-59.log",
            "app.2024-01-01_00-00-00.log",
            "app.2024-01-02_12-00-00.log",
            "app.2024-01-03_00-00-00.log",
            "app.log",
        ]

    def test_filename_timestamp_beats_mtime(self, tmp_path):
        """A freshly touched old rotation still sorts by its name."""
        touch(tmp_path / "app.2024-01-01_00-00-00.log", mtime=2_000_000_000)
        touch(tmp_path / "app.2024-06-01_00-00-00.log", mtime=1_000_000_000)

        paths = FileSetDiscoverer(str(tmp_path / "app.log")).list_paths(include_current=False)

        assert [os.path.basename(p) for p in paths] == [
            "app.2024-01-01_00-00-00.log",
            "app.2024-06-01_00-00-00.log",
        ]

    def test_counter_orders_same_second_rotations(self, tmp_path):
        for name in ["app.2024-01-01_00-00-00_10.log", "app.2024-01-01_00-00-00_2.log",
                     "app.2024-01-01_00-00-00.log"]:
            touch(tmp_path / name)

        paths = FileSetDiscoverer(str(tmp_path / "app.log")).list_paths(include_current=False)

        assert [os.path.basename(p) for p in paths] == [
            "app.2024-01-01_00-00-00.log",
            "app.2024-01-01_00-00-00_2.log",
            "app.2024-01-01_00-00-00_10.log",
        ]

    def test_active_file_is_last_even_when_oldest(self, tmp_path):
        touch(tmp_path / "app.log", mtime=0)
        touch(tmp_path / "app.2024-01-01_00-00-00.log")

        entries = FileSetDiscoverer(str(tmp_path / "app.log")).list_files()

        assert entries[-1].is_active
        assert entries[-1].path == str(tmp_path / "app.log")

    def test_active_file_included_when_missing(self, tmp_path):
        """The base file is always the final entry."""
        touch(tmp_path / "app.2024-01-01_00-00-00.log")

        paths = FileSetDiscoverer(str(tmp_path / "app.log")).list_paths()

        assert paths[-1] == str(tmp_path / "app.log")
        assert len(paths) == 2

    def test_excludes_current_when_requested(self, tmp_path):
        touch(tmp_path / "app.2024-01-01_00-00-00.log")
        touch(tmp_path / "app.log")

        paths = FileSetDiscoverer(str(tmp_path / "app.log")).list_paths(include_current=False)

        assert paths == [str(tmp_path / "app.2024-01-01_00-00-00.log")]

    def test_unparseable_names_fall_back_to_mtime(self, tmp_path):
        touch(tmp_path / "app.2024-01-01.log", mtime=datetime(2024, 3, 1).timestamp())
        touch(tmp_path / "app.2024-02-01_00-00-00.log")
        touch(tmp_path / "app.log.gz", mtime=datetime(2024, 1, 15).timestamp())

        paths = FileSetDiscoverer(str(tmp_path / "app.log")).list_paths(include_current=False)

        assert [os.path.basename(p) for p in paths] == [
            "app.log.gz",
            "app.2024-02-01_00-00-00.log",
            "app.2024-01-01.log",
        ]

    def test_equal_keys_break_ties_by_name(self, tmp_path):
        mtime = datetime(2024, 1, 1).timestamp()
        touch(tmp_path / "app.2024-01-01-b.log", mtime=mtime)
        touch(tmp_path / "app.2024-01-01-a.log", mtime=mtime)

        paths = FileSetDiscoverer(str(tmp_path / "app.log")).list_paths(include_current=False)

        assert [os.path.basename(p) for p in paths] == [
            "app.2024-01-01-a.log",
            "app.2024-01-01-b.log",
        ]

    def test_ignores_unrelated_files(self, tmp_path):
        touch(tmp_path / "application.2024-01-01_00-00-00.log")
        touch(tmp_path / "other.2024-01-01_00-00-00.log")
        touch(tmp_path / "app.log.bak")
        touch(tmp_path / "app.error.2024-01-02_00-00-00.log", "from another stream\n")
        (tmp_path / "app.2024-01-01_00-00-00.log").mkdir()
        touch(tmp_path / "app.log")

        paths = FileSetDiscoverer(str(tmp_path / "app.log")).list_paths()

        assert paths == [str(tmp_path / "app.log")]

    def test_compressed_files_can_be_excluded(self, tmp_path):
        touch(tmp_path / "app.2024-01-01_00-00-00.log.gz")
        touch(tmp_path / "app.2024-01-02_00-00-00.log")

        discoverer = FileSetDiscoverer(str(tmp_path / "app.log"), include_compressed=False)
        paths = discoverer.list_paths(include_current=False)

        assert paths == [str(tmp_path / "app.2024-01-02_00-00-00.log")]

    def test_recomputed_on_every_call(self, tmp_path):
        discoverer = FileSetDiscoverer(str(tmp_path / "app.log"))
        assert len(discoverer.list_files()) == 1

        touch(tmp_path / "app.2024-01-01_00-00-00.log")

        assert len(discoverer.list_files()) == 2

    def test_relative_path_becomes_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        touch(tmp_path / "app.log")

        paths = FileSetDiscoverer("app.log").list_paths()

        assert paths == [os.path.join(os.getcwd(), "app.log")]


class TestDiscoveryErrors:
    """Tests for unreadable directories."""

    def test_missing_directory_raises(self, tmp_path):
        discoverer = FileSetDiscoverer(str(tmp_path / "missing" / "app.log"))

        with pytest.raises(DiscoveryError) as exc_info:
            discoverer.list_files()

        assert exc_info.value.path == str(tmp_path / "missing")
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_parent_is_a_file_raises(self, tmp_path):
        touch(tmp_path / "not_a_dir")

        with pytest.raises(DiscoveryError):
            FileSetDiscoverer(str(tmp_path / "not_a_dir" / "app.log")).list_files()

    def test_unstatable_rotated_file_raises(self, tmp_path, monkeypatch):
        """Only a vanished file is skipped; other stat failures surface."""

        class UnstatableEntry:
            name = "app.2024-01-01.log"
            path = str(tmp_path / "app.2024-01-01.log")

            def is_file(self):
                return True

            def stat(self):
                raise PermissionError(13, "Permission denied", self.path)

        monkeypatch.setattr(
            os, "scandir", lambda directory: contextlib.nullcontext(iter([UnstatableEntry()]))
        )

        with pytest.raises(DiscoveryError) as exc_info:
            FileSetDiscoverer(str(tmp_path / "app.log")).list_files()

        assert exc_info.value.path == str(tmp_path / "app.2024-01-01.log")
        assert isinstance(exc_info.value.cause, PermissionError)
