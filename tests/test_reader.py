"""
Tests for the RotatingFileReader entry point and module helpers.
"""

import os

import pytest

from rotatail import RotatingFileReader, list_log_files, read_logs
from rotatail.errors import DiscoveryError
from rotatail.types import TailerConfig


@pytest.fixture
def log_dir(tmp_path):
    (tmp_path / "app.2024-01-01_00-00-00.log").write_text("a\nb\n", encoding="utf-8")
    (tmp_path / "app.2024-01-02_00-00-00.log").write_text("c\n", encoding="utf-8")
    (tmp_path / "app.log").write_text("d\ne\n", encoding="utf-8")
    return tmp_path


class TestRotatingFileReader:
    """Tests for the combined reader."""

    def test_list_files(self, log_dir):
        reader = RotatingFileReader(str(log_dir / "app.log"), TailerConfig())

        assert [os.path.basename(p) for p in reader.list_files()] == [
            "app.2024-01-01_00-00-00.log",
            "app.2024-01-02_00-00-00.log",
            "app.log",
        ]
        assert len(reader.list_entries(include_current=False)) == 2

    def test_read(self, log_dir):
        reader = RotatingFileReader(str(log_dir / "app.log"), TailerConfig())

        assert list(reader.read()) == ["a", "b", "c", "d", "e"]
        assert list(reader.read(last_lines=2)) == ["d", "e"]

    def test_tail_uses_configured_default(self, log_dir):
        config = TailerConfig(default_last_lines=1, poll_interval_seconds=0.02, use_native_watch=False)
        reader = RotatingFileReader(str(log_dir / "app.log"), config)

        with reader.tail() as subscription:
            assert next(subscription) == "e"

    def test_tail_seeds_from_active_file_only(self, log_dir):
        config = TailerConfig(poll_interval_seconds=0.02, use_native_watch=False)
        reader = RotatingFileReader(str(log_dir / "app.log"), config)

        with reader.tail(last_lines=5) as subscription:
            assert [next(subscription) for _ in range(2)] == ["d", "e"]

    def test_loads_config_when_not_given(self, log_dir, monkeypatch):
        config_path = log_dir / "settings.json"
        config_path.write_text('{"default_last_lines": 1}', encoding="utf-8")
        monkeypatch.setenv("ROTATAIL_CONFIG", str(config_path))

        reader = RotatingFileReader(str(log_dir / "app.log"))

        assert reader.config.default_last_lines == 1


class TestModuleHelpers:
    """Tests for list_log_files() and read_logs()."""

    def test_list_log_files(self, log_dir):
        assert list_log_files(str(log_dir / "app.log"), include_current=False) == [
            str(log_dir / "app.2024-01-01_00-00-00.log"),
            str(log_dir / "app.2024-01-02_00-00-00.log"),
        ]

    def test_read_logs(self, log_dir):
        assert list(read_logs(str(log_dir / "app.log"), last_lines=3)) == ["c", "d", "e"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(DiscoveryError):
            list_log_files(str(tmp_path / "nope" / "app.log"))
