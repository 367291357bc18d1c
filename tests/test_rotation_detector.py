"""
Tests for the Rotation Detector.
"""

from datetime import datetime

import pytest

from rotatail.tailing import RotationDetector
from rotatail.types import FileIdentity, FileSnapshot, Transition


def snapshot(inode: int, size: int, device: int = 1) -> FileSnapshot:
    """Helper to create a snapshot of a file with the given identity."""
    return FileSnapshot(
        identity=FileIdentity(device=device, inode=inode),
        size=size,
        modified=datetime.now(),
    )


class TestClassify:
    """Tests for transition classification."""

    def setup_method(self):
        self.detector = RotationDetector()
        self.identity = FileIdentity(device=1, inode=100)

    def test_no_change(self):
        assert self.detector.classify(self.identity, 50, snapshot(100, 50)) == Transition.NO_CHANGE

    def test_appended(self):
        assert self.detector.classify(self.identity, 50, snapshot(100, 80)) == Transition.APPENDED

    def test_truncated(self):
        assert self.detector.classify(self.identity, 50, snapshot(100, 10)) == Transition.TRUNCATED

    def test_truncated_to_empty(self):
        assert self.detector.classify(self.identity, 50, snapshot(100, 0)) == Transition.TRUNCATED

    def test_new_inode_is_rotation(self):
        assert self.detector.classify(self.identity, 50, snapshot(101, 0)) == Transition.ROTATED

    def test_new_inode_wins_over_size(self):
        """A replacement that is larger than the old offset is still a rotation."""
        assert self.detector.classify(self.identity, 50, snapshot(101, 500)) == Transition.ROTATED

    def test_new_device_is_rotation(self):
        assert self.detector.classify(self.identity, 50, snapshot(100, 50, device=2)) == Transition.ROTATED

    def test_first_appearance_is_rotation(self):
        """A file that did not exist before is read from the start."""
        assert self.detector.classify(None, 0, snapshot(100, 20)) == Transition.ROTATED

    def test_reopening_transitions(self):
        assert Transition.ROTATED.requires_reopen
        assert Transition.TRUNCATED.requires_reopen
        assert not Transition.APPENDED.requires_reopen
        assert not Transition.NO_CHANGE.requires_reopen


class TestRotationEvent:
    """Tests for rotation event construction."""

    def test_event_fields(self):
        detector = RotationDetector()
        previous = FileIdentity(device=1, inode=100)

        event = detector.rotation_event(previous, "/var/log/app.log", Transition.TRUNCATED)

        assert event.previous_identity == previous
        assert event.new_path == "/var/log/app.log"
        assert event.to_dict()["transition"] == "truncated"
        assert event.to_dict()["previous_identity"] == "1:100"

    def test_non_reopening_transition_rejected(self):
        with pytest.raises(ValueError):
            RotationDetector().rotation_event(None, "/var/log/app.log", Transition.APPENDED)
