"""
Rotation Detector - Classifies what happened to the active file between wakes.

Stateless: the caller keeps the previous identity and offset.
"""

from ..types import FileIdentity, FileSnapshot, RotationEvent, Transition


class RotationDetector:
    """
    Compares recorded file metadata with the current snapshot.

    A shrink below the recorded offset on the same identity is TRUNCATED;
    a different identity is ROTATED. Truncation followed by growth past the
    old offset between two observations looks like APPENDED and cannot be
    detected from metadata alone.
    """

    def classify(
        self,
        previous_identity: FileIdentity | None,
        previous_offset: int,
        current: FileSnapshot,
    ) -> Transition:
        """
        Classify the transition of the active file.

        Args:
            previous_identity: Identity recorded at the last read, None if
                the file did not exist yet
            previous_offset: Bytes consumed from that file
            current: Snapshot of the file now at the path

        Returns:
            The observed Transition
        """
        if previous_identity is None or current.identity != previous_identity:
            return Transition.ROTATED

        if current.size < previous_offset:
            return Transition.TRUNCATED

        if current.size > previous_offset:
            return Transition.APPENDED

        return Transition.NO_CHANGE

    def rotation_event(
        self,
        previous_identity: FileIdentity | None,
        new_path: str,
        transition: Transition,
    ) -> RotationEvent:
        """Build the event recorded for a reopening transition."""
        if not transition.requires_reopen:
            raise ValueError(f"{transition} does not reopen the file")

        return RotationEvent(
            previous_identity=previous_identity,
            new_path=new_path,
            transition=transition,
        )
