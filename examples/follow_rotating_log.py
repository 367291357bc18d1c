"""
Example: Following a log file while it is being rotated.

This example demonstrates:
1. Writing to a log file and rotating it the way logrotate-style writers do
2. Listing the rotated files in order
3. Replaying the whole stream
4. Tailing the active file across a rotation
"""

import os
import tempfile
import threading
import time
from datetime import datetime, timedelta

# Add parent to path for running without install
import sys
sys.path.insert(0, "..")

from rotatail import RotatingFileReader, TailerConfig
from rotatail.discovery import FileNamer


def rotate(base_path: str, when: datetime) -> str:
    """Move the active file aside under its rotated name."""
    namer = FileNamer(os.path.basename(base_path))
    rotated = os.path.join(os.path.dirname(base_path), namer.rotated_name(when))
    os.replace(base_path, rotated)
    return rotated


def write_lines(path: str, prefix: str, count: int) -> None:
    with open(path, "a", encoding="utf-8") as f:
        for i in range(count):
            f.write(f"{prefix} line {i}\n")


def main():
    with tempfile.TemporaryDirectory() as log_dir:
        base_path = os.path.join(log_dir, "app.log")
        start = datetime(2024, 1, 15, 10, 0, 0)

        # Two rotations worth of history
        write_lines(base_path, "first", 3)
        rotate(base_path, start)
        write_lines(base_path, "second", 3)
        rotate(base_path, start + timedelta(hours=1))
        write_lines(base_path, "current", 2)

        config = TailerConfig(poll_interval_seconds=0.1)
        reader = RotatingFileReader(base_path, config)

        print("Files, oldest first:")
        for path in reader.list_files():
            print(f"  {os.path.basename(path)}")

        print("\nFull replay:")
        for line in reader.read():
            print(f"  {line}")

        print("\nTailing (last 2 lines, then live):")
        subscription = reader.tail(
            last_lines=2,
            on_rotation=lambda event: print(f"  -- {event.transition} --"),
        )

        def writer():
            time.sleep(0.3)
            write_lines(base_path, "live", 2)
            time.sleep(0.3)
            rotate(base_path, start + timedelta(hours=2))
            write_lines(base_path, "after-rotation", 2)
            time.sleep(0.5)
            subscription.cancel()

        thread = threading.Thread(target=writer)
        thread.start()

        delivered = subscription.drain_to(lambda line: print(f"  {line}"))
        thread.join()

        print(f"\nDelivered {delivered} line(s) before cancel")


if __name__ == "__main__":
    main()
