"""
Command-line interface for rotatail.

List, replay and follow rotated log files.
"""

import argparse
import json
import logging
import sys

from datetime import datetime

from .config import DEFAULT_CONFIG_PATH, create_default_config_file, load_config
from .errors import RotatailError, WatchError
from .reader import RotatingFileReader
from .types import RotationEvent, TailerConfig


def _print_line(line: str) -> None:
    print(line, flush=True)


def _line_count(value: str) -> int:
    count = int(value)
    if count < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {count}")
    return count


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="rotatail - Read and follow rotated log files"
    )
    parser.add_argument("--config", "-c", help="Path to a JSON config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # list command
    list_parser = subparsers.add_parser("list", help="List rotated and active files, oldest first")
    list_parser.add_argument("path", help="Active log file, e.g. /var/log/app.log")
    list_parser.add_argument("--no-current", action="store_true", help="Omit the active file")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # read command
    read_parser = subparsers.add_parser("read", help="Print every line of the log stream")
    read_parser.add_argument("path", help="Active log file")
    read_parser.add_argument("--last", "-n", type=_line_count, help="Only the last N lines")
    read_parser.add_argument(
        "--since",
        type=datetime.fromisoformat,
        help="Only files modified at or after this ISO timestamp",
    )

    # tail command
    tail_parser = subparsers.add_parser("tail", help="Follow the active file across rotation")
    tail_parser.add_argument("path", help="Active log file")
    tail_parser.add_argument("--last", "-n", type=_line_count, help="Lines already present to print first")
    tail_parser.add_argument("--poll", type=float, help="Poll interval in seconds")
    tail_parser.add_argument("--no-watch", action="store_true", help="Poll only, no notifications")

    # init command
    init_parser = subparsers.add_parser("init", help="Create default configuration file")
    init_parser.add_argument("--path", default=DEFAULT_CONFIG_PATH, help="Where to write it")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "init":
        create_default_config_file(args.path)
        return 0

    # Load configuration
    try:
        config = load_config(args.config)
        if args.command == "tail" and (args.poll is not None or args.no_watch):
            overrides = config.to_dict()
            if args.poll is not None:
                overrides["poll_interval_seconds"] = args.poll
            if args.no_watch:
                overrides["use_native_watch"] = False
            config = TailerConfig.from_dict(overrides)
    except (OSError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    reader = RotatingFileReader(args.path, config)

    try:
        if args.command == "list":
            paths = reader.list_files(include_current=not args.no_current)
            if args.json:
                print(json.dumps(paths, indent=2))
            else:
                for path in paths:
                    print(path)

        elif args.command == "read":
            for line in reader.read(last_lines=args.last, since=args.since):
                _print_line(line)

        elif args.command == "tail":
            return _follow(reader, args.last)

    except RotatailError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def _follow(reader: RotatingFileReader, last_lines: int | None) -> int:
    """Print lines until interrupted."""

    def report_rotation(event: RotationEvent) -> None:
        print(f"--- {event.transition}: {event.new_path} ---", file=sys.stderr)

    def report_watch_error(error: WatchError) -> None:
        print(f"Warning: {error}; polling instead", file=sys.stderr)

    subscription = reader.tail(
        last_lines=last_lines,
        on_rotation=report_rotation,
        on_watch_error=report_watch_error,
    )
    try:
        subscription.drain_to(_print_line)
    except KeyboardInterrupt:
        pass
    finally:
        subscription.cancel()

    return 0


if __name__ == "__main__":
    sys.exit(main())
