from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence, TextIO

from roomcrawler.cli.logs import LOG_LEVEL_CHOICES, configure_logging
from roomcrawler.cli.viewer import PROMPT, RoomViewer
from roomcrawler.content.directories import find_freshest_room_dir
from roomcrawler.content.room_files import DEFAULT_EXPECTED_ROOM_COUNT, load_room_dir
from roomcrawler.sim.clock import DEFAULT_TIME_FILE_NAME, TimeHandoff
from roomcrawler.sim.navigation import MOVED, TIME_REPORTED, NavigationEngine

DEFAULT_SEARCH_ROOT = "."


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roomcrawler-adventure",
        description="Walk the most recently generated rooms from the start room to the end room.",
    )
    parser.add_argument("--room-dir", default=None, help="Room directory to load (default: freshest under --search-root)")
    parser.add_argument(
        "--search-root",
        default=DEFAULT_SEARCH_ROOT,
        help="Where to look for roomcrawler.rooms.* directories (default: current directory)",
    )
    parser.add_argument(
        "--room-count",
        type=int,
        default=DEFAULT_EXPECTED_ROOM_COUNT,
        help=f"Number of room files expected in the directory (default: {DEFAULT_EXPECTED_ROOM_COUNT})",
    )
    parser.add_argument(
        "--time-file",
        default=DEFAULT_TIME_FILE_NAME,
        help=f"File the time worker writes to (default: {DEFAULT_TIME_FILE_NAME})",
    )
    parser.add_argument("--log-level", choices=LOG_LEVEL_CHOICES, default=None, help="Logging level for stderr")
    return parser


def run_session(
    engine: NavigationEngine,
    *,
    stdin: TextIO,
    stdout: TextIO,
    viewer: RoomViewer | None = None,
) -> bool:
    """Drive ``engine`` from ``stdin`` until the end room; False if input runs out first."""
    viewer = viewer or RoomViewer()
    while not engine.is_finished:
        stdout.write(viewer.render_turn(engine) + "\n")
        stdout.write(PROMPT)
        stdout.flush()

        line = stdin.readline()
        if not line:
            stdout.write("\n")
            return False

        outcome = engine.submit(line)
        if outcome.kind == TIME_REPORTED:
            stdout.write(viewer.render_time(outcome.timestamp or ""))
        elif outcome.kind != MOVED:
            stdout.write(viewer.render_unrecognized())
        stdout.write("\n")

    stdout.write(viewer.render_victory(engine) + "\n")
    return True


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        room_dir = Path(args.room_dir) if args.room_dir else find_freshest_room_dir(args.search_root)
        registry = load_room_dir(room_dir, expected_count=args.room_count)
        clock = TimeHandoff(args.time_file)
        engine = NavigationEngine(registry, clock=clock)
    except Exception as exc:
        print(f"error: {exc}")
        return 1

    try:
        with clock:
            finished = run_session(engine, stdin=sys.stdin, stdout=sys.stdout)
    except Exception as exc:
        print(f"error: {exc}")
        return 1

    if not finished:
        print("error: input ended before reaching the end room")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
