from __future__ import annotations

import argparse
from typing import Sequence

from roomcrawler.cli.logs import LOG_LEVEL_CHOICES, configure_logging
from roomcrawler.content.directories import create_room_dir
from roomcrawler.content.room_files import write_room_files
from roomcrawler.sim.graph import DEFAULT_ROOM_COUNT, GraphConfig, generate_registry
from roomcrawler.sim.hash import registry_hash

DEFAULT_OUTPUT_ROOT = "."


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roomcrawler-build-rooms",
        description=(
            "Generate a random connected set of rooms and write one room file per room "
            "into a fresh roomcrawler.rooms.<pid> directory."
        ),
    )
    parser.add_argument("--seed", type=int, default=None, help="Master seed for reproducible generation")
    parser.add_argument(
        "--room-count",
        type=int,
        default=DEFAULT_ROOM_COUNT,
        help=f"Number of rooms to generate (default: {DEFAULT_ROOM_COUNT})",
    )
    parser.add_argument(
        "--output-root",
        default=DEFAULT_OUTPUT_ROOT,
        help="Directory in which the room directory is created (default: current directory)",
    )
    parser.add_argument("--log-level", choices=LOG_LEVEL_CHOICES, default=None, help="Logging level for stderr")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = GraphConfig(room_count=args.room_count, seed=args.seed)
        registry = generate_registry(config)
        room_dir = create_room_dir(args.output_root)
        write_room_files(registry, room_dir)
    except Exception as exc:
        print(f"error: {exc}")
        return 1

    print(
        "ok "
        f"room_dir={room_dir} "
        f"room_count={len(registry)} "
        f"seed={'random' if args.seed is None else args.seed} "
        f"registry_hash={registry_hash(registry)}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
