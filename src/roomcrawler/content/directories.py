from __future__ import annotations

import os
from pathlib import Path

from roomcrawler.content.room_files import RoomFileError
from roomcrawler.sim.rooms import RoomConfigError

ROOM_DIR_PREFIX = "roomcrawler.rooms."


def room_dir_name(pid: int | None = None) -> str:
    return f"{ROOM_DIR_PREFIX}{os.getpid() if pid is None else pid}"


def create_room_dir(parent: str | Path = ".", *, pid: int | None = None) -> Path:
    path = Path(parent) / room_dir_name(pid)
    try:
        path.mkdir(parents=False, exist_ok=False)
    except FileExistsError as exc:
        raise RoomFileError("room directory already exists", path=path) from exc
    except OSError as exc:
        raise RoomFileError(f"cannot create room directory: {exc}", path=path) from exc
    return path


def find_freshest_room_dir(parent: str | Path = ".") -> Path:
    """Return the most recently modified ``roomcrawler.rooms.*`` directory under ``parent``."""
    root = Path(parent)
    try:
        candidates = [
            entry for entry in root.iterdir() if entry.name.startswith(ROOM_DIR_PREFIX) and entry.is_dir()
        ]
    except OSError as exc:
        raise RoomConfigError(f"cannot list {root}: {exc}") from exc
    if not candidates:
        raise RoomConfigError(f"no {ROOM_DIR_PREFIX}* directories found in {root}")
    return max(candidates, key=lambda entry: (entry.stat().st_mtime_ns, entry.name))
