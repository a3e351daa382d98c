from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Iterable

from roomcrawler.sim.rooms import (
    MAX_CONNECTIONS,
    MIN_CONNECTIONS,
    RegistryInvariantError,
    Room,
    RoomRegistry,
    RoomRole,
)

logger = logging.getLogger(__name__)

DEFAULT_EXPECTED_ROOM_COUNT = 7
ROOM_FILE_SUFFIX = "_room"
NAME_FIELD_TAG = "N"
ROLE_FIELD_TAG = "T"
ROLE_TAGS = {"S": RoomRole.START, "M": RoomRole.MID, "E": RoomRole.END}


class RoomFileError(ValueError):
    def __init__(self, message: str, *, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        if self.path is not None:
            message = f"{message} (in {self.path})"
        super().__init__(message)


class RoomFileParseError(RoomFileError):
    pass


def room_file_name(room: Room) -> str:
    return f"{room.name}{ROOM_FILE_SUFFIX}"


def format_room(room: Room) -> str:
    lines = [f"ROOM NAME: {room.name}"]
    for index, neighbor in enumerate(room.connections, start=1):
        lines.append(f"CONNECTION {index}: {neighbor}")
    lines.append(f"ROOM TYPE: {room.role.value}")
    return "\n".join(lines) + "\n"


def _write_atomic_text(destination: Path, text: str) -> None:
    temp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=destination.parent,
            prefix=".",
            suffix=".tmp",
            delete=False,
        ) as temp_file:
            temp_path = Path(temp_file.name)
            temp_file.write(text)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        os.replace(temp_path, destination)
    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def write_room_files(registry: RoomRegistry, directory: str | Path) -> list[Path]:
    """Write one file per room into ``directory``.

    Each file is replaced atomically. A failure stops the run and leaves files
    written so far in place.
    """
    target = Path(directory)
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise RoomFileError(f"cannot create room directory: {exc}", path=target) from exc

    written: list[Path] = []
    for room in registry.rooms:
        path = target / room_file_name(room)
        try:
            _write_atomic_text(path, format_room(room))
        except OSError as exc:
            raise RoomFileError(f"cannot write room file: {exc}", path=path) from exc
        written.append(path)
    logger.info("wrote %d room files to %s", len(written), target)
    return written


@dataclass
class _RoomParseState:
    room_id: int
    name: str | None = None
    role: RoomRole | None = None
    connections: list[str] = field(default_factory=list)

    @property
    def got_name(self) -> bool:
        return self.name is not None


def _apply_field(state: _RoomParseState, tag: str, value: str, line_number: int) -> None:
    kind = tag[0]
    if kind == NAME_FIELD_TAG:
        if state.got_name:
            raise RoomFileParseError(f"line {line_number}: second name field (already named {state.name})")
        state.name = value
        return

    if kind == ROLE_FIELD_TAG:
        if not state.got_name:
            raise RoomFileParseError(f"line {line_number}: role field before name")
        if len(state.connections) < MIN_CONNECTIONS:
            raise RoomFileParseError(
                f"line {line_number}: role field after only {len(state.connections)} connections"
            )
        if state.role is not None:
            raise RoomFileParseError(f"line {line_number}: second role field")
        role = ROLE_TAGS.get(value[0])
        if role is None:
            raise RoomFileParseError(f"line {line_number}: unknown room type {value!r}")
        state.role = role
        return

    if not state.got_name:
        raise RoomFileParseError(f"line {line_number}: connection field before name")
    if len(state.connections) >= MAX_CONNECTIONS:
        raise RoomFileParseError(
            f"line {line_number}: more than {MAX_CONNECTIONS} connections"
        )
    state.connections.append(value)


def parse_room_lines(lines: Iterable[str], room_id: int, *, source: str | Path | None = None) -> Room:
    """Run the room-file state machine over ``lines``.

    Only the first character of the second token matters: ``N`` names the
    room, ``T`` sets its type and anything else is a connection. Lines with
    fewer than three tokens are skipped.
    """
    state = _RoomParseState(room_id=room_id)
    try:
        for line_number, line in enumerate(lines, start=1):
            tokens = line.split()
            if len(tokens) < 3:
                continue
            _apply_field(state, tokens[1], tokens[2], line_number)
        if state.name is None:
            raise RoomFileParseError("missing name field")
        if state.role is None:
            raise RoomFileParseError("missing room type field")
    except RoomFileParseError as exc:
        if source is None:
            raise
        raise RoomFileParseError(str(exc), path=source) from None

    return Room(room_id=room_id, name=state.name, role=state.role, connections=state.connections)


def parse_room_file(path: str | Path, room_id: int) -> Room:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RoomFileParseError(f"cannot read room file: {exc}", path=path) from exc
    return parse_room_lines(text.splitlines(), room_id, source=path)


def _room_entries(directory: Path) -> list[Path]:
    try:
        entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise RoomFileParseError(f"cannot open room directory: {exc}", path=directory) from exc
    return [entry for entry in entries if not entry.name.startswith(".") and entry.is_file()]


def load_room_dir(directory: str | Path, *, expected_count: int = DEFAULT_EXPECTED_ROOM_COUNT) -> RoomRegistry:
    """Parse every room file in ``directory`` into a registry.

    Nothing is returned unless exactly ``expected_count`` rooms parse, every
    connection names a room in the directory and the registry passes
    ``RoomRegistry.validate``.
    """
    directory = Path(directory)
    entries = _room_entries(directory)
    if len(entries) != expected_count:
        raise RoomFileParseError(
            f"expected {expected_count} room files, found {len(entries)}", path=directory
        )

    rooms = [parse_room_file(path, room_id) for room_id, path in enumerate(entries)]

    seen: dict[str, Path] = {}
    for room, path in zip(rooms, entries):
        if room.name in seen:
            raise RoomFileParseError(f"duplicate room name {room.name} (also in {seen[room.name]})", path=path)
        seen[room.name] = path
    for room, path in zip(rooms, entries):
        for neighbor in room.connections:
            if neighbor not in seen:
                raise RoomFileParseError(f"connection to unknown room {neighbor}", path=path)

    registry = RoomRegistry.from_rooms(rooms)
    try:
        registry.validate()
    except RegistryInvariantError as exc:
        raise RoomFileParseError(str(exc), path=directory) from exc
    for room in registry.rooms:
        logger.debug("loaded %s", room.describe())
    return registry
