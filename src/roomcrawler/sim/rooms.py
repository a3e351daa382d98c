from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

DEFAULT_ROOM_NAMES: tuple[str, ...] = (
    "Semigroupoid",
    "Category",
    "Groupoid",
    "Magma",
    "Quasigroup",
    "Loop",
    "Semigroup",
    "Monoid",
    "Group",
    "Abelian",
)
MIN_CONNECTIONS = 3
MAX_CONNECTIONS = 6


class RoomConfigError(ValueError):
    """Raised for unusable generation/play configuration (fatal before any session)."""


class RegistryInvariantError(ValueError):
    """Raised when a room registry breaks connectivity, degree, symmetry or role rules."""


class RoomRole(str, Enum):
    START = "START_ROOM"
    MID = "MID_ROOM"
    END = "END_ROOM"


def validate_room_name(name: Any, *, field_name: str = "room name") -> str:
    if not isinstance(name, str) or not name:
        raise RoomConfigError(f"{field_name} must be a non-empty string")
    if any(character.isspace() for character in name):
        raise RoomConfigError(f"{field_name} must not contain whitespace: {name!r}")
    return name


@dataclass
class Room:
    room_id: int
    name: str
    role: RoomRole
    connections: list[str] = field(default_factory=list)

    @property
    def degree(self) -> int:
        return len(self.connections)

    def is_connected_to(self, name: str) -> bool:
        return name in self.connections

    def add_connection(self, name: str) -> None:
        if name == self.name:
            raise ValueError(f"room {self.name} cannot connect to itself")
        if self.is_connected_to(name):
            raise ValueError(f"room {self.name} is already connected to {name}")
        if self.degree >= MAX_CONNECTIONS:
            raise ValueError(f"room {self.name} already has {MAX_CONNECTIONS} connections")
        self.connections.append(name)

    def describe(self) -> str:
        return (
            f"{{id: {self.room_id}, name: {self.name}, "
            f"connections: [{', '.join(self.connections)}], room_type: {self.role.value}}}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "room_id": self.room_id,
            "name": self.name,
            "role": self.role.value,
            "connections": list(self.connections),
        }


@dataclass
class RoomRegistry:
    """Fixed set of rooms shared by the generator and the player."""

    rooms: list[Room] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rooms)

    def __iter__(self):
        return iter(self.rooms)

    def names(self) -> list[str]:
        return [room.name for room in self.rooms]

    def by_name(self, name: str) -> Room | None:
        for room in self.rooms:
            if room.name == name:
                return room
        return None

    def rooms_with_role(self, role: RoomRole) -> list[Room]:
        return [room for room in self.rooms if room.role is role]

    def start_room(self) -> Room | None:
        starts = self.rooms_with_role(RoomRole.START)
        return starts[0] if starts else None

    def end_room(self) -> Room | None:
        ends = self.rooms_with_role(RoomRole.END)
        return ends[0] if ends else None

    def reachable_from(self, name: str) -> set[str]:
        visited = {name}
        queue = deque([name])
        while queue:
            room = self.by_name(queue.popleft())
            if room is None:
                continue
            for neighbor in room.connections:
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)
        return visited

    def is_connected(self) -> bool:
        if not self.rooms:
            return True
        return self.reachable_from(self.rooms[0].name) >= set(self.names())

    def validate(
        self,
        *,
        min_connections: int = MIN_CONNECTIONS,
        max_connections: int = MAX_CONNECTIONS,
    ) -> None:
        names = self.names()
        if len(set(names)) != len(names):
            raise RegistryInvariantError("room names must be unique")
        ids = [room.room_id for room in self.rooms]
        if sorted(ids) != list(range(len(ids))):
            raise RegistryInvariantError(f"room ids must cover [0, {len(ids)}): {sorted(ids)}")

        known = set(names)
        for room in self.rooms:
            if not min_connections <= room.degree <= max_connections:
                raise RegistryInvariantError(
                    f"room {room.name} has {room.degree} connections; "
                    f"expected [{min_connections}, {max_connections}]"
                )
            if len(set(room.connections)) != room.degree:
                raise RegistryInvariantError(f"room {room.name} lists a connection twice")
            for neighbor in room.connections:
                if neighbor not in known:
                    raise RegistryInvariantError(f"room {room.name} connects to unknown room {neighbor}")
                if neighbor == room.name:
                    raise RegistryInvariantError(f"room {room.name} connects to itself")
                if not self.by_name(neighbor).is_connected_to(room.name):
                    raise RegistryInvariantError(f"connection {room.name} -> {neighbor} is not symmetric")

        for role in (RoomRole.START, RoomRole.END):
            count = len(self.rooms_with_role(role))
            if count != 1:
                raise RegistryInvariantError(f"expected exactly one {role.value}, found {count}")

        if not self.is_connected():
            raise RegistryInvariantError("room graph is not connected")

    def to_dict(self) -> dict[str, Any]:
        return {"rooms": [room.to_dict() for room in self.rooms]}

    @classmethod
    def from_rooms(cls, rooms: Iterable[Room]) -> "RoomRegistry":
        return cls(rooms=list(rooms))
