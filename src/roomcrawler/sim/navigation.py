from __future__ import annotations

import logging
from dataclasses import dataclass

from roomcrawler.sim.clock import TimeHandoff
from roomcrawler.sim.rooms import Room, RoomConfigError, RoomRegistry, RoomRole

logger = logging.getLogger(__name__)

TIME_COMMAND = "time"
MOVED = "moved"
TIME_REPORTED = "time"
UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class TurnOutcome:
    kind: str
    room_name: str
    timestamp: str | None = None


class NavigationEngine:
    """Turn-based walk over a read-only registry, from the start room to the end room."""

    def __init__(self, registry: RoomRegistry, *, clock: TimeHandoff | None = None) -> None:
        start = registry.start_room()
        if start is None:
            raise RoomConfigError(f"none of the {len(registry)} rooms is a start room")
        self.registry = registry
        self.clock = clock
        self._current_room = start
        self._path_history: list[str] = []

    @property
    def current_room(self) -> Room:
        return self._current_room

    @property
    def path_history(self) -> tuple[str, ...]:
        return tuple(self._path_history)

    @property
    def step_count(self) -> int:
        return len(self._path_history)

    @property
    def is_finished(self) -> bool:
        return self._current_room.role is RoomRole.END

    def available_connections(self) -> list[str]:
        return list(self._current_room.connections)

    def submit(self, command: str) -> TurnOutcome:
        if self.is_finished:
            raise RuntimeError("session already reached the end room")
        command = command.strip()

        if command == TIME_COMMAND and self.clock is not None:
            timestamp = self.clock.request_time()
            return TurnOutcome(kind=TIME_REPORTED, room_name=self._current_room.name, timestamp=timestamp)

        if self._current_room.is_connected_to(command):
            destination = self.registry.by_name(command)
            if destination is not None:
                self._current_room = destination
                self._path_history.append(destination.name)
                logger.debug("moved to %s (step %d)", destination.name, self.step_count)
                return TurnOutcome(kind=MOVED, room_name=destination.name)

        logger.debug("unrecognized destination %r from %s", command, self._current_room.name)
        return TurnOutcome(kind=UNRECOGNIZED, room_name=self._current_room.name)
