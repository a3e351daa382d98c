from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Sequence

from roomcrawler.sim.rng import RNG_CONNECTIONS_STREAM_NAME, RNG_ROOM_NAMES_STREAM_NAME, stream_rng
from roomcrawler.sim.rooms import (
    DEFAULT_ROOM_NAMES,
    MAX_CONNECTIONS,
    MIN_CONNECTIONS,
    RegistryInvariantError,
    Room,
    RoomConfigError,
    RoomRegistry,
    RoomRole,
    validate_room_name,
)

logger = logging.getLogger(__name__)

DEFAULT_ROOM_COUNT = 7
# Counts retried attempts too; a room left without any possible partner hits this.
MAX_CONNECTION_ATTEMPTS = 10_000


class GraphBuildError(RuntimeError):
    """Raised when connection generation cannot satisfy the degree/connectivity invariants."""


@dataclass(frozen=True)
class GraphConfig:
    room_count: int = DEFAULT_ROOM_COUNT
    room_names: tuple[str, ...] = DEFAULT_ROOM_NAMES
    min_connections: int = MIN_CONNECTIONS
    max_connections: int = MAX_CONNECTIONS
    seed: int | None = None

    def validate(self) -> None:
        """Fail fast on settings the constructive algorithm cannot honour.

        Two bounds come from the graph itself. A room needs at least
        ``min_connections`` distinct neighbours, so ``room_count`` must exceed
        ``min_connections``. Every connected component of a graph with minimum
        degree ``k`` holds at least ``k + 1`` rooms, so two components need
        ``2k + 2`` rooms; keeping ``room_count <= 2k + 1`` makes the stopping
        condition imply connectivity.
        """
        if isinstance(self.room_count, bool) or not isinstance(self.room_count, int):
            raise RoomConfigError("room_count must be an integer")
        if self.room_count < 2:
            raise RoomConfigError("room_count must be >= 2 (one start room and one end room)")
        for index, name in enumerate(self.room_names):
            validate_room_name(name, field_name=f"room_names[{index}]")
        if len(set(self.room_names)) != len(self.room_names):
            raise RoomConfigError("room_names must not repeat")
        if self.room_count > len(self.room_names):
            raise RoomConfigError(
                f"requested {self.room_count} rooms but only {len(self.room_names)} distinct names are available"
            )
        if not 0 < self.min_connections <= self.max_connections <= MAX_CONNECTIONS:
            raise RoomConfigError(
                f"connection bounds must satisfy 0 < min <= max <= {MAX_CONNECTIONS}; "
                f"got [{self.min_connections}, {self.max_connections}]"
            )
        if self.room_count <= self.min_connections:
            raise RoomConfigError(
                f"room_count {self.room_count} cannot give every room {self.min_connections} connections"
            )
        if self.room_count > 2 * self.min_connections + 1:
            raise RoomConfigError(
                f"room_count {self.room_count} exceeds {2 * self.min_connections + 1}; "
                "connectivity is not guaranteed for this minimum degree"
            )


def shuffle_room_names(names: Sequence[str], rng: random.Random) -> list[str]:
    """Return a Fisher-Yates shuffled copy of ``names``."""
    shuffled = list(names)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randrange(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def _role_for_slot(slot: int) -> RoomRole:
    if slot == 0:
        return RoomRole.START
    if slot == 1:
        return RoomRole.END
    return RoomRole.MID


def initialize_rooms(config: GraphConfig, rng: random.Random) -> list[Room]:
    names = shuffle_room_names(config.room_names, rng)
    return [Room(room_id=slot, name=names[slot], role=_role_for_slot(slot)) for slot in range(config.room_count)]


def connect_rooms(room_a: Room, room_b: Room) -> None:
    room_a.add_connection(room_b.name)
    room_b.add_connection(room_a.name)


def add_random_connection(rooms: list[Room], rng: random.Random, *, max_connections: int = MAX_CONNECTIONS) -> bool:
    """Attempt one symmetric connection; False means the chosen room had no partner."""
    choices_for_a = [room for room in rooms if room.degree < max_connections]
    if not choices_for_a:
        raise GraphBuildError("every room is at the connection ceiling")
    room_a = rng.choice(choices_for_a)

    choices_for_b = [
        room
        for room in rooms
        if room.degree < max_connections and room.room_id != room_a.room_id and not room_a.is_connected_to(room.name)
    ]
    if not choices_for_b:
        logger.debug("no partner available for room %s; retrying", room_a.name)
        return False
    room_b = rng.choice(choices_for_b)

    connect_rooms(room_a, room_b)
    logger.debug("connected %s <-> %s", room_a.name, room_b.name)
    return True


def is_graph_full(rooms: list[Room], *, min_connections: int = MIN_CONNECTIONS) -> bool:
    return all(room.degree >= min_connections for room in rooms)


def build_connections(rooms: list[Room], rng: random.Random, config: GraphConfig) -> int:
    """Grow connections until every room reaches the minimum degree.

    Returns the number of attempts used, including retried ones.
    """
    attempts = 0
    while not is_graph_full(rooms, min_connections=config.min_connections):
        if attempts >= MAX_CONNECTION_ATTEMPTS:
            degrees = {room.name: room.degree for room in rooms}
            raise GraphBuildError(f"connection attempts exhausted after {attempts}; degrees={degrees}")
        attempts += 1
        add_random_connection(rooms, rng, max_connections=config.max_connections)
    return attempts


def generate_registry(
    config: GraphConfig | None = None,
    *,
    names_rng: random.Random | None = None,
    connections_rng: random.Random | None = None,
) -> RoomRegistry:
    config = config or GraphConfig()
    config.validate()

    master_seed = config.seed if config.seed is not None else random.SystemRandom().randrange(2**63)
    names_rng = names_rng or stream_rng(master_seed, RNG_ROOM_NAMES_STREAM_NAME)
    connections_rng = connections_rng or stream_rng(master_seed, RNG_CONNECTIONS_STREAM_NAME)

    rooms = initialize_rooms(config, names_rng)
    attempts = build_connections(rooms, connections_rng, config)
    registry = RoomRegistry.from_rooms(rooms)
    try:
        registry.validate(min_connections=config.min_connections, max_connections=config.max_connections)
    except RegistryInvariantError as exc:
        raise GraphBuildError(f"generated registry is invalid: {exc}") from exc

    logger.info(
        "generated %d rooms with %d connections in %d attempts",
        len(registry),
        sum(room.degree for room in rooms) // 2,
        attempts,
    )
    return registry
