from __future__ import annotations

import hashlib
import json

from roomcrawler.sim.rooms import RoomRegistry


def registry_hash(registry: RoomRegistry) -> str:
    encoded = json.dumps(
        registry.to_dict(),
        sort_keys=True,
        separators=(",", ":"),
    ).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def topology_hash(registry: RoomRegistry) -> str:
    """Hash of names, roles and neighbour sets; ignores ids and connection order."""
    payload = sorted(
        [room.name, room.role.value, sorted(room.connections)]
        for room in registry.rooms
    )
    encoded = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()
