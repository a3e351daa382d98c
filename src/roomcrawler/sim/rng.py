from __future__ import annotations

import hashlib
import random

RNG_ROOM_NAMES_STREAM_NAME = "rng_room_names"
RNG_CONNECTIONS_STREAM_NAME = "rng_connections"


def derive_stream_seed(master_seed: int, stream_name: str) -> int:
    """Derive a deterministic child RNG seed from (master_seed, stream_name)."""
    digest = hashlib.sha256(f"{master_seed}:{stream_name}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False)


def stream_rng(master_seed: int, stream_name: str) -> random.Random:
    return random.Random(derive_stream_seed(master_seed, stream_name))
