from pathlib import Path

import pytest

from roomcrawler.content.room_files import (
    RoomFileError,
    RoomFileParseError,
    format_room,
    load_room_dir,
    parse_room_file,
    parse_room_lines,
    room_file_name,
    write_room_files,
)
from roomcrawler.sim.graph import GraphConfig, generate_registry
from roomcrawler.sim.hash import topology_hash
from roomcrawler.sim.rooms import Room, RoomRole

VALID_ROOM_TEXT = """ROOM NAME: Magma
CONNECTION 1: Loop
CONNECTION 2: Group
CONNECTION 3: Monoid
ROOM TYPE: START_ROOM
"""


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def _room_text(name: str, connections: list[str], role: str = "MID_ROOM") -> str:
    lines = [f"ROOM NAME: {name}"]
    lines.extend(f"CONNECTION {index}: {neighbor}" for index, neighbor in enumerate(connections, start=1))
    lines.append(f"ROOM TYPE: {role}")
    return "\n".join(lines) + "\n"


def test_format_room_writes_name_connections_then_type() -> None:
    room = Room(room_id=0, name="Magma", role=RoomRole.START, connections=["Loop", "Group", "Monoid"])

    assert format_room(room) == VALID_ROOM_TEXT
    assert room_file_name(room) == "Magma_room"


def test_parse_room_lines_reads_fields_in_order() -> None:
    room = parse_room_lines(VALID_ROOM_TEXT.splitlines(), room_id=4)

    assert room.room_id == 4
    assert room.name == "Magma"
    assert room.role is RoomRole.START
    assert room.connections == ["Loop", "Group", "Monoid"]


def test_parse_room_lines_skips_short_lines_and_ignores_extra_tokens() -> None:
    lines = [
        "",
        "ROOM NAME: Magma",
        "stray",
        "CONNECTION 1: Loop trailing words",
        "   ",
        "CONNECTION 2: Group",
        "CONNECTION 3: Monoid",
        "ROOM TYPE: END_ROOM",
    ]

    room = parse_room_lines(lines, room_id=0)

    assert room.connections == ["Loop", "Group", "Monoid"]
    assert room.role is RoomRole.END


def test_parse_room_lines_accepts_connections_after_type() -> None:
    lines = VALID_ROOM_TEXT.splitlines() + ["CONNECTION 4: Abelian"]

    room = parse_room_lines(lines, room_id=0)

    assert room.connections == ["Loop", "Group", "Monoid", "Abelian"]


def test_parser_rejects_second_name_field() -> None:
    lines = ["ROOM NAME: Magma", "ROOM NAME: Loop"]

    with pytest.raises(RoomFileParseError, match="second name field"):
        parse_room_lines(lines, room_id=0)


def test_parser_rejects_type_before_three_connections() -> None:
    lines = ["ROOM NAME: Magma", "CONNECTION 1: Loop", "CONNECTION 2: Group", "ROOM TYPE: MID_ROOM"]

    with pytest.raises(RoomFileParseError, match="after only 2 connections"):
        parse_room_lines(lines, room_id=0)


def test_parser_rejects_type_before_name() -> None:
    with pytest.raises(RoomFileParseError, match="role field before name"):
        parse_room_lines(["ROOM TYPE: MID_ROOM"], room_id=0)


def test_parser_rejects_connection_before_name() -> None:
    with pytest.raises(RoomFileParseError, match="connection field before name"):
        parse_room_lines(["CONNECTION 1: Loop", "ROOM NAME: Magma"], room_id=0)


def test_parser_rejects_seventh_connection() -> None:
    lines = ["ROOM NAME: Magma"] + [f"CONNECTION {index}: Room{index}" for index in range(1, 8)]

    with pytest.raises(RoomFileParseError, match="more than 6 connections"):
        parse_room_lines(lines, room_id=0)


def test_parser_requires_explicit_end_marker() -> None:
    text = VALID_ROOM_TEXT.replace("START_ROOM", "GOAL_ROOM")

    with pytest.raises(RoomFileParseError, match="unknown room type"):
        parse_room_lines(text.splitlines(), room_id=0)


def test_parser_rejects_second_type_field() -> None:
    lines = VALID_ROOM_TEXT.splitlines() + ["ROOM TYPE: MID_ROOM"]

    with pytest.raises(RoomFileParseError, match="second role field"):
        parse_room_lines(lines, room_id=0)


def test_parser_rejects_missing_type_or_name() -> None:
    with pytest.raises(RoomFileParseError, match="missing room type"):
        parse_room_lines(VALID_ROOM_TEXT.splitlines()[:-1], room_id=0)
    with pytest.raises(RoomFileParseError, match="missing name"):
        parse_room_lines([], room_id=0)


def test_parse_room_file_reports_failing_path(tmp_path: Path) -> None:
    path = _write(tmp_path / "Magma_room", "ROOM NAME: Magma\nROOM NAME: Loop\n")

    with pytest.raises(RoomFileParseError) as excinfo:
        parse_room_file(path, room_id=0)

    assert excinfo.value.path == path
    assert str(path) in str(excinfo.value)


def test_write_then_load_round_trip_preserves_names_roles_and_neighbors(tmp_path: Path) -> None:
    registry = generate_registry(GraphConfig(seed=17))

    written = write_room_files(registry, tmp_path / "rooms")
    loaded = load_room_dir(tmp_path / "rooms")

    assert len(written) == 7
    assert sorted(loaded.names()) == sorted(registry.names())
    for room in registry.rooms:
        loaded_room = loaded.by_name(room.name)
        assert loaded_room.role is room.role
        assert loaded_room.connections == room.connections
    assert topology_hash(loaded) == topology_hash(registry)
    loaded.validate()


def test_written_directory_contains_only_room_files(tmp_path: Path) -> None:
    registry = generate_registry(GraphConfig(seed=2))

    write_room_files(registry, tmp_path)

    assert sorted(path.name for path in tmp_path.iterdir()) == sorted(f"{name}_room" for name in registry.names())


def test_load_room_dir_ignores_dotfiles(tmp_path: Path) -> None:
    registry = generate_registry(GraphConfig(seed=4))
    write_room_files(registry, tmp_path)
    _write(tmp_path / ".hidden.tmp", "ROOM NAME: Bogus\n")

    loaded = load_room_dir(tmp_path)

    assert sorted(loaded.names()) == sorted(registry.names())


def test_load_room_dir_rejects_room_count_shortfall(tmp_path: Path) -> None:
    registry = generate_registry(GraphConfig(seed=5))
    write_room_files(registry, tmp_path)
    (tmp_path / room_file_name(registry.rooms[3])).unlink()

    with pytest.raises(RoomFileParseError, match="expected 7 room files, found 6"):
        load_room_dir(tmp_path)


def test_load_room_dir_rejects_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(RoomFileParseError, match="cannot open room directory"):
        load_room_dir(tmp_path / "missing")


def test_load_room_dir_names_the_failing_file(tmp_path: Path) -> None:
    registry = generate_registry(GraphConfig(seed=6))
    write_room_files(registry, tmp_path)
    broken = tmp_path / room_file_name(registry.rooms[2])
    _write(broken, broken.read_text(encoding="utf-8") + "ROOM NAME: Again\n")

    with pytest.raises(RoomFileParseError) as excinfo:
        load_room_dir(tmp_path)

    assert excinfo.value.path == broken


def test_load_room_dir_rejects_unknown_neighbor_and_duplicate_names(tmp_path: Path) -> None:
    names = ["A", "B", "C", "D"]
    for name in names:
        others = [other for other in names if other != name]
        _write(tmp_path / f"{name}_room", _room_text(name, others))
    _write(tmp_path / "A_room", _room_text("A", ["B", "C", "Z"]))

    with pytest.raises(RoomFileParseError, match="unknown room Z"):
        load_room_dir(tmp_path, expected_count=4)

    _write(tmp_path / "A_room", _room_text("B", ["A", "C", "D"]))
    with pytest.raises(RoomFileParseError, match="duplicate room name B"):
        load_room_dir(tmp_path, expected_count=4)


def test_write_room_files_reports_unwritable_target(tmp_path: Path) -> None:
    blocker = _write(tmp_path / "blocker", "not a directory")
    registry = generate_registry(GraphConfig(seed=9))

    with pytest.raises(RoomFileError, match="cannot create room directory"):
        write_room_files(registry, blocker / "rooms")


def test_load_room_dir_rejects_two_start_rooms_without_end_room(tmp_path: Path) -> None:
    names = ["A", "B", "C", "D"]
    roles = {"A": "START_ROOM", "B": "START_ROOM"}
    for name in names:
        others = [other for other in names if other != name]
        _write(tmp_path / f"{name}_room", _room_text(name, others, roles.get(name, "MID_ROOM")))

    with pytest.raises(RoomFileParseError, match="exactly one START_ROOM, found 2") as excinfo:
        load_room_dir(tmp_path, expected_count=4)

    assert excinfo.value.path == tmp_path


def test_load_room_dir_rejects_one_way_connection(tmp_path: Path) -> None:
    adjacency = {
        "A": ["B", "C", "D", "E"],
        "B": ["A", "C", "D"],
        "C": ["A", "B", "E"],
        "D": ["A", "B", "E"],
        "E": ["A", "C", "D", "B"],
    }
    roles = {"A": "START_ROOM", "E": "END_ROOM"}
    for name, connections in adjacency.items():
        _write(tmp_path / f"{name}_room", _room_text(name, connections, roles.get(name, "MID_ROOM")))

    with pytest.raises(RoomFileParseError, match="E -> B is not symmetric"):
        load_room_dir(tmp_path, expected_count=5)


def test_load_room_dir_rejects_extra_room_file(tmp_path: Path) -> None:
    registry = generate_registry(GraphConfig(seed=14))
    write_room_files(registry, tmp_path)
    _write(tmp_path / "Extra_room", _room_text("Extra", ["Magma", "Loop", "Group"]))

    with pytest.raises(RoomFileParseError, match="expected 7 room files, found 8"):
        load_room_dir(tmp_path)


def test_load_room_dir_ignores_subdirectories(tmp_path: Path) -> None:
    registry = generate_registry(GraphConfig(seed=15))
    write_room_files(registry, tmp_path)
    (tmp_path / "notes").mkdir()

    loaded = load_room_dir(tmp_path)

    assert sorted(loaded.names()) == sorted(registry.names())


def test_write_room_files_keeps_earlier_files_when_a_later_write_fails(tmp_path: Path) -> None:
    registry = generate_registry(GraphConfig(seed=12))
    target = tmp_path / "rooms"
    blocked = target / room_file_name(registry.rooms[3])
    blocked.mkdir(parents=True)

    with pytest.raises(RoomFileError, match="cannot write room file") as excinfo:
        write_room_files(registry, target)

    assert excinfo.value.path == blocked
    for room in registry.rooms[:3]:
        assert (target / room_file_name(room)).is_file()
    for room in registry.rooms[4:]:
        assert not (target / room_file_name(room)).exists()
    assert not [path for path in target.iterdir() if path.name.startswith(".")]
