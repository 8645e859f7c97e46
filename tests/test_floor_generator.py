from __future__ import annotations

import pytest

from delve.core.config import DungeonConfig
from delve.data.repositories import ThemesRepository
from delve.domain.floor import Floor
from delve.domain.special_floors import SpecialFloorRegistry
from delve.services.floor_generator import FloorGenerator, room_id_for
from delve.services.floor_graph_validator import validate_floor_graph

from tests.helpers.dungeon import real_registry


def _generator(
    registry: SpecialFloorRegistry | None = None, config: DungeonConfig | None = None
) -> FloorGenerator:
    return FloorGenerator(
        themes_repo=ThemesRepository(),
        special_floors=registry if registry is not None else real_registry(),
        config=config,
    )


def _signature(floor: Floor) -> list[tuple]:
    return [
        (
            room.id,
            room.name,
            room.room_type,
            tuple(sorted((direction, room_exit.target_room_id) for direction, room_exit in room.exits.items())),
            room.has_monsters,
            room.is_boss_room,
            room.has_treasure,
            room.has_trap,
            room.has_event,
            room.event_type,
            room.has_stairs_down,
            room.danger_rating,
            room.collectible_id,
        )
        for room in floor.rooms
    ]


@pytest.mark.parametrize("level", [1, 14, 15, 25, 57, 100])
def test_generate_is_deterministic_per_level(level: int) -> None:
    first = _generator().generate(level)
    second = _generator().generate(level)
    assert _signature(first) == _signature(second)
    assert first.entrance_room_id == second.entrance_room_id


def test_generate_does_not_depend_on_call_order() -> None:
    generator = _generator()
    generator.generate(3)
    generator.generate(40)
    assert _signature(generator.generate(7)) == _signature(_generator().generate(7))


def test_dungeon_seed_changes_layout() -> None:
    floor_a = _generator(config=DungeonConfig(dungeon_seed=1)).generate(10)
    floor_b = _generator(config=DungeonConfig(dungeon_seed=2)).generate(10)
    assert _signature(floor_a) != _signature(floor_b)


def test_room_ids_are_level_scoped() -> None:
    floor = _generator().generate(7)
    assert floor.entrance_room_id == room_id_for(7, 0) == "L007-R00"
    assert all(room_id.startswith("L007-R") for room_id in floor.room_ids())
    assert len(set(floor.room_ids())) == len(floor.rooms)


def test_every_floor_is_well_formed() -> None:
    generator = _generator()
    for level in range(1, 101):
        floor = generator.generate(level)
        issues = validate_floor_graph(floor)
        assert [issue for issue in issues if issue.severity == "ERROR"] == [], level
        assert not floor.entrance.has_monsters
        assert all(0 <= room.danger_rating <= 3 for room in floor.rooms)


def test_ordinary_floor_has_one_staircase_and_no_boss() -> None:
    floor = _generator().generate(24)
    assert floor.boss_room is None
    assert sum(1 for room in floor.rooms if room.has_stairs_down) == 1
    assert not floor.entrance.has_stairs_down


def test_boss_floor_places_single_boss_room_with_stairs() -> None:
    floor = _generator().generate(25)
    boss_rooms = [room for room in floor.rooms if room.is_boss_room]

    assert len(boss_rooms) == 1
    boss_room = boss_rooms[0]
    assert boss_room.room_type == "boss_room"
    assert boss_room.has_monsters
    assert boss_room.danger_rating == 3
    assert boss_room.has_stairs_down
    assert boss_room.id != floor.entrance_room_id
    assert floor.seal_type is None


def test_seal_floor_holds_its_collectible() -> None:
    floor = _generator().generate(15)
    holders = [room for room in floor.rooms if room.collectible_id is not None]

    assert floor.seal_type == "seal_of_creation"
    assert floor.has_uncollected_seal
    assert not floor.seal_collected
    assert [room.collectible_id for room in holders] == ["seal_of_creation"]
    assert holders[0].has_monsters
    assert floor.boss_room is None


def test_synthetic_registry_drives_special_rooms() -> None:
    registry = SpecialFloorRegistry()
    floor = _generator(registry=registry).generate(25)
    assert floor.boss_room is None


def test_deepest_floor_has_no_stairs() -> None:
    floor = _generator().generate(100)
    assert not any(room.has_stairs_down for room in floor.rooms)


def test_theme_follows_level_band() -> None:
    generator = _generator()
    assert generator.generate(5).theme_id == "catacombs"
    assert generator.generate(97).theme_id == "abyssal_void"


def test_generate_rejects_non_positive_level() -> None:
    with pytest.raises(ValueError):
        _generator().generate(0)
