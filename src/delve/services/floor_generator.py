"""Deterministic floor generation from a level number."""
from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Tuple

from delve.core.config import DungeonConfig
from delve.core.rng import RNG, derive_seed
from delve.core.types import DIRECTIONS, EVENT_TYPES, OPPOSITE_DIRECTION, Direction, RoomType
from delve.data.repositories import ThemesRepository
from delve.domain import level_scaling
from delve.domain.defs import ThemeDef
from delve.domain.floor import Floor
from delve.domain.room import Room, RoomExit
from delve.domain.special_floors import SpecialFloorRegistry
from delve.services.errors import FloorIntegrityError
from delve.services.floor_graph_validator import format_issue, validate_floor_graph

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]
Link = Tuple[int, Direction, int]

_OFFSETS: Dict[Direction, Cell] = {
    "north": (0, -1),
    "south": (0, 1),
    "east": (1, 0),
    "west": (-1, 0),
}

LOOP_LINK_CHANCE = 0.2
MAX_FEATURE_ROOMS = 2

_FEATURE_ROOM_TYPES: Tuple[RoomType, ...] = (
    "shrine",
    "lore_library",
    "meditation_chamber",
    "riddle_gate",
    "puzzle_room",
)

_FEATURE_ROOM_NAMES: Dict[RoomType, str] = {
    "shrine": "Forgotten Shrine",
    "lore_library": "Lore Library",
    "meditation_chamber": "Meditation Chamber",
    "riddle_gate": "Riddle Gate",
    "puzzle_room": "Puzzle Room",
    "secret_vault": "Secret Vault",
}


def room_id_for(level: int, index: int) -> str:
    """Return the stable id of the ``index``-th room carved on ``level``."""
    return f"L{level:03d}-R{index:02d}"


class FloorGenerator:
    """Builds the room graph for a level.

    ``generate`` is a pure function of the dungeon seed and the level: the RNG
    is re-seeded from both on every call, so ids, exits, room types and content
    flags are identical across calls. The configured seed is used when the
    caller does not pass the explorer's own.
    """

    def __init__(
        self,
        *,
        themes_repo: ThemesRepository,
        special_floors: SpecialFloorRegistry,
        config: DungeonConfig | None = None,
    ) -> None:
        self._themes_repo = themes_repo
        self._special_floors = special_floors
        self._config = config or DungeonConfig()

    def generate(self, level: int, *, dungeon_seed: int | None = None) -> Floor:
        if level < 1:
            raise ValueError(f"Floor level must be >= 1 (got {level}).")
        seed = self._config.dungeon_seed if dungeon_seed is None else dungeon_seed
        rng = RNG(derive_seed(seed, level))
        theme = self._themes_repo.theme_for_level(level)
        low, high = level_scaling.room_count_range(level)
        room_count = rng.randint(low, high)

        cells, links = self._carve_layout(rng, room_count)
        rooms = [
            Room(id=room_id_for(level, index), name="", description="")
            for index in range(len(cells))
        ]
        distances = self._distances_from_entrance(len(rooms), links)
        far_order = sorted(range(1, len(rooms)), key=lambda index: (-distances[index], index))

        reserved = self._place_special_rooms(level, rooms, far_order, theme)
        self._place_feature_rooms(rng, level, rooms, reserved)
        self._populate_rooms(rng, level, rooms)
        self._name_rooms(rng, rooms, theme)
        self._link_rooms(rng, rooms, links, theme)

        special = self._special_floors.get(level)
        floor = Floor(
            level=level,
            theme_id=theme.id,
            theme_name=theme.name,
            rooms=rooms,
            entrance_room_id=rooms[0].id,
        )
        if special is not None and special.kind == "seal":
            floor.seal_type = special.subject_id
            floor.has_uncollected_seal = True

        issues = [issue for issue in validate_floor_graph(floor) if issue.severity == "ERROR"]
        if issues:
            raise FloorIntegrityError(
                f"Generated floor {level} is malformed: " + "; ".join(format_issue(i) for i in issues)
            )
        logger.debug(
            "Generated floor %s (theme=%s, rooms=%s, links=%s)", level, theme.id, len(rooms), len(links)
        )
        return floor

    @staticmethod
    def _carve_layout(rng: RNG, room_count: int) -> tuple[List[Cell], List[Link]]:
        """Grow a spanning tree over grid cells, then add a few loops."""
        cells: List[Cell] = [(0, 0)]
        occupied: Dict[Cell, int] = {(0, 0): 0}
        links: List[Link] = []
        while len(cells) < room_count:
            frontier: List[Tuple[int, Direction]] = []
            for index, (x, y) in enumerate(cells):
                for direction in DIRECTIONS:
                    dx, dy = _OFFSETS[direction]
                    if (x + dx, y + dy) not in occupied:
                        frontier.append((index, direction))
            source, direction = rng.choice(frontier)
            dx, dy = _OFFSETS[direction]
            sx, sy = cells[source]
            target = (sx + dx, sy + dy)
            occupied[target] = len(cells)
            cells.append(target)
            links.append((source, direction, occupied[target]))

        linked = {frozenset((a, b)) for a, _, b in links}
        for index, (x, y) in enumerate(cells):
            for direction in ("east", "south"):
                dx, dy = _OFFSETS[direction]
                neighbour = occupied.get((x + dx, y + dy))
                if neighbour is None or frozenset((index, neighbour)) in linked:
                    continue
                if rng.chance(LOOP_LINK_CHANCE):
                    links.append((index, direction, neighbour))
                    linked.add(frozenset((index, neighbour)))
        return cells, links

    @staticmethod
    def _distances_from_entrance(room_count: int, links: List[Link]) -> List[int]:
        adjacency: Dict[int, List[int]] = {index: [] for index in range(room_count)}
        for a, _, b in links:
            adjacency[a].append(b)
            adjacency[b].append(a)
        distances = [-1] * room_count
        distances[0] = 0
        queue = deque([0])
        while queue:
            current = queue.popleft()
            for neighbour in adjacency[current]:
                if distances[neighbour] < 0:
                    distances[neighbour] = distances[current] + 1
                    queue.append(neighbour)
        return distances

    def _place_special_rooms(
        self, level: int, rooms: List[Room], far_order: List[int], theme: ThemeDef
    ) -> set[int]:
        """Place boss, seal and stairs rooms; return the indices they occupy."""
        reserved: set[int] = set()
        special = self._special_floors.get(level)
        has_stairs = level < self._config.max_dungeon_level
        remaining = list(far_order)

        if special is not None and special.kind == "boss":
            index = remaining.pop(0)
            boss_room = rooms[index]
            boss_room.room_type = "boss_room"
            boss_room.is_boss_room = True
            boss_room.has_monsters = True
            boss_room.danger_rating = level_scaling.MAX_DANGER_RATING
            boss_room.name = theme.boss_room_name
            boss_room.has_stairs_down = has_stairs
            reserved.add(index)
            has_stairs = False

        if special is not None and special.kind == "seal":
            index = remaining.pop(0)
            seal_room = rooms[index]
            seal_room.collectible_id = special.subject_id
            seal_room.has_monsters = True
            seal_room.danger_rating = level_scaling.base_danger_rating(level)
            reserved.add(index)

        if has_stairs:
            index = remaining[0] if remaining else far_order[0]
            rooms[index].has_stairs_down = True
            reserved.add(index)
        return reserved

    @staticmethod
    def _place_feature_rooms(rng: RNG, level: int, rooms: List[Room], reserved: set[int]) -> None:
        candidates = [index for index in range(1, len(rooms)) if index not in reserved]
        rng.shuffle(candidates)
        feature_types = list(_FEATURE_ROOM_TYPES)
        if level >= level_scaling.SECRET_VAULT_MIN_LEVEL:
            feature_types.append("secret_vault")
        feature_count = min(len(candidates), rng.randint(0, MAX_FEATURE_ROOMS))
        for index in candidates[:feature_count]:
            room = rooms[index]
            room.room_type = rng.choice(feature_types)
            if room.room_type == "secret_vault":
                room.has_monsters = True
                room.has_treasure = True
                room.danger_rating = level_scaling.MAX_DANGER_RATING

    @staticmethod
    def _populate_rooms(rng: RNG, level: int, rooms: List[Room]) -> None:
        monster_chance = level_scaling.monster_chance(level)
        treasure_chance = level_scaling.treasure_chance(level)
        trap_chance = level_scaling.trap_chance(level)
        event_chance = level_scaling.event_chance(level)
        danger = level_scaling.base_danger_rating(level)
        for index, room in enumerate(rooms):
            if index == 0 or room.is_boss_room:
                continue
            if not room.has_monsters and rng.chance(monster_chance):
                room.has_monsters = True
            if room.has_monsters and room.danger_rating == 0:
                elite = 1 if rng.chance(0.2) else 0
                room.danger_rating = min(level_scaling.MAX_DANGER_RATING, danger + elite)
            if not room.has_treasure and rng.chance(treasure_chance):
                room.has_treasure = True
            if rng.chance(trap_chance):
                room.has_trap = True
            if rng.chance(event_chance):
                room.has_event = True
                room.event_type = rng.choice(EVENT_TYPES)

    @staticmethod
    def _name_rooms(rng: RNG, rooms: List[Room], theme: ThemeDef) -> None:
        seen: Dict[str, int] = {}
        for room in rooms:
            if not room.name:
                room.name = _FEATURE_ROOM_NAMES.get(room.room_type) or rng.choice(theme.room_names)
            room.description = rng.choice(theme.room_descriptions)
            seen[room.name] = seen.get(room.name, 0) + 1
            if seen[room.name] > 1:
                room.name = f"{room.name} {_roman(seen[room.name])}"

    @staticmethod
    def _link_rooms(rng: RNG, rooms: List[Room], links: List[Link], theme: ThemeDef) -> None:
        for a, direction, b in links:
            passage = rng.choice(theme.passage_descriptions)
            source, target = rooms[a], rooms[b]
            source.exits[direction] = RoomExit(
                target_room_id=target.id,
                description=f"{passage.capitalize()} leads {direction} to the {target.name}.",
            )
            back = OPPOSITE_DIRECTION[direction]
            target.exits[back] = RoomExit(
                target_room_id=source.id,
                description=f"{passage.capitalize()} leads {back} to the {source.name}.",
            )


def _roman(number: int) -> str:
    numerals = ((10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"))
    result = ""
    for value, numeral in numerals:
        while number >= value:
            result += numeral
            number -= value
    return result
