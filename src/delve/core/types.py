"""Shared type aliases for the core and domain layers."""
from typing import Dict, Literal, Tuple

Direction = Literal["north", "south", "east", "west"]
DIRECTIONS: Tuple[Direction, ...] = ("north", "south", "east", "west")
OPPOSITE_DIRECTION: Dict[Direction, Direction] = {
    "north": "south",
    "south": "north",
    "east": "west",
    "west": "east",
}

RoomType = Literal[
    "chamber",
    "shrine",
    "lore_library",
    "secret_vault",
    "meditation_chamber",
    "riddle_gate",
    "puzzle_room",
    "boss_room",
]

EventType = Literal["merchant", "fountain", "wanderer", "altar", "lost_explorer", "strange_noise"]
EVENT_TYPES: Tuple[EventType, ...] = (
    "merchant",
    "fountain",
    "wanderer",
    "altar",
    "lost_explorer",
    "strange_noise",
)

BossStatus = Literal["unmet", "corrupted", "defeated", "saved", "allied", "awakened", "consumed"]
RESOLVED_BOSS_STATUSES: Tuple[BossStatus, ...] = ("defeated", "saved", "allied", "awakened", "consumed")

SpecialFloorKind = Literal["seal", "boss"]

ExplorationMode = Literal["overview", "in_room"]

RoomAction = Literal["fight", "loot", "investigate", "examine", "descend", "rest"]

__all__ = [
    "BossStatus",
    "DIRECTIONS",
    "Direction",
    "EVENT_TYPES",
    "EventType",
    "ExplorationMode",
    "OPPOSITE_DIRECTION",
    "RESOLVED_BOSS_STATUSES",
    "RoomAction",
    "RoomType",
    "SpecialFloorKind",
]
