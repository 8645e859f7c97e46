"""Room graph model: rooms and their directional exits."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from delve.core.types import Direction, EventType, RoomType


@dataclass(slots=True)
class RoomExit:
    """One directional exit from a room."""

    target_room_id: str
    description: str


@dataclass(slots=True)
class Room:
    """A node in a floor's graph.

    Content flags come from generation; the progress flags below them are the
    mutable subset persisted in ``RoomState``.
    """

    id: str
    name: str
    description: str
    room_type: RoomType = "chamber"
    exits: Dict[Direction, RoomExit] = field(default_factory=dict)
    has_monsters: bool = False
    is_boss_room: bool = False
    has_treasure: bool = False
    has_trap: bool = False
    has_event: bool = False
    event_type: EventType | None = None
    has_stairs_down: bool = False
    danger_rating: int = 0
    collectible_id: str | None = None

    is_explored: bool = False
    is_cleared: bool = False
    treasure_looted: bool = False
    trap_triggered: bool = False
    event_completed: bool = False
    puzzle_solved: bool = False
    riddle_answered: bool = False
    lore_collected: bool = False
    insight_granted: bool = False
    memory_triggered: bool = False
    secret_boss_defeated: bool = False

    @property
    def is_contested(self) -> bool:
        """True while monsters remain unresolved in the room."""
        return self.has_monsters and not self.is_cleared
