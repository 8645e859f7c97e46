"""Persisted per-floor memory: the sparse patch applied to a regenerated floor."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Tuple

from delve.domain.room import Room

PERSISTED_ROOM_FLAGS: Tuple[str, ...] = (
    "is_explored",
    "is_cleared",
    "treasure_looted",
    "trap_triggered",
    "event_completed",
    "puzzle_solved",
    "riddle_answered",
    "lore_collected",
    "insight_granted",
    "memory_triggered",
    "secret_boss_defeated",
)

# Respawn only ever resets this flag.
RESPAWNING_ROOM_FLAGS: Tuple[str, ...] = ("is_cleared",)


@dataclass(slots=True)
class RoomState:
    """Persisted progress flags for one room."""

    room_id: str
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

    @classmethod
    def from_room(cls, room: Room) -> "RoomState":
        return cls(room_id=room.id, **{name: getattr(room, name) for name in PERSISTED_ROOM_FLAGS})

    def apply_to(self, room: Room) -> None:
        for name in PERSISTED_ROOM_FLAGS:
            setattr(room, name, getattr(self, name))

    def flags(self) -> Dict[str, bool]:
        return {name: getattr(self, name) for name in PERSISTED_ROOM_FLAGS}


@dataclass(slots=True)
class FloorState:
    """The permanent memory of one visited level.

    Created on first visit, rewritten on every exit, never deleted.
    """

    floor_level: int
    last_visited_at: datetime | None = None
    current_room_id: str | None = None
    ever_cleared: bool = False
    last_cleared_at: datetime | None = None
    is_permanently_clear: bool = False
    boss_defeated: bool = False
    room_states: Dict[str, RoomState] = field(default_factory=dict)

    def hours_since_visit(self, now: datetime) -> float | None:
        if self.last_visited_at is None:
            return None
        return (now - self.last_visited_at).total_seconds() / 3600.0

    def should_respawn(self, now: datetime, respawn_hours: float) -> bool:
        """Return True when enough time has passed for monsters to return."""
        if self.is_permanently_clear:
            return False
        elapsed = self.hours_since_visit(now)
        if elapsed is None:
            return False
        return elapsed >= respawn_hours
