"""Live floor model assembled by generation and restoration."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from delve.domain.room import Room


@dataclass
class Floor:
    """One dungeon level and its room graph."""

    level: int
    theme_id: str
    theme_name: str
    rooms: List[Room]
    entrance_room_id: str
    current_room_id: str | None = None
    monsters_killed: int = 0
    treasures_found: int = 0
    boss_defeated: bool = False
    has_uncollected_seal: bool = False
    seal_collected: bool = False
    seal_type: str | None = None
    _index: Dict[str, Room] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._index = {room.id: room for room in self.rooms}

    def find_room(self, room_id: str) -> Room | None:
        return self._index.get(room_id)

    def room_ids(self) -> List[str]:
        return [room.id for room in self.rooms]

    @property
    def entrance(self) -> Room:
        return self._index[self.entrance_room_id]

    @property
    def current_room(self) -> Room | None:
        if self.current_room_id is None:
            return None
        return self._index.get(self.current_room_id)

    @property
    def boss_room(self) -> Room | None:
        return next((room for room in self.rooms if room.is_boss_room), None)

    @property
    def explored_count(self) -> int:
        return sum(1 for room in self.rooms if room.is_explored)

    @property
    def cleared_count(self) -> int:
        return sum(1 for room in self.rooms if room.is_cleared)

    def all_monster_rooms_cleared(self) -> bool:
        return all(room.is_cleared for room in self.rooms if room.has_monsters)
