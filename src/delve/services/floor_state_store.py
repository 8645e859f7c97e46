"""Per-explorer table of persisted floor states."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterator, List

from delve.domain.floor import Floor
from delve.domain.floor_state import FloorState, RoomState


class FloorStateStore:
    """Wraps the ``level -> FloorState`` table held on the explorer.

    Restoration and the gate only read through ``get``; the exploration
    routines own every write.
    """

    def __init__(self, states: Dict[int, FloorState] | None = None) -> None:
        self._states: Dict[int, FloorState] = states if states is not None else {}

    def get(self, level: int) -> FloorState | None:
        return self._states.get(level)

    def has(self, level: int) -> bool:
        return level in self._states

    def levels(self) -> List[int]:
        return sorted(self._states)

    def __iter__(self) -> Iterator[FloorState]:
        for level in self.levels():
            yield self._states[level]

    def __len__(self) -> int:
        return len(self._states)

    def create(self, level: int, now: datetime) -> FloorState:
        """Create the state for a first visit; an existing state is returned untouched."""
        existing = self._states.get(level)
        if existing is not None:
            return existing
        state = FloorState(floor_level=level, last_visited_at=now)
        self._states[level] = state
        return state

    def snapshot(self, floor: Floor, state: FloorState) -> None:
        """Copy every room's persisted flags and the explorer position into ``state``."""
        state.room_states = {room.id: RoomState.from_room(room) for room in floor.rooms}
        state.current_room_id = floor.current_room_id
        state.boss_defeated = state.boss_defeated or floor.boss_defeated

    def reset_monsters(self, level: int) -> FloorState:
        """Forget every room's cleared flag so monsters return on the next visit."""
        state = self._states[level]
        for room_state in state.room_states.values():
            room_state.is_cleared = False
        state.last_cleared_at = None
        return state
