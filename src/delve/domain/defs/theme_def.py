"""Floor theme definition data structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(slots=True)
class ThemeDef:
    """Describes the look of a band of dungeon levels."""

    id: str
    name: str
    min_level: int
    max_level: int
    room_names: Tuple[str, ...]
    room_descriptions: Tuple[str, ...]
    passage_descriptions: Tuple[str, ...]
    boss_room_name: str

    def covers(self, level: int) -> bool:
        return self.min_level <= level <= self.max_level
