"""Domain-level explorer state tracking."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set

from delve.core.rng import RNG
from delve.core.types import ExplorationMode
from delve.domain.floor import Floor
from delve.domain.floor_state import FloorState
from delve.domain.quest_state import QuestState


@dataclass
class ExplorerState:
    """Everything the dungeon core knows about the single explorer.

    ``floor`` is the live, regenerated floor and is never persisted; the
    ``floor_states`` table is. ``dungeon_seed`` is bound on first entry and
    fixes the layout every stored room id refers to.
    """

    seed: int
    rng: RNG
    dungeon_seed: int | None = None
    player_level: int = 1
    agility: int = 10
    hp: int = 100
    max_hp: int = 100
    gold: int = 0
    mode: ExplorationMode = "overview"
    current_floor_level: int | None = None
    floor: Floor | None = None
    floor_states: Dict[int, FloorState] = field(default_factory=dict)
    cleared_special_floors: Set[int] = field(default_factory=set)
    quest: QuestState = field(default_factory=QuestState)
    status_effects: List[str] = field(default_factory=list)

    @property
    def in_dungeon(self) -> bool:
        return self.floor is not None
