"""Interfaces for the systems the dungeon core delegates to.

Combat math, narrative, discovery and trap effects live outside the core; they
report back only pass/fail plus the flags the core needs.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from delve.core.types import BossStatus
from delve.domain.floor import Floor
from delve.domain.room import Room
from delve.domain.state import ExplorerState

RoomFeature = str


@dataclass(slots=True)
class CombatOutcome:
    victory: bool
    monsters_killed: int = 0
    fled: bool = False


@dataclass(slots=True)
class BossEncounterOutcome:
    engaged: bool
    status: BossStatus | None = None


@dataclass(slots=True)
class TrapOutcome:
    damage: int = 0
    gold_lost: int = 0
    status_effect: str | None = None


class CombatResolver(Protocol):
    def resolve_combat(
        self, state: ExplorerState, floor: Floor, room: Room, *, ambush: bool
    ) -> CombatOutcome:
        ...


class CollectibleDiscovery(Protocol):
    def try_discover_collectible(self, state: ExplorerState, floor: Floor, room: Room) -> bool:
        ...


class BossEncounter(Protocol):
    def try_boss_encounter(self, state: ExplorerState, floor_level: int, room: Room) -> BossEncounterOutcome:
        ...


class TrapResolver(Protocol):
    """Applies a sprung trap to ``state`` itself.

    Damage, gold loss and status effects are written by the resolver; the
    returned outcome is only reported back in the trap event.
    """

    def resolve_trap(self, state: ExplorerState, room: Room) -> TrapOutcome:
        ...


class FeatureResolver(Protocol):
    def resolve_feature(self, state: ExplorerState, room: Room, feature: RoomFeature) -> bool:
        ...


@dataclass(slots=True)
class Collaborators:
    """Bundle handed to the exploration service."""

    combat: CombatResolver
    discovery: CollectibleDiscovery
    boss: BossEncounter
    traps: TrapResolver
    features: FeatureResolver
