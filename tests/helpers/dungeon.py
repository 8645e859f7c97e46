from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List

from delve.core.config import DungeonConfig
from delve.core.rng import RNG
from delve.core.types import BossStatus
from delve.data.repositories import SpecialFloorsRepository, ThemesRepository
from delve.domain.defs import SpecialFloorDef
from delve.domain.floor import Floor
from delve.domain.room import Room, RoomExit
from delve.domain.special_floors import SpecialFloorRegistry
from delve.domain.state import ExplorerState
from delve.services.accessibility_gate import AccessibilityGate
from delve.services.clearance_evaluator import ClearanceEvaluator
from delve.services.collaborators import BossEncounterOutcome, Collaborators, CombatOutcome, TrapOutcome
from delve.services.dungeon_service import DungeonService
from delve.services.exploration_service import ExplorationService
from delve.services.floor_generator import FloorGenerator
from delve.services.floor_restoration import FloorRestorationService

START_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = START_TIME) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, hours: float) -> None:
        self.now = self.now + timedelta(hours=hours)


class FakeCombat:
    def __init__(self, victory: bool = True, monsters_killed: int = 2) -> None:
        self.victory = victory
        self.monsters_killed = monsters_killed
        self.calls: List[tuple[str, bool]] = []

    def resolve_combat(self, state, floor, room, *, ambush):
        self.calls.append((room.id, ambush))
        return CombatOutcome(victory=self.victory, monsters_killed=self.monsters_killed, fled=not self.victory)


class FakeDiscovery:
    def __init__(self, found: bool = True) -> None:
        self.found = found
        self.calls: List[str] = []

    def try_discover_collectible(self, state, floor, room):
        self.calls.append(room.id)
        return self.found


class FakeBoss:
    def __init__(self, status: BossStatus | None = "defeated", engaged: bool = True) -> None:
        self.status = status
        self.engaged = engaged
        self.calls: List[tuple[int, str]] = []

    def try_boss_encounter(self, state, floor_level, room):
        self.calls.append((floor_level, room.id))
        return BossEncounterOutcome(engaged=self.engaged, status=self.status)


class FakeTraps:
    def __init__(self, damage: int = 5, gold_lost: int = 0, status_effect: str | None = None) -> None:
        self.damage = damage
        self.gold_lost = gold_lost
        self.status_effect = status_effect
        self.calls: List[str] = []

    def resolve_trap(self, state, room):
        self.calls.append(room.id)
        state.hp = max(0, state.hp - self.damage)
        state.gold = max(0, state.gold - self.gold_lost)
        if self.status_effect is not None:
            state.status_effects.append(self.status_effect)
        return TrapOutcome(damage=self.damage, gold_lost=self.gold_lost, status_effect=self.status_effect)


class FakeFeatures:
    def __init__(self, success: bool = True) -> None:
        self.success = success
        self.calls: List[tuple[str, str]] = []

    def resolve_feature(self, state, room, feature):
        self.calls.append((room.id, feature))
        return self.success


def make_collaborators(
    *,
    combat: FakeCombat | None = None,
    discovery: FakeDiscovery | None = None,
    boss: FakeBoss | None = None,
    traps: FakeTraps | None = None,
    features: FakeFeatures | None = None,
) -> Collaborators:
    return Collaborators(
        combat=combat or FakeCombat(),
        discovery=discovery or FakeDiscovery(),
        boss=boss or FakeBoss(),
        traps=traps or FakeTraps(),
        features=features or FakeFeatures(),
    )


def synthetic_registry() -> SpecialFloorRegistry:
    """Seal on 3, boss on 5, seal on 8."""
    return SpecialFloorRegistry(
        [
            SpecialFloorDef(level=3, kind="seal", subject_id="seal_of_testing", name="Seal of Testing"),
            SpecialFloorDef(level=5, kind="boss", subject_id="test_warden", name="The Test Warden"),
            SpecialFloorDef(level=8, kind="seal", subject_id="seal_of_depth", name="Seal of Depth"),
        ]
    )


def real_registry() -> SpecialFloorRegistry:
    return SpecialFloorsRepository().registry()


def make_state(*, seed: int = 7, player_level: int = 1, agility: int = 0) -> ExplorerState:
    return ExplorerState(seed=seed, rng=RNG(seed), player_level=player_level, agility=agility)


@dataclass
class Engine:
    config: DungeonConfig
    clock: FixedClock
    registry: SpecialFloorRegistry
    evaluator: ClearanceEvaluator
    generator: FloorGenerator
    restoration: FloorRestorationService
    gate: AccessibilityGate
    exploration: ExplorationService
    dungeon: DungeonService
    collaborators: Collaborators


def build_engine(
    *,
    registry: SpecialFloorRegistry | None = None,
    config: DungeonConfig | None = None,
    collaborators: Collaborators | None = None,
    clock: FixedClock | None = None,
) -> Engine:
    config = config or DungeonConfig(ambush_chance=0.0)
    clock = clock or FixedClock()
    registry = registry if registry is not None else synthetic_registry()
    collaborators = collaborators or make_collaborators()
    evaluator = ClearanceEvaluator(registry)
    generator = FloorGenerator(themes_repo=ThemesRepository(), special_floors=registry, config=config)
    restoration = FloorRestorationService(generator=generator, evaluator=evaluator, config=config, clock=clock)
    gate = AccessibilityGate(registry)
    exploration = ExplorationService(evaluator=evaluator, collaborators=collaborators, config=config, clock=clock)
    dungeon = DungeonService(
        restoration=restoration,
        gate=gate,
        evaluator=evaluator,
        exploration=exploration,
        config=config,
    )
    return Engine(
        config=config,
        clock=clock,
        registry=registry,
        evaluator=evaluator,
        generator=generator,
        restoration=restoration,
        gate=gate,
        exploration=exploration,
        dungeon=dungeon,
        collaborators=collaborators,
    )


def link(a: Room, direction: str, b: Room) -> None:
    opposite = {"north": "south", "south": "north", "east": "west", "west": "east"}[direction]
    a.exits[direction] = RoomExit(target_room_id=b.id, description=f"A passage leads {direction}.")  # type: ignore[index]
    b.exits[opposite] = RoomExit(target_room_id=a.id, description=f"A passage leads {opposite}.")  # type: ignore[index]


def corridor_floor(level: int, *rooms: Room) -> Floor:
    """Chain the rooms west-to-east; the first one is the entrance."""
    for left, right in zip(rooms, rooms[1:]):
        link(left, "east", right)
    return Floor(
        level=level,
        theme_id="catacombs",
        theme_name="Catacombs",
        rooms=list(rooms),
        entrance_room_id=rooms[0].id,
    )


def place_on_floor(state: ExplorerState, floor: Floor) -> None:
    state.floor = floor
    state.current_floor_level = floor.level
    state.mode = "overview"


def clear_every_room(floor: Floor) -> None:
    for room in floor.rooms:
        room.is_explored = True
        room.is_cleared = True
