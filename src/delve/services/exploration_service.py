"""Room-by-room exploration of the live floor."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Tuple

from delve.core.clock import Clock, utc_now
from delve.core.config import DungeonConfig
from delve.core.types import DIRECTIONS, Direction, EventType, RoomAction, RoomType
from delve.domain.floor import Floor
from delve.domain.room import Room
from delve.domain.state import ExplorerState
from delve.services.clearance_evaluator import ClearanceEvaluator
from delve.services.collaborators import Collaborators
from delve.services.errors import FloorIntegrityError, InvalidActionError
from delve.services.floor_state_store import FloorStateStore

logger = logging.getLogger(__name__)

_DIRECTION_ALIASES: Dict[str, Direction] = {
    "n": "north",
    "s": "south",
    "e": "east",
    "w": "west",
}

# Room type -> (feature handed to the resolver, room flag recording completion).
ROOM_FEATURES: Dict[RoomType, Tuple[str, str]] = {
    "puzzle_room": ("puzzle", "puzzle_solved"),
    "riddle_gate": ("riddle", "riddle_answered"),
    "lore_library": ("lore", "lore_collected"),
    "meditation_chamber": ("meditation", "insight_granted"),
    "shrine": ("memory", "memory_triggered"),
    "secret_vault": ("secret_boss", "secret_boss_defeated"),
}

REST_HEAL_FRACTION = 4


@dataclass(slots=True)
class ExitView:
    direction: Direction
    description: str
    target_explored: bool


@dataclass(slots=True)
class RoomView:
    """Presentation data for the explorer's current room."""

    id: str
    name: str
    description: str
    room_type: RoomType
    exits: Tuple[ExitView, ...]
    is_cleared: bool
    is_contested: bool
    danger_rating: int
    has_stairs_down: bool
    available_actions: Tuple[RoomAction, ...]


@dataclass(slots=True)
class FloorOverviewView:
    """Floor summary shown before entering any room."""

    level: int
    theme_name: str
    room_count: int
    explored_count: int
    cleared_count: int
    is_cleared: bool
    requires_clear: bool
    has_uncollected_seal: bool
    boss_defeated: bool
    resume_room_id: str | None


@dataclass(slots=True)
class ExplorationEvent:
    """Base class for exploration events."""


@dataclass(slots=True)
class RoomEnteredEvent(ExplorationEvent):
    room_id: str
    room_name: str
    first_visit: bool


@dataclass(slots=True)
class TrapSprungEvent(ExplorationEvent):
    room_id: str
    evaded: bool
    damage: int = 0
    gold_lost: int = 0
    status_effect: str | None = None


@dataclass(slots=True)
class AmbushEvent(ExplorationEvent):
    room_id: str


@dataclass(slots=True)
class CombatResolvedEvent(ExplorationEvent):
    room_id: str
    victory: bool
    monsters_killed: int
    fled: bool
    ambush: bool


@dataclass(slots=True)
class BossEncounterEvent(ExplorationEvent):
    room_id: str
    boss_id: str | None
    engaged: bool
    status: str | None
    resolved: bool


@dataclass(slots=True)
class CollectibleFoundEvent(ExplorationEvent):
    room_id: str
    collectible_id: str


@dataclass(slots=True)
class TreasureLootedEvent(ExplorationEvent):
    room_id: str
    gold: int


@dataclass(slots=True)
class EventInvestigatedEvent(ExplorationEvent):
    room_id: str
    event_type: EventType | None


@dataclass(slots=True)
class FeatureResolvedEvent(ExplorationEvent):
    room_id: str
    feature: str
    success: bool


@dataclass(slots=True)
class DescendRequestedEvent(ExplorationEvent):
    from_level: int


@dataclass(slots=True)
class RestedEvent(ExplorationEvent):
    room_id: str
    hp_restored: int


@dataclass(slots=True)
class FloorClearedEvent(ExplorationEvent):
    level: int
    first_clear: bool
    permanent: bool
    bonus_gold: int


@dataclass(slots=True)
class ExplorationResult:
    """Return payload from an exploration command."""

    events: List[ExplorationEvent]
    room_view: RoomView | None


@dataclass(slots=True)
class MoveDecision:
    allowed: bool
    reason: str | None = None


@dataclass(slots=True)
class ExitSaveResult:
    level: int
    cleared: bool
    first_clear: bool
    permanently_clear: bool
    bonus_gold: int
    events: List[ExplorationEvent] = field(default_factory=list)


class ExplorationService:
    """Overview/in-room state machine over the explorer's live floor."""

    def __init__(
        self,
        *,
        evaluator: ClearanceEvaluator,
        collaborators: Collaborators,
        config: DungeonConfig | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._evaluator = evaluator
        self._collaborators = collaborators
        self._config = config or DungeonConfig()
        self._clock = clock
        self._actions: Dict[RoomAction, Callable[[ExplorerState, Floor, Room], List[ExplorationEvent]]] = {
            "fight": self._fight,
            "loot": self._loot,
            "investigate": self._investigate,
            "examine": self._examine,
            "descend": self._descend,
            "rest": self._rest,
        }

    def begin_floor(self, state: ExplorerState) -> FloorOverviewView:
        """Reset to the overview mode for a freshly loaded floor."""
        self._require_floor(state)
        state.mode = "overview"
        return self.get_overview(state)

    def get_overview(self, state: ExplorerState) -> FloorOverviewView:
        floor = self._require_floor(state)
        return FloorOverviewView(
            level=floor.level,
            theme_name=floor.theme_name,
            room_count=len(floor.rooms),
            explored_count=floor.explored_count,
            cleared_count=floor.cleared_count,
            is_cleared=self._evaluator.is_floor_cleared(floor, floor.level, state.quest),
            requires_clear=self._evaluator.requires_floor_clear(floor.level),
            has_uncollected_seal=floor.has_uncollected_seal,
            boss_defeated=floor.boss_defeated,
            resume_room_id=floor.current_room_id,
        )

    def get_room_view(self, state: ExplorerState) -> RoomView:
        floor, room = self._require_room(state)
        return self._build_room_view(floor, room)

    def enter_rooms(self, state: ExplorerState) -> ExplorationResult:
        """Leave the overview and step into the stored room, or the entrance."""
        floor = self._require_floor(state)
        if state.mode == "in_room":
            raise InvalidActionError("You are already exploring the rooms.")
        room = floor.current_room or floor.entrance
        floor.current_room_id = room.id
        state.mode = "in_room"
        events: List[ExplorationEvent] = [
            RoomEnteredEvent(room_id=room.id, room_name=room.name, first_visit=not room.is_explored)
        ]
        events.extend(self._arrive(state, floor, room))
        return ExplorationResult(events=events, room_view=self._build_room_view(floor, room))

    def return_to_overview(self, state: ExplorerState) -> FloorOverviewView:
        self._require_floor(state)
        state.mode = "overview"
        return self.get_overview(state)

    def can_move(self, state: ExplorerState, direction: str) -> MoveDecision:
        if state.floor is None or state.mode != "in_room" or state.floor.current_room is None:
            return MoveDecision(allowed=False, reason="You are not inside a room.")
        resolved = self._normalize_direction(direction)
        if resolved is None:
            return MoveDecision(allowed=False, reason=f"'{direction}' is not a direction.")
        if resolved not in state.floor.current_room.exits:
            return MoveDecision(allowed=False, reason=f"You can't go {resolved} from here.")
        return MoveDecision(allowed=True)

    def move(self, state: ExplorerState, direction: str) -> ExplorationResult:
        decision = self.can_move(state, direction)
        if not decision.allowed:
            raise InvalidActionError(decision.reason or "You can't go that way.")
        floor, room = self._require_room(state)
        resolved = self._normalize_direction(direction)
        assert resolved is not None
        room_exit = room.exits[resolved]
        target = floor.find_room(room_exit.target_room_id)
        if target is None:
            raise FloorIntegrityError(
                f"Exit {resolved} of room {room.id} on floor {floor.level} "
                f"points to missing room {room_exit.target_room_id}."
            )
        floor.current_room_id = target.id
        events: List[ExplorationEvent] = [
            RoomEnteredEvent(room_id=target.id, room_name=target.name, first_visit=not target.is_explored)
        ]
        events.extend(self._arrive(state, floor, target))
        return ExplorationResult(events=events, room_view=self._build_room_view(floor, target))

    def available_actions(self, floor: Floor, room: Room) -> Tuple[RoomAction, ...]:
        actions: List[RoomAction] = []
        if room.is_contested:
            actions.append("fight")
        else:
            if room.has_treasure and not room.treasure_looted:
                actions.append("loot")
            if room.has_event and not room.event_completed:
                actions.append("investigate")
            if self._has_examinable(floor, room):
                actions.append("examine")
            actions.append("rest")
        if room.has_stairs_down:
            actions.append("descend")
        return tuple(actions)

    def perform_action(self, state: ExplorerState, action: str) -> ExplorationResult:
        floor, room = self._require_room(state)
        handler = self._actions.get(action.strip().lower())  # type: ignore[arg-type]
        if handler is None:
            raise InvalidActionError(f"Unknown action '{action}'.")
        events = handler(state, floor, room)
        return ExplorationResult(events=events, room_view=self._build_room_view(floor, room))

    def exit_floor(self, state: ExplorerState) -> ExitSaveResult:
        """Persist the live floor into the floor state table."""
        floor = self._require_floor(state)
        now = self._clock()
        store = FloorStateStore(state.floor_states)
        floor_state = store.create(floor.level, now)
        cleared = self._evaluator.is_floor_cleared(floor, floor.level, state.quest)
        first_clear = False
        bonus_gold = 0
        if cleared and not floor_state.ever_cleared:
            floor_state.ever_cleared = True
            floor_state.last_cleared_at = now
            first_clear = True
            bonus_gold = self._config.first_clear_bonus_per_level * floor.level
            state.gold += bonus_gold
        if cleared and self._evaluator.requires_floor_clear(floor.level):
            floor_state.is_permanently_clear = True
            state.cleared_special_floors.add(floor.level)
        store.snapshot(floor, floor_state)
        floor_state.last_visited_at = now

        events: List[ExplorationEvent] = []
        if first_clear:
            events.append(
                FloorClearedEvent(
                    level=floor.level,
                    first_clear=True,
                    permanent=floor_state.is_permanently_clear,
                    bonus_gold=bonus_gold,
                )
            )
            logger.info(
                "Floor %s cleared for the first time (permanent=%s)",
                floor.level,
                floor_state.is_permanently_clear,
            )
        return ExitSaveResult(
            level=floor.level,
            cleared=cleared,
            first_clear=first_clear,
            permanently_clear=floor_state.is_permanently_clear,
            bonus_gold=bonus_gold,
            events=events,
        )

    def _arrive(self, state: ExplorerState, floor: Floor, room: Room) -> List[ExplorationEvent]:
        """Run first-visit hooks for the room just entered.

        Seal discovery runs on the first visit even while the room is
        contested; seal rooms are always guarded. A missed seal can only be
        retried through ``examine`` once the room is cleared.
        """
        events: List[ExplorationEvent] = []
        first_visit = not room.is_explored
        room.is_explored = True
        if first_visit and room.has_trap and not room.trap_triggered:
            events.append(self._spring_trap(state, room))
        if not room.has_monsters:
            room.is_cleared = True
        if room.is_boss_room:
            if first_visit:
                events.extend(self._boss_encounter(state, floor, room))
        elif room.is_contested and state.rng.chance(self._config.ambush_chance):
            events.append(AmbushEvent(room_id=room.id))
            events.extend(self._run_combat(state, floor, room, ambush=True))
        if first_visit and room.collectible_id and floor.has_uncollected_seal:
            events.extend(self._discover_collectible(state, floor, room))
        return events

    def _spring_trap(self, state: ExplorerState, room: Room) -> TrapSprungEvent:
        room.trap_triggered = True
        evade_chance = min(state.agility / 100.0, self._config.trap_evasion_cap)
        if state.rng.chance(evade_chance):
            return TrapSprungEvent(room_id=room.id, evaded=True)
        outcome = self._collaborators.traps.resolve_trap(state, room)
        return TrapSprungEvent(
            room_id=room.id,
            evaded=False,
            damage=outcome.damage,
            gold_lost=outcome.gold_lost,
            status_effect=outcome.status_effect,
        )

    def _run_combat(self, state: ExplorerState, floor: Floor, room: Room, *, ambush: bool) -> List[ExplorationEvent]:
        outcome = self._collaborators.combat.resolve_combat(state, floor, room, ambush=ambush)
        # Boss rooms only clear through a resolved boss status, never through plain combat.
        if outcome.victory and not room.is_boss_room:
            room.is_cleared = True
            floor.monsters_killed += outcome.monsters_killed
        return [
            CombatResolvedEvent(
                room_id=room.id,
                victory=outcome.victory,
                monsters_killed=outcome.monsters_killed,
                fled=outcome.fled,
                ambush=ambush,
            )
        ]

    def _boss_encounter(self, state: ExplorerState, floor: Floor, room: Room) -> List[ExplorationEvent]:
        definition = self._evaluator.special_floors.get(floor.level)
        boss_id = definition.subject_id if definition is not None and definition.kind == "boss" else None
        outcome = self._collaborators.boss.try_boss_encounter(state, floor.level, room)
        if boss_id is not None and outcome.status is not None:
            state.quest.set_boss_status(boss_id, outcome.status)
        resolved = self._evaluator.boss_resolved(floor.level, state.quest)
        if resolved:
            room.is_cleared = True
            floor.boss_defeated = True
        return [
            BossEncounterEvent(
                room_id=room.id,
                boss_id=boss_id,
                engaged=outcome.engaged,
                status=outcome.status,
                resolved=resolved,
            )
        ]

    def _discover_collectible(self, state: ExplorerState, floor: Floor, room: Room) -> List[ExplorationEvent]:
        assert room.collectible_id is not None
        if not self._collaborators.discovery.try_discover_collectible(state, floor, room):
            return []
        state.quest.record_seal(room.collectible_id)
        floor.seal_collected = True
        floor.has_uncollected_seal = False
        return [CollectibleFoundEvent(room_id=room.id, collectible_id=room.collectible_id)]

    def _fight(self, state: ExplorerState, floor: Floor, room: Room) -> List[ExplorationEvent]:
        if not room.is_contested:
            raise InvalidActionError("There is nothing here to fight.")
        if room.is_boss_room:
            return self._boss_encounter(state, floor, room)
        return self._run_combat(state, floor, room, ambush=False)

    def _loot(self, state: ExplorerState, floor: Floor, room: Room) -> List[ExplorationEvent]:
        if not room.has_treasure:
            raise InvalidActionError("There is no treasure here.")
        if room.treasure_looted:
            raise InvalidActionError("You have already looted this room.")
        if room.is_contested:
            raise InvalidActionError("Monsters still guard the treasure.")
        base = floor.level * 10
        gold = state.rng.randint(base, base * 2 + 10 * room.danger_rating)
        room.treasure_looted = True
        floor.treasures_found += 1
        state.gold += gold
        return [TreasureLootedEvent(room_id=room.id, gold=gold)]

    def _investigate(self, state: ExplorerState, floor: Floor, room: Room) -> List[ExplorationEvent]:
        if not room.has_event:
            raise InvalidActionError("There is nothing unusual here.")
        if room.event_completed:
            raise InvalidActionError("You have already dealt with what was here.")
        if room.is_contested:
            raise InvalidActionError("Not while monsters lurk nearby.")
        room.event_completed = True
        return [EventInvestigatedEvent(room_id=room.id, event_type=room.event_type)]

    def _examine(self, state: ExplorerState, floor: Floor, room: Room) -> List[ExplorationEvent]:
        """Retry a missed seal, otherwise resolve the room's feature. Refused in contested rooms."""
        if room.is_contested:
            raise InvalidActionError("Not while monsters lurk nearby.")
        if room.collectible_id and floor.has_uncollected_seal:
            events = self._discover_collectible(state, floor, room)
            if events:
                return events
        feature = ROOM_FEATURES.get(room.room_type)
        if feature is None:
            raise InvalidActionError("There is nothing more to examine here.")
        feature_name, flag = feature
        if getattr(room, flag):
            raise InvalidActionError("You have already unravelled this room's secret.")
        success = self._collaborators.features.resolve_feature(state, room, feature_name)
        if success:
            setattr(room, flag, True)
        return [FeatureResolvedEvent(room_id=room.id, feature=feature_name, success=success)]

    def _descend(self, state: ExplorerState, floor: Floor, room: Room) -> List[ExplorationEvent]:
        if not room.has_stairs_down:
            raise InvalidActionError("There are no stairs down here.")
        return [DescendRequestedEvent(from_level=floor.level)]

    def _rest(self, state: ExplorerState, floor: Floor, room: Room) -> List[ExplorationEvent]:
        if room.is_contested:
            raise InvalidActionError("You cannot rest with monsters nearby.")
        if state.hp >= state.max_hp:
            raise InvalidActionError("You are already fully rested.")
        restored = min(state.max_hp - state.hp, max(1, state.max_hp // REST_HEAL_FRACTION))
        state.hp += restored
        return [RestedEvent(room_id=room.id, hp_restored=restored)]

    def _has_examinable(self, floor: Floor, room: Room) -> bool:
        if room.collectible_id and floor.has_uncollected_seal:
            return True
        feature = ROOM_FEATURES.get(room.room_type)
        return feature is not None and not getattr(room, feature[1])

    def _build_room_view(self, floor: Floor, room: Room) -> RoomView:
        exits = []
        for direction in DIRECTIONS:
            room_exit = room.exits.get(direction)
            if room_exit is None:
                continue
            target = floor.find_room(room_exit.target_room_id)
            exits.append(
                ExitView(
                    direction=direction,
                    description=room_exit.description,
                    target_explored=bool(target and target.is_explored),
                )
            )
        return RoomView(
            id=room.id,
            name=room.name,
            description=room.description,
            room_type=room.room_type,
            exits=tuple(exits),
            is_cleared=room.is_cleared,
            is_contested=room.is_contested,
            danger_rating=room.danger_rating,
            has_stairs_down=room.has_stairs_down,
            available_actions=self.available_actions(floor, room),
        )

    @staticmethod
    def _normalize_direction(direction: str) -> Direction | None:
        key = direction.strip().lower()
        if key in DIRECTIONS:
            return key  # type: ignore[return-value]
        return _DIRECTION_ALIASES.get(key)

    @staticmethod
    def _require_floor(state: ExplorerState) -> Floor:
        if state.floor is None:
            raise InvalidActionError("You are not in the dungeon.")
        return state.floor

    def _require_room(self, state: ExplorerState) -> tuple[Floor, Room]:
        floor = self._require_floor(state)
        room = floor.current_room
        if state.mode != "in_room" or room is None:
            raise InvalidActionError("You are not inside a room.")
        return floor, room
