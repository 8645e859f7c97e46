"""Dungeon-level transitions: entering, descending, changing level and leaving."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from delve.core.config import DungeonConfig
from delve.domain.floor import Floor
from delve.domain.state import ExplorerState
from delve.services.accessibility_gate import AccessibilityGate
from delve.services.clearance_evaluator import ClearanceEvaluator
from delve.services.errors import InvalidActionError, LevelChangeBlockedError
from delve.services.exploration_service import (
    DescendRequestedEvent,
    ExitSaveResult,
    ExplorationEvent,
    ExplorationService,
    FloorOverviewView,
)
from delve.services.floor_restoration import FloorRestorationService
from delve.services.floor_state_store import FloorStateStore

logger = logging.getLogger(__name__)

FLOOR_LOCKED_MESSAGE = "Something on this floor still bars the way back up. Resolve it before ascending."


@dataclass(slots=True)
class FloorSession:
    """Return payload for every level change."""

    level: int
    floor: Floor
    overview: FloorOverviewView
    was_restored: bool
    did_respawn: bool
    requested_level: int
    events: List[ExplorationEvent] = field(default_factory=list)


@dataclass(slots=True)
class LevelChangeDecision:
    allowed: bool
    target_level: int | None = None
    reason: str | None = None


class DungeonService:
    """Glues the gate, restoration and exploration together per level change."""

    def __init__(
        self,
        *,
        restoration: FloorRestorationService,
        gate: AccessibilityGate,
        evaluator: ClearanceEvaluator,
        exploration: ExplorationService,
        config: DungeonConfig | None = None,
    ) -> None:
        self._restoration = restoration
        self._gate = gate
        self._evaluator = evaluator
        self._exploration = exploration
        self._config = config or DungeonConfig()

    def enter_dungeon(self, state: ExplorerState, requested_level: int | None = None) -> FloorSession:
        """Enter from the surface, clamped by the descent window and the gate."""
        if state.floor is not None:
            raise InvalidActionError("You are already in the dungeon.")
        deepest = self._config.deepest_reachable_level(state.player_level)
        requested = requested_level if requested_level is not None else state.player_level
        requested = max(1, min(requested, deepest))
        store = FloorStateStore(state.floor_states)
        self._gate.reconcile_cleared_floors(state.cleared_special_floors, state.quest, store)
        level = self._gate.max_accessible_floor(requested, state.cleared_special_floors)
        if level != requested:
            logger.info("Dungeon entry clamped from floor %s to %s", requested, level)
        return self._load_level(state, level, requested_level=requested)

    def descend(self, state: ExplorerState) -> FloorSession:
        """Go one floor deeper; special floors never block this."""
        current = self._require_level(state)
        target = current + 1
        deepest = self._config.deepest_reachable_level(state.player_level)
        if target > deepest:
            raise LevelChangeBlockedError(
                f"Floor {target} is too deep for you yet (deepest allowed: {deepest})."
            )
        exit_result = self._exploration.exit_floor(state)
        return self._load_level(state, target, requested_level=target, prior_events=exit_result.events)

    def take_stairs(self, state: ExplorerState) -> FloorSession:
        """Use the current room's staircase, then descend."""
        result = self._exploration.perform_action(state, "descend")
        if not any(isinstance(event, DescendRequestedEvent) for event in result.events):
            raise InvalidActionError("There are no stairs down here.")
        return self.descend(state)

    def can_change_level(self, state: ExplorerState, target_level: int) -> LevelChangeDecision:
        if state.floor is None or state.current_floor_level is None:
            return LevelChangeDecision(allowed=False, reason="You are not in the dungeon.")
        current = state.current_floor_level
        deepest = self._config.deepest_reachable_level(state.player_level)
        if target_level == current:
            return LevelChangeDecision(allowed=False, reason="You are already on that floor.")
        if target_level < 1 or target_level > deepest:
            return LevelChangeDecision(
                allowed=False, reason=f"Floor {target_level} is out of reach (1-{deepest})."
            )
        if target_level < current:
            if self._evaluator.requires_floor_clear(current) and not self._evaluator.is_floor_cleared(
                state.floor, current, state.quest
            ):
                return LevelChangeDecision(allowed=False, reason=FLOOR_LOCKED_MESSAGE)
            return LevelChangeDecision(allowed=True, target_level=target_level)
        if target_level == current + 1:
            return LevelChangeDecision(allowed=True, target_level=target_level)
        # Jumping several floors down is an entry into a new range; gate floors past this one.
        actual = self._gate.max_accessible_floor(
            target_level, state.cleared_special_floors, above=current
        )
        reason = None
        if actual != target_level:
            reason = f"An unresolved floor stops you at floor {actual}."
        return LevelChangeDecision(allowed=True, target_level=actual, reason=reason)

    def ascend_or_change_level(self, state: ExplorerState, target_level: int) -> FloorSession:
        decision = self.can_change_level(state, target_level)
        if not decision.allowed or decision.target_level is None:
            raise LevelChangeBlockedError(decision.reason or "You cannot go there.")
        exit_result = self._exploration.exit_floor(state)
        return self._load_level(
            state,
            decision.target_level,
            requested_level=target_level,
            prior_events=exit_result.events,
        )

    def exit_floor(self, state: ExplorerState) -> ExitSaveResult:
        """Leave the dungeon for the surface, saving the floor on the way out."""
        self._require_level(state)
        result = self._exploration.exit_floor(state)
        state.floor = None
        state.current_floor_level = None
        state.mode = "overview"
        return result

    def _load_level(
        self,
        state: ExplorerState,
        level: int,
        *,
        requested_level: int,
        prior_events: List[ExplorationEvent] | None = None,
    ) -> FloorSession:
        if state.dungeon_seed is None:
            state.dungeon_seed = self._config.dungeon_seed
            logger.info("Explorer bound to dungeon seed %s", state.dungeon_seed)
        store = FloorStateStore(state.floor_states)
        restored = self._restoration.restore(level, store, state.quest, dungeon_seed=state.dungeon_seed)
        state.floor = restored.floor
        state.current_floor_level = level
        overview = self._exploration.begin_floor(state)
        return FloorSession(
            level=level,
            floor=restored.floor,
            overview=overview,
            was_restored=restored.was_restored,
            did_respawn=restored.did_respawn,
            requested_level=requested_level,
            events=list(prior_events or []),
        )

    @staticmethod
    def _require_level(state: ExplorerState) -> int:
        if state.floor is None or state.current_floor_level is None:
            raise InvalidActionError("You are not in the dungeon.")
        return state.current_floor_level
