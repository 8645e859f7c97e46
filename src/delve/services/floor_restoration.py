"""Merges persisted floor state onto a freshly generated floor."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

from delve.core.clock import Clock, utc_now
from delve.core.config import DungeonConfig
from delve.domain.floor import Floor
from delve.domain.floor_state import FloorState
from delve.domain.quest_state import QuestState
from delve.services.clearance_evaluator import ClearanceEvaluator
from delve.services.floor_generator import FloorGenerator
from delve.services.floor_state_store import FloorStateStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RestorationResult:
    """Return payload from a restore."""

    floor: Floor
    floor_state: FloorState
    was_restored: bool
    did_respawn: bool
    orphaned_room_ids: Tuple[str, ...] = ()
    corrected_boss_room_ids: Tuple[str, ...] = ()


class FloorRestorationService:
    """Regenerates a level and patches the stored progress back onto it."""

    def __init__(
        self,
        *,
        generator: FloorGenerator,
        evaluator: ClearanceEvaluator,
        config: DungeonConfig | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._generator = generator
        self._evaluator = evaluator
        self._config = config or DungeonConfig()
        self._clock = clock

    def restore(
        self,
        floor_level: int,
        store: FloorStateStore,
        quest: QuestState,
        *,
        dungeon_seed: int | None = None,
    ) -> RestorationResult:
        now = self._clock()
        floor = self._generator.generate(floor_level, dungeon_seed=dungeon_seed)
        stored = store.get(floor_level)
        if stored is None:
            state = store.create(floor_level, now)
            self._apply_quest_progress(floor, state, quest)
            logger.info("Floor %s generated fresh", floor_level)
            return RestorationResult(floor=floor, floor_state=state, was_restored=False, did_respawn=False)

        orphaned = self._apply_room_states(floor, stored)
        did_respawn = stored.should_respawn(now, self._config.respawn_hours)
        if did_respawn:
            for room in floor.rooms:
                room.is_cleared = False
        corrected = self._correct_boss_rooms(floor, stored, quest)

        if stored.current_room_id and floor.find_room(stored.current_room_id) is not None:
            floor.current_room_id = stored.current_room_id
        else:
            floor.current_room_id = None
        self._apply_quest_progress(floor, stored, quest)
        stored.last_visited_at = now

        logger.info(
            "Floor %s restored (respawned=%s, orphaned=%s, corrected=%s)",
            floor_level,
            did_respawn,
            len(orphaned),
            len(corrected),
        )
        return RestorationResult(
            floor=floor,
            floor_state=stored,
            was_restored=True,
            did_respawn=did_respawn,
            orphaned_room_ids=tuple(orphaned),
            corrected_boss_room_ids=tuple(corrected),
        )

    @staticmethod
    def _apply_room_states(floor: Floor, stored: FloorState) -> List[str]:
        orphaned: List[str] = []
        for room_id, room_state in stored.room_states.items():
            room = floor.find_room(room_id)
            if room is None:
                # Only reachable when the generator changed underneath a save.
                logger.warning(
                    "Ignoring stored state for unknown room %s on floor %s", room_id, floor.level
                )
                orphaned.append(room_id)
                continue
            room_state.apply_to(room)
        return orphaned

    def _correct_boss_rooms(self, floor: Floor, stored: FloorState, quest: QuestState) -> List[str]:
        """Un-clear boss rooms whose clearance is not independently backed."""
        corrected: List[str] = []
        if self._evaluator.special_floors.is_boss_floor(floor.level):
            allowed = self._evaluator.boss_resolved(floor.level, quest)
        else:
            allowed = stored.ever_cleared
        for room in floor.rooms:
            if room.is_boss_room and room.is_cleared and not allowed:
                room.is_cleared = False
                corrected.append(room.id)
                logger.warning(
                    "Boss room %s on floor %s was marked cleared without a resolved boss; reset",
                    room.id,
                    floor.level,
                )
        return corrected

    def _apply_quest_progress(self, floor: Floor, state: FloorState, quest: QuestState) -> None:
        floor.boss_defeated = state.boss_defeated or self._evaluator.boss_resolved(floor.level, quest)
        if floor.seal_type is not None:
            floor.seal_collected = quest.has_seal(floor.seal_type)
            floor.has_uncollected_seal = not floor.seal_collected
