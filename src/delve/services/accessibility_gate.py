"""Clamps requested dungeon levels at the first uncleared special floor."""
from __future__ import annotations

import logging
from typing import Iterable, Set

from delve.domain.quest_state import QuestState
from delve.domain.special_floors import SpecialFloorRegistry
from delve.services.floor_state_store import FloorStateStore

logger = logging.getLogger(__name__)


class AccessibilityGate:
    """One-directional ratchet over the special floor registry.

    Only consulted when entering a range of floors (dungeon entry, absolute
    jumps). Descending one floor at a time never goes through the gate.
    """

    def __init__(self, special_floors: SpecialFloorRegistry) -> None:
        self._special_floors = special_floors

    def blocking_floor(
        self, requested_level: int, cleared_special_floors: Iterable[int], *, above: int = 0
    ) -> int | None:
        """Return the lowest uncleared special floor in ``(above, requested_level]``."""
        cleared = set(cleared_special_floors)
        for level in self._special_floors.levels():
            if level > requested_level:
                break
            if level <= above:
                continue
            if level not in cleared:
                return level
        return None

    def max_accessible_floor(
        self, requested_level: int, cleared_special_floors: Iterable[int], *, above: int = 0
    ) -> int:
        blocker = self.blocking_floor(requested_level, cleared_special_floors, above=above)
        if blocker is None:
            return requested_level
        return min(requested_level, blocker)

    def reconcile_cleared_floors(
        self,
        cleared_special_floors: Set[int],
        quest: QuestState,
        store: FloorStateStore,
    ) -> Set[int]:
        """Fold older clearance evidence into ``cleared_special_floors`` in place.

        Saves written before the cleared set was tracked (or written halfway)
        can hold a collected seal or an ever-cleared floor state without the
        matching entry. Returns the levels that were added.
        """
        migrated: Set[int] = set()
        for definition in self._special_floors.all():
            level = definition.level
            if level in cleared_special_floors:
                continue
            obtained = definition.kind == "seal" and quest.has_seal(definition.subject_id)
            floor_state = store.get(level)
            ever_cleared = floor_state is not None and floor_state.ever_cleared
            if obtained or ever_cleared:
                cleared_special_floors.add(level)
                migrated.add(level)
        if migrated:
            logger.info("Reconciled legacy clearance for floors %s", sorted(migrated))
        return migrated
