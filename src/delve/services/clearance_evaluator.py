"""Decides whether a floor counts as cleared, per floor type."""
from __future__ import annotations

from typing import Callable, Dict

from delve.core.types import SpecialFloorKind
from delve.domain.defs import SpecialFloorDef
from delve.domain.floor import Floor
from delve.domain.quest_state import QuestState
from delve.domain.special_floors import SpecialFloorRegistry

ClearanceRule = Callable[[SpecialFloorDef, QuestState], bool]


def _boss_resolved(definition: SpecialFloorDef, quest: QuestState) -> bool:
    return quest.is_boss_resolved(definition.subject_id)


def _seal_obtained(definition: SpecialFloorDef, quest: QuestState) -> bool:
    return quest.has_seal(definition.subject_id)


# Adding a special floor kind means adding its rule here; nothing else switches on kind.
CLEARANCE_RULES: Dict[SpecialFloorKind, ClearanceRule] = {
    "boss": _boss_resolved,
    "seal": _seal_obtained,
}


class ClearanceEvaluator:
    """Consulted by restoration, the accessibility gate and the exit-save routine."""

    def __init__(
        self,
        special_floors: SpecialFloorRegistry,
        rules: Dict[SpecialFloorKind, ClearanceRule] | None = None,
    ) -> None:
        self._special_floors = special_floors
        self._rules = dict(CLEARANCE_RULES if rules is None else rules)

    @property
    def special_floors(self) -> SpecialFloorRegistry:
        return self._special_floors

    def requires_floor_clear(self, floor_level: int) -> bool:
        """True for floors whose clearance gates ascending past them."""
        return self._special_floors.is_special(floor_level)

    def special_floor_satisfied(self, floor_level: int, quest: QuestState) -> bool:
        """Evaluate the special-floor predicate alone; False for ordinary floors."""
        definition = self._special_floors.get(floor_level)
        if definition is None:
            return False
        rule = self._rules.get(definition.kind)
        if rule is None:
            raise KeyError(f"No clearance rule registered for floor kind '{definition.kind}'.")
        return rule(definition, quest)

    def boss_resolved(self, floor_level: int, quest: QuestState) -> bool:
        """True only on boss floors whose boss reached a resolved status."""
        if not self._special_floors.is_boss_floor(floor_level):
            return False
        return self.special_floor_satisfied(floor_level, quest)

    def is_floor_cleared(self, floor: Floor | None, floor_level: int, quest: QuestState) -> bool:
        if self._special_floors.is_special(floor_level):
            return self.special_floor_satisfied(floor_level, quest)
        if floor is None:
            return False
        return floor.all_monster_rooms_cleared()
