"""Registry of floors whose clearance is not simply "every monster defeated"."""
from __future__ import annotations

from typing import Dict, Iterable, List

from delve.domain.defs import SpecialFloorDef


class SpecialFloorRegistry:
    """Immutable lookup of special floors by level.

    Passed explicitly to the generator, gate and clearance evaluator so tests can
    swap in synthetic registries.
    """

    def __init__(self, definitions: Iterable[SpecialFloorDef] = ()) -> None:
        by_level: Dict[int, SpecialFloorDef] = {}
        for definition in definitions:
            if definition.level in by_level:
                raise ValueError(f"Floor {definition.level} is registered twice.")
            by_level[definition.level] = definition
        self._by_level = dict(sorted(by_level.items()))

    def get(self, level: int) -> SpecialFloorDef | None:
        return self._by_level.get(level)

    def is_special(self, level: int) -> bool:
        return level in self._by_level

    def is_seal_floor(self, level: int) -> bool:
        definition = self._by_level.get(level)
        return definition is not None and definition.kind == "seal"

    def is_boss_floor(self, level: int) -> bool:
        definition = self._by_level.get(level)
        return definition is not None and definition.kind == "boss"

    def levels(self) -> List[int]:
        """Return registered levels in ascending order."""
        return list(self._by_level.keys())

    def all(self) -> List[SpecialFloorDef]:
        return list(self._by_level.values())

    def level_for_seal(self, seal_id: str) -> int | None:
        for definition in self._by_level.values():
            if definition.kind == "seal" and definition.subject_id == seal_id:
                return definition.level
        return None

    def __len__(self) -> int:
        return len(self._by_level)
