"""Repository for seal and boss floor definitions."""
from __future__ import annotations

from typing import Dict

from delve.data.errors import DataValidationError
from delve.data.repositories.base import RepositoryBase
from delve.domain.defs import SpecialFloorDef
from delve.domain.special_floors import SpecialFloorRegistry

_SECTIONS = (("seal_floors", "seal", "seal_id"), ("boss_floors", "boss", "boss_id"))


class SpecialFloorsRepository(RepositoryBase[SpecialFloorDef]):
    """Loads special floor definitions keyed by ``floor_<level>``."""

    def __init__(self, base_path=None) -> None:
        super().__init__("special_floors.json", base_path)

    def registry(self) -> SpecialFloorRegistry:
        """Return a registry built from every loaded definition."""
        return SpecialFloorRegistry(self.all())

    def _build(self, raw: dict[str, object]) -> Dict[str, SpecialFloorDef]:
        definitions: Dict[str, SpecialFloorDef] = {}
        subjects: set[tuple[str, str]] = set()
        for section, kind, subject_field in _SECTIONS:
            entries = self._require_mapping(raw.get(section, {}), f"special_floors.json {section}")
            for level_key, payload in entries.items():
                context = f"{section} '{level_key}'"
                try:
                    level = int(level_key)
                except (TypeError, ValueError) as exc:
                    raise DataValidationError(f"{context} key must be an integer level.") from exc
                if level < 1:
                    raise DataValidationError(f"{context} level must be >= 1.")
                floor_id = f"floor_{level}"
                if floor_id in definitions:
                    raise DataValidationError(f"Floor {level} is registered as special twice.")
                mapping = self._require_mapping(payload, context)
                subject_id = self._require_str(mapping.get(subject_field), f"{context} {subject_field}").strip()
                if not subject_id:
                    raise DataValidationError(f"{context} {subject_field} must not be empty.")
                if (kind, subject_id) in subjects:
                    raise DataValidationError(f"{context} reuses {kind} '{subject_id}'.")
                subjects.add((kind, subject_id))
                name = self._require_str(mapping.get("name"), f"{context} name").strip()
                notes = mapping.get("notes")
                if notes is not None:
                    notes = self._require_str(notes, f"{context} notes")
                definitions[floor_id] = SpecialFloorDef(
                    level=level,
                    kind=kind,
                    subject_id=subject_id,
                    name=name,
                    notes=notes,
                )
        return definitions
