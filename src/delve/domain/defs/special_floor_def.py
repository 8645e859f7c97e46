"""Special floor definition data structures."""
from __future__ import annotations

from dataclasses import dataclass

from delve.core.types import SpecialFloorKind


@dataclass(slots=True)
class SpecialFloorDef:
    """A floor whose clearance hinges on a collectible seal or a boss resolution.

    ``subject_id`` names the seal for ``kind == "seal"`` and the boss for
    ``kind == "boss"``.
    """

    level: int
    kind: SpecialFloorKind
    subject_id: str
    name: str
    notes: str | None = None
