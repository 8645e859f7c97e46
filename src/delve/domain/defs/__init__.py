"""Definition dataclasses loaded from JSON."""

from .special_floor_def import SpecialFloorDef
from .theme_def import ThemeDef

__all__ = ["SpecialFloorDef", "ThemeDef"]
