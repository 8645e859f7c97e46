"""Repository exports."""

from .special_floors_repo import SpecialFloorsRepository
from .themes_repo import ThemesRepository

__all__ = [
    "SpecialFloorsRepository",
    "ThemesRepository",
]
