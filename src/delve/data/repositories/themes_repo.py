"""Repository for floor theme definitions."""
from __future__ import annotations

from typing import Dict

from delve.data.errors import DataValidationError
from delve.data.repositories.base import RepositoryBase
from delve.domain.defs import ThemeDef


class ThemesRepository(RepositoryBase[ThemeDef]):
    """Loads and validates the level-banded floor themes."""

    def __init__(self, base_path=None) -> None:
        super().__init__("themes.json", base_path)

    def theme_for_level(self, level: int) -> ThemeDef:
        """Return the theme covering ``level``; deeper levels reuse the last band."""
        themes = sorted(self.all(), key=lambda theme: theme.min_level)
        for theme in themes:
            if theme.covers(level):
                return theme
        if level > themes[-1].max_level:
            return themes[-1]
        return themes[0]

    def _build(self, raw: dict[str, object]) -> Dict[str, ThemeDef]:
        themes_raw = self._require_mapping(raw.get("themes"), "themes.json themes")
        definitions: Dict[str, ThemeDef] = {}
        for theme_id, payload in themes_raw.items():
            if not isinstance(theme_id, str) or not theme_id.strip():
                raise DataValidationError("theme id must be a non-empty string.")
            mapping = self._require_mapping(payload, f"theme '{theme_id}'")
            name = self._require_str(mapping.get("name"), f"theme '{theme_id}' name").strip()
            if not name:
                raise DataValidationError(f"theme '{theme_id}' name must not be empty.")
            min_level = self._require_int(mapping.get("min_level"), f"theme '{theme_id}' min_level")
            max_level = self._require_int(mapping.get("max_level"), f"theme '{theme_id}' max_level")
            if min_level < 1 or max_level < min_level:
                raise DataValidationError(
                    f"theme '{theme_id}' level band {min_level}-{max_level} is invalid."
                )
            definitions[theme_id] = ThemeDef(
                id=theme_id,
                name=name,
                min_level=min_level,
                max_level=max_level,
                room_names=self._require_str_tuple(
                    mapping.get("room_names"), f"theme '{theme_id}' room_names"
                ),
                room_descriptions=self._require_str_tuple(
                    mapping.get("room_descriptions"), f"theme '{theme_id}' room_descriptions"
                ),
                passage_descriptions=self._require_str_tuple(
                    mapping.get("passage_descriptions"), f"theme '{theme_id}' passage_descriptions"
                ),
                boss_room_name=self._require_str(
                    mapping.get("boss_room_name"), f"theme '{theme_id}' boss_room_name"
                ).strip(),
            )
        if not definitions:
            raise DataValidationError("themes.json must define at least one theme.")
        self._validate_bands(definitions)
        return definitions

    @staticmethod
    def _validate_bands(definitions: Dict[str, ThemeDef]) -> None:
        ordered = sorted(definitions.values(), key=lambda theme: theme.min_level)
        if ordered[0].min_level != 1:
            raise DataValidationError("themes.json must cover level 1.")
        for previous, current in zip(ordered, ordered[1:]):
            if current.min_level != previous.max_level + 1:
                raise DataValidationError(
                    f"theme '{current.id}' must start right after '{previous.id}' "
                    f"(expected level {previous.max_level + 1}, found {current.min_level})."
                )
