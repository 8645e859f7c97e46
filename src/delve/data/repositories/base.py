"""Shared loading and field validation for definition repositories."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Generic, TypeVar

from delve.data import paths
from delve.data.errors import DataValidationError
from delve.data.json_loader import load_definition_file

T = TypeVar("T")


class RepositoryBase(Generic[T]):
    """Loads one definition file lazily and caches the typed result.

    Subclasses implement ``_build`` and use the ``_require_*`` helpers so every
    malformed field surfaces as a ``DataValidationError`` naming its location.
    """

    def __init__(self, filename: str, base_path: Path | str | None = None) -> None:
        self._filename = filename
        self._base_path = Path(base_path) if base_path is not None else None
        self._definitions: Dict[str, T] | None = None

    @property
    def file_path(self) -> Path:
        return paths.get_definitions_path(self._base_path) / self._filename

    def _build(self, raw: dict[str, object]) -> Dict[str, T]:
        raise NotImplementedError

    def _loaded(self) -> Dict[str, T]:
        if self._definitions is None:
            self._definitions = self._build(load_definition_file(self.file_path))
        return self._definitions

    def get(self, def_id: str) -> T:
        """Return a definition by id; unknown ids raise KeyError."""
        definitions = self._loaded()
        if def_id not in definitions:
            raise KeyError(def_id)
        return definitions[def_id]

    def all(self) -> list[T]:
        """Return every definition, ordered by id."""
        definitions = self._loaded()
        return [definitions[key] for key in sorted(definitions)]

    @staticmethod
    def _require_mapping(value: object, context: str) -> dict[str, object]:
        if not isinstance(value, dict):
            raise DataValidationError(f"{context} must be an object.")
        return value

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string.")
        return value

    @staticmethod
    def _require_int(value: object, context: str) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise DataValidationError(f"{context} must be an integer.")
        return value

    def _require_str_tuple(self, value: object, context: str) -> tuple[str, ...]:
        if not isinstance(value, list) or not value:
            raise DataValidationError(f"{context} must be a non-empty list of strings.")
        entries = tuple(self._require_str(entry, f"{context} entry").strip() for entry in value)
        if not all(entries):
            raise DataValidationError(f"{context} entries must not be empty.")
        return entries
