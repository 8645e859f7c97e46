from __future__ import annotations

import json
from pathlib import Path

import pytest

from delve.data.errors import DataLoadError, DataValidationError
from delve.data.repositories import SpecialFloorsRepository, ThemesRepository


def _write_json(path: Path, data: dict) -> None:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _make_definitions_dir(tmp_path: Path) -> Path:
    definitions_dir = tmp_path / "definitions"
    definitions_dir.mkdir()
    return definitions_dir


def _theme(min_level: int, max_level: int) -> dict:
    return {
        "name": f"Band {min_level}",
        "min_level": min_level,
        "max_level": max_level,
        "room_names": ["Hall"],
        "room_descriptions": ["A hall."],
        "passage_descriptions": ["a corridor"],
        "boss_room_name": "Throne",
    }


def test_themes_repo_loads_real_bands() -> None:
    repo = ThemesRepository()

    assert repo.theme_for_level(1).id == "catacombs"
    assert repo.theme_for_level(10).id == "catacombs"
    assert repo.theme_for_level(11).id == "sewers"
    assert repo.theme_for_level(100).id == "abyssal_void"
    assert repo.theme_for_level(250).id == "abyssal_void"


def test_themes_repo_rejects_gap_between_bands(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(definitions_dir / "themes.json", {"themes": {"a": _theme(1, 5), "b": _theme(7, 9)}})

    with pytest.raises(DataValidationError):
        ThemesRepository(base_path=definitions_dir).all()


def test_themes_repo_rejects_empty_room_names(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    theme = _theme(1, 5)
    theme["room_names"] = []
    _write_json(definitions_dir / "themes.json", {"themes": {"a": theme}})

    with pytest.raises(DataValidationError):
        ThemesRepository(base_path=definitions_dir).all()


def test_special_floors_repo_loads_real_registry() -> None:
    registry = SpecialFloorsRepository().registry()

    assert registry.levels() == [15, 25, 30, 40, 45, 55, 60, 70, 75, 85, 90, 95, 99, 100]
    assert registry.get(15).subject_id == "seal_of_creation"
    assert registry.is_seal_floor(15)
    assert registry.is_boss_floor(25)
    assert registry.get(100).subject_id == "manwe"
    assert registry.level_for_seal("seal_of_truth") == 99
    assert not registry.is_special(16)


def test_special_floors_repo_rejects_level_in_both_sections(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(
        definitions_dir / "special_floors.json",
        {
            "seal_floors": {"5": {"seal_id": "seal_a", "name": "Seal A"}},
            "boss_floors": {"5": {"boss_id": "boss_a", "name": "Boss A"}},
        },
    )

    with pytest.raises(DataValidationError):
        SpecialFloorsRepository(base_path=definitions_dir).all()


def test_special_floors_repo_rejects_non_integer_level(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(
        definitions_dir / "special_floors.json",
        {"seal_floors": {"five": {"seal_id": "seal_a", "name": "Seal A"}}},
    )

    with pytest.raises(DataValidationError):
        SpecialFloorsRepository(base_path=definitions_dir).all()


def test_special_floors_repo_rejects_reused_seal(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(
        definitions_dir / "special_floors.json",
        {
            "seal_floors": {
                "5": {"seal_id": "seal_a", "name": "Seal A"},
                "9": {"seal_id": "seal_a", "name": "Seal A again"},
            }
        },
    )

    with pytest.raises(DataValidationError):
        SpecialFloorsRepository(base_path=definitions_dir).all()


def test_missing_definition_file_raises_load_error(tmp_path: Path) -> None:
    with pytest.raises(DataLoadError):
        ThemesRepository(base_path=_make_definitions_dir(tmp_path)).all()


def test_non_object_definition_file_is_rejected(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    (definitions_dir / "special_floors.json").write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(DataValidationError):
        SpecialFloorsRepository(base_path=definitions_dir).registry()
