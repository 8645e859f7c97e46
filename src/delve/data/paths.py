"""Helpers for resolving data file locations."""
from __future__ import annotations

import os
from pathlib import Path

DEFINITIONS_ENV_VAR = "DELVE_DEFINITIONS_DIR"


def get_repo_root() -> Path:
    """Return the checkout root (three levels above this package's data module)."""
    return Path(__file__).resolve().parents[3]


def get_definitions_path(base_path: Path | str | None = None) -> Path:
    """Return the directory holding ``themes.json`` and ``special_floors.json``.

    An explicit ``base_path`` wins, then ``$DELVE_DEFINITIONS_DIR``, then the
    checkout's ``data/definitions``.
    """
    if base_path is not None:
        return Path(base_path)
    override = os.environ.get(DEFINITIONS_ENV_VAR)
    if override:
        return Path(override)
    return get_repo_root() / "data" / "definitions"
