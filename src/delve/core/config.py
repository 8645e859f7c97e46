"""Dungeon tuning configuration and its per-user persistence."""
from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict

DEFAULT_DUNGEON_SEED = 20_240_613


@dataclass(slots=True)
class DungeonConfig:
    """Tunables shared by generation, restoration and exploration."""

    max_dungeon_level: int = 100
    descent_window: int = 10
    respawn_hours: float = 24.0
    ambush_chance: float = 0.15
    trap_evasion_cap: float = 0.75
    first_clear_bonus_per_level: int = 50
    reset_scroll_base_price: int = 1000
    reset_scroll_price_per_level: int = 200
    dungeon_seed: int = DEFAULT_DUNGEON_SEED

    def deepest_reachable_level(self, player_level: int) -> int:
        """Return the deepest floor a player of this level may descend to."""
        return max(1, min(self.max_dungeon_level, player_level + self.descent_window))


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "Delve"
        return Path.home() / "Delve"
    return Path.home() / ".config" / "delve"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "dungeon.json"


def _normalize(raw: Dict[str, Any]) -> DungeonConfig:
    defaults = DungeonConfig()
    values: Dict[str, Any] = {}
    for spec in fields(DungeonConfig):
        default = getattr(defaults, spec.name)
        value = raw.get(spec.name, default)
        if isinstance(value, bool):
            values[spec.name] = default
        elif isinstance(default, int) and isinstance(value, int):
            values[spec.name] = value
        elif isinstance(default, float) and isinstance(value, (int, float)):
            values[spec.name] = float(value)
        else:
            values[spec.name] = default
    config = DungeonConfig(**values)
    if config.max_dungeon_level < 1:
        config.max_dungeon_level = defaults.max_dungeon_level
    if config.descent_window < 1:
        config.descent_window = defaults.descent_window
    if config.respawn_hours < 0:
        config.respawn_hours = defaults.respawn_hours
    config.ambush_chance = min(max(config.ambush_chance, 0.0), 1.0)
    config.trap_evasion_cap = min(max(config.trap_evasion_cap, 0.0), 1.0)
    return config


def load_config(path: Path | None = None) -> DungeonConfig:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return DungeonConfig()
    except Exception:
        return DungeonConfig()
    if not isinstance(raw, dict):
        return DungeonConfig()
    return _normalize(raw)


def save_config(config: DungeonConfig, path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = asdict(_normalize(asdict(config)))
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
