"""Deterministic floor content scaling helpers."""
from __future__ import annotations

# Floor level is the only difficulty ruler for generation.
# Coefficients stay linear and capped so every curve is monotone in level:
# - Monster density climbs until most of a deep floor is contested.
# - Danger ratings step up every DANGER_STEP_LEVELS floors, capped at 3.
# - Treasure, trap and event density grow slowly so shallow floors stay readable.
BASE_ROOM_COUNT = 8
ROOM_COUNT_SPREAD = 4
LEVELS_PER_EXTRA_ROOM = 15
MAX_EXTRA_ROOMS = 6

MONSTER_CHANCE_BASE = 0.35
MONSTER_CHANCE_PER_LEVEL = 0.004
MONSTER_CHANCE_CAP = 0.75

DANGER_STEP_LEVELS = 35
MAX_DANGER_RATING = 3

TREASURE_CHANCE_BASE = 0.15
TREASURE_CHANCE_PER_LEVEL = 0.002
TREASURE_CHANCE_CAP = 0.40

TRAP_CHANCE_BASE = 0.10
TRAP_CHANCE_PER_LEVEL = 0.002
TRAP_CHANCE_CAP = 0.35

EVENT_CHANCE_BASE = 0.08
EVENT_CHANCE_PER_LEVEL = 0.001
EVENT_CHANCE_CAP = 0.20

SECRET_VAULT_MIN_LEVEL = 20


def _linear(level: int, base: float, per_level: float, cap: float) -> float:
    return min(cap, base + per_level * max(0, level - 1))


def room_count_range(level: int) -> tuple[int, int]:
    extra = min(MAX_EXTRA_ROOMS, max(0, level - 1) // LEVELS_PER_EXTRA_ROOM)
    low = BASE_ROOM_COUNT + extra
    return low, low + ROOM_COUNT_SPREAD


def monster_chance(level: int) -> float:
    return _linear(level, MONSTER_CHANCE_BASE, MONSTER_CHANCE_PER_LEVEL, MONSTER_CHANCE_CAP)


def treasure_chance(level: int) -> float:
    return _linear(level, TREASURE_CHANCE_BASE, TREASURE_CHANCE_PER_LEVEL, TREASURE_CHANCE_CAP)


def trap_chance(level: int) -> float:
    return _linear(level, TRAP_CHANCE_BASE, TRAP_CHANCE_PER_LEVEL, TRAP_CHANCE_CAP)


def event_chance(level: int) -> float:
    return _linear(level, EVENT_CHANCE_BASE, EVENT_CHANCE_PER_LEVEL, EVENT_CHANCE_CAP)


def base_danger_rating(level: int) -> int:
    """Danger rating of an ordinary monster room on ``level`` (1-3)."""
    return min(MAX_DANGER_RATING, 1 + max(0, level - 1) // DANGER_STEP_LEVELS)
