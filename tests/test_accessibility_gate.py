from __future__ import annotations

from datetime import datetime, timezone

from delve.domain.quest_state import QuestState
from delve.services.accessibility_gate import AccessibilityGate
from delve.services.floor_state_store import FloorStateStore

from tests.helpers.dungeon import synthetic_registry

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _gate() -> AccessibilityGate:
    return AccessibilityGate(synthetic_registry())


def test_requested_level_passes_when_nothing_below_is_uncleared() -> None:
    gate = _gate()
    assert gate.max_accessible_floor(2, set()) == 2
    assert gate.max_accessible_floor(10, {3, 5, 8}) == 10
    assert gate.blocking_floor(10, {3, 5, 8}) is None


def test_gate_clamps_to_lowest_uncleared_special_floor() -> None:
    gate = _gate()
    assert gate.max_accessible_floor(10, set()) == 3
    assert gate.max_accessible_floor(10, {3}) == 5
    assert gate.max_accessible_floor(10, {3, 5}) == 8
    assert gate.max_accessible_floor(4, {5, 8}) == 3


def test_gate_lets_the_player_stand_on_the_blocking_floor() -> None:
    assert _gate().max_accessible_floor(3, set()) == 3


def test_gate_only_checks_floors_above_the_given_level() -> None:
    gate = _gate()
    assert gate.blocking_floor(10, set(), above=3) == 5
    assert gate.max_accessible_floor(10, {5}, above=3) == 8
    assert gate.max_accessible_floor(4, set(), above=3) == 4


def test_reconcile_migrates_obtained_seals_and_ever_cleared_floors() -> None:
    gate = _gate()
    quest = QuestState(collected_seals={"seal_of_testing"})
    store = FloorStateStore()
    store.create(5, NOW).ever_cleared = True
    store.create(8, NOW)
    cleared: set[int] = set()

    migrated = gate.reconcile_cleared_floors(cleared, quest, store)

    assert migrated == {3, 5}
    assert cleared == {3, 5}
    assert gate.max_accessible_floor(10, cleared) == 8


def test_reconcile_leaves_existing_entries_alone() -> None:
    gate = _gate()
    cleared = {3}
    migrated = gate.reconcile_cleared_floors(cleared, QuestState(collected_seals={"seal_of_testing"}), FloorStateStore())
    assert migrated == set()
    assert cleared == {3}
