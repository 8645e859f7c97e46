from __future__ import annotations

from delve.domain.floor_state import RoomState
from delve.domain.quest_state import QuestState
from delve.services.floor_state_store import FloorStateStore

from tests.helpers.dungeon import START_TIME, build_engine

_TRACKED = ("is_explored", "is_cleared", "treasure_looted", "trap_triggered", "event_completed")


def _visit_and_save(engine, level: int, store: FloorStateStore, quest: QuestState):
    """Restore a level, scribble progress on every room, then snapshot it."""
    result = engine.restoration.restore(level, store, quest)
    floor = result.floor
    for index, room in enumerate(floor.rooms):
        room.is_explored = True
        room.is_cleared = index % 2 == 0
        room.treasure_looted = index % 3 == 0
        room.trap_triggered = index % 2 == 1
        room.event_completed = index == 1
    floor.current_room_id = floor.rooms[1].id
    store.snapshot(floor, result.floor_state)
    return result


def test_first_visit_generates_fresh_floor_and_state() -> None:
    engine = build_engine()
    store = FloorStateStore()

    result = engine.restoration.restore(1, store, QuestState())

    assert not result.was_restored
    assert not result.did_respawn
    assert store.get(1) is result.floor_state
    assert result.floor_state.last_visited_at == START_TIME
    assert result.floor.current_room_id is None
    assert not any(room.is_explored for room in result.floor.rooms)


def test_restore_copies_persisted_flags_onto_regenerated_rooms() -> None:
    engine = build_engine()
    store = FloorStateStore()
    quest = QuestState()
    saved = _visit_and_save(engine, 1, store, quest)
    engine.clock.advance(2)

    result = engine.restoration.restore(1, store, quest)

    assert result.was_restored
    assert not result.did_respawn
    assert result.floor is not saved.floor
    for room in result.floor.rooms:
        stored = store.get(1).room_states[room.id]
        for flag in _TRACKED:
            assert getattr(room, flag) == getattr(stored, flag), (room.id, flag)
    assert result.floor.current_room_id == saved.floor.rooms[1].id
    assert store.get(1).last_visited_at == engine.clock.now


def test_respawn_resets_only_cleared_flags() -> None:
    engine = build_engine()
    store = FloorStateStore()
    quest = QuestState()
    _visit_and_save(engine, 1, store, quest)
    before = {room_id: state.flags() for room_id, state in store.get(1).room_states.items()}
    engine.clock.advance(24)

    result = engine.restoration.restore(1, store, quest)

    assert result.did_respawn
    for room in result.floor.rooms:
        assert not room.is_cleared
        assert room.is_explored
        assert room.treasure_looted == before[room.id]["treasure_looted"]
        assert room.trap_triggered == before[room.id]["trap_triggered"]
        assert room.event_completed == before[room.id]["event_completed"]


def test_no_respawn_just_before_the_threshold() -> None:
    engine = build_engine()
    store = FloorStateStore()
    quest = QuestState()
    _visit_and_save(engine, 1, store, quest)
    engine.clock.advance(23.5)

    result = engine.restoration.restore(1, store, quest)

    assert not result.did_respawn
    assert result.floor.rooms[0].is_cleared


def test_permanently_clear_floor_never_respawns() -> None:
    engine = build_engine()
    store = FloorStateStore()
    quest = QuestState(collected_seals={"seal_of_testing"})
    _visit_and_save(engine, 3, store, quest)
    store.get(3).ever_cleared = True
    store.get(3).is_permanently_clear = True
    engine.clock.advance(48)

    result = engine.restoration.restore(3, store, quest)

    assert not result.did_respawn
    assert result.floor.rooms[0].is_cleared


def test_unknown_room_states_are_skipped() -> None:
    engine = build_engine()
    store = FloorStateStore()
    quest = QuestState()
    _visit_and_save(engine, 1, store, quest)
    store.get(1).room_states["L001-R99"] = RoomState(room_id="L001-R99", is_cleared=True)

    result = engine.restoration.restore(1, store, quest)

    assert result.orphaned_room_ids == ("L001-R99",)
    assert result.floor.find_room("L001-R99") is None


def test_unknown_current_room_is_dropped() -> None:
    engine = build_engine()
    store = FloorStateStore()
    quest = QuestState()
    _visit_and_save(engine, 1, store, quest)
    store.get(1).current_room_id = "L001-R99"

    result = engine.restoration.restore(1, store, quest)

    assert result.floor.current_room_id is None


def test_boss_room_clear_without_resolved_boss_is_corrected() -> None:
    engine = build_engine()
    store = FloorStateStore()
    quest = QuestState()
    first = engine.restoration.restore(5, store, quest)
    boss_room = first.floor.boss_room
    assert boss_room is not None
    boss_room.is_cleared = True
    store.snapshot(first.floor, first.floor_state)
    first.floor_state.ever_cleared = True

    result = engine.restoration.restore(5, store, quest)

    assert result.corrected_boss_room_ids == (boss_room.id,)
    assert not result.floor.boss_room.is_cleared
    assert not result.floor.boss_defeated


def test_boss_room_clear_survives_when_boss_is_resolved() -> None:
    engine = build_engine()
    store = FloorStateStore()
    quest = QuestState()
    first = engine.restoration.restore(5, store, quest)
    first.floor.boss_room.is_cleared = True
    store.snapshot(first.floor, first.floor_state)
    quest.set_boss_status("test_warden", "allied")

    result = engine.restoration.restore(5, store, quest)

    assert result.corrected_boss_room_ids == ()
    assert result.floor.boss_room.is_cleared
    assert result.floor.boss_defeated


def test_seal_progress_follows_quest_state() -> None:
    engine = build_engine()
    store = FloorStateStore()
    quest = QuestState()

    fresh = engine.restoration.restore(3, store, quest)
    assert fresh.floor.has_uncollected_seal

    quest.record_seal("seal_of_testing")
    restored = engine.restoration.restore(3, store, quest)
    assert restored.floor.seal_collected
    assert not restored.floor.has_uncollected_seal
