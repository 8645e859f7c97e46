"""Serialization helpers for explorer progress and the floor state table."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Set, get_args

from delve.core.rng import RNG, RNGStatePayload
from delve.core.types import BossStatus
from delve.domain.floor_state import PERSISTED_ROOM_FLAGS, FloorState, RoomState
from delve.domain.quest_state import QuestState
from delve.domain.state import ExplorerState
from delve.services.errors import SaveLoadError

SavePayload = Dict[str, Any]
_VALID_BOSS_STATUSES: tuple[BossStatus, ...] = get_args(BossStatus)


class DungeonSaveService:
    """Converts explorer state to/from a validated, versioned payload.

    The live floor is never written; it is regenerated and patched from the
    floor state table on load.
    """

    SAVE_VERSION = 1

    def serialize(self, state: ExplorerState) -> SavePayload:
        """Return a JSON-serializable payload for disk persistence."""
        return {
            "save_version": self.SAVE_VERSION,
            "metadata": self._build_metadata(state),
            "rng": state.rng.export_state(),
            "state": self._serialize_state(state),
        }

    def deserialize(self, payload: Mapping[str, Any]) -> ExplorerState:
        """Rehydrate an ExplorerState (outside the dungeon) from a persisted payload."""
        if not isinstance(payload, Mapping):
            raise SaveLoadError("Save data must be a JSON object.")
        version = payload.get("save_version")
        if version != self.SAVE_VERSION:
            raise SaveLoadError(f"Unsupported save version: {version!r}.")
        rng_payload = payload.get("rng")
        state_payload = payload.get("state")
        if not isinstance(rng_payload, Mapping) or not isinstance(state_payload, Mapping):
            raise SaveLoadError("Save data is missing required sections.")

        seed = self._require_int(state_payload.get("seed"), "state.seed")
        rng = RNG(seed)
        try:
            rng.restore_state(self._coerce_rng_payload(rng_payload))
        except ValueError as exc:
            raise SaveLoadError(f"Invalid RNG state: {exc}") from exc

        state = ExplorerState(seed=seed, rng=rng)
        state.player_level = self._coerce_positive_int(state_payload.get("player_level"), "state.player_level")
        state.agility = self._coerce_non_negative_int(state_payload.get("agility"), "state.agility", default=10)
        state.max_hp = self._coerce_positive_int(state_payload.get("max_hp", 100), "state.max_hp")
        state.hp = min(
            state.max_hp,
            self._coerce_non_negative_int(state_payload.get("hp"), "state.hp", default=state.max_hp),
        )
        state.gold = self._coerce_non_negative_int(state_payload.get("gold"), "state.gold", default=0)
        state.status_effects = self._coerce_str_list(state_payload.get("status_effects"), "state.status_effects")
        state.cleared_special_floors = self._coerce_level_set(
            state_payload.get("cleared_special_floors"), "state.cleared_special_floors"
        )
        state.quest = self._coerce_quest(state_payload.get("quest"))
        state.dungeon_seed = self._coerce_optional_int(state_payload.get("dungeon_seed"), "state.dungeon_seed")
        state.floor_states = self._coerce_floor_states(state_payload.get("floor_states"))
        if state.floor_states and state.dungeon_seed is None:
            raise SaveLoadError("state.dungeon_seed is required once floors have been visited.")
        return state

    def _build_metadata(self, state: ExplorerState) -> Dict[str, Any]:
        deepest = max(state.floor_states, default=0)
        return {
            "player_level": state.player_level,
            "gold": state.gold,
            "deepest_floor_visited": deepest,
            "seals_collected": len(state.quest.collected_seals),
            "saved_at": datetime.now(timezone.utc).isoformat(),
        }

    def _serialize_state(self, state: ExplorerState) -> Dict[str, Any]:
        return {
            "seed": state.seed,
            "dungeon_seed": state.dungeon_seed,
            "player_level": state.player_level,
            "agility": state.agility,
            "hp": state.hp,
            "max_hp": state.max_hp,
            "gold": state.gold,
            "status_effects": list(state.status_effects),
            "cleared_special_floors": sorted(state.cleared_special_floors),
            "quest": {
                "collected_seals": sorted(state.quest.collected_seals),
                "boss_statuses": dict(sorted(state.quest.boss_statuses.items())),
            },
            "floor_states": {
                str(level): self._serialize_floor_state(floor_state)
                for level, floor_state in sorted(state.floor_states.items())
            },
        }

    @staticmethod
    def _serialize_floor_state(floor_state: FloorState) -> Dict[str, Any]:
        return {
            "floor_level": floor_state.floor_level,
            "last_visited_at": _format_timestamp(floor_state.last_visited_at),
            "last_cleared_at": _format_timestamp(floor_state.last_cleared_at),
            "current_room_id": floor_state.current_room_id,
            "ever_cleared": floor_state.ever_cleared,
            "is_permanently_clear": floor_state.is_permanently_clear,
            "boss_defeated": floor_state.boss_defeated,
            "rooms": {
                room_id: room_state.flags()
                for room_id, room_state in sorted(floor_state.room_states.items())
            },
        }

    def _coerce_rng_payload(self, payload: Mapping[str, Any]) -> RNGStatePayload:
        version = self._require_int(payload.get("version"), "rng.version")
        state_values = payload.get("state")
        if not isinstance(state_values, list):
            raise SaveLoadError("Invalid RNG state payload.")
        gauss = payload.get("gauss")
        return {"version": version, "state": state_values, "gauss": gauss}

    def _coerce_quest(self, value: Any) -> QuestState:
        if value is None:
            return QuestState()
        mapping = self._require_dict(value, "state.quest")
        seals = set(self._coerce_str_list(mapping.get("collected_seals"), "state.quest.collected_seals"))
        statuses_raw = mapping.get("boss_statuses") or {}
        statuses = self._require_dict(statuses_raw, "state.quest.boss_statuses")
        boss_statuses: Dict[str, BossStatus] = {}
        for boss_id, status in statuses.items():
            boss_key = self._require_str(boss_id, "state.quest.boss_statuses key")
            if status not in _VALID_BOSS_STATUSES:
                raise SaveLoadError(f"state.quest.boss_statuses[{boss_key}] has invalid status {status!r}.")
            boss_statuses[boss_key] = status
        return QuestState(collected_seals=seals, boss_statuses=boss_statuses)

    def _coerce_floor_states(self, value: Any) -> Dict[int, FloorState]:
        if value is None:
            return {}
        mapping = self._require_dict(value, "state.floor_states")
        result: Dict[int, FloorState] = {}
        for level_key, payload in mapping.items():
            context = f"state.floor_states[{level_key}]"
            try:
                level = int(level_key)
            except (TypeError, ValueError) as exc:
                raise SaveLoadError(f"{context} key must be an integer level.") from exc
            entry = self._require_dict(payload, context)
            stored_level = self._require_int(entry.get("floor_level"), f"{context}.floor_level")
            if stored_level != level:
                raise SaveLoadError(f"{context}.floor_level does not match its key.")
            result[level] = FloorState(
                floor_level=level,
                last_visited_at=self._coerce_timestamp(entry.get("last_visited_at"), f"{context}.last_visited_at"),
                last_cleared_at=self._coerce_timestamp(entry.get("last_cleared_at"), f"{context}.last_cleared_at"),
                current_room_id=self._coerce_optional_str(entry.get("current_room_id"), f"{context}.current_room_id"),
                ever_cleared=self._coerce_bool(entry.get("ever_cleared"), f"{context}.ever_cleared"),
                is_permanently_clear=self._coerce_bool(
                    entry.get("is_permanently_clear"), f"{context}.is_permanently_clear"
                ),
                boss_defeated=self._coerce_bool(entry.get("boss_defeated"), f"{context}.boss_defeated"),
                room_states=self._coerce_room_states(entry.get("rooms"), f"{context}.rooms"),
            )
        return result

    def _coerce_room_states(self, value: Any, context: str) -> Dict[str, RoomState]:
        if value is None:
            return {}
        mapping = self._require_dict(value, context)
        result: Dict[str, RoomState] = {}
        for room_id, flags in mapping.items():
            room_key = self._require_str(room_id, f"{context} key")
            flag_mapping = self._require_dict(flags, f"{context}[{room_key}]")
            unknown = set(flag_mapping) - set(PERSISTED_ROOM_FLAGS)
            if unknown:
                raise SaveLoadError(f"{context}[{room_key}] has unknown flags: {sorted(unknown)}.")
            result[room_key] = RoomState(
                room_id=room_key,
                **{
                    name: self._coerce_bool(flag_mapping.get(name), f"{context}[{room_key}].{name}")
                    for name in PERSISTED_ROOM_FLAGS
                },
            )
        return result

    @staticmethod
    def _require_str(value: Any, context: str) -> str:
        if not isinstance(value, str):
            raise SaveLoadError(f"{context} must be a string.")
        return value

    @staticmethod
    def _require_int(value: Any, context: str) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise SaveLoadError(f"{context} must be an integer.")
        return value

    @staticmethod
    def _require_dict(value: Any, context: str) -> Mapping[str, Any]:
        if not isinstance(value, Mapping):
            raise SaveLoadError(f"{context} must be an object.")
        return value

    def _coerce_positive_int(self, value: Any, context: str) -> int:
        value_int = self._require_int(value, context)
        if value_int < 1:
            raise SaveLoadError(f"{context} must be a positive integer.")
        return value_int

    def _coerce_non_negative_int(self, value: Any, context: str, *, default: int) -> int:
        if value is None:
            return default
        value_int = self._require_int(value, context)
        if value_int < 0:
            raise SaveLoadError(f"{context} must be a non-negative integer.")
        return value_int

    def _coerce_optional_int(self, value: Any, context: str) -> int | None:
        if value is None:
            return None
        return self._require_int(value, context)

    def _coerce_optional_str(self, value: Any, context: str) -> str | None:
        if value is None:
            return None
        return self._require_str(value, context)

    @staticmethod
    def _coerce_bool(value: Any, context: str) -> bool:
        if value is None:
            return False
        if not isinstance(value, bool):
            raise SaveLoadError(f"{context} must be a boolean.")
        return value

    def _coerce_str_list(self, value: Any, context: str) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise SaveLoadError(f"{context} must be a list.")
        return [self._require_str(entry, f"{context} entry") for entry in value]

    def _coerce_level_set(self, value: Any, context: str) -> Set[int]:
        if value is None:
            return set()
        if not isinstance(value, list):
            raise SaveLoadError(f"{context} must be a list.")
        return {self._require_int(entry, f"{context} entry") for entry in value}

    @staticmethod
    def _coerce_timestamp(value: Any, context: str) -> datetime | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise SaveLoadError(f"{context} must be an ISO-8601 string.")
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as exc:
            raise SaveLoadError(f"{context} is not a valid timestamp.") from exc
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


def _format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
