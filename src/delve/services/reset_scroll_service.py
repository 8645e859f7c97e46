"""Dungeon reset scrolls: pay to make a cleared floor's monsters return early."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from delve.core.clock import Clock, utc_now
from delve.core.config import DungeonConfig
from delve.domain.state import ExplorerState
from delve.services.errors import InvalidActionError
from delve.services.floor_state_store import FloorStateStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ResetCandidateView:
    level: int
    hours_until_respawn: float


@dataclass(slots=True)
class ResetReceipt:
    level: int
    price: int
    gold_remaining: int


class ResetScrollService:
    """Only floors that were cleared, are not permanent and are not already due may be reset."""

    def __init__(self, *, config: DungeonConfig | None = None, clock: Clock = utc_now) -> None:
        self._config = config or DungeonConfig()
        self._clock = clock

    def scroll_price(self, player_level: int) -> int:
        return self._config.reset_scroll_base_price + self._config.reset_scroll_price_per_level * player_level

    def eligible_floors(self, state: ExplorerState) -> List[ResetCandidateView]:
        now = self._clock()
        candidates: List[ResetCandidateView] = []
        for floor_state in FloorStateStore(state.floor_states):
            if not floor_state.ever_cleared or floor_state.is_permanently_clear:
                continue
            if floor_state.should_respawn(now, self._config.respawn_hours):
                continue
            if floor_state.floor_level == state.current_floor_level:
                continue
            elapsed = floor_state.hours_since_visit(now) or 0.0
            candidates.append(
                ResetCandidateView(
                    level=floor_state.floor_level,
                    hours_until_respawn=max(0.0, self._config.respawn_hours - elapsed),
                )
            )
        return candidates

    def reset_floor(self, state: ExplorerState, level: int) -> ResetReceipt:
        eligible = {candidate.level for candidate in self.eligible_floors(state)}
        if level not in eligible:
            raise InvalidActionError(f"Floor {level} cannot be reset.")
        price = self.scroll_price(state.player_level)
        if state.gold < price:
            raise InvalidActionError(f"A reset scroll costs {price} gold; you have {state.gold}.")
        state.gold -= price
        FloorStateStore(state.floor_states).reset_monsters(level)
        logger.info("Floor %s reset by scroll for %s gold", level, price)
        return ResetReceipt(level=level, price=price, gold_remaining=state.gold)
