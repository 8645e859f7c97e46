"""Narrative progress consulted by clearance checks."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Set

from delve.core.types import RESOLVED_BOSS_STATUSES, BossStatus


@dataclass(slots=True)
class QuestState:
    """Collected seals and boss resolution statuses."""

    collected_seals: Set[str] = field(default_factory=set)
    boss_statuses: Dict[str, BossStatus] = field(default_factory=dict)

    def has_seal(self, seal_id: str) -> bool:
        return seal_id in self.collected_seals

    def record_seal(self, seal_id: str) -> bool:
        """Record a seal; return False when it was already collected."""
        if seal_id in self.collected_seals:
            return False
        self.collected_seals.add(seal_id)
        return True

    def boss_status(self, boss_id: str) -> BossStatus:
        return self.boss_statuses.get(boss_id, "unmet")

    def set_boss_status(self, boss_id: str, status: BossStatus) -> None:
        self.boss_statuses[boss_id] = status

    def is_boss_resolved(self, boss_id: str) -> bool:
        return self.boss_status(boss_id) in RESOLVED_BOSS_STATUSES
