"""Service layer exports."""

from .accessibility_gate import AccessibilityGate
from .clearance_evaluator import CLEARANCE_RULES, ClearanceEvaluator
from .dungeon_service import DungeonService, FloorSession, LevelChangeDecision
from .errors import FloorIntegrityError, InvalidActionError, LevelChangeBlockedError, SaveLoadError
from .exploration_service import ExplorationService
from .floor_generator import FloorGenerator
from .floor_restoration import FloorRestorationService, RestorationResult
from .floor_state_store import FloorStateStore
from .reset_scroll_service import ResetScrollService
from .save_service import DungeonSaveService

__all__ = [
    "AccessibilityGate",
    "CLEARANCE_RULES",
    "ClearanceEvaluator",
    "DungeonSaveService",
    "DungeonService",
    "ExplorationService",
    "FloorGenerator",
    "FloorIntegrityError",
    "FloorRestorationService",
    "FloorSession",
    "FloorStateStore",
    "InvalidActionError",
    "LevelChangeBlockedError",
    "LevelChangeDecision",
    "ResetScrollService",
    "RestorationResult",
    "SaveLoadError",
]
