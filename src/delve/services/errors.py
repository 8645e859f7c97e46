"""Service-layer exceptions."""


class InvalidActionError(Exception):
    """Raised when a player command is not valid right now; state is untouched."""


class LevelChangeBlockedError(Exception):
    """Raised when moving to another dungeon level is not allowed."""


class FloorIntegrityError(Exception):
    """Raised when a generated floor breaks its own invariants (a programming error)."""


class SaveLoadError(Exception):
    """Raised when save or load operations fail."""
