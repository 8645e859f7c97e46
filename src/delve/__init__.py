"""Floor-by-floor dungeon exploration engine."""

__version__ = "0.1.0"
