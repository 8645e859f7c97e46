"""Exceptions raised while loading theme and special floor definitions."""


class DataError(Exception):
    """Base exception for the definition data layer."""


class DataLoadError(DataError):
    """Raised when a definition file cannot be read or parsed."""


class DataValidationError(DataError):
    """Raised when definition content is structurally wrong (bad types, gaps, duplicates)."""
