"""Data layer utilities for loading JSON definitions."""

from .errors import DataError, DataLoadError, DataValidationError
from .paths import DEFINITIONS_ENV_VAR, get_definitions_path, get_repo_root

__all__ = [
    "DEFINITIONS_ENV_VAR",
    "DataError",
    "DataLoadError",
    "DataValidationError",
    "get_definitions_path",
    "get_repo_root",
]
