"""Errors, settings and shared types used across the package."""

from ._config import Settings, settings
from ._exceptions import (
    DataError,
    CorruptionError,
    InvalidIndexError,
    SplitConsistencyError,
    EmptyPopulationError,
    InfiniteSplitRiskError,
)
from ._types import IndexArray

__all__ = [
    "Settings",
    "settings",
    "DataError",
    "CorruptionError",
    "InvalidIndexError",
    "SplitConsistencyError",
    "EmptyPopulationError",
    "InfiniteSplitRiskError",
    "IndexArray",
]
