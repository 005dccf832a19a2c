"""Unit definitions, roster entries and the level/ascension stat model."""

from .catalog import CharacterCatalog, default_catalog
from .stats import (
    RosterEntry,
    StatMultipliers,
    UnitDefinition,
    UnitStats,
    derive_stats,
    scale_stat,
)

__all__ = [
    "CharacterCatalog",
    "RosterEntry",
    "StatMultipliers",
    "UnitDefinition",
    "UnitStats",
    "default_catalog",
    "derive_stats",
    "scale_stat",
]
