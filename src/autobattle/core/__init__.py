"""Leaf building blocks: deterministic RNG and the shared data model."""

from .models import (
    ActionType,
    BaseStats,
    Position,
    Rarity,
    Role,
    ROLE_BASE_STATS,
    ROLE_PREFERRED_ROW,
    Team,
    Winner,
)
from .rng import SeededRNG

__all__ = [
    "ActionType",
    "BaseStats",
    "Position",
    "Rarity",
    "Role",
    "ROLE_BASE_STATS",
    "ROLE_PREFERRED_ROW",
    "SeededRNG",
    "Team",
    "Winner",
]
