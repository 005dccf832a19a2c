from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..core.models import (
    ASCENSION_STAT_BONUS,
    LEVEL_STAT_BONUS,
    MAX_ASCENSION,
    MAX_LEVEL,
    MIN_LEVEL,
    ROLE_PREFERRED_ROW,
    Rarity,
    Role,
    RoleStatTable,
    role_base_stats,
)

logger = logging.getLogger(__name__)


def clamp_level(level: int) -> int:
    return max(MIN_LEVEL, min(MAX_LEVEL, int(level)))


def clamp_ascension(ascension: int) -> int:
    return max(0, min(MAX_ASCENSION, int(ascension)))


def scale_stat(base: int, level: int, ascension: int, mult: float = 1.0) -> int:
    """Scale a base stat by level and ascension.

    floor(base * (1 + (level-1)*0.1) * (1 + ascension*0.15) * mult)

    Rarity never enters this formula.
    """
    level_mult = 1 + (clamp_level(level) - 1) * LEVEL_STAT_BONUS
    asc_mult = 1 + clamp_ascension(ascension) * ASCENSION_STAT_BONUS
    return math.floor(base * level_mult * asc_mult * mult)


@dataclass(frozen=True)
class StatMultipliers:
    """Optional per-stat multipliers applied on top of scaling (summons)."""

    hp: float = 1.0
    atk: float = 1.0
    defense: float = 1.0
    spd: float = 1.0


@dataclass(frozen=True)
class UnitStats:
    """Derived combat stats for one unit."""

    hp: int
    atk: int
    defense: int
    spd: int


def derive_stats(
    role: Role,
    level: int = 1,
    ascension: int = 0,
    role_stats: Optional[RoleStatTable] = None,
    multipliers: Optional[StatMultipliers] = None,
) -> UnitStats:
    """Convert a role plus progression into combat stats.

    SPD is the role's base tempo and does not scale with level or ascension;
    only an explicit spd multiplier changes it.
    """
    base = role_base_stats(role, role_stats)
    m = multipliers or StatMultipliers()
    spd = base.spd if multipliers is None else math.floor(base.spd * m.spd)
    stats = UnitStats(
        hp=scale_stat(base.hp, level, ascension, m.hp),
        atk=scale_stat(base.atk, level, ascension, m.atk),
        defense=scale_stat(base.defense, level, ascension, m.defense),
        spd=spd,
    )
    logger.debug("Derived %s stats (lvl=%s, asc=%s): %s", role.value, level, ascension, stats)
    return stats


@dataclass(frozen=True)
class RosterEntry:
    """One unit brought into a battle.

    Attributes:
        id: Unique unit id within the battle (both rosters).
        name: Display name used in log messages.
        role: Combat role; drives stats, placement, targeting and abilities.
        level: 1..100, clamped.
        ascension: 0..6, clamped.
        rarity: Carried for callers; does not affect stats.
        is_boss: Marks boss units in snapshots and summaries.
    """

    id: str
    name: str
    role: Role
    level: int = 1
    ascension: int = 0
    rarity: Rarity = Rarity.COMMON
    is_boss: bool = False

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("RosterEntry.id must be a non-empty string")
        object.__setattr__(self, "role", Role(self.role))
        object.__setattr__(self, "rarity", Rarity(self.rarity))
        object.__setattr__(self, "level", clamp_level(self.level))
        object.__setattr__(self, "ascension", clamp_ascension(self.ascension))

    @property
    def preferred_row(self) -> int:
        return ROLE_PREFERRED_ROW[self.role]

    def stats(self, role_stats: Optional[RoleStatTable] = None) -> UnitStats:
        return derive_stats(self.role, self.level, self.ascension, role_stats)

    def describe(self, role_stats: Optional[RoleStatTable] = None) -> str:
        s = self.stats(role_stats)
        return (
            f"{self.name} ({self.role.value}, Lv{self.level}, A{self.ascension}) - "
            f"HP:{s.hp} ATK:{s.atk} DEF:{s.defense} SPD:{s.spd}"
        )


@dataclass(frozen=True)
class UnitDefinition:
    """Static catalog data for a unit.

    Only the role matters in combat. ``summon_ids`` and ``max_summons`` narrow
    and cap a summoner's templates when a battle file references the unit.
    """

    id: str
    name: str
    role: Role
    rarity: Rarity
    ability_name: str = ""
    ability_description: str = ""
    summon_ids: Tuple[str, ...] = field(default_factory=tuple)
    max_summons: int = 1

    def to_entry(self, level: int = 1, ascension: int = 0, unit_id: Optional[str] = None) -> RosterEntry:
        return RosterEntry(
            id=unit_id or self.id,
            name=self.name,
            role=self.role,
            level=level,
            ascension=ascension,
            rarity=self.rarity,
        )
