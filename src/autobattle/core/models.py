from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional

# ----------------------------
# Core identifiers
# ----------------------------

UnitId = str  # e.g. "char_001" or "imp_s1" for summons


class Role(str, Enum):
    TANK = "tank"
    WARRIOR = "warrior"
    ARCHER = "archer"
    MAGE = "mage"
    ASSASSIN = "assassin"
    HEALER = "healer"
    SUMMONER = "summoner"


class Rarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Team(str, Enum):
    PLAYER = "player"
    ENEMY = "enemy"

    @property
    def opponent(self) -> "Team":
        return Team.ENEMY if self is Team.PLAYER else Team.PLAYER


class Winner(str, Enum):
    PLAYER = "player"
    ENEMY = "enemy"
    DRAW = "draw"


class ActionType(str, Enum):
    ATTACK = "attack"
    ABILITY = "ability"
    HEAL = "heal"
    DEATH = "death"
    SUMMON = "summon"


# ----------------------------
# Board geometry
# ----------------------------

# Row 0 is the front line, row 2 the back line. Row 3 is the extra row used by
# summons and by rosters that overflow the 3x3 formation.
BOARD_ROWS = 4
BOARD_COLS = 3


@dataclass(frozen=True)
class Position:
    row: int
    col: int

    def __post_init__(self) -> None:
        if not (0 <= self.row < BOARD_ROWS and 0 <= self.col < BOARD_COLS):
            raise ValueError(f"Invalid position: ({self.row},{self.col})")

    def to_dict(self) -> Dict[str, int]:
        return {"row": self.row, "col": self.col}


# ----------------------------
# Role tables
# ----------------------------

@dataclass(frozen=True)
class BaseStats:
    """Level 1, ascension 0 stats for a role."""

    hp: int
    atk: int
    defense: int
    spd: int

    @classmethod
    def from_dict(cls, data: Mapping[str, int]) -> "BaseStats":
        return cls(
            hp=int(data["hp"]),
            atk=int(data["atk"]),
            defense=int(data.get("def", data.get("defense", 0))),
            spd=int(data["spd"]),
        )


ROLE_BASE_STATS: Dict[Role, BaseStats] = {
    Role.TANK: BaseStats(hp=1000, atk=80, defense=150, spd=50),
    Role.WARRIOR: BaseStats(hp=700, atk=120, defense=80, spd=70),
    Role.ARCHER: BaseStats(hp=500, atk=150, defense=40, spd=90),
    Role.MAGE: BaseStats(hp=450, atk=180, defense=30, spd=60),
    Role.ASSASSIN: BaseStats(hp=550, atk=140, defense=50, spd=120),
    Role.HEALER: BaseStats(hp=600, atk=60, defense=60, spd=80),
    Role.SUMMONER: BaseStats(hp=550, atk=100, defense=50, spd=65),
}

ROLE_PREFERRED_ROW: Dict[Role, int] = {
    Role.TANK: 0,
    Role.WARRIOR: 0,
    Role.ARCHER: 2,
    Role.MAGE: 2,
    Role.ASSASSIN: 1,
    Role.HEALER: 2,
    Role.SUMMONER: 2,
}

RoleStatTable = Mapping[Role, BaseStats]


def role_base_stats(role: Role, custom: Optional[RoleStatTable] = None) -> BaseStats:
    """Base stats for a role, preferring a per-battle custom table."""
    if custom is not None and role in custom:
        return custom[role]
    return ROLE_BASE_STATS[role]


# ----------------------------
# Progression constants
# ----------------------------

MIN_LEVEL = 1
MAX_LEVEL = 100
MAX_ASCENSION = 6
LEVEL_STAT_BONUS = 0.1  # +10% per level above 1
ASCENSION_STAT_BONUS = 0.15  # +15% per ascension
