from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

from ..core.models import Position, Role, Team

logger = logging.getLogger(__name__)


@dataclass
class CombatState:
    """Mutable runtime record for one unit in a battle.

    Attributes:
        unit_id: Unique id within the battle.
        name: Display name used in logs.
        role: Combat role.
        team: Side the unit fights for.
        max_hp: Maximum hit points (>= 1).
        hp: Current hit points, always within [0, max_hp].
        atk: Attack stat.
        defense: Defense stat.
        spd: Speed; higher acts earlier in the turn.
        position: Board cell on the unit's own side.
        order: Arena insertion index, the "roster order" used for tie-breaks
            and for abilities that walk enemies in order.
        alive: Flips to False on lethal damage and never back.
    """

    unit_id: str
    name: str
    role: Role
    team: Team
    max_hp: int
    hp: int
    atk: int
    defense: int
    spd: int
    position: Position
    order: int = 0
    level: int = 1
    ascension: int = 0
    is_boss: bool = False
    is_summoned: bool = False
    alive: bool = True

    def __post_init__(self) -> None:
        if self.max_hp <= 0:
            raise ValueError("max_hp must be >= 1")
        # Clamp HP within [0, max_hp]
        self.hp = max(0, min(self.max_hp, int(self.hp)))
        if self.hp == 0:
            self.alive = False

    @property
    def hp_ratio(self) -> float:
        return self.hp / self.max_hp

    def take_damage(self, amount: int) -> int:
        """Apply damage, clamping HP to zero.

        Returns the HP actually removed (may be less than amount on overkill).
        Does not flip the alive flag; the engine does that so it can log the
        death at the right moment.
        """
        if amount < 0:
            raise ValueError("damage must be non-negative")
        before = self.hp
        self.hp = max(0, self.hp - amount)
        logger.debug("%s takes %d damage (HP: %d/%d)", self.name, amount, self.hp, self.max_hp)
        return before - self.hp

    def heal(self, amount: int) -> int:
        """Heal by amount, not exceeding max HP. Returns actual healed amount."""
        if amount < 0:
            raise ValueError("heal cannot be negative")
        before = self.hp
        self.hp = min(self.max_hp, self.hp + amount)
        healed = self.hp - before
        if healed:
            logger.debug("%s heals %d HP (HP: %d/%d)", self.name, healed, self.hp, self.max_hp)
        return healed

    def snapshot(self) -> "UnitSnapshot":
        return UnitSnapshot(
            unit_id=self.unit_id,
            name=self.name,
            role=self.role,
            team=self.team,
            hp=self.hp,
            max_hp=self.max_hp,
            atk=self.atk,
            defense=self.defense,
            spd=self.spd,
            position=self.position,
            alive=self.alive,
            is_boss=self.is_boss,
            is_summoned=self.is_summoned,
        )

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return (
            f"CombatState(id={self.unit_id!r}, team={self.team.value}, hp={self.hp}/{self.max_hp}, "
            f"spd={self.spd}, pos=({self.position.row},{self.position.col}), alive={self.alive})"
        )


@dataclass(frozen=True)
class UnitSnapshot:
    """Read-only view of a unit's state, exposed on battle results."""

    unit_id: str
    name: str
    role: Role
    team: Team
    hp: int
    max_hp: int
    atk: int
    defense: int
    spd: int
    position: Position
    alive: bool
    is_boss: bool = False
    is_summoned: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.unit_id,
            "name": self.name,
            "role": self.role.value,
            "team": self.team.value,
            "hp": self.hp,
            "maxHp": self.max_hp,
            "atk": self.atk,
            "def": self.defense,
            "spd": self.spd,
            "position": self.position.to_dict(),
            "isAlive": self.alive,
            "isBoss": self.is_boss,
            "isSummoned": self.is_summoned,
        }

