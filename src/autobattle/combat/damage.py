from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Protocol


logger = logging.getLogger(__name__)


class SupportsDraws(Protocol):
    """The slice of SeededRNG the formulas need."""

    def uniform(self, lo: float, hi: float) -> float:  # pragma: no cover - protocol
        ...

    def chance(self, probability: float) -> bool:  # pragma: no cover - protocol
        ...


@dataclass(frozen=True)
class DamageRoll:
    """Details of a computed damage roll.

    Attributes:
        base: Damage after defense mitigation, before RNG.
        multiplier: The variance multiplier drawn for this hit.
        is_critical: Whether the crit roll succeeded.
        damage: Final integer damage (>= 1).
    """

    base: float
    multiplier: float
    is_critical: bool
    damage: int


class DamageCalculator:
    """Damage and heal formulas shared by basic attacks and abilities.

    Damage:
      reduction = def / (def + 100)
      base = atk * (1 - reduction)
      raw = floor(base * Uniform(1 - variance, 1 + variance))
      crit = chance(crit_chance); on crit raw = floor(raw * crit_multiplier)
      damage = max(1, raw)

    Heal:
      amount = floor(atk * heal_multiplier * Uniform(1 - variance, 1 + variance))

    Every damage instance draws exactly one variance roll then one crit roll;
    a heal draws one variance roll and never crits.
    """

    def __init__(
        self,
        variance: float = 0.10,
        crit_chance: float = 0.05,
        crit_multiplier: float = 2.0,
        defense_constant: float = 100,
    ) -> None:
        if not (0.0 <= variance <= 0.75):
            raise ValueError("variance must be between 0.0 and 0.75")
        if defense_constant <= 0:
            raise ValueError("defense_constant must be positive")
        self.variance = float(variance)
        self.crit_chance = float(crit_chance)
        self.crit_multiplier = float(crit_multiplier)
        self.defense_constant = defense_constant

    def roll(self, atk: float, defense: float, rng: SupportsDraws) -> DamageRoll:
        """Roll one damage instance.

        Args:
            atk: Attack value, already including any ability multiplier.
            defense: Target defense, or 0 when the ability ignores defense.
            rng: Draw source; consumes two draws.
        """
        if atk < 0 or defense < 0:
            logger.warning("Negative stat detected (atk=%s, def=%s); clamping to zero.", atk, defense)
            atk = max(0, atk)
            defense = max(0, defense)

        reduction = defense / (defense + self.defense_constant)
        base = atk * (1 - reduction)
        multiplier = rng.uniform(1 - self.variance, 1 + self.variance)
        raw = math.floor(base * multiplier)

        is_critical = rng.chance(self.crit_chance)
        if is_critical:
            raw = math.floor(raw * self.crit_multiplier)

        return DamageRoll(base=base, multiplier=multiplier, is_critical=is_critical, damage=max(1, raw))

    def compute_damage(self, atk: float, defense: float, rng: SupportsDraws) -> int:
        return self.roll(atk, defense, rng).damage

    def compute_heal(self, atk: float, rng: SupportsDraws, multiplier: float = 2.0) -> int:
        """Heal amount before clipping to the target's missing HP."""
        variance = rng.uniform(1 - self.variance, 1 + self.variance)
        return math.floor(atk * multiplier * variance)
