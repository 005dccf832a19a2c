from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence

from ..core.models import Role
from .state import CombatState

# All selectors receive living units in roster order and return the first unit
# with the smallest key, so ties resolve to roster order.
TargetSelector = Callable[[Sequence[CombatState]], Optional[CombatState]]


def nearest_row_lowest_hp(enemies: Sequence[CombatState]) -> Optional[CombatState]:
    """Front row first, then the most damaged unit in that row."""
    if not enemies:
        return None
    return min(enemies, key=lambda u: (u.position.row, u.hp))


def furthest_row_lowest_hp(enemies: Sequence[CombatState]) -> Optional[CombatState]:
    """Back row first, then the most damaged unit in that row."""
    if not enemies:
        return None
    return min(enemies, key=lambda u: (-u.position.row, u.hp))


def lowest_hp(enemies: Sequence[CombatState]) -> Optional[CombatState]:
    if not enemies:
        return None
    return min(enemies, key=lambda u: u.hp)


ROLE_TARGETING: Dict[Role, TargetSelector] = {
    Role.TANK: nearest_row_lowest_hp,
    Role.WARRIOR: nearest_row_lowest_hp,
    Role.ASSASSIN: furthest_row_lowest_hp,
    Role.ARCHER: lowest_hp,
    Role.MAGE: lowest_hp,
    Role.HEALER: lowest_hp,
    Role.SUMMONER: lowest_hp,
}


def default_target(role: Role, enemies: Sequence[CombatState]) -> Optional[CombatState]:
    """Pick the target a unit of ``role`` attacks when left to its own devices."""
    selector = ROLE_TARGETING.get(role, lowest_hp)
    return selector(enemies)


def heal_target(allies: Sequence[CombatState], threshold: float = 0.7) -> Optional[CombatState]:
    """Ally below ``threshold`` of max HP with the lowest HP ratio, if any."""
    wounded = [u for u in allies if u.hp < u.max_hp * threshold]
    if not wounded:
        return None
    return min(wounded, key=lambda u: u.hp / u.max_hp)


__all__ = [
    "ROLE_TARGETING",
    "TargetSelector",
    "default_target",
    "furthest_row_lowest_hp",
    "heal_target",
    "lowest_hp",
    "nearest_row_lowest_hp",
]
