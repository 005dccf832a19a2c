"""
Combat package for autobattle.

Contains:
- Per-unit runtime state and the board/arena that owns it.
- Damage and heal formulas with RNG variance and a strict floor of 1 damage.
- SPD initiative, role targeting rules and the ability strategy table.
- The deterministic battle engine and its replayable action log.
"""

from .abilities import DEFAULT_ABILITIES, AbilityDefinition, AbilityResolver, AbilityTargeting
from .damage import DamageCalculator, DamageRoll
from .engine import (
    BattleEngine,
    BattlePhase,
    BattleResult,
    HpOverride,
    SummonerConfig,
    SummonTemplate,
    simulate_battle,
)
from .log import ActionLog, ActionLogEntry, AoeHit, LogCursor, SummonedUnit
from .state import CombatState, UnitSnapshot
from .turn_queue import TurnQueue

__all__ = [
    "AbilityDefinition",
    "AbilityResolver",
    "AbilityTargeting",
    "ActionLog",
    "ActionLogEntry",
    "AoeHit",
    "BattleEngine",
    "BattlePhase",
    "BattleResult",
    "CombatState",
    "DEFAULT_ABILITIES",
    "DamageCalculator",
    "DamageRoll",
    "HpOverride",
    "LogCursor",
    "SummonTemplate",
    "SummonedUnit",
    "SummonerConfig",
    "TurnQueue",
    "UnitSnapshot",
    "simulate_battle",
]
