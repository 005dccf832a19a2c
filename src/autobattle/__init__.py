"""
autobattle core package.

Headless, deterministic auto-battle simulation:
- Seeded mulberry32 RNG shared by every random decision
- Role/level/ascension stat model and a bundled character catalog
- Battle engine producing an ordered, replayable action log
- YAML battle files validated against a bundled JSON Schema

Presentation layers replay ``BattleResult.action_log``; they never drive the
simulation.
"""
from .battle_file import BattleSetup, load_battle
from .characters import CharacterCatalog, RosterEntry, default_catalog, derive_stats
from .combat import (
    DEFAULT_ABILITIES,
    AbilityDefinition,
    ActionLogEntry,
    BattleEngine,
    BattleResult,
    HpOverride,
    SummonerConfig,
    SummonTemplate,
    simulate_battle,
)
from .config import EngineConfig
from .core import Role, SeededRNG, Team, Winner
from .errors import AutoBattleError, ConfigError, DataValidationError, DuplicateUnitError

__version__ = "0.1.0"

__all__ = [
    "AbilityDefinition",
    "ActionLogEntry",
    "AutoBattleError",
    "BattleEngine",
    "BattleResult",
    "BattleSetup",
    "CharacterCatalog",
    "ConfigError",
    "DEFAULT_ABILITIES",
    "DataValidationError",
    "DuplicateUnitError",
    "EngineConfig",
    "HpOverride",
    "Role",
    "RosterEntry",
    "SeededRNG",
    "SummonTemplate",
    "SummonerConfig",
    "Team",
    "Winner",
    "default_catalog",
    "derive_stats",
    "load_battle",
    "simulate_battle",
]
