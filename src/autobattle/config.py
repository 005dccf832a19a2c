from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """Tunable battle constants.

    The defaults are the canonical balance values; battles using them are
    reproducible across every consumer of the same seed.
    """

    max_turns: int = 30
    crit_chance: float = 0.05
    crit_multiplier: float = 2.0
    damage_variance: float = 0.1
    ability_trigger_chance: float = 0.25
    heal_threshold: float = 0.7
    heal_multiplier: float = 2.0
    defense_constant: float = 100

    def __post_init__(self) -> None:
        if self.max_turns < 1:
            raise ConfigError("max_turns must be >= 1")
        for name in ("crit_chance", "ability_trigger_chance", "heal_threshold"):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                raise ConfigError(f"{name} must be between 0 and 1 (got {value})")
        if not (0.0 <= self.damage_variance <= 0.75):
            raise ConfigError("damage_variance must be between 0 and 0.75")
        if self.defense_constant <= 0:
            raise ConfigError("defense_constant must be positive")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "EngineConfig":
        """Build a config from a mapping, ignoring (and logging) unknown keys."""
        known = {f.name: f for f in dataclasses.fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            if key not in known:
                logger.warning("Ignoring unknown engine setting '%s'", key)
                continue
            if key == "max_turns":
                if float(value) != int(value):
                    raise ConfigError(f"max_turns must be a whole number (got {value})")
                values[key] = int(value)
            else:
                values[key] = float(value)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)
