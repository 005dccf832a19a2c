"""Battle files: YAML descriptions of a full battle setup.

A battle file names both rosters plus everything the engine can be configured
with (seed, engine constants, custom role stats, extra abilities, boss pools,
summoner templates and carried-over HP). Units may reference the bundled
character catalog with ``character: char_001``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .characters.catalog import CharacterCatalog, default_catalog
from .characters.stats import RosterEntry, UnitDefinition
from .combat.abilities import AbilityDefinition
from .combat.engine import BattleEngine, HpOverride, SummonerConfig
from .config import EngineConfig
from .core.models import BaseStats, Role
from .core.rng import SeededRNG
from .data.loader import DataLoader
from .errors import ConfigError
from .utils.events import EventBus

logger = logging.getLogger(__name__)

BATTLE_SCHEMA = "battle"


@dataclass(frozen=True)
class BattleSetup:
    """Everything needed to construct a BattleEngine."""

    player: Tuple[RosterEntry, ...]
    enemy: Tuple[RosterEntry, ...]
    seed: Optional[int] = None
    config: EngineConfig = field(default_factory=EngineConfig)
    role_stats: Mapping[Role, BaseStats] = field(default_factory=dict)
    abilities: Tuple[AbilityDefinition, ...] = ()
    ability_ids: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    boss_ability_roles: Mapping[str, Tuple[Role, ...]] = field(default_factory=dict)
    summoners: Mapping[str, SummonerConfig] = field(default_factory=dict)
    hp_overrides: Mapping[str, HpOverride] = field(default_factory=dict)

    def build_engine(
        self,
        seed: Optional[int] = None,
        *,
        events: Optional[EventBus] = None,
        rng: Optional[SeededRNG] = None,
    ) -> BattleEngine:
        """Create an engine; ``seed`` overrides the file's seed."""
        chosen = seed if seed is not None else self.seed
        if chosen is None:
            raise ConfigError("No seed given: set 'seed' in the battle file or pass one explicitly")
        return BattleEngine(
            list(self.player),
            list(self.enemy),
            chosen,
            config=self.config,
            abilities=list(self.abilities),
            ability_ids=self.ability_ids,
            boss_ability_roles=self.boss_ability_roles,
            summoners=self.summoners,
            role_stats=self.role_stats or None,
            hp_overrides=self.hp_overrides,
            rng=rng,
            events=events,
        )


def load_battle(
    path: os.PathLike | str,
    *,
    catalog: Optional[CharacterCatalog] = None,
    loader: Optional[DataLoader] = None,
) -> BattleSetup:
    """Read, validate and parse a battle file."""
    loader = loader or DataLoader()
    data = loader.load(path, schema=BATTLE_SCHEMA)
    logger.info("Loaded battle file %s", path)
    return parse_battle(data, catalog=catalog)


def parse_battle(data: Mapping[str, Any], *, catalog: Optional[CharacterCatalog] = None) -> BattleSetup:
    """Turn an already validated battle document into a BattleSetup."""
    catalog = catalog or default_catalog()
    ability_ids: Dict[str, Tuple[str, ...]] = {}
    boss_roles: Dict[str, Tuple[Role, ...]] = {}
    summoners: Dict[str, SummonerConfig] = {}
    hp_overrides: Dict[str, HpOverride] = {}

    rosters: Dict[str, List[RosterEntry]] = {"player": [], "enemy": []}
    for side in ("player", "enemy"):
        for raw in data.get(side) or []:
            definition = _definition(raw, catalog)
            entry = _roster_entry(raw, definition)
            rosters[side].append(entry)
            if raw.get("abilities"):
                ability_ids[entry.id] = tuple(raw["abilities"])
            if raw.get("ability_pool"):
                boss_roles[entry.id] = tuple(Role(r) for r in raw["ability_pool"])
            if raw.get("summons"):
                summoners[entry.id] = _summoner_config(raw["summons"], definition)
            if raw.get("hp"):
                if side != "player":
                    logger.warning("HP override on enemy unit '%s' ignored; only player units carry HP", entry.id)
                else:
                    hp_overrides[entry.id] = HpOverride(current=int(raw["hp"]["current"]), maximum=int(raw["hp"]["max"]))

    try:
        config = EngineConfig.from_dict(data.get("engine"))
        abilities = tuple(AbilityDefinition.from_dict(a) for a in data.get("abilities") or [])
    except ValueError as e:
        raise ConfigError(str(e)) from e
    role_stats = {Role(k): BaseStats.from_dict(v) for k, v in (data.get("role_stats") or {}).items()}
    seed = data.get("seed")

    return BattleSetup(
        player=tuple(rosters["player"]),
        enemy=tuple(rosters["enemy"]),
        seed=int(seed) if seed is not None else None,
        config=config,
        role_stats=role_stats,
        abilities=abilities,
        ability_ids=ability_ids,
        boss_ability_roles=boss_roles,
        summoners=summoners,
        hp_overrides=hp_overrides,
    )


def _definition(raw: Mapping[str, Any], catalog: CharacterCatalog) -> Optional[UnitDefinition]:
    if "character" not in raw:
        return None
    try:
        return catalog.get(raw["character"])
    except KeyError as e:
        raise ConfigError(f"Unknown character reference: {raw['character']}") from e


def _roster_entry(raw: Mapping[str, Any], definition: Optional[UnitDefinition]) -> RosterEntry:
    level = int(raw.get("level", 1))
    ascension = int(raw.get("ascension", 0))
    is_boss = bool(raw.get("boss", False))
    if definition is not None:
        return RosterEntry(
            id=str(raw.get("id", definition.id)),
            name=str(raw.get("name", definition.name)),
            role=Role(raw.get("role", definition.role)),
            level=level,
            ascension=ascension,
            rarity=raw.get("rarity", definition.rarity),
            is_boss=is_boss,
        )
    return RosterEntry(
        id=str(raw["id"]),
        name=str(raw.get("name", raw["id"])),
        role=Role(raw["role"]),
        level=level,
        ascension=ascension,
        rarity=raw.get("rarity", "common"),
        is_boss=is_boss,
    )


def _summoner_config(raw: Mapping[str, Any], definition: Optional[UnitDefinition]) -> SummonerConfig:
    """Inline summon setup, narrowed to what a catalog character may call in.

    A referenced character supplies the default ``max_active`` and, when it
    lists ``summon_ids``, only templates with those ids are kept.
    """
    data = dict(raw)
    if definition is None:
        return SummonerConfig.from_dict(data)
    data.setdefault("max_active", definition.max_summons)
    if definition.summon_ids:
        templates = [t for t in data.get("templates", ()) if t["id"] in definition.summon_ids]
        dropped = len(data.get("templates", ())) - len(templates)
        if dropped:
            logger.warning(
                "Dropped %d summon template(s) not available to character '%s'", dropped, definition.id
            )
        data["templates"] = templates
    return SummonerConfig.from_dict(data)
