from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..core.models import ActionType, Role
from ..core.rng import SeededRNG
from .damage import DamageRoll
from .log import AoeHit, ActionLogEntry
from .state import CombatState
from .targeting import furthest_row_lowest_hp, heal_target, lowest_hp, nearest_row_lowest_hp

logger = logging.getLogger(__name__)


class AbilityTargeting(str, Enum):
    SINGLE_CLOSEST = "single_closest"
    SINGLE_LOWEST_HP = "single_lowest_hp"
    SINGLE_BACK_ROW = "single_back_row"
    AOE_FIRST_N = "aoe_first_n"
    AOE_RANDOM_N = "aoe_random_n"
    HEAL_LOWEST_ALLY = "heal_lowest_ally"
    SUMMON_UNIT = "summon_unit"


@dataclass(frozen=True)
class AbilityDefinition:
    """Data description of an ability.

    Attributes:
        id: Unique ability id, referenced from unit ability lists.
        name: Display name written to the action log.
        description: Free text for catalogs.
        allowed_roles: Roles that may use the ability.
        power_multiplier: Damage or heal multiplier relative to ATK.
        targeting: How targets are chosen.
        target_count: Number of targets for area modes.
        ignore_defense: Treat the target's DEF as 0.
        heal_threshold: HP ratio below which allies are eligible for healing.
        cooldown: Turns before the ability is ready again (0 means none).
    """

    id: str
    name: str
    description: str = ""
    allowed_roles: Tuple[Role, ...] = field(default_factory=tuple)
    power_multiplier: float = 1.0
    targeting: AbilityTargeting = AbilityTargeting.SINGLE_LOWEST_HP
    target_count: int = 1
    ignore_defense: bool = False
    heal_threshold: float = 0.7
    cooldown: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_roles", tuple(Role(r) for r in self.allowed_roles))
        object.__setattr__(self, "targeting", AbilityTargeting(self.targeting))
        if self.target_count < 1:
            raise ValueError(f"Ability {self.id}: target_count must be >= 1")
        if self.cooldown < 0:
            raise ValueError(f"Ability {self.id}: cooldown must be >= 0")

    def allows(self, role: Role) -> bool:
        return role in self.allowed_roles

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AbilityDefinition":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            description=str(data.get("description", "")),
            allowed_roles=tuple(data.get("allowed_roles", ())),
            power_multiplier=float(data.get("power_multiplier", 1.0)),
            targeting=AbilityTargeting(data.get("targeting", AbilityTargeting.SINGLE_LOWEST_HP.value)),
            target_count=int(data.get("target_count", 1)),
            ignore_defense=bool(data.get("ignore_defense", False)),
            heal_threshold=float(data.get("heal_threshold", 0.7)),
            cooldown=int(data.get("cooldown", 0) or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "allowed_roles": [r.value for r in self.allowed_roles],
            "power_multiplier": self.power_multiplier,
            "targeting": self.targeting.value,
            "target_count": self.target_count,
            "ignore_defense": self.ignore_defense,
            "heal_threshold": self.heal_threshold,
            "cooldown": self.cooldown,
        }


DEFAULT_ABILITIES: Tuple[AbilityDefinition, ...] = (
    AbilityDefinition(
        id="ability_taunt",
        name="Taunt",
        description="Reduced damage attack that draws enemy aggro. Deals 70% ATK.",
        allowed_roles=(Role.TANK,),
        power_multiplier=0.7,
        targeting=AbilityTargeting.SINGLE_CLOSEST,
    ),
    AbilityDefinition(
        id="ability_cleave",
        name="Cleave",
        description="Sweeping strike hitting up to 3 enemies for 60% ATK each.",
        allowed_roles=(Role.WARRIOR,),
        power_multiplier=0.6,
        targeting=AbilityTargeting.AOE_FIRST_N,
        target_count=3,
    ),
    AbilityDefinition(
        id="ability_multishot",
        name="Multi-shot",
        description="Fires arrows at 2 random enemies for 70% ATK each.",
        allowed_roles=(Role.ARCHER,),
        power_multiplier=0.7,
        targeting=AbilityTargeting.AOE_RANDOM_N,
        target_count=2,
    ),
    AbilityDefinition(
        id="ability_fireball",
        name="Fireball",
        description="High burst damage single-target spell. Deals 150% ATK.",
        allowed_roles=(Role.MAGE,),
        power_multiplier=1.5,
        targeting=AbilityTargeting.SINGLE_LOWEST_HP,
    ),
    AbilityDefinition(
        id="ability_backstab",
        name="Backstab",
        description="Strike from the shadows ignoring all armor. Deals 100% ATK, bypasses DEF.",
        allowed_roles=(Role.ASSASSIN,),
        power_multiplier=1.0,
        targeting=AbilityTargeting.SINGLE_BACK_ROW,
        ignore_defense=True,
    ),
    AbilityDefinition(
        id="ability_heal",
        name="Heal",
        description="Restores HP to the most wounded ally (below 70% HP). Heals for 200% ATK.",
        allowed_roles=(Role.HEALER,),
        power_multiplier=2.0,
        targeting=AbilityTargeting.HEAL_LOWEST_ALLY,
        heal_threshold=0.7,
    ),
    AbilityDefinition(
        id="ability_summon",
        name="Summon",
        description="Summons an ally unit onto the battlefield. Max summons depends on the summoner.",
        allowed_roles=(Role.SUMMONER,),
        power_multiplier=0.0,
        targeting=AbilityTargeting.SUMMON_UNIT,
    ),
)


def get_ability_by_id(abilities: Iterable[AbilityDefinition], ability_id: str) -> Optional[AbilityDefinition]:
    for a in abilities:
        if a.id == ability_id:
            return a
    return None


def get_abilities_for_role(abilities: Iterable[AbilityDefinition], role: Role) -> List[AbilityDefinition]:
    return [a for a in abilities if a.allows(Role(role))]


# ----------------------------
# Strategy interface
# ----------------------------


class BattleContext(Protocol):
    """Engine operations available to ability strategies."""

    rng: SeededRNG

    def enemies_of(self, unit: CombatState) -> List[CombatState]:  # pragma: no cover - protocol
        ...

    def allies_of(self, unit: CombatState) -> List[CombatState]:  # pragma: no cover - protocol
        ...

    def strike(self, actor: CombatState, target: CombatState, atk: float, defense: float) -> DamageRoll:  # pragma: no cover - protocol
        ...

    def resolve_death(self, unit: CombatState) -> None:  # pragma: no cover - protocol
        ...

    def record(self, actor: CombatState, action_type: ActionType, message: str, **fields: Any) -> ActionLogEntry:  # pragma: no cover - protocol
        ...

    def basic_attack(self, actor: CombatState, target: CombatState) -> None:  # pragma: no cover - protocol
        ...

    def heal(self, actor: CombatState, target: CombatState, multiplier: float, ability_name: str = "Heal") -> None:  # pragma: no cover - protocol
        ...


class AbilityStrategy(Protocol):
    """Executes one ability use. ``target`` is the actor's role-default target."""

    name: str

    def execute(self, ctx: BattleContext, actor: CombatState, target: CombatState) -> None:  # pragma: no cover - protocol
        ...


# ----------------------------
# Built-in strategies
# ----------------------------


class SingleTargetStrike:
    """One damage instance on the given target, logged with a fixed message."""

    def __init__(self, name: str, multiplier: float, message: str, ignore_defense: bool = False) -> None:
        self.name = name
        self.multiplier = multiplier
        self.message = message
        self.ignore_defense = ignore_defense

    def execute(self, ctx: BattleContext, actor: CombatState, target: CombatState) -> None:
        defense = 0 if self.ignore_defense else target.defense
        roll = ctx.strike(actor, target, actor.atk * self.multiplier, defense)
        ctx.record(
            actor,
            ActionType.ABILITY,
            self.message.format(actor=actor.name, target=target.name, damage=roll.damage),
            target_id=target.unit_id,
            target_name=target.name,
            damage=roll.damage,
            is_critical=roll.is_critical,
            ability_used=self.name,
        )
        ctx.resolve_death(target)


class AreaStrike:
    """Damage several living enemies, then log one summary entry.

    Targets are either the first ``count`` enemies in roster order or, when
    ``randomize`` is set, the first ``count`` of a shuffled copy. Each target's
    death is logged as it happens, ahead of the summary.
    """

    def __init__(self, name: str, multiplier: float, count: int, randomize: bool = False, ignore_defense: bool = False) -> None:
        self.name = name
        self.multiplier = multiplier
        self.count = count
        self.randomize = randomize
        self.ignore_defense = ignore_defense

    def select(self, ctx: BattleContext, actor: CombatState) -> List[CombatState]:
        enemies = ctx.enemies_of(actor)
        if self.randomize:
            enemies = list(ctx.rng.shuffle(list(enemies)))
        return enemies[: self.count]

    def execute(self, ctx: BattleContext, actor: CombatState, target: CombatState) -> None:
        hits: List[AoeHit] = []
        names: List[str] = []
        total = 0
        for unit in self.select(ctx, actor):
            defense = 0 if self.ignore_defense else unit.defense
            roll = ctx.strike(actor, unit, actor.atk * self.multiplier, defense)
            total += roll.damage
            names.append(unit.name)
            hits.append(AoeHit(unit.unit_id, roll.damage))
            ctx.resolve_death(unit)
        ctx.record(
            actor,
            ActionType.ABILITY,
            f"{actor.name} uses {self.name} hitting {', '.join(names)} for {total} total damage!",
            damage=total,
            ability_used=self.name,
            aoe_targets=tuple(hits),
        )


class BasicAttackAbility:
    """An ability slot that resolves as a plain attack."""

    def __init__(self, name: str = "Attack") -> None:
        self.name = name

    def execute(self, ctx: BattleContext, actor: CombatState, target: CombatState) -> None:
        ctx.basic_attack(actor, target)


TAUNT = SingleTargetStrike("Taunt", 0.7, "{actor} uses Taunt on {target} for {damage} damage and draws attention!")
CLEAVE = AreaStrike("Cleave", 0.6, 3)
MULTI_SHOT = AreaStrike("Multi-shot", 0.7, 2, randomize=True)
FIREBALL = SingleTargetStrike("Fireball", 1.5, "{actor} hurls a Fireball at {target} for {damage} damage!")
BACKSTAB = SingleTargetStrike(
    "Backstab", 1.0, "{actor} Backstabs {target} for {damage} damage, ignoring armor!", ignore_defense=True
)

BUILTIN_ROLE_STRATEGIES: Dict[Role, AbilityStrategy] = {
    Role.TANK: TAUNT,
    Role.WARRIOR: CLEAVE,
    Role.ARCHER: MULTI_SHOT,
    Role.MAGE: FIREBALL,
    Role.ASSASSIN: BACKSTAB,
    Role.HEALER: BasicAttackAbility(),
    Role.SUMMONER: BasicAttackAbility(),
}

BUILTIN_ID_STRATEGIES: Dict[str, AbilityStrategy] = {
    "ability_taunt": TAUNT,
    "ability_cleave": CLEAVE,
    "ability_multishot": MULTI_SHOT,
    "ability_fireball": FIREBALL,
    "ability_backstab": BACKSTAB,
    "ability_heal": BasicAttackAbility(),
    "ability_summon": BasicAttackAbility(),
}


class DataDrivenAbility:
    """Strategy built from an AbilityDefinition supplied by configuration.

    The definition's targeting mode picks its own targets; ``summon_unit``
    resolves as a basic attack and ``heal_lowest_ally`` falls back to one when
    no ally is below the threshold.
    """

    _SINGLE = {
        AbilityTargeting.SINGLE_CLOSEST: nearest_row_lowest_hp,
        AbilityTargeting.SINGLE_LOWEST_HP: lowest_hp,
        AbilityTargeting.SINGLE_BACK_ROW: furthest_row_lowest_hp,
    }

    def __init__(self, definition: AbilityDefinition) -> None:
        self.definition = definition
        self.name = definition.name

    def execute(self, ctx: BattleContext, actor: CombatState, target: CombatState) -> None:
        d = self.definition
        mode = d.targeting
        if mode in self._SINGLE:
            chosen = self._SINGLE[mode](ctx.enemies_of(actor)) or target
            SingleTargetStrike(
                d.name,
                d.power_multiplier,
                "{actor} uses " + d.name.replace("{", "{{").replace("}", "}}") + " on {target} for {damage} damage!",
                ignore_defense=d.ignore_defense,
            ).execute(ctx, actor, chosen)
        elif mode in (AbilityTargeting.AOE_FIRST_N, AbilityTargeting.AOE_RANDOM_N):
            AreaStrike(
                d.name,
                d.power_multiplier,
                d.target_count,
                randomize=mode is AbilityTargeting.AOE_RANDOM_N,
                ignore_defense=d.ignore_defense,
            ).execute(ctx, actor, target)
        elif mode is AbilityTargeting.HEAL_LOWEST_ALLY:
            wounded = heal_target(ctx.allies_of(actor), d.heal_threshold)
            if wounded is None:
                ctx.basic_attack(actor, target)
            else:
                ctx.heal(actor, wounded, d.power_multiplier, ability_name=d.name)
        else:
            ctx.basic_attack(actor, target)


class AbilityResolver:
    """Strategy table keyed by role and by ability id.

    ``resolve`` picks the strategy for a unit: the first of its ability ids that
    has a strategy and whose definition admits the unit's role, otherwise the
    strategy registered for its role. Built-in ids always map to the built-in
    role strategies; other definitions become DataDrivenAbility entries.
    """

    def __init__(self, definitions: Iterable[AbilityDefinition] = DEFAULT_ABILITIES) -> None:
        self._definitions: Dict[str, AbilityDefinition] = {}
        self._by_role: Dict[Role, AbilityStrategy] = dict(BUILTIN_ROLE_STRATEGIES)
        self._by_id: Dict[str, AbilityStrategy] = dict(BUILTIN_ID_STRATEGIES)
        for d in definitions:
            self.define(d)

    def define(self, definition: AbilityDefinition) -> None:
        """Add or replace a definition, registering a strategy for custom ids."""
        self._definitions[definition.id] = definition
        if definition.id not in BUILTIN_ID_STRATEGIES:
            self._by_id[definition.id] = DataDrivenAbility(definition)
            logger.debug("Registered data-driven ability %s (%s)", definition.id, definition.targeting.value)

    def register_role(self, role: Role, strategy: AbilityStrategy) -> None:
        self._by_role[Role(role)] = strategy

    def register_id(self, ability_id: str, strategy: AbilityStrategy) -> None:
        self._by_id[ability_id] = strategy

    def definition(self, ability_id: str) -> Optional[AbilityDefinition]:
        return self._definitions.get(ability_id)

    def definitions(self) -> List[AbilityDefinition]:
        return list(self._definitions.values())

    def for_role(self, role: Role) -> Optional[AbilityStrategy]:
        return self._by_role.get(Role(role))

    def resolve(self, role: Role, ability_ids: Sequence[str] = ()) -> Optional[AbilityStrategy]:
        for aid in ability_ids:
            strategy = self._by_id.get(aid)
            if strategy is None:
                continue
            d = self._definitions.get(aid)
            if d is not None and not d.allows(role):
                continue
            return strategy
        return self.for_role(role)

    def cooldown_for(self, ability_ids: Sequence[str]) -> int:
        """Largest cooldown among the given ability ids (0 when none apply)."""
        best = 0
        for aid in ability_ids:
            d = self._definitions.get(aid)
            if d is not None and d.cooldown > best:
                best = d.cooldown
        return best

    def heal_parameters(self, ability_ids: Sequence[str], default_threshold: float, default_multiplier: float) -> Tuple[float, float]:
        """Threshold and power of the first heal ability among the ids."""
        for aid in ability_ids:
            d = self._definitions.get(aid)
            if d is not None and d.targeting is AbilityTargeting.HEAL_LOWEST_ALLY:
                return d.heal_threshold, d.power_multiplier
        return default_threshold, default_multiplier


__all__ = [
    "AbilityDefinition",
    "AbilityResolver",
    "AbilityStrategy",
    "AbilityTargeting",
    "AreaStrike",
    "BasicAttackAbility",
    "BattleContext",
    "DEFAULT_ABILITIES",
    "DataDrivenAbility",
    "SingleTargetStrike",
    "get_abilities_for_role",
    "get_ability_by_id",
]
