from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..characters.stats import RosterEntry, StatMultipliers, clamp_ascension, clamp_level, derive_stats
from ..config import EngineConfig
from ..core.models import ActionType, Role, RoleStatTable, Team, Winner
from ..core.rng import SeededRNG
from ..errors import DuplicateUnitError
from ..utils.events import EventBus
from .abilities import AbilityDefinition, AbilityResolver, AbilityStrategy, DEFAULT_ABILITIES
from .board import UnitArena, assign_positions
from .damage import DamageCalculator, DamageRoll
from .log import ActionLog, ActionLogEntry, SummonedUnit
from .state import CombatState, UnitSnapshot
from .targeting import default_target, heal_target
from .turn_queue import TurnQueue

logger = logging.getLogger(__name__)

ACTION_EVENT = "action"
BATTLE_END_EVENT = "battle_end"


@dataclass(frozen=True)
class SummonTemplate:
    """A unit a summoner can call in."""

    id: str
    name: str
    role: Role
    level: int = 1
    ascension: int = 0
    multipliers: StatMultipliers = field(default_factory=StatMultipliers)

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", Role(self.role))
        object.__setattr__(self, "level", clamp_level(self.level))
        object.__setattr__(self, "ascension", clamp_ascension(self.ascension))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SummonTemplate":
        mult = data.get("multipliers") or {}
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            role=Role(data["role"]),
            level=int(data.get("level", 1)),
            ascension=int(data.get("ascension", 0)),
            multipliers=StatMultipliers(
                hp=float(mult.get("hp", 1.0)),
                atk=float(mult.get("atk", 1.0)),
                defense=float(mult.get("def", mult.get("defense", 1.0))),
                spd=float(mult.get("spd", 1.0)),
            ),
        )


@dataclass(frozen=True)
class SummonerConfig:
    templates: Tuple[SummonTemplate, ...] = ()
    max_active: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "templates", tuple(self.templates))
        if self.max_active < 0:
            raise ValueError("max_active must be >= 0")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SummonerConfig":
        return cls(
            templates=tuple(SummonTemplate.from_dict(t) for t in data.get("templates", ())),
            max_active=int(data.get("max_active", 1)),
        )


@dataclass(frozen=True)
class HpOverride:
    """Carried-over HP for a player unit (current 0 means the unit starts dead)."""

    current: int
    maximum: int

    def __post_init__(self) -> None:
        if self.maximum < 1:
            raise ValueError("HpOverride.maximum must be >= 1")


class BattlePhase(str, Enum):
    INITIALIZED = "initialized"
    RUNNING = "running"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class BattleResult:
    """Outcome of a finished battle.

    ``units`` is a read-only mapping of every unit that took part (summons and
    the dead included) to its final snapshot.
    """

    winner: Winner
    turns: int
    action_log: Tuple[ActionLogEntry, ...]
    player_survivors: Tuple[str, ...]
    enemy_survivors: Tuple[str, ...]
    seed: int
    units: Mapping[str, UnitSnapshot] = field(default_factory=lambda: MappingProxyType({}))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "winner": self.winner.value,
            "turns": self.turns,
            "actionLog": [e.to_dict() for e in self.action_log],
            "playerSurvivors": list(self.player_survivors),
            "enemySurvivors": list(self.enemy_survivors),
            "seed": self.seed,
        }


StrategyKey = Union[Role, str]


class BattleEngine:
    """Deterministic auto-battle between two rosters.

    The engine owns its RNG and unit arena. Each turn it rebuilds initiative
    from living units and resolves exactly one action per unit; every damage,
    heal and summon is appended to the action log (and published on the event
    bus) in the order it happens. ``simulate()`` runs to the end and returns
    the same BattleResult on every call.
    """

    def __init__(
        self,
        player: Sequence[RosterEntry],
        enemy: Sequence[RosterEntry],
        seed: int,
        *,
        config: Optional[EngineConfig] = None,
        abilities: Optional[Sequence[AbilityDefinition]] = None,
        ability_ids: Optional[Mapping[str, Sequence[str]]] = None,
        boss_ability_roles: Optional[Mapping[str, Sequence[Role]]] = None,
        summoners: Optional[Mapping[str, SummonerConfig]] = None,
        role_stats: Optional[RoleStatTable] = None,
        hp_overrides: Optional[Mapping[str, Union[HpOverride, Tuple[int, int]]]] = None,
        strategies: Optional[Mapping[StrategyKey, AbilityStrategy]] = None,
        rng: Optional[SeededRNG] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        dupes = _duplicate_ids(list(player) + list(enemy))
        if dupes:
            raise DuplicateUnitError(dupes)

        self.seed = int(seed)
        self.config = config or EngineConfig()
        self.rng = rng if rng is not None else SeededRNG(self.seed)
        self.events = events
        self.damage = DamageCalculator(
            variance=self.config.damage_variance,
            crit_chance=self.config.crit_chance,
            crit_multiplier=self.config.crit_multiplier,
            defense_constant=self.config.defense_constant,
        )
        self.role_stats = role_stats
        self.resolver = AbilityResolver(DEFAULT_ABILITIES)
        for definition in abilities or ():
            self.resolver.define(definition)
        for key, strategy in (strategies or {}).items():
            if isinstance(key, Role):
                self.resolver.register_role(key, strategy)
            else:
                self.resolver.register_id(key, strategy)

        self._ability_ids: Dict[str, Tuple[str, ...]] = {k: tuple(v) for k, v in (ability_ids or {}).items()}
        self._boss_roles: Dict[str, Tuple[Role, ...]] = {
            k: tuple(Role(r) for r in v) for k, v in (boss_ability_roles or {}).items() if v
        }
        self._summoners: Dict[str, SummonerConfig] = dict(summoners or {})
        self._active_summons: Dict[str, List[str]] = {}
        self._summon_counter = 0
        self._cooldowns: Dict[str, int] = {}

        self.arena = UnitArena()
        self.queue = TurnQueue()
        self.log = ActionLog()
        self.turn = 0
        self._result: Optional[BattleResult] = None

        overrides = {k: _as_override(v) for k, v in (hp_overrides or {}).items()}
        self._seat(player, Team.PLAYER, overrides)
        self._seat(enemy, Team.ENEMY, {})

        self.phase = BattlePhase.TERMINAL if self._decided() else BattlePhase.INITIALIZED
        logger.info(
            "Battle initialized (seed=%s): %d player unit(s) vs %d enemy unit(s)",
            self.seed,
            len(self.arena.team(Team.PLAYER)),
            len(self.arena.team(Team.ENEMY)),
        )

    # ----------------------------
    # Setup
    # ----------------------------

    def _seat(self, roster: Sequence[RosterEntry], team: Team, overrides: Mapping[str, HpOverride]) -> None:
        for entry, position in assign_positions(roster, lambda e: e.role):
            stats = entry.stats(self.role_stats)
            max_hp, hp = stats.hp, stats.hp
            ov = overrides.get(entry.id)
            if ov is not None:
                max_hp, hp = ov.maximum, ov.current
            self.arena.add(
                CombatState(
                    unit_id=entry.id,
                    name=entry.name,
                    role=entry.role,
                    team=team,
                    max_hp=max_hp,
                    hp=hp,
                    atk=stats.atk,
                    defense=stats.defense,
                    spd=stats.spd,
                    position=position,
                    level=entry.level,
                    ascension=entry.ascension,
                    is_boss=entry.is_boss,
                )
            )

    # ----------------------------
    # Battle loop
    # ----------------------------

    def _decided(self) -> bool:
        return not self.arena.any_alive(Team.PLAYER) or not self.arena.any_alive(Team.ENEMY)

    def is_over(self) -> bool:
        return self._decided() or self.turn >= self.config.max_turns

    def simulate(self) -> BattleResult:
        """Run the battle to its end and return the result."""
        if self._result is not None:
            return self._result
        while not self.is_over():
            self.step_turn()
        return self._finish()

    def step_turn(self) -> bool:
        """Resolve one full turn. Returns True while the battle continues."""
        if self.phase is BattlePhase.TERMINAL or self.is_over():
            self.phase = BattlePhase.TERMINAL
            return False
        self.phase = BattlePhase.RUNNING
        self.turn += 1
        for unit_id, cd in self._cooldowns.items():
            if cd > 0:
                self._cooldowns[unit_id] = cd - 1

        self.queue.start_round(self.arena.living())
        while True:
            actor = self.queue.next_actor()
            if actor is None or self._decided():
                break
            self._act(actor)

        if self.is_over():
            self.phase = BattlePhase.TERMINAL
            return False
        return True

    def _finish(self) -> BattleResult:
        self.phase = BattlePhase.TERMINAL
        players = tuple(u.name for u in self.arena.living(Team.PLAYER))
        enemies = tuple(u.name for u in self.arena.living(Team.ENEMY))
        if players and not enemies:
            winner = Winner.PLAYER
        elif enemies and not players:
            winner = Winner.ENEMY
        else:
            winner = Winner.DRAW
        self._result = BattleResult(
            winner=winner,
            turns=self.turn,
            action_log=self.log.entries(),
            player_survivors=players,
            enemy_survivors=enemies,
            seed=self.seed,
            units=self.arena.view(),
        )
        logger.info("Battle over after %d turn(s): %s (%d log entries)", self.turn, winner.value, len(self.log))
        if self.events is not None:
            self.events.publish(BATTLE_END_EVENT, self._result)
        return self._result

    # ----------------------------
    # Action resolution
    # ----------------------------

    def _ability_ready(self, unit: CombatState) -> bool:
        return self._cooldowns.get(unit.unit_id, 0) <= 0

    def _start_cooldown(self, unit: CombatState) -> None:
        cd = self.resolver.cooldown_for(self._ability_ids.get(unit.unit_id, ()))
        if cd > 0:
            self._cooldowns[unit.unit_id] = cd

    def _act(self, actor: CombatState) -> None:
        trigger = self.config.ability_trigger_chance
        ready = self._ability_ready(actor)
        ids = self._ability_ids.get(actor.unit_id, ())

        if actor.role is Role.SUMMONER and ready and self._try_summon(actor):
            self._start_cooldown(actor)
            return

        if actor.role is Role.HEALER and ready:
            threshold, power = self.resolver.heal_parameters(
                ids, self.config.heal_threshold, self.config.heal_multiplier
            )
            wounded = heal_target(self.allies_of(actor), threshold)
            if wounded is not None and self.rng.chance(trigger):
                self.heal(actor, wounded, power)
                self._start_cooldown(actor)
                return

        target = default_target(actor.role, self.enemies_of(actor))
        if target is None:
            return

        if ready and self.rng.chance(trigger):
            strategy = self._strategy_for(actor, ids)
            if strategy is None:
                self.basic_attack(actor, target)
            else:
                strategy.execute(self, actor, target)
            self._start_cooldown(actor)
        else:
            self.basic_attack(actor, target)

    def _strategy_for(self, actor: CombatState, ids: Sequence[str]) -> Optional[AbilityStrategy]:
        pool = self._boss_roles.get(actor.unit_id)
        if pool:
            role = self.rng.pick(pool)
            logger.debug("%s draws %s ability from boss pool", actor.name, role.value)
            return self.resolver.for_role(role)
        return self.resolver.resolve(actor.role, ids)

    def _try_summon(self, actor: CombatState) -> bool:
        cfg = self._summoners.get(actor.unit_id)
        if cfg is None or not cfg.templates:
            return False
        active = [sid for sid in self._active_summons.get(actor.unit_id, []) if self._is_alive(sid)]
        self._active_summons[actor.unit_id] = active
        if len(active) >= cfg.max_active:
            return False
        if self.arena.find_empty_cell(actor.team) is None:
            return False
        if not self.rng.chance(self.config.ability_trigger_chance):
            return False
        self.summon(actor, self.rng.pick(cfg.templates))
        return True

    def _is_alive(self, unit_id: str) -> bool:
        unit = self.arena.get(unit_id)
        return unit is not None and unit.alive

    # ----------------------------
    # Operations used by ability strategies
    # ----------------------------

    def enemies_of(self, unit: CombatState) -> List[CombatState]:
        return self.arena.living(unit.team.opponent)

    def allies_of(self, unit: CombatState) -> List[CombatState]:
        return self.arena.living(unit.team)

    def strike(self, actor: CombatState, target: CombatState, atk: float, defense: float) -> DamageRoll:
        """Roll damage and apply it to the target (logging is up to the caller)."""
        roll = self.damage.roll(atk, defense, self.rng)
        target.take_damage(roll.damage)
        return roll

    def resolve_death(self, unit: CombatState) -> None:
        if unit.hp <= 0 and unit.alive:
            unit.alive = False
            self.record(unit, ActionType.DEATH, f"{unit.name} has been defeated!")

    def record(self, actor: CombatState, action_type: ActionType, message: str, **fields: Any) -> ActionLogEntry:
        entry = ActionLogEntry(
            turn=self.turn,
            actor_id=actor.unit_id,
            actor_name=actor.name,
            action_type=action_type,
            message=message,
            **fields,
        )
        self.log.append(entry)
        if self.events is not None:
            self.events.publish(ACTION_EVENT, entry)
        return entry

    def basic_attack(self, actor: CombatState, target: CombatState) -> None:
        roll = self.strike(actor, target, actor.atk, target.defense)
        if roll.is_critical:
            message = f"{actor.name} CRITICALLY hits {target.name} for {roll.damage} damage!"
        else:
            message = f"{actor.name} attacks {target.name} for {roll.damage} damage"
        self.record(
            actor,
            ActionType.ATTACK,
            message,
            target_id=target.unit_id,
            target_name=target.name,
            damage=roll.damage,
            is_critical=roll.is_critical,
        )
        self.resolve_death(target)

    def heal(self, actor: CombatState, target: CombatState, multiplier: float, ability_name: str = "Heal") -> None:
        amount = self.damage.compute_heal(actor.atk, self.rng, multiplier)
        healed = target.heal(max(0, amount))
        self.record(
            actor,
            ActionType.HEAL,
            f"{actor.name} heals {target.name} for {healed} HP",
            target_id=target.unit_id,
            target_name=target.name,
            healing=healed,
            ability_used=ability_name,
        )

    def summon(self, actor: CombatState, template: SummonTemplate) -> Optional[CombatState]:
        position = self.arena.find_empty_cell(actor.team)
        if position is None:
            return None
        stats = derive_stats(template.role, template.level, template.ascension, self.role_stats, template.multipliers)
        unit = self.arena.add(
            CombatState(
                unit_id=self._next_summon_id(template.id),
                name=template.name,
                role=template.role,
                team=actor.team,
                max_hp=max(1, stats.hp),
                hp=max(1, stats.hp),
                atk=stats.atk,
                defense=stats.defense,
                spd=stats.spd,
                position=position,
                level=template.level,
                ascension=template.ascension,
                is_summoned=True,
            )
        )
        self._active_summons.setdefault(actor.unit_id, []).append(unit.unit_id)
        self.record(
            actor,
            ActionType.SUMMON,
            f"{actor.name} summons {template.name}!",
            ability_used="Summon",
            summoned_unit=SummonedUnit(
                unit_id=unit.unit_id,
                name=unit.name,
                role=unit.role,
                hp=unit.hp,
                atk=unit.atk,
                defense=unit.defense,
                spd=unit.spd,
                position=unit.position,
                team=unit.team,
            ),
        )
        return unit

    def _next_summon_id(self, template_id: str) -> str:
        while True:
            self._summon_counter += 1
            candidate = f"{template_id}_s{self._summon_counter}"
            if candidate not in self.arena:
                return candidate

    # ----------------------------
    # Introspection
    # ----------------------------

    def cooldown(self, unit_id: str) -> int:
        return self._cooldowns.get(unit_id, 0)

    def active_summons(self, unit_id: str) -> Tuple[str, ...]:
        return tuple(self._active_summons.get(unit_id, ()))

    def units(self) -> Mapping[str, UnitSnapshot]:
        return self.arena.view()


def _duplicate_ids(entries: Sequence[RosterEntry]) -> List[str]:
    counts = Counter(e.id for e in entries)
    return sorted(uid for uid, n in counts.items() if n > 1)


def _as_override(value: Union[HpOverride, Tuple[int, int]]) -> HpOverride:
    if isinstance(value, HpOverride):
        return value
    current, maximum = value
    return HpOverride(current=int(current), maximum=int(maximum))


def simulate_battle(
    player: Sequence[RosterEntry],
    enemy: Sequence[RosterEntry],
    seed: int,
    **options: Any,
) -> BattleResult:
    """Build an engine and run it to completion."""
    return BattleEngine(player, enemy, seed, **options).simulate()


__all__ = [
    "ACTION_EVENT",
    "BATTLE_END_EVENT",
    "BattleEngine",
    "BattlePhase",
    "BattleResult",
    "HpOverride",
    "SummonTemplate",
    "SummonerConfig",
    "simulate_battle",
]
