import pytest

from autobattle.characters.stats import RosterEntry
from autobattle.combat.abilities import (
    DEFAULT_ABILITIES,
    AbilityDefinition,
    AbilityResolver,
    AbilityTargeting,
    DataDrivenAbility,
    get_abilities_for_role,
    get_ability_by_id,
)
from autobattle.combat.engine import BattleEngine
from autobattle.core.models import ActionType, Role


def _def(**kw):
    base = dict(id="quake", name="Quake", allowed_roles=(Role.WARRIOR,), targeting=AbilityTargeting.AOE_FIRST_N)
    base.update(kw)
    return AbilityDefinition(**base)


def test_default_catalog_lookups():
    assert len(DEFAULT_ABILITIES) == 7
    fireball = get_ability_by_id(DEFAULT_ABILITIES, "ability_fireball")
    assert fireball.power_multiplier == 1.5
    assert get_ability_by_id(DEFAULT_ABILITIES, "nope") is None
    assert [a.name for a in get_abilities_for_role(DEFAULT_ABILITIES, Role.HEALER)] == ["Heal"]
    assert all(a.cooldown == 0 for a in DEFAULT_ABILITIES)


def test_definition_from_dict_round_trip():
    raw = {
        "id": "mend",
        "name": "Mend",
        "allowed_roles": ["healer"],
        "power_multiplier": 1.0,
        "targeting": "heal_lowest_ally",
        "heal_threshold": 0.5,
        "cooldown": 3,
    }
    d = AbilityDefinition.from_dict(raw)
    assert d.allowed_roles == (Role.HEALER,)
    assert d.targeting is AbilityTargeting.HEAL_LOWEST_ALLY
    assert AbilityDefinition.from_dict(d.to_dict()) == d


def test_definition_validation():
    with pytest.raises(ValueError):
        _def(target_count=0)
    with pytest.raises(ValueError):
        _def(cooldown=-1)


def test_resolver_dispatch_rules():
    resolver = AbilityResolver()
    assert resolver.resolve(Role.TANK).name == "Taunt"
    assert resolver.resolve(Role.MAGE, ["ability_fireball"]).name == "Fireball"
    # Ability not allowed for the role falls through to the role strategy.
    assert resolver.resolve(Role.TANK, ["ability_fireball"]).name == "Taunt"
    assert resolver.resolve(Role.TANK, ["missing"]).name == "Taunt"

    resolver.define(_def())
    strategy = resolver.resolve(Role.WARRIOR, ["quake"])
    assert isinstance(strategy, DataDrivenAbility)
    assert strategy.name == "Quake"


def test_cooldown_and_heal_parameters():
    resolver = AbilityResolver()
    resolver.define(_def(cooldown=2))
    resolver.define(_def(id="mend", name="Mend", targeting="heal_lowest_ally", heal_threshold=0.5, power_multiplier=1.5))
    assert resolver.cooldown_for(["quake", "ability_cleave"]) == 2
    assert resolver.cooldown_for([]) == 0
    assert resolver.heal_parameters(["quake", "mend"], 0.7, 2.0) == (0.5, 1.5)
    assert resolver.heal_parameters([], 0.7, 2.0) == (0.7, 2.0)


def test_data_driven_area_ability_ignoring_defense(scripted):
    player = [RosterEntry("t1", "T1", Role.TANK), RosterEntry("t2", "T2", Role.TANK), RosterEntry("t3", "T3", Role.TANK)]
    enemy = [RosterEntry("w", "Grunt", Role.WARRIOR)]
    engine = BattleEngine(
        player,
        enemy,
        0,
        abilities=[_def(target_count=2, power_multiplier=1.0, ignore_defense=True)],
        ability_ids={"w": ["quake"]},
        rng=scripted([0.0], default=0.5),
    )
    engine.step_turn()
    entry = engine.log.entries()[0]
    assert entry.action_type is ActionType.ABILITY
    assert [h.unit_id for h in entry.aoe_targets] == ["t1", "t2"]
    assert entry.damage == 240
    assert entry.message == "Grunt uses Quake hitting T1, T2 for 240 total damage!"


def test_custom_role_strategy_is_used(scripted):
    calls = []

    class Shout:
        name = "Shout"

        def execute(self, ctx, actor, target):
            calls.append((actor.unit_id, target.unit_id))
            ctx.record(actor, ActionType.ABILITY, f"{actor.name} shouts at {target.name}", ability_used=self.name)

    player = [RosterEntry("p", "Bruno", Role.TANK)]
    enemy = [RosterEntry("e", "Mira", Role.MAGE)]
    engine = BattleEngine(player, enemy, 0, strategies={Role.MAGE: Shout()}, rng=scripted([0.0]))
    engine.step_turn()
    assert calls == [("e", "p")]
    assert engine.log.entries()[0].message == "Mira shouts at Bruno"


def test_summon_targeting_definition_falls_back_to_attack(scripted):
    player = [RosterEntry("p", "Bruno", Role.TANK)]
    enemy = [RosterEntry("e", "Mira", Role.MAGE)]
    call = _def(id="call", name="Call", allowed_roles=(Role.MAGE,), targeting="summon_unit")
    engine = BattleEngine(player, enemy, 0, abilities=[call], ability_ids={"e": ["call"]}, rng=scripted([0.0]))
    engine.step_turn()
    assert engine.log.entries()[0].action_type is ActionType.ATTACK


def test_configured_heal_defaults_to_standard_threshold(scripted):
    mend = AbilityDefinition.from_dict(
        {"id": "mend", "name": "Mend", "allowed_roles": ["healer"], "targeting": "heal_lowest_ally"}
    )
    assert mend.heal_threshold == 0.7

    player = [RosterEntry("p_heal", "Medic", Role.HEALER), RosterEntry("p_tank", "Bruno", Role.TANK)]
    enemy = [RosterEntry("e_tank", "Rock", Role.TANK)]
    engine = BattleEngine(
        player,
        enemy,
        0,
        abilities=[mend],
        ability_ids={"p_heal": ["mend"]},
        hp_overrides={"p_tank": (600, 1000)},
        rng=scripted([0.0, 0.5]),
    )
    engine.step_turn()
    entry = engine.log.entries()[0]
    assert entry.action_type is ActionType.HEAL
    assert entry.target_id == "p_tank"
    assert entry.healing == 60
