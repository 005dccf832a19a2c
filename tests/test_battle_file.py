from pathlib import Path

import pytest
import yaml

from autobattle.battle_file import load_battle, parse_battle
from autobattle.characters.catalog import CharacterCatalog
from autobattle.characters.stats import UnitDefinition
from autobattle.config import EngineConfig
from autobattle.core.models import Rarity, Role, Winner
from autobattle.data.loader import DataLoader, SchemaRegistry
from autobattle.errors import ConfigError, DataValidationError


def write_yaml(path: Path, obj) -> Path:
    path.write_text(yaml.safe_dump(obj), encoding="utf-8")
    return path


def test_engine_config_defaults_and_unknown_keys(caplog):
    cfg = EngineConfig.from_dict({"max_turns": 12, "crit_chance": 0, "warp_speed": 9})
    assert cfg.max_turns == 12
    assert cfg.crit_chance == 0.0
    assert cfg.heal_threshold == 0.7
    assert "warp_speed" in caplog.text
    assert EngineConfig.from_dict(None) == EngineConfig()


def test_engine_config_rejects_bad_values():
    with pytest.raises(ConfigError):
        EngineConfig(max_turns=0)
    with pytest.raises(ConfigError):
        EngineConfig(crit_chance=1.5)


def test_schema_registry_finds_battle_schema():
    assert "battle" in SchemaRegistry().names()


def test_sample_battle_loads_and_runs(battle_file):
    setup = load_battle(battle_file)
    assert setup.seed == 42
    assert [e.name for e in setup.player][:2] == ["Bruno", "Aria"]
    assert setup.ability_ids["p_cleric"] == ("ability_heal",)
    assert setup.summoners["e_necro"].max_active == 2
    assert setup.hp_overrides["char_004"].current == 300
    assert setup.abilities[0].id == "ability_shadow_volley"

    r1 = setup.build_engine().simulate()
    r2 = setup.build_engine().simulate()
    assert r1.to_dict() == r2.to_dict()
    assert r1.turns <= 30
    assert setup.build_engine(seed=7).seed == 7


def test_inline_units_and_engine_overrides(tmp_path):
    path = write_yaml(
        tmp_path / "b.yaml",
        {
            "seed": 3,
            "engine": {"max_turns": 2},
            "role_stats": {"tank": {"hp": 5000, "atk": 10, "def": 0, "spd": 1}},
            "player": [{"id": "p", "role": "tank", "name": "Wall"}],
            "enemy": [{"id": "e", "role": "tank"}],
        },
    )
    setup = load_battle(path)
    result = setup.build_engine().simulate()
    assert result.turns == 2
    assert result.winner is Winner.DRAW
    assert result.units["p"].max_hp == 5000
    assert result.units["e"].name == "e"


def test_schema_errors_are_reported(tmp_path):
    path = write_yaml(tmp_path / "bad.yaml", {"player": [{"id": "p", "role": "paladin"}]})
    with pytest.raises(DataValidationError) as ei:
        load_battle(path)
    human = ei.value.to_human()
    assert "enemy" in human
    assert "player/0" in human


def test_unknown_character_reference():
    with pytest.raises(ConfigError):
        parse_battle({"player": [{"character": "char_999"}], "enemy": []})


def test_missing_seed_needs_explicit_one():
    setup = parse_battle({"player": [{"id": "p", "role": "mage"}], "enemy": [{"id": "e", "role": "archer"}]})
    with pytest.raises(ConfigError):
        setup.build_engine()
    assert setup.build_engine(seed=1).simulate().turns >= 1


def test_enemy_hp_override_is_ignored(caplog):
    setup = parse_battle(
        {
            "player": [{"id": "p", "role": "mage"}],
            "enemy": [{"id": "e", "role": "archer", "hp": {"current": 1, "max": 10}}],
        }
    )
    assert setup.hp_overrides == {}
    assert "ignored" in caplog.text


def test_character_reference_can_be_renamed_and_reroled():
    setup = parse_battle(
        {
            "player": [{"character": "char_001", "id": "hero", "name": "Hero", "role": "warrior", "level": 5}],
            "enemy": [{"character": "char_004"}],
        }
    )
    hero = setup.player[0]
    assert (hero.id, hero.name, hero.role, hero.level) == ("hero", "Hero", Role.WARRIOR, 5)
    assert setup.enemy[0].id == "char_004"


def test_missing_and_unparseable_files(tmp_path):
    loader = DataLoader()
    with pytest.raises(ConfigError):
        loader.load(tmp_path / "nope.yaml")
    bad = tmp_path / "broken.yaml"
    bad.write_text("player: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError):
        loader.load(bad)


def test_fractional_max_turns_is_rejected(tmp_path):
    with pytest.raises(ConfigError):
        EngineConfig.from_dict({"max_turns": 2.5})
    assert EngineConfig.from_dict({"max_turns": 4.0}).max_turns == 4

    path = write_yaml(
        tmp_path / "frac.yaml",
        {"engine": {"max_turns": 2.5}, "player": [{"id": "p", "role": "tank"}], "enemy": [{"id": "e", "role": "tank"}]},
    )
    with pytest.raises(DataValidationError):
        load_battle(path)


def test_catalog_summoner_limits_templates_and_active_count(caplog):
    catalog = CharacterCatalog(
        [
            UnitDefinition("char_900", "Morwen", Role.SUMMONER, Rarity.EPIC, summon_ids=("skeleton",), max_summons=3),
        ]
    )
    summons = {
        "templates": [
            {"id": "skeleton", "name": "Skeleton", "role": "warrior"},
            {"id": "wisp", "name": "Wisp", "role": "mage"},
        ]
    }
    setup = parse_battle(
        {
            "player": [{"character": "char_900", "summons": summons}],
            "enemy": [{"id": "e", "role": "tank", "summons": summons}],
        },
        catalog=catalog,
    )
    morwen = setup.summoners["char_900"]
    assert morwen.max_active == 3
    assert [t.id for t in morwen.templates] == ["skeleton"]
    assert "Dropped 1 summon template" in caplog.text

    # Inline units keep every template and the default limit.
    inline = setup.summoners["e"]
    assert inline.max_active == 1
    assert [t.id for t in inline.templates] == ["skeleton", "wisp"]


def test_explicit_max_active_wins_over_catalog_default():
    catalog = CharacterCatalog([UnitDefinition("char_900", "Morwen", Role.SUMMONER, Rarity.EPIC, max_summons=3)])
    setup = parse_battle(
        {
            "player": [
                {
                    "character": "char_900",
                    "summons": {"max_active": 1, "templates": [{"id": "wisp", "role": "mage"}]},
                }
            ],
            "enemy": [],
        },
        catalog=catalog,
    )
    assert setup.summoners["char_900"].max_active == 1
    assert [t.id for t in setup.summoners["char_900"].templates] == ["wisp"]
