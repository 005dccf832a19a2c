import logging

import pytest

from autobattle.characters.stats import RosterEntry
from autobattle.combat.board import UnitArena, assign_positions, first_free_cell
from autobattle.combat.state import CombatState
from autobattle.core.models import Position, Role, Team


def _state(uid, team=Team.PLAYER, pos=(0, 0), hp=100):
    return CombatState(uid, uid.upper(), Role.WARRIOR, team, 100, hp, 10, 10, 10, Position(*pos))


def test_units_take_their_preferred_rows_in_stable_order():
    roster = [
        RosterEntry("m1", "M1", Role.MAGE),
        RosterEntry("t1", "T1", Role.TANK),
        RosterEntry("a1", "A1", Role.ASSASSIN),
        RosterEntry("t2", "T2", Role.TANK),
    ]
    seated = assign_positions(roster, lambda e: e.role)
    placed = [(e.id, p.row, p.col) for e, p in seated]
    assert placed == [("t1", 0, 0), ("t2", 0, 1), ("a1", 1, 0), ("m1", 2, 0)]


def test_full_preferred_row_spills_to_first_free_cell():
    roster = [RosterEntry(f"t{i}", f"T{i}", Role.TANK) for i in range(5)]
    seated = assign_positions(roster, lambda e: e.role)
    cells = [(p.row, p.col) for _, p in seated]
    assert cells == [(0, 0), (0, 1), (0, 2), (1, 0), (1, 1)]


def test_thirteenth_unit_is_left_off_the_board(caplog):
    roster = [RosterEntry(f"u{i}", f"U{i}", Role.ARCHER) for i in range(13)]
    with caplog.at_level(logging.WARNING):
        seated = assign_positions(roster, lambda e: e.role)
    assert len(seated) == 12
    assert {(p.row, p.col) for _, p in seated} == {(r, c) for r in range(4) for c in range(3)}
    assert "No free cell" in caplog.text


def test_first_free_cell_scans_rows_then_columns():
    assert first_free_cell(set()) == Position(0, 0)
    assert first_free_cell({(0, 0), (0, 1), (0, 2)}) == Position(1, 0)
    full = {(r, c) for r in range(4) for c in range(3)}
    assert first_free_cell(full) is None


def test_position_range_is_validated():
    with pytest.raises(ValueError):
        Position(4, 0)
    with pytest.raises(ValueError):
        Position(0, 3)


def test_arena_order_and_dead_units_free_cells():
    arena = UnitArena()
    a = arena.add(_state("a", pos=(0, 0)))
    b = arena.add(_state("b", pos=(0, 1)))
    e = arena.add(_state("e", team=Team.ENEMY, pos=(0, 0)))
    assert (a.order, b.order, e.order) == (0, 1, 2)
    assert [u.unit_id for u in arena.living()] == ["a", "b", "e"]

    assert arena.find_empty_cell(Team.PLAYER) == Position(0, 2)
    a.take_damage(500)
    a.alive = False
    assert arena.find_empty_cell(Team.PLAYER) == Position(0, 0)
    assert "a" in arena and len(arena) == 3


def test_arena_rejects_duplicate_ids():
    arena = UnitArena()
    arena.add(_state("a"))
    with pytest.raises(ValueError):
        arena.add(_state("a"))


def test_view_is_read_only():
    arena = UnitArena()
    arena.add(_state("a"))
    view = arena.view()
    assert view["a"].hp == 100
    with pytest.raises(TypeError):
        view["b"] = view["a"]


def test_combat_state_clamps_and_heals():
    s = _state("x", hp=500)
    assert s.hp == 100
    assert s.take_damage(30) == 30
    assert s.heal(50) == 30
    assert s.hp == 100
    assert s.take_damage(1000) == 100
    assert s.hp == 0
    dead = _state("y", hp=0)
    assert dead.alive is False
