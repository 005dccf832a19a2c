from dataclasses import dataclass

from autobattle.combat.turn_queue import TurnQueue
from autobattle.core.models import Team


@dataclass
class Actor:
    id: str
    spd: int
    team: Team
    order: int
    alive: bool = True


def test_spd_descending_then_player_then_roster_order():
    a = Actor("A", 50, Team.ENEMY, 3)
    b = Actor("B", 90, Team.ENEMY, 2)
    c = Actor("C", 50, Team.PLAYER, 1)
    d = Actor("D", 50, Team.PLAYER, 0)

    tq = TurnQueue()
    order = [x.id for x in tq.start_round([a, b, c, d])]
    assert order == ["B", "D", "C", "A"]
    assert tq.round_number == 1


def test_dead_actors_skipped_mid_round_and_excluded_next_round():
    a = Actor("A", 30, Team.PLAYER, 0)
    b = Actor("B", 20, Team.PLAYER, 1)
    c = Actor("C", 10, Team.ENEMY, 2)

    tq = TurnQueue()
    tq.start_round([a, b, c])
    assert tq.next_actor() is a
    b.alive = False
    assert tq.next_actor() is c
    assert tq.next_actor() is None

    assert [x.id for x in tq.start_round([a, b, c])] == ["A", "C"]


def test_spd_changes_apply_on_next_round():
    a = Actor("A", 10, Team.PLAYER, 0)
    b = Actor("B", 20, Team.ENEMY, 1)
    tq = TurnQueue()
    assert [x.id for x in tq.start_round([a, b])] == ["B", "A"]
    a.spd = 25
    assert [x.id for x in tq.start_round([a, b])] == ["A", "B"]
    assert tq.remaining() == [a, b]
