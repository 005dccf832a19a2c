from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple, TypeVar

from ..core.models import BOARD_COLS, BOARD_ROWS, ROLE_PREFERRED_ROW, Position, Role, Team
from .state import CombatState, UnitSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")

Cell = Tuple[int, int]


# ------------------------------------------------------------
# Board layout (per team, independent namespaces)
#
#   Row 0 (front):  (0,0) (0,1) (0,2)
#   Row 1 (mid):    (1,0) (1,1) (1,2)
#   Row 2 (back):   (2,0) (2,1) (2,2)
#   Row 3 (extra):  (3,0) (3,1) (3,2)   summons / overflow
# ------------------------------------------------------------


def first_free_cell(occupied: Set[Cell]) -> Optional[Position]:
    """Scan rows 0..3 then columns 0..2 for the first unoccupied cell."""
    for row in range(BOARD_ROWS):
        for col in range(BOARD_COLS):
            if (row, col) not in occupied:
                return Position(row, col)
    return None


def free_cell_in_row(occupied: Set[Cell], row: int) -> Optional[Position]:
    for col in range(BOARD_COLS):
        if (row, col) not in occupied:
            return Position(row, col)
    return None


def assign_positions(
    units: Sequence[T],
    role_of: Callable[[T], Role],
) -> List[Tuple[T, Position]]:
    """Seat one team's roster on the board.

    Units are stably sorted by their role's preferred row; each takes the first
    free column of that row, falling back to a full rows 0..3 scan. Units that
    find no cell at all are left out (and logged). The returned order is the
    seating order, which becomes the arena's roster order.
    """
    ordered = sorted(units, key=lambda u: ROLE_PREFERRED_ROW[role_of(u)])
    occupied: Set[Cell] = set()
    seated: List[Tuple[T, Position]] = []
    for unit in ordered:
        preferred = ROLE_PREFERRED_ROW[role_of(unit)]
        pos = free_cell_in_row(occupied, preferred) or first_free_cell(occupied)
        if pos is None:
            logger.warning("No free cell left for %r; unit is not placed", unit)
            continue
        occupied.add((pos.row, pos.col))
        seated.append((unit, pos))
    return seated


class UnitArena:
    """Unit-id indexed table of CombatState owned by one battle engine.

    Insertion order is roster order: player and enemy seating order at battle
    start, then summons as they enter.
    """

    def __init__(self) -> None:
        self._units: Dict[str, CombatState] = {}

    def add(self, state: CombatState) -> CombatState:
        if state.unit_id in self._units:
            raise ValueError(f"Unit id already in arena: {state.unit_id}")
        state.order = len(self._units)
        self._units[state.unit_id] = state
        logger.debug("Arena add %r", state)
        return state

    def get(self, unit_id: str) -> Optional[CombatState]:
        return self._units.get(unit_id)

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._units

    def __iter__(self) -> Iterator[CombatState]:
        return iter(self._units.values())

    def __len__(self) -> int:
        return len(self._units)

    def team(self, team: Team) -> List[CombatState]:
        return [u for u in self._units.values() if u.team == team]

    def living(self, team: Optional[Team] = None) -> List[CombatState]:
        """Living units in roster order; players before enemies when team is None."""
        if team is None:
            return self.living(Team.PLAYER) + self.living(Team.ENEMY)
        return [u for u in self._units.values() if u.team == team and u.alive]

    def any_alive(self, team: Team) -> bool:
        return any(u.alive for u in self._units.values() if u.team == team)

    def occupied_cells(self, team: Team) -> Set[Cell]:
        """Cells held by living units; dead units free their cell."""
        return {(u.position.row, u.position.col) for u in self.living(team)}

    def find_empty_cell(self, team: Team) -> Optional[Position]:
        return first_free_cell(self.occupied_cells(team))

    def view(self) -> Mapping[str, UnitSnapshot]:
        """Read-only snapshot mapping of every unit, dead ones included."""
        return MappingProxyType({uid: u.snapshot() for uid, u in self._units.items()})
