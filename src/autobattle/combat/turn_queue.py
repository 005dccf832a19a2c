from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol, Tuple

from ..core.models import Team

logger = logging.getLogger(__name__)

_TEAM_RANK = {Team.PLAYER: 0, Team.ENEMY: 1}


class SupportsTurnActor(Protocol):
    """Protocol for combat actors used by TurnQueue.

    An actor must expose:
    - spd: speed value (higher is faster)
    - alive: whether the actor can act
    - team: used as the first tie-breaker (player before enemy)
    - order: roster order, the final tie-breaker
    """

    spd: int
    alive: bool
    team: Team
    order: int


class TurnQueue:
    """Deterministic SPD-based initiative for one battle turn at a time.

    Features:
    - Orders living actors by SPD descending at the start of every turn.
    - Ties go to the player side first, then to roster order.
    - Skips actors that died earlier in the same turn.

    Usage:
        tq = TurnQueue()
        tq.start_round(living_units)
        while (actor := tq.next_actor()) is not None:
            ...
    """

    def __init__(self) -> None:
        self._queue: List[SupportsTurnActor] = []
        self.round_number: int = 0

    def start_round(self, actors: Iterable[SupportsTurnActor]) -> List[SupportsTurnActor]:
        """Build the initiative order for a new turn and return a copy of it."""
        alive = [a for a in actors if a.alive]
        self._queue = sorted(alive, key=self._sort_key)
        self.round_number += 1
        logger.debug("Built round %d with %d actors: %s", self.round_number, len(self._queue), self._queue)
        return list(self._queue)

    def next_actor(self) -> Optional[SupportsTurnActor]:
        """Return the next living actor of the current turn, or None when exhausted."""
        while self._queue:
            nxt = self._queue.pop(0)
            if nxt.alive:
                return nxt
            logger.debug("Skipped dead actor %s during round %d", nxt, self.round_number)
        return None

    def remaining(self) -> List[SupportsTurnActor]:
        return list(self._queue)

    @staticmethod
    def _sort_key(actor: SupportsTurnActor) -> Tuple[int, int, int]:
        # Python sorts ascending, so SPD is negated for descending order
        return (-actor.spd, _TEAM_RANK[actor.team], actor.order)


__all__ = [
    "SupportsTurnActor",
    "TurnQueue",
]
