from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..core.models import ActionType, Position, Role, Team

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AoeHit:
    """Per-target damage of an area ability."""

    unit_id: str
    damage: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.unit_id, "damage": self.damage}


@dataclass(frozen=True)
class SummonedUnit:
    """Full stat snapshot of a unit created by Summon.

    Carries everything a replay consumer needs to materialize the unit without
    recomputing stats.
    """

    unit_id: str
    name: str
    role: Role
    hp: int
    atk: int
    defense: int
    spd: int
    position: Position
    team: Team

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.unit_id,
            "name": self.name,
            "role": self.role.value,
            "hp": self.hp,
            "atk": self.atk,
            "def": self.defense,
            "spd": self.spd,
            "position": self.position.to_dict(),
            "team": self.team.value,
        }


@dataclass(frozen=True)
class ActionLogEntry:
    """One resolved action (or death) in a battle.

    Entries are immutable and self-contained; a presentation layer indexes the
    log by position to step forward and backward through a replay.

    Attributes:
        turn: Turn number starting at 1.
        actor_id: Acting unit (the dying unit for death entries).
        actor_name: Display name of the actor.
        action_type: attack, ability, heal, death or summon.
        target_id: Single target, when there is one.
        target_name: Display name of the single target.
        damage: Damage dealt; total damage for area abilities.
        healing: HP actually restored.
        is_critical: Crit flag for single-target damage.
        ability_used: Ability name for ability, heal and summon entries.
        message: Pre-rendered human-readable line.
        aoe_targets: Per-target damage for area abilities.
        summoned_unit: Stat snapshot for summon entries.
    """

    turn: int
    actor_id: str
    actor_name: str
    action_type: ActionType
    message: str
    target_id: Optional[str] = None
    target_name: Optional[str] = None
    damage: Optional[int] = None
    healing: Optional[int] = None
    is_critical: Optional[bool] = None
    ability_used: Optional[str] = None
    aoe_targets: Optional[Tuple[AoeHit, ...]] = None
    summoned_unit: Optional[SummonedUnit] = None

    def to_dict(self) -> Dict[str, Any]:
        """Replay-contract form; optional keys are omitted when unset."""
        out: Dict[str, Any] = {
            "turn": self.turn,
            "actorId": self.actor_id,
            "actorName": self.actor_name,
            "actionType": self.action_type.value,
        }
        optional = (
            ("targetId", self.target_id),
            ("targetName", self.target_name),
            ("damage", self.damage),
            ("healing", self.healing),
            ("isCritical", self.is_critical),
            ("abilityUsed", self.ability_used),
        )
        for key, value in optional:
            if value is not None:
                out[key] = value
        out["message"] = self.message
        if self.aoe_targets is not None:
            out["aoeTargets"] = [hit.to_dict() for hit in self.aoe_targets]
        if self.summoned_unit is not None:
            out["summonedUnit"] = self.summoned_unit.to_dict()
        return out


class ActionLog:
    """Append-only, ordered action log for one battle."""

    def __init__(self) -> None:
        self._entries: List[ActionLogEntry] = []

    def append(self, entry: ActionLogEntry) -> ActionLogEntry:
        self._entries.append(entry)
        # Forward to standard logging for visibility if configured.
        if entry.action_type is ActionType.DEATH:
            logger.info("[T%d] %s", entry.turn, entry.message)
        else:
            logger.debug("[T%d] %s", entry.turn, entry.message)
        return entry

    def entries(self) -> Tuple[ActionLogEntry, ...]:
        return tuple(self._entries)

    def last(self) -> Optional[ActionLogEntry]:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ActionLogEntry]:
        return iter(list(self._entries))

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._entries]


@dataclass(frozen=True)
class LogCursor:
    """Index into a finished log for step-forward / step-back replay tools.

    The simulation is never paused; stepping only moves over entries already
    produced.
    """

    entries: Tuple[ActionLogEntry, ...]
    index: int = field(default=0)

    @property
    def current(self) -> Optional[ActionLogEntry]:
        if 0 <= self.index < len(self.entries):
            return self.entries[self.index]
        return None

    def forward(self, steps: int = 1) -> "LogCursor":
        return LogCursor(self.entries, min(len(self.entries) - 1, self.index + steps) if self.entries else 0)

    def back(self, steps: int = 1) -> "LogCursor":
        return LogCursor(self.entries, max(0, self.index - steps))

    def turn_start(self, turn: int) -> "LogCursor":
        """Jump to the first entry of a turn (or stay put if the turn has none)."""
        for i, e in enumerate(self.entries):
            if e.turn == turn:
                return LogCursor(self.entries, i)
        return self
