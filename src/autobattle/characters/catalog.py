from __future__ import annotations

import logging
from importlib import resources
from typing import Dict, Iterable, List, Optional

import yaml

from ..core.models import Rarity, Role
from .stats import UnitDefinition

logger = logging.getLogger(__name__)

_PKG = "autobattle.data"
_RESOURCE = "characters.yaml"


class CharacterCatalog:
    """In-memory registry of static unit definitions.

    Defaults to the definitions bundled in ``autobattle/data/characters.yaml``.
    """

    def __init__(self, definitions: Optional[Iterable[UnitDefinition]] = None) -> None:
        self._defs: Dict[str, UnitDefinition] = {}
        if definitions is None:
            definitions = _load_bundled()
        for d in definitions:
            self.add(d)

    def add(self, definition: UnitDefinition) -> None:
        if definition.id in self._defs:
            raise ValueError(f"Duplicate character id: {definition.id}")
        self._defs[definition.id] = definition

    def get(self, character_id: str) -> UnitDefinition:
        try:
            return self._defs[character_id]
        except KeyError as e:
            raise KeyError(f"Unknown character id: {character_id}") from e

    def has(self, character_id: str) -> bool:
        return character_id in self._defs

    def by_role(self, role: Role) -> List[UnitDefinition]:
        return [d for d in self._defs.values() if d.role == Role(role)]

    def by_rarity(self, rarity: Rarity) -> List[UnitDefinition]:
        return [d for d in self._defs.values() if d.rarity == Rarity(rarity)]

    def all(self) -> List[UnitDefinition]:
        return list(self._defs.values())

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._defs)


def definition_from_dict(data: dict) -> UnitDefinition:
    return UnitDefinition(
        id=str(data["id"]),
        name=str(data["name"]),
        role=Role(data["role"]),
        rarity=Rarity(data.get("rarity", "common")),
        ability_name=str(data.get("ability_name", "")),
        ability_description=str(data.get("ability_description", "")),
        summon_ids=tuple(data.get("summon_ids", ()) or ()),
        max_summons=int(data.get("max_summons", 1)),
    )


def _load_bundled() -> List[UnitDefinition]:
    with resources.files(_PKG).joinpath(_RESOURCE).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    defs = [definition_from_dict(item) for item in data.get("characters", [])]
    logger.debug("Loaded %d bundled character definitions", len(defs))
    return defs


_default_catalog: Optional[CharacterCatalog] = None


def default_catalog() -> CharacterCatalog:
    """Shared catalog built from the bundled data file (loaded once)."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = CharacterCatalog()
    return _default_catalog
