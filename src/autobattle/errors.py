from __future__ import annotations

from typing import List, Optional


class AutoBattleError(Exception):
    """Base error for autobattle domain exceptions."""


class DuplicateUnitError(AutoBattleError):
    """Raised when the same unit id appears more than once across both rosters."""

    def __init__(self, unit_ids: List[str]) -> None:
        self.unit_ids = list(unit_ids)
        super().__init__(f"Duplicate unit id(s) across rosters: {', '.join(self.unit_ids)}")


class ConfigError(AutoBattleError):
    """Raised when a battle file cannot be read or references unknown data."""


class DataValidationError(ConfigError):
    """Raised when a battle file fails JSON Schema validation."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_human(self) -> str:
        parts = [str(self)]
        for e in self.errors:
            path = "/".join(str(p) for p in e.path) or "<root>"
            parts.append(f" - at {path}: {e.message}")
        return "\n".join(parts)
