import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from autobattle.core.rng import SeededRNG  # noqa: E402


class ScriptedRNG(SeededRNG):
    """RNG double returning queued floats, then a fixed default."""

    def __init__(self, values=(), default: float = 0.99) -> None:
        super().__init__(0)
        self.values = list(values)
        self.default = default

    def random(self) -> float:
        self.draws += 1
        if self.values:
            return self.values.pop(0)
        return self.default


@pytest.fixture
def scripted():
    return ScriptedRNG


@pytest.fixture
def battle_file() -> Path:
    return ROOT / "battles" / "crypt_ambush.yaml"
