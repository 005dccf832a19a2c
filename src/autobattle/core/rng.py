from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, MutableSequence, Optional, Sequence, TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_GOLDEN = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """32-bit integer multiply, keeping the low 32 bits (unsigned)."""
    return (a * b) & _MASK32


def mulberry32_next(state: int) -> tuple[int, float]:
    """Advance a mulberry32 state once.

    Returns the new state and the float in [0.0, 1.0) derived from it.
    """
    state = (state + _GOLDEN) & _MASK32
    t = state
    t = _imul(t ^ (t >> 15), t | 1)
    t = (t ^ ((t + _imul(t ^ (t >> 7), t | 61)) & _MASK32)) & _MASK32
    value = ((t ^ (t >> 14)) & _MASK32) / _TWO_POW_32
    return state, value


@dataclass
class SeededRNG:
    """
    Deterministic mulberry32 generator with a 32-bit state.

    Every helper consumes exactly one draw from the stream (shuffle consumes one
    per swap), so the order of calls made by the battle engine is what makes a
    battle reproducible. Do not share an instance between battles.

    Usage:
      rng = SeededRNG(42)
      r = rng.random()         # float in [0.0, 1.0)
      ok = rng.chance(0.25)    # 25% chance
      x = rng.randint(1, 6)
    """

    seed: int = 0
    draws: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self.seed = int(self.seed)
        self._state = self.seed & _MASK32

    def random(self) -> float:
        """Return the next float in the range [0.0, 1.0)."""
        self._state, value = mulberry32_next(self._state)
        self.draws += 1
        return value

    def randint(self, lo: int, hi: int) -> int:
        """Return a random integer N such that lo <= N <= hi."""
        return math.floor(self.random() * (hi - lo + 1)) + lo

    def uniform(self, lo: float, hi: float) -> float:
        """Return a random float N such that lo <= N < hi."""
        return self.random() * (hi - lo) + lo

    def chance(self, probability: float) -> bool:
        """Return True with the given probability (0-1). Always draws."""
        return self.random() < probability

    def pick(self, seq: Sequence[T]) -> Optional[T]:
        """Pick one element; an empty sequence returns None without drawing."""
        if len(seq) == 0:
            return None
        return seq[self.randint(0, len(seq) - 1)]

    def shuffle(self, items: MutableSequence[T]) -> MutableSequence[T]:
        """In-place Fisher-Yates shuffle, walking from the end. Returns items."""
        for i in range(len(items) - 1, 0, -1):
            j = self.randint(0, i)
            items[i], items[j] = items[j], items[i]
        return items

    def sample(self, n: int) -> List[float]:
        """Draw n floats; handy for diagnostics and determinism checks."""
        return [self.random() for _ in range(n)]

    def state(self) -> int:
        """Return the internal 32-bit state for debugging."""
        return self._state
