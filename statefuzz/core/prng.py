"""Seedable Mulberry32 pseudo-random number generator.

A small, fast, non-cryptographic generator. The mixing steps are done in
unsigned 32-bit arithmetic with the reference constants, so a seed recorded
by another Mulberry32 implementation replays the same stream here.

Example:
    >>> rng = Mulberry32(42)
    >>> count = rng.next_int(1, 10)
    >>> rng.next() < 1.0
    True
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_32 = 4294967296.0


class Mulberry32:
    """Deterministic 32-bit PRNG.

    Any integer seed is valid, including 0 and negative values. The seed is
    reduced modulo 2**32, which matches how the reference implementation
    treats seeds in its bitwise operations.
    """

    __slots__ = ("_seed", "_state")

    def __init__(self, seed: int) -> None:
        self._seed = int(seed)
        self._state = self._seed & _MASK32

    @property
    def seed(self) -> int:
        """The seed this stream was created from."""
        return self._seed

    @property
    def state(self) -> int:
        """Current 32-bit internal state."""
        return self._state

    def next_uint32(self) -> int:
        """Advance the stream and return an unsigned 32-bit integer."""
        self._state = (self._state + _INCREMENT) & _MASK32
        t = self._state
        t = ((t ^ (t >> 15)) * (t | 1)) & _MASK32
        t ^= (t + (((t ^ (t >> 7)) * (t | 61)) & _MASK32)) & _MASK32
        return (t ^ (t >> 14)) & _MASK32

    def next(self) -> float:
        """Return a float in [0, 1)."""
        return self.next_uint32() / _TWO_32

    def next_int(self, min_value: int, max_value: int) -> int:
        """Return an integer in [min_value, max_value], both inclusive."""
        if max_value < min_value:
            raise ValueError(
                f"next_int: max_value ({max_value}) is less than min_value ({min_value})"
            )
        span = max_value - min_value + 1
        if span <= 0x20000000000000:
            return int(self.next() * span) + min_value
        # Spans beyond float precision take 64 bits per draw.
        high = self.next_uint32()
        low = self.next_uint32()
        return min_value + ((high << 32 | low) * span >> 64)

    def next_float(self, min_value: float = 0.0, max_value: float = 1.0) -> float:
        """Return a float in [min_value, max_value)."""
        return min_value + self.next() * (max_value - min_value)

    def next_bool(self) -> bool:
        return self.next() < 0.5

    def choice(self, items: Sequence[T]) -> T:
        """Pick one element uniformly."""
        if not items:
            raise ValueError("choice() from an empty sequence")
        return items[self.next_int(0, len(items) - 1)]

    def fork(self) -> Mulberry32:
        """Derive an independent stream seeded from the next draw."""
        return Mulberry32(self.next_uint32())

    def __repr__(self) -> str:
        return f"Mulberry32(seed={self._seed}, state=0x{self._state:08x})"
