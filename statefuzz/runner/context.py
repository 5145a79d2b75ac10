"""The PRNG stream of the run executing in the current context.

Actions can draw structured inputs from the same stream that picks them, so
the whole run stays reproducible from its seed:

    def deposit():
        vault.deposit(draw(amounts()))
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from typing import TypeVar

from statefuzz.core.prng import Mulberry32
from statefuzz.errors import ConfigurationError
from statefuzz.generators.base import Arbitrary

T = TypeVar("T")

_active_rng: ContextVar[Mulberry32 | None] = ContextVar("statefuzz_active_rng", default=None)


def activate(rng: Mulberry32) -> Token[Mulberry32 | None]:
    return _active_rng.set(rng)


def deactivate(token: Token[Mulberry32 | None]) -> None:
    _active_rng.reset(token)


def current_rng() -> Mulberry32:
    rng = _active_rng.get()
    if rng is None:
        raise ConfigurationError(
            "draw() called outside of a run",
            suggestions=["Only call draw() from actions, invariants or setup during a run"],
        )
    return rng


def draw(arbitrary: Arbitrary[T]) -> T:
    """Draw a value from the active run's stream."""
    return arbitrary.generate(current_rng())
