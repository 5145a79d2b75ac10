"""Composable arbitrary-value generators.

An ``Arbitrary`` wraps a draw function that takes the PRNG stream and returns
a value. Generators never hold on to a stream: the caller passes it to
``generate`` for every draw, so one generator can serve many runs.

Combinators (``map``, ``filter``, ``chain``) return new generators and leave
the receiver untouched.

Example:
    >>> from statefuzz.generators import integers, lists
    >>> pairs = lists(integers(0, 100), length=2).filter(lambda p: p[0] <= p[1])
    >>> pairs.example(seed=7)  # doctest: +SKIP
    [12, 80]
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from statefuzz.core.prng import Mulberry32
from statefuzz.errors import ConfigurationError, GeneratorExhaustion

T = TypeVar("T")
U = TypeVar("U")

DEFAULT_FILTER_ATTEMPTS = 1000

_HEX_DIGITS = "0123456789abcdef"


class Arbitrary(Generic[T]):
    """A deterministic random-value generator."""

    __slots__ = ("_draw", "name")

    def __init__(self, draw: Callable[[Mulberry32], T], name: str = "arbitrary") -> None:
        self._draw = draw
        self.name = name

    def generate(self, rng: Mulberry32) -> T:
        """Draw one value, advancing ``rng``."""
        return self._draw(rng)

    def example(self, seed: int = 0) -> T:
        """Draw a single value from a fresh stream."""
        return self.generate(Mulberry32(seed))

    def samples(self, count: int, seed: int = 0) -> list[T]:
        """Draw ``count`` values from one fresh stream."""
        rng = Mulberry32(seed)
        return [self.generate(rng) for _ in range(count)]

    def map(self, fn: Callable[[T], U], name: str | None = None) -> Arbitrary[U]:
        draw = self._draw

        def mapped(rng: Mulberry32) -> U:
            return fn(draw(rng))

        return Arbitrary(mapped, name or f"{self.name}.map")

    def filter(
        self,
        predicate: Callable[[T], bool],
        max_attempts: int = DEFAULT_FILTER_ATTEMPTS,
        name: str | None = None,
    ) -> Arbitrary[T]:
        """Re-draw until ``predicate`` holds.

        Raises:
            GeneratorExhaustion: after ``max_attempts`` rejected draws.
        """
        if max_attempts < 1:
            raise ConfigurationError(
                "max_attempts must be at least 1", field="max_attempts", value=max_attempts
            )
        draw = self._draw
        label = name or f"{self.name}.filter"

        def filtered(rng: Mulberry32) -> T:
            for _ in range(max_attempts):
                value = draw(rng)
                if predicate(value):
                    return value
            raise GeneratorExhaustion(generator_name=label, attempts=max_attempts)

        return Arbitrary(filtered, label)

    def chain(self, fn: Callable[[T], Arbitrary[U]], name: str | None = None) -> Arbitrary[U]:
        """Value-dependent generation: ``fn`` picks the next generator."""
        draw = self._draw

        def chained(rng: Mulberry32) -> U:
            return fn(draw(rng)).generate(rng)

        return Arbitrary(chained, name or f"{self.name}.chain")

    def __repr__(self) -> str:
        return f"Arbitrary({self.name})"


def _check_bounds(name: str, min_value: Any, max_value: Any) -> None:
    if max_value < min_value:
        raise ConfigurationError(
            f"{name}: max ({max_value}) is less than min ({min_value})",
            field=name,
            value=(min_value, max_value),
        )


def integers(min_value: int, max_value: int) -> Arbitrary[int]:
    """Uniform integers in [min_value, max_value]."""
    _check_bounds("integers", min_value, max_value)
    return Arbitrary(
        lambda rng: rng.next_int(min_value, max_value),
        f"integers({min_value}, {max_value})",
    )


def floats(min_value: float = 0.0, max_value: float = 1.0) -> Arbitrary[float]:
    """Uniform floats in [min_value, max_value)."""
    _check_bounds("floats", min_value, max_value)
    return Arbitrary(
        lambda rng: rng.next_float(min_value, max_value),
        f"floats({min_value}, {max_value})",
    )


def booleans() -> Arbitrary[bool]:
    return Arbitrary(lambda rng: rng.next_bool(), "booleans()")


def just(value: T) -> Arbitrary[T]:
    """Always ``value``; consumes no randomness."""
    return Arbitrary(lambda rng: value, f"just({value!r})")


def sampled_from(values: Sequence[T]) -> Arbitrary[T]:
    """One element of ``values``, uniformly."""
    items = tuple(values)
    if not items:
        raise ConfigurationError("sampled_from() needs at least one value", field="values", value=values)
    return Arbitrary(lambda rng: rng.choice(items), f"sampled_from({len(items)} values)")


def one_of(*arbitraries: Arbitrary[Any]) -> Arbitrary[Any]:
    """Pick a generator uniformly, then draw from it."""
    if not arbitraries:
        raise ConfigurationError("one_of() needs at least one generator")
    options = tuple(arbitraries)
    return Arbitrary(
        lambda rng: rng.choice(options).generate(rng),
        "one_of(" + ", ".join(a.name for a in options) + ")",
    )


def lists(
    element: Arbitrary[T],
    min_length: int = 0,
    max_length: int = 10,
    length: int | None = None,
) -> Arbitrary[list[T]]:
    """Lists of ``element`` draws.

    With ``length`` set the list size is fixed and no randomness is spent on
    it; otherwise the size is drawn first, then the elements in order.
    """
    if length is not None:
        min_length = max_length = length
    if min_length < 0:
        raise ConfigurationError("lists: min_length cannot be negative", field="min_length", value=min_length)
    _check_bounds("lists", min_length, max_length)

    def draw(rng: Mulberry32) -> list[T]:
        size = min_length if min_length == max_length else rng.next_int(min_length, max_length)
        return [element.generate(rng) for _ in range(size)]

    return Arbitrary(draw, f"lists({element.name}, {min_length}..{max_length})")


def tuples(*elements: Arbitrary[Any]) -> Arbitrary[tuple[Any, ...]]:
    """Fixed-size tuples, one draw per position, left to right."""
    parts = tuple(elements)
    return Arbitrary(
        lambda rng: tuple(part.generate(rng) for part in parts),
        "tuples(" + ", ".join(p.name for p in parts) + ")",
    )


def records(**fields: Arbitrary[Any]) -> Arbitrary[dict[str, Any]]:
    """Dicts with one draw per field, in declaration order."""
    items = tuple(fields.items())
    return Arbitrary(
        lambda rng: {key: arb.generate(rng) for key, arb in items},
        "records(" + ", ".join(key for key, _ in items) + ")",
    )


def hex_strings(min_length: int = 0, max_length: int = 64) -> Arbitrary[str]:
    """Lowercase hexadecimal strings."""
    digits = lists(integers(0, 15), min_length=min_length, max_length=max_length)
    return digits.map(
        lambda ds: "".join(_HEX_DIGITS[d] for d in ds),
        name=f"hex_strings({min_length}..{max_length})",
    )
