"""Property Executor - the classic fuzz loop over a pure predicate.

Draws ``num_runs`` values from a generator and evaluates a predicate on each.
There is no shrinking: the failing input and the seed are the counterexample.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from statefuzz.core.models import Counterexample, FuzzConfig, PropertyResult, callable_name
from statefuzz.core.prng import Mulberry32
from statefuzz.errors import PropertyFailure
from statefuzz.generators.base import Arbitrary, tuples
from statefuzz.runner.calls import (
    AsyncClosureError,
    call_async,
    call_sync,
    failure_from_outcome,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PropertyExecutor:
    """Runs predicates against generated inputs.

    Example:
        >>> executor = PropertyExecutor(FuzzConfig(num_runs=600, seed=1234))
        >>> executor.run(weights(), lambda w: sum(w) == 10000, name="weights sum")
    """

    def __init__(self, config: FuzzConfig, output: Any | None = None) -> None:
        self.config = config
        self.output = output

    def run(
        self,
        arbitrary: Arbitrary[T],
        predicate: Callable[[T], Any],
        name: str | None = None,
    ) -> PropertyResult:
        """Evaluate ``predicate`` on ``num_runs`` draws.

        Raises:
            PropertyFailure: on a falsifying input.
            GeneratorExhaustion: if the generator's filter gives up.
        """
        result, rng = self._start(arbitrary, predicate, name)
        for run_index in range(self.config.num_runs):
            value = arbitrary.generate(rng)
            try:
                outcome = call_sync(predicate, value)
            except AsyncClosureError:
                raise
            except Exception as exc:
                error: BaseException | None = exc
            else:
                error = failure_from_outcome(outcome, result.property_name)
            if error is not None and self._record_failure(result, value, run_index, error):
                break
            result.runs_completed += 1
        return self._finish(result)

    async def run_async(
        self,
        arbitrary: Arbitrary[T],
        predicate: Callable[[T], Any],
        name: str | None = None,
    ) -> PropertyResult:
        """Like run(), awaiting coroutine predicates."""
        result, rng = self._start(arbitrary, predicate, name)
        for run_index in range(self.config.num_runs):
            value = arbitrary.generate(rng)
            try:
                outcome = await call_async(predicate, value)
            except Exception as exc:
                error: BaseException | None = exc
            else:
                error = failure_from_outcome(outcome, result.property_name)
            if error is not None and self._record_failure(result, value, run_index, error):
                break
            result.runs_completed += 1
        return self._finish(result)

    def _start(
        self,
        arbitrary: Arbitrary[Any],
        predicate: Callable[..., Any],
        name: str | None,
    ) -> tuple[PropertyResult, Mulberry32]:
        property_name = name or callable_name(predicate, "property")
        result = PropertyResult(
            property_name=property_name,
            seed=self.config.seed,
            num_runs=self.config.num_runs,
        )
        if self.config.verbose:
            logger.info(
                f"Running property: {property_name} over {arbitrary.name} "
                f"(runs={self.config.num_runs}, seed={self.config.seed})"
            )
        return result, Mulberry32(self.config.seed)

    def _record_failure(
        self,
        result: PropertyResult,
        value: Any,
        run_index: int,
        error: BaseException,
    ) -> bool:
        """Store a counterexample; returns True if the run should stop."""
        counterexample = Counterexample(
            property_name=result.property_name,
            input=value,
            seed=self.config.seed,
            run_index=run_index,
            error=error,
        )
        result.counterexamples.append(counterexample)
        logger.error(
            f"Property '{result.property_name}' falsified at run {run_index} "
            f"(seed={self.config.seed}): {counterexample.message}\n  Input: {value!r}"
        )
        return self.config.stop_on_first_failure

    def _finish(self, result: PropertyResult) -> PropertyResult:
        result.finish()
        if result.counterexamples:
            first = result.counterexamples[0]
            raise PropertyFailure(first, result.counterexamples) from first.error
        if self.config.verbose:
            logger.info(
                f"Property '{result.property_name}': {result.runs_completed} runs passed "
                f"(seed={result.seed})"
            )
        return result


def run_property(
    arbitrary: Arbitrary[T],
    predicate: Callable[[T], Any],
    config: FuzzConfig,
    name: str | None = None,
) -> PropertyResult:
    """Run a property once with ``config``."""
    return PropertyExecutor(config).run(arbitrary, predicate, name=name)


def for_all(*arbitraries: Arbitrary[Any], config: FuzzConfig | None = None) -> Callable[..., Any]:
    """Turn a function of generated arguments into a property check.

    The decorated function takes no arguments; calling it runs the property
    and raises PropertyFailure on a counterexample. Without ``config`` the
    fuzz settings are resolved from the environment at call time.

    Example:
        >>> @for_all(weights(), slippage_bps())
        ... def test_rebalance_keeps_weights(ws, slippage):
        ...     assert sum(rebalance(ws, slippage)) == 10000
    """
    combined = tuples(*arbitraries)

    def decorator(fn: Callable[..., Any]) -> Callable[[], PropertyResult]:
        def runner() -> PropertyResult:
            resolved = config
            if resolved is None:
                from statefuzz.config import load_settings

                resolved = load_settings().fuzz_config()
            return PropertyExecutor(resolved).run(
                combined,
                lambda args: fn(*args),
                name=callable_name(fn, "property"),
            )

        # Signature stays zero-argument so pytest collects it without fixtures.
        runner.__name__ = fn.__name__
        runner.__qualname__ = fn.__qualname__
        runner.__doc__ = fn.__doc__
        runner.__module__ = fn.__module__
        return runner

    return decorator
