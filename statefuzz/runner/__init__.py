"""Invariant Runner - drives a SUT through random action sequences.

One run repeats, ``config.iterations`` times:

1. ``setup()``; any exception aborts the run with SetupFailure.
2. Draw an action count in [1, max_actions], then one action index per
   step, and call each action. Exceptions from actions are expected reverts
   and are discarded.
3. Call every invariant in order; the first failure aborts the run with
   InvariantViolation.

The PRNG is created fresh from ``config.seed`` for every run, so a failing
run is reproduced exactly by running again with the same seed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from statefuzz.core.models import (
    ExpectedActionFailure,
    InvariantTest,
    RunConfig,
    RunResult,
    SuiteSummary,
    Violation,
)
from statefuzz.core.prng import Mulberry32
from statefuzz.errors import (
    ConfigurationError,
    ErrorContext,
    InvariantViolation,
    SetupFailure,
    SuiteFailure,
)
from statefuzz.runner.calls import (
    AsyncClosureError,
    call_async,
    call_sync,
    failure_from_outcome,
)
from statefuzz.runner.context import activate, current_rng, deactivate, draw
from statefuzz.runner.property import PropertyExecutor, for_all, run_property

logger = logging.getLogger(__name__)


class InvariantRunner:
    """Executes InvariantTests under one resolved RunConfig.

    Example:
        >>> runner = InvariantRunner(RunConfig(iterations=200, seed=42))
        >>> runner.run(InvariantTest(
        ...     name="weight sum",
        ...     setup=reset_portfolio,
        ...     actions=[deposit, withdraw, rebalance],
        ...     invariants=[check_weight_sum, check_non_negative],
        ... ))
    """

    def __init__(self, config: RunConfig, output: Any | None = None) -> None:
        self.config = config
        self.output = output

    def run(self, test: InvariantTest) -> RunResult:
        """Run one test; raises on the first setup failure or violation."""
        if test.is_async:
            raise AsyncClosureError(
                f"InvariantTest '{test.name}' has coroutine closures; use run_async()"
            )
        rng, result = self._start(test)
        token = activate(rng)
        try:
            for iteration in range(self.config.iterations):
                self._report_progress(test, iteration)

                try:
                    call_sync(test.setup)
                except AsyncClosureError:
                    raise
                except Exception as exc:
                    raise self._setup_failure(test, iteration, result, exc) from exc

                count = self._draw_action_count(rng)
                indices: list[int] = []
                for step in range(count):
                    index = self._draw_action_index(rng, len(test.actions))
                    indices.append(index)
                    try:
                        call_sync(test.actions[index])
                    except AsyncClosureError:
                        raise
                    except Exception as exc:
                        self._record_revert(test, result, iteration, step, index, exc)
                    result.actions_executed += 1
                if self.config.record_trace:
                    result.action_trace.append(tuple(indices))

                for inv_index, invariant in enumerate(test.invariants):
                    try:
                        outcome = call_sync(invariant)
                    except AsyncClosureError:
                        raise
                    except Exception as exc:
                        error: BaseException | None = exc
                    else:
                        error = failure_from_outcome(outcome, test.invariant_name(inv_index))
                    if error is not None:
                        raise self._violation(test, iteration, inv_index, error, result) from error

                result.iterations_completed += 1
        finally:
            deactivate(token)

        self._finish(test, result)
        return result

    async def run_async(self, test: InvariantTest) -> RunResult:
        """Like run(), awaiting any closure that returns an awaitable."""
        rng, result = self._start(test)
        token = activate(rng)
        try:
            for iteration in range(self.config.iterations):
                self._report_progress(test, iteration)

                try:
                    await call_async(test.setup)
                except Exception as exc:
                    raise self._setup_failure(test, iteration, result, exc) from exc

                count = self._draw_action_count(rng)
                indices: list[int] = []
                for step in range(count):
                    index = self._draw_action_index(rng, len(test.actions))
                    indices.append(index)
                    try:
                        await call_async(test.actions[index])
                    except Exception as exc:
                        self._record_revert(test, result, iteration, step, index, exc)
                    result.actions_executed += 1
                if self.config.record_trace:
                    result.action_trace.append(tuple(indices))

                for inv_index, invariant in enumerate(test.invariants):
                    try:
                        outcome = await call_async(invariant)
                    except Exception as exc:
                        error: BaseException | None = exc
                    else:
                        error = failure_from_outcome(outcome, test.invariant_name(inv_index))
                    if error is not None:
                        raise self._violation(test, iteration, inv_index, error, result) from error

                result.iterations_completed += 1
        finally:
            deactivate(token)

        self._finish(test, result)
        return result

    def run_suite(self, tests: Sequence[InvariantTest], max_workers: int = 1) -> SuiteSummary:
        """Run several tests with this runner's configuration.

        Each test gets its own PRNG stream seeded from ``config.seed``.
        With ``max_workers > 1`` tests run on a thread pool; only do that
        for tests that do not share SUT state.

        Raises:
            SuiteFailure: if any test violated an invariant.
            SetupFailure: immediately, if any setup() raised.
        """
        if max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1", field="max_workers", value=max_workers)

        summary = SuiteSummary(total_tests=len(tests))
        self._emit("suite_started", list(tests), self.config)
        logger.info(f"Running invariant suite: {len(tests)} test(s), seed={self.config.seed}")

        if max_workers == 1:
            for test in tests:
                result = self._run_collecting(test)
                summary.results.append(result)
                if result.violation is not None and self.config.stop_on_first_failure:
                    break
        else:
            self._run_parallel(tests, max_workers, summary)

        return self._finish_suite(summary)

    async def run_suite_async(self, tests: Sequence[InvariantTest]) -> SuiteSummary:
        """Sequential async counterpart of run_suite()."""
        summary = SuiteSummary(total_tests=len(tests))
        self._emit("suite_started", list(tests), self.config)
        logger.info(f"Running invariant suite: {len(tests)} test(s), seed={self.config.seed}")

        for test in tests:
            try:
                result = await self.run_async(test)
            except InvariantViolation as exc:
                result = exc.result
            summary.results.append(result)
            if result.violation is not None and self.config.stop_on_first_failure:
                break

        return self._finish_suite(summary)

    def _run_collecting(self, test: InvariantTest) -> RunResult:
        try:
            return self.run(test)
        except InvariantViolation as exc:
            return exc.result

    def _run_parallel(
        self,
        tests: Sequence[InvariantTest],
        max_workers: int,
        summary: SuiteSummary,
    ) -> None:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="statefuzz") as pool:
            futures: list[Future[RunResult]] = [pool.submit(self._run_collecting, t) for t in tests]
            stopped = False
            try:
                for future in futures:
                    if stopped and future.cancel():
                        continue
                    result = future.result()
                    summary.results.append(result)
                    if result.violation is not None and self.config.stop_on_first_failure:
                        stopped = True
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

    def _start(self, test: InvariantTest) -> tuple[Mulberry32, RunResult]:
        config = self.config
        rng = Mulberry32(config.seed)
        result = RunResult(test_name=test.name, seed=config.seed, iterations=config.iterations)
        if config.verbose:
            logger.info(
                f"Running invariant test: {test.name} "
                f"(iterations={config.iterations}, seed={config.seed})"
            )
            self._emit("run_started", test, config)
        else:
            logger.debug(f"Running invariant test: {test.name} (seed={config.seed})")
        if not test.invariants:
            logger.warning(f"InvariantTest '{test.name}' has no invariants; only setup and actions run")
        return rng, result

    def _draw_action_count(self, rng: Mulberry32) -> int:
        return rng.next_int(1, self.config.max_actions)

    def _draw_action_index(self, rng: Mulberry32, action_count: int) -> int:
        return rng.next_int(0, action_count - 1)

    def _report_progress(self, test: InvariantTest, iteration: int) -> None:
        if self.config.verbose and iteration % self.config.progress_interval == 0:
            logger.info(f"{test.name}: progress {iteration}/{self.config.iterations}")
            self._emit("progress", test, iteration, self.config.iterations)

    def _record_revert(
        self,
        test: InvariantTest,
        result: RunResult,
        iteration: int,
        step: int,
        index: int,
        exc: Exception,
    ) -> None:
        result.actions_reverted += 1
        if not self.config.verbose:
            return
        failure = ExpectedActionFailure(
            iteration=iteration,
            step=step,
            action_index=index,
            action_name=test.action_name(index),
            error=exc,
        )
        logger.info(
            f"{test.name}: action {step} ({failure.action_name}) reverted (expected): {failure.message}"
        )
        self._emit("action_reverted", test, failure)

    def _setup_failure(
        self,
        test: InvariantTest,
        iteration: int,
        result: RunResult,
        exc: Exception,
    ) -> SetupFailure:
        result.finish()
        logger.error(
            f"Setup failed for '{test.name}' at iteration {iteration} "
            f"(seed={self.config.seed}): {exc}"
        )
        return SetupFailure(
            message=f"setup() of '{test.name}' raised {type(exc).__name__}: {exc}",
            context=ErrorContext(test_name=test.name, iteration=iteration, seed=self.config.seed),
            cause=exc,
        )

    def _violation(
        self,
        test: InvariantTest,
        iteration: int,
        inv_index: int,
        error: BaseException,
        result: RunResult,
    ) -> InvariantViolation:
        violation = Violation(
            test_name=test.name,
            iteration=iteration,
            seed=self.config.seed,
            invariant_index=inv_index,
            invariant_name=test.invariant_name(inv_index),
            error=error,
        )
        result.violation = violation
        result.finish()
        logger.error(
            "\n".join(
                [
                    "=" * 60,
                    f"Invariant violation at iteration {iteration}",
                    f"  Test:      {test.name}",
                    f"  Invariant: {violation.invariant_name} (#{inv_index})",
                    f"  Seed:      {self.config.seed}",
                    f"  Error:     {violation.message}",
                    "=" * 60,
                ]
            )
        )
        self._emit("run_failed", test, violation, result)
        return InvariantViolation(violation, result)

    def _finish(self, test: InvariantTest, result: RunResult) -> None:
        result.finish()
        if self.config.verbose:
            logger.info(
                f"{test.name}: all {result.iterations_completed} iterations passed "
                f"(seed={result.seed}, actions={result.actions_executed}, "
                f"reverted={result.actions_reverted})"
            )
        self._emit("run_passed", test, result)

    def _finish_suite(self, summary: SuiteSummary) -> SuiteSummary:
        summary.finish()
        self._emit("suite_finished", summary)
        if summary.violations:
            raise SuiteFailure(summary)
        logger.info(f"All {len(summary.results)} invariant tests passed")
        return summary

    def _emit(self, hook: str, *args: Any) -> None:
        handler = getattr(self.output, hook, None)
        if handler is not None:
            handler(*args)


def create_invariant_runner(
    config: RunConfig | None = None,
    output: Any | None = None,
    config_path: str | None = None,
) -> InvariantRunner:
    """Build a runner, resolving the config from file/environment if needed."""
    if config is None:
        from statefuzz.config import load_settings

        config = load_settings(config_path).run_config()
    return InvariantRunner(config, output=output)


__all__ = [
    "InvariantRunner",
    "create_invariant_runner",
    "PropertyExecutor",
    "run_property",
    "for_all",
    "draw",
    "current_rng",
]
