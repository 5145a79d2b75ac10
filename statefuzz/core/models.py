"""Core data model: run configuration, test definitions and results."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from statefuzz.errors import ConfigurationError, ErrorCode

DEFAULT_MAX_ACTIONS = 10
DEFAULT_PROGRESS_INTERVAL = 50


def _require_positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(
            f"{name} must be a positive integer, got {value!r}",
            field=name,
            value=value,
        )


def _require_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            f"{name} must be an integer, got {value!r}",
            field=name,
            value=value,
        )


def _invalid_test(message: str, field_name: str, value: Any) -> ConfigurationError:
    return ConfigurationError(
        message, field=field_name, value=value, error_code=ErrorCode.INVALID_TEST
    )


@dataclass(frozen=True)
class RunConfig:
    """Fully resolved configuration for an invariant run.

    Build it once at the edge (see ``statefuzz.config``); the runner never
    reads the environment itself. With ``record_trace`` the RunResult keeps
    the action indices of every iteration, which grows with ``iterations``.
    """

    iterations: int
    seed: int
    verbose: bool = False
    stop_on_first_failure: bool = True
    max_actions: int = DEFAULT_MAX_ACTIONS
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    record_trace: bool = False

    def __post_init__(self) -> None:
        _require_positive_int("iterations", self.iterations)
        _require_int("seed", self.seed)
        _require_positive_int("max_actions", self.max_actions)
        _require_positive_int("progress_interval", self.progress_interval)


@dataclass(frozen=True)
class FuzzConfig:
    """Fully resolved configuration for a property run."""

    num_runs: int
    seed: int
    verbose: bool = False
    stop_on_first_failure: bool = True

    def __post_init__(self) -> None:
        _require_positive_int("num_runs", self.num_runs)
        _require_int("seed", self.seed)


def callable_name(fn: Callable[..., Any], fallback: str) -> str:
    """Best readable name for a closure; lambdas get the fallback."""
    name = getattr(fn, "name", None)
    if isinstance(name, str) and name:
        return name
    name = getattr(fn, "__name__", None)
    if not name or name == "<lambda>":
        return fallback
    return name


def is_async_callable(fn: Callable[..., Any]) -> bool:
    if isinstance(fn, (Action, Invariant)):
        fn = fn.fn
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(
        getattr(fn, "__call__", None)
    )


@dataclass(frozen=True)
class Action:
    """A named zero-argument closure that mutates the SUT.

    Plain callables work as actions too; wrap them to get a readable name in
    logs when the callable is a lambda.
    """

    name: str
    fn: Callable[[], Any]

    def __call__(self) -> Any:
        return self.fn()


@dataclass(frozen=True)
class Invariant:
    """A named zero-argument check.

    A check fails by raising, by returning ``False`` or by returning an
    exception instance. Any other return value (including ``None``) passes.
    """

    name: str
    fn: Callable[[], Any]
    description: str = ""

    def __call__(self) -> Any:
        return self.fn()


@dataclass(frozen=True)
class InvariantTest:
    """A stateful test definition: setup, candidate actions and invariants."""

    name: str
    setup: Callable[[], Any]
    actions: Sequence[Callable[[], Any]]
    invariants: Sequence[Callable[[], Any]] = ()

    def __post_init__(self) -> None:
        # Freeze caller iterables first so one-shot iterators are validated as stored.
        for kind in ("actions", "invariants"):
            entries = getattr(self, kind)
            try:
                object.__setattr__(self, kind, tuple(entries))
            except TypeError as e:
                raise _invalid_test(f"{kind} must be an iterable of callables", kind, entries) from e
        if not isinstance(self.name, str) or not self.name.strip():
            raise _invalid_test("InvariantTest name cannot be empty", "name", self.name)
        if not callable(self.setup):
            raise _invalid_test(f"setup of '{self.name}' is not callable", "setup", self.setup)
        if not self.actions:
            raise _invalid_test(
                f"InvariantTest '{self.name}' needs at least one action", "actions", self.actions
            )
        for kind, entries in (("actions", self.actions), ("invariants", self.invariants)):
            for i, entry in enumerate(entries):
                if not callable(entry):
                    raise _invalid_test(f"{kind}[{i}] of '{self.name}' is not callable", kind, entry)

    def action_name(self, index: int) -> str:
        return callable_name(self.actions[index], f"action[{index}]")

    def invariant_name(self, index: int) -> str:
        return callable_name(self.invariants[index], f"invariant[{index}]")

    @property
    def is_async(self) -> bool:
        """True if any closure is a coroutine function."""
        closures = [self.setup, *self.actions, *self.invariants]
        return any(is_async_callable(fn) for fn in closures)


@dataclass(frozen=True)
class ExpectedActionFailure:
    """An action raised and the runner discarded the error."""

    iteration: int
    step: int
    action_index: int
    action_name: str
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error) or type(self.error).__name__


@dataclass(frozen=True)
class Violation:
    """A failed invariant, with everything needed to reproduce it."""

    test_name: str
    iteration: int
    seed: int
    invariant_index: int
    invariant_name: str
    error: BaseException
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def message(self) -> str:
        return str(self.error) or type(self.error).__name__

    @property
    def reproduction(self) -> str:
        return f"seed={self.seed}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "test_name": self.test_name,
            "iteration": self.iteration,
            "seed": self.seed,
            "invariant_index": self.invariant_index,
            "invariant_name": self.invariant_name,
            "error_type": type(self.error).__name__,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class RunResult:
    """Outcome of one invariant run."""

    test_name: str
    seed: int
    iterations: int
    iterations_completed: int = 0
    actions_executed: int = 0
    actions_reverted: int = 0
    # Filled only with RunConfig.record_trace: one tuple of action indices per iteration.
    action_trace: list[tuple[int, ...]] = field(default_factory=list)
    violation: Violation | None = None
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.violation is None and self.iterations_completed == self.iterations

    def finish(self) -> None:
        """Mark the run as finished."""
        self.finished_at = datetime.now()
        self.duration_ms = (self.finished_at - self.started_at).total_seconds() * 1000

    def summary(self) -> dict[str, Any]:
        return {
            "test_name": self.test_name,
            "seed": self.seed,
            "iterations": self.iterations,
            "iterations_completed": self.iterations_completed,
            "actions_executed": self.actions_executed,
            "actions_reverted": self.actions_reverted,
            "success": self.success,
            "duration_ms": round(self.duration_ms, 2),
        }


@dataclass
class SuiteSummary:
    """Aggregated outcome of ``run_suite``."""

    results: list[RunResult] = field(default_factory=list)
    total_tests: int = 0
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None

    @property
    def violations(self) -> list[Violation]:
        return [r.violation for r in self.results if r.violation is not None]

    @property
    def passed(self) -> list[RunResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[RunResult]:
        return [r for r in self.results if r.violation is not None]

    @property
    def skipped(self) -> int:
        """Tests never started because the suite stopped early."""
        return self.total_tests - len(self.results)

    @property
    def success(self) -> bool:
        return not self.violations and self.skipped == 0

    def finish(self) -> None:
        self.finished_at = datetime.now()

    def summary(self) -> str:
        """Multi-line human-readable summary."""
        lines = [
            "Invariant Suite",
            "=" * 60,
            f"Tests:    {self.total_tests}",
            f"Passed:   {len(self.passed)}",
            f"Failed:   {len(self.failed)}",
        ]
        if self.skipped:
            lines.append(f"Skipped:  {self.skipped}")
        lines.append("")
        for result in self.results:
            status = "PASS" if result.success else "FAIL"
            lines.append(
                f"  [{status}] {result.test_name} "
                f"({result.iterations_completed}/{result.iterations} iterations, seed={result.seed})"
            )
        for v in self.violations:
            lines.append("")
            lines.append(f"  {v.test_name}: '{v.invariant_name}' failed at iteration {v.iteration}")
            lines.append(f"    Error: {v.message}")
            lines.append(f"    Reproduce with {v.reproduction}")
        return "\n".join(lines)


@dataclass(frozen=True)
class Counterexample:
    """A generated input that falsified a property."""

    property_name: str
    input: Any
    seed: int
    run_index: int
    error: BaseException

    @property
    def message(self) -> str:
        return str(self.error) or type(self.error).__name__

    def to_dict(self) -> dict[str, Any]:
        return {
            "property_name": self.property_name,
            "input": repr(self.input),
            "seed": self.seed,
            "run_index": self.run_index,
            "error_type": type(self.error).__name__,
            "message": self.message,
        }


@dataclass
class PropertyResult:
    """Outcome of a property run."""

    property_name: str
    seed: int
    num_runs: int
    runs_completed: int = 0
    counterexamples: list[Counterexample] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None

    @property
    def success(self) -> bool:
        return not self.counterexamples and self.runs_completed == self.num_runs

    def finish(self) -> None:
        self.finished_at = datetime.now()
