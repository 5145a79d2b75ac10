"""Pytest fixtures for statefuzz tests."""

from __future__ import annotations

from typing import Any

import pytest

from statefuzz.core.models import Action, Invariant, InvariantTest, RunConfig, RunResult
from statefuzz.runner import InvariantRunner


class Counter:
    """Tiny SUT: a counter that refuses to go negative."""

    def __init__(self) -> None:
        self.value = 0
        self.resets = 0
        self.calls: list[str] = []

    def reset(self) -> None:
        self.value = 0
        self.resets += 1

    def increment(self) -> None:
        self.calls.append("inc")
        self.value += 1

    def decrement(self) -> None:
        self.calls.append("dec")
        if self.value == 0:
            raise ValueError("counter would go negative")
        self.value -= 1


class RecordingOutput:
    """Output hook sink that records every event it receives."""

    def __init__(self) -> None:
        self.events: list[tuple[str, tuple[Any, ...]]] = []

    def __getattr__(self, hook: str) -> Any:
        if hook.startswith("_"):
            raise AttributeError(hook)

        def record(*args: Any) -> None:
            self.events.append((hook, args))

        return record

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


@pytest.fixture
def counter() -> Counter:
    return Counter()


@pytest.fixture
def counter_test(counter: Counter) -> InvariantTest:
    return InvariantTest(
        name="counter",
        setup=counter.reset,
        actions=[Action("increment", counter.increment), Action("decrement", counter.decrement)],
        invariants=[Invariant("non-negative", lambda: counter.value >= 0)],
    )


@pytest.fixture
def config() -> RunConfig:
    return RunConfig(iterations=20, seed=42, record_trace=True)


@pytest.fixture
def runner(config: RunConfig) -> InvariantRunner:
    return InvariantRunner(config)


@pytest.fixture
def recording_output() -> RecordingOutput:
    return RecordingOutput()


def make_runner(iterations: int = 20, seed: int = 42, **kwargs: Any) -> InvariantRunner:
    kwargs.setdefault("record_trace", True)
    return InvariantRunner(RunConfig(iterations=iterations, seed=seed, **kwargs))


def run_counter(seed: int, iterations: int = 5) -> tuple[RunResult, list[str]]:
    """Run the counter scenario on a fresh SUT and return the result and call log."""
    counter = Counter()
    test = InvariantTest(
        name="counter",
        setup=counter.reset,
        actions=[counter.increment, counter.decrement],
        invariants=[lambda: counter.value >= 0],
    )
    result = make_runner(iterations=iterations, seed=seed).run(test)
    return result, counter.calls


@pytest.fixture
def clean_statefuzz_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment variables out of configuration tests."""
    for key in (
        "INVARIANT_ITERS",
        "INVARIANT_SEED",
        "INVARIANT_VERBOSE",
        "FUZZ_ITERS",
        "FUZZ_SEED",
        "FUZZ_VERBOSE",
        "FUZZ_LEVEL",
        "STATEFUZZ_ITERATIONS",
        "STATEFUZZ_SEED",
        "STATEFUZZ_VERBOSE",
        "STATEFUZZ_STOP_ON_FIRST_FAILURE",
        "STATEFUZZ_MAX_ACTIONS",
        "STATEFUZZ_PROGRESS_INTERVAL",
        "STATEFUZZ_RECORD_TRACE",
        "STATEFUZZ_NUM_RUNS",
        "STATEFUZZ_FUZZ_SEED",
        "STATEFUZZ_FUZZ_VERBOSE",
        "STATEFUZZ_FUZZ_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
