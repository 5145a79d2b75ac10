"""Tests for InvariantRunner.run_suite."""

from __future__ import annotations

import pytest

from statefuzz.core.models import InvariantTest, RunConfig, SuiteSummary
from statefuzz.errors import ConfigurationError, SetupFailure, SuiteFailure
from statefuzz.runner import InvariantRunner
from tests.conftest import Counter, RecordingOutput


def passing_test(name: str, log: list[str] | None = None) -> InvariantTest:
    counter = Counter()

    def setup() -> None:
        if log is not None:
            log.append(name)
        counter.reset()

    return InvariantTest(
        name=name,
        setup=setup,
        actions=[counter.increment, counter.decrement],
        invariants=[lambda: counter.value >= 0],
    )


def failing_test(name: str) -> InvariantTest:
    return InvariantTest(name=name, setup=lambda: None, actions=[lambda: None], invariants=[lambda: False])


class TestRunSuite:
    def test_all_pass(self) -> None:
        runner = InvariantRunner(RunConfig(iterations=10, seed=42))
        summary = runner.run_suite([passing_test("a"), passing_test("b")])
        assert isinstance(summary, SuiteSummary)
        assert summary.success is True
        assert [r.test_name for r in summary.results] == ["a", "b"]
        assert summary.violations == []

    def test_each_test_gets_a_fresh_stream(self) -> None:
        runner = InvariantRunner(RunConfig(iterations=10, seed=42, record_trace=True))
        summary = runner.run_suite([passing_test("a"), passing_test("b")])
        assert summary.results[0].action_trace == summary.results[1].action_trace

    def test_stops_on_first_failure(self) -> None:
        log: list[str] = []
        runner = InvariantRunner(RunConfig(iterations=5, seed=1))
        with pytest.raises(SuiteFailure) as exc_info:
            runner.run_suite([failing_test("bad"), passing_test("never", log)])
        summary = exc_info.value.summary
        assert log == []
        assert len(summary.results) == 1
        assert summary.skipped == 1
        assert [v.test_name for v in exc_info.value.violations] == ["bad"]

    def test_keep_going_collects_all_violations(self) -> None:
        log: list[str] = []
        runner = InvariantRunner(RunConfig(iterations=5, seed=1, stop_on_first_failure=False))
        with pytest.raises(SuiteFailure) as exc_info:
            runner.run_suite([failing_test("bad1"), passing_test("good", log), failing_test("bad2")])
        summary = exc_info.value.summary
        assert [v.test_name for v in summary.violations] == ["bad1", "bad2"]
        assert [r.test_name for r in summary.passed] == ["good"]
        assert log
        assert "bad1" in str(exc_info.value)
        assert exc_info.value.suggestions == [
            "Reproduce 'bad1' with seed=1",
            "Reproduce 'bad2' with seed=1",
        ]

    def test_setup_failure_aborts_suite(self) -> None:
        log: list[str] = []
        broken = InvariantTest(name="broken", setup=lambda: 1 / 0, actions=[lambda: None])
        runner = InvariantRunner(RunConfig(iterations=5, seed=1, stop_on_first_failure=False))
        with pytest.raises(SetupFailure):
            runner.run_suite([broken, passing_test("after", log)])
        assert log == []

    def test_hooks(self) -> None:
        output = RecordingOutput()
        runner = InvariantRunner(RunConfig(iterations=3, seed=1), output=output)
        runner.run_suite([passing_test("a")])
        assert output.names() == ["suite_started", "run_passed", "suite_finished"]

    def test_summary_text(self) -> None:
        runner = InvariantRunner(RunConfig(iterations=3, seed=9, stop_on_first_failure=False))
        with pytest.raises(SuiteFailure) as exc_info:
            runner.run_suite([passing_test("good"), failing_test("bad")])
        text = exc_info.value.summary.summary()
        assert "[PASS] good" in text
        assert "[FAIL] bad" in text
        assert "Reproduce with seed=9" in text

    def test_empty_suite(self) -> None:
        summary = InvariantRunner(RunConfig(iterations=3, seed=1)).run_suite([])
        assert summary.success is True
        assert summary.results == []


class TestParallelSuite:
    def test_results_keep_input_order(self) -> None:
        runner = InvariantRunner(RunConfig(iterations=20, seed=5))
        tests = [passing_test(f"t{i}") for i in range(6)]
        summary = runner.run_suite(tests, max_workers=3)
        assert [r.test_name for r in summary.results] == [f"t{i}" for i in range(6)]

    def test_parallel_matches_sequential(self) -> None:
        runner = InvariantRunner(RunConfig(iterations=20, seed=5, record_trace=True))
        sequential = runner.run_suite([passing_test("a"), passing_test("b")])
        parallel = runner.run_suite([passing_test("a"), passing_test("b")], max_workers=2)
        assert [r.action_trace for r in sequential.results] == [r.action_trace for r in parallel.results]

    def test_parallel_failure(self) -> None:
        runner = InvariantRunner(RunConfig(iterations=5, seed=1, stop_on_first_failure=False))
        with pytest.raises(SuiteFailure) as exc_info:
            runner.run_suite([passing_test("good"), failing_test("bad")], max_workers=2)
        assert [v.test_name for v in exc_info.value.violations] == ["bad"]

    def test_invalid_workers(self) -> None:
        runner = InvariantRunner(RunConfig(iterations=5, seed=1))
        with pytest.raises(ConfigurationError):
            runner.run_suite([passing_test("a")], max_workers=0)
