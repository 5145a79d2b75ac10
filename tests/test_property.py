"""Tests for the PropertyExecutor and for_all."""

from __future__ import annotations

import inspect

import pytest

from statefuzz.core.models import FuzzConfig
from statefuzz.errors import ConfigurationError, ErrorCode, GeneratorExhaustion, PropertyFailure
from statefuzz.generators import integers, weights
from statefuzz.runner import PropertyExecutor, for_all, run_property

pytestmark = pytest.mark.usefixtures("clean_statefuzz_env")


class TestPropertyExecutor:
    def test_passing_property(self) -> None:
        result = run_property(weights(), lambda w: sum(w) == 10_000, FuzzConfig(num_runs=200, seed=1))
        assert result.success is True
        assert result.runs_completed == 200
        assert result.counterexamples == []

    def test_counterexample(self) -> None:
        with pytest.raises(PropertyFailure) as exc_info:
            run_property(integers(0, 100), lambda x: x < 50, FuzzConfig(num_runs=100, seed=3), name="small")
        counterexample = exc_info.value.counterexample
        assert counterexample.input >= 50
        assert counterexample.seed == 3
        assert counterexample.property_name == "small"
        assert exc_info.value.error_code == ErrorCode.PROPERTY_FAILED
        assert exc_info.value.suggestions == ["Reproduce with seed=3"]

    def test_counterexample_is_reproducible(self) -> None:
        config = FuzzConfig(num_runs=100, seed=11)
        found = []
        for _ in range(2):
            with pytest.raises(PropertyFailure) as exc_info:
                run_property(integers(0, 100), lambda x: x % 7 != 0, config)
            found.append((exc_info.value.counterexample.input, exc_info.value.counterexample.run_index))
        assert found[0] == found[1]

    def test_run_index_matches_draw(self) -> None:
        config = FuzzConfig(num_runs=100, seed=11)
        values = integers(0, 100).samples(100, seed=11)
        with pytest.raises(PropertyFailure) as exc_info:
            run_property(integers(0, 100), lambda x: x % 7 != 0, config)
        counterexample = exc_info.value.counterexample
        assert values[counterexample.run_index] == counterexample.input
        assert all(v % 7 != 0 for v in values[: counterexample.run_index])

    def test_raising_predicate(self) -> None:
        def predicate(x: int) -> None:
            assert x < 10, f"{x} too big"

        with pytest.raises(PropertyFailure) as exc_info:
            run_property(integers(0, 100), predicate, FuzzConfig(num_runs=100, seed=2))
        assert isinstance(exc_info.value.__cause__, AssertionError)
        assert exc_info.value.counterexample.property_name == "predicate"

    def test_returned_exception(self) -> None:
        with pytest.raises(PropertyFailure):
            run_property(integers(0, 10), lambda x: ValueError("nope"), FuzzConfig(num_runs=5, seed=2))

    def test_collects_all_without_stop(self) -> None:
        config = FuzzConfig(num_runs=50, seed=4, stop_on_first_failure=False)
        with pytest.raises(PropertyFailure) as exc_info:
            PropertyExecutor(config).run(integers(0, 1), lambda x: x == 0)
        counterexamples = exc_info.value.counterexamples
        assert len(counterexamples) > 1
        assert exc_info.value.counterexample is counterexamples[0]
        assert all(c.input == 1 for c in counterexamples)

    def test_generator_exhaustion_propagates(self) -> None:
        never = integers(0, 10).filter(lambda x: False)
        with pytest.raises(GeneratorExhaustion):
            run_property(never, lambda x: True, FuzzConfig(num_runs=5, seed=1))

    def test_invalid_config(self) -> None:
        with pytest.raises(ConfigurationError):
            FuzzConfig(num_runs=0, seed=1)


class TestForAll:
    def test_decorated_property_passes(self) -> None:
        @for_all(integers(0, 10), integers(0, 10), config=FuzzConfig(num_runs=50, seed=1))
        def addition_commutes(a: int, b: int) -> None:
            assert a + b == b + a

        result = addition_commutes()
        assert result.success
        assert result.property_name == "addition_commutes"
        assert addition_commutes.__name__ == "addition_commutes"

    def test_decorated_signature_takes_no_arguments(self) -> None:
        @for_all(integers(0, 10), config=FuzzConfig(num_runs=5, seed=1))
        def with_params(a: int) -> None:
            """Docstring survives."""

        assert list(inspect.signature(with_params).parameters) == []
        assert with_params.__doc__ == "Docstring survives."
        assert with_params.__qualname__.endswith("with_params")

    def test_decorated_property_fails(self) -> None:
        @for_all(integers(0, 10), config=FuzzConfig(num_runs=50, seed=1))
        def below_five(a: int) -> None:
            assert a < 5

        with pytest.raises(PropertyFailure) as exc_info:
            below_five()
        assert exc_info.value.counterexample.input[0] >= 5

    def test_config_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FUZZ_ITERS", "12")
        monkeypatch.setenv("FUZZ_SEED", "5")

        @for_all(integers(0, 10))
        def anything(a: int) -> bool:
            return True

        result = anything()
        assert result.num_runs == 12
        assert result.seed == 5
