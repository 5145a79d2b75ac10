"""Tests for the reusable invariant checks."""

from __future__ import annotations

import pytest

from statefuzz.errors import InvariantCheckError
from statefuzz.invariants import (
    check_non_negative_weights,
    check_share_accounting,
    check_share_price_monotonicity,
    check_timestamp_monotonicity,
    check_value_conservation,
    check_weight_bounds,
    check_weight_sum,
)


class TestValueConservation:
    def test_gain_passes(self) -> None:
        check_value_conservation(1_000, 2_000)

    def test_loss_within_tolerance(self) -> None:
        check_value_conservation(10_000, 9_950, slippage_bps=50)

    def test_loss_beyond_tolerance(self) -> None:
        with pytest.raises(InvariantCheckError, match="Lost 51 bps"):
            check_value_conservation(10_000, 9_949, slippage_bps=50)

    def test_loss_from_zero(self) -> None:
        with pytest.raises(InvariantCheckError):
            check_value_conservation(0, -1)


class TestSharePrice:
    def test_increasing(self) -> None:
        check_share_price_monotonicity([100, 101, 105])

    def test_small_dip_allowed(self) -> None:
        check_share_price_monotonicity([10_000, 9_990], allowed_decrease_bps=10)

    def test_large_dip(self) -> None:
        with pytest.raises(InvariantCheckError, match="index 2"):
            check_share_price_monotonicity([100, 110, 90])


class TestWeights:
    def test_sum(self) -> None:
        check_weight_sum([5_000, 5_000])
        with pytest.raises(InvariantCheckError, match="Sum is 9999"):
            check_weight_sum([5_000, 4_999])

    def test_non_negative(self) -> None:
        check_non_negative_weights([0, 1])
        with pytest.raises(InvariantCheckError, match="index 1"):
            check_non_negative_weights([1, -1])

    def test_bounds(self) -> None:
        check_weight_bounds([10, 20], [0, 20], [10, 30])
        with pytest.raises(InvariantCheckError, match="below minimum"):
            check_weight_bounds([10, 19], [0, 20], [10, 30])
        with pytest.raises(InvariantCheckError, match="above maximum"):
            check_weight_bounds([11, 20], [0, 20], [10, 30])

    def test_bounds_length_mismatch(self) -> None:
        with pytest.raises(InvariantCheckError, match="length mismatch"):
            check_weight_bounds([1, 2], [0], [3, 3])


class TestTimestampsAndShares:
    def test_timestamps(self) -> None:
        check_timestamp_monotonicity([1, 1, 2])
        with pytest.raises(InvariantCheckError):
            check_timestamp_monotonicity([1, 3, 2])

    def test_share_accounting(self) -> None:
        check_share_accounting(30, [10, 20])
        with pytest.raises(InvariantCheckError, match="does not match"):
            check_share_accounting(31, [10, 20])

    def test_checks_count_as_assertions(self) -> None:
        with pytest.raises(AssertionError):
            check_weight_sum([1])
