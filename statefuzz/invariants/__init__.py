"""Reusable invariant checks."""

from statefuzz.invariants.checks import (
    check_non_negative_weights,
    check_share_accounting,
    check_share_price_monotonicity,
    check_timestamp_monotonicity,
    check_value_conservation,
    check_weight_bounds,
    check_weight_sum,
)

__all__ = [
    "check_value_conservation",
    "check_share_price_monotonicity",
    "check_weight_sum",
    "check_non_negative_weights",
    "check_weight_bounds",
    "check_timestamp_monotonicity",
    "check_share_accounting",
]
