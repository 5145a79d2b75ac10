"""Common invariant checks for portfolio-style systems.

Each check raises InvariantCheckError when the property does not hold and
returns None otherwise, so they can be called directly from invariant
closures. Amounts are integers; tolerances are in basis points.
"""

from __future__ import annotations

from collections.abc import Sequence

from statefuzz.errors import InvariantCheckError

BPS_DENOMINATOR = 10_000


def check_value_conservation(before: int, after: int, slippage_bps: int = 50) -> None:
    """Value may grow, but may only shrink by up to ``slippage_bps``."""
    if after >= before:
        return
    if before <= 0:
        raise InvariantCheckError(
            f"Value conservation violated: value dropped from {before} to {after}"
        )

    loss = before - after
    loss_bps = loss * BPS_DENOMINATOR // before
    if loss_bps > slippage_bps:
        raise InvariantCheckError(
            f"Value conservation violated: Lost {loss_bps} bps, max allowed: {slippage_bps} bps. "
            f"Before: {before}, After: {after}, Loss: {loss}"
        )


def check_share_price_monotonicity(prices: Sequence[int], allowed_decrease_bps: int = 10) -> None:
    """Share price never drops by more than ``allowed_decrease_bps`` per step."""
    for i in range(1, len(prices)):
        prev, curr = prices[i - 1], prices[i]
        if curr >= prev:
            continue
        decrease = prev - curr
        decrease_bps = decrease * BPS_DENOMINATOR // prev if prev > 0 else BPS_DENOMINATOR
        if decrease_bps > allowed_decrease_bps:
            raise InvariantCheckError(
                f"Share price monotonicity violated at index {i}: "
                f"Decreased by {decrease_bps} bps, max allowed: {allowed_decrease_bps} bps. "
                f"Previous: {prev}, Current: {curr}"
            )


def check_weight_sum(weights: Sequence[int], expected_sum: int = BPS_DENOMINATOR) -> None:
    total = sum(weights)
    if total != expected_sum:
        raise InvariantCheckError(
            f"Weight sum invariant violated: Sum is {total}, expected {expected_sum}. "
            f"Weights: [{', '.join(str(w) for w in weights)}]"
        )


def check_non_negative_weights(weights: Sequence[int]) -> None:
    for i, weight in enumerate(weights):
        if weight < 0:
            raise InvariantCheckError(
                f"Non-negative weight invariant violated at index {i}: Weight is {weight} (negative)"
            )


def check_weight_bounds(
    weights: Sequence[int],
    min_weights: Sequence[int],
    max_weights: Sequence[int],
) -> None:
    if len(weights) != len(min_weights) or len(weights) != len(max_weights):
        raise InvariantCheckError(
            "Array length mismatch in weight bounds check: "
            f"{len(weights)} weights, {len(min_weights)} minimums, {len(max_weights)} maximums"
        )

    for i, (weight, low, high) in enumerate(zip(weights, min_weights, max_weights)):
        if weight < low:
            raise InvariantCheckError(
                f"Weight bounds violated at index {i}: Weight {weight} is below minimum {low}"
            )
        if weight > high:
            raise InvariantCheckError(
                f"Weight bounds violated at index {i}: Weight {weight} is above maximum {high}"
            )


def check_timestamp_monotonicity(timestamps: Sequence[int]) -> None:
    """Timestamps never go backwards; equal neighbours are fine."""
    for i in range(1, len(timestamps)):
        if timestamps[i] < timestamps[i - 1]:
            raise InvariantCheckError(
                f"Timestamp monotonicity violated at index {i}: "
                f"Current timestamp {timestamps[i]} is less than previous {timestamps[i - 1]}"
            )


def check_share_accounting(total_shares: int, user_shares: Sequence[int]) -> None:
    """Total supply equals the sum of individual balances."""
    total = sum(user_shares)
    if total != total_shares:
        raise InvariantCheckError(
            f"Share accounting invariant violated: "
            f"Total shares {total_shares} does not match sum of user shares {total}"
        )
