"""Ready-made generators for portfolio-style SUTs.

Weights and percentages are in basis points (10000 = 100%), prices and
amounts are integers in the smallest unit (wei-like), times are seconds.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any, TypeVar

from statefuzz.errors import ConfigurationError
from statefuzz.generators.base import (
    Arbitrary,
    booleans,
    hex_strings,
    integers,
    lists,
    records,
    sampled_from,
)

T = TypeVar("T")

BPS_DENOMINATOR = 10_000
WEI_PER_GWEI = 1_000_000_000

# 2020-01-01 and 2030-01-01, UTC
DEFAULT_MIN_TIMESTAMP = 1_577_836_800
DEFAULT_MAX_TIMESTAMP = 1_893_456_000


def asset_counts(min_assets: int = 1, max_assets: int = 10) -> Arbitrary[int]:
    return integers(min_assets, max_assets)


def normalize_weights(raw: Sequence[int], total: int = BPS_DENOMINATOR) -> list[int]:
    """Scale ``raw`` so it sums to exactly ``total``.

    Each element is scaled with floor division; the units lost to rounding go
    one each to the leading elements. An all-zero input is split evenly.
    """
    count = len(raw)
    if count == 0:
        return []
    raw_sum = sum(raw)
    if raw_sum == 0:
        scaled = [total // count] * count
    else:
        scaled = [value * total // raw_sum for value in raw]
    remainder = total - sum(scaled)
    for i in range(remainder):
        scaled[i] += 1
    return scaled


def weights(
    min_assets: int = 2,
    max_assets: int = 10,
    total: int = BPS_DENOMINATOR,
) -> Arbitrary[list[int]]:
    """Non-negative weight vectors summing to ``total``."""
    if min_assets < 1:
        raise ConfigurationError("weights need at least one asset", field="min_assets", value=min_assets)
    return asset_counts(min_assets, max_assets).chain(
        lambda count: lists(integers(0, total), length=count).map(
            lambda raw: normalize_weights(raw, total)
        ),
        name=f"weights({min_assets}..{max_assets}, total={total})",
    )


def weight_bounds(
    max_min_weight: int = 3_000,
    max_max_weight: int = BPS_DENOMINATOR,
) -> Arbitrary[dict[str, int]]:
    """``{"min_weight", "max_weight"}`` pairs with min <= max."""
    return records(
        min_weight=integers(0, max_min_weight),
        max_weight=integers(0, max_max_weight),
    ).filter(lambda b: b["min_weight"] <= b["max_weight"], name="weight_bounds()")


def weight_bounds_arrays(length: int) -> Arbitrary[list[dict[str, int]]]:
    return lists(weight_bounds(), length=length)


def prices(
    min_price: int = 10**15,
    max_price: int = 10**21,
) -> Arbitrary[int]:
    return integers(min_price, max_price)


def amounts(
    min_amount: int = 10**6,
    max_amount: int = 10**24,
) -> Arbitrary[int]:
    return integers(min_amount, max_amount)


def price_sequences(
    length: int,
    start_price: float = 1e18,
    volatility: float = 0.1,
) -> Arbitrary[list[int]]:
    """A random walk of ``length`` steps starting at ``start_price``.

    Each step draws a return in [-100, 100] percent, scaled by
    ``volatility``. Prices never drop below 1.
    """
    if length < 0:
        raise ConfigurationError("price sequence length cannot be negative", field="length", value=length)

    def walk(returns: list[int]) -> list[int]:
        series = [math.floor(start_price)]
        for step_return in returns:
            change = (step_return / 100) * volatility
            series.append(math.floor(max(series[-1] * (1 + change), 1)))
        return series

    return lists(integers(-100, 100), length=length).map(
        walk, name=f"price_sequences({length}, vol={volatility})"
    )


def price_histories(
    min_length: int = 30,
    max_length: int = 365,
    min_price: int = 1,
    max_price: int = 1_000_000,
) -> Arbitrary[list[int]]:
    """Independent prices, for volatility-based strategies."""
    return lists(integers(min_price, max_price), min_length=min_length, max_length=max_length)


def time_intervals(min_seconds: int = 3_600, max_seconds: int = 2_592_000) -> Arbitrary[int]:
    """Defaults span one hour to thirty days."""
    return integers(min_seconds, max_seconds)


def timestamps(
    min_timestamp: int = DEFAULT_MIN_TIMESTAMP,
    max_timestamp: int = DEFAULT_MAX_TIMESTAMP,
) -> Arbitrary[int]:
    return integers(min_timestamp, max_timestamp)


def slippage_bps(min_bps: int = 1, max_bps: int = 500) -> Arbitrary[int]:
    return integers(min_bps, max_bps)


def percentage_bps() -> Arbitrary[int]:
    return integers(0, BPS_DENOMINATOR)


def gas_prices(min_gwei: int = 1, max_gwei: int = 500) -> Arbitrary[int]:
    """Gas prices in wei, drawn in whole gwei."""
    return integers(min_gwei, max_gwei).map(lambda gwei: gwei * WEI_PER_GWEI, name="gas_prices()")


def addresses() -> Arbitrary[str]:
    """``0x``-prefixed 20-byte hex addresses (not checksummed)."""
    return hex_strings(40, 40).map(lambda digits: f"0x{digits}", name="addresses()")


def active_flags(count: int) -> Arbitrary[list[bool]]:
    return lists(booleans(), length=count)


def active_arrays(length: int) -> Arbitrary[list[bool]]:
    """Boolean arrays with at least one ``True``."""
    if length < 1:
        raise ConfigurationError("active arrays need at least one slot", field="length", value=length)
    return active_flags(length).filter(any, name=f"active_arrays({length})")


def operation_sequences(
    operations: Sequence[T],
    min_length: int = 1,
    max_length: int = 20,
) -> Arbitrary[list[T]]:
    """Sequences over a fixed alphabet of operations, for state-machine tests."""
    return lists(sampled_from(operations), min_length=min_length, max_length=max_length)


def calculate_volatility(series: Sequence[Any]) -> float:
    """Population standard deviation of simple returns."""
    if len(series) < 2:
        return 0.0
    returns = [
        (series[i] - series[i - 1]) / series[i - 1] for i in range(1, len(series))
    ]
    mean = sum(returns) / len(returns)
    variance = sum((r - mean) ** 2 for r in returns) / len(returns)
    return math.sqrt(variance)
