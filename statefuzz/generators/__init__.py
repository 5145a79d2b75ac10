"""Arbitrary-value generators.

Classes:
    Arbitrary: A composable, deterministic value generator.

Primitive builders: integers, floats, booleans, just, sampled_from, one_of,
lists, tuples, records, hex_strings.

Domain generators: weights, prices, price sequences, time intervals,
addresses, activity arrays and operation sequences.

Example:
    >>> from statefuzz.generators import weights
    >>> sum(weights().example(seed=1))
    10000
"""

from statefuzz.generators.base import (
    DEFAULT_FILTER_ATTEMPTS,
    Arbitrary,
    booleans,
    floats,
    hex_strings,
    integers,
    just,
    lists,
    one_of,
    records,
    sampled_from,
    tuples,
)
from statefuzz.generators.domain import (
    BPS_DENOMINATOR,
    active_arrays,
    active_flags,
    addresses,
    amounts,
    asset_counts,
    calculate_volatility,
    gas_prices,
    normalize_weights,
    operation_sequences,
    percentage_bps,
    price_histories,
    price_sequences,
    prices,
    slippage_bps,
    time_intervals,
    timestamps,
    weight_bounds,
    weight_bounds_arrays,
    weights,
)

__all__ = [
    "Arbitrary",
    "DEFAULT_FILTER_ATTEMPTS",
    "integers",
    "floats",
    "booleans",
    "just",
    "sampled_from",
    "one_of",
    "lists",
    "tuples",
    "records",
    "hex_strings",
    "BPS_DENOMINATOR",
    "asset_counts",
    "normalize_weights",
    "weights",
    "weight_bounds",
    "weight_bounds_arrays",
    "prices",
    "amounts",
    "price_sequences",
    "price_histories",
    "time_intervals",
    "timestamps",
    "slippage_bps",
    "percentage_bps",
    "gas_prices",
    "addresses",
    "active_flags",
    "active_arrays",
    "operation_sequences",
    "calculate_volatility",
]
