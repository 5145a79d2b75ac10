"""Tests for the Mulberry32 PRNG."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from statefuzz.core.prng import Mulberry32


class TestReferenceStream:
    """The stream matches the reference Mulberry32 bit for bit."""

    def test_seed_zero(self) -> None:
        rng = Mulberry32(0)
        assert [rng.next_uint32() for _ in range(3)] == [1144304738, 1416247, 958946056]

    def test_seed_42(self) -> None:
        rng = Mulberry32(42)
        assert [rng.next_uint32() for _ in range(5)] == [
            2581720956,
            1925393290,
            3661312704,
            2876485805,
            750819978,
        ]

    def test_first_float_for_seed_zero(self) -> None:
        assert Mulberry32(0).next() == 1144304738 / 4294967296

    def test_negative_seed_wraps_to_32_bits(self) -> None:
        negative = Mulberry32(-1)
        wrapped = Mulberry32(4294967295)
        assert negative.next_uint32() == wrapped.next_uint32() == 3850105811
        assert negative.next_uint32() == wrapped.next_uint32() == 813802916

    def test_seed_is_preserved(self) -> None:
        assert Mulberry32(-1).seed == -1
        assert Mulberry32(-1).state == 0xFFFFFFFF

    def test_next_int_for_seed_42(self) -> None:
        # 2581720956 / 2**32 * 10 = 6.01...
        assert Mulberry32(42).next_int(1, 10) == 7


class TestDeterminism:
    @given(seed=st.integers(min_value=-(2**40), max_value=2**40))
    def test_same_seed_same_stream(self, seed: int) -> None:
        a, b = Mulberry32(seed), Mulberry32(seed)
        assert [a.next() for _ in range(20)] == [b.next() for _ in range(20)]

    def test_different_seeds_differ(self) -> None:
        a, b = Mulberry32(1), Mulberry32(2)
        assert [a.next_uint32() for _ in range(5)] != [b.next_uint32() for _ in range(5)]


class TestRanges:
    @given(seed=st.integers(min_value=0, max_value=2**32 - 1))
    def test_next_is_unit_interval(self, seed: int) -> None:
        rng = Mulberry32(seed)
        for _ in range(50):
            value = rng.next()
            assert 0.0 <= value < 1.0

    @given(
        seed=st.integers(min_value=0, max_value=2**32 - 1),
        low=st.integers(min_value=-1000, max_value=1000),
        span=st.integers(min_value=0, max_value=1000),
    )
    def test_next_int_is_inclusive_range(self, seed: int, low: int, span: int) -> None:
        rng = Mulberry32(seed)
        for _ in range(20):
            assert low <= rng.next_int(low, low + span) <= low + span

    def test_next_int_single_value(self) -> None:
        rng = Mulberry32(7)
        assert {rng.next_int(5, 5) for _ in range(10)} == {5}

    def test_next_int_hits_both_ends(self) -> None:
        rng = Mulberry32(123)
        seen = {rng.next_int(1, 3) for _ in range(200)}
        assert seen == {1, 2, 3}

    def test_next_int_rejects_inverted_bounds(self) -> None:
        with pytest.raises(ValueError, match="less than"):
            Mulberry32(1).next_int(10, 1)

    def test_next_int_huge_span(self) -> None:
        rng = Mulberry32(99)
        for _ in range(50):
            value = rng.next_int(10**6, 10**24)
            assert 10**6 <= value <= 10**24

    def test_next_float_bounds(self) -> None:
        rng = Mulberry32(3)
        for _ in range(50):
            assert 2.0 <= rng.next_float(2.0, 5.0) < 5.0


class TestHelpers:
    def test_choice(self) -> None:
        rng = Mulberry32(5)
        items = ["a", "b", "c"]
        assert all(rng.choice(items) in items for _ in range(20))

    def test_choice_empty(self) -> None:
        with pytest.raises(ValueError):
            Mulberry32(5).choice([])

    def test_next_bool_produces_both(self) -> None:
        rng = Mulberry32(11)
        assert {rng.next_bool() for _ in range(100)} == {True, False}

    def test_fork_is_deterministic_and_independent(self) -> None:
        parent_a, parent_b = Mulberry32(8), Mulberry32(8)
        child_a, child_b = parent_a.fork(), parent_b.fork()
        assert child_a.next_uint32() == child_b.next_uint32()
        assert parent_a.next_uint32() == parent_b.next_uint32()

    def test_repr(self) -> None:
        assert repr(Mulberry32(0)) == "Mulberry32(seed=0, state=0x00000000)"
