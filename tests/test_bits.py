"""
Tests for the bit-interaction helpers.
"""

import math
import random

import pytest

from leaksim.bits import (
    WORD_MASK,
    bitflip,
    count_bit_pairs,
    hamming_weight,
    popcount_pairs,
    weighted_term,
)


class TestHammingWeight:
    """Tests for hamming_weight."""

    @pytest.mark.parametrize("value, expected", [
        (0, 0),
        (0b1011, 3),
        (0b0110, 2),
        (0xFFFFFFFF, 32),
        (0x80000000, 1),
    ])
    def test_known_values(self, value, expected):
        assert hamming_weight(value) == expected

    @pytest.mark.parametrize("value", [-1, 1 << 32])
    def test_rejects_non_word(self, value):
        with pytest.raises(ValueError):
            hamming_weight(value)


class TestPopcountPairs:
    """Tests for popcount_pairs."""

    def test_zero_and_single_bit(self):
        assert popcount_pairs(0) == 0
        assert popcount_pairs(0b1000) == 0

    def test_four_bits_give_six_pairs(self):
        assert popcount_pairs(0b1111) == 6
        assert popcount_pairs(0x80018001) == 6

    def test_all_bits_set(self):
        assert popcount_pairs(WORD_MASK) == 496

    def test_matches_closed_form(self):
        """popcount_pairs(v) == C(HW(v), 2) on random words."""
        rng = random.Random(1234)
        for _ in range(500):
            v = rng.getrandbits(32)
            assert popcount_pairs(v) == math.comb(hamming_weight(v), 2)

    def test_custom_predicate(self):
        """Pairs of differing bits: HW * (32 - HW)."""
        v = 0b10110
        assert count_bit_pairs(v, lambda a, b: a != b) == 3 * 29


class TestBitflip:
    """Tests for bitflip."""

    def test_symmetric(self):
        assert bitflip(0b1100, 0b1010) == bitflip(0b1010, 0b1100) == 0b0110

    def test_equal_values(self):
        assert bitflip(0xDEADBEEF, 0xDEADBEEF) == 0

    def test_complements(self):
        a = 0x12345678
        assert bitflip(a, ~a & WORD_MASK) == 0xFFFFFFFF

    def test_rejects_non_word(self):
        with pytest.raises(ValueError):
            bitflip(1 << 32, 0)


class TestWeightedTerm:
    """Tests for weighted_term."""

    def test_broadcasts_feature(self):
        assert weighted_term([1.0] * 32, 3) == 96.0

    def test_mixed_coefficients(self):
        assert weighted_term([0.5, -0.25, 2.0], 4) == pytest.approx(9.0)

    def test_zero_feature(self):
        assert weighted_term([3.0] * 32, 0) == 0.0

    def test_empty_vector(self):
        assert weighted_term([], 10) == 0.0
