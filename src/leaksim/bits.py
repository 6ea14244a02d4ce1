"""
Bit-Interaction Engine - pure helpers shared by the leakage models.

Leakage Model:
    P ∝ Σ_t w_t · f_t(v)

where each feature f_t is a bit-level statistic of an operand value v, or of
the flip vector between two successive operand values:

    HW(v)      = number of set bits
    pairs(v)   = |{(i, j) : i < j, v_i = v_j = 1}| = C(HW(v), 2)
    flip(a, b) = a ⊕ b

Usage:
    from leaksim.bits import popcount_pairs, bitflip, weighted_term

    flips = bitflip(0b1100, 0b1010)        # 0b0110
    pairs = popcount_pairs(flips)          # 1
    sample = weighted_term([0.5] * 32, pairs)
"""

from __future__ import annotations

from typing import Callable, Iterable

WORD_BITS = 32
WORD_MASK = (1 << WORD_BITS) - 1


def _check_word(value: int) -> int:
    if not 0 <= value <= WORD_MASK:
        raise ValueError(f"Value {value!r} is not a {WORD_BITS}-bit unsigned word")
    return value


def hamming_weight(value: int) -> int:
    """Number of set bits in a 32-bit value."""
    return bin(_check_word(value)).count("1")


def count_bit_pairs(value: int, predicate: Callable[[int, int], bool]) -> int:
    """
    Count unordered bit-index pairs (i, j), i < j, accepted by ``predicate``.

    The predicate receives the two bit values (0 or 1) at positions i and j.

    Args:
        value: 32-bit unsigned value
        predicate: Test applied to each pair of bits

    Returns:
        Number of pairs for which the predicate holds
    """
    _check_word(value)
    bits = [(value >> i) & 1 for i in range(WORD_BITS)]

    result = 0
    for i in range(WORD_BITS):
        for j in range(i + 1, WORD_BITS):
            if predicate(bits[i], bits[j]):
                result += 1
    return result


def both_set(bit_i, bit_j):
    """True when both bits are 1. Also accepts Z3 bit-vectors."""
    return (bit_i & bit_j) == 1


def popcount_pairs(value: int) -> int:
    """
    Number of set-bit pairs in a 32-bit value.

    Second-order leakage proxy beyond the Hamming weight. Always equals
    ``C(hamming_weight(value), 2)``.
    """
    return count_bit_pairs(value, both_set)


def flip_bits(a, b):
    """Positions where a and b differ. Also accepts Z3 bit-vectors."""
    return a ^ b


def bitflip(a: int, b: int) -> int:
    """Flip vector between two 32-bit values; set bits mark differing positions."""
    return flip_bits(_check_word(a), _check_word(b)) & WORD_MASK


def weighted_term(coefficients: Iterable[float], feature_value: float) -> float:
    """
    Weight one scalar feature by a coefficient vector.

    The feature is multiplied by every coefficient and the products summed.
    """
    total = 0.0
    for coefficient in coefficients:
        total += feature_value * coefficient
    return total
