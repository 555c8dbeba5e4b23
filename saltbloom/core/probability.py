"""
False positive probability model.

All functions are pure; they take the filter geometry explicitly.
"""

import math


def false_positive_probability(
    bit_array_size: int, hash_count: int, element_count: int
) -> float:
    """
    Probability that a query for a never-added element reports True.

    Formula: (1 - e^(-k*n/m))^k

    Args:
        bit_array_size: Number of slots in the bit array (m).
        hash_count: Number of hash values per element (k).
        element_count: Number of elements added (n).

    Returns:
        The false positive probability, between 0 and 1.
    """
    exponent = -hash_count * element_count / bit_array_size
    return (1.0 - math.exp(exponent)) ** hash_count


def optimal_hash_count(bit_array_size: int, element_count: int) -> int:
    """Hash count minimizing the false positive rate: round((m / n) * ln 2), at least 1."""
    if element_count <= 0:
        return 1
    return max(1, round((bit_array_size / element_count) * math.log(2)))


def estimate_element_count(
    bit_array_size: int, hash_count: int, set_bits: int
) -> float:
    """
    Estimate how many distinct elements produced a given fill.

    Uses n ≈ -m * ln(1 - X/m) / k where X is the number of set bits. A fully
    saturated array returns infinity.
    """
    if set_bits <= 0:
        return 0.0
    if set_bits >= bit_array_size:
        return math.inf
    return -bit_array_size * math.log(1.0 - set_bits / bit_array_size) / hash_count
