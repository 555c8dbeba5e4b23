"""
Filter configuration and sizing formulas for SaltBloom.

A filter is fully described by three numbers: the size of its bit array (m),
the number of hash values derived per element (k) and the number of elements
it is expected to hold (n). The named factories below normalize the three
supported parameter shapes into a single FilterConfig.
"""

import math
from dataclasses import dataclass

from saltbloom.core.exceptions import ConfigurationError


def _require_positive_int(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            f"{name} must be an integer, got {type(value).__name__}"
        )
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")


def hash_count_for_rate(false_positive_rate: float) -> int:
    """
    Number of hash values needed to reach a target false positive rate.

    Args:
        false_positive_rate: Target rate, strictly between 0 and 1.

    Returns:
        ceil(-log2(p)), at least 1.
    """
    if not (0 < false_positive_rate < 1):
        raise ConfigurationError(
            f"False positive rate must be between 0 and 1, got {false_positive_rate}"
        )
    return max(1, math.ceil(-math.log2(false_positive_rate)))


def bit_size_for_hash_count(hash_count: int, expected_elements: int) -> int:
    """Bit array size m = ceil(k * n / ln 2)."""
    return math.ceil(hash_count * expected_elements / math.log(2))


@dataclass(frozen=True)
class FilterConfig:
    """
    Immutable sizing of a Bloom filter.

    Attributes:
        bit_array_size: Number of slots in the bit array (m).
        hash_count: Number of hash values derived per element (k).
        expected_element_count: Number of elements the filter is sized for (n).
    """

    bit_array_size: int
    hash_count: int
    expected_element_count: int

    def __post_init__(self) -> None:
        _require_positive_int("Bit array size", self.bit_array_size)
        _require_positive_int("Hash count", self.hash_count)
        _require_positive_int("Expected element count", self.expected_element_count)

    @classmethod
    def from_bits_per_element(
        cls, bits_per_element: float, expected_element_count: int, hash_count: int
    ) -> "FilterConfig":
        """
        Size the bit array from a bits-per-element budget.

        Args:
            bits_per_element: Number of bits to spend on each expected element.
            expected_element_count: Number of elements the filter is sized for.
            hash_count: Number of hash values derived per element.

        Returns:
            A FilterConfig with bit_array_size = ceil(bits_per_element * n).
        """
        if not (bits_per_element > 0 and math.isfinite(bits_per_element)):
            raise ConfigurationError(
                f"Bits per element must be a positive finite number, got {bits_per_element}"
            )
        _require_positive_int("Expected element count", expected_element_count)
        return cls(
            bit_array_size=math.ceil(bits_per_element * expected_element_count),
            hash_count=hash_count,
            expected_element_count=expected_element_count,
        )

    @classmethod
    def from_false_positive_rate(
        cls, expected_element_count: int, false_positive_rate: float
    ) -> "FilterConfig":
        """
        Size the filter for a target false positive rate.

        Uses k = ceil(-log2(p)) and m = ceil(k * n / ln 2).

        Args:
            expected_element_count: Number of elements the filter is sized for.
            false_positive_rate: Target rate, strictly between 0 and 1.

        Returns:
            A FilterConfig sized for the target rate.
        """
        _require_positive_int("Expected element count", expected_element_count)
        hash_count = hash_count_for_rate(false_positive_rate)
        return cls(
            bit_array_size=bit_size_for_hash_count(hash_count, expected_element_count),
            hash_count=hash_count,
            expected_element_count=expected_element_count,
        )

    @property
    def bits_per_element(self) -> float:
        """Bits of storage per expected element."""
        return self.bit_array_size / self.expected_element_count
