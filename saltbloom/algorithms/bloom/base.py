"""
Bloom Filter implementation for SaltBloom.

This module provides the plain Bloom filter, a space-efficient probabilistic
data structure for testing set membership with a bounded false positive rate
and no false negatives.

References:
    - Bloom, B. H. (1970). Space/time trade-offs in hash coding with allowable errors.
      Communications of the ACM, 13(7), 422-426.
"""

from typing import List, TypeVar

from saltbloom.core.base import MembershipFilter

T = TypeVar("T")  # Type for the elements being stored


class BloomFilter(MembershipFilter[T]):
    """
    Bloom Filter for set membership testing.

    A query returns either "possibly in set" or "definitely not in set". Any
    element that was added tests positive until the filter is cleared.

    Example:
        # Size a filter for 1000 elements at a 1% false positive rate
        bloom = BloomFilter.from_false_positive_rate(1000, 0.01)

        bloom.add("apple")
        bloom.add("banana")

        bloom.contains("apple")   # True
        bloom.contains("orange")  # False (or, rarely, a false positive)

        print(bloom.summary())
    """

    variant = "simple"

    def _add_indices(self, indices: List[int]) -> bool:
        changed = False
        for index in indices:
            # set() reports whether the slot was previously unset
            if self._bits.set(index):
                changed = True
        return changed

    def add(self, element) -> bool:
        """
        Add an element to the Bloom filter.

        The added element count always increases, even for repeats.

        Args:
            element: The element, or its raw bytes.

        Returns:
            True if at least one previously unset slot was set. This signals
            novelty, not successful insertion: False means the element (or a
            colliding combination of others) was already covered.
        """
        return super().add(element)
