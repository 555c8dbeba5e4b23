"""
Counting Bloom Filter implementation for SaltBloom.

This module provides the Counting Bloom Filter, which keeps a small counter
next to every slot of the bit array so that elements can be logically removed.

References:
    - Fan, L., Cao, P., Almeida, J., & Broder, A. Z. (2000).
      Summary cache: a scalable wide-area web cache sharing protocol.
      IEEE/ACM Transactions on Networking, 8(3), 281-293.
"""

import logging
from typing import Any, Dict, List, Set, TypeVar

from saltbloom.core.base import MembershipFilter, RemovableFilter
from saltbloom.core.exceptions import ConfigurationError, CounterOverflow
from saltbloom.core.storage import DEFAULT_COUNTER_BITS, CounterArray

logger = logging.getLogger(__name__)

T = TypeVar("T")  # Type for the elements being stored

SATURATE = "saturate"
RAISE = "raise"
OVERFLOW_POLICIES = (SATURATE, RAISE)


class CountingBloomFilter(MembershipFilter[T], RemovableFilter[T]):
    """
    Counting Bloom Filter for set membership testing with removal support.

    Each slot of the bit array has a companion counter of counter_bits bits.
    Adding an element increments the counters at its k slots; removing it
    decrements them and clears any slot whose counter reaches zero. A slot's
    bit is set if and only if its counter is nonzero.

    Because slots are shared between elements, removing one element can clear
    a slot another element still needs, producing a false negative for that
    element. count() likewise over-estimates once collisions occur.

    Counter overflow follows the overflow policy:
        - "saturate" (default): once an increment is dropped because a
          counter is full, that counter sticks at its maximum and is never
          decremented again, so its slot stays set. A counter that merely
          reaches the maximum still decrements normally.
        - "raise": an add that would overflow any of its counters raises
          CounterOverflow and leaves the filter unchanged.

    Example:
        cbf = CountingBloomFilter.from_false_positive_rate(64, 0.05)
        cbf.add_all(["hello", "hello", "nihao"])
        cbf.count("hello")    # 2
        cbf.remove("nihao")   # True
        cbf.remove("nihao")   # False, probably
    """

    variant = "counting"
    supports_removal = True

    def __init__(
        self,
        bit_array_size: int,
        hash_count: int,
        expected_element_count: int,
        counter_bits: int = DEFAULT_COUNTER_BITS,
        overflow: str = SATURATE,
        **options: Any,
    ):
        """
        Initialize a new Counting Bloom filter.

        Args:
            bit_array_size: Number of slots (m).
            hash_count: Number of hash values derived per element (k).
            expected_element_count: Number of elements the filter is sized for (n).
            counter_bits: Width of each counter, 2 to 8 bits.
            overflow: Counter overflow policy, "saturate" or "raise".
            **options: algorithm, fold_bits, encoding and thread_safe, as for
                       MembershipFilter.

        Raises:
            ConfigurationError: If counter_bits or overflow is not supported,
                                or any base parameter is invalid.
        """
        if overflow not in OVERFLOW_POLICIES:
            raise ConfigurationError(
                f"Overflow policy must be one of {OVERFLOW_POLICIES}, got {overflow!r}"
            )
        super().__init__(bit_array_size, hash_count, expected_element_count, **options)

        self._counters = CounterArray(bit_array_size, counter_bits)
        self._overflow = overflow
        # Slots whose counter dropped an increment; their true count is unknown
        self._saturated: Set[int] = set()
        self._saturation_warned = False

    @property
    def counter_bits(self) -> int:
        return self._counters.counter_bits

    @property
    def counter_max(self) -> int:
        """Largest value a counter can hold."""
        return self._counters.max_value

    @property
    def overflow(self) -> str:
        return self._overflow

    def _options(self) -> Dict[str, Any]:
        options = super()._options()
        options["counter_bits"] = self._counters.counter_bits
        options["overflow"] = self._overflow
        return options

    def _adopt_state(self, source: MembershipFilter[T], share: bool) -> None:
        super()._adopt_state(source, share)
        counters = source._counters  # type: ignore[attr-defined]
        self._counters = counters if share else counters.copy()
        saturated = source._saturated  # type: ignore[attr-defined]
        self._saturated = saturated if share else set(saturated)

    # --- Slot mutation ---

    def _add_indices(self, indices: List[int]) -> bool:
        counter_max = self._counters.max_value

        if self._overflow == RAISE:
            # An element may hash to the same slot more than once
            increments: Dict[int, int] = {}
            for index in indices:
                increments[index] = increments.get(index, 0) + 1
            for index, amount in increments.items():
                if self._counters.get(index) + amount > counter_max:
                    raise CounterOverflow(
                        f"Counter at slot {index} would exceed its maximum "
                        f"of {counter_max}"
                    )

        for index in indices:
            self._bits.set(index)
            current = self._counters.get(index)
            if current < counter_max:
                self._counters.set(index, current + 1)
            else:
                self._saturated.add(index)
                if not self._saturation_warned:
                    self._saturation_warned = True
                    logger.warning(
                        "Counter at slot %d saturated at %d; counts and removals "
                        "for elements sharing it are no longer exact",
                        index,
                        counter_max,
                    )
        return True

    def add(self, element) -> bool:
        """
        Add an element to the Counting Bloom filter.

        Increments the counter of each of the element's slots and sets the
        slot's bit. The added element count always increases.

        Args:
            element: The element, or its raw bytes.

        Returns:
            Always True.

        Raises:
            CounterOverflow: Under the "raise" policy, if a counter would
                             exceed counter_max. Nothing is modified.
        """
        return super().add(element)

    def _reset_slots(self) -> None:
        super()._reset_slots()
        self._counters.reset()
        self._saturated.clear()
        self._saturation_warned = False

    # --- Counting operations ---

    def count(self, element) -> int:
        """
        Estimate how many times an element was added.

        Returns the minimum counter over the element's slots. Collisions with
        other elements can only inflate the estimate; it is exact when none of
        the slots is shared.

        Args:
            element: The element, or its raw bytes.

        Returns:
            The estimated multiplicity, 0 if the element is definitely absent.
        """
        data = self.to_bytes(element)
        with self._lock:
            return min(self._counters.get(i) for i in self._indices(data))

    def get_count(self, index: int) -> int:
        """
        Read a single counter.

        Raises:
            IndexOutOfRange: If index is outside [0, bit_array_size).
        """
        with self._lock:
            return self._counters.get(index)

    def remove(self, element) -> bool:
        """
        Logically remove an element.

        If the element does not test positive nothing changes. Otherwise the
        counter of each of its slots is decremented and slots whose counter
        reaches zero are cleared. Counters that have dropped an increment on
        overflow are left untouched.

        This can create false negatives for other elements that share slots
        with the removed element.

        Args:
            element: The element, or its raw bytes.

        Returns:
            True if the element tested positive and was removed, False otherwise.
        """
        data = self.to_bytes(element)
        with self._lock:
            indices = self._indices(data)
            if not self._contains_indices(indices):
                return False

            for index in indices:
                if index in self._saturated:
                    continue
                current = self._counters.get(index)
                if current > 0:
                    current -= 1
                    self._counters.set(index, current)
                if current == 0:
                    self._bits.unset(index)
            return True

    def total_count(self) -> int:
        """Sum of all counters."""
        with self._lock:
            return self._counters.total()

    def max_count(self) -> int:
        """Largest counter value in the filter."""
        with self._lock:
            return self._counters.maximum()

    # --- Introspection ---

    def estimate_size(self) -> int:
        return super().estimate_size() + self._counters.estimate_size()

    def get_stats(self) -> Dict[str, Any]:
        stats = super().get_stats()
        stats.update(
            {
                "counter_bits": self._counters.counter_bits,
                "counter_max": self._counters.max_value,
                "overflow": self._overflow,
                "total_count": self.total_count(),
                "max_count": self.max_count(),
                "saturated_slots": len(self._saturated),
            }
        )
        return stats
