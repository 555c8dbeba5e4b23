"""
Fixed-size slot arrays backing the Bloom filters.

BitArray packs one boolean per slot into an ``array.array('B')``.
CounterArray packs one small unsigned counter per slot, 2 to 8 bits wide,
into the same kind of byte array. Neither array ever grows or shrinks.
"""

import array
import sys
from typing import Iterator

from saltbloom.core.exceptions import ConfigurationError, CounterOverflow, IndexOutOfRange

DEFAULT_COUNTER_BITS = 8
SUPPORTED_COUNTER_BITS = tuple(range(2, 9))


def _zeroed(num_bytes: int) -> array.array:
    return array.array("B", bytes(num_bytes))


class BitArray:
    """A fixed-size sequence of boolean slots, all False at construction."""

    def __init__(self, size: int):
        if size <= 0:
            raise ConfigurationError(f"Bit array size must be positive, got {size}")
        self._size = size
        self._bytes = _zeroed((size + 7) // 8)

    def __len__(self) -> int:
        return self._size

    @property
    def size(self) -> int:
        return self._size

    def _check_index(self, index: int) -> None:
        if not (0 <= index < self._size):
            raise IndexOutOfRange(
                f"Bit index {index} out of range (0 to {self._size - 1})"
            )

    def get(self, index: int) -> bool:
        """Return True if the slot at index is set."""
        self._check_index(index)
        return bool(self._bytes[index >> 3] & (1 << (index & 7)))

    def set(self, index: int) -> bool:
        """
        Set the slot at index.

        Returns:
            True if the slot was previously unset.
        """
        self._check_index(index)
        byte_index = index >> 3
        mask = 1 << (index & 7)
        was_set = self._bytes[byte_index] & mask
        self._bytes[byte_index] |= mask
        return not was_set

    def unset(self, index: int) -> None:
        """Clear the slot at index."""
        self._check_index(index)
        self._bytes[index >> 3] &= ~(1 << (index & 7)) & 0xFF

    def reset(self) -> None:
        """Clear every slot, in place."""
        for i in range(len(self._bytes)):
            self._bytes[i] = 0

    def count(self) -> int:
        """Number of set slots."""
        return sum(bin(byte).count("1") for byte in self._bytes)

    def copy(self) -> "BitArray":
        clone = BitArray.__new__(BitArray)
        clone._size = self._size
        clone._bytes = array.array("B", self._bytes)
        return clone

    def __iter__(self) -> Iterator[bool]:
        for index in range(self._size):
            yield bool(self._bytes[index >> 3] & (1 << (index & 7)))

    def estimate_size(self) -> int:
        return sys.getsizeof(self) + sys.getsizeof(self._bytes)


class CounterArray:
    """
    A fixed-size sequence of unsigned counters packed into a byte array.

    Each counter is counter_bits wide and holds values in [0, max_value].
    Writes outside that range raise CounterOverflow rather than wrapping.
    """

    def __init__(self, size: int, counter_bits: int = DEFAULT_COUNTER_BITS):
        if size <= 0:
            raise ConfigurationError(f"Counter array size must be positive, got {size}")
        if isinstance(counter_bits, bool) or not isinstance(counter_bits, int):
            raise ConfigurationError(
                f"Counter bits must be an integer, got {type(counter_bits).__name__}"
            )
        if counter_bits not in SUPPORTED_COUNTER_BITS:
            raise ConfigurationError(
                f"Counter bits must be one of {list(SUPPORTED_COUNTER_BITS)}"
            )

        self._size = size
        self._counter_bits = counter_bits
        self._max_value = (1 << counter_bits) - 1
        self._bytes = _zeroed((size * counter_bits + 7) // 8)

    def __len__(self) -> int:
        return self._size

    @property
    def size(self) -> int:
        return self._size

    @property
    def counter_bits(self) -> int:
        return self._counter_bits

    @property
    def max_value(self) -> int:
        """Largest value a single counter can hold."""
        return self._max_value

    def _check_index(self, index: int) -> None:
        if not (0 <= index < self._size):
            raise IndexOutOfRange(
                f"Counter index {index} out of range (0 to {self._size - 1})"
            )

    def _span(self, index: int):
        # A counter of up to 8 bits never straddles more than two bytes
        bit_start = index * self._counter_bits
        byte_start = bit_start >> 3
        byte_end = (bit_start + self._counter_bits - 1) >> 3
        return byte_start, byte_end - byte_start + 1, bit_start & 7

    def get(self, index: int) -> int:
        """Return the counter value at index."""
        self._check_index(index)
        byte_start, width, offset = self._span(index)

        combined = 0
        for i in range(width):
            combined |= self._bytes[byte_start + i] << (i * 8)
        return (combined >> offset) & self._max_value

    def set(self, index: int, value: int) -> None:
        """
        Set the counter at index.

        Raises:
            CounterOverflow: If value is outside [0, max_value].
        """
        self._check_index(index)
        if not (0 <= value <= self._max_value):
            raise CounterOverflow(
                f"Counter value {value} out of range (0 to {self._max_value})"
            )
        byte_start, width, offset = self._span(index)

        combined = 0
        for i in range(width):
            combined |= self._bytes[byte_start + i] << (i * 8)

        # Clear the counter's bits, then OR in the new value
        combined &= ~(self._max_value << offset)
        combined |= value << offset

        for i in range(width):
            self._bytes[byte_start + i] = (combined >> (i * 8)) & 0xFF

    def reset(self) -> None:
        """Set every counter to zero, in place."""
        for i in range(len(self._bytes)):
            self._bytes[i] = 0

    def total(self) -> int:
        """Sum of all counters."""
        return sum(self.get(i) for i in range(self._size))

    def maximum(self) -> int:
        """Largest counter value currently stored."""
        return max(self.get(i) for i in range(self._size))

    def copy(self) -> "CounterArray":
        clone = CounterArray.__new__(CounterArray)
        clone._size = self._size
        clone._counter_bits = self._counter_bits
        clone._max_value = self._max_value
        clone._bytes = array.array("B", self._bytes)
        return clone

    def __iter__(self) -> Iterator[int]:
        for index in range(self._size):
            yield self.get(index)

    def estimate_size(self) -> int:
        return sys.getsizeof(self) + sys.getsizeof(self._bytes)
