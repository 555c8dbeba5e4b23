"""
Base classes and interfaces for SaltBloom membership filters.

MembershipFilter is the capability shared by every filter variant: adding,
membership queries, clearing, cloning and false positive reporting. The
Counting variant additionally implements RemovableFilter. Variants are
siblings; neither extends the other.
"""

import abc
import codecs
import logging
import sys
import threading
from contextlib import nullcontext
from typing import Any, Dict, Generic, Iterable, List, Type, TypeVar, Union

from saltbloom.core import probability
from saltbloom.core.config import FilterConfig
from saltbloom.core.exceptions import ConfigurationError
from saltbloom.core.hash import DEFAULT_ALGORITHM, DEFAULT_FOLD_BITS, HashDeriver
from saltbloom.core.storage import BitArray

logger = logging.getLogger(__name__)

T = TypeVar("T")  # Type for the elements being stored

DEFAULT_ENCODING = "utf-8"

BytesLike = Union[bytes, bytearray, memoryview]

F = TypeVar("F", bound="MembershipFilter")


def _check_encoding(encoding: str) -> str:
    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        raise ConfigurationError(f"Unknown character encoding: {encoding!r}") from exc
    return encoding


class MembershipFilter(Generic[T], abc.ABC):
    """
    Abstract base class for Bloom filter variants.

    Every public operation derives the element's k slot indices once and then
    applies them to the slot arrays. The probability model is only consulted
    for reporting.

    A filter is not safe for concurrent use unless it was built with
    thread_safe=True, in which case every public operation runs under a
    per-instance re-entrant lock.
    """

    #: Variant tag, "simple" or "counting"
    variant: str = ""
    #: True when the variant also implements RemovableFilter
    supports_removal: bool = False

    def __init__(
        self,
        bit_array_size: int,
        hash_count: int,
        expected_element_count: int,
        algorithm: str = DEFAULT_ALGORITHM,
        fold_bits: int = DEFAULT_FOLD_BITS,
        encoding: str = DEFAULT_ENCODING,
        thread_safe: bool = False,
    ):
        """
        Initialize a new filter.

        Args:
            bit_array_size: Number of slots in the bit array (m).
            hash_count: Number of hash values derived per element (k).
            expected_element_count: Number of elements the filter is sized for (n).
            algorithm: hashlib digest algorithm used to derive hash values.
            fold_bits: Shift width used to fold digest bytes (8, or legacy 4).
            encoding: Character encoding for elements that are not bytes.
            thread_safe: Guard every operation with a per-instance lock.

        Raises:
            ConfigurationError: If any size parameter is not a positive integer,
                                or the encoding or fold width is invalid.
            UnsupportedAlgorithm: If the digest algorithm cannot be used.
        """
        self._config = FilterConfig(bit_array_size, hash_count, expected_element_count)
        self._deriver = HashDeriver(hash_count, algorithm, fold_bits)
        self._encoding = _check_encoding(encoding)
        self._bits = BitArray(bit_array_size)
        self._added_count = 0
        self._capacity_warned = False

        self._thread_safe = thread_safe
        self._lock = threading.RLock() if thread_safe else nullcontext()

        logger.debug(
            "%s created: bit_array_size=%d, hash_count=%d, "
            "expected_element_count=%d, algorithm=%s",
            self.__class__.__name__,
            bit_array_size,
            hash_count,
            expected_element_count,
            algorithm,
        )

    # --- Named constructors ---

    @classmethod
    def create(
        cls: Type[F],
        bit_array_size: int,
        hash_count: int,
        expected_element_count: int,
        **options: Any,
    ) -> F:
        """
        Create an empty filter from explicit sizes.

        Example:
            bloom = BloomFilter.create(1000, 4, 100, algorithm="sha1")
        """
        return cls.from_config(
            FilterConfig(bit_array_size, hash_count, expected_element_count),
            **options,
        )

    @classmethod
    def from_config(cls: Type[F], config: FilterConfig, **options: Any) -> F:
        """Create an empty filter from a FilterConfig."""
        return cls(
            config.bit_array_size,
            config.hash_count,
            config.expected_element_count,
            **options,
        )

    @classmethod
    def from_bits_per_element(
        cls: Type[F],
        bits_per_element: float,
        expected_element_count: int,
        hash_count: int,
        **options: Any,
    ) -> F:
        """
        Create an empty filter spending a fixed number of bits per element.

        The bit array size is ceil(bits_per_element * expected_element_count).
        """
        config = FilterConfig.from_bits_per_element(
            bits_per_element, expected_element_count, hash_count
        )
        return cls.from_config(config, **options)

    @classmethod
    def from_false_positive_rate(
        cls: Type[F],
        expected_element_count: int,
        false_positive_rate: float,
        **options: Any,
    ) -> F:
        """
        Create an empty filter sized for a target false positive rate.

        Example:
            bloom = BloomFilter.from_false_positive_rate(1000, 0.01)
        """
        config = FilterConfig.from_false_positive_rate(
            expected_element_count, false_positive_rate
        )
        logger.debug(
            "Sized %s for n=%d, p=%g: m=%d, k=%d",
            cls.__name__,
            expected_element_count,
            false_positive_rate,
            config.bit_array_size,
            config.hash_count,
        )
        return cls.from_config(config, **options)

    @classmethod
    def from_filter(
        cls: Type[F],
        source: "MembershipFilter[T]",
        bit_array_size: int,
        hash_count: int,
        share: bool = False,
    ) -> F:
        """
        Create a filter from the state of an existing one.

        The new filter takes the given size and hash count and every other
        setting (expected element count, digest algorithm, fold width,
        encoding, locking) from the source. By default the source's arrays are
        deep-copied; with share=True they are aliased, so mutations through
        either filter are visible through both (the lock is shared too).

        Args:
            source: Filter of the same variant to copy state from.
            bit_array_size: Size of the new filter. The arrays are co-indexed by
                            slot, so this must equal the source size; it is
                            accepted for parity with the (size, hash count,
                            source) constructor shape.
            hash_count: Hash count of the new filter; may differ from the source.
            share: Alias the source arrays instead of copying them.

        Raises:
            TypeError: If source is not of the same variant.
            ConfigurationError: If bit_array_size differs from the source.
        """
        if not isinstance(source, cls):
            raise TypeError(
                f"Cannot build {cls.__name__} from {source.__class__.__name__}"
            )
        if bit_array_size != source.bit_array_size:
            raise ConfigurationError(
                f"Bit array size {bit_array_size} does not match the source "
                f"filter size {source.bit_array_size}"
            )

        with source._lock:
            result = cls(
                bit_array_size,
                hash_count,
                source.expected_element_count,
                **source._options(),
            )
            result._adopt_state(source, share)
            if share:
                result._lock = source._lock
        return result

    def clone(self: F) -> F:
        """Return an independent deep copy of this filter."""
        return self.from_filter(self, self.bit_array_size, self.hash_count)

    def _options(self) -> Dict[str, Any]:
        """Keyword arguments that reproduce this filter's settings."""
        return {
            "algorithm": self._deriver.algorithm,
            "fold_bits": self._deriver.fold_bits,
            "encoding": self._encoding,
            "thread_safe": self._thread_safe,
        }

    def _adopt_state(self, source: "MembershipFilter[T]", share: bool) -> None:
        self._bits = source._bits if share else source._bits.copy()
        self._added_count = source._added_count

    # --- Variant hooks ---

    @abc.abstractmethod
    def _add_indices(self, indices: List[int]) -> bool:
        """
        Record an element whose slot indices are given.

        Returns:
            The value add() reports for this element.
        """

    def _contains_indices(self, indices: List[int]) -> bool:
        for index in indices:
            if not self._bits.get(index):
                return False
        return True

    def _reset_slots(self) -> None:
        self._bits.reset()

    # --- Element handling ---

    def to_bytes(self, element: Union[T, BytesLike]) -> bytes:
        """
        Canonical byte representation of an element.

        Bytes-like elements are used as-is; anything else is rendered with
        str() and encoded with the filter's encoding.
        """
        if isinstance(element, bytes):
            return element
        if isinstance(element, (bytearray, memoryview)):
            return bytes(element)
        return str(element).encode(self._encoding)

    def _indices(self, data: bytes) -> List[int]:
        return self._deriver.indices(data, self._config.bit_array_size)

    # --- Public operations ---

    def add(self, element: Union[T, BytesLike]) -> bool:
        """
        Add an element to the filter.

        Args:
            element: The element, or its raw bytes.

        Returns:
            Variant specific; see the concrete class.
        """
        data = self.to_bytes(element)
        with self._lock:
            result = self._add_indices(self._indices(data))
            self._added_count += 1
            self._check_capacity()
        return result

    def add_all(self, elements: Iterable[Union[T, BytesLike]]) -> None:
        """Add every element of an iterable, in order."""
        for element in elements:
            self.add(element)

    def contains(self, element: Union[T, BytesLike]) -> bool:
        """
        Test if an element might have been added.

        Returns:
            True if the element might be in the set, False if it definitely
            is not.
        """
        data = self.to_bytes(element)
        with self._lock:
            return self._contains_indices(self._indices(data))

    def contains_all(self, elements: Iterable[Union[T, BytesLike]]) -> bool:
        """
        Test if every element of an iterable might have been added.

        Stops at the first element that is definitely absent. An empty
        iterable returns True.
        """
        return all(self.contains(element) for element in elements)

    def __contains__(self, element: object) -> bool:
        return self.contains(element)  # type: ignore[arg-type]

    def clear(self) -> None:
        """
        Reset the filter to its empty state.

        All slots are cleared and the added element count returns to zero.
        The configuration is unchanged.
        """
        with self._lock:
            self._reset_slots()
            self._added_count = 0
            self._capacity_warned = False
        logger.debug("%s cleared", self.__class__.__name__)

    def get_bit(self, index: int) -> bool:
        """
        Read a single slot of the bit array.

        Raises:
            IndexOutOfRange: If index is outside [0, bit_array_size).
        """
        with self._lock:
            return self._bits.get(index)

    def _check_capacity(self) -> None:
        if (
            not self._capacity_warned
            and self._added_count > self._config.expected_element_count
        ):
            self._capacity_warned = True
            logger.warning(
                "%s has received more elements (%d) than it was sized for (%d); "
                "false positive rate is now %.4f",
                self.__class__.__name__,
                self._added_count,
                self._config.expected_element_count,
                self.current_false_positive_probability(),
            )

    # --- Configuration ---

    def set_digest_function(self, algorithm: str = DEFAULT_ALGORITHM) -> None:
        """
        Switch the digest algorithm used to derive hash values.

        Elements added before the switch hash to different slots afterwards,
        so this should only be called on an empty filter.

        Raises:
            UnsupportedAlgorithm: If the algorithm cannot be used. The current
                                  algorithm stays in place.
        """
        deriver = HashDeriver(
            self._config.hash_count, algorithm, self._deriver.fold_bits
        )
        with self._lock:
            if self._added_count:
                logger.warning(
                    "Changing digest algorithm of a non-empty %s; existing "
                    "elements will no longer be found",
                    self.__class__.__name__,
                )
            self._deriver = deriver

    def set_encoding(self, encoding: str = DEFAULT_ENCODING) -> None:
        """
        Switch the character encoding used for non-bytes elements.

        Raises:
            ConfigurationError: If the encoding is unknown.
        """
        self._encoding = _check_encoding(encoding)

    @property
    def config(self) -> FilterConfig:
        return self._config

    @property
    def bit_array_size(self) -> int:
        """Number of slots in the bit array (m)."""
        return self._config.bit_array_size

    @property
    def hash_count(self) -> int:
        """Number of hash values derived per element (k)."""
        return self._config.hash_count

    @property
    def expected_element_count(self) -> int:
        """Number of elements the filter was sized for (n)."""
        return self._config.expected_element_count

    @property
    def added_element_count(self) -> int:
        """Number of add() calls since construction or the last clear()."""
        return self._added_count

    @property
    def algorithm(self) -> str:
        return self._deriver.algorithm

    @property
    def fold_bits(self) -> int:
        return self._deriver.fold_bits

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def thread_safe(self) -> bool:
        return self._thread_safe

    def __len__(self) -> int:
        return self._added_count

    # --- Probability reporting ---

    def false_positive_probability(self, element_count: int) -> float:
        """False positive probability after element_count additions."""
        return probability.false_positive_probability(
            self._config.bit_array_size, self._config.hash_count, element_count
        )

    def expected_false_positive_probability(self) -> float:
        """
        False positive probability once the expected number of elements is added.

        If fewer elements have been added the true probability is lower.
        """
        return self.false_positive_probability(self._config.expected_element_count)

    def current_false_positive_probability(self) -> float:
        """False positive probability given the elements added so far."""
        return self.false_positive_probability(self._added_count)

    # --- Introspection ---

    def set_bit_count(self) -> int:
        """Number of set slots in the bit array."""
        with self._lock:
            return self._bits.count()

    def is_empty(self) -> bool:
        """True if no slot is set."""
        return self.set_bit_count() == 0

    def estimate_size(self) -> int:
        """
        Estimate the memory usage of this filter in bytes.

        Returns:
            Estimated memory usage in bytes.
        """
        size = sys.getsizeof(self)
        if hasattr(self, "__dict__"):
            size += sys.getsizeof(self.__dict__)
        size += self._bits.estimate_size()
        return size

    def get_stats(self) -> Dict[str, Any]:
        """
        Get detailed statistics about the current state of the filter.

        Returns:
            A dictionary with configuration, fill and probability figures.
        """
        set_bits = self.set_bit_count()
        m = self._config.bit_array_size
        stats: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "variant": self.variant,
            "bit_array_size": m,
            "hash_count": self._config.hash_count,
            "expected_element_count": self._config.expected_element_count,
            "added_element_count": self._added_count,
            "algorithm": self._deriver.algorithm,
            "set_bits": set_bits,
            "fill_ratio": set_bits / m,
            "estimated_distinct_elements": probability.estimate_element_count(
                m, self._config.hash_count, set_bits
            ),
            "optimal_hash_count": probability.optimal_hash_count(
                m, self._config.expected_element_count
            ),
            "expected_fpp": self.expected_false_positive_probability(),
            "current_fpp": self.current_false_positive_probability(),
            "memory_bytes": self.estimate_size(),
        }
        return stats

    def summary(self) -> str:
        """Human-readable summary of configuration, counts and probabilities."""
        return "\n".join(
            [
                f"{self.__class__.__name__}: {{",
                f"  bit array size : {self._config.bit_array_size}",
                f"  number of hashes : {self._config.hash_count}",
                f"  expected number of elements : {self._config.expected_element_count}",
                f"  number of added elements : {self._added_count}",
                "  expected false positive probability : "
                f"{self.expected_false_positive_probability():.6g}",
                "  current false positive probability : "
                f"{self.current_false_positive_probability():.6g}",
                "}",
            ]
        )

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(bit_array_size={self._config.bit_array_size}, "
            f"hash_count={self._config.hash_count}, "
            f"expected_element_count={self._config.expected_element_count})"
        )


class RemovableFilter(Generic[T], abc.ABC):
    """
    Extended capability for filters that support logical removal.

    Removal can introduce false negatives for other elements that share slots
    with the removed one.
    """

    @abc.abstractmethod
    def count(self, element: Union[T, BytesLike]) -> int:
        """Estimate how many times an element was added."""

    @abc.abstractmethod
    def get_count(self, index: int) -> int:
        """Read a single counter."""

    @abc.abstractmethod
    def remove(self, element: Union[T, BytesLike]) -> bool:
        """Logically remove an element; False if it was not present."""
