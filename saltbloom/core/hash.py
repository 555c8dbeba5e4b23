"""
Hash derivation for SaltBloom.

This module turns an arbitrary byte sequence into k pseudo-independent 32-bit
hash values by repeatedly digesting the data behind a one-byte salt. The
digest is used only to spread indices over the bit array; it is not a
security primitive.
"""

import hashlib
from typing import List

from saltbloom.core.exceptions import ConfigurationError, UnsupportedAlgorithm

DEFAULT_ALGORITHM = "md5"
DEFAULT_FOLD_BITS = 8
SUPPORTED_FOLD_BITS = (4, 8)

_GROUP_SIZE = 4  # bytes folded into each hash value
_UINT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _new_engine(algorithm: str) -> "hashlib._Hash":
    try:
        engine = hashlib.new(algorithm, usedforsecurity=False)
    except (ValueError, TypeError) as exc:
        raise UnsupportedAlgorithm(
            f"Unsupported digest algorithm: {algorithm!r}"
        ) from exc

    # Variable-length digests (shake_*) report a digest size of 0
    if engine.digest_size < _GROUP_SIZE:
        raise UnsupportedAlgorithm(
            f"Digest algorithm {algorithm!r} must produce a fixed digest of at "
            f"least {_GROUP_SIZE} bytes"
        )
    return engine


def fold_group(group: bytes, fold_bits: int = DEFAULT_FOLD_BITS) -> int:
    """
    Fold a group of bytes into a signed 32-bit integer.

    Each byte is shift-accumulated into the running value. With fold_bits=8
    the four bytes are laid out big-endian; with fold_bits=4 neighbouring
    bytes overlap, which is the narrower legacy folding.

    Args:
        group: The bytes to fold (normally 4).
        fold_bits: Shift applied before each byte is OR-ed in.

    Returns:
        The folded value as a signed 32-bit integer.
    """
    h = 0
    for byte in group:
        h = ((h << fold_bits) | (byte & 0xFF)) & _UINT32_MASK
    if h & _INT32_SIGN:
        h -= 1 << 32
    return h


def slot_index(hash_value: int, size: int) -> int:
    """
    Map a raw hash value to a slot in an array of the given size.

    Uses abs(h) % size. Python integers do not overflow, so abs() of the
    minimum signed 32-bit value is the positive 2**31 and the result is always
    in range.
    """
    return abs(hash_value) % size


class HashDeriver:
    """
    Derives k hash values from a byte sequence using a salted digest.

    For round s = 0, 1, 2, ... the digest of (s mod 256) followed by the data is
    computed and split into 4-byte groups; each group is folded into one hash
    value until k values have been produced. Excess groups from the last round
    are discarded.

    Each round works on a private copy of a prototype engine, so a single
    deriver can be used from several threads without interleaving salt and
    data between calls.

    Example:
        deriver = HashDeriver(hash_count=5)
        hashes = deriver.derive(b"hello")   # five signed 32-bit ints
        slots = deriver.indices(b"hello", 100)
    """

    def __init__(
        self,
        hash_count: int,
        algorithm: str = DEFAULT_ALGORITHM,
        fold_bits: int = DEFAULT_FOLD_BITS,
    ):
        """
        Initialize a new hash deriver.

        Args:
            hash_count: Number of hash values to produce per call (k).
            algorithm: Name of a fixed-length hashlib digest algorithm.
            fold_bits: Shift width used when folding bytes (4 or 8).

        Raises:
            ConfigurationError: If hash_count is not positive or fold_bits is
                                not supported.
            UnsupportedAlgorithm: If the digest algorithm is unknown or has a
                                  variable-length output.
        """
        if isinstance(hash_count, bool) or not isinstance(hash_count, int):
            raise ConfigurationError(
                f"Hash count must be an integer, got {type(hash_count).__name__}"
            )
        if hash_count <= 0:
            raise ConfigurationError(f"Hash count must be positive, got {hash_count}")
        if fold_bits not in SUPPORTED_FOLD_BITS:
            raise ConfigurationError(
                f"Fold bits must be one of {SUPPORTED_FOLD_BITS}, got {fold_bits}"
            )

        self._prototype = _new_engine(algorithm)
        self._algorithm = algorithm
        self._hash_count = hash_count
        self._fold_bits = fold_bits
        self._groups_per_round = self._prototype.digest_size // _GROUP_SIZE

    @property
    def algorithm(self) -> str:
        """Name of the digest algorithm."""
        return self._algorithm

    @property
    def hash_count(self) -> int:
        """Number of hash values produced per call."""
        return self._hash_count

    @property
    def fold_bits(self) -> int:
        """Shift width used when folding digest bytes."""
        return self._fold_bits

    def derive(self, data: bytes) -> List[int]:
        """
        Derive the hash values for a byte sequence.

        Args:
            data: The bytes to hash.

        Returns:
            A list of exactly hash_count signed 32-bit integers.
        """
        result: List[int] = []
        salt = 0
        while len(result) < self._hash_count:
            engine = self._prototype.copy()
            engine.update(bytes((salt % 256,)))
            engine.update(data)
            digest = engine.digest()
            salt += 1

            needed = self._hash_count - len(result)
            for i in range(min(self._groups_per_round, needed)):
                group = digest[i * _GROUP_SIZE : (i + 1) * _GROUP_SIZE]
                result.append(fold_group(group, self._fold_bits))

        return result

    def indices(self, data: bytes, size: int) -> List[int]:
        """
        Derive slot indices for a byte sequence.

        Args:
            data: The bytes to hash.
            size: Number of slots in the target array.

        Returns:
            A list of hash_count indices, each in [0, size).
        """
        return [slot_index(h, size) for h in self.derive(data)]

    def __repr__(self) -> str:
        return (
            f"HashDeriver(hash_count={self._hash_count}, "
            f"algorithm={self._algorithm!r}, fold_bits={self._fold_bits})"
        )
