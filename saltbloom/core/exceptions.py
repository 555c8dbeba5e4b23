"""
Exception types raised by SaltBloom.

Each error also derives from the closest built-in exception so callers that
already catch ``ValueError``, ``IndexError`` or ``OverflowError`` keep working.
"""


class SaltBloomError(Exception):
    """Base class for all SaltBloom errors."""


class ConfigurationError(SaltBloomError, ValueError):
    """Raised when a filter is built with invalid parameters."""


class UnsupportedAlgorithm(ConfigurationError):
    """Raised when the requested digest algorithm cannot be used for hashing."""


class IndexOutOfRange(SaltBloomError, IndexError):
    """Raised on direct slot access outside ``[0, bit_array_size)``."""


class CounterOverflow(SaltBloomError, OverflowError):
    """Raised when a counter would exceed its maximum under the ``raise`` policy."""
