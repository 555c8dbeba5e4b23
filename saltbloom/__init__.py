"""
SaltBloom - Salted-digest Bloom filters

SaltBloom is a Python library of Bloom filters for probabilistic set membership
in fixed memory, including a counting variant that supports removal.
"""

__version__ = "0.1.0"

# Import main classes to make them available at the top level
from saltbloom.algorithms.bloom import BloomFilter, CountingBloomFilter
from saltbloom.core.base import MembershipFilter, RemovableFilter
from saltbloom.core.config import FilterConfig
from saltbloom.core.exceptions import (
    ConfigurationError,
    CounterOverflow,
    IndexOutOfRange,
    SaltBloomError,
    UnsupportedAlgorithm,
)

__all__ = [
    # Core interfaces
    "MembershipFilter",
    "RemovableFilter",
    "FilterConfig",
    # Filter implementations
    "BloomFilter",
    "CountingBloomFilter",
    # Errors
    "SaltBloomError",
    "ConfigurationError",
    "UnsupportedAlgorithm",
    "IndexOutOfRange",
    "CounterOverflow",
]
