"""
Bloom Filter implementations for SaltBloom.

This module provides Bloom Filter implementations for efficient set membership testing
with bounded memory usage.

This includes:
- BloomFilter: Standard Bloom filter for membership testing
- CountingBloomFilter: Bloom filter variant that supports item removal
"""

from saltbloom.algorithms.bloom.base import BloomFilter
from saltbloom.algorithms.bloom.counting import CountingBloomFilter

__all__ = [
    "BloomFilter",
    "CountingBloomFilter",
]
