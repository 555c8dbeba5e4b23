"""
Algorithm implementations for SaltBloom.
"""

from saltbloom.algorithms.bloom import BloomFilter, CountingBloomFilter

__all__ = [
    "BloomFilter",
    "CountingBloomFilter",
]
