"""
Counting Bloom Filter Demo for SaltBloom.

This example demonstrates the Counting Bloom Filter, which supports removing
elements by keeping a small counter per slot, and shows how removal can
produce false negatives for colliding elements.
"""

import logging

from saltbloom import CountingBloomFilter


def demonstrate_counting():
    """Demonstrate counts and removals."""
    print("\n=== Counting Bloom Filter Demo ===")

    cbf = CountingBloomFilter.from_false_positive_rate(64, 0.05)
    cbf.add_all(["hello", "hello", "nihao", "atguigu"])

    print(f"  count('hello'): {cbf.count('hello')}")
    print(f"  'atguigu' in filter: {cbf.contains('atguigu')}")
    print(f"  remove('atguigu'): {cbf.remove('atguigu')}")
    print(f"  'atguigu' in filter: {cbf.contains('atguigu')}")
    print(f"  remove('atguigu') again: {cbf.remove('atguigu')}")

    print("\nDemonstrating counter behavior with multiple insertions/removals:")
    for _ in range(3):
        cbf.add("test")
    for attempt in range(1, 4):
        cbf.remove("test")
        print(
            f"  After removal {attempt}: 'test' in filter: {cbf.contains('test')}, "
            f"count = {cbf.count('test')}"
        )

    print()
    print(cbf)


def demonstrate_false_negative():
    """Show how removing a false positive hides a real member."""
    print("\n=== Removal Hazard ===")

    # A deliberately tiny filter so that every element collides
    cbf = CountingBloomFilter(bit_array_size=1, hash_count=1, expected_element_count=1)
    cbf.add("real")
    print(f"  'ghost' in filter (never added): {cbf.contains('ghost')}")
    print(f"  remove('ghost'): {cbf.remove('ghost')}")
    print(f"  'real' in filter after removing 'ghost': {cbf.contains('real')}")


def demonstrate_overflow():
    """Show the two counter overflow policies."""
    print("\n=== Counter Overflow ===")

    saturating = CountingBloomFilter(8, 1, 4, counter_bits=2)
    for _ in range(5):
        saturating.add("hot")
    print(f"  saturate: count('hot') = {saturating.count('hot')} (max {saturating.counter_max})")

    strict = CountingBloomFilter(8, 1, 4, counter_bits=2, overflow="raise")
    try:
        for _ in range(5):
            strict.add("hot")
    except OverflowError as exc:
        print(f"  raise: {exc}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    demonstrate_counting()
    demonstrate_false_negative()
    demonstrate_overflow()
