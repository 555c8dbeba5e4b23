"""
Basic Bloom Filter Demo for SaltBloom.

This example demonstrates how to use the standard Bloom Filter for
space-efficient set membership testing. It highlights its probabilistic
nature (false positives) and its guarantee of no false negatives.
"""

from saltbloom import BloomFilter


def demonstrate_basic_usage():
    """Demonstrate Bloom Filter sizing, adding, and checking."""
    print("\n=== Basic Bloom Filter Demo ===")

    # Expecting 64 elements with a 5% false positive rate
    bf = BloomFilter.from_false_positive_rate(64, 0.05)

    print("Bloom Filter parameters:")
    print(f"  Expected elements: {bf.expected_element_count}")
    print(f"  Bit array size: {bf.bit_array_size} bits")
    print(f"  Number of hashes: {bf.hash_count}")
    print(f"  Estimated memory usage: {bf.estimate_size():,} bytes")

    for word in ["hello", "nihao"]:
        changed = bf.add(word)
        print(f"  Added '{word}' (new bits set: {changed})")

    print("\nChecking membership:")
    print("  (Note: 'False' means DEFINITELY NOT present)")
    print("  (Note: 'True' means POSSIBLY present - could be a false positive)")
    for word in ["hello", "nihao", "nihaoma"]:
        print(f"  '{word}' in filter: {bf.contains(word)}")
    print(f"  contains_all(['nihao', 'hello']): {bf.contains_all(['nihao', 'hello'])}")

    print()
    print(bf)


def demonstrate_false_positive_rate():
    """Compare the observed false positive rate with the model."""
    print("\n=== False Positive Rate ===")

    bf = BloomFilter.from_false_positive_rate(1000, 0.01)
    bf.add_all(f"member-{i}" for i in range(1000))

    trials = 20000
    false_positives = sum(bf.contains(f"outsider-{i}") for i in range(trials))

    print(f"  Target rate:   {0.01:.4%}")
    print(f"  Model rate:    {bf.current_false_positive_probability():.4%}")
    print(f"  Observed rate: {false_positives / trials:.4%}")
    print(f"  Rate at 2000 elements: {bf.false_positive_probability(2000):.4%}")


if __name__ == "__main__":
    demonstrate_basic_usage()
    demonstrate_false_positive_rate()
