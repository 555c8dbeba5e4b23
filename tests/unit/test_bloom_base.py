"""
Unit tests for standard Bloom Filter implementation.
"""

import math
import threading
import unittest

from saltbloom.algorithms.bloom.base import BloomFilter
from saltbloom.algorithms.bloom.counting import CountingBloomFilter
from saltbloom.core.config import FilterConfig
from saltbloom.core.exceptions import (
    ConfigurationError,
    IndexOutOfRange,
    UnsupportedAlgorithm,
)


class TestBloomFilter(unittest.TestCase):
    """Test cases for Bloom Filter."""

    def test_init(self):
        """Test initialization with valid and invalid parameters."""
        bf = BloomFilter(bit_array_size=1000, hash_count=4, expected_element_count=100)
        self.assertEqual(bf.bit_array_size, 1000)
        self.assertEqual(bf.hash_count, 4)
        self.assertEqual(bf.expected_element_count, 100)
        self.assertEqual(bf.added_element_count, 0)
        self.assertEqual(bf.algorithm, "md5")
        self.assertEqual(bf.encoding, "utf-8")
        self.assertEqual(bf.variant, "simple")
        self.assertFalse(bf.supports_removal)
        self.assertTrue(bf.is_empty())

        with self.assertRaises(ConfigurationError):
            BloomFilter(0, 4, 100)
        with self.assertRaises(ConfigurationError):
            BloomFilter(1000, 0, 100)
        with self.assertRaises(ConfigurationError):
            BloomFilter(1000, 4, 100, encoding="no-such-codec")
        with self.assertRaises(UnsupportedAlgorithm):
            BloomFilter(1000, 4, 100, algorithm="no-such-digest")

    def test_named_constructors(self):
        """Test the three sizing paths."""
        bf = BloomFilter.from_false_positive_rate(64, 0.05)
        self.assertEqual(bf.hash_count, math.ceil(-math.log2(0.05)))
        self.assertEqual(bf.bit_array_size, math.ceil(bf.hash_count * 64 / math.log(2)))
        self.assertEqual(bf.expected_element_count, 64)

        bf = BloomFilter.from_bits_per_element(9.5, 10, 3)
        self.assertEqual(bf.bit_array_size, 95)
        self.assertEqual(bf.hash_count, 3)

        bf = BloomFilter.from_config(FilterConfig(50, 2, 5), algorithm="sha1")
        self.assertEqual(bf.config, FilterConfig(50, 2, 5))
        self.assertEqual(bf.algorithm, "sha1")

        bf = BloomFilter.create(1000, 4, 100, algorithm="sha1")
        self.assertIsInstance(bf, BloomFilter)
        self.assertEqual(bf.config, FilterConfig(1000, 4, 100))
        self.assertEqual(bf.algorithm, "sha1")
        with self.assertRaises(ConfigurationError):
            BloomFilter.create(0, 4, 100)

    def test_scenario_hello_nihao(self):
        """Test adding two strings to a small rate-sized filter."""
        bf = BloomFilter.from_false_positive_rate(64, 0.05)
        bf.add("hello")
        bf.add("nihao")

        self.assertTrue(bf.contains("hello"))
        self.assertTrue(bf.contains("nihao"))
        self.assertTrue(bf.contains_all(["nihao", "hello"]))
        self.assertEqual(bf.added_element_count, 2)

        # md5-derived slots of "hello" in a 462-slot array
        for index in (191, 421, 321, 339, 316):
            self.assertTrue(bf.get_bit(index))

    def test_no_false_negatives(self):
        """Test that every added element tests positive."""
        bf = BloomFilter.from_false_positive_rate(500, 0.01)
        items = [f"item-{i}" for i in range(500)] + [1, 2.5, (3, "x"), b"\x00raw"]
        bf.add_all(items)
        for item in items:
            self.assertTrue(bf.contains(item), f"Item {item!r} should be present")
            self.assertIn(item, bf)

    def test_add_reports_novelty(self):
        """Test that add() returns True only when a new slot is set."""
        bf = BloomFilter(1000, 3, 10)
        self.assertTrue(bf.add("apple"))
        self.assertFalse(bf.add("apple"))
        # Repeats still count as additions
        self.assertEqual(bf.added_element_count, 2)
        self.assertEqual(len(bf), 2)

    def test_add_all_matches_repeated_add(self):
        """Test that add_all has the same effect as adding one by one."""
        items = ["a", "b", "c", "a", "d"]
        one_by_one = BloomFilter(200, 4, 10)
        for item in items:
            one_by_one.add(item)
        bulk = BloomFilter(200, 4, 10)
        bulk.add_all(items)

        self.assertEqual(
            [bulk.get_bit(i) for i in range(200)],
            [one_by_one.get_bit(i) for i in range(200)],
        )
        self.assertEqual(bulk.added_element_count, one_by_one.added_element_count)

    def test_contains_all_is_and_of_contains(self):
        """Test contains_all against individual contains results."""
        bf = BloomFilter(2000, 4, 50)
        bf.add_all(["x", "y", "z"])
        for group in (["x"], ["x", "y", "z"], ["x", "absent-1"], ["absent-2"], []):
            self.assertEqual(
                bf.contains_all(group), all(bf.contains(e) for e in group), group
            )
        self.assertTrue(bf.contains_all([]))

    def test_false_positive_rate(self):
        """Test that the observed false positive rate is near the model."""
        bf = BloomFilter.from_false_positive_rate(1000, 0.01)
        bf.add_all(f"member-{i}" for i in range(1000))

        false_positives = sum(bf.contains(f"outsider-{i}") for i in range(10000))
        observed = false_positives / 10000
        self.assertLess(observed, 0.03)
        self.assertAlmostEqual(
            bf.current_false_positive_probability(),
            bf.expected_false_positive_probability(),
        )

    def test_probabilities(self):
        """Test expected, current and hypothetical probabilities."""
        bf = BloomFilter.from_false_positive_rate(64, 0.05)
        self.assertEqual(bf.current_false_positive_probability(), 0.0)
        self.assertLessEqual(bf.expected_false_positive_probability(), 0.05)
        self.assertAlmostEqual(bf.expected_false_positive_probability(), 0.5**5, delta=0.001)

        bf.add("one")
        self.assertEqual(
            bf.current_false_positive_probability(), bf.false_positive_probability(1)
        )
        self.assertLess(bf.false_positive_probability(10), bf.false_positive_probability(100))

    def test_clear(self):
        """Test that clear empties the filter but keeps its configuration."""
        bf = BloomFilter(300, 3, 20)
        bf.add_all(["a", "b", "c"])
        self.assertFalse(bf.is_empty())

        bf.clear()
        self.assertTrue(bf.is_empty())
        self.assertEqual(bf.added_element_count, 0)
        self.assertEqual(bf.set_bit_count(), 0)
        self.assertFalse(any(bf.get_bit(i) for i in range(300)))
        self.assertEqual(bf.config, FilterConfig(300, 3, 20))

        # Clearing twice is harmless
        bf.clear()
        self.assertEqual(bf.added_element_count, 0)

    def test_get_bit_bounds(self):
        """Test direct bit access outside the array."""
        bf = BloomFilter(10, 2, 5)
        with self.assertRaises(IndexOutOfRange):
            bf.get_bit(10)
        with self.assertRaises(IndexOutOfRange):
            bf.get_bit(-1)

    def test_element_encoding(self):
        """Test the byte representation of non-bytes elements."""
        bf = BloomFilter(500, 3, 10)
        self.assertEqual(bf.to_bytes("héllo"), "héllo".encode("utf-8"))
        self.assertEqual(bf.to_bytes(123), b"123")
        self.assertEqual(bf.to_bytes(bytearray(b"ab")), b"ab")
        self.assertEqual(bf.to_bytes(memoryview(b"cd")), b"cd")

        bf.add("é")
        self.assertTrue(bf.contains(b"\xc3\xa9"))
        bf.add(42)
        self.assertTrue(bf.contains("42"))

        latin = BloomFilter(500, 3, 10, encoding="latin-1")
        latin.add("é")
        self.assertTrue(latin.contains(b"\xe9"))

        bf.set_encoding("latin-1")
        self.assertEqual(bf.encoding, "latin-1")
        with self.assertRaises(ConfigurationError):
            bf.set_encoding("no-such-codec")

    def test_set_digest_function(self):
        """Test switching the digest algorithm."""
        bf = BloomFilter(500, 3, 10)
        bf.set_digest_function("sha1")
        self.assertEqual(bf.algorithm, "sha1")
        bf.add("value")
        self.assertTrue(bf.contains("value"))

        with self.assertRaises(UnsupportedAlgorithm):
            bf.set_digest_function("no-such-digest")
        self.assertEqual(bf.algorithm, "sha1")

        with self.assertLogs("saltbloom.core.base", level="WARNING"):
            bf.set_digest_function("md5")

    def test_legacy_fold(self):
        """Test filters using the narrower byte folding."""
        bf = BloomFilter(500, 4, 10, fold_bits=4)
        self.assertEqual(bf.fold_bits, 4)
        bf.add_all(["p", "q"])
        self.assertTrue(bf.contains_all(["p", "q"]))

    def test_clone_is_deep_copy(self):
        """Test that clone() does not share state with the source."""
        bf = BloomFilter(400, 3, 20, algorithm="sha256", encoding="latin-1")
        bf.add("shared")
        clone = bf.clone()

        self.assertIsInstance(clone, BloomFilter)
        self.assertEqual(clone.config, bf.config)
        self.assertEqual(clone.algorithm, "sha256")
        self.assertEqual(clone.encoding, "latin-1")
        self.assertEqual(clone.added_element_count, 1)
        self.assertTrue(clone.contains("shared"))

        clone.add("only-in-clone")
        bf.clear()
        self.assertTrue(clone.contains("shared"))
        self.assertEqual(bf.set_bit_count(), 0)

    def test_from_filter_share(self):
        """Test aliasing the source arrays explicitly."""
        bf = BloomFilter(400, 3, 20)
        alias = BloomFilter.from_filter(bf, 400, 3, share=True)
        alias.add("through-alias")
        self.assertTrue(bf.contains("through-alias"))

    def test_from_filter_hash_count(self):
        """Test adopting a different hash count from an existing filter."""
        bf = BloomFilter(400, 3, 20)
        bf.add("kept")
        wider = BloomFilter.from_filter(bf, 400, 5)
        self.assertEqual(wider.hash_count, 5)
        self.assertEqual(wider.expected_element_count, 20)
        self.assertEqual(wider.set_bit_count(), bf.set_bit_count())

    def test_from_filter_invalid(self):
        """Test from_filter argument validation."""
        bf = BloomFilter(400, 3, 20)
        with self.assertRaises(ConfigurationError):
            BloomFilter.from_filter(bf, 401, 3)
        with self.assertRaises(TypeError):
            BloomFilter.from_filter(CountingBloomFilter(400, 3, 20), 400, 3)

    def test_capacity_warning(self):
        """Test the warning logged when more elements arrive than expected."""
        bf = BloomFilter(100, 2, 2)
        bf.add("a")
        bf.add("b")
        with self.assertLogs("saltbloom.core.base", level="WARNING") as logs:
            bf.add("c")
            bf.add("d")
        # Logged once, not on every addition
        self.assertEqual(len(logs.records), 1)

    def test_summary_and_stats(self):
        """Test the human-readable summary and stats dictionary."""
        bf = BloomFilter.from_false_positive_rate(64, 0.05)
        bf.add("hello")

        summary = bf.summary()
        self.assertTrue(summary.startswith("BloomFilter: {"))
        self.assertIn("bit array size : 462", summary)
        self.assertIn("number of hashes : 5", summary)
        self.assertIn("expected number of elements : 64", summary)
        self.assertIn("number of added elements : 1", summary)
        self.assertIn("expected false positive probability", summary)
        self.assertIn("current false positive probability", summary)
        self.assertEqual(str(bf), summary)

        stats = bf.get_stats()
        self.assertEqual(stats["type"], "BloomFilter")
        self.assertEqual(stats["bit_array_size"], 462)
        self.assertEqual(stats["added_element_count"], 1)
        self.assertEqual(stats["set_bits"], bf.set_bit_count())
        # m=462, n=64: round((462 / 64) * ln 2) = 5
        self.assertEqual(stats["optimal_hash_count"], 5)
        self.assertAlmostEqual(stats["fill_ratio"], bf.set_bit_count() / 462)
        self.assertGreater(stats["memory_bytes"], 0)
        self.assertGreater(bf.estimate_size(), 462 // 8)

    def test_thread_safe_mode(self):
        """Test concurrent additions on a locked filter."""
        bf = BloomFilter.from_false_positive_rate(2000, 0.01, thread_safe=True)
        self.assertTrue(bf.thread_safe)

        def worker(offset):
            for i in range(250):
                bf.add(f"t{offset}-{i}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(bf.added_element_count, 1000)
        for n in range(4):
            self.assertTrue(bf.contains_all(f"t{n}-{i}" for i in range(250)))


if __name__ == "__main__":
    unittest.main()
