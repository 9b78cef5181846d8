"""
Unit tests for the document window-hash filter and filter-accelerated matching.
"""

import json
import logging
import random
import unittest
from unittest import mock

from naive_match import naive_substring_match

from rk_sift import build_filter, exact_match, filtered_match
from rk_sift.algorithms.bloom.base import BloomFilter
from rk_sift.algorithms.document import (
    DocumentFilter,
    rk_create_doc_bloom,
    rk_substring_match_using_bloom,
)
from rk_sift.algorithms.rolling import rkhash_init
from rk_sift.core.base import MembershipFilter


class AlwaysPresentFilter(MembershipFilter):
    """Filter with a 100% false positive rate."""

    def _insert(self, value):
        pass

    def contains(self, value):
        return True

    def merge(self, other):
        return self

    def to_dict(self):
        return self._base_dict()

    @classmethod
    def from_dict(cls, data):
        return cls()


class TestDocumentFilter(unittest.TestCase):
    """Test cases for building and querying document filters."""

    def test_build_indexes_every_window(self):
        doc = b"abcabc"
        doc_filter = rk_create_doc_bloom(doc, 3)

        self.assertIsInstance(doc_filter, DocumentFilter)
        self.assertEqual(doc_filter.window_length, 3)
        self.assertEqual(doc_filter.document_length, 6)
        self.assertEqual(doc_filter.items_processed, 4)
        self.assertEqual(doc_filter.expected_items, 4)
        for i in range(4):
            window = doc[i : i + 3]
            self.assertTrue(doc_filter.might_contain(window))
            self.assertTrue(doc_filter.contains_hash(rkhash_init(window).value))

    def test_absent_pattern(self):
        """The hash of 'xyz' is not among the windows of 'abcabc'."""
        doc_filter = rk_create_doc_bloom(
            b"abcabc", 3, capacity=1000, false_positive_rate=0.001
        )
        self.assertFalse(doc_filter.might_contain(b"xyz"))

    def test_no_false_negatives(self):
        """Every pattern that occurs in the document is reported present."""
        rng = random.Random(17)
        for _ in range(100):
            doc = bytes(rng.randrange(256) for _ in range(rng.randrange(1, 400)))
            m = rng.randrange(1, min(len(doc), 12) + 1)
            doc_filter = rk_create_doc_bloom(doc, m)
            for i in range(len(doc) - m + 1):
                self.assertTrue(doc_filter.might_contain(doc[i : i + m]))

    def test_short_document_gives_empty_filter(self):
        doc_filter = rk_create_doc_bloom(b"ab", 3)
        self.assertTrue(doc_filter.is_empty())
        self.assertEqual(doc_filter.items_processed, 0)
        self.assertFalse(doc_filter.might_contain(b"abc"))
        self.assertFalse(doc_filter.might_contain(b"aba"))

        empty_doc = rk_create_doc_bloom(b"", 1)
        self.assertFalse(empty_doc.might_contain(b"a"))

    def test_explicit_capacity(self):
        doc_filter = rk_create_doc_bloom(b"abcdef", 2, capacity=500, seed=7)
        self.assertEqual(doc_filter.expected_items, 500)
        self.assertEqual(doc_filter.seed, 7)

    def test_invalid_parameters(self):
        with self.assertRaises(ValueError):
            rk_create_doc_bloom(b"abc", 0)
        with self.assertRaises(ValueError):
            rk_create_doc_bloom(b"abc", 2, capacity=0)
        with self.assertRaises(ValueError):
            rk_create_doc_bloom(b"abc", 2, false_positive_rate=1.0)
        with self.assertRaises(TypeError):
            rk_create_doc_bloom(["a", "b"], 1)

    def test_window_length_mismatch_rejected(self):
        doc_filter = rk_create_doc_bloom(b"abcabc", 3)
        with self.assertRaises(ValueError) as ctx:
            doc_filter.might_contain(b"ab")
        self.assertIn("window length 3", str(ctx.exception))

    def test_serialization_keeps_window_length(self):
        doc_filter = rk_create_doc_bloom(b"the quick brown fox", 4, seed=3)
        data = doc_filter.to_dict()
        self.assertEqual(data["type"], "DocumentFilter")
        self.assertEqual(data["window_length"], 4)
        self.assertEqual(data["document_length"], 19)

        restored = DocumentFilter.deserialize(json.dumps(data))
        self.assertIsInstance(restored, DocumentFilter)
        self.assertEqual(restored.window_length, 4)
        self.assertEqual(restored.document_length, 19)
        self.assertEqual(restored._bytes.tobytes(), doc_filter._bytes.tobytes())
        self.assertTrue(restored.might_contain(b"quic"))

    def test_merge(self):
        first = rk_create_doc_bloom(b"abcd", 2, capacity=100)
        second = rk_create_doc_bloom(b"wxyz", 2, capacity=100)
        merged = first.merge(second)

        self.assertIsInstance(merged, DocumentFilter)
        self.assertEqual(merged.window_length, 2)
        self.assertEqual(merged.document_length, 8)
        for window in (b"ab", b"bc", b"cd", b"wx", b"xy", b"yz"):
            self.assertTrue(merged.might_contain(window))

        with self.assertRaises(ValueError):
            first.merge(rk_create_doc_bloom(b"abcd", 3, capacity=100))
        with self.assertRaises(TypeError):
            first.merge(BloomFilter(expected_items=100))

    def test_clear(self):
        doc_filter = rk_create_doc_bloom(b"abcabc", 3)
        doc_filter.clear()
        self.assertTrue(doc_filter.is_empty())
        self.assertEqual(doc_filter.document_length, 0)
        self.assertEqual(doc_filter.window_length, 3)

    def test_get_stats(self):
        doc_filter = rk_create_doc_bloom(b"abcabc", 3)
        stats = doc_filter.get_stats()
        self.assertEqual(stats["type"], "DocumentFilter")
        self.assertEqual(stats["window_length"], 3)
        self.assertEqual(stats["document_length"], 6)
        self.assertEqual(stats["windows"], 4)
        self.assertEqual(stats["items_processed"], 4)

    def test_direct_construction_validates_window_length(self):
        with self.assertRaises(ValueError):
            DocumentFilter(window_length=0)


class TestFilteredMatch(unittest.TestCase):
    """Test cases for rk_substring_match_using_bloom."""

    def test_present_pattern(self):
        doc = b"ababab"
        doc_filter = rk_create_doc_bloom(doc, 2)
        self.assertEqual(rk_substring_match_using_bloom(b"ab", doc, doc_filter), (3, 0))

    def test_absent_pattern_skips_scan(self):
        """A negative filter answer returns without running the exact matcher."""
        doc = b"abcabc"
        doc_filter = rk_create_doc_bloom(
            doc, 3, capacity=1000, false_positive_rate=0.001
        )
        with mock.patch("rk_sift.algorithms.document.rk_substring_match") as exact:
            result = rk_substring_match_using_bloom(b"xyz", doc, doc_filter)
        self.assertEqual(result, (0, None))
        exact.assert_not_called()

    def test_present_pattern_delegates_to_exact_matcher(self):
        doc = b"abcabc"
        doc_filter = rk_create_doc_bloom(doc, 3)
        with mock.patch(
            "rk_sift.algorithms.document.rk_substring_match",
            wraps=exact_match,
        ) as exact:
            result = rk_substring_match_using_bloom(b"bca", doc, doc_filter)
        self.assertEqual(result, (1, 1))
        exact.assert_called_once()

    def test_false_positive_falls_through_to_exact_match(self):
        """A filter that always answers present still yields exact results."""
        always = AlwaysPresentFilter()
        self.assertEqual(
            rk_substring_match_using_bloom(b"xyz", b"abcabc", always), (0, None)
        )
        self.assertEqual(
            rk_substring_match_using_bloom(b"ca", b"abcabc", always), (1, 2)
        )
        for pattern in (b"a", b"ab", b"bc", b"abc", b"cab", b"abcabc", b"abcabcx"):
            self.assertEqual(
                rk_substring_match_using_bloom(pattern, b"abcabc", always),
                naive_substring_match(pattern, b"abcabc"),
            )

    def test_short_circuit_logged(self):
        doc_filter = rk_create_doc_bloom(
            b"abcabc", 3, capacity=1000, false_positive_rate=0.001
        )
        with self.assertLogs(
            "rk_sift.algorithms.document", level=logging.DEBUG
        ) as logs:
            rk_substring_match_using_bloom(b"xyz", b"abcabc", doc_filter)
        self.assertTrue(any("scan skipped" in line for line in logs.output))

    def test_agrees_with_exact_match(self):
        """Filtered results equal exact results for any false positive rate."""
        rng = random.Random(23)
        for fpp in (0.001, 0.5, 0.99):
            for _ in range(100):
                doc = bytes(rng.choice(b"abc") for _ in range(rng.randrange(0, 50)))
                m = rng.randrange(1, 5)
                pattern = bytes(rng.choice(b"abc") for _ in range(m))
                doc_filter = build_filter(doc, m, false_positive_rate=fpp)
                expected = naive_substring_match(pattern, doc)
                self.assertEqual(filtered_match(pattern, doc, doc_filter), expected)
                self.assertEqual(exact_match(pattern, doc), expected)

    def test_pattern_longer_than_document(self):
        doc_filter = rk_create_doc_bloom(b"ab", 3)
        self.assertEqual(
            rk_substring_match_using_bloom(b"abc", b"ab", doc_filter), (0, None)
        )

    def test_mismatched_window_length_rejected(self):
        doc_filter = rk_create_doc_bloom(b"abcabc", 3)
        with self.assertRaises(ValueError):
            rk_substring_match_using_bloom(b"ab", b"abcabc", doc_filter)
        with self.assertRaises(ValueError):
            rk_substring_match_using_bloom(b"abcd", b"abcabc", doc_filter)

    def test_empty_pattern_rejected(self):
        doc_filter = rk_create_doc_bloom(b"abc", 1)
        with self.assertRaises(ValueError):
            rk_substring_match_using_bloom(b"", b"abc", doc_filter)

    def test_plain_bloom_filter_accepted(self):
        """A bare BloomFilter of window hashes works without a length check."""
        doc = b"hello world"
        bloom = BloomFilter(expected_items=100)
        for i in range(len(doc) - 4):
            bloom.update(rkhash_init(doc[i : i + 5]).value)
        self.assertEqual(rk_substring_match_using_bloom(b"world", doc, bloom), (1, 6))

    def test_filter_reused_across_queries(self):
        doc = b"mississippi"
        doc_filter = rk_create_doc_bloom(doc, 2)
        snapshot = doc_filter._bytes.tobytes()
        for pattern in (b"ss", b"is", b"pi", b"ip", b"mi", b"zz"):
            self.assertEqual(
                rk_substring_match_using_bloom(pattern, doc, doc_filter),
                naive_substring_match(pattern, doc),
            )
        # Queries never modify the filter
        self.assertEqual(doc_filter._bytes.tobytes(), snapshot)
        self.assertEqual(doc_filter.items_processed, 10)


if __name__ == "__main__":
    unittest.main()
