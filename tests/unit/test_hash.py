"""
Unit tests for hash mixing functions.
"""

import unittest
from collections import Counter

from rk_sift.core.hash import fnv1a_32, key_to_bytes, murmurhash3_32
from rk_sift.core.modular import PRIME


class TestHashFunctions(unittest.TestCase):
    """Test cases for hash functions in rk_sift.core.hash."""

    def test_key_to_bytes(self):
        """Integer keys map to at least 8 little-endian bytes."""
        self.assertEqual(key_to_bytes(1), b"\x01" + b"\x00" * 7)
        self.assertEqual(key_to_bytes(0), b"\x00" * 8)
        self.assertEqual(len(key_to_bytes(PRIME - 1)), 8)
        self.assertEqual(len(key_to_bytes(2**70)), 9)
        self.assertEqual(key_to_bytes(b"ab"), b"ab")
        self.assertEqual(key_to_bytes(bytearray(b"ab")), b"ab")
        self.assertEqual(key_to_bytes(memoryview(b"ab")), b"ab")

    def test_key_to_bytes_rejects_invalid_keys(self):
        with self.assertRaises(ValueError):
            key_to_bytes(-1)
        with self.assertRaises(TypeError):
            key_to_bytes(True)
        with self.assertRaises(TypeError):
            key_to_bytes(1.5)
        with self.assertRaises(TypeError):
            key_to_bytes("ab")
        with self.assertRaises(TypeError):
            fnv1a_32("ab")
        with self.assertRaises(TypeError):
            murmurhash3_32((1, 2))

    def test_integer_keys_hash_as_their_bytes(self):
        for value in (0, 1, 4211, PRIME - 1):
            self.assertEqual(murmurhash3_32(value), murmurhash3_32(key_to_bytes(value)))
            self.assertEqual(fnv1a_32(value), fnv1a_32(key_to_bytes(value)))

    def test_reproducibility(self):
        """Both functions give the same result for the same input."""
        for input_value in (b"hello world", b"", b"a" * 100, 123, PRIME - 1):
            self.assertEqual(murmurhash3_32(input_value), murmurhash3_32(input_value))
            self.assertEqual(fnv1a_32(input_value), fnv1a_32(input_value))

    def test_murmurhash3_known_values(self):
        """Reference values for MurmurHash3 x86_32."""
        test_cases = [
            (b"", 0, 0x00000000),
            (b"", 1, 0x514E28B7),
            (b"hello world", 0, 0x5E928F0F),
            (b"test", 42, 0xEC06E15A),
        ]
        for input_value, seed, expected in test_cases:
            hash_value = murmurhash3_32(input_value, seed)
            self.assertEqual(
                hash_value,
                expected,
                f"MurmurHash3 of {input_value!r} with seed {seed} should be "
                f"{expected:08x}, got {hash_value:08x}",
            )

    def test_fnv1a_known_values(self):
        """Reference values for FNV-1a 32-bit."""
        self.assertEqual(fnv1a_32(b""), 0x811C9DC5)
        self.assertEqual(fnv1a_32(b"a"), 0xE40C292C)

    def test_different_inputs(self):
        """Nearby window hashes do not collide."""
        inputs = list(range(1000, 1050))
        self.assertEqual(len({murmurhash3_32(x) for x in inputs}), len(inputs))
        self.assertEqual(len({fnv1a_32(x) for x in inputs}), len(inputs))

    def test_seed_changes_output(self):
        for fn in (murmurhash3_32, fnv1a_32):
            hashes = {fn(4211, seed=seed) for seed in (0, 1, 42)}
            self.assertEqual(len(hashes), 3, f"{fn.__name__} ignores its seed")

    def test_murmurhash3_distribution(self):
        """Sequential window hashes spread evenly over buckets."""
        num_samples = 10000
        num_buckets = 10
        counter = Counter(murmurhash3_32(x) % num_buckets for x in range(num_samples))

        expected = num_samples / num_buckets
        self.assertEqual(len(counter), num_buckets)
        for bucket, count in counter.items():
            self.assertGreaterEqual(count, expected * 0.8, f"bucket {bucket} too small")
            self.assertLessEqual(count, expected * 1.2, f"bucket {bucket} too large")

    def test_range(self):
        """Outputs are unsigned 32-bit integers."""
        for input_value in (b"test", 123, b"\xff" * 1000, 2**64):
            for fn in (murmurhash3_32, fnv1a_32):
                hash_value = fn(input_value)
                self.assertGreaterEqual(hash_value, 0)
                self.assertLessEqual(hash_value, 0xFFFFFFFF)

    def test_murmurhash3_avalanche(self):
        """A one-byte change flips many output bits."""
        diff_bits = bin(murmurhash3_32(1000) ^ murmurhash3_32(1001)).count("1")
        self.assertGreaterEqual(diff_bits, 4)


if __name__ == "__main__":
    unittest.main()
