"""
Bloom Filter implementations for rk-sift.

This module provides the Bloom filter used as the approximate membership
index over Rabin-Karp window hashes.
"""

from rk_sift.algorithms.bloom.base import BloomFilter

__all__ = [
    "BloomFilter",
]
