"""
rk-sift - Rabin-Karp substring search with Bloom filter pre-checks

rk-sift finds every occurrence of a byte pattern in a document with the
Rabin-Karp rolling hash, and can index a document's window hashes in a Bloom
filter so that absent patterns are ruled out without scanning.
"""

__version__ = "0.1.0"

from rk_sift.algorithms.bloom import BloomFilter
from rk_sift.algorithms.document import (
    DocumentFilter,
    rk_create_doc_bloom,
    rk_substring_match_using_bloom,
)
from rk_sift.algorithms.matcher import (
    MatchResult,
    RabinKarpMatcher,
    ScanStats,
    rk_find_all,
    rk_substring_match,
)
from rk_sift.algorithms.rolling import RollingHash, rkhash_init, rkhash_next
from rk_sift.core.base import MembershipFilter
from rk_sift.core.modular import PRIME

# Public names for the three entry points
exact_match = rk_substring_match
build_filter = rk_create_doc_bloom
filtered_match = rk_substring_match_using_bloom

__all__ = [
    # Entry points
    "exact_match",
    "build_filter",
    "filtered_match",
    # Matching
    "MatchResult",
    "ScanStats",
    "RabinKarpMatcher",
    "rk_substring_match",
    "rk_find_all",
    # Rolling hash
    "RollingHash",
    "rkhash_init",
    "rkhash_next",
    "PRIME",
    # Filters
    "MembershipFilter",
    "BloomFilter",
    "DocumentFilter",
    "rk_create_doc_bloom",
    "rk_substring_match_using_bloom",
]
