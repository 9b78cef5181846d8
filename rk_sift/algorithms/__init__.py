"""
Algorithm implementations for rk-sift.
"""

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
from rk_sift.algorithms.rolling import (
    RollingHash,
    iter_window_hashes,
    rkhash_init,
    rkhash_next,
)

__all__ = [
    "RollingHash",
    "rkhash_init",
    "rkhash_next",
    "iter_window_hashes",
    "MatchResult",
    "ScanStats",
    "RabinKarpMatcher",
    "rk_substring_match",
    "rk_find_all",
    "BloomFilter",
    "DocumentFilter",
    "rk_create_doc_bloom",
    "rk_substring_match_using_bloom",
]
