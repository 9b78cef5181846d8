"""
Document index of window hashes and filter-accelerated matching.

A DocumentFilter is a Bloom filter holding the Rabin-Karp hash of every
length-m window of one document. Before scanning the document for a pattern
of length m, the pattern hash is looked up in the filter: an absent hash
proves the pattern does not occur, so the O(n) scan is skipped. A present
hash may be a false positive, so the exact matcher still decides.

The filter is built once and then only read. Any number of queries may run
against it, from any number of threads, once building is complete.
"""

import logging
from typing import Any, Dict, Optional, Union

from rk_sift.algorithms.bloom.base import BloomFilter
from rk_sift.algorithms.matcher import NO_MATCH, MatchResult, rk_substring_match
from rk_sift.algorithms.rolling import (
    BytesLike,
    as_bytes,
    iter_window_hashes,
    rkhash_init,
)
from rk_sift.core.base import MembershipFilter

logger = logging.getLogger(__name__)


class DocumentFilter(BloomFilter):
    """
    Bloom filter of all window hashes of a document for one window length.

    The window length is part of the filter: querying it with a pattern of a
    different length is rejected instead of answering for the wrong set of
    windows.

    Example:
        index = rk_create_doc_bloom(b"abcabc", 3)
        index.might_contain(b"bca")  # True
        index.might_contain(b"xyz")  # False (barring a false positive)
    """

    def __init__(
        self,
        window_length: int,
        expected_items: int = 10000,
        false_positive_rate: float = 0.01,
        memory_limit_bytes: Optional[int] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize an empty document filter.

        Args:
            window_length: Length of the windows (and of valid patterns).
            expected_items: Capacity in window hashes.
            false_positive_rate: Target false positive rate at capacity.
            memory_limit_bytes: Optional maximum memory usage in bytes.
            seed: Optional seed for the filter's hash functions.

        Raises:
            ValueError: If window_length is less than 1, or the Bloom filter
                        parameters are invalid.
        """
        if window_length < 1:
            raise ValueError(
                f"Window length must be at least 1, got {window_length}"
            )
        super().__init__(
            expected_items=expected_items,
            false_positive_rate=false_positive_rate,
            memory_limit_bytes=memory_limit_bytes,
            seed=seed,
        )
        self._window_length = window_length
        self._document_length = 0

    @property
    def window_length(self) -> int:
        return self._window_length

    @property
    def document_length(self) -> int:
        """Length of the document the filter was built from."""
        return self._document_length

    def check_pattern(self, pattern: bytes) -> None:
        """
        Raise ValueError unless pattern has this filter's window length.
        """
        if len(pattern) != self._window_length:
            raise ValueError(
                f"Filter was built for window length {self._window_length}, "
                f"pattern has length {len(pattern)}"
            )

    def contains_hash(self, value: int) -> bool:
        """Test a precomputed window hash. Same as contains()."""
        return self.contains(value)

    def might_contain(self, pattern: Union[BytesLike, str]) -> bool:
        """
        Test whether pattern may occur in the indexed document.

        Returns:
            False if the pattern definitely does not occur, True otherwise.

        Raises:
            ValueError: If the pattern length differs from the window length.
        """
        pattern_bytes = as_bytes(pattern)
        self.check_pattern(pattern_bytes)
        return self.contains(rkhash_init(pattern_bytes).value)

    def _empty_like(self) -> "DocumentFilter":
        return self.__class__(
            window_length=self._window_length,
            expected_items=self._expected_items,
            false_positive_rate=self._false_positive_rate,
            memory_limit_bytes=self._memory_limit_bytes,
            seed=self._seed,
        )

    def merge(self, other: "DocumentFilter") -> "DocumentFilter":
        """
        Merge two document filters of the same window length.

        The result answers for the windows of both documents; it indexes no
        windows that span the boundary between them.

        Raises:
            TypeError: If other is not a DocumentFilter.
            ValueError: If window lengths or Bloom parameters differ.
        """
        self._check_same_type(other)
        if self._window_length != other._window_length:
            raise ValueError(
                f"Cannot merge document filters with window lengths "
                f"{self._window_length} and {other._window_length}"
            )
        result = super().merge(other)
        result._document_length = self._document_length + other._document_length
        return result

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["window_length"] = self._window_length
        data["document_length"] = self._document_length
        return data

    @staticmethod
    def _init_kwargs(data: Dict[str, Any]) -> Dict[str, Any]:
        kwargs = BloomFilter._init_kwargs(data)
        kwargs["window_length"] = data["window_length"]
        return kwargs

    def _restore_state(self, data: Dict[str, Any]) -> None:
        super()._restore_state(data)
        self._document_length = data.get("document_length", 0)

    def clear(self) -> None:
        super().clear()
        self._document_length = 0

    def get_stats(self) -> Dict[str, Any]:
        stats = super().get_stats()
        stats["window_length"] = self._window_length
        stats["document_length"] = self._document_length
        stats["windows"] = max(0, self._document_length - self._window_length + 1)
        return stats


def rk_create_doc_bloom(
    doc: Union[BytesLike, str],
    m: int,
    capacity: Optional[int] = None,
    false_positive_rate: float = 0.01,
    seed: Optional[int] = None,
) -> DocumentFilter:
    """
    Build a filter holding the hash of every length-m window of doc.

    A document shorter than m has no windows and gives an empty filter that
    answers False for every query.

    Args:
        doc: The document to index.
        m: Window length, equal to the length of the patterns to be queried.
        capacity: Expected number of window hashes. Defaults to the number of
                  windows in doc (at least 1).
        false_positive_rate: Target false positive rate at capacity.
        seed: Optional seed for the filter's hash functions.

    Returns:
        The populated DocumentFilter.

    Raises:
        ValueError: If m or capacity is less than 1, or false_positive_rate
                    is not between 0 and 1.
    """
    doc_bytes = as_bytes(doc)
    window_count = max(0, len(doc_bytes) - m + 1)
    if capacity is None:
        capacity = max(1, window_count)

    doc_filter = DocumentFilter(
        window_length=m,
        expected_items=capacity,
        false_positive_rate=false_positive_rate,
        seed=seed,
    )
    for window_hash in iter_window_hashes(doc_bytes, m):
        doc_filter.update(window_hash)
    doc_filter._document_length = len(doc_bytes)

    logger.debug(
        "Indexed %d windows of length %d (capacity %d)", window_count, m, capacity
    )
    return doc_filter


def rk_substring_match_using_bloom(
    pattern: Union[BytesLike, str],
    doc: Union[BytesLike, str],
    doc_filter: MembershipFilter,
) -> MatchResult:
    """
    Count occurrences of pattern in doc, consulting doc_filter first.

    doc_filter must hold the window hashes of doc for windows of
    len(pattern). When it reports the pattern hash absent the document is
    not scanned; otherwise the result of the exact matcher is returned.

    Args:
        pattern: Non-empty byte string to search for.
        doc: The document doc_filter was built from.
        doc_filter: A DocumentFilter, or any MembershipFilter of window hashes.
                    Only a DocumentFilter can have its window length checked.

    Returns:
        MatchResult identical to rk_substring_match(pattern, doc).

    Raises:
        ValueError: If the pattern is empty or its length differs from the
                    filter's window length.
    """
    pattern_bytes = as_bytes(pattern)
    if not pattern_bytes:
        raise ValueError("Pattern must not be empty")
    if isinstance(doc_filter, DocumentFilter):
        doc_filter.check_pattern(pattern_bytes)

    if not doc_filter.contains(rkhash_init(pattern_bytes).value):
        logger.debug(
            "Filter rules out %d-byte pattern; scan skipped", len(pattern_bytes)
        )
        return NO_MATCH

    return rk_substring_match(pattern_bytes, doc)
