"""
Rabin-Karp exact substring matching.

The document is scanned window by window with a rolling hash. A window whose
hash equals the pattern hash is only a candidate: the bytes are compared
before a match is reported, so hash collisions never produce false matches.

References:
    - Karp, R. M., Rabin, M. O. (1987). Efficient randomized pattern-matching
      algorithms. IBM Journal of Research and Development, 31(2), 249-260.
"""

import logging
import time
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Deque, Dict, Iterator, NamedTuple, Optional, Tuple, Union

from rk_sift.algorithms.rolling import BytesLike, as_bytes, rkhash_init, rkhash_next

logger = logging.getLogger(__name__)


class MatchResult(NamedTuple):
    """
    Outcome of a substring search.

    Attributes:
        count: Number of offsets where the pattern occurs.
        first_index: Smallest such offset, or None when count is 0.
    """

    count: int
    first_index: Optional[int]


NO_MATCH = MatchResult(0, None)


@dataclass
class ScanStats:
    """Counters collected while scanning one document."""

    windows: int = 0
    hash_hits: int = 0
    matches: int = 0
    spurious_hits: int = 0

    def add(self, other: "ScanStats") -> None:
        """Accumulate another scan's counters into this one."""
        self.windows += other.windows
        self.hash_hits += other.hash_hits
        self.matches += other.matches
        self.spurious_hits += other.spurious_hits


def _prepare(
    pattern: Union[BytesLike, str], doc: Union[BytesLike, str]
) -> Tuple[bytes, bytes]:
    pattern_bytes = as_bytes(pattern)
    if not pattern_bytes:
        raise ValueError("Pattern must not be empty")
    return pattern_bytes, as_bytes(doc)


def _scan(
    pattern: bytes,
    pattern_hash: int,
    doc: bytes,
    stats: Optional[ScanStats] = None,
) -> Iterator[int]:
    """
    Yield every verified match offset of pattern in doc.

    pattern_hash must be the rolling hash of pattern.
    """
    m = len(pattern)
    last = len(doc) - m
    if last < 0:
        return

    state = rkhash_init(doc[:m])
    doc_hash, radix_power = state.value, state.radix_power
    for i in range(last + 1):
        if stats is not None:
            stats.windows += 1
        if doc_hash == pattern_hash:
            if stats is not None:
                stats.hash_hits += 1
            if doc[i : i + m] == pattern:
                if stats is not None:
                    stats.matches += 1
                yield i
            elif stats is not None:
                stats.spurious_hits += 1
        if i < last:
            doc_hash = rkhash_next(doc_hash, radix_power, doc[i], doc[i + m])


def _summarize(positions: Iterator[int]) -> MatchResult:
    count = 0
    first_index = None
    for position in positions:
        if count == 0:
            first_index = position
        count += 1
    return MatchResult(count, first_index)


def rk_find_all(
    pattern: Union[BytesLike, str], doc: Union[BytesLike, str]
) -> Iterator[int]:
    """
    Iterate over every offset where pattern occurs in doc, in increasing order.

    Overlapping occurrences are all reported.

    Raises:
        ValueError: If the pattern is empty.
        TypeError: If an argument is neither bytes-like nor str.
    """
    pattern_bytes, doc_bytes = _prepare(pattern, doc)
    return _scan(pattern_bytes, rkhash_init(pattern_bytes).value, doc_bytes)


def rk_substring_match(
    pattern: Union[BytesLike, str], doc: Union[BytesLike, str]
) -> MatchResult:
    """
    Count the occurrences of pattern in doc with the Rabin-Karp algorithm.

    A pattern longer than the document is not an error and yields no match.

    Args:
        pattern: Non-empty byte string to search for.
        doc: Byte string to search in.

    Returns:
        MatchResult with the number of matches and the first match offset.

    Raises:
        ValueError: If the pattern is empty.
        TypeError: If an argument is neither bytes-like nor str.
    """
    pattern_bytes, doc_bytes = _prepare(pattern, doc)
    if len(doc_bytes) < len(pattern_bytes):
        return NO_MATCH
    pattern_hash = rkhash_init(pattern_bytes).value
    return _summarize(_scan(pattern_bytes, pattern_hash, doc_bytes))


class RabinKarpMatcher:
    """
    Reusable Rabin-Karp matcher for one pattern.

    The pattern hash is computed once and shared by every scan. The matcher
    records counters for its most recent scan and running totals across all
    scans, which makes it convenient for measuring how often hash hits turn
    out to be collisions.

    Example:
        matcher = RabinKarpMatcher(b"ab")
        matcher.match(b"ababab")  # MatchResult(count=3, first_index=0)
        matcher.get_stats()["last_scan"]["hash_hits"]  # 3
    """

    def __init__(self, pattern: Union[BytesLike, str]):
        """
        Args:
            pattern: Non-empty byte string to search for.

        Raises:
            ValueError: If the pattern is empty.
        """
        self._pattern, _ = _prepare(pattern, b"")
        self._pattern_hash = rkhash_init(self._pattern).value

        self._last_scan = ScanStats()
        self._totals = ScanStats()
        self._scan_count = 0

        self._track_timing = False
        self._total_scan_time = 0.0
        self._recent_scan_times: Optional[Deque[float]] = None

    @property
    def pattern(self) -> bytes:
        return self._pattern

    @property
    def pattern_hash(self) -> int:
        return self._pattern_hash

    def __len__(self) -> int:
        return len(self._pattern)

    def find_all(self, doc: Union[BytesLike, str]) -> Iterator[int]:
        """
        Iterate over every offset where the pattern occurs in doc.

        Statistics for the scan are final once the iterator is exhausted.
        """
        stats = ScanStats()
        self._begin_scan(stats)
        positions = _scan(self._pattern, self._pattern_hash, as_bytes(doc), stats)
        return self._tracked(positions, stats)

    def match(self, doc: Union[BytesLike, str]) -> MatchResult:
        """
        Count occurrences of the pattern in doc.

        Returns:
            MatchResult with the number of matches and the first match offset.
        """
        start = time.perf_counter() if self._track_timing else 0.0
        result = _summarize(self.find_all(doc))
        if self._track_timing:
            self._record_scan_time(time.perf_counter() - start)
        return result

    def contains(self, doc: Union[BytesLike, str]) -> bool:
        """Return True if the pattern occurs at least once in doc."""
        for _ in self.find_all(doc):
            return True
        return False

    def _begin_scan(self, stats: ScanStats) -> None:
        self._last_scan = stats
        self._scan_count += 1

    def _tracked(self, positions: Iterator[int], stats: ScanStats) -> Iterator[int]:
        try:
            yield from positions
        finally:
            self._totals.add(stats)
            if stats.spurious_hits:
                logger.debug(
                    "Scan for %d-byte pattern had %d spurious hash hits",
                    len(self._pattern),
                    stats.spurious_hits,
                )

    def enable_performance_tracking(self, max_history: int = 100) -> None:
        """
        Time every match() call.

        Args:
            max_history: Maximum number of recent scan times to keep.
        """
        self._track_timing = True
        self._recent_scan_times = deque(maxlen=max(1, max_history))

    def disable_performance_tracking(self) -> None:
        """Stop timing scans."""
        self._track_timing = False
        self._recent_scan_times = None

    def _record_scan_time(self, elapsed: float) -> None:
        self._total_scan_time += elapsed
        if self._recent_scan_times is not None:
            self._recent_scan_times.append(elapsed)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the scans performed by this matcher.

        Returns:
            A dictionary with the pattern length and hash, the number of
            scans, counters for the last scan and cumulative counters. When
            performance tracking is enabled, timings in nanoseconds.
        """
        stats: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "pattern_length": len(self._pattern),
            "pattern_hash": self._pattern_hash,
            "scans": self._scan_count,
            "last_scan": asdict(self._last_scan),
            "totals": asdict(self._totals),
        }

        if self._totals.hash_hits > 0:
            stats["collision_rate"] = (
                self._totals.spurious_hits / self._totals.hash_hits
            )

        if self._recent_scan_times:
            recent_ns = [t * 1e9 for t in self._recent_scan_times]
            stats["avg_scan_time_ns"] = sum(recent_ns) / len(recent_ns)
            stats["last_scan_time_ns"] = recent_ns[-1]
            stats["total_scan_time_ns"] = self._total_scan_time * 1e9

        return stats

    def reset_stats(self) -> None:
        """Reset all counters and timings."""
        self._last_scan = ScanStats()
        self._totals = ScanStats()
        self._scan_count = 0
        self._total_scan_time = 0.0
        if self._recent_scan_times is not None:
            self._recent_scan_times.clear()
