"""
Base classes and interfaces for rk-sift membership filters.

This module defines the abstract interface every approximate membership
filter must implement so the document index and the accelerated matcher can
treat filters as black boxes: create with a capacity, insert hash values,
query hash values. It also provides the serialization and benchmarking hooks
shared by all filters.
"""

import abc
import json
import sys
import time
from collections import deque
from typing import Any, Deque, Dict, Optional, Union


class MembershipFilter(abc.ABC):
    """
    Abstract base class for approximate membership filters.

    A membership filter over-approximates a set of non-negative integers
    (Rabin-Karp window hashes in this library). Querying a value that was
    inserted always answers True; querying any other value answers False
    or, with bounded probability, True.

    Insertion is monotonic: there is no removal operation. Once a filter has
    been populated it is only read, so one filter can serve any number of
    concurrent queries.
    """

    def __init__(self, memory_limit_bytes: Optional[int] = None):
        """
        Initialize a new membership filter.

        Args:
            memory_limit_bytes: Optional maximum memory usage in bytes.
                                None means no explicit limit.
        """
        self._memory_limit_bytes = memory_limit_bytes
        self._items_processed = 0

        # Performance tracking attributes
        self._last_update_time: float = 0.0
        self._total_update_time: float = 0.0
        self._update_count: int = 0
        self._track_recent_updates: bool = False
        self._recent_update_times: Optional[Deque[float]] = None
        self._max_update_history: int = 100

    def update(self, value: int) -> None:
        """
        Insert a value into the filter.

        Inserting the same value twice leaves the membership answer for every
        value unchanged.

        Args:
            value: The hash value to insert.
        """
        self._items_processed += 1
        if not self._track_recent_updates:
            self._insert(value)
            return

        start_time = time.perf_counter()
        self._insert(value)
        self._record_update_time(time.perf_counter() - start_time)

    @abc.abstractmethod
    def _insert(self, value: int) -> None:
        """Set the filter state for a value."""
        pass

    @abc.abstractmethod
    def contains(self, value: int) -> bool:
        """
        Test whether a value may have been inserted.

        Args:
            value: The hash value to test.

        Returns:
            True if the value might be in the set, False if definitely not.
        """
        pass

    def query(self, value: int) -> bool:
        """Alias for contains()."""
        return self.contains(value)

    def __contains__(self, value: int) -> bool:
        return self.contains(value)

    @abc.abstractmethod
    def merge(self, other: "MembershipFilter") -> "MembershipFilter":
        """
        Merge this filter with another of the same type and parameters.

        Args:
            other: Another filter of the same type.

        Returns:
            A new filter answering True for every value inserted into either.

        Raises:
            TypeError: If other is not of the same type.
        """
        pass

    def _check_same_type(self, other: "MembershipFilter") -> None:
        """
        Raise TypeError unless other is an instance of this filter's class.
        """
        if not isinstance(other, self.__class__):
            raise TypeError(f"Cannot merge with {other.__class__.__name__}")

    @abc.abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the filter to a dictionary for serialization.

        Returns:
            A dictionary representation of the filter.
        """
        pass

    def _base_dict(self) -> Dict[str, Any]:
        """
        Create a dictionary with the attributes common to all filters.
        """
        return {
            "type": self.__class__.__name__,
            "items_processed": self._items_processed,
            "memory_limit_bytes": self._memory_limit_bytes,
        }

    @classmethod
    @abc.abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MembershipFilter":
        """
        Create a filter from a dictionary representation.

        Args:
            data: The dictionary containing the filter state.

        Returns:
            A new filter initialized with the given state.
        """
        pass

    def serialize(self, format: str = "json") -> Union[str, bytes]:
        """
        Serialize the filter to a string or bytes.

        Args:
            format: The serialization format ('json' or 'binary').
                    'binary' is the JSON document encoded as UTF-8.

        Returns:
            The serialized representation of the filter.

        Raises:
            ValueError: If the format is not supported.
        """
        if format == "json":
            return json.dumps(self.to_dict())
        elif format == "binary":
            return json.dumps(self.to_dict()).encode("utf-8")
        else:
            raise ValueError(f"Unsupported serialization format: {format}")

    @classmethod
    def deserialize(
        cls, data: Union[str, bytes], format: str = "json"
    ) -> "MembershipFilter":
        """
        Deserialize a filter from a string or bytes.

        Args:
            data: The serialized filter.
            format: The serialization format ('json' or 'binary').

        Returns:
            A new filter.

        Raises:
            ValueError: If the format is not supported.
        """
        if format not in ("json", "binary"):
            raise ValueError(f"Unsupported serialization format: {format}")
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return cls.from_dict(json.loads(data))

    def estimate_size(self) -> int:
        """
        Estimate the current memory usage of this filter in bytes.

        Derived classes should add the size of their own storage.

        Returns:
            Estimated memory usage in bytes.
        """
        size = sys.getsizeof(self)
        if hasattr(self, "__dict__"):
            size += sys.getsizeof(self.__dict__)

        if self._recent_update_times is not None:
            size += sys.getsizeof(self._recent_update_times)
            size += len(self._recent_update_times) * sys.getsizeof(0.0)

        return size

    def check_memory_limit(self) -> bool:
        """
        Check if the current memory usage is within the configured limit.

        Returns:
            True if within limits (or no limit is set), False otherwise.
        """
        if self._memory_limit_bytes is None:
            return True

        return self.estimate_size() <= self._memory_limit_bytes

    def clear(self) -> None:
        """
        Reset the base counters and tracking metrics.

        Derived classes must override this to clear their own storage and
        call super().clear().
        """
        self._items_processed = 0
        self._total_update_time = 0.0
        self._update_count = 0
        self._last_update_time = 0.0

        if self._recent_update_times is not None:
            self._recent_update_times.clear()

    def enable_performance_tracking(
        self, track_recent_updates: bool = True, max_history: int = 100
    ) -> None:
        """
        Enable timing of insertions for benchmarking.

        Args:
            track_recent_updates: Whether to time insertions.
            max_history: Maximum number of recent insertion times to keep.
        """
        self._track_recent_updates = track_recent_updates
        self._max_update_history = max(1, max_history)

        if track_recent_updates and self._recent_update_times is None:
            self._recent_update_times = deque(maxlen=self._max_update_history)

    def disable_performance_tracking(self) -> None:
        """Disable performance tracking to reduce overhead."""
        self._track_recent_updates = False
        self._recent_update_times = None

    def _record_update_time(self, elapsed: float) -> None:
        self._last_update_time = elapsed
        self._total_update_time += elapsed
        self._update_count += 1
        if self._recent_update_times is not None:
            self._recent_update_times.append(elapsed)

    def get_performance_stats(self) -> Dict[str, Any]:
        """
        Get performance statistics for this filter.

        Returns:
            A dictionary with items processed, memory usage and, when tracking
            is enabled, insertion timings in nanoseconds.
        """
        stats: Dict[str, Any] = {
            "items_processed": self._items_processed,
            "memory_bytes": self.estimate_size(),
        }

        if self._update_count > 0:
            stats["avg_update_time_ns"] = (
                self._total_update_time / self._update_count
            ) * 1e9
            stats["last_update_time_ns"] = self._last_update_time * 1e9

        if self._recent_update_times:
            recent_times_ns = [t * 1e9 for t in self._recent_update_times]
            stats["recent_update_times_ns"] = recent_times_ns
            stats["min_update_time_ns"] = min(recent_times_ns)
            stats["max_update_time_ns"] = max(recent_times_ns)

        return stats

    def get_stats(self) -> Dict[str, Any]:
        """
        Get detailed statistics about the current state of the filter.

        Derived classes should extend the result with their own metrics.

        Returns:
            A dictionary containing statistics about the filter state.
        """
        stats: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "items_processed": self._items_processed,
            "memory_bytes": self.estimate_size(),
        }

        if self._memory_limit_bytes is not None:
            stats["memory_limit_bytes"] = self._memory_limit_bytes
            stats["memory_usage_pct"] = (
                self.estimate_size() / self._memory_limit_bytes
            ) * 100

        if self._update_count > 0:
            stats["avg_update_time_ns"] = (
                self._total_update_time / self._update_count
            ) * 1e9

        error_bounds = self.error_bounds()
        if error_bounds:
            stats.update(error_bounds)

        return stats

    def error_bounds(self) -> Dict[str, Any]:
        """
        Get the theoretical error bounds for this filter.

        The base implementation returns an empty dictionary.
        """
        return {}

    @property
    def items_processed(self) -> int:
        """Get the total number of insertions performed on this filter."""
        return self._items_processed
