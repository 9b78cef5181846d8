"""
Bloom Filter over Rabin-Karp window hashes.

The Bloom filter is the approximate membership collaborator of the document
index: it records every window hash of a document and answers "possibly
present" or "definitely absent" for a pattern hash. False positives are
possible; false negatives are not.

References:
    - Bloom, B. H. (1970). Space/time trade-offs in hash coding with allowable errors.
      Communications of the ACM, 13(7), 422-426.
    - Kirsch, A., Mitzenmacher, M. (2006). Less hashing, same performance:
      building a better Bloom filter.
"""

import array
import logging
import math
import sys
from collections import Counter
from typing import Any, Dict, List, Optional

from rk_sift.core.base import MembershipFilter
from rk_sift.core.hash import fnv1a_32, murmurhash3_32

logger = logging.getLogger(__name__)


class BloomFilter(MembershipFilter):
    """
    Bloom filter for set membership testing of non-negative integers.

    Bit positions are derived by double hashing: two independent 32-bit
    mixes h1 and h2 of the value give the k positions (h1 + i * h2) mod m.

    Example:
        # Filter for 1000 window hashes with a 1% false positive rate
        bloom = BloomFilter(expected_items=1000, false_positive_rate=0.01)

        bloom.update(4211)
        bloom.contains(4211)  # True
        bloom.contains(17)  # False, or True with probability ~1%
    """

    def __init__(
        self,
        expected_items: int = 10000,
        false_positive_rate: float = 0.01,
        memory_limit_bytes: Optional[int] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize a new Bloom filter.

        Args:
            expected_items: Expected number of distinct values (the capacity).
            false_positive_rate: Target false positive rate (between 0 and 1).
            memory_limit_bytes: Optional maximum memory usage in bytes.
            seed: Optional seed for the hash functions.

        Raises:
            ValueError: If expected_items is less than 1.
                       If false_positive_rate is not between 0 and 1.
        """
        super().__init__(memory_limit_bytes)

        if expected_items < 1:
            raise ValueError("Expected number of items must be at least 1")
        if not (0 < false_positive_rate < 1):
            raise ValueError("False positive rate must be between 0 and 1")

        self._expected_items = expected_items
        self._false_positive_rate = false_positive_rate
        self._seed = seed if seed is not None else 0

        self._bit_size = self._calculate_bit_size(expected_items, false_positive_rate)
        self._hash_count = self._calculate_hash_count(self._bit_size, expected_items)

        # One bit per position, packed eight to a byte
        self._bytes = array.array("B", bytes((self._bit_size + 7) // 8))

        # Insertions that set at least one new bit
        self._approximate_count = 0
        self._saturation_logged = False

        logger.debug(
            "BloomFilter created: expected_items=%d fpp=%.4g bit_size=%d hash_count=%d",
            expected_items,
            false_positive_rate,
            self._bit_size,
            self._hash_count,
        )

    @staticmethod
    def _calculate_bit_size(n: int, p: float) -> int:
        """
        Optimal bit array size m = -(n * ln(p)) / (ln(2)^2), at least 8.
        """
        m = -(n * math.log(p)) / (math.log(2) ** 2)
        return max(8, math.ceil(m))

    @staticmethod
    def _calculate_hash_count(m: int, n: int) -> int:
        """
        Optimal number of hash functions k = (m/n) * ln(2), at least 1.
        """
        k = (m / max(n, 1)) * math.log(2)
        return max(1, math.ceil(k))

    def _get_bit_positions(self, value: int) -> List[int]:
        """
        Generate the k bit positions for a value.

        Args:
            value: The hash value to place.

        Returns:
            List of bit positions to set or check.
        """
        h1 = murmurhash3_32(value, seed=self._seed)
        h2 = fnv1a_32(value, seed=self._seed)
        return [(h1 + i * h2) % self._bit_size for i in range(self._hash_count)]

    def _set_bit(self, position: int) -> None:
        self._bytes[position >> 3] |= 1 << (position & 7)

    def _test_bit(self, position: int) -> bool:
        return bool(self._bytes[position >> 3] & (1 << (position & 7)))

    def _insert(self, value: int) -> None:
        new_bits = False
        for position in self._get_bit_positions(value):
            if not self._test_bit(position):
                self._set_bit(position)
                new_bits = True

        if new_bits:
            self._approximate_count += 1
            if (
                self._approximate_count > self._expected_items
                and not self._saturation_logged
            ):
                self._saturation_logged = True
                logger.warning(
                    "BloomFilter holds more than its capacity of %d items; "
                    "false positive rate will exceed %.4g",
                    self._expected_items,
                    self._false_positive_rate,
                )

    def contains(self, value: int) -> bool:
        """
        Test if a value might be in the set.

        Args:
            value: The hash value to test.

        Returns:
            True if the value might be in the set, False if definitely not.
        """
        return all(self._test_bit(p) for p in self._get_bit_positions(value))

    def _empty_like(self) -> "BloomFilter":
        """Create an empty filter with the same parameters as this one."""
        return self.__class__(
            expected_items=self._expected_items,
            false_positive_rate=self._false_positive_rate,
            memory_limit_bytes=self._memory_limit_bytes,
            seed=self._seed,
        )

    def merge(self, other: "BloomFilter") -> "BloomFilter":
        """
        Merge this Bloom filter with another one of identical parameters.

        Args:
            other: Another BloomFilter with the same bit size, hash count and seed.

        Returns:
            A new BloomFilter containing the values of both filters.

        Raises:
            TypeError: If other is not a BloomFilter.
            ValueError: If filters have incompatible parameters.
        """
        self._check_same_type(other)

        if (
            self._bit_size != other._bit_size
            or self._hash_count != other._hash_count
            or self._seed != other._seed
        ):
            raise ValueError(
                f"Cannot merge Bloom filters with different parameters: "
                f"({self._bit_size}, {self._hash_count}, seed={self._seed}) and "
                f"({other._bit_size}, {other._hash_count}, seed={other._seed})"
            )

        result = self._empty_like()
        result._bytes = array.array(
            "B", (a | b for a, b in zip(self._bytes, other._bytes))
        )
        result._approximate_count = min(
            self._approximate_count + other._approximate_count,
            self._items_processed + other._items_processed,
        )
        result._items_processed = self._items_processed + other._items_processed
        return result

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the Bloom filter to a dictionary for serialization.
        """
        data = self._base_dict()
        data.update(
            {
                "expected_items": self._expected_items,
                "false_positive_rate": self._false_positive_rate,
                "bit_size": self._bit_size,
                "hash_count": self._hash_count,
                "bytes": list(self._bytes),
                "approximate_count": self._approximate_count,
                "seed": self._seed,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BloomFilter":
        """
        Create a Bloom filter from a dictionary representation.

        The stored bit size and hash count are authoritative.

        Raises:
            ValueError: If the stored byte array does not match the bit size.
        """
        instance = cls(**cls._init_kwargs(data))
        instance._restore_state(data)
        return instance

    @staticmethod
    def _init_kwargs(data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "expected_items": data["expected_items"],
            "false_positive_rate": data["false_positive_rate"],
            "memory_limit_bytes": data.get("memory_limit_bytes"),
            "seed": data.get("seed", 0),
        }

    def _restore_state(self, data: Dict[str, Any]) -> None:
        self._bit_size = data["bit_size"]
        self._hash_count = data["hash_count"]

        num_bytes = (self._bit_size + 7) // 8
        if len(data["bytes"]) != num_bytes:
            raise ValueError(
                "Mismatch between bit_size and length of loaded byte array"
            )
        self._bytes = array.array("B", data["bytes"])
        self._approximate_count = data["approximate_count"]
        self._items_processed = data["items_processed"]
        self._saturation_logged = self._approximate_count > self._expected_items

    def estimate_size(self) -> int:
        """
        Estimate the current memory usage of this filter in bytes.
        """
        return super().estimate_size() + sys.getsizeof(self._bytes)

    def _set_bit_count(self) -> int:
        return sum(bin(byte).count("1") for byte in self._bytes)

    def estimate_cardinality(self) -> int:
        """
        Estimate the number of distinct values in the filter.

        Uses n ~= -m * ln(1 - X/m) / k where X is the number of set bits. The
        estimate degrades as the filter saturates.

        Returns:
            Estimated number of distinct values, never more than items processed.
        """
        set_bits = self._set_bit_count()
        if set_bits == 0:
            return 0
        if set_bits >= self._bit_size:
            return self._items_processed

        estimate = (
            -self._bit_size * math.log(1.0 - set_bits / self._bit_size)
        ) / self._hash_count
        return min(max(0, int(round(estimate))), self._items_processed)

    def false_positive_probability(self) -> float:
        """
        Current false positive probability estimated from the fill ratio.

        Returns:
            (set_bits / m) ** k, clamped to [0, 1].
        """
        fill_ratio = self._set_bit_count() / self._bit_size
        return max(0.0, min(fill_ratio**self._hash_count, 1.0))

    def is_empty(self) -> bool:
        """Return True if no bit is set."""
        return not any(self._bytes)

    def clear(self) -> None:
        """
        Reset the filter to its empty state, keeping size and hash count.
        """
        super().clear()
        self._bytes = array.array("B", bytes(len(self._bytes)))
        self._approximate_count = 0
        self._saturation_logged = False

    def get_stats(self) -> Dict[str, Any]:
        """
        Get detailed statistics about the current state of the Bloom filter.

        Extends the base statistics with the fill ratio, the byte population
        distribution and the observed versus theoretical fill ratio.
        """
        stats = super().get_stats()

        set_bits = self._set_bit_count()
        fill_ratio = set_bits / self._bit_size

        stats.update(
            {
                "expected_items": self._expected_items,
                "false_positive_rate": self._false_positive_rate,
                "bit_size": self._bit_size,
                "hash_count": self._hash_count,
                "set_bits": set_bits,
                "fill_ratio": fill_ratio,
                "approximate_count": self._approximate_count,
                "estimated_unique_items": self.estimate_cardinality(),
                "current_fpp": self.false_positive_probability(),
            }
        )

        byte_distribution = Counter(bin(byte).count("1") for byte in self._bytes)
        stats["byte_stats"] = {
            "zero_bytes": byte_distribution.get(0, 0),
            "full_bytes": byte_distribution.get(8, 0),
            "distribution": {
                str(bits): count for bits, count in sorted(byte_distribution.items())
            },
        }

        if self._approximate_count > 0:
            theoretical_fill = 1.0 - math.exp(
                -(self._hash_count * self._approximate_count) / self._bit_size
            )
            stats["theoretical_fill_ratio"] = theoretical_fill
            stats["observed_vs_theoretical_ratio"] = fill_ratio / theoretical_fill
            stats["bits_per_item"] = self._bit_size / self._approximate_count

        return stats

    def error_bounds(self) -> Dict[str, Any]:
        """
        Theoretical false positive bounds for the current load.

        Uses (1 - e^(-k*n/m))^k with n the number of distinct insertions.
        """
        bounds = super().error_bounds()

        items = self._approximate_count
        if items == 0:
            return bounds

        fill_ratio = 1 - math.exp(-(self._hash_count * items) / self._bit_size)
        bounds["current_theoretical_fpp"] = min(fill_ratio**self._hash_count, 1.0)
        bounds["target_fpp"] = self._false_positive_rate
        bounds["load_factor"] = items / self._expected_items
        if fill_ratio < 0.5:
            bounds["error_margin"] = "low"
        elif fill_ratio < 0.8:
            bounds["error_margin"] = "moderate"
        else:
            bounds["error_margin"] = "high"

        return bounds

    @property
    def expected_items(self) -> int:
        """Capacity the filter was sized for."""
        return self._expected_items

    @property
    def false_positive_rate(self) -> float:
        """Target false positive rate at capacity."""
        return self._false_positive_rate

    @property
    def bit_size(self) -> int:
        return self._bit_size

    @property
    def hash_count(self) -> int:
        return self._hash_count

    @property
    def seed(self) -> int:
        return self._seed
