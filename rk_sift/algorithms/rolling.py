"""
Rabin-Karp rolling hash.

A window of m bytes is hashed as the base-256 polynomial

    hash = window[0] * 256^(m-1) + window[1] * 256^(m-2) + ... + window[m-1]

reduced modulo PRIME. Sliding the window right by one byte only needs the
previous hash, the byte leaving on the left and the byte entering on the
right, so every window of a document is hashed in O(1) after the first.
"""

from typing import Iterator, NamedTuple, Union

from rk_sift.core.modular import BASE, madd, mmul, msub

BytesLike = Union[bytes, bytearray, memoryview]


def as_bytes(data: Union[BytesLike, str]) -> bytes:
    """
    Coerce pattern or document input to bytes.

    Text is encoded as UTF-8 and matched byte by byte; offsets reported by
    the matchers are byte offsets.

    Raises:
        TypeError: If data is neither bytes-like nor str.
    """
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    raise TypeError(
        f"Expected bytes-like object or str, got {type(data).__name__}"
    )


class RollingHash(NamedTuple):
    """
    Hash of one window together with what is needed to slide it.

    Attributes:
        value: Hash of the current window, in [0, PRIME).
        radix_power: 256^window_length mod PRIME.
        window_length: Number of bytes in the window.
    """

    value: int
    radix_power: int
    window_length: int

    def roll(self, leftmost: int, rightmost: int) -> "RollingHash":
        """
        Slide the window right by one byte.

        Args:
            leftmost: Byte leaving the window.
            rightmost: Byte entering the window.

        Returns:
            State for the shifted window.
        """
        return self._replace(
            value=rkhash_next(self.value, self.radix_power, leftmost, rightmost)
        )


def rkhash_init(window: Union[BytesLike, str]) -> RollingHash:
    """
    Hash a full window using Horner's scheme.

    Args:
        window: The bytes of the window, at least one.

    Returns:
        RollingHash with the window hash and radix_power = 256^m mod PRIME.

    Raises:
        ValueError: If the window is empty.
    """
    data = as_bytes(window)
    if not data:
        raise ValueError("Cannot hash an empty window")

    value = 0
    radix_power = 1
    for byte in data:
        value = madd(mmul(value, BASE), byte)
        radix_power = mmul(radix_power, BASE)
    return RollingHash(value, radix_power, len(data))


def rkhash_next(
    current_hash: int, radix_power: int, leftmost: int, rightmost: int
) -> int:
    """
    Advance a window hash by one byte.

    Computes current_hash * 256 - leftmost * radix_power + rightmost modulo
    PRIME. The multiplication by 256 shifts the leftmost byte up to the
    256^m place, where radix_power removes it.

    Args:
        current_hash: Hash of the window starting at i.
        radix_power: 256^m mod PRIME for window length m.
        leftmost: The byte at i.
        rightmost: The byte at i + m.

    Returns:
        Hash of the window starting at i + 1.
    """
    shifted = mmul(current_hash, BASE)
    return madd(msub(shifted, mmul(leftmost, radix_power)), rightmost)


def iter_window_hashes(data: Union[BytesLike, str], m: int) -> Iterator[int]:
    """
    Yield the hash of every length-m window of data, left to right.

    There are len(data) - m + 1 windows; nothing is yielded when data is
    shorter than m.

    Raises:
        ValueError: If m is less than 1.
    """
    if m < 1:
        raise ValueError(f"Window length must be at least 1, got {m}")
    return _window_hashes(as_bytes(data), m)


def _window_hashes(data: bytes, m: int) -> Iterator[int]:
    n = len(data)
    if n < m:
        return

    state = rkhash_init(data[:m])
    yield state.value
    for i in range(n - m):
        state = state.roll(data[i], data[i + m])
        yield state.value
