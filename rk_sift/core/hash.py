"""
Hash mixing functions for rk-sift.

Rabin-Karp window hashes are small integers with poor bit dispersion, so the
Bloom filter runs them through these non-cryptographic 32-bit mixers before
deriving bit positions. Pure Python, no external dependencies.

The Bloom filter only ever passes integer window hashes. Raw byte strings are
also accepted, since the published MurmurHash3 and FNV-1a reference vectors
are defined over bytes; text must be encoded by the caller.
"""

from typing import Union

Key = Union[int, bytes, bytearray, memoryview]

_MASK32 = 0xFFFFFFFF

# MurmurHash3 x86_32 constants
_C1 = 0xCC9E2D51
_C2 = 0x1B873593

# FNV-1a 32-bit constants
FNV_PRIME = 16777619
FNV_OFFSET_BASIS = 2166136261


def key_to_bytes(key: Key) -> bytes:
    """
    Convert a hash key to the byte string fed to the mixers.

    Integers (window hashes) are encoded as at least 8 little-endian bytes, so
    every value below 2**64 gives a key of the same width. Bytes-like keys are
    used as they are.

    Raises:
        ValueError: If an integer key is negative.
        TypeError: If the key type is not supported.
    """
    if isinstance(key, bool):
        raise TypeError("Boolean keys are not supported")
    if isinstance(key, int):
        if key < 0:
            raise ValueError(f"Integer keys must be non-negative, got {key}")
        return key.to_bytes(max(8, (key.bit_length() + 7) // 8), "little")
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    raise TypeError(f"Unsupported key type: {type(key).__name__}")


def _rotl32(x: int, r: int) -> int:
    return ((x << r) | (x >> (32 - r))) & _MASK32


def _fmix32(h: int) -> int:
    # Final avalanche
    h ^= h >> 16
    h = (h * 0x85EBCA6B) & _MASK32
    h ^= h >> 13
    h = (h * 0xC2B2AE35) & _MASK32
    h ^= h >> 16
    return h


def murmurhash3_32(key: Key, seed: int = 0) -> int:
    """
    MurmurHash3 (x86, 32-bit variant).

    Args:
        key: Window hash or raw bytes to mix.
        seed: Seed for the hash.

    Returns:
        Unsigned 32-bit hash value.
    """
    data = key_to_bytes(key)
    length = len(data)
    h = seed & _MASK32

    nblocks = length // 4
    for block in range(nblocks):
        k = int.from_bytes(data[block * 4 : block * 4 + 4], "little")
        k = (k * _C1) & _MASK32
        k = _rotl32(k, 15)
        k = (k * _C2) & _MASK32

        h ^= k
        h = _rotl32(h, 13)
        h = (h * 5 + 0xE6546B64) & _MASK32

    tail = data[nblocks * 4 :]
    if tail:
        k = int.from_bytes(tail, "little")
        k = (k * _C1) & _MASK32
        k = _rotl32(k, 15)
        k = (k * _C2) & _MASK32
        h ^= k

    h ^= length
    return _fmix32(h)


def fnv1a_32(key: Key, seed: int = 0) -> int:
    """
    FNV-1a (32-bit variant).

    Cheaper than MurmurHash3 with slightly weaker dispersion; used as the
    second, independent hash for double hashing in the Bloom filter.

    Args:
        key: Window hash or raw bytes to mix.
        seed: Seed value, folded into the offset basis.

    Returns:
        Unsigned 32-bit hash value.
    """
    h = (FNV_OFFSET_BASIS ^ seed) & _MASK32
    for byte in key_to_bytes(key):
        h ^= byte
        h = (h * FNV_PRIME) & _MASK32
    return h
