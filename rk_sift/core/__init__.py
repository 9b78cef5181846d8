"""
Core functionality for rk-sift.
"""

from rk_sift.core.base import MembershipFilter
from rk_sift.core.hash import fnv1a_32, key_to_bytes, murmurhash3_32
from rk_sift.core.modular import BASE, PRIME, madd, mmul, msub

__all__ = [
    # Base classes
    "MembershipFilter",
    # Modular arithmetic
    "PRIME",
    "BASE",
    "madd",
    "msub",
    "mmul",
    # Hash mixing
    "murmurhash3_32",
    "fnv1a_32",
    "key_to_bytes",
]
