"""
Modular arithmetic primitives for rk-sift.

Every Rabin-Karp hash in the library lives in the range [0, PRIME). The
helpers below keep all intermediate values inside that range, so the
largest product ever formed is (PRIME - 1) ** 2, which must fit a signed
64-bit accumulator. Python integers never overflow, but holding to the
64-bit bound keeps hash values identical to fixed-width implementations.
"""

# Largest prime usable as modulus is bounded by the accumulator width.
PRIME = 961748941

# Radix of the polynomial hash: one digit per byte.
BASE = 256

ACCUMULATOR_BITS = 63

if (PRIME - 1) ** 2 >= 1 << ACCUMULATOR_BITS:
    raise ValueError(
        f"Modulus {PRIME} is too large: (PRIME - 1)^2 does not fit "
        f"in a {ACCUMULATOR_BITS}-bit accumulator"
    )


def madd(a: int, b: int) -> int:
    """Return (a + b) mod PRIME for a, b in [0, PRIME)."""
    return (a + b) % PRIME


def msub(a: int, b: int) -> int:
    """
    Return (a - b) mod PRIME for a, b in [0, PRIME).

    The result is always non-negative: when b is larger than a the
    difference wraps around by adding PRIME.
    """
    if a >= b:
        return a - b
    return a + PRIME - b


def mmul(a: int, b: int) -> int:
    """Return (a * b) mod PRIME for a, b in [0, PRIME)."""
    return (a * b) % PRIME
