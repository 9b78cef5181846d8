"""
Rabin-Karp Matching Demo for rk-sift.

This example counts pattern occurrences with the exact Rabin-Karp matcher,
then builds a Bloom filter of document window hashes and uses it to skip
scans for patterns that cannot occur.
"""

import logging
import random
import time

from rk_sift import RabinKarpMatcher, build_filter, exact_match, filtered_match


def demonstrate_exact_matching():
    """Count occurrences and report the first match offset."""
    print("\n=== Exact Matching Demo ===")

    doc = b"ababab"
    for pattern in (b"ab", b"ba", b"abc", b"b"):
        result = exact_match(pattern, doc)
        print(
            f"  {pattern!r} in {doc!r}: count={result.count}, "
            f"first_index={result.first_index}"
        )

    # Text is matched as UTF-8, offsets are in bytes
    result = exact_match("b", "éb")
    print(f"  'b' in 'éb': count={result.count}, first byte offset={result.first_index}")


def demonstrate_matcher_stats():
    """Reuse one matcher across documents and inspect its statistics."""
    print("\n=== Reusable Matcher Demo ===")

    matcher = RabinKarpMatcher(b"needle")
    matcher.enable_performance_tracking()
    documents = [
        b"haystack with a needle in it",
        b"no match here",
        b"needle needle needle",
    ]
    for doc in documents:
        print(f"  {doc!r}: {matcher.match(doc)}")

    stats = matcher.get_stats()
    print(f"  Scans: {stats['scans']}")
    print(f"  Windows hashed: {stats['totals']['windows']:,}")
    print(f"  Hash hits: {stats['totals']['hash_hits']}")
    print(f"  Spurious hits: {stats['totals']['spurious_hits']}")
    print(f"  Average scan time: {stats['avg_scan_time_ns']:,.0f} ns")


def demonstrate_filtered_matching():
    """Build a filter once and query it with many patterns."""
    print("\n=== Filter-Accelerated Matching Demo ===")

    rng = random.Random(42)
    doc = bytes(rng.choice(b"acgt") for _ in range(200_000))
    m = 12

    start = time.perf_counter()
    doc_filter = build_filter(doc, m, false_positive_rate=0.001)
    build_time = time.perf_counter() - start

    stats = doc_filter.get_stats()
    print(f"  Document length: {len(doc):,} bytes")
    print(f"  Windows indexed: {stats['windows']:,}")
    print(f"  Filter size: {doc_filter.bit_size:,} bits, {doc_filter.hash_count} hashes")
    print(f"  Build time: {build_time:.3f} s")

    present = [doc[i : i + m] for i in rng.sample(range(len(doc) - m), 20)]
    absent = [bytes(rng.choice(b"ACGT") for _ in range(m)) for _ in range(20)]

    for label, patterns in (("present", present), ("absent", absent)):
        start = time.perf_counter()
        filtered = [filtered_match(p, doc, doc_filter) for p in patterns]
        filtered_time = time.perf_counter() - start

        start = time.perf_counter()
        exact = [exact_match(p, doc) for p in patterns]
        exact_time = time.perf_counter() - start

        assert filtered == exact
        print(
            f"  {len(patterns)} {label} patterns: filtered {filtered_time:.3f} s, "
            f"exact {exact_time:.3f} s"
        )


def demonstrate_serialization():
    """Save a document filter and restore it elsewhere."""
    print("\n=== Serialization Demo ===")

    doc = b"the quick brown fox jumps over the lazy dog"
    doc_filter = build_filter(doc, 5, seed=7)
    payload = doc_filter.serialize(format="binary")
    restored = type(doc_filter).deserialize(payload, format="binary")

    print(f"  Serialized size: {len(payload):,} bytes")
    print(f"  Restored window length: {restored.window_length}")
    for pattern in (b"brown", b"lazy ", b"zebra"):
        print(f"  {pattern!r} may occur: {restored.might_contain(pattern)}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    demonstrate_exact_matching()
    demonstrate_matcher_stats()
    demonstrate_filtered_matching()
    demonstrate_serialization()
