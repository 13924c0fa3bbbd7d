"""
Benchmark: byte-aligned vs unaligned binary reads, and repetition growth.

Every binary primitive slices only the bytes it touches, so parse time should
grow linearly with input size whatever the bit offset.

Usage:
    python benchmarks/bench_bit_offsets.py
"""

import timeit

from bitparsec.Binary import bits, bytes_, uint
from bitparsec.Combinators import count
from bitparsec.Prim import many, run_parser


def bench_aligned_uint(sizes: list[int], repeats: int = 5) -> dict[int, float]:
    """Benchmark many(uint(16)) on byte-aligned records."""
    parser = many(uint(16, "be"))
    results = {}
    for n in sizes:
        data = b"\x12\x34" * n
        t = timeit.timeit(lambda: run_parser(parser, data), number=repeats)
        results[n] = t / repeats
    return results


def bench_unaligned_uint(sizes: list[int], repeats: int = 5) -> dict[int, float]:
    """Benchmark bits(3) followed by many(uint(16)): every read straddles bytes."""
    parser = bits(3) >> many(uint(16, "be"))
    results = {}
    for n in sizes:
        data = b"\x12\x34" * n + b"\x00"
        t = timeit.timeit(lambda: run_parser(parser, data), number=repeats)
        results[n] = t / repeats
    return results


def bench_single_bits(sizes: list[int], repeats: int = 5) -> dict[int, float]:
    """Benchmark reading a buffer one bit at a time."""
    results = {}
    for n in sizes:
        parser = count(n * 8, bits(1))
        data = b"\xa5" * n
        t = timeit.timeit(lambda: run_parser(parser, data), number=repeats)
        results[n] = t / repeats
    return results


def bench_length_prefixed(sizes: list[int], repeats: int = 5) -> dict[int, float]:
    """Benchmark many(uint(8) >>= bytes_): length-prefixed records."""
    parser = many(uint(8).bind(lambda length: bytes_(length)))
    results = {}
    for n in sizes:
        data = b"\x04abcd" * n
        t = timeit.timeit(lambda: run_parser(parser, data), number=repeats)
        results[n] = t / repeats
    return results


def format_time(seconds: float) -> str:
    if seconds < 1e-3:
        return f"{seconds * 1e6:8.1f} us"
    elif seconds < 1:
        return f"{seconds * 1e3:8.2f} ms"
    else:
        return f"{seconds:8.3f}  s"


def print_results(name: str, results: dict[int, float]) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {name}")
    print(f"{'=' * 60}")
    print(f"  {'Size':>10}  {'Time':>12}  {'Ratio vs smallest':>18}")
    print(f"  {'-'*10}  {'-'*12}  {'-'*18}")

    baseline = list(results.values())[0]
    for size, elapsed in results.items():
        ratio = elapsed / baseline if baseline > 0 else 0
        print(f"  {size:>10,}  {format_time(elapsed)}  {ratio:>17.1f}x")


def main() -> None:
    sizes = [1_000, 5_000, 10_000, 50_000]
    bit_sizes = [100, 500, 1_000, 5_000]

    print("bitparsec Binary Benchmark")
    print("=" * 60)

    suites = [
        ("many(uint(16)) aligned", bench_aligned_uint, sizes),
        ("many(uint(16)) at bit offset 3", bench_unaligned_uint, sizes),
        ("count(bits(1))", bench_single_bits, bit_sizes),
        ("length-prefixed records", bench_length_prefixed, sizes),
    ]

    for name, fn, sz in suites:
        results = fn(sz)
        print_results(name, results)

    print()


if __name__ == "__main__":
    main()
