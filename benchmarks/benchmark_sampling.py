#!/usr/bin/env python
"""
Benchmark script comparing ETF and Ziggurat normal samplers.
"""

import time

import numpy as np

from etfdist.distributions import (
    EtfChiSquaredDistribution,
    EtfChiSquaredLowDofDistribution,
    EtfNormalDistribution,
    ZigguratNormalDistribution,
)
from etfdist.rng import BitGeneratorSource
from etfdist.validation import time_distribution


def benchmark(name, dist, bit_generator, n_iter, n_runs=3, vectorized=False):
    """Time a distribution and print the time per sample."""
    result = time_distribution(
        dist,
        BitGeneratorSource(bit_generator),
        n_iter=n_iter,
        n_runs=n_runs,
        name=name,
        vectorized=vectorized,
    )
    print(f"  {name:<45} {result.ns_per_sample:10.1f} ns/sample")
    return result


def main():
    print("=" * 70)
    print("ETF SAMPLING BENCHMARK")
    print("=" * 70)

    # Scalar draws, one Python call per variate
    print("\n" + "-" * 70)
    print("Scalar draws (n_iter=10,000)")
    print("-" * 70)

    benchmark("ziggurat normal (32-bit)", ZigguratNormalDistribution(32), np.random.MT19937(0), 10_000)
    benchmark("ETF normal (32-bit)", EtfNormalDistribution(width=32, n_bits=7), np.random.MT19937(0), 10_000)
    benchmark("ziggurat normal (64-bit)", ZigguratNormalDistribution(64), np.random.PCG64(0), 10_000)
    benchmark("ETF normal (64-bit)", EtfNormalDistribution(width=64, n_bits=7), np.random.PCG64(0), 10_000)

    # Vectorised draws
    print("\n" + "-" * 70)
    print("Vectorised draws (n_iter=1,000,000)")
    print("-" * 70)

    benchmark(
        "ETF normal (64-bit)",
        EtfNormalDistribution(width=64, n_bits=7),
        np.random.PCG64(0),
        1_000_000,
        vectorized=True,
    )
    benchmark(
        "ETF chi-squared, k=1",
        EtfChiSquaredLowDofDistribution(1.0, 1e-4, 10.0),
        np.random.PCG64(0),
        1_000_000,
        vectorized=True,
    )
    for k, xtail in [(2.0, 10.0), (5.0, 16.0), (12.0, 28.0)]:
        benchmark(
            f"ETF chi-squared, k={k:g}",
            EtfChiSquaredDistribution(k, xtail),
            np.random.PCG64(0),
            1_000_000,
            vectorized=True,
        )

    rng = np.random.default_rng(0)
    print("\nReference (NumPy standard_normal, 1,000,000 draws):")
    start = time.perf_counter()
    rng.standard_normal(1_000_000)
    print(f"  {'numpy normal':<45} {1e9 * (time.perf_counter() - start) / 1_000_000:10.1f} ns/sample")


if __name__ == "__main__":
    main()
