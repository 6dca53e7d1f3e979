"""
Benchmarks for memtree core components.

Run with: python -m memtree.utils.benchmark
"""

import time
import statistics
from typing import Callable, List, Optional
from dataclasses import dataclass

from memtree.core.config import TreeConfig
from memtree.core.hasher import build_hash_adapter
from memtree.core.proof.verifier import verify
from memtree.core.tree import FixedDepthTree, IncrementalTree
from memtree.utils.logger import get_logger

logger = get_logger("benchmark")


# =============================================================================
# Benchmark Framework
# =============================================================================


@dataclass
class BenchmarkResult:
    """Result of a benchmark run."""
    name: str
    iterations: int
    total_time_ms: float
    avg_time_ms: float
    min_time_ms: float
    max_time_ms: float
    ops_per_sec: float

    def __str__(self) -> str:
        return (
            f"{self.name}: {self.ops_per_sec:.0f} ops/s "
            f"(avg={self.avg_time_ms:.3f}ms, min={self.min_time_ms:.3f}ms, max={self.max_time_ms:.3f}ms)"
        )


def benchmark(
    name: str,
    func: Callable,
    iterations: int = 1000,
    warmup: int = 100,
) -> BenchmarkResult:
    """
    Run a benchmark.

    Args:
        name: Benchmark name
        func: Function to benchmark (no args)
        iterations: Number of iterations
        warmup: Warmup iterations

    Returns:
        BenchmarkResult
    """
    if iterations < 1:
        raise ValueError("iterations must be >= 1")

    # Warmup
    for _ in range(warmup):
        func()

    # Collect timings
    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        func()
        end = time.perf_counter()
        times.append((end - start) * 1000)  # ms

    total = sum(times)
    avg = statistics.mean(times)

    return BenchmarkResult(
        name=name,
        iterations=iterations,
        total_time_ms=total,
        avg_time_ms=avg,
        min_time_ms=min(times),
        max_time_ms=max(times),
        ops_per_sec=1000 / avg if avg > 0 else float("inf"),
    )


# =============================================================================
# Tree Benchmarks
# =============================================================================


def benchmark_hashing(arity: int = 2) -> List[BenchmarkResult]:
    """Benchmark node hashing."""
    hasher = build_hash_adapter(arity)
    children = list(range(1, arity + 1))

    return [
        benchmark(
            f"Poseidon node hash (arity {arity})",
            lambda: hasher.node_hash(children),
            iterations=200,
            warmup=10,
        ),
    ]


def benchmark_trees(config: TreeConfig) -> List[BenchmarkResult]:
    """Benchmark both tree variants over the same full leaf set."""
    results = []
    hasher = build_hash_adapter(config.arity)
    # Distinct leaves that never collide with the sentinel
    leaves = [v for v in range(1, config.capacity + 2) if v != config.zero_sentinel][:config.capacity]

    results.append(benchmark(
        f"Fixed tree build ({len(leaves)} leaves)",
        lambda: FixedDepthTree(leaves, config, hasher),
        iterations=5,
        warmup=1,
    ))

    def insert_all():
        tree = IncrementalTree(config, hasher)
        tree.insert_many(leaves)
        return tree

    results.append(benchmark(
        f"Incremental insert ({len(leaves)} leaves)",
        insert_all,
        iterations=5,
        warmup=1,
    ))

    tree = FixedDepthTree(leaves, config, hasher)
    results.append(benchmark(
        "Proof generation",
        lambda: tree.path(0),
        iterations=200,
        warmup=10,
    ))

    proof = tree.path(0)
    results.append(benchmark(
        "Local verification",
        lambda: verify(proof, config, hasher),
        iterations=50,
        warmup=5,
    ))

    return results


# =============================================================================
# Main
# =============================================================================


def run_all_benchmarks(config: Optional[TreeConfig] = None) -> List[BenchmarkResult]:
    """Run all benchmarks, print and return the results."""
    config = config or TreeConfig(depth=4, arity=2)
    logger.info(f"Benchmarking depth={config.depth} arity={config.arity} zero={config.zero_sentinel}")

    print("=" * 60)
    print("memtree Performance Benchmarks")
    print("=" * 60)

    sections = [
        ("Hashing", lambda: benchmark_hashing(config.arity)),
        (f"Merkle Trees (depth {config.depth}, arity {config.arity})", lambda: benchmark_trees(config)),
    ]

    all_results = []
    for section_name, bench_func in sections:
        print(f"\n{section_name}")
        print("-" * 40)
        results = bench_func()
        for r in results:
            print(f"  {r}")
            logger.debug(r)
        all_results.extend(results)

    print("\n" + "=" * 60)
    return all_results


if __name__ == "__main__":
    run_all_benchmarks()
