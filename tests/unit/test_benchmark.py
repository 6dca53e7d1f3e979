"""
Tests for the benchmark helpers.
"""

import logging

import pytest
from memtree.core.config import TreeConfig
from memtree.utils.benchmark import BenchmarkResult, benchmark, benchmark_trees, run_all_benchmarks


class TestBenchmarkFramework:
    """benchmark()"""

    def test_counts_calls(self):
        """Warmup and timed iterations both call the function."""
        calls = []
        result = benchmark("noop", lambda: calls.append(1), iterations=5, warmup=2)
        assert len(calls) == 7
        assert result.iterations == 5
        assert result.min_time_ms <= result.avg_time_ms <= result.max_time_ms

    def test_rejects_zero_iterations(self):
        """At least one timed iteration is required."""
        with pytest.raises(ValueError):
            benchmark("noop", lambda: None, iterations=0)


class TestTreeBenchmarks:
    """benchmark_trees / run_all_benchmarks"""

    def test_tree_sections(self):
        """Both variants, proof generation and verification are timed."""
        results = benchmark_trees(TreeConfig(depth=2, arity=2))
        assert [r.name for r in results] == [
            "Fixed tree build (4 leaves)",
            "Incremental insert (4 leaves)",
            "Proof generation",
            "Local verification",
        ]

    def test_custom_sentinel_is_used(self, caplog):
        """The zero sentinel of the config reaches the run."""
        config = TreeConfig(depth=1, arity=2, zero_sentinel=1)
        with caplog.at_level(logging.INFO, logger="memtree.benchmark"):
            results = run_all_benchmarks(config)
        assert all(isinstance(r, BenchmarkResult) for r in results)
        assert "zero=1" in caplog.text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
