"""
Benchmarks for the induction lab physics core.

Run directly:
    python benchmarks/benchmark_performance.py
"""

__all__ = [
    "run_benchmark_suite",
    "benchmark_flux",
    "benchmark_snapshot",
]


def __getattr__(name):
    """Lazy import so the package imports without numpy loaded."""
    if name in __all__:
        from . import benchmark_performance
        return getattr(benchmark_performance, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
