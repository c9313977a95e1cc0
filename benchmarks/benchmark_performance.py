"""
Performance benchmarks for the induction lab.

Measures:
- Flux evaluations per second for various integration grid sizes
- Full snapshot() rate (flux + averaged field + derivative + Lenz)

Usage:
    python benchmarks/benchmark_performance.py
"""

import sys
import time
from pathlib import Path

# Add src to path
_project_root = Path(__file__).parent.parent
sys.path.insert(0, str(_project_root / "src"))

from induction_lab.flux import flux_through_coil
from induction_lab.measurement import snapshot
from induction_lab.state import CoilState, FaradayLabState, MagnetState, Vector2D


def create_state(samples: int) -> FaradayLabState:
    """Magnet approaching an untilted coil, as in the default lab."""
    return FaradayLabState(
        magnet=MagnetState(position=Vector2D(-0.5, 0.0), velocity=Vector2D(1.0, 0.0)),
        coil=CoilState(position=Vector2D(0.0, 0.0)),
        integration_samples=samples,
    )


def benchmark_flux(samples: int, n_evals: int = 2000, warmup: int = 100) -> dict:
    """
    Benchmark flux_through_coil.

    Args:
        samples: Grid points per axis.
        n_evals: Evaluations to time.
        warmup: Untimed evaluations.

    Returns:
        Dict with timing results.
    """
    state = create_state(samples)
    x = state.magnet.position.x

    for _ in range(warmup):
        flux_through_coil(state.coil, Vector2D(x, 0.0), 1.0, samples)

    start_time = time.perf_counter()
    for i in range(n_evals):
        flux_through_coil(state.coil, Vector2D(x + i * 1e-5, 0.0), 1.0, samples)
    elapsed = time.perf_counter() - start_time

    return {
        "samples": samples,
        "n_evals": n_evals,
        "elapsed_sec": elapsed,
        "evals_per_sec": n_evals / elapsed,
        "microseconds_per_eval": (elapsed / n_evals) * 1e6,
    }


def benchmark_snapshot(samples: int, n_ticks: int = 1000) -> dict:
    """
    Benchmark snapshot() with a growing flux history, as the controller
    drives it.
    """
    state = create_state(samples)
    dt = 1.0 / 60.0

    start_time = time.perf_counter()
    for _ in range(n_ticks):
        state = state.evolve(time=state.time + dt)
        m = snapshot(state, dt)
        state = state.evolve(history=state.history.extended(m.flux, state.time))
    elapsed = time.perf_counter() - start_time

    return {
        "samples": samples,
        "n_ticks": n_ticks,
        "elapsed_sec": elapsed,
        "ticks_per_sec": n_ticks / elapsed,
    }


def run_benchmark_suite():
    """Run full benchmark suite and print results."""
    print("=" * 70)
    print("INDUCTION LAB PERFORMANCE BENCHMARK")
    print("=" * 70)
    print()

    sample_counts = [10, 20, 30, 40, 50]
    target_fps = 60

    print("FLUX INTEGRATION")
    print("-" * 70)
    print(f"{'Samples':>10} {'Evals/sec':>15} {'us/eval':>15}")
    print("-" * 70)

    flux_results = []
    for samples in sample_counts:
        result = benchmark_flux(samples)
        flux_results.append(result)
        print(f"{samples:>10} {result['evals_per_sec']:>15.1f} {result['microseconds_per_eval']:>15.1f}")

    print()
    print("SNAPSHOT")
    print("-" * 70)
    print(f"{'Samples':>10} {'Ticks/sec':>15} {'Status':>15}")
    print("-" * 70)

    snapshot_results = []
    for samples in sample_counts:
        result = benchmark_snapshot(samples)
        snapshot_results.append(result)
        status = "Realtime" if result["ticks_per_sec"] >= target_fps else "Too slow"
        print(f"{samples:>10} {result['ticks_per_sec']:>15.1f} {status:>15}")

    print()
    print("=" * 70)
    slowest = min(r["ticks_per_sec"] for r in snapshot_results)
    print(f"Interactive requirement: {target_fps} ticks/sec")
    if slowest >= target_fps:
        print("Status: PASS - Sufficient for interactive use")
    else:
        print("Status: WARNING - Large grids may drop frames")
    print("=" * 70)

    return flux_results, snapshot_results


if __name__ == "__main__":
    run_benchmark_suite()
