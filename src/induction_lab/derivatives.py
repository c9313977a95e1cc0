"""
Flux smoothing and rate of change.

Smoothing:
    y_smooth = α * y_current + (1 - α) * y_previous

Rate:
    dΦ/dt ≈ (Φ[n-1] - Φ[n-2]) / (t[n-1] - t[n-2])

The rate is a two-point backward difference over the two newest samples.
The lab has always called it a "central" difference; a true central
difference would need the sample after the evaluation time and hence a
one-tick lag, which it does not take. flux_rate_central is kept as the
historical name for the same computation.

All functions are side-effect free.
"""

from typing import Sequence

from .constants import DT_EPSILON_S, SMOOTHING_ALPHA


def smooth_value(current: float, previous_smoothed: float, alpha: float = SMOOTHING_ALPHA) -> float:
    """
    Exponential smoothing step.

    Args:
        current: New raw value.
        previous_smoothed: Last smoothed value.
        alpha: Smoothing factor in (0, 1]; higher means less smoothing.

    Returns:
        Smoothed value.
    """
    return alpha * current + (1 - alpha) * previous_smoothed


def backward_difference_rate(flux_history: Sequence[float], time_history: Sequence[float]) -> float:
    """
    dΦ/dt from the two most recent samples.

    Args:
        flux_history: Flux values, most recent last.
        time_history: Matching timestamps in s.

    Returns:
        Rate in Wb/s; 0.0 with fewer than two samples or when the two
        newest timestamps are closer than DT_EPSILON_S.
    """
    if len(flux_history) < 2 or len(time_history) < 2:
        return 0.0

    dt = time_history[-1] - time_history[-2]
    if dt < DT_EPSILON_S:
        return 0.0
    return (flux_history[-1] - flux_history[-2]) / dt


flux_rate_central = backward_difference_rate


def two_point_rate(current_flux: float, previous_flux: float, dt: float) -> float:
    """Simple (Φ - Φ_prev) / Δt with the same Δt guard."""
    if dt < DT_EPSILON_S:
        return 0.0
    return (current_flux - previous_flux) / dt
