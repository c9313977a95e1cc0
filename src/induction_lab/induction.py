"""
Faraday and Lenz laws.

    ε = -N dΦ/dt
    I = ε / R_total

Direction convention: the observer looks along +x (the dipole axis).
Positive EMF drives counterclockwise (CCW) current, negative EMF clockwise
(CW). When the flux is constant there is no physical direction and CW is
reported as the default.
"""

from dataclasses import dataclass
from typing import Literal

from .constants import FLUX_RATE_EPSILON, RESISTANCE_EPSILON_OHM

Direction = Literal["CW", "CCW"]
FluxChange = Literal["increasing", "decreasing", "constant"]

CONSTANT_FLUX_EXPLANATION = "Flux is constant (dΦ/dt ≈ 0). No induced EMF or current."


@dataclass(frozen=True)
class LenzResult:
    """
    Classification of one flux change.

    Attributes:
        direction: Induced current direction viewed from +x.
        flux_change: Regime of the flux change.
        explanation: Human-readable Lenz's law statement for these inputs.
    """
    direction: Direction
    flux_change: FluxChange
    explanation: str


def induced_emf(flux_rate: float, turns: int) -> float:
    """ε = -N dΦ/dt in volts."""
    return -turns * flux_rate


def induced_current(emf: float, total_resistance: float) -> float:
    """I = ε / R_total in amperes; zero for a degenerate circuit."""
    if total_resistance < RESISTANCE_EPSILON_OHM:
        return 0.0
    return emf / total_resistance


def lenz_direction(flux_rate: float, emf: float) -> LenzResult:
    """
    Current direction and Lenz's law explanation.

    Args:
        flux_rate: dΦ/dt in Wb/s.
        emf: Induced EMF in V.

    Returns:
        LenzResult consistent with both inputs.
    """
    if abs(flux_rate) < FLUX_RATE_EPSILON:
        return LenzResult(direction="CW", flux_change="constant", explanation=CONSTANT_FLUX_EXPLANATION)

    direction: Direction = "CCW" if emf > 0 else "CW"

    if flux_rate > 0:
        explanation = (
            "Flux is increasing (dΦ/dt > 0). Induced EMF is negative (ε = -N·dΦ/dt). "
            f"Current flows {direction} (viewed from +x) to oppose the increase in flux (Lenz's Law)."
        )
        return LenzResult(direction=direction, flux_change="increasing", explanation=explanation)

    explanation = (
        "Flux is decreasing (dΦ/dt < 0). Induced EMF is positive (ε = -N·dΦ/dt). "
        f"Current flows {direction} (viewed from +x) to oppose the decrease in flux (Lenz's Law)."
    )
    return LenzResult(direction=direction, flux_change="decreasing", explanation=explanation)
