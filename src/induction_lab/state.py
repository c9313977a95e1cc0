"""
Lab state representation.

Two independent scenarios share this module:
    - Faraday (mode A): a point dipole moving near a tilted circular coil.
    - Current-to-field (mode B): a DC circuit driving a solenoid.

Units:
    - Positions: m
    - Velocities: m/s
    - Field: T
    - Time: s
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Sequence

import numpy as np

from .constants import DEFAULT_INTEGRATION_SAMPLES, HISTORY_SIZE


class LabMode(Enum):
    """Which of the two lab pipelines is active."""
    FARADAY = "faraday"
    CURRENT_TO_FIELD = "currentToField"


@dataclass(frozen=True)
class Vector2D:
    """Immutable 2D vector (m or T depending on context)."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vector2D") -> "Vector2D":
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2D") -> "Vector2D":
        return Vector2D(self.x - other.x, self.y - other.y)

    def scaled(self, factor: float) -> "Vector2D":
        return Vector2D(self.x * factor, self.y * factor)

    def dot(self, other: "Vector2D") -> float:
        return self.x * other.x + self.y * other.y

    def norm(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.x * self.x + self.y * self.y)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)

    @classmethod
    def zero(cls) -> "Vector2D":
        return cls(0.0, 0.0)


@dataclass(frozen=True)
class MagnetState:
    """
    Point dipole source.

    Attributes:
        position: Dipole position in m.
        velocity: Dipole velocity in m/s.
    """
    position: Vector2D = field(default_factory=lambda: Vector2D(-1.0, 0.0))
    velocity: Vector2D = field(default_factory=Vector2D.zero)

    @property
    def speed(self) -> float:
        return self.velocity.norm()


@dataclass(frozen=True)
class CoilState:
    """
    Circular pickup coil.

    Attributes:
        position: Coil centre in m.
        radius: Coil radius in m.
        turns: Number of turns N.
        angle: Tilt θ in radians (0 means the normal points along +y).
        resistance: Coil resistance in Ω.
    """
    position: Vector2D = field(default_factory=Vector2D.zero)
    radius: float = 0.1
    turns: int = 10
    angle: float = 0.0
    resistance: float = 5.0

    @property
    def normal(self) -> Vector2D:
        """Unit normal of the coil plane."""
        return Vector2D(math.sin(self.angle), math.cos(self.angle))


def turn_density(turns: float, length: float) -> float:
    """n = N / L, 0 for a non-positive length."""
    if length <= 0:
        return 0.0
    return turns / length


@dataclass(frozen=True)
class SolenoidState:
    """
    Solenoid geometry.

    Turn density is derived, never stored: n = N / L.
    """
    length: float = 0.5
    turns: int = 100
    radius: float = 0.05
    polarity: int = 1
    use_end_effects: bool = False

    @property
    def turn_density(self) -> float:
        """Turns per metre, 0 for a degenerate length."""
        return turn_density(self.turns, self.length)


@dataclass(frozen=True)
class CircuitState:
    """
    DC drive circuit for the solenoid.

    Current is derived, never stored: I = V / R_total.
    """
    voltage: float = 5.0
    resistance: float = 5.0

    @property
    def current(self) -> float:
        if self.resistance <= 0:
            return 0.0
        return self.voltage / self.resistance


@dataclass(frozen=True)
class FluxHistory:
    """
    Bounded window of (smoothed flux, timestamp) samples, oldest first.

    The window is a value: extending it returns a new instance and never
    touches the original. Flux and time sequences always have equal length.
    """
    flux: tuple = ()
    times: tuple = ()
    maxlen: int = HISTORY_SIZE

    def __post_init__(self):
        if len(self.flux) != len(self.times):
            raise ValueError(
                f"flux and times must have equal length "
                f"({len(self.flux)} != {len(self.times)})"
            )
        object.__setattr__(self, "flux", tuple(float(v) for v in self.flux))
        object.__setattr__(self, "times", tuple(float(v) for v in self.times))

    def __len__(self) -> int:
        return len(self.flux)

    @property
    def is_empty(self) -> bool:
        return len(self.flux) == 0

    @property
    def last_flux(self) -> float:
        """Most recent smoothed flux, 0.0 when empty."""
        return self.flux[-1] if self.flux else 0.0

    def unbounded_extended(self, flux: float, t: float) -> tuple[tuple, tuple]:
        """Append-then-compute view: (flux_seq, time_seq) with no eviction."""
        return self.flux + (float(flux),), self.times + (float(t),)

    def extended(self, flux: float, t: float) -> "FluxHistory":
        """New window with the sample appended and the oldest dropped."""
        new_flux, new_times = self.unbounded_extended(flux, t)
        return FluxHistory(
            flux=new_flux[-self.maxlen:],
            times=new_times[-self.maxlen:],
            maxlen=self.maxlen,
        )

    @classmethod
    def from_sequences(
        cls,
        flux: Sequence[float],
        times: Sequence[float],
        maxlen: int = HISTORY_SIZE
    ) -> "FluxHistory":
        """Build a window from plain sequences, keeping the newest maxlen."""
        return cls(flux=tuple(flux)[-maxlen:], times=tuple(times)[-maxlen:], maxlen=maxlen)


@dataclass(frozen=True)
class FaradayLabState:
    """
    Complete input of one mode A evaluation.

    Attributes:
        magnet: Dipole position and velocity.
        coil: Coil geometry and resistance.
        load_resistance: External load in Ω.
        dipole_moment: Dipole strength m in A·m².
        integration_samples: Grid steps per dimension for flux integration.
        smoothing_enabled: Apply exponential smoothing to flux.
        history: Smoothed flux window from previous ticks.
        time: Simulated time in s.
    """
    magnet: MagnetState = field(default_factory=MagnetState)
    coil: CoilState = field(default_factory=CoilState)
    load_resistance: float = 0.0
    dipole_moment: float = 1.0
    integration_samples: int = DEFAULT_INTEGRATION_SAMPLES
    smoothing_enabled: bool = True
    history: FluxHistory = field(default_factory=FluxHistory)
    time: float = 0.0

    @property
    def total_resistance(self) -> float:
        return self.coil.resistance + self.load_resistance

    def evolve(self, **changes) -> "FaradayLabState":
        """Copy with the given fields replaced."""
        return replace(self, **changes)


@dataclass(frozen=True)
class SolenoidLabState:
    """Complete input of one mode B evaluation."""
    solenoid: SolenoidState = field(default_factory=SolenoidState)
    circuit: CircuitState = field(default_factory=CircuitState)
    time: float = 0.0

    def evolve(self, **changes) -> "SolenoidLabState":
        """Copy with the given fields replaced."""
        return replace(self, **changes)
