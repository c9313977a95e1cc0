"""
Magnet motion schedules for the Faraday lab.

Each schedule maps (current magnet state, previous position, simulated
time, Δt) to the magnet state for the next tick.

Units:
    - Position: m
    - Velocity: m/s
    - Time: s
"""

import math

from .config import MotionConfig
from .state import MagnetState, Vector2D


class ConstantVelocityMotion:
    """
    Magnet glides along +x at a fixed speed.

    Position advances with the velocity held before this tick, then the
    velocity is set to the configured speed.
    """

    name = "constant"

    def __init__(self, speed_m_per_s: float):
        self.speed = speed_m_per_s

    def advance(self, magnet: MagnetState, previous_position: Vector2D, t: float, dt: float) -> MagnetState:
        position = magnet.position + magnet.velocity.scaled(dt)
        return MagnetState(position=position, velocity=Vector2D(self.speed, 0.0))


class SinusoidalMotion:
    """
    Magnet oscillates on the x axis.

        x(t) = A sin(2πft),  v(t) = 2πfA cos(2πft)

    Evaluated at the simulated time before this tick advances it.
    """

    name = "sinusoidal"

    def __init__(self, amplitude_m: float, frequency_hz: float):
        self.amplitude = amplitude_m
        self.frequency = frequency_hz

    def position_at(self, t: float) -> Vector2D:
        return Vector2D(self.amplitude * math.sin(2 * math.pi * self.frequency * t), 0.0)

    def velocity_at(self, t: float) -> Vector2D:
        omega = 2 * math.pi * self.frequency
        return Vector2D(omega * self.amplitude * math.cos(omega * t), 0.0)

    def advance(self, magnet: MagnetState, previous_position: Vector2D, t: float, dt: float) -> MagnetState:
        return MagnetState(position=self.position_at(t), velocity=self.velocity_at(t))


class ManualMotion:
    """
    Position is set from outside (dragging); velocity is inferred from the
    displacement since the previous tick.
    """

    name = "manual"

    def advance(self, magnet: MagnetState, previous_position: Vector2D, t: float, dt: float) -> MagnetState:
        if dt <= 0:
            return magnet
        displacement = magnet.position - previous_position
        return MagnetState(position=magnet.position, velocity=displacement.scaled(1.0 / dt))


def create_motion(config: MotionConfig):
    """
    Factory function to create a motion schedule.

    Args:
        config: Motion configuration.

    Returns:
        Motion schedule object.
    """
    if config.mode == "constant":
        return ConstantVelocityMotion(config.speed_m_per_s)
    elif config.mode == "sinusoidal":
        return SinusoidalMotion(config.speed_m_per_s, config.frequency_hz)
    elif config.mode == "manual":
        return ManualMotion()
    else:
        raise ValueError(f"Unknown motion mode: {config.mode}")
