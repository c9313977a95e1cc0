"""
Magnetic field sources.

Pure functions, no state, no logging. Every singular point degrades to a
zero field instead of raising.

Sources:
    - Point dipole oriented along +x (Faraday lab).
    - Solenoid on its axis, ideal or with a linear end taper.
    - Long straight wire and circular loop (Biot-Savart primitives).

Dipole field in the 2D plane, θ measured from the +x axis:
    Bx = (μ₀/4π) m (3cos²θ - 1) / r³
    By = (μ₀/4π) m 3cosθ sinθ / r³

Units:
    - Length: m
    - Current: A
    - Dipole moment: A·m²
    - Field: T
"""

import math

import numpy as np

from .constants import (
    END_EFFECT_FRACTION,
    K_DIPOLE,
    LOOP_AXIS_TOLERANCE_M,
    LOOP_SEGMENTS,
    MIN_DISTANCE_M,
    MU_0,
)
from .state import Vector2D, turn_density


def dipole_field(point: Vector2D, magnet_pos: Vector2D, dipole_moment: float = 1.0) -> Vector2D:
    """
    Field of a point dipole at a probe point.

    Args:
        point: Probe position in m.
        magnet_pos: Dipole position in m.
        dipole_moment: Dipole moment m in A·m² (along +x).

    Returns:
        Field vector in T; zero within MIN_DISTANCE_M of the source.
    """
    rx = point.x - magnet_pos.x
    ry = point.y - magnet_pos.y
    r_mag = math.sqrt(rx * rx + ry * ry)

    if r_mag < MIN_DISTANCE_M:
        return Vector2D(0.0, 0.0)

    r3 = r_mag * r_mag * r_mag
    cos_t = rx / r_mag
    sin_t = ry / r_mag

    bx = K_DIPOLE * dipole_moment * (3 * cos_t * cos_t - 1) / r3
    by = K_DIPOLE * dipole_moment * 3 * cos_t * sin_t / r3
    return Vector2D(bx, by)


def dipole_field_grid(
    xs: np.ndarray,
    ys: np.ndarray,
    magnet_pos: Vector2D,
    dipole_moment: float = 1.0
) -> tuple[np.ndarray, np.ndarray]:
    """
    Vectorised dipole_field over arrays of probe coordinates.

    Element-wise identical to dipole_field, including the source guard.

    Returns:
        (bx, by) arrays with the shape of xs.
    """
    rx = np.asarray(xs, dtype=np.float64) - magnet_pos.x
    ry = np.asarray(ys, dtype=np.float64) - magnet_pos.y
    r_mag = np.sqrt(rx * rx + ry * ry)

    near = r_mag < MIN_DISTANCE_M
    safe_r = np.where(near, 1.0, r_mag)
    r3 = safe_r * safe_r * safe_r
    cos_t = rx / safe_r
    sin_t = ry / safe_r

    bx = K_DIPOLE * dipole_moment * (3 * cos_t * cos_t - 1) / r3
    by = K_DIPOLE * dipole_moment * 3 * cos_t * sin_t / r3
    return np.where(near, 0.0, bx), np.where(near, 0.0, by)


def solenoid_axial_field(
    z: float,
    length: float,
    current: float,
    turns: float,
    use_end_effects: bool = False
) -> float:
    """
    Axial field of a solenoid centred on z = 0.

    Ideal mode: B = μ₀ n I for |z| <= L/2, zero outside.
    End-effect mode: the ideal value, tapered linearly to zero within the
    outer END_EFFECT_FRACTION of the length at either end. This is an
    approximation, not the finite-solenoid cosθ₁ + cosθ₂ integral.

    Args:
        z: Axial position in m relative to the centre.
        length: Solenoid length L in m.
        current: Current magnitude I in A (sign applied by the caller).
        turns: Number of turns N.
        use_end_effects: Apply the end taper.

    Returns:
        Field magnitude along the axis in T.
    """
    if length <= 0:
        return 0.0

    n = turn_density(turns, length)
    ideal_b = MU_0 * n * current
    half_length = length / 2

    if not use_end_effects:
        if abs(z) <= half_length:
            return ideal_b
        return 0.0

    distance_from_left = z + half_length
    distance_from_right = half_length - z
    min_distance = min(distance_from_left, distance_from_right)

    band = length * END_EFFECT_FRACTION
    if min_distance < band:
        return ideal_b * (min_distance / band)
    return ideal_b


def straight_wire_field(point: Vector2D, wire_pos: Vector2D, current: float) -> Vector2D:
    """
    Field of a long straight wire running along x.

    |B| = μ₀ I / (2π r) with r the perpendicular distance, directed
    tangentially by the right-hand rule.
    """
    r_perp = abs(point.y - wire_pos.y)
    if r_perp < MIN_DISTANCE_M:
        return Vector2D(0.0, 0.0)

    b_magnitude = MU_0 * current / (2 * math.pi * r_perp)
    sign = -1.0 if point.y > wire_pos.y else 1.0

    dx = point.x - wire_pos.x
    dy = point.y - wire_pos.y
    r_mag = math.sqrt(dx * dx + dy * dy)
    if r_mag < MIN_DISTANCE_M:
        return Vector2D(0.0, 0.0)

    return Vector2D(-sign * b_magnitude * (dy / r_mag), sign * b_magnitude * (dx / r_mag))


def circular_loop_field(
    point: Vector2D,
    center: Vector2D,
    radius: float,
    current: float,
    turns: int
) -> Vector2D:
    """
    Field of an N-turn circular loop whose axis lies along x.

    On the axis the analytic result is used:
        B = μ₀ N I R² / (2 (R² + x²)^(3/2))
    At the centre:
        B = μ₀ N I / (2R), drawn along +y in the plane view.
    Elsewhere the loop is discretised into LOOP_SEGMENTS elements.
    """
    dx = point.x - center.x
    dy = point.y - center.y
    r = math.sqrt(dx * dx + dy * dy)

    if abs(dy) < LOOP_AXIS_TOLERANCE_M and r > 0:
        x = abs(dx)
        b_magnitude = (MU_0 * turns * current * radius * radius) / (
            2 * (radius * radius + x * x) ** 1.5
        )
        direction = 1.0 if dx > 0 else -1.0
        return Vector2D(direction * b_magnitude, 0.0)

    if r < LOOP_AXIS_TOLERANCE_M:
        if radius <= 0:
            return Vector2D(0.0, 0.0)
        return Vector2D(0.0, MU_0 * turns * current / (2 * radius))

    return _loop_field_discretised(point, center, radius, current, turns)


def _loop_field_discretised(
    point: Vector2D,
    center: Vector2D,
    radius: float,
    current: float,
    turns: int
) -> Vector2D:
    """Segment-sum Biot-Savart for off-axis loop points (plane projection)."""
    theta = np.arange(LOOP_SEGMENTS) * (2 * math.pi / LOOP_SEGMENTS)
    d_theta = 2 * math.pi / LOOP_SEGMENTS

    rx = point.x - (center.x + radius * np.cos(theta))
    ry = point.y - (center.y + radius * np.sin(theta))
    r_mag = np.sqrt(rx * rx + ry * ry)
    valid = r_mag >= MIN_DISTANCE_M
    safe_r = np.where(valid, r_mag, 1.0)

    dl_x = -radius * np.sin(theta) * d_theta
    dl_y = radius * np.cos(theta) * d_theta
    cross_z = dl_x * (ry / safe_r) - dl_y * (rx / safe_r)

    db = K_DIPOLE * current * np.abs(cross_z) / (safe_r * safe_r)
    bx = np.where(valid, -db * (ry / safe_r), 0.0)
    by = np.where(valid, db * (rx / safe_r), 0.0)

    return Vector2D(float(np.sum(bx)) * turns, float(np.sum(by)) * turns)
