"""
Numerical flux integration over a tilted circular coil.

The coil disk is sampled on a uniform Cartesian grid in coil-local
coordinates:
    local = -R + i * step,  step = 2R / samples,  i = 0 .. samples-1
Grid points farther than R from the centre are rejected (circular mask over
the square grid, about π/4 of the points survive). Kept points are rotated
into world space by the coil tilt and the dipole field is evaluated there.

    Φ = N * Σ (B · n̂) dA,   dA = step²,   n̂ = (sin θ, cos θ)

The area element is not corrected for cells cut by the boundary; the error
shrinks as the sample count grows.

Units:
    - Length: m
    - Field: T
    - Flux: Wb
"""

import numpy as np

from .constants import DEFAULT_INTEGRATION_SAMPLES
from .field_model import dipole_field_grid
from .state import CoilState, Vector2D


def coil_sample_points(coil: CoilState, samples: int) -> tuple[np.ndarray, np.ndarray, float]:
    """
    World coordinates of the masked integration grid.

    Args:
        coil: Coil geometry.
        samples: Grid steps per dimension.

    Returns:
        (world_x, world_y, dA). Both arrays are empty when no grid point
        passes the mask (samples <= 0 or a negative radius).
    """
    if samples <= 0:
        empty = np.empty(0, dtype=np.float64)
        return empty, empty, 0.0

    step = (2 * coil.radius) / samples
    offsets = -coil.radius + np.arange(samples, dtype=np.float64) * step

    # Index order matches an i (x) outer / j (y) inner loop
    local_x, local_y = np.meshgrid(offsets, offsets, indexing="ij")
    local_x = local_x.ravel()
    local_y = local_y.ravel()

    dist = np.sqrt(local_x * local_x + local_y * local_y)
    inside = ~(dist > coil.radius)
    local_x = local_x[inside]
    local_y = local_y[inside]

    cos_a = np.cos(coil.angle)
    sin_a = np.sin(coil.angle)
    world_x = coil.position.x + local_x * cos_a - local_y * sin_a
    world_y = coil.position.y + local_x * sin_a + local_y * cos_a

    return world_x, world_y, step * step


def average_field_over_coil(
    coil: CoilState,
    magnet_pos: Vector2D,
    dipole_moment: float = 1.0,
    samples: int = DEFAULT_INTEGRATION_SAMPLES
) -> Vector2D:
    """
    Arithmetic mean of the dipole field over the coil disk.

    Display-only estimate of "B at the coil".

    Returns:
        Mean field vector in T; zero vector when no grid point is kept.
    """
    world_x, world_y, _ = coil_sample_points(coil, samples)
    if world_x.size == 0:
        return Vector2D(0.0, 0.0)

    bx, by = dipole_field_grid(world_x, world_y, magnet_pos, dipole_moment)
    return Vector2D(float(np.sum(bx) / bx.size), float(np.sum(by) / by.size))


def flux_through_coil(
    coil: CoilState,
    magnet_pos: Vector2D,
    dipole_moment: float = 1.0,
    samples: int = DEFAULT_INTEGRATION_SAMPLES
) -> float:
    """
    Total flux linked by the coil, N * ∫∫ B · n̂ dA.

    Args:
        coil: Coil geometry (turn count multiplies the result).
        magnet_pos: Dipole position in m.
        dipole_moment: Dipole moment in A·m².
        samples: Grid steps per dimension.

    Returns:
        Flux in Wb; 0.0 when no grid point is kept.
    """
    world_x, world_y, d_area = coil_sample_points(coil, samples)
    if world_x.size == 0:
        return 0.0

    bx, by = dipole_field_grid(world_x, world_y, magnet_pos, dipole_moment)
    normal = coil.normal
    b_dot_n = bx * normal.x + by * normal.y

    return float(coil.turns * np.sum(b_dot_n * d_area))
