"""
Physical and numerical constants for the induction lab.

Unit System (Locked):
- Length: meters (m)
- Magnetic field: Tesla (T)
- Flux: Weber (Wb)
- Time: seconds (s)
- Resistance: ohms (Ω)

Every guard threshold used by the physics core lives here so that field,
flux, derivative and induction code share one set of numbers.
"""

import math
from typing import Final

# Permeability of free space (T·m/A)
MU_0: Final[float] = 4.0 * math.pi * 1e-7

# Dipole prefactor μ₀/(4π)
K_DIPOLE: Final[float] = MU_0 / (4.0 * math.pi)

# Numeric guards
MIN_DISTANCE_M: Final[float] = 1e-6  # Field undefined at the source
DT_EPSILON_S: Final[float] = 1e-9  # Minimum Δt in a finite difference
RESISTANCE_EPSILON_OHM: Final[float] = 1e-9  # Degenerate circuit
FLUX_RATE_EPSILON: Final[float] = 1e-9  # Below this flux is "constant"

# Loop-field geometry tolerances
LOOP_AXIS_TOLERANCE_M: Final[float] = 1e-3
LOOP_SEGMENTS: Final[int] = 100

# Smoothing and history
SMOOTHING_ALPHA: Final[float] = 0.3
HISTORY_SIZE: Final[int] = 20

# Simulation loop
MAX_TICK_DT_S: Final[float] = 0.1  # Longer frames are resume-from-suspend
RECORDING_RATE_HZ: Final[float] = 60.0

# Solenoid end-effect taper band, as a fraction of length
END_EFFECT_FRACTION: Final[float] = 0.1

DEFAULT_INTEGRATION_SAMPLES: Final[int] = 20
MAX_INTEGRATION_SAMPLES: Final[int] = 200

# Decimal places written for floats in CSV export
CSV_PRECISION: Final[int] = 6


def validate_constants_consistency() -> bool:
    """
    Verify that the derived constants agree with their definitions.

    Returns:
        True if all checks pass.
    """
    # μ₀/(4π) is exactly 1e-7 T·m/A in the pre-2019 SI definition
    if abs(K_DIPOLE - 1e-7) > 1e-18:
        return False
    if not 0.0 < SMOOTHING_ALPHA <= 1.0:
        return False
    if HISTORY_SIZE < 2:
        return False
    return True


# Self-validation on import
assert validate_constants_consistency(), "Lab constants are inconsistent!"
