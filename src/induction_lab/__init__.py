"""
Induction Lab

Physics core and headless tooling for an electromagnetism lab:
    - Mode A: EMF induced in a coil by a moving magnetic dipole (Faraday/Lenz)
    - Mode B: axial field of a DC-driven solenoid

Units (SI throughout):
    - Length: m
    - Time: s
    - Field: T
    - Flux: Wb
    - EMF: V
    - Current: A
    - Resistance: Ω
"""

__version__ = "0.2.0"

# Physics core
from .state import (
    LabMode,
    Vector2D,
    MagnetState,
    CoilState,
    SolenoidState,
    CircuitState,
    FluxHistory,
    FaradayLabState,
    SolenoidLabState,
)
from .field_model import dipole_field, solenoid_axial_field, turn_density
from .flux import average_field_over_coil, flux_through_coil
from .derivatives import smooth_value, backward_difference_rate, flux_rate_central
from .induction import LenzResult, induced_emf, induced_current, lenz_direction
from .measurement import Measurement, MeasurementB, snapshot, snapshot_b, snapshot_for

# State owner and sessions
from .controller import LabController, ControllerState
from .runner import SessionRunner, SessionResult, run_session

# Config exports
from .config import (
    LabConfig,
    MagnetConfig,
    CoilConfig,
    MotionConfig,
    IntegrationConfig,
    SolenoidConfig,
    CircuitConfig,
    SessionConfig,
    OutputConfig,
    load_config,
)
