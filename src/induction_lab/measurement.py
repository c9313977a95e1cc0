"""
Single source of truth for measurements.

snapshot() and snapshot_b() turn one lab state into one immutable record.
Live display, charts, the recorded table and file export all read these
records, so every consumer sees the same numbers for a given state.

Both functions are pure. snapshot() reads the caller's flux history and
computes with an extended copy; persisting the extension for the next tick
is the caller's job (see FluxHistory.extended).
"""

from dataclasses import asdict, dataclass, fields
from typing import Union

from .derivatives import backward_difference_rate, smooth_value
from .field_model import solenoid_axial_field
from .flux import average_field_over_coil, flux_through_coil
from .induction import Direction, FluxChange, induced_current, induced_emf, lenz_direction
from .state import FaradayLabState, LabMode, SolenoidLabState


@dataclass(frozen=True)
class Measurement:
    """
    One Faraday-lab tick, fully self-contained.

    Units: s, m, m/s, rad, Ω, T, Wb, Wb/s, V, A.
    """
    timestamp: float
    delta_t: float
    magnet_x: float
    magnet_y: float
    velocity_x: float
    velocity_y: float
    speed: float
    turns: int
    radius: float
    angle: float
    coil_resistance: float
    load_resistance: float
    total_resistance: float
    magnetic_field_x: float
    magnetic_field_y: float
    magnetic_field_mag: float
    flux: float
    flux_rate: float
    emf: float
    current: float
    direction: Direction
    flux_change: FluxChange
    lenz_explanation: str

    def to_dict(self) -> dict:
        """Field-ordered plain dict (export order)."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Measurement":
        names = [f.name for f in fields(cls)]
        return cls(**{name: data[name] for name in names})


@dataclass(frozen=True)
class MeasurementB:
    """
    One solenoid-lab tick.

    Mode B is steady-state DC, so delta_t is always 0.
    """
    timestamp: float
    delta_t: float
    voltage: float
    resistance: float
    current: float
    length: float
    turns: int
    turn_density: float
    radius: float
    magnetic_field: float
    polarity: int

    def to_dict(self) -> dict:
        """Field-ordered plain dict (export order)."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "MeasurementB":
        names = [f.name for f in fields(cls)]
        return cls(**{name: data[name] for name in names})


AnyMeasurement = Union[Measurement, MeasurementB]


def snapshot(state: FaradayLabState, dt: float) -> Measurement:
    """
    Complete Faraday-lab measurement for the current state.

    Args:
        state: Lab inputs including the flux history from previous ticks.
        dt: Time since the previous tick in s (recorded, not integrated).

    Returns:
        Measurement whose every field derives from this one evaluation.
    """
    coil = state.coil
    magnet = state.magnet

    raw_flux = flux_through_coil(coil, magnet.position, state.dipole_moment, state.integration_samples)

    # First tick seeds the smoother with the raw value
    flux = raw_flux
    if state.smoothing_enabled and not state.history.is_empty:
        flux = smooth_value(raw_flux, state.history.last_flux)

    flux_seq, time_seq = state.history.unbounded_extended(flux, state.time)
    flux_rate = backward_difference_rate(flux_seq, time_seq)

    emf = induced_emf(flux_rate, coil.turns)
    total_resistance = state.total_resistance
    current = induced_current(emf, total_resistance)
    lenz = lenz_direction(flux_rate, emf)

    b_avg = average_field_over_coil(coil, magnet.position, state.dipole_moment, state.integration_samples)

    return Measurement(
        timestamp=state.time,
        delta_t=dt,
        magnet_x=magnet.position.x,
        magnet_y=magnet.position.y,
        velocity_x=magnet.velocity.x,
        velocity_y=magnet.velocity.y,
        speed=magnet.speed,
        turns=coil.turns,
        radius=coil.radius,
        angle=coil.angle,
        coil_resistance=coil.resistance,
        load_resistance=state.load_resistance,
        total_resistance=total_resistance,
        magnetic_field_x=b_avg.x,
        magnetic_field_y=b_avg.y,
        magnetic_field_mag=b_avg.norm(),
        flux=flux,
        flux_rate=flux_rate,
        emf=emf,
        current=current,
        direction=lenz.direction,
        flux_change=lenz.flux_change,
        lenz_explanation=lenz.explanation,
    )


def snapshot_b(state: SolenoidLabState, dt: float) -> MeasurementB:
    """
    Complete solenoid-lab measurement.

    I = V / R_total, n = N / L, B = polarity * μ₀ n |I| at the centre.

    Args:
        state: Solenoid and circuit inputs.
        dt: Ignored; mode B records delta_t = 0.
    """
    solenoid = state.solenoid
    current = state.circuit.current

    b_magnitude = solenoid_axial_field(
        0.0,
        solenoid.length,
        abs(current),
        solenoid.turns,
        solenoid.use_end_effects,
    )

    return MeasurementB(
        timestamp=state.time,
        delta_t=0.0,
        voltage=state.circuit.voltage,
        resistance=state.circuit.resistance,
        current=current,
        length=solenoid.length,
        turns=solenoid.turns,
        turn_density=solenoid.turn_density,
        radius=solenoid.radius,
        magnetic_field=b_magnitude * solenoid.polarity,
        polarity=solenoid.polarity,
    )


def snapshot_for(
    mode: LabMode,
    state: Union[FaradayLabState, SolenoidLabState],
    dt: float
) -> AnyMeasurement:
    """Dispatch to the snapshot function of the given lab mode."""
    if mode is LabMode.FARADAY:
        return snapshot(state, dt)
    if mode is LabMode.CURRENT_TO_FIELD:
        return snapshot_b(state, dt)
    raise ValueError(f"Unknown lab mode: {mode}")
