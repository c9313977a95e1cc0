"""
Lab controller - owns the evolving lab state and drives the snapshot core.

Provides:
    - Per-frame ticking from a wall clock or an explicit Δt
    - Recording on/off with an append-only measurement log per lab mode
    - Magnet dragging and parameter updates

STATE OWNERSHIP GUARANTEES:
    1. snapshot()/snapshot_b() are called exactly once per processed tick
    2. The flux history is extended only here, after the snapshot returns
    3. Simulated time advances only while recording
    4. Frames longer than MAX_TICK_DT_S are dropped, never integrated
    5. Recorded measurements are never modified or removed except by an
       explicit start_recording()/clear_measurements()/reset()
"""

from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from .config import LabConfig, MotionConfig
from .constants import DT_EPSILON_S, MAX_TICK_DT_S
from .exceptions import StateTransitionError
from .measurement import AnyMeasurement, Measurement, MeasurementB, snapshot, snapshot_b
from .motion import ManualMotion, create_motion
from .state import (
    CircuitState,
    CoilState,
    FaradayLabState,
    FluxHistory,
    LabMode,
    MagnetState,
    SolenoidLabState,
    SolenoidState,
    Vector2D,
)
from .utils.logger import Logger


@dataclass(frozen=True)
class ControllerState:
    """Read-only summary of the controller for UI display."""
    mode: LabMode
    time: float
    is_recording: bool
    is_dragging: bool
    motion_mode: str
    n_measurements: int
    n_ticks: int
    n_dropped: int
    latest: Optional[AnyMeasurement]


def faraday_state_from_config(config: LabConfig) -> FaradayLabState:
    """Initial mode A state described by a config."""
    return FaradayLabState(
        magnet=MagnetState(position=Vector2D(config.magnet.x_m, config.magnet.y_m)),
        coil=CoilState(
            position=Vector2D(config.coil.x_m, config.coil.y_m),
            radius=config.coil.radius_m,
            turns=config.coil.turns,
            angle=config.coil.angle_rad,
            resistance=config.coil.resistance_ohm,
        ),
        load_resistance=config.coil.load_resistance_ohm,
        dipole_moment=config.magnet.dipole_moment_Am2,
        integration_samples=config.integration.samples,
        smoothing_enabled=config.integration.smoothing_enabled,
    )


def solenoid_state_from_config(config: LabConfig) -> SolenoidLabState:
    """Initial mode B state described by a config."""
    return SolenoidLabState(
        solenoid=SolenoidState(
            length=config.solenoid.length_m,
            turns=config.solenoid.turns,
            radius=config.solenoid.radius_m,
            polarity=config.solenoid.polarity,
            use_end_effects=config.solenoid.use_end_effects,
        ),
        circuit=CircuitState(
            voltage=config.circuit.voltage_v,
            resistance=config.circuit.resistance_ohm,
        ),
    )


class LabController:
    """
    Time-stepped owner of the lab state.

    The controller is single-threaded: tick() must not be called
    concurrently, since it reads and then replaces the flux history.
    """

    def __init__(self, config: LabConfig, on_state_changed: Optional[Callable[[], None]] = None):
        """
        Initialize controller.

        Args:
            config: Lab configuration (initial state and motion schedule).
            on_state_changed: Callback after every processed tick or command.
        """
        self.config = config
        self._on_state_changed = on_state_changed
        self.sample_interval = 1.0 / config.session.recording_rate_hz
        self._load_initial_state()
        Logger.log(f"LabController initialized in {self.mode.value} mode")

    def _load_initial_state(self) -> None:
        self.mode = self.config.lab_mode
        self.faraday_state = faraday_state_from_config(self.config)
        self.solenoid_state = solenoid_state_from_config(self.config)
        self.motion = create_motion(self.config.motion)

        self.time = 0.0
        self.is_recording = False
        self.is_dragging = False

        self.measurements: List[Measurement] = []
        self.measurements_b: List[MeasurementB] = []
        self.current_measurement: Optional[Measurement] = None
        self.current_measurement_b: Optional[MeasurementB] = None

        self._previous_position = self.faraday_state.magnet.position
        self._last_wallclock: Optional[float] = None
        self.n_ticks = 0
        self.n_dropped = 0

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def tick(self, dt: float) -> Optional[AnyMeasurement]:
        """
        Process one frame.

        Args:
            dt: Wall-clock time since the previous frame in s.

        Returns:
            The new live measurement, or None if the frame was dropped.
        """
        if dt > MAX_TICK_DT_S or dt < 0:
            self.n_dropped += 1
            Logger.log(f"Dropped frame with dt={dt:.4f}s (limit {MAX_TICK_DT_S}s)", Logger.LogPriority.INFO)
            return None

        if self.mode is LabMode.FARADAY:
            measurement = self._tick_faraday(dt)
        else:
            measurement = self._tick_solenoid(dt)

        self.n_ticks += 1
        self._notify_changed()
        return measurement

    def tick_wallclock(self, now_s: float) -> Optional[AnyMeasurement]:
        """
        Process one frame timed by a wall-clock reading in seconds.

        The first reading only starts the clock and is processed with dt = 0.
        """
        dt = 0.0 if self._last_wallclock is None else now_s - self._last_wallclock
        self._last_wallclock = now_s
        return self.tick(dt)

    def _tick_faraday(self, dt: float) -> Measurement:
        state = self.faraday_state
        magnet = state.magnet

        if isinstance(self.motion, ManualMotion) or not self.is_dragging:
            magnet = self.motion.advance(magnet, self._previous_position, self.time, dt)
        self._previous_position = magnet.position

        if self.is_recording:
            self.time += dt

        state = state.evolve(magnet=magnet, time=self.time)
        measurement = snapshot(state, dt)

        # Persist the extended window for the next tick
        self.faraday_state = state.evolve(history=state.history.extended(measurement.flux, self.time))
        self.current_measurement = measurement
        self.current_measurement_b = None

        if self.is_recording:
            self._record(self.measurements, measurement)
        return measurement

    def _tick_solenoid(self, dt: float) -> MeasurementB:
        if self.is_recording:
            self.time += dt

        self.solenoid_state = self.solenoid_state.evolve(time=self.time)
        measurement = snapshot_b(self.solenoid_state, dt)
        self.current_measurement_b = measurement
        self.current_measurement = None

        if self.is_recording:
            self._record(self.measurements_b, measurement)
        return measurement

    def _record(self, log: list, measurement: AnyMeasurement) -> None:
        """Append to the log at no more than the recording rate."""
        last_timestamp = log[-1].timestamp if log else 0.0
        # Accumulated frame time drifts below the interval by rounding
        if measurement.timestamp - last_timestamp >= self.sample_interval - DT_EPSILON_S:
            log.append(measurement)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def start_recording(self, now_s: Optional[float] = None) -> None:
        """
        Start a fresh recording of the active mode.

        Clears that mode's log, resets simulated time to 0 and empties the
        flux history. The other mode's log is kept.
        """
        if self.mode is LabMode.FARADAY:
            self.measurements = []
        else:
            self.measurements_b = []
        self.time = 0.0
        self.faraday_state = self.faraday_state.evolve(history=FluxHistory(), time=0.0)
        self.solenoid_state = self.solenoid_state.evolve(time=0.0)
        self._last_wallclock = now_s
        self.is_recording = True
        Logger.log(f"Recording started ({self.mode.value})", Logger.LogPriority.INFO)
        self._notify_changed()

    def stop_recording(self) -> None:
        """Stop recording; the log and simulated time are kept."""
        self.is_recording = False
        Logger.log(
            f"Recording stopped at t={self.time:.4f}s with {len(self.active_log)} measurements",
            Logger.LogPriority.INFO
        )
        self._notify_changed()

    def add_snapshot(self) -> AnyMeasurement:
        """
        Append the latest live measurement to the active log.

        Raises:
            StateTransitionError: If no tick has produced a measurement yet.
        """
        latest = self.latest_measurement
        if latest is None:
            raise StateTransitionError("No live measurement yet; tick the lab before taking a snapshot.")
        self.active_log.append(latest)
        Logger.log(f"Manual snapshot added at t={latest.timestamp:.4f}s")
        self._notify_changed()
        return latest

    def clear_measurements(self) -> None:
        """Empty the active mode's log."""
        if self.mode is LabMode.FARADAY:
            self.measurements = []
        else:
            self.measurements_b = []
        self._notify_changed()

    @property
    def active_log(self) -> list:
        if self.mode is LabMode.FARADAY:
            return self.measurements
        return self.measurements_b

    @property
    def latest_measurement(self) -> Optional[AnyMeasurement]:
        if self.mode is LabMode.FARADAY:
            return self.current_measurement
        return self.current_measurement_b

    # ------------------------------------------------------------------
    # Mode and parameters
    # ------------------------------------------------------------------

    def set_mode(self, mode: LabMode) -> None:
        """
        Switch lab pipeline.

        Recording stops, dragging is cancelled and simulated time returns
        to 0 with an empty flux history. Both logs are kept.
        """
        if mode is self.mode:
            return
        self.mode = mode
        self.is_dragging = False
        self.is_recording = False
        self.time = 0.0
        self.faraday_state = self.faraday_state.evolve(history=FluxHistory(), time=0.0)
        self.solenoid_state = self.solenoid_state.evolve(time=0.0)
        self._last_wallclock = None
        Logger.log(f"Lab mode set to {mode.value}", Logger.LogPriority.INFO)
        self._notify_changed()

    def set_motion(self, config: MotionConfig) -> None:
        """Replace the magnet motion schedule."""
        is_valid, error = config.validate()
        if not is_valid:
            raise ValueError(f"Invalid motion: {error}")
        self.motion = create_motion(config)
        Logger.log(f"Motion mode set to {config.mode}")
        self._notify_changed()

    def update_coil(self, **changes) -> None:
        """Replace coil fields (position, radius, turns, angle, resistance)."""
        coil = replace(self.faraday_state.coil, **changes)
        self.faraday_state = self.faraday_state.evolve(coil=coil)
        self._notify_changed()

    def update_magnet(self, **changes) -> None:
        """Replace magnet position or velocity outside of dragging."""
        magnet = replace(self.faraday_state.magnet, **changes)
        self.faraday_state = self.faraday_state.evolve(magnet=magnet)
        self._previous_position = magnet.position
        self._notify_changed()

    def update_faraday(self, **changes) -> None:
        """Replace mode A fields such as load_resistance or dipole_moment."""
        if "history" in changes or "time" in changes:
            raise StateTransitionError("history and time are owned by the controller")
        self.faraday_state = self.faraday_state.evolve(**changes)
        self._notify_changed()

    def update_solenoid(self, **changes) -> None:
        solenoid = replace(self.solenoid_state.solenoid, **changes)
        self.solenoid_state = self.solenoid_state.evolve(solenoid=solenoid)
        self._notify_changed()

    def update_circuit(self, **changes) -> None:
        circuit = replace(self.solenoid_state.circuit, **changes)
        self.solenoid_state = self.solenoid_state.evolve(circuit=circuit)
        self._notify_changed()

    def reset(self) -> None:
        """Return to the configured initial state, discarding all logs."""
        self._load_initial_state()
        Logger.log("LabController reset", Logger.LogPriority.INFO)
        self._notify_changed()

    # ------------------------------------------------------------------
    # Dragging
    # ------------------------------------------------------------------

    def start_drag(self) -> None:
        """
        Begin dragging the magnet.

        Raises:
            StateTransitionError: Outside the Faraday lab.
        """
        if self.mode is not LabMode.FARADAY:
            raise StateTransitionError("The magnet can only be dragged in the Faraday lab.")
        self.is_dragging = True
        self._notify_changed()

    def drag_to(self, x_m: float, y_m: float) -> None:
        """Move the dragged magnet. Velocity is inferred on the next tick."""
        if not self.is_dragging:
            raise StateTransitionError("drag_to() called without start_drag().")
        magnet = replace(self.faraday_state.magnet, position=Vector2D(x_m, y_m))
        self.faraday_state = self.faraday_state.evolve(magnet=magnet)
        self._notify_changed()

    def end_drag(self) -> None:
        self.is_dragging = False
        self._notify_changed()

    # ------------------------------------------------------------------

    def get_state(self) -> ControllerState:
        """Read-only snapshot of the controller."""
        return ControllerState(
            mode=self.mode,
            time=self.time,
            is_recording=self.is_recording,
            is_dragging=self.is_dragging,
            motion_mode=self.motion.name,
            n_measurements=len(self.active_log),
            n_ticks=self.n_ticks,
            n_dropped=self.n_dropped,
            latest=self.latest_measurement,
        )

    def _notify_changed(self) -> None:
        if self._on_state_changed:
            self._on_state_changed()
