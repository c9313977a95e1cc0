"""
Headless session runner.

Drives a LabController at a fixed frame Δt for a configured duration with
recording on, then collects the recorded log and summary peaks.
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .config import LabConfig
from .controller import LabController
from .measurement import AnyMeasurement
from .state import LabMode
from .utils.logger import Logger


@dataclass
class SessionResult:
    """
    Complete session results.

    Attributes:
        mode: Lab mode that was recorded.
        measurements: Recorded log (Measurement or MeasurementB).
        config: Configuration used.
        n_ticks: Frames processed.
        n_dropped: Frames dropped for exceeding the Δt limit.
        peak_emf_V: Largest |ε| (mode A only).
        peak_current_A: Largest |I|.
        peak_flux_Wb: Largest |Φ| (mode A only).
        peak_field_T: Largest |B| (mode B only).
    """
    mode: LabMode
    measurements: List[AnyMeasurement]
    config: LabConfig
    n_ticks: int
    n_dropped: int
    peak_emf_V: Optional[float]
    peak_current_A: float
    peak_flux_Wb: Optional[float]
    peak_field_T: Optional[float]

    def summary(self) -> dict:
        return {
            "mode": self.mode.value,
            "n_measurements": len(self.measurements),
            "n_ticks": self.n_ticks,
            "n_dropped": self.n_dropped,
            "peak_emf_V": self.peak_emf_V,
            "peak_current_A": self.peak_current_A,
            "peak_flux_Wb": self.peak_flux_Wb,
            "peak_field_T": self.peak_field_T,
        }


def _peak(values) -> float:
    if not values:
        return 0.0
    return float(np.max(np.abs(np.asarray(values, dtype=float))))


class SessionRunner:
    """
    Fixed-step recording session over one lab mode.
    """

    def __init__(self, config: LabConfig):
        """
        Initialize runner with configuration.

        Args:
            config: Complete lab configuration.
        """
        self.config = config
        self.controller = LabController(config)

    def run(self) -> SessionResult:
        """
        Record for session.duration_s.

        Returns:
            SessionResult with the recorded log and summary.
        """
        dt = self.config.session.frame_dt_s
        # Tolerate float error so 0.5 / 0.02 stays 25 frames
        n_frames = int(np.ceil(self.config.session.duration_s / dt - 1e-9))

        Logger.log(
            f"Starting {self.config.mode} session: {n_frames} frames at dt={dt:.5f}s",
            Logger.LogPriority.INFO
        )

        self.controller.start_recording()
        for _ in range(n_frames):
            self.controller.tick(dt)
        self.controller.stop_recording()

        return self._build_result()

    def _build_result(self) -> SessionResult:
        controller = self.controller
        mode = controller.mode

        if mode is LabMode.FARADAY:
            records = list(controller.measurements)
            peak_emf = _peak([m.emf for m in records])
            peak_flux = _peak([m.flux for m in records])
            peak_field = None
        else:
            records = list(controller.measurements_b)
            peak_emf = None
            peak_flux = None
            peak_field = _peak([m.magnetic_field for m in records])

        return SessionResult(
            mode=mode,
            measurements=records,
            config=self.config,
            n_ticks=controller.n_ticks,
            n_dropped=controller.n_dropped,
            peak_emf_V=peak_emf,
            peak_current_A=_peak([m.current for m in records]),
            peak_flux_Wb=peak_flux,
            peak_field_T=peak_field,
        )


def run_session(config: LabConfig) -> SessionResult:
    """
    Convenience function to run a session from config.

    Args:
        config: Lab configuration.

    Returns:
        SessionResult.
    """
    runner = SessionRunner(config)
    return runner.run()
