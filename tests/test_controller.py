"""
Tests for the lab controller (state owner).
"""

import pytest

from induction_lab.config import LabConfig, MotionConfig, SessionConfig
from induction_lab.controller import LabController
from induction_lab.exceptions import StateTransitionError
from induction_lab.measurement import Measurement, MeasurementB
from induction_lab.state import LabMode, Vector2D

DT = 0.02


def make_controller(**config_changes) -> LabController:
    return LabController(LabConfig(**config_changes))


class TestTicking:
    """Tests for per-frame processing."""

    def test_tick_returns_live_measurement(self):
        controller = make_controller()
        m = controller.tick(DT)

        assert isinstance(m, Measurement)
        assert controller.current_measurement is m
        assert controller.n_ticks == 1

    def test_time_paused_when_not_recording(self):
        controller = make_controller()
        for _ in range(5):
            m = controller.tick(DT)

        assert controller.time == 0.0
        assert m.timestamp == 0.0
        assert controller.measurements == []

    def test_long_frame_dropped(self):
        """Δt above 0.1 s is skipped without touching state."""
        controller = make_controller()
        controller.start_recording()
        controller.tick(DT)
        history_before = controller.faraday_state.history

        assert controller.tick(0.25) is None
        assert controller.n_dropped == 1
        assert controller.n_ticks == 1
        assert controller.time == pytest.approx(DT)
        assert controller.faraday_state.history is history_before

    def test_negative_frame_dropped(self):
        controller = make_controller()
        assert controller.tick(-0.01) is None
        assert controller.n_dropped == 1

    def test_history_extended_once_per_tick(self):
        controller = make_controller()
        controller.start_recording()
        for i in range(5):
            controller.tick(DT)
            assert len(controller.faraday_state.history) == i + 1

        assert controller.faraday_state.history.last_flux == controller.current_measurement.flux

    def test_history_bounded(self):
        controller = make_controller()
        controller.start_recording()
        for _ in range(30):
            controller.tick(DT)
        assert len(controller.faraday_state.history) == 20

    def test_wallclock_ticks(self):
        controller = make_controller()
        first = controller.tick_wallclock(100.0)
        second = controller.tick_wallclock(100.02)
        dropped = controller.tick_wallclock(101.0)

        assert first.delta_t == 0.0
        assert second.delta_t == pytest.approx(0.02)
        assert dropped is None

    def test_callback_on_tick(self):
        calls = []
        controller = LabController(LabConfig(), on_state_changed=lambda: calls.append(1))
        controller.tick(DT)
        controller.tick(0.5)
        assert len(calls) == 1


class TestRecording:
    """Tests for the measurement log."""

    def test_records_at_most_recording_rate(self):
        controller = make_controller()
        controller.start_recording()
        for _ in range(10):
            controller.tick(0.005)

        # 0.05 s of simulated time at 60 Hz
        assert 2 <= len(controller.measurements) <= 3
        timestamps = [m.timestamp for m in controller.measurements]
        for a, b in zip(timestamps, timestamps[1:]):
            assert b - a >= 1.0 / 60.0 - 1e-9

    def test_every_slow_frame_recorded(self):
        controller = make_controller()
        controller.start_recording()
        for _ in range(5):
            controller.tick(DT)
        assert len(controller.measurements) == 5

    def test_frames_at_recording_rate_all_recorded(self):
        """Frames exactly one recording interval apart are never skipped."""
        controller = make_controller()
        controller.start_recording()
        for _ in range(120):
            controller.tick(1.0 / 60.0)

        assert len(controller.measurements) == 120

    def test_recorded_equals_live(self):
        controller = make_controller()
        controller.start_recording()
        live = controller.tick(DT)
        assert controller.measurements[-1] is live

    def test_start_recording_resets(self):
        controller = make_controller()
        controller.start_recording()
        for _ in range(3):
            controller.tick(DT)
        controller.stop_recording()

        controller.start_recording()
        assert controller.measurements == []
        assert controller.time == 0.0
        assert controller.faraday_state.history.is_empty

    def test_stop_keeps_log_and_time(self):
        controller = make_controller()
        controller.start_recording()
        controller.tick(DT)
        controller.stop_recording()
        controller.tick(DT)

        assert len(controller.measurements) == 1
        assert controller.time == pytest.approx(DT)

    def test_start_recording_keeps_other_mode_log(self):
        controller = make_controller()
        controller.start_recording()
        controller.tick(DT)
        controller.stop_recording()

        controller.set_mode(LabMode.CURRENT_TO_FIELD)
        controller.start_recording()
        controller.tick(DT)

        assert len(controller.measurements) == 1
        assert len(controller.measurements_b) == 1

    def test_add_snapshot_requires_tick(self):
        controller = make_controller()
        with pytest.raises(StateTransitionError):
            controller.add_snapshot()

    def test_add_snapshot_appends_live(self):
        controller = make_controller()
        live = controller.tick(DT)
        assert controller.add_snapshot() is live
        assert controller.measurements == [live]

    def test_clear_measurements(self):
        controller = make_controller()
        controller.tick(DT)
        controller.add_snapshot()
        controller.clear_measurements()
        assert controller.measurements == []


class TestMotion:
    """Tests for magnet motion through the controller."""

    def test_constant_motion_uses_previous_velocity(self):
        controller = make_controller(motion=MotionConfig(mode="constant", speed_m_per_s=1.0))
        controller.start_recording()

        first = controller.tick(DT)
        second = controller.tick(DT)

        assert first.magnet_x == -1.0
        assert first.velocity_x == 1.0
        assert second.magnet_x == pytest.approx(-1.0 + DT)

    def test_sinusoidal_motion(self):
        controller = make_controller(motion=MotionConfig(mode="sinusoidal", speed_m_per_s=0.5, frequency_hz=1.0))
        m = controller.tick(DT)
        assert m.magnet_x == 0.0
        assert m.velocity_x == pytest.approx(2 * 3.141592653589793 * 0.5)

    def test_drag_infers_velocity(self):
        controller = make_controller()
        controller.tick(DT)
        controller.start_drag()
        controller.drag_to(-0.5, 0.0)
        m = controller.tick(DT)

        assert m.magnet_x == -0.5
        assert m.velocity_x == pytest.approx(0.5 / DT)

    def test_drag_holds_scheduled_motion(self):
        controller = make_controller(motion=MotionConfig(mode="constant", speed_m_per_s=1.0))
        controller.tick(DT)
        controller.start_drag()
        controller.drag_to(-0.3, 0.1)
        controller.tick(DT)
        controller.tick(DT)

        assert controller.faraday_state.magnet.position == Vector2D(-0.3, 0.1)

    def test_drag_not_allowed_in_solenoid_lab(self):
        controller = make_controller(mode="currentToField")
        with pytest.raises(StateTransitionError):
            controller.start_drag()

    def test_drag_to_requires_drag(self):
        controller = make_controller()
        with pytest.raises(StateTransitionError):
            controller.drag_to(0.0, 0.0)

    def test_set_motion_rejects_unknown(self):
        controller = make_controller()
        with pytest.raises(ValueError):
            controller.set_motion(MotionConfig(mode="teleport"))


class TestModesAndParameters:

    def test_solenoid_mode(self):
        controller = make_controller()
        controller.set_mode(LabMode.CURRENT_TO_FIELD)
        m = controller.tick(DT)

        assert isinstance(m, MeasurementB)
        assert m.magnetic_field == pytest.approx(2.513e-4, rel=1e-3)
        assert controller.current_measurement is None

    def test_mode_switch_stops_recording_and_resets_time(self):
        controller = make_controller()
        controller.start_recording()
        for _ in range(10):
            controller.tick(DT)

        controller.set_mode(LabMode.CURRENT_TO_FIELD)

        assert controller.is_recording is False
        assert controller.time == 0.0
        assert controller.faraday_state.history.is_empty
        assert len(controller.measurements) == 10

        m = controller.tick(DT)
        assert m.timestamp == 0.0
        assert controller.measurements_b == []

    def test_switch_back_starts_fresh_rate(self):
        controller = make_controller()
        controller.start_recording()
        for _ in range(10):
            controller.tick(DT)

        controller.set_mode(LabMode.CURRENT_TO_FIELD)
        controller.set_mode(LabMode.FARADAY)
        m = controller.tick(DT)

        assert m.timestamp == 0.0
        assert m.flux_rate == 0.0
        assert len(controller.faraday_state.history) == 1

    def test_update_circuit(self):
        controller = make_controller(mode="currentToField")
        controller.update_circuit(voltage=10.0)
        assert controller.tick(DT).current == 2.0

    def test_update_solenoid_polarity(self):
        controller = make_controller(mode="currentToField")
        positive = controller.tick(DT).magnetic_field
        controller.update_solenoid(polarity=-1)
        assert controller.tick(DT).magnetic_field == -positive

    def test_update_coil(self):
        controller = make_controller()
        controller.update_coil(turns=40)
        assert controller.tick(DT).turns == 40

    def test_update_faraday_guards_owned_fields(self):
        controller = make_controller()
        controller.update_faraday(load_resistance=5.0)
        assert controller.faraday_state.total_resistance == 10.0

        with pytest.raises(StateTransitionError):
            controller.update_faraday(time=3.0)

    def test_reset(self):
        controller = make_controller()
        controller.start_recording()
        controller.tick(DT)
        controller.update_coil(turns=40)
        controller.reset()

        assert controller.measurements == []
        assert controller.is_recording is False
        assert controller.time == 0.0
        assert controller.faraday_state.coil.turns == 10

    def test_get_state(self):
        controller = make_controller(session=SessionConfig())
        controller.start_recording()
        controller.tick(DT)
        state = controller.get_state()

        assert state.mode is LabMode.FARADAY
        assert state.is_recording
        assert state.n_measurements == 1
        assert state.motion_mode == "manual"
        assert state.latest is controller.current_measurement
