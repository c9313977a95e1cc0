"""
Configuration loading and validation for lab sessions.

Loads a YAML config and validates every parameter against physical
constraints. Defaults reproduce the lab's initial state.
"""

import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Literal, Optional

import yaml

from .constants import DEFAULT_INTEGRATION_SAMPLES, MAX_INTEGRATION_SAMPLES, MAX_TICK_DT_S, RECORDING_RATE_HZ
from .state import LabMode
from .utils.logger import Logger

MOTION_MODES = ("manual", "constant", "sinusoidal")
EXPORT_FORMATS = ("csv", "json", "excel", "png")


def _is_finite(*values) -> bool:
    return all(isinstance(v, (int, float)) and math.isfinite(v) for v in values)


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def _coerce_floats(name: str, section_type, section_raw: dict) -> dict:
    """
    Convert string values of float fields.

    YAML 1.1 reads exponents without a decimal point (1e-3) as strings.
    """
    if not isinstance(section_raw, dict):
        raise ValueError(f"Invalid configuration: {name} must be a mapping")
    coerced = dict(section_raw)
    float_fields = {f.name for f in fields(section_type) if f.type is float}
    for key, value in section_raw.items():
        if key in float_fields and isinstance(value, str):
            try:
                coerced[key] = float(value)
            except ValueError:
                raise ValueError(f"Invalid configuration: {name}.{key} must be a number, got {value!r}") from None
    return coerced


@dataclass
class MagnetConfig:
    """Initial dipole placement and strength."""
    x_m: float = -1.0
    y_m: float = 0.0
    dipole_moment_Am2: float = 1.0

    def validate(self) -> tuple[bool, Optional[str]]:
        if not _is_finite(self.x_m, self.y_m):
            return False, "x_m and y_m must be finite"
        if not _is_finite(self.dipole_moment_Am2):
            return False, "dipole_moment_Am2 must be finite"
        return True, None


@dataclass
class CoilConfig:
    """Pickup coil geometry and resistances."""
    x_m: float = 0.0
    y_m: float = 0.0
    radius_m: float = 0.1
    turns: int = 10
    angle_rad: float = 0.0
    resistance_ohm: float = 5.0
    load_resistance_ohm: float = 0.0

    def validate(self) -> tuple[bool, Optional[str]]:
        if not _is_finite(self.x_m, self.y_m, self.angle_rad):
            return False, "x_m, y_m and angle_rad must be finite"
        if not _is_finite(self.radius_m) or self.radius_m <= 0:
            return False, "radius_m must be positive"
        if not _is_positive_int(self.turns):
            return False, "turns must be a positive integer"
        if not _is_finite(self.resistance_ohm) or self.resistance_ohm < 0:
            return False, "resistance_ohm must be non-negative"
        if not _is_finite(self.load_resistance_ohm) or self.load_resistance_ohm < 0:
            return False, "load_resistance_ohm must be non-negative"
        return True, None


@dataclass
class MotionConfig:
    """
    Magnet motion schedule.

    speed_m_per_s is the velocity for "constant" and the amplitude (m) for
    "sinusoidal".
    """
    mode: Literal["manual", "constant", "sinusoidal"] = "manual"
    speed_m_per_s: float = 1.0
    frequency_hz: float = 1.0

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.mode not in MOTION_MODES:
            return False, f"Unknown motion mode: {self.mode}"
        if not _is_finite(self.speed_m_per_s):
            return False, "speed_m_per_s must be finite"
        if not _is_finite(self.frequency_hz) or self.frequency_hz < 0:
            return False, "frequency_hz must be non-negative"
        return True, None


@dataclass
class IntegrationConfig:
    """Flux integration grid and smoothing."""
    samples: int = DEFAULT_INTEGRATION_SAMPLES
    smoothing_enabled: bool = True

    def validate(self) -> tuple[bool, Optional[str]]:
        if not _is_positive_int(self.samples) or self.samples > MAX_INTEGRATION_SAMPLES:
            return False, f"samples must be an integer in 1..{MAX_INTEGRATION_SAMPLES}"
        return True, None


@dataclass
class SolenoidConfig:
    """Solenoid geometry."""
    length_m: float = 0.5
    turns: int = 100
    radius_m: float = 0.05
    polarity: int = 1
    use_end_effects: bool = False

    def validate(self) -> tuple[bool, Optional[str]]:
        if not _is_finite(self.length_m) or self.length_m <= 0:
            return False, "length_m must be positive"
        if not _is_positive_int(self.turns):
            return False, "turns must be a positive integer"
        if not _is_finite(self.radius_m) or self.radius_m <= 0:
            return False, "radius_m must be positive"
        if self.polarity not in (1, -1):
            return False, "polarity must be +1 or -1"
        return True, None


@dataclass
class CircuitConfig:
    """DC drive for the solenoid."""
    voltage_v: float = 5.0
    resistance_ohm: float = 5.0

    def validate(self) -> tuple[bool, Optional[str]]:
        if not _is_finite(self.voltage_v) or self.voltage_v <= 0:
            return False, "voltage_v must be positive"
        if not _is_finite(self.resistance_ohm) or self.resistance_ohm <= 0:
            return False, "resistance_ohm must be positive"
        return True, None


@dataclass
class SessionConfig:
    """Headless session timing."""
    frame_dt_s: float = 1.0 / 60.0
    duration_s: float = 2.0
    recording_rate_hz: float = RECORDING_RATE_HZ

    def validate(self) -> tuple[bool, Optional[str]]:
        if not _is_finite(self.frame_dt_s) or not 0 < self.frame_dt_s <= MAX_TICK_DT_S:
            return False, f"frame_dt_s must be in (0, {MAX_TICK_DT_S}]"
        if not _is_finite(self.duration_s) or self.duration_s <= 0:
            return False, "duration_s must be positive"
        if not _is_finite(self.recording_rate_hz) or self.recording_rate_hz <= 0:
            return False, "recording_rate_hz must be positive"
        return True, None


@dataclass
class OutputConfig:
    """Output configuration."""
    out_dir: str = "output"
    run_name: str = "induction_lab_run"
    formats: list[str] = field(default_factory=lambda: ["csv", "json"])

    def validate(self) -> tuple[bool, Optional[str]]:
        if not self.run_name:
            return False, "run_name must not be empty"
        unknown = [f for f in self.formats if f not in EXPORT_FORMATS]
        if unknown:
            return False, f"Unknown export formats: {', '.join(unknown)}"
        return True, None


@dataclass
class LabConfig:
    """Complete lab configuration."""
    mode: Literal["faraday", "currentToField"] = "faraday"
    magnet: MagnetConfig = field(default_factory=MagnetConfig)
    coil: CoilConfig = field(default_factory=CoilConfig)
    motion: MotionConfig = field(default_factory=MotionConfig)
    integration: IntegrationConfig = field(default_factory=IntegrationConfig)
    solenoid: SolenoidConfig = field(default_factory=SolenoidConfig)
    circuit: CircuitConfig = field(default_factory=CircuitConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    SECTIONS = ("magnet", "coil", "motion", "integration", "solenoid", "circuit", "session", "output")

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.mode not in (m.value for m in LabMode):
            return False, f"mode: Unknown lab mode: {self.mode}"
        for section_name in self.SECTIONS:
            section = getattr(self, section_name)
            is_valid, error = section.validate()
            if not is_valid:
                return False, f"{section_name}: {error}"
        return True, None

    @property
    def lab_mode(self) -> LabMode:
        return LabMode(self.mode)


_SECTION_TYPES = {
    "magnet": MagnetConfig,
    "coil": CoilConfig,
    "motion": MotionConfig,
    "integration": IntegrationConfig,
    "solenoid": SolenoidConfig,
    "circuit": CircuitConfig,
    "session": SessionConfig,
    "output": OutputConfig,
}


def config_from_dict(raw: dict) -> LabConfig:
    """
    Build and validate a LabConfig from a plain (YAML-shaped) dict.

    Missing sections and keys take their defaults.

    Raises:
        ValueError: On unknown keys or invalid values.
    """
    raw = raw or {}
    sections = {}
    for name, section_type in _SECTION_TYPES.items():
        section_raw = _coerce_floats(name, section_type, raw.get(name) or {})
        try:
            sections[name] = section_type(**section_raw)
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {name}: {e}") from e

    config = LabConfig(mode=raw.get("mode", "faraday"), **sections)

    is_valid, error = config.validate()
    if not is_valid:
        raise ValueError(f"Invalid configuration: {error}")

    return config


def load_config(path: Path) -> LabConfig:
    """
    Load and validate configuration from YAML file.

    Args:
        path: Path to YAML config file.

    Returns:
        Validated LabConfig.

    Raises:
        ValueError: If config is invalid.
        FileNotFoundError: If file doesn't exist.
    """
    with open(path, 'r', encoding='utf-8') as f:
        raw = yaml.safe_load(f)

    if raw is not None and not isinstance(raw, dict):
        raise ValueError("Invalid configuration: top level must be a mapping")

    config = config_from_dict(raw)
    Logger.log(f"Loaded {config.mode} configuration from {path}")
    return config
