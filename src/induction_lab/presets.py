"""
Preset lab configurations.

Curated starting points for demonstrations and quick experiments.

Each preset includes:
- Complete LabConfig
- Human-readable description
- Expected qualitative behavior
"""

import copy
import math
from dataclasses import dataclass
from typing import Dict, List

from .config import (
    CircuitConfig,
    CoilConfig,
    LabConfig,
    MagnetConfig,
    MotionConfig,
    SessionConfig,
    SolenoidConfig,
)


@dataclass(frozen=True)
class Preset:
    """
    A curated lab preset.

    Attributes:
        name: Short identifier (e.g., "magnet_approach")
        display_name: Human-readable name
        description: What this preset demonstrates
        expected_behavior: What the user should observe
        config: The lab configuration
    """
    name: str
    display_name: str
    description: str
    expected_behavior: str
    config: LabConfig


# =============================================================================
# Preset Definitions
# =============================================================================

PRESETS: Dict[str, Preset] = {}


def _register_preset(preset: Preset) -> None:
    """Register a preset in the global registry."""
    PRESETS[preset.name] = preset


_register_preset(Preset(
    name="magnet_approach",
    display_name="Magnet Passing Through Coil",
    description=(
        "Dipole glides along +x at 1 m/s from x = -1 m, through a coil at "
        "the origin and out the other side."
    ),
    expected_behavior=(
        "Flux grows as the magnet approaches and the EMF is negative. "
        "After the magnet passes the coil the flux falls and the EMF and "
        "current reverse."
    ),
    config=LabConfig(
        mode="faraday",
        magnet=MagnetConfig(x_m=-1.0, y_m=0.0),
        coil=CoilConfig(radius_m=0.1, turns=10),
        motion=MotionConfig(mode="constant", speed_m_per_s=1.0),
        session=SessionConfig(duration_s=2.0),
    ),
))

_register_preset(Preset(
    name="magnet_oscillation",
    display_name="Oscillating Magnet",
    description="Dipole oscillates on the coil axis with A = 0.5 m and f = 1 Hz.",
    expected_behavior=(
        "EMF alternates in sign twice per period. The induced current "
        "direction flips each time the flux change reverses."
    ),
    config=LabConfig(
        mode="faraday",
        magnet=MagnetConfig(x_m=0.0, y_m=0.0),
        coil=CoilConfig(x_m=0.0, y_m=0.3, radius_m=0.1, turns=20),
        motion=MotionConfig(mode="sinusoidal", speed_m_per_s=0.5, frequency_hz=1.0),
        session=SessionConfig(duration_s=3.0),
    ),
))

_register_preset(Preset(
    name="tilted_coil",
    display_name="Tilted Coil",
    description="Same approach as magnet_approach with the coil rotated by 45°.",
    expected_behavior=(
        "Only the field component along the tilted normal contributes, so "
        "peak flux and EMF are smaller than for the untilted coil."
    ),
    config=LabConfig(
        mode="faraday",
        magnet=MagnetConfig(x_m=-1.0, y_m=0.0),
        coil=CoilConfig(radius_m=0.1, turns=10, angle_rad=math.pi / 4),
        motion=MotionConfig(mode="constant", speed_m_per_s=1.0),
        session=SessionConfig(duration_s=2.0),
    ),
))

_register_preset(Preset(
    name="solenoid_ideal",
    display_name="Ideal Solenoid",
    description="5 V across 5 Ω driving a 100-turn, 0.5 m solenoid.",
    expected_behavior="I = 1 A, n = 200 turns/m, B = μ₀nI ≈ 2.513e-4 T at the centre.",
    config=LabConfig(
        mode="currentToField",
        solenoid=SolenoidConfig(length_m=0.5, turns=100),
        circuit=CircuitConfig(voltage_v=5.0, resistance_ohm=5.0),
        session=SessionConfig(duration_s=1.0),
    ),
))

_register_preset(Preset(
    name="solenoid_end_effects",
    display_name="Reversed Solenoid With End Effects",
    description="Short solenoid with reversed polarity and the end-effect taper on.",
    expected_behavior=(
        "The centre field keeps its ideal magnitude with a negative sign; "
        "off-centre queries fall off near the ends."
    ),
    config=LabConfig(
        mode="currentToField",
        solenoid=SolenoidConfig(length_m=0.2, turns=50, polarity=-1, use_end_effects=True),
        circuit=CircuitConfig(voltage_v=10.0, resistance_ohm=4.0),
        session=SessionConfig(duration_s=1.0),
    ),
))


# =============================================================================
# Public API
# =============================================================================

def list_presets() -> List[str]:
    """List available preset names."""
    return list(PRESETS.keys())


def get_preset(name: str) -> Preset:
    """
    Get a preset by name.

    Raises:
        KeyError: If preset not found.
    """
    if name not in PRESETS:
        available = ", ".join(PRESETS.keys())
        raise KeyError(f"Unknown preset '{name}'. Available: {available}")
    return PRESETS[name]


def get_preset_config(name: str) -> LabConfig:
    """
    Independent copy of a preset's LabConfig, safe to modify.
    """
    return copy.deepcopy(get_preset(name).config)


def get_preset_display_names() -> Dict[str, str]:
    return {name: p.display_name for name, p in PRESETS.items()}


__all__ = [
    "Preset",
    "PRESETS",
    "list_presets",
    "get_preset",
    "get_preset_config",
    "get_preset_display_names",
]
