"""
Tunable constants for the sound organism engine.

Every smoothing rate, gain, emission threshold, harmonic table and
segment count lives here so that visual variants are configuration
rather than forks of the engine.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class Harmonic:
    """One sine term of a deformed ring: sin(multiplier * angle + phase + phase_offset)."""

    multiplier: float
    weight: float
    phase_offset: float = 0.0


def _default_harmonics() -> tuple[Harmonic, ...]:
    return (
        Harmonic(3.0, 0.24),
        Harmonic(5.0, 0.14, 1.3),
        Harmonic(7.0, 0.08, 2.1),
    )


@dataclass
class OrganismConfig:
    """Configuration for the sound organism engine."""

    # Smoothing (EMA rate per tick, higher = snappier)
    amplitude_rate: float = 0.08
    frequency_rate: float = 0.06
    rhythm_rate: float = 0.08

    # Growth
    base_radius: float = 40.0
    max_growth: float = 140.0
    growth_gain: float = 24.0  # growth units per second at full amplitude
    growth_decay: float = 0.993  # per reference frame
    reference_frame_rate: float = 60.0
    growth_floor: float = 1e-4  # below this, growth snaps to zero
    max_delta_time: float = 0.05

    # Phase clock
    phase_base_rate: float = 0.8
    phase_frequency_gain: float = 1.2
    phase_amplitude_gain: float = 0.0
    wrap_phase: bool = False

    # Ring emission
    emit_interval: float = 0.25
    emit_threshold: float = 0.05
    ring_initial_opacity: float = 0.35
    ring_opacity_decay: float = 0.004

    # Harmonic deformation
    harmonics: tuple[Harmonic, ...] = field(default_factory=_default_harmonics)
    ring_harmonics: tuple[Harmonic, ...] | None = None  # None reuses harmonics
    ring_deformation: float = 0.35
    deformation_reference: str = "radius"  # body/core weights multiply "radius" or "growth"
    body_deformation_floor: float = 0.15
    body_amplitude_deformation: float = 0.45
    body_rhythm_deformation: float = 0.4
    core_deformation: float = 0.5
    core_fraction: float = 0.75

    # High-pitch ripple
    ripple_multiplier: float = 9.0
    ripple_weight: float = 0.05
    ripple_threshold: float = 0.6
    ripple_gain: float = 1.4

    # Segment counts
    ring_segments: int = 200
    body_segments: int = 240
    core_segments: int = 120

    # Colour (hues in [0, 1], colours as RGB floats)
    hue_low: float = 0.58  # blue at low pitch
    hue_high: float = 0.80  # violet at high pitch
    body_saturation: float = 0.75
    body_opacity_floor: float = 0.10
    body_opacity_gain: float = 0.30
    body_gradient_margin: float = 20.0
    body_stroke_color: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 0.4)
    body_stroke_width: float = 1.0
    ring_color: tuple[float, float, float] = (0.0, 0.48, 1.0)
    ring_stroke_width: float = 0.8
    core_fill_color: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 0.08)
    core_stroke_color: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 0.3)
    glow_margin: float = 40.0
    glow_color: tuple[float, float, float, float] = (0.69, 0.32, 0.87, 0.08)

    # Frozen rendering
    frozen_phase: float = math.pi / 5

    def validate(self) -> "OrganismConfig":
        """Raise ValueError if any constant is outside its usable range."""
        for name in ("amplitude_rate", "frequency_rate", "rhythm_rate"):
            rate = getattr(self, name)
            if not 0.0 < rate <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {rate}")
        if self.max_growth <= 0:
            raise ValueError(f"max_growth must be positive, got {self.max_growth}")
        if self.base_radius <= 0:
            raise ValueError(f"base_radius must be positive, got {self.base_radius}")
        if not 0.0 < self.growth_decay <= 1.0:
            raise ValueError(f"growth_decay must be in (0, 1], got {self.growth_decay}")
        if self.emit_interval <= 0:
            raise ValueError(f"emit_interval must be positive, got {self.emit_interval}")
        if self.ring_opacity_decay <= 0:
            raise ValueError("ring_opacity_decay must be positive")
        if not 0.0 < self.ring_initial_opacity <= 1.0:
            raise ValueError("ring_initial_opacity must be in (0, 1]")
        if self.max_delta_time <= 0:
            raise ValueError("max_delta_time must be positive")
        for name in ("ring_segments", "body_segments", "core_segments"):
            if getattr(self, name) < 3:
                raise ValueError(f"{name} must be at least 3")
        if self.deformation_reference not in ("radius", "growth"):
            raise ValueError(
                f"deformation_reference must be 'radius' or 'growth', got {self.deformation_reference!r}"
            )
        return self

    def with_overrides(self, **overrides: Any) -> "OrganismConfig":
        """Copy with some fields replaced."""
        return replace(self, **overrides)


# The single-harmonic variant of the first release: a x3 wobble of
# 0.08 * radius on the rings, a x4 wobble of 0.15 * growth on the body
# (a plain circle at rest), an undeformed core, slower response, no ripple.
PRESETS: dict[str, dict[str, Any]] = {
    "default": {},
    "glass_echo": {
        "amplitude_rate": 0.08,
        "frequency_rate": 0.05,
        "rhythm_rate": 0.06,
        "harmonics": (Harmonic(4.0, 0.15),),
        "ring_harmonics": (Harmonic(3.0, 0.08),),
        "ring_deformation": 1.0,
        "deformation_reference": "growth",
        "body_deformation_floor": 1.0,
        "body_amplitude_deformation": 0.0,
        "body_rhythm_deformation": 0.0,
        "core_deformation": 0.0,
        "ripple_weight": 0.0,
        "glow_margin": 30.0,
        "phase_frequency_gain": 0.0,
        "ring_segments": 120,
        "body_segments": 160,
    },
    "turbulent": {
        "amplitude_rate": 0.15,
        "frequency_rate": 0.10,
        "rhythm_rate": 0.10,
        "ripple_threshold": 0.45,
        "ripple_weight": 0.08,
        "phase_amplitude_gain": 1.5,
        "emit_interval": 0.3,
        "ring_initial_opacity": 0.3,
        "ring_opacity_decay": 0.003,
        "body_segments": 280,
    },
}


def get_preset(name: str) -> OrganismConfig:
    """Build a validated config from a named preset."""
    try:
        overrides = PRESETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown preset '{name}'. Choose from: {', '.join(sorted(PRESETS))}"
        ) from None
    return OrganismConfig(**overrides).validate()
