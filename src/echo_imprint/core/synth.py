"""
Shape synthesis.

Maps (smoothed features, growth, phase, rings) to a Scene: an ordered
set of drawable layers built from multi-harmonic deformed circles.
The function is pure; the same inputs always yield the same geometry,
which is what makes frozen specimen rendering reproducible.

Layers, back to front:
- Outer glow: soft radial disc just beyond the body.
- Historical rings: stroked echoes of earlier outlines, oldest first.
- Main body: gradient-filled deformed circle, hue follows pitch.
- Inner core: smaller, calmer glassy nucleus.
"""

import colorsys
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from echo_imprint.config import Harmonic, OrganismConfig
from echo_imprint.core.rings import Ring
from echo_imprint.core.smoother import SmoothedState

TWO_PI = 2.0 * math.pi

RGBA = tuple[float, float, float, float]


@dataclass(frozen=True)
class RadialGradient:
    """Colour stops from the centre (0.0) out to ``radius`` (1.0)."""

    center: tuple[float, float]
    radius: float
    stops: tuple[tuple[float, RGBA], ...]


@dataclass(frozen=True)
class GlowDisc:
    center: tuple[float, float]
    radius: float
    fill: RadialGradient


@dataclass(frozen=True, eq=False)
class Polygon:
    """A closed path; ``points`` is an (N, 2) array, the last point joins the first."""

    kind: str  # "ring", "body" or "core"
    points: np.ndarray
    fill: RadialGradient | RGBA | None = None
    stroke: RGBA | None = None
    stroke_width: float = 1.0


@dataclass(frozen=True)
class Scene:
    """Everything a renderer needs for one frame."""

    glow: GlowDisc
    rings: tuple[Polygon, ...]
    body: Polygon
    core: Polygon
    current_radius: float

    def layers(self) -> list:
        """Drawable layers in painter's order."""
        return [self.glow, *self.rings, self.body, self.core]


def build_deformed_ring(
    center: tuple[float, float],
    base_radius: float,
    harmonics: Iterable[Harmonic],
    phase: float,
    segment_count: int,
    amplitude_scale: float | None = None,
) -> np.ndarray:
    """
    Sample a closed, sine-perturbed circle.

    Args:
        center: (x, y) of the ring centre.
        base_radius: Unperturbed radius.
        harmonics: Terms added as ``scale * weight * sin(m * a + phase + offset)``.
        phase: Shared phase for all terms.
        segment_count: Number of equally spaced angles in [0, 2*pi).
        amplitude_scale: Length the weights multiply; defaults to ``base_radius``.

    Returns:
        (segment_count, 2) float64 array of vertices.
    """
    angles = np.linspace(0.0, TWO_PI, segment_count, endpoint=False)
    scale = base_radius if amplitude_scale is None else amplitude_scale
    radius = np.full_like(angles, base_radius)
    for h in harmonics:
        radius += scale * h.weight * np.sin(h.multiplier * angles + phase + h.phase_offset)
    radius = np.maximum(radius, 0.0)

    cx, cy = center
    return np.column_stack((cx + np.cos(angles) * radius, cy + np.sin(angles) * radius))


def _scaled(harmonics: Sequence[Harmonic], factor: float) -> tuple[Harmonic, ...]:
    return tuple(Harmonic(h.multiplier, h.weight * factor, h.phase_offset) for h in harmonics)


def body_intensity(smoothed: SmoothedState, cfg: OrganismConfig) -> float:
    """Deformation strength of the body, rising with loudness and rhythm."""
    intensity = (
        cfg.body_deformation_floor
        + smoothed.amplitude * cfg.body_amplitude_deformation
        + smoothed.rhythm * cfg.body_rhythm_deformation
    )
    return min(1.0, intensity)


def body_harmonics(smoothed: SmoothedState, cfg: OrganismConfig) -> tuple[Harmonic, ...]:
    """Harmonic table for the main body, with the ripple term above the pitch threshold."""
    terms = _scaled(cfg.harmonics, body_intensity(smoothed, cfg))
    if smoothed.frequency > cfg.ripple_threshold and cfg.ripple_weight > 0:
        terms += (Harmonic(cfg.ripple_multiplier, cfg.ripple_weight * cfg.ripple_gain),)
    return terms


def pitch_hue(frequency: float, cfg: OrganismConfig) -> float:
    """Linear hue interpolation across the configured range."""
    return cfg.hue_low + (cfg.hue_high - cfg.hue_low) * frequency


def _hue_to_rgba(hue: float, saturation: float, alpha: float) -> RGBA:
    r, g, b = colorsys.hsv_to_rgb(hue % 1.0, saturation, 1.0)
    return (r, g, b, alpha)


def synthesize(
    smoothed: SmoothedState,
    growth: float,
    phase: float,
    rings: Sequence[Ring],
    config: OrganismConfig | None = None,
    center: tuple[float, float] = (0.0, 0.0),
) -> Scene:
    """
    Build the Scene for one frame.

    Args:
        smoothed: Smoothed amplitude/frequency/rhythm.
        growth: Accumulated growth.
        phase: Phase clock value.
        rings: Surviving rings, oldest first.
        config: Engine configuration (defaults if None).
        center: Shape centre in output coordinates.

    Returns:
        Scene with glow, rings, body and core layers.
    """
    cfg = config or OrganismConfig()
    current_radius = cfg.base_radius + growth

    # Layer 1: outer glow
    glow_radius = current_radius + cfg.glow_margin
    glow_rgb = cfg.glow_color[:3]
    glow = GlowDisc(
        center=center,
        radius=glow_radius,
        fill=RadialGradient(
            center=center,
            radius=glow_radius,
            stops=((0.0, cfg.glow_color), (1.0, (*glow_rgb, 0.0))),
        ),
    )

    # Layer 2: historical rings
    ring_table = cfg.harmonics if cfg.ring_harmonics is None else cfg.ring_harmonics
    ring_terms = _scaled(ring_table, cfg.ring_deformation)
    ring_layers = tuple(
        Polygon(
            kind="ring",
            points=build_deformed_ring(
                center, ring.radius, ring_terms, ring.spawn_phase, cfg.ring_segments
            ),
            stroke=(*cfg.ring_color, ring.opacity),
            stroke_width=cfg.ring_stroke_width,
        )
        for ring in rings
    )

    # Layer 3: main body
    # Body and core wobble either with their own size or with growth alone
    deform_scale = growth if cfg.deformation_reference == "growth" else current_radius
    hue = pitch_hue(smoothed.frequency, cfg)
    opacity = min(1.0, cfg.body_opacity_floor + smoothed.amplitude * cfg.body_opacity_gain)
    body_fill = RadialGradient(
        center=center,
        radius=current_radius + cfg.body_gradient_margin,
        stops=(
            (0.0, _hue_to_rgba(hue, cfg.body_saturation, opacity)),
            (1.0, _hue_to_rgba(cfg.hue_high, cfg.body_saturation, opacity / 3.0)),
        ),
    )
    body = Polygon(
        kind="body",
        points=build_deformed_ring(
            center,
            current_radius,
            body_harmonics(smoothed, cfg),
            phase,
            cfg.body_segments,
            amplitude_scale=deform_scale,
        ),
        fill=body_fill,
        stroke=cfg.body_stroke_color,
        stroke_width=cfg.body_stroke_width,
    )

    # Layer 4: inner core
    core_terms = _scaled(cfg.harmonics, body_intensity(smoothed, cfg) * cfg.core_deformation)
    core = Polygon(
        kind="core",
        points=build_deformed_ring(
            center,
            current_radius * cfg.core_fraction,
            core_terms,
            phase,
            cfg.core_segments,
            amplitude_scale=deform_scale * cfg.core_fraction,
        ),
        fill=cfg.core_fill_color,
        stroke=cfg.core_stroke_color,
        stroke_width=1.0,
    )

    return Scene(
        glow=glow,
        rings=ring_layers,
        body=body,
        core=core,
        current_radius=current_radius,
    )


def synthesize_frozen(
    snapshot,
    config: OrganismConfig | None = None,
    center: tuple[float, float] = (0.0, 0.0),
) -> Scene:
    """
    Render a stored moment: fixed phase, no rings.

    ``snapshot`` is anything with amplitude, frequency, rhythm and growth
    attributes (a FrozenSnapshot or a Specimen).
    """
    cfg = config or OrganismConfig()
    smoothed = SmoothedState(
        amplitude=snapshot.amplitude,
        frequency=snapshot.frequency,
        rhythm=snapshot.rhythm,
    )
    return synthesize(smoothed, snapshot.growth, cfg.frozen_phase, (), cfg, center)
