"""
Colour helpers and post-processing for rasterized scenes.

Radial gradient evaluation for scene fills, plus the glow bloom and
vignette passes applied to finished frames.
"""

from typing import Sequence

import numpy as np
from PIL import Image, ImageChops, ImageFilter


def to_rgba8(color: Sequence[float]) -> tuple[int, int, int, int]:
    """Float RGBA (0-1) to 8-bit RGBA; a missing alpha means opaque."""
    channels = list(color) + [1.0] * (4 - len(color))
    return tuple(int(round(min(1.0, max(0.0, c)) * 255)) for c in channels[:4])


def radial_gradient(
    width: int,
    height: int,
    center: tuple[float, float],
    radius: float,
    stops: Sequence[tuple[float, Sequence[float]]],
) -> np.ndarray:
    """
    Evaluate a radial gradient over a pixel grid.

    Args:
        width, height: Output size in pixels.
        center: Gradient centre in pixel coordinates.
        radius: Distance (pixels) at which position 1.0 is reached.
        stops: (position, RGBA float colour) pairs, positions ascending.

    Returns:
        (H, W, 4) uint8 RGBA array. Beyond ``radius`` the last stop holds.
    """
    cx, cy = center
    y = np.arange(height, dtype=np.float32) - cy
    x = np.arange(width, dtype=np.float32) - cx
    xg, yg = np.meshgrid(x, y)
    t = np.sqrt(xg ** 2 + yg ** 2) / max(radius, 1e-6)
    t = np.clip(t, 0.0, 1.0)

    positions = np.array([p for p, _ in stops], dtype=np.float32)
    colors = np.array([to_rgba8(c) for _, c in stops], dtype=np.float32)

    rgba = np.empty((height, width, 4), dtype=np.float32)
    for channel in range(4):
        rgba[:, :, channel] = np.interp(t, positions, colors[:, channel])

    return np.round(rgba).astype(np.uint8)


def add_glow(
    frame: np.ndarray,
    intensity: float = 0.3,
    radius: int = 15,
) -> np.ndarray:
    """
    Bloom: screen a blurred, dimmed copy of the frame over itself.

    Args:
        frame: (H, W, 3) uint8 RGB array.
        intensity: Strength of the blurred copy (0-1).
        radius: Gaussian blur radius in pixels.

    Returns:
        (H, W, 3) uint8 RGB array, never darker than the input.
    """
    if intensity <= 0:
        return frame

    image = Image.fromarray(frame)
    halo = image.filter(ImageFilter.GaussianBlur(radius=radius))
    halo = Image.blend(Image.new("RGB", image.size), halo, min(intensity, 1.0))
    return np.array(ImageChops.screen(image, halo))


def vignette(
    frame: np.ndarray,
    strength: float = 0.4,
) -> np.ndarray:
    """Quadratic darkening toward the corners; strength 1.0 turns them black."""
    if strength <= 0:
        return frame

    h, w = frame.shape[:2]
    y, x = np.ogrid[:h, :w]
    distance = np.hypot(x - w / 2, y - h / 2) / np.hypot(w / 2, h / 2)
    falloff = 1.0 - np.clip(distance * strength, 0.0, 1.0) ** 2
    return (frame * falloff[:, :, np.newaxis]).astype(np.uint8)
