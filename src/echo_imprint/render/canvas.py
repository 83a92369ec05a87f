"""
Scene rasterizer.

Draws a Scene into an RGB numpy frame with Pillow, compositing each
translucent layer in painter's order, then applies optional glow and
vignette. Scene units are mapped so that a 320-unit square fills the
shorter side of the canvas.
"""

from dataclasses import dataclass

import numpy as np
from PIL import Image, ImageDraw

from echo_imprint.core.synth import GlowDisc, Polygon, RadialGradient, Scene
from echo_imprint.render.colorgrade import add_glow, radial_gradient, to_rgba8, vignette

# Scene units spanned by the shorter canvas side at scale=None.
REFERENCE_EXTENT = 320.0


@dataclass
class CanvasConfig:
    """Configuration for rasterizing scenes."""

    width: int = 640
    height: int = 640
    scale: float | None = None  # pixels per scene unit; None fits REFERENCE_EXTENT
    supersample: int = 2  # draw at N x size then downsample for smooth edges
    background_color: tuple[int, int, int] = (8, 8, 20)

    # Post-processing
    glow_enabled: bool = True
    glow_intensity: float = 0.3
    glow_radius: int = 10
    vignette_strength: float = 0.25


class SceneRasterizer:
    """Turns Scenes into (H, W, 3) uint8 frames."""

    def __init__(self, config: CanvasConfig | None = None):
        self.cfg = config or CanvasConfig()
        if self.cfg.supersample < 1:
            raise ValueError("supersample must be >= 1")

        ss = self.cfg.supersample
        self._size = (self.cfg.width * ss, self.cfg.height * ss)
        base_scale = self.cfg.scale or min(self.cfg.width, self.cfg.height) / REFERENCE_EXTENT
        self._scale = base_scale * ss

    def to_pixels(self, points: np.ndarray) -> list[tuple[float, float]]:
        """Map scene coordinates (origin at canvas centre) to supersampled pixels."""
        w, h = self._size
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        px = w / 2.0 + pts[:, 0] * self._scale
        py = h / 2.0 + pts[:, 1] * self._scale
        return list(zip(px.tolist(), py.tolist()))

    def _gradient_layer(self, gradient: RadialGradient) -> np.ndarray:
        w, h = self._size
        (center,) = self.to_pixels(np.array([gradient.center]))
        return radial_gradient(w, h, center, gradient.radius * self._scale, gradient.stops)

    def _masked(self, rgba: np.ndarray, mask: Image.Image) -> Image.Image:
        rgba = rgba.copy()
        coverage = np.asarray(mask, dtype=np.float32) / 255.0
        rgba[:, :, 3] = (rgba[:, :, 3].astype(np.float32) * coverage).astype(np.uint8)
        return Image.fromarray(rgba)

    def _draw_glow(self, canvas: Image.Image, glow: GlowDisc):
        ((cx, cy),) = self.to_pixels(np.array([glow.center]))
        r = glow.radius * self._scale
        mask = Image.new("L", self._size, 0)
        ImageDraw.Draw(mask).ellipse((cx - r, cy - r, cx + r, cy + r), fill=255)
        canvas.alpha_composite(self._masked(self._gradient_layer(glow.fill), mask))

    def _draw_polygon(self, canvas: Image.Image, poly: Polygon):
        pts = self.to_pixels(poly.points)
        if len(pts) < 3:
            return

        if isinstance(poly.fill, RadialGradient):
            mask = Image.new("L", self._size, 0)
            ImageDraw.Draw(mask).polygon(pts, fill=255)
            canvas.alpha_composite(self._masked(self._gradient_layer(poly.fill), mask))
        elif poly.fill is not None:
            layer = Image.new("RGBA", self._size, (0, 0, 0, 0))
            ImageDraw.Draw(layer).polygon(pts, fill=to_rgba8(poly.fill))
            canvas.alpha_composite(layer)

        if poly.stroke is not None:
            width = max(1, int(round(poly.stroke_width * self._scale)))
            layer = Image.new("RGBA", self._size, (0, 0, 0, 0))
            ImageDraw.Draw(layer).line(
                pts + [pts[0]], fill=to_rgba8(poly.stroke), width=width, joint="curve"
            )
            canvas.alpha_composite(layer)

    def render(self, scene: Scene) -> np.ndarray:
        """
        Rasterize one scene.

        Args:
            scene: Output of the synthesizer.

        Returns:
            (height, width, 3) uint8 RGB array.
        """
        cfg = self.cfg
        canvas = Image.new("RGBA", self._size, (*cfg.background_color, 255))

        for layer in scene.layers():
            if isinstance(layer, GlowDisc):
                self._draw_glow(canvas, layer)
            else:
                self._draw_polygon(canvas, layer)

        if cfg.supersample > 1:
            canvas = canvas.resize((cfg.width, cfg.height), Image.LANCZOS)

        frame = np.array(canvas.convert("RGB"), dtype=np.uint8)

        if cfg.glow_enabled:
            frame = add_glow(frame, intensity=cfg.glow_intensity, radius=cfg.glow_radius)
        if cfg.vignette_strength > 0:
            frame = vignette(frame, strength=cfg.vignette_strength)

        return frame

    def save_png(self, scene: Scene, output_path) -> None:
        Image.fromarray(self.render(scene)).save(output_path, format="PNG")
