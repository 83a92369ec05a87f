"""
Live pygame preview.

Runs the organism in a window at the display's frame rate, fed by the
simulation source through a latest-value slot. Space starts a session
(resetting the engine) or stops it (freezing a specimen, printed as
JSON); Esc quits.

Usage:
    echo-imprint-preview [options]
"""

import argparse
import json
import sys

import pygame

from echo_imprint.config import PRESETS, get_preset
from echo_imprint.core.driver import FrameDriver
from echo_imprint.core.synth import GlowDisc, Polygon, RadialGradient, Scene
from echo_imprint.io.features import LatestFeatureSlot, SimulatedFeatureSource
from echo_imprint.io.specimen import Specimen
from echo_imprint.render.canvas import REFERENCE_EXTENT
from echo_imprint.render.colorgrade import to_rgba8

BACKGROUND = (8, 8, 20)


def _to_screen(points, center: tuple[float, float], scale: float) -> list[tuple[float, float]]:
    cx, cy = center
    return [(cx + x * scale, cy + y * scale) for x, y in points]


def _draw_gradient_disc(
    surface: pygame.Surface,
    gradient: RadialGradient,
    center: tuple[float, float],
    radius: float,
    steps: int = 16,
):
    """Approximate a radial gradient with concentric translucent circles."""
    inner = to_rgba8(gradient.stops[0][1])
    outer = to_rgba8(gradient.stops[-1][1])
    for i in range(steps, 0, -1):
        ratio = i / steps
        color = tuple(int(inner[c] * (1 - ratio) + outer[c] * ratio) for c in range(4))
        # Each ring overlaps all smaller ones, so thin the alpha per step
        color = (*color[:3], max(1, color[3] // steps))
        pygame.draw.circle(surface, color, center, max(1, int(radius * ratio)))


def draw_scene(surface: pygame.Surface, scene: Scene, scale: float | None = None):
    """
    Draw a Scene onto a pygame surface, centred.

    Each layer goes through its own SRCALPHA surface so translucent
    colours blend instead of overwriting.
    """
    width, height = surface.get_size()
    scale = scale or min(width, height) / REFERENCE_EXTENT
    center = (width / 2, height / 2)

    for layer in scene.layers():
        overlay = pygame.Surface((width, height), pygame.SRCALPHA)

        if isinstance(layer, GlowDisc):
            _draw_gradient_disc(overlay, layer.fill, center, layer.radius * scale)
        elif isinstance(layer, Polygon):
            pts = _to_screen(layer.points, center, scale)
            if isinstance(layer.fill, RadialGradient):
                pygame.draw.polygon(overlay, to_rgba8(layer.fill.stops[0][1]), pts)
            elif layer.fill is not None:
                pygame.draw.polygon(overlay, to_rgba8(layer.fill), pts)
            if layer.stroke is not None:
                pygame.draw.polygon(
                    overlay,
                    to_rgba8(layer.stroke),
                    pts,
                    max(1, int(round(layer.stroke_width * scale))),
                )

        surface.blit(overlay, (0, 0))


def main():
    parser = argparse.ArgumentParser(
        prog="echo-imprint-preview",
        description="Live sound organism preview driven by simulated features",
    )
    parser.add_argument("--size", type=int, default=640, help="Window size in pixels (default: 640)")
    parser.add_argument("-f", "--fps", type=int, default=60, help="Target frame rate (default: 60)")
    parser.add_argument(
        "--preset", type=str, default="default",
        choices=sorted(PRESETS),
        help="Engine preset (default: default)",
    )
    args = parser.parse_args()

    pygame.init()
    screen = pygame.display.set_mode((args.size, args.size))
    pygame.display.set_caption("Echo Imprint")
    clock = pygame.time.Clock()

    slot = LatestFeatureSlot()
    source = SimulatedFeatureSource(slot)
    driver = FrameDriver(get_preset(args.preset), source=slot)
    recording = True

    print("Recording... (space: stop/start, esc: quit)")
    running = True
    while running:
        dt = clock.tick(args.fps) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE:
                    if recording:
                        specimen = Specimen.from_snapshot(driver.freeze(), preset=args.preset)
                        print(json.dumps(specimen.to_dict(), indent=2))
                        slot.clear()
                    else:
                        driver.reset()
                        source.reset()
                        print("Recording...")
                    recording = not recording

        if recording:
            source.advance(dt)

        scene = driver.tick(dt)
        screen.fill(BACKGROUND)
        draw_scene(screen, scene)
        pygame.display.flip()

    pygame.quit()
    sys.exit(0)


if __name__ == "__main__":
    main()
