"""Tests for the pygame preview drawing."""

import os

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
pygame = pytest.importorskip("pygame")

from echo_imprint.core.driver import FrameDriver  # noqa: E402
from echo_imprint.io.features import FeatureSample  # noqa: E402
from echo_imprint.render.preview import BACKGROUND, draw_scene  # noqa: E402


@pytest.fixture
def scene():
    driver = FrameDriver()
    for _ in range(40):
        driver.tick(1 / 60, FeatureSample(0.7, 0.7, 0.5))
    return driver.scene


class TestDrawScene:
    def test_draws_over_background(self, scene):
        surface = pygame.Surface((160, 160))
        surface.fill(BACKGROUND)
        draw_scene(surface, scene)

        assert tuple(surface.get_at((80, 80)))[:3] != BACKGROUND
        assert tuple(surface.get_at((0, 0)))[:3] == BACKGROUND

    def test_explicit_scale_shrinks_drawing(self, scene):
        surface = pygame.Surface((160, 160))
        surface.fill(BACKGROUND)
        draw_scene(surface, scene, scale=0.05)

        # At this scale the whole organism stays within a few pixels of the centre
        assert tuple(surface.get_at((80, 30)))[:3] == BACKGROUND
