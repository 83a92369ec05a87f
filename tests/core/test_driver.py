"""Tests for the frame driver."""

import math

import numpy as np
import pytest

from echo_imprint.config import PRESETS, OrganismConfig, get_preset
from echo_imprint.core.driver import FrameDriver, FrozenSnapshot
from echo_imprint.core.synth import synthesize, synthesize_frozen
from echo_imprint.io.features import FeatureSample, LatestFeatureSlot

DT = 1.0 / 60.0


class TestFrameDriver:
    def test_one_second_of_steady_input(self, steady_sample):
        driver = FrameDriver()
        for _ in range(60):
            scene = driver.tick(DT, steady_sample)

        state = driver.state
        assert state.growth > 0.0
        assert state.phase > 0.0
        assert len(state.rings) in (3, 4)
        assert len(scene.rings) == len(state.rings)
        assert scene.current_radius == pytest.approx(driver.cfg.base_radius + state.growth)

    def test_initial_state_is_empty(self):
        driver = FrameDriver()
        assert driver.state.growth == 0.0
        assert driver.state.phase == 0.0
        assert driver.state.rings == ()
        assert driver.scene is None

    def test_large_delta_is_clamped(self, steady_sample):
        stalled = FrameDriver()
        stalled.tick(10.0, steady_sample)
        capped = FrameDriver()
        capped.tick(capped.cfg.max_delta_time, steady_sample)

        assert stalled.state.phase == pytest.approx(capped.state.phase)
        assert stalled.state.growth == pytest.approx(capped.state.growth)

    def test_negative_delta_does_not_advance(self, steady_sample):
        driver = FrameDriver()
        driver.tick(-1.0, steady_sample)
        assert driver.state.phase == 0.0
        assert driver.state.growth == 0.0

    def test_reset_starts_a_new_session(self, steady_sample):
        driver = FrameDriver()
        for _ in range(30):
            driver.tick(DT, steady_sample)
        driver.reset()

        assert driver.state.growth == 0.0
        assert driver.state.phase == 0.0
        assert driver.state.rings == ()
        assert driver.state.last_ring_time == 0.0

    def test_on_growth_called_every_tick(self, steady_sample):
        seen = []
        driver = FrameDriver(on_growth=seen.append)
        for _ in range(5):
            driver.tick(DT, steady_sample)

        assert len(seen) == 5
        assert seen[-1] == driver.state.growth
        assert seen == sorted(seen)

    def test_reads_latest_slot_value(self):
        slot = LatestFeatureSlot()
        driver = FrameDriver(source=slot)

        slot.publish(FeatureSample(amplitude=0.2))
        slot.publish(FeatureSample(amplitude=1.0))
        driver.tick(DT)

        assert driver.state.smoothed.amplitude == pytest.approx(driver.cfg.amplitude_rate)

    def test_without_source_ticks_silence(self):
        driver = FrameDriver()
        driver.tick(DT)
        assert driver.state.smoothed.amplitude == 0.0

    def test_nan_input_keeps_state_finite(self, steady_sample):
        driver = FrameDriver()
        driver.tick(DT, steady_sample)
        scene = driver.tick(DT, FeatureSample(math.nan, math.inf, -math.inf))

        assert math.isfinite(driver.state.growth)
        assert math.isfinite(driver.state.phase)
        assert np.all(np.isfinite(scene.body.points))

    def test_run_yields_one_scene_per_sample(self, steady_sample):
        driver = FrameDriver()
        scenes = list(driver.run([steady_sample] * 12, DT))
        assert len(scenes) == 12
        assert scenes[-1] is driver.scene

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError, match="amplitude_rate"):
            FrameDriver(OrganismConfig(amplitude_rate=0.0))


class TestFreeze:
    def test_snapshot_holds_final_values(self, steady_sample):
        driver = FrameDriver()
        for _ in range(20):
            driver.tick(DT, steady_sample)

        snapshot = driver.freeze()
        assert isinstance(snapshot, FrozenSnapshot)
        assert snapshot.amplitude == driver.state.smoothed.amplitude
        assert snapshot.frequency == driver.state.smoothed.frequency
        assert snapshot.rhythm == driver.state.smoothed.rhythm
        assert snapshot.growth == driver.state.growth

    def test_frozen_render_matches_for_equal_snapshots(self, steady_sample):
        a, b = FrameDriver(), FrameDriver()
        for _ in range(40):
            a.tick(DT, steady_sample)
            b.tick(DT, steady_sample)

        scene_a = synthesize_frozen(a.freeze())
        scene_b = synthesize_frozen(b.freeze())
        np.testing.assert_array_equal(scene_a.body.points, scene_b.body.points)
        assert scene_a.rings == ()

    @pytest.mark.parametrize("preset", sorted(PRESETS))
    def test_frozen_render_matches_final_live_state(self, preset, steady_sample):
        """Freezing a settled session reproduces its body and core at the fixed phase."""
        driver = FrameDriver(get_preset(preset))
        for _ in range(600):
            live = driver.tick(DT, steady_sample)

        final = driver.state
        frozen = synthesize_frozen(driver.freeze(), driver.cfg)
        expected = synthesize(final.smoothed, final.growth, driver.cfg.frozen_phase, (), driver.cfg)

        np.testing.assert_array_equal(frozen.body.points, expected.body.points)
        np.testing.assert_array_equal(frozen.core.points, expected.core.points)
        assert frozen.current_radius == live.current_radius
        assert frozen.body.fill == live.body.fill
        assert live.rings != ()
        assert frozen.rings == ()
