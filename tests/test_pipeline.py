"""Tests for the session pipeline."""

import numpy as np
import pytest

from echo_imprint.config import get_preset
from echo_imprint.io.features import FeatureSample
from echo_imprint.io.specimen import Specimen
from echo_imprint.pipeline import OrganismPipeline
from echo_imprint.render.canvas import CanvasConfig

SMALL_CANVAS = CanvasConfig(width=48, height=48, supersample=1, glow_enabled=False)


class TestOrganismPipeline:
    def test_one_sample_per_frame(self, pure_sine):
        y, sr = pure_sine
        pipeline = OrganismPipeline(target_fps=60)
        features = pipeline.analyze(y, sr)

        # 2 seconds at 60 fps
        assert len(features) == 120
        assert all(isinstance(f, FeatureSample) for f in features)

    def test_analyze_levels(self, pure_sine):
        y, sr = pure_sine
        features = OrganismPipeline(target_fps=30).analyze(y, sr)

        amplitudes = [f.amplitude for f in features]
        assert min(amplitudes) > 0.8
        assert all(f.frequency < 0.1 for f in features)

    def test_analyze_empty_signal(self, sample_rate):
        assert OrganismPipeline().analyze(np.zeros(0, dtype=np.float32), sample_rate) == []

    def test_linear_amplitude_mode(self, pure_sine):
        y, sr = pure_sine
        features = OrganismPipeline(amplitude_mode="linear").analyze(y * 0.01, sr)
        assert features[-1].amplitude == pytest.approx(0.0318, abs=0.003)

    def test_simulate_frame_count(self):
        pipeline = OrganismPipeline(target_fps=30)
        assert len(pipeline.simulate(2.0)) == 60

    def test_each_session_starts_fresh(self):
        pipeline = OrganismPipeline()
        features = pipeline.simulate(1.0)

        for _ in pipeline.scenes(features):
            pass
        first = pipeline.freeze()
        for _ in pipeline.scenes(features):
            pass
        second = pipeline.freeze()

        assert first == second
        assert first.growth > 0.0

    def test_render_frames(self):
        pipeline = OrganismPipeline()
        features = pipeline.simulate(0.1)
        progress = []

        frames = list(
            pipeline.render_frames(features, SMALL_CANVAS, progress_callback=lambda c, t: progress.append((c, t)))
        )

        assert len(frames) == len(features) == 6
        assert frames[0].shape == (48, 48, 3)
        assert frames[0].dtype == np.uint8
        assert progress[-1] == (6, 6)

    def test_make_and_render_specimen(self):
        pipeline = OrganismPipeline(config=get_preset("glass_echo"))
        for _ in pipeline.scenes(pipeline.simulate(0.5)):
            pass

        specimen = pipeline.make_specimen(name="Test")
        assert isinstance(specimen, Specimen)
        assert specimen.growth == pipeline.freeze().growth

        image = pipeline.render_specimen(specimen, SMALL_CANVAS)
        assert image.shape == (48, 48, 3)

    def test_process_file(self, temp_audio_file):
        pipeline = OrganismPipeline(target_fps=30)
        result = pipeline.process(temp_audio_file)

        assert result["duration"] == pytest.approx(2.0, abs=0.01)
        assert result["n_frames"] == len(result["features"]) == 60
        assert result["fps"] == 30
