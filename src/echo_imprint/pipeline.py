"""
Session pipeline.

Orchestrates the flow from an audio file (or the simulation source) to
per-frame features, through a driven organism session, to raster
frames and a final frozen specimen.
"""

import math
from pathlib import Path
from typing import Any, Callable, Iterator, Union

import librosa
import numpy as np

from echo_imprint.config import OrganismConfig
from echo_imprint.core.driver import FrameDriver, FrozenSnapshot
from echo_imprint.core.synth import Scene, synthesize_frozen
from echo_imprint.io.features import BlockMeter, FeatureSample, SimulatedFeatureSource
from echo_imprint.io.specimen import Specimen
from echo_imprint.render.canvas import CanvasConfig, SceneRasterizer


class OrganismPipeline:
    """
    Complete audio-to-frames processing pipeline.

    Meters audio into one FeatureSample per video frame, then drives a
    FrameDriver at a fixed delta time so offline renders match what a
    live session at the same frame rate would show.
    """

    def __init__(
        self,
        target_fps: int = 60,
        sample_rate: int = 22050,
        n_fft: int = 2048,
        config: OrganismConfig | None = None,
        amplitude_mode: str = "db",
    ):
        """
        Initialize the pipeline.

        Args:
            target_fps: Frames per second of the driven session.
            sample_rate: Analysis sample rate (22050 is efficient).
            n_fft: Metering window in samples.
            config: Organism constants.
            amplitude_mode: "db" (RMS level) or "linear" (mean level x gain).
        """
        self.target_fps = target_fps or 60
        self.sample_rate = sample_rate
        self.n_fft = n_fft
        self.config = config or OrganismConfig()
        self.amplitude_mode = amplitude_mode

        self.driver = FrameDriver(self.config)

    @property
    def delta_time(self) -> float:
        return 1.0 / self.target_fps

    def load_audio(self, audio_path: Union[str, Path]) -> tuple[np.ndarray, int]:
        """Load audio as mono at the analysis sample rate."""
        y, sr = librosa.load(audio_path, sr=self.sample_rate, mono=True)
        return y, sr

    def analyze(self, y: np.ndarray, sr: int) -> list[FeatureSample]:
        """
        Meter a signal into one sample per output frame.

        Each frame sees the ``n_fft`` samples ending at its timestamp.
        """
        meter = BlockMeter(sr, amplitude_mode=self.amplitude_mode)
        hop = sr / self.target_fps
        n_frames = int(math.ceil(len(y) / hop)) if len(y) else 0

        features = []
        for i in range(n_frames):
            end = min(len(y), int(round((i + 1) * hop)))
            start = max(0, end - self.n_fft)
            features.append(meter.measure(y[start:end]))
        return features

    def simulate(self, duration: float) -> list[FeatureSample]:
        """Simulated features for ``duration`` seconds."""
        n_frames = int(round(duration * self.target_fps))
        return [
            SimulatedFeatureSource.sample_at((i + 1) * self.delta_time)
            for i in range(n_frames)
        ]

    def scenes(self, features: list[FeatureSample]) -> Iterator[Scene]:
        """Run a fresh session over the features, one Scene per frame."""
        self.driver.reset()
        yield from self.driver.run(features, self.delta_time)

    def render_frames(
        self,
        features: list[FeatureSample],
        canvas: CanvasConfig | None = None,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> Iterator[np.ndarray]:
        """
        Render a session as a generator of frames.

        Args:
            features: One sample per frame.
            canvas: Raster settings.
            progress_callback: Optional callback(current, total).

        Yields:
            (H, W, 3) uint8 RGB arrays, one per frame.
        """
        rasterizer = SceneRasterizer(canvas)
        total = len(features)

        for i, scene in enumerate(self.scenes(features)):
            yield rasterizer.render(scene)

            if progress_callback:
                progress_callback(i + 1, total)

    def freeze(self) -> FrozenSnapshot:
        """Snapshot of the most recent session."""
        return self.driver.freeze()

    def make_specimen(self, **kwargs: Any) -> Specimen:
        return Specimen.from_snapshot(self.freeze(), **kwargs)

    def render_specimen(self, specimen: Specimen, canvas: CanvasConfig | None = None) -> np.ndarray:
        """Static frozen rendering of a specimen."""
        return SceneRasterizer(canvas).render(synthesize_frozen(specimen, self.config))

    def process(self, audio_path: Union[str, Path]) -> dict[str, Any]:
        """
        Load and meter an audio file.

        Returns:
            Dictionary with features and processing info.
        """
        y, sr = self.load_audio(audio_path)
        features = self.analyze(y, sr)
        return {
            "features": features,
            "duration": len(y) / sr if sr else 0.0,
            "n_frames": len(features),
            "fps": self.target_fps,
        }
