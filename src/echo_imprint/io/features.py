"""
Feature input for the organism.

Provides the FeatureSample record, a single-slot latest-value handoff
for samples produced on another thread, a sinusoidal simulation source
and a block meter that derives the three features from raw audio.
"""

import math
import threading
from dataclasses import dataclass

import numpy as np
from scipy import signal as scipy_signal


@dataclass(frozen=True)
class FeatureSample:
    """Latest meter reading; each channel is expected in [0, 1]."""

    amplitude: float = 0.0
    frequency: float = 0.0
    rhythm: float = 0.0


class LatestFeatureSlot:
    """
    Single-slot overwrite buffer.

    Producers publish at their own rate, the frame driver reads whatever
    is newest. Nothing is queued; stale reads are expected.
    """

    def __init__(self, initial: FeatureSample | None = None):
        self._lock = threading.Lock()
        self._sample = initial or FeatureSample()

    def publish(self, sample: FeatureSample):
        with self._lock:
            self._sample = sample

    def latest(self) -> FeatureSample:
        with self._lock:
            return self._sample

    def clear(self):
        """Back to silence, as when a recording stops."""
        self.publish(FeatureSample())


class SimulatedFeatureSource:
    """
    Slowly drifting sine features for running without audio.

    Amplitude swings between 0 and 0.8; frequency and rhythm use the full
    range at different speeds so the three channels never line up.
    """

    def __init__(self, slot: LatestFeatureSlot | None = None, speed: float = 2.0):
        """
        Args:
            slot: If given, every advanced sample is published here.
            speed: Simulation ticks per second.
        """
        self.slot = slot
        self.speed = speed
        self.time = 0.0

    @staticmethod
    def sample_at(t: float, speed: float = 2.0) -> FeatureSample:
        """Deterministic sample at ``t`` seconds."""
        tick = t * speed
        return FeatureSample(
            amplitude=(math.sin(tick * 1.3) + 1.0) / 2.0 * 0.8,
            frequency=(math.sin(tick * 0.7) + 1.0) / 2.0,
            rhythm=(math.sin(tick * 2.1) + 1.0) / 2.0,
        )

    def advance(self, delta_time: float) -> FeatureSample:
        self.time += delta_time
        sample = self.sample_at(self.time, self.speed)
        if self.slot is not None:
            self.slot.publish(sample)
        return sample

    def reset(self):
        self.time = 0.0


class BlockMeter:
    """
    Derives amplitude, frequency and rhythm from successive audio blocks.

    - Amplitude: RMS level in dBFS mapped from [floor_db, 0] onto [0, 1],
      or mean absolute level times a gain ("linear" mode).
    - Frequency: spectral centroid mapped from [min_hz, max_hz] onto [0, 1].
    - Rhythm: positive spectral flux against the previous block.
    """

    def __init__(
        self,
        sample_rate: int,
        amplitude_mode: str = "db",
        floor_db: float = -60.0,
        linear_gain: float = 10.0,
        min_hz: float = 100.0,
        max_hz: float = 10000.0,
        flux_gain: float = 2.0,
    ):
        if amplitude_mode not in ("db", "linear"):
            raise ValueError(f"amplitude_mode must be 'db' or 'linear', got {amplitude_mode!r}")
        self.sample_rate = sample_rate
        self.amplitude_mode = amplitude_mode
        self.floor_db = floor_db
        self.linear_gain = linear_gain
        self.min_hz = min_hz
        self.max_hz = max_hz
        self.flux_gain = flux_gain

        self._windows: dict[int, np.ndarray] = {}
        self._previous_spectrum: np.ndarray | None = None

    def reset(self):
        self._previous_spectrum = None

    def _window(self, n: int) -> np.ndarray:
        if n not in self._windows:
            self._windows[n] = scipy_signal.get_window("hann", n)
        return self._windows[n]

    def amplitude(self, block: np.ndarray) -> float:
        if len(block) == 0:
            return 0.0
        if self.amplitude_mode == "linear":
            return float(min(np.mean(np.abs(block)) * self.linear_gain, 1.0))

        rms = float(np.sqrt(np.mean(np.square(block))))
        db = 20.0 * math.log10(rms + 1e-10)
        return float(np.clip((db - self.floor_db) / -self.floor_db, 0.0, 1.0))

    def spectrum(self, block: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Windowed magnitude spectrum and its bin frequencies."""
        n = len(block)
        magnitudes = np.abs(np.fft.rfft(block * self._window(n)))
        freqs = np.fft.rfftfreq(n, d=1.0 / self.sample_rate)
        return magnitudes, freqs

    def frequency(self, magnitudes: np.ndarray, freqs: np.ndarray) -> float:
        total = float(np.sum(magnitudes))
        if total < 1e-9:
            return 0.0
        centroid = float(np.sum(freqs * magnitudes) / total)
        return float(np.clip((centroid - self.min_hz) / (self.max_hz - self.min_hz), 0.0, 1.0))

    def rhythm(self, magnitudes: np.ndarray) -> float:
        total = float(np.sum(magnitudes))
        current = magnitudes / total if total > 1e-9 else np.zeros_like(magnitudes)

        previous = self._previous_spectrum
        self._previous_spectrum = current
        if previous is None or previous.shape != current.shape:
            return 0.0

        flux = float(np.sum(np.maximum(current - previous, 0.0)))
        return float(np.clip(flux * self.flux_gain, 0.0, 1.0))

    def measure(self, block: np.ndarray) -> FeatureSample:
        """Meter one block of mono samples."""
        block = np.asarray(block, dtype=np.float64)
        if block.ndim > 1:
            block = block.mean(axis=1)
        if len(block) < 2:
            return FeatureSample()

        magnitudes, freqs = self.spectrum(block)
        return FeatureSample(
            amplitude=self.amplitude(block),
            frequency=self.frequency(magnitudes, freqs),
            rhythm=self.rhythm(magnitudes),
        )
