"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from echo_imprint.config import OrganismConfig
from echo_imprint.io.features import FeatureSample

# Default sample rate for test audio
TEST_SR = 22050


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def config() -> OrganismConfig:
    """Default engine configuration."""
    return OrganismConfig()


@pytest.fixture
def steady_sample() -> FeatureSample:
    """A moderately loud, mid-pitch, mid-rhythm reading."""
    return FeatureSample(amplitude=0.5, frequency=0.3, rhythm=0.4)


@pytest.fixture
def pure_sine(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate a pure 440Hz sine wave (A4 note).

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 2.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    return y.astype(np.float32), sample_rate


@pytest.fixture
def white_noise(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate white noise.

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    rng = np.random.default_rng(42)  # Reproducible
    samples = int(sample_rate * 2.0)
    y = rng.standard_normal(samples).astype(np.float32) * 0.3
    return y, sample_rate


@pytest.fixture
def temp_audio_file(tmp_path, pure_sine):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    y, sr = pure_sine
    audio_path = tmp_path / "test_audio.wav"
    sf.write(audio_path, y, sr)
    return audio_path
