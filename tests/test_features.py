"""Tests for feature sources and the block meter."""

import threading

import numpy as np
import pytest

from echo_imprint.io.features import (
    BlockMeter,
    FeatureSample,
    LatestFeatureSlot,
    SimulatedFeatureSource,
)


class TestLatestFeatureSlot:
    def test_starts_silent(self):
        assert LatestFeatureSlot().latest() == FeatureSample()

    def test_latest_value_wins(self):
        slot = LatestFeatureSlot()
        slot.publish(FeatureSample(0.1, 0.2, 0.3))
        slot.publish(FeatureSample(0.4, 0.5, 0.6))
        assert slot.latest() == FeatureSample(0.4, 0.5, 0.6)

    def test_clear_returns_to_silence(self):
        slot = LatestFeatureSlot(FeatureSample(0.9, 0.9, 0.9))
        slot.clear()
        assert slot.latest() == FeatureSample()

    def test_concurrent_publish_never_tears(self):
        """Readers only ever see samples that were published whole."""
        slot = LatestFeatureSlot()
        published = {FeatureSample(v, v, v) for v in np.linspace(0.0, 1.0, 50)}
        published.add(FeatureSample())

        def producer():
            for _ in range(20):
                for sample in published:
                    slot.publish(sample)

        thread = threading.Thread(target=producer)
        thread.start()
        seen = [slot.latest() for _ in range(500)]
        thread.join()

        assert all(sample in published for sample in seen)


class TestSimulatedFeatureSource:
    def test_start_values(self):
        sample = SimulatedFeatureSource.sample_at(0.0)
        assert sample.amplitude == pytest.approx(0.4)
        assert sample.frequency == pytest.approx(0.5)
        assert sample.rhythm == pytest.approx(0.5)

    def test_ranges(self):
        samples = [SimulatedFeatureSource.sample_at(t) for t in np.linspace(0, 60, 2000)]
        assert all(0.0 <= s.amplitude <= 0.8 for s in samples)
        assert all(0.0 <= s.frequency <= 1.0 for s in samples)
        assert all(0.0 <= s.rhythm <= 1.0 for s in samples)

    def test_advance_publishes_to_slot(self):
        slot = LatestFeatureSlot()
        source = SimulatedFeatureSource(slot)
        sample = source.advance(0.5)

        assert slot.latest() == sample
        assert sample == SimulatedFeatureSource.sample_at(0.5)

    def test_reset_rewinds_time(self):
        source = SimulatedFeatureSource()
        first = source.advance(0.1)
        source.advance(3.0)
        source.reset()
        assert source.advance(0.1) == first


class TestBlockMeter:
    def test_invalid_amplitude_mode(self, sample_rate):
        with pytest.raises(ValueError, match="amplitude_mode"):
            BlockMeter(sample_rate, amplitude_mode="peak")

    def test_silence_reads_zero(self, sample_rate):
        meter = BlockMeter(sample_rate)
        sample = meter.measure(np.zeros(2048))
        assert sample == FeatureSample()

    def test_db_amplitude(self, pure_sine):
        y, sr = pure_sine
        meter = BlockMeter(sr)
        # 0.5 peak sine: RMS ~ -9 dBFS, which maps to ~0.85
        assert meter.amplitude(y[:2048]) == pytest.approx(0.85, abs=0.01)

    def test_linear_amplitude_is_capped(self, pure_sine):
        y, sr = pure_sine
        meter = BlockMeter(sr, amplitude_mode="linear")
        assert meter.amplitude(y[:2048]) == 1.0
        assert meter.amplitude(y[:2048] * 0.01) == pytest.approx(0.0318, abs=0.002)

    def test_noise_is_brighter_than_sine(self, pure_sine, white_noise):
        y_sine, sr = pure_sine
        y_noise, _ = white_noise

        sine = BlockMeter(sr).measure(y_sine[:2048])
        noise = BlockMeter(sr).measure(y_noise[:2048])

        assert sine.frequency < 0.1
        assert noise.frequency > 0.3
        assert noise.frequency > sine.frequency

    def test_first_block_has_no_rhythm(self, white_noise):
        y, sr = white_noise
        assert BlockMeter(sr).measure(y[:2048]).rhythm == 0.0

    def test_steady_tone_has_no_flux(self, pure_sine):
        y, sr = pure_sine
        meter = BlockMeter(sr)
        block = y[:2048]
        meter.measure(block)
        assert meter.measure(block).rhythm == pytest.approx(0.0, abs=1e-9)

    def test_change_produces_flux(self, pure_sine, white_noise):
        y_sine, sr = pure_sine
        y_noise, _ = white_noise
        meter = BlockMeter(sr)
        meter.measure(y_sine[:2048])
        assert meter.measure(y_noise[:2048]).rhythm > 0.1

    def test_reset_forgets_previous_block(self, pure_sine, white_noise):
        y_sine, sr = pure_sine
        y_noise, _ = white_noise
        meter = BlockMeter(sr)
        meter.measure(y_sine[:2048])
        meter.reset()
        assert meter.measure(y_noise[:2048]).rhythm == 0.0

    def test_multichannel_is_averaged(self, pure_sine):
        y, sr = pure_sine
        stereo = np.column_stack((y[:2048], y[:2048]))
        mono = BlockMeter(sr).measure(y[:2048])
        mixed = BlockMeter(sr).measure(stereo)
        assert mixed.amplitude == pytest.approx(mono.amplitude)
        assert mixed.frequency == pytest.approx(mono.frequency)

    def test_tiny_block_is_silent(self, sample_rate):
        assert BlockMeter(sample_rate).measure(np.array([0.5])) == FeatureSample()

    def test_values_in_unit_range(self, white_noise):
        y, sr = white_noise
        meter = BlockMeter(sr)
        for start in range(0, len(y) - 1024, 1024):
            sample = meter.measure(y[start:start + 1024] * 4.0)
            for value in (sample.amplitude, sample.frequency, sample.rhythm):
                assert 0.0 <= value <= 1.0
