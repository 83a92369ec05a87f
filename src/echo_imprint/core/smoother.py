"""
Signal smoothing for the raw feature channels.

Applies an exponential moving average to amplitude, frequency and
rhythm independently so the organism never shows raw metering jitter.
"""

import math
from dataclasses import dataclass

from echo_imprint.io.features import FeatureSample


def smooth(previous: float, raw: float, rate: float) -> float:
    """
    One EMA step toward the raw value.

    Args:
        previous: Last smoothed value.
        raw: Newest raw value.
        rate: Blend factor in (0, 1]; 1.0 jumps straight to ``raw``.

    Returns:
        The convex combination ``previous + (raw - previous) * rate``.
    """
    return previous + (raw - previous) * rate


def sanitize(raw: float, fallback: float) -> float:
    """Clamp a raw channel to [0, 1], substituting ``fallback`` for NaN/inf."""
    if not math.isfinite(raw):
        return fallback
    return min(1.0, max(0.0, raw))


@dataclass(frozen=True)
class SmoothedState:
    """Low-pass filtered feature channels."""

    amplitude: float = 0.0
    frequency: float = 0.0
    rhythm: float = 0.0


class SignalSmoother:
    """Per-channel EMA with channel-specific rates."""

    def __init__(
        self,
        amplitude_rate: float = 0.08,
        frequency_rate: float = 0.06,
        rhythm_rate: float = 0.08,
    ):
        self.amplitude_rate = amplitude_rate
        self.frequency_rate = frequency_rate
        self.rhythm_rate = rhythm_rate

    def update(self, state: SmoothedState, sample: FeatureSample) -> SmoothedState:
        """
        Advance all three channels by one tick.

        Out-of-range input is clamped and non-finite input leaves the
        channel where it was, so one bad meter reading cannot leak into
        growth or phase.
        """
        return SmoothedState(
            amplitude=smooth(
                state.amplitude,
                sanitize(sample.amplitude, state.amplitude),
                self.amplitude_rate,
            ),
            frequency=smooth(
                state.frequency,
                sanitize(sample.frequency, state.frequency),
                self.frequency_rate,
            ),
            rhythm=smooth(
                state.rhythm,
                sanitize(sample.rhythm, state.rhythm),
                self.rhythm_rate,
            ),
        )
