"""Phase clock driving the rotational wobble of the organism."""

import math

TWO_PI = 2.0 * math.pi


def advance(
    phase: float,
    smoothed_frequency: float,
    smoothed_amplitude: float,
    delta_time: float,
    base_rate: float = 0.8,
    frequency_gain: float = 1.2,
    amplitude_gain: float = 0.0,
    wrap: bool = False,
) -> float:
    """
    Advance the phase by ``rate * delta_time``.

    The rate is ``base_rate`` plus frequency and amplitude contributions;
    set either gain to zero to follow only one of them. Phase is only
    consumed inside sin/cos, so wrapping modulo 2*pi is optional.
    """
    rate = base_rate + smoothed_frequency * frequency_gain + smoothed_amplitude * amplitude_gain
    phase += rate * delta_time
    if wrap:
        phase %= TWO_PI
    return phase
