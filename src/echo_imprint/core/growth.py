"""
Growth accumulation.

Integrates smoothed amplitude into a slowly breathing size scalar.
Headroom scaling gives soft saturation toward ``max_growth``; the
per-frame decay lets the organism shrink back during silence.
"""


def accumulate(
    growth: float,
    smoothed_amplitude: float,
    delta_time: float,
    max_growth: float,
    gain: float = 24.0,
    decay: float = 0.993,
    reference_frame_rate: float = 60.0,
    floor: float = 1e-4,
) -> float:
    """
    Advance growth by one tick.

    Args:
        growth: Current growth (>= 0).
        smoothed_amplitude: Smoothed amplitude in [0, 1].
        delta_time: Elapsed seconds, already clamped by the caller.
        max_growth: Saturation level.
        gain: Growth per second at full amplitude and full headroom.
        decay: Multiplicative decay per reference frame (1.0 disables it).
        reference_frame_rate: Frame rate at which ``decay`` is defined.
        floor: Values below this snap to zero.

    Returns:
        New growth in [0, max_growth].
    """
    headroom = max(0.0, max_growth - growth)
    growth += smoothed_amplitude * gain * delta_time * (headroom / max_growth)
    growth *= decay ** (delta_time * reference_frame_rate)

    growth = min(growth, max_growth)
    if growth < floor:
        return 0.0
    return growth
