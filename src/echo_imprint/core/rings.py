"""
Ring emission and decay.

While the organism is loud enough it leaves faint echoes of its outline
behind at a fixed cadence; each echo fades by a fixed amount per tick
and is dropped once invisible.
"""

from dataclasses import dataclass, replace

# Tolerance on the interval check so accumulated 1/60 steps still land
# on the 0.25 s boundary.
_INTERVAL_EPSILON = 1e-9


@dataclass(frozen=True)
class Ring:
    """A decaying echo of a past outline."""

    radius: float
    opacity: float
    spawn_phase: float


class RingEmitter:
    """
    Time-gated ring source.

    Armed while less than ``interval`` seconds have accumulated since the
    last check, ready once it has. The timer resets on every ready tick
    whether or not a ring was emitted, so crossing the threshold after a
    quiet stretch never produces a burst.
    """

    def __init__(
        self,
        interval: float = 0.25,
        threshold: float = 0.05,
        initial_opacity: float = 0.35,
        opacity_decay: float = 0.004,
    ):
        self.interval = interval
        self.threshold = threshold
        self.initial_opacity = initial_opacity
        self.opacity_decay = opacity_decay

    def is_ready(self, last_ring_time: float) -> bool:
        return last_ring_time + _INTERVAL_EPSILON >= self.interval

    def step(
        self,
        rings: tuple[Ring, ...],
        last_ring_time: float,
        smoothed_amplitude: float,
        outer_radius: float,
        phase: float,
        delta_time: float,
    ) -> tuple[tuple[Ring, ...], float]:
        """
        Run one emission check followed by decay and pruning.

        Args:
            rings: Current rings, oldest first.
            last_ring_time: Seconds accumulated since the last check.
            smoothed_amplitude: Gate signal.
            outer_radius: Radius recorded on a new ring (base + growth).
            phase: Current phase, recorded as the ring's spawn phase.
            delta_time: Clamped tick duration.

        Returns:
            (surviving rings, new last_ring_time)
        """
        last_ring_time += delta_time
        pending = list(rings)

        if self.is_ready(last_ring_time):
            if smoothed_amplitude > self.threshold:
                pending.append(
                    Ring(
                        radius=outer_radius,
                        opacity=self.initial_opacity,
                        spawn_phase=phase,
                    )
                )
            last_ring_time = 0.0

        survivors = []
        for ring in pending:
            faded = replace(ring, opacity=ring.opacity - self.opacity_decay)
            if faded.opacity > 0:
                survivors.append(faded)

        return tuple(survivors), last_ring_time
