"""
Frame driver.

The only stateful piece of the engine. Once per rendering frame it
smooths the latest feature sample, advances the phase clock, growth
and rings, and hands back an immutable Scene.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator

from echo_imprint.config import OrganismConfig
from echo_imprint.core.growth import accumulate
from echo_imprint.core.phase import advance
from echo_imprint.core.rings import Ring, RingEmitter
from echo_imprint.core.smoother import SignalSmoother, SmoothedState
from echo_imprint.core.synth import Scene, synthesize
from echo_imprint.io.features import FeatureSample, LatestFeatureSlot


@dataclass
class EngineState:
    """Mutable per-session state; zero/empty at session start."""

    growth: float = 0.0
    phase: float = 0.0
    rings: tuple[Ring, ...] = ()
    last_ring_time: float = 0.0
    smoothed: SmoothedState = field(default_factory=SmoothedState)


@dataclass(frozen=True)
class FrozenSnapshot:
    """Final smoothed values and growth handed over when a session stops."""

    amplitude: float
    frequency: float
    rhythm: float
    growth: float


class FrameDriver:
    """
    Advances one EngineState per tick.

    Feature input is either passed to ``tick`` directly or read from an
    attached LatestFeatureSlot; the driver never queues samples.
    """

    def __init__(
        self,
        config: OrganismConfig | None = None,
        source: LatestFeatureSlot | None = None,
        on_growth: Callable[[float], None] | None = None,
        center: tuple[float, float] = (0.0, 0.0),
    ):
        """
        Args:
            config: Engine constants (validated here).
            source: Slot read when ``tick`` gets no explicit sample.
            on_growth: Called with the current growth after every tick.
            center: Shape centre passed through to the synthesizer.
        """
        self.cfg = (config or OrganismConfig()).validate()
        self.source = source
        self.on_growth = on_growth
        self.center = center

        self.smoother = SignalSmoother(
            amplitude_rate=self.cfg.amplitude_rate,
            frequency_rate=self.cfg.frequency_rate,
            rhythm_rate=self.cfg.rhythm_rate,
        )
        self.emitter = RingEmitter(
            interval=self.cfg.emit_interval,
            threshold=self.cfg.emit_threshold,
            initial_opacity=self.cfg.ring_initial_opacity,
            opacity_decay=self.cfg.ring_opacity_decay,
        )

        self.state = EngineState()
        self.scene: Scene | None = None

    def reset(self):
        """Start a new session: no growth, rings or phase carry over."""
        self.state = EngineState()
        self.scene = None

    def _read_sample(self) -> FeatureSample:
        if self.source is None:
            return FeatureSample()
        return self.source.latest()

    def tick(self, delta_time: float, sample: FeatureSample | None = None) -> Scene:
        """
        Advance the engine by one frame.

        Args:
            delta_time: Seconds since the previous tick; clamped to
                [0, max_delta_time] so a stall cannot blow up growth.
            sample: Latest features; read from the attached slot if None.

        Returns:
            Scene for this frame.
        """
        cfg = self.cfg
        state = self.state
        dt = min(max(delta_time, 0.0), cfg.max_delta_time)

        if sample is None:
            sample = self._read_sample()

        state.smoothed = self.smoother.update(state.smoothed, sample)
        smoothed = state.smoothed

        state.phase = advance(
            state.phase,
            smoothed.frequency,
            smoothed.amplitude,
            dt,
            base_rate=cfg.phase_base_rate,
            frequency_gain=cfg.phase_frequency_gain,
            amplitude_gain=cfg.phase_amplitude_gain,
            wrap=cfg.wrap_phase,
        )

        state.growth = accumulate(
            state.growth,
            smoothed.amplitude,
            dt,
            cfg.max_growth,
            gain=cfg.growth_gain,
            decay=cfg.growth_decay,
            reference_frame_rate=cfg.reference_frame_rate,
            floor=cfg.growth_floor,
        )

        state.rings, state.last_ring_time = self.emitter.step(
            state.rings,
            state.last_ring_time,
            smoothed.amplitude,
            outer_radius=cfg.base_radius + state.growth,
            phase=state.phase,
            delta_time=dt,
        )

        self.scene = synthesize(
            smoothed, state.growth, state.phase, state.rings, cfg, self.center
        )

        if self.on_growth is not None:
            self.on_growth(state.growth)

        return self.scene

    def run(self, samples: Iterable[FeatureSample], delta_time: float) -> Iterator[Scene]:
        """Drive a fixed-rate sequence of samples, yielding one Scene per sample."""
        for sample in samples:
            yield self.tick(delta_time, sample)

    def freeze(self) -> FrozenSnapshot:
        """Capture the values a specimen is made from."""
        smoothed = self.state.smoothed
        return FrozenSnapshot(
            amplitude=smoothed.amplitude,
            frequency=smoothed.frequency,
            rhythm=smoothed.rhythm,
            growth=self.state.growth,
        )
