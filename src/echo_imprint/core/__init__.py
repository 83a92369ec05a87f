"""Core sound organism engine."""

from echo_imprint.core.driver import EngineState, FrameDriver, FrozenSnapshot
from echo_imprint.core.growth import accumulate
from echo_imprint.core.phase import advance
from echo_imprint.core.rings import Ring, RingEmitter
from echo_imprint.core.smoother import SignalSmoother, SmoothedState, smooth
from echo_imprint.core.synth import Scene, build_deformed_ring, synthesize, synthesize_frozen

__all__ = [
    "EngineState",
    "FrameDriver",
    "FrozenSnapshot",
    "accumulate",
    "advance",
    "Ring",
    "RingEmitter",
    "SignalSmoother",
    "SmoothedState",
    "smooth",
    "Scene",
    "build_deformed_ring",
    "synthesize",
    "synthesize_frozen",
]
