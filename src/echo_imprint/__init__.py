"""Sound organism engine: audio features in, breathing shapes out."""

from echo_imprint.config import Harmonic, OrganismConfig, get_preset
from echo_imprint.core.driver import FrameDriver, FrozenSnapshot
from echo_imprint.core.synth import Scene, synthesize, synthesize_frozen
from echo_imprint.io.features import FeatureSample, LatestFeatureSlot
from echo_imprint.io.specimen import Specimen

__version__ = "0.1.0"
__all__ = [
    "Harmonic",
    "OrganismConfig",
    "get_preset",
    "FrameDriver",
    "FrozenSnapshot",
    "Scene",
    "synthesize",
    "synthesize_frozen",
    "FeatureSample",
    "LatestFeatureSlot",
    "Specimen",
]
