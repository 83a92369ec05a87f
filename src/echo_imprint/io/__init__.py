"""Feature input and specimen records."""

from echo_imprint.io.features import (
    BlockMeter,
    FeatureSample,
    LatestFeatureSlot,
    SimulatedFeatureSource,
)
from echo_imprint.io.specimen import Specimen

__all__ = [
    "BlockMeter",
    "FeatureSample",
    "LatestFeatureSlot",
    "SimulatedFeatureSource",
    "Specimen",
]
