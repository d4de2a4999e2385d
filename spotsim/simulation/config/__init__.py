"""Configuration dataclasses and presets for spot synthesis."""

from spotsim.simulation.config.dataclasses import (
    DepthConfig,
    MixingStrategy,
    MockRegionConfig,
    SamplingConfig,
    SpotCountConfig,
    SynthesisConfig,
)
from spotsim.simulation.config.presets import SynthesisPresets

__all__ = [
    "SynthesisConfig",
    "MixingStrategy",
    "SpotCountConfig",
    "DepthConfig",
    "SamplingConfig",
    "MockRegionConfig",
    "SynthesisPresets",
]
