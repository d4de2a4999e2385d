"""
Simulation module for pseudo-spot synthesis.

Provides tools for:
- Mixing single-cell profiles into synthetic spatial spots
- Controlling regional cell-type composition with named strategies
- Generating a shuffled-gene mock region as a negative control
- Recording the gold-standard cell-to-region membership

Example:
    >>> from spotsim.simulation import SpotSynthesizer, SynthesisPresets
    >>> config = SynthesisPresets.with_mock()
    >>> result = SpotSynthesizer(config).generate(cells)
"""

from spotsim.simulation.composition import (
    dominant_mixing,
    get_strategy,
    proportional_mixing,
    region_frequencies,
    uniform_mixing,
)
from spotsim.simulation.config.dataclasses import (
    DepthConfig,
    MixingStrategy,
    MockRegionConfig,
    SamplingConfig,
    SpotCountConfig,
    SynthesisConfig,
)
from spotsim.simulation.config.presets import SynthesisPresets
from spotsim.simulation.gold_standard import build_gold_standard, gold_standard_matrix
from spotsim.simulation.result import SynthesisResult
from spotsim.simulation.sampling import CellSampler, SpotDraw
from spotsim.simulation.synthesizer import (
    SpotSynthesizer,
    aggregate_counts,
    generate_spots,
    permute_mock_genes,
)

# Visualization
from spotsim.simulation.visualization import (
    plot_region_roc,
    plot_spot_composition,
    plot_spot_depths,
)

__all__ = [
    # Config
    "SynthesisConfig",
    "MixingStrategy",
    "SpotCountConfig",
    "DepthConfig",
    "SamplingConfig",
    "MockRegionConfig",
    "SynthesisPresets",
    # Strategies
    "region_frequencies",
    "uniform_mixing",
    "proportional_mixing",
    "dominant_mixing",
    "get_strategy",
    # Sampling
    "CellSampler",
    "SpotDraw",
    # Synthesis
    "SpotSynthesizer",
    "SynthesisResult",
    "generate_spots",
    "aggregate_counts",
    "permute_mock_genes",
    # Gold standard
    "build_gold_standard",
    "gold_standard_matrix",
    # Visualization
    "plot_spot_depths",
    "plot_spot_composition",
    "plot_region_roc",
]
