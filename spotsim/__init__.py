"""
spotsim - pseudo-spot simulation from single-cell RNA-seq

This package mixes real single-cell count profiles into synthetic
spatial transcriptomics spots with known regional cell-type
composition, so that label-transfer and deconvolution methods can be
benchmarked against a gold standard.

Key Features:
- Named mixing strategies (uniform, proportional, dominant, top2_overlap)
- Depth-targeted spot assembly with an explicit sampling budget
- Shuffled-gene mock region as a negative control
- Gold-standard cell-to-region membership tables
- ROC/AUC evaluation of region-membership predictions

Example:
    >>> from spotsim import generate_spots
    >>> result = generate_spots(counts, cell_types, regions,
    ...                         n_spots_range=(5, 5),
    ...                         depth_distribution=(1000, 100), seed=0)
    >>> result.counts.shape, len(result.gold_standard)
"""

__version__ = "0.1.0"

from spotsim.analysis.roc import (
    compute_region_roc_curve,
    evaluate_region_predictions,
    prediction_scores_from_obs,
)
from spotsim.exceptions import ConfigurationError, InsufficientDataError, SpotSimError
from spotsim.io.export import save_synthesis
from spotsim.io.loaders import CellData, from_anndata, load_anndata
from spotsim.simulation.config.dataclasses import MixingStrategy, SynthesisConfig
from spotsim.simulation.config.presets import SynthesisPresets
from spotsim.simulation.gold_standard import gold_standard_matrix
from spotsim.simulation.result import SynthesisResult
from spotsim.simulation.synthesizer import SpotSynthesizer, generate_spots

__all__ = [
    # Version
    "__version__",
    # Errors
    "SpotSimError",
    "ConfigurationError",
    "InsufficientDataError",
    # Data
    "CellData",
    "from_anndata",
    "load_anndata",
    "save_synthesis",
    # Synthesis
    "MixingStrategy",
    "SynthesisConfig",
    "SynthesisPresets",
    "SpotSynthesizer",
    "SynthesisResult",
    "generate_spots",
    "gold_standard_matrix",
    # Evaluation
    "prediction_scores_from_obs",
    "evaluate_region_predictions",
    "compute_region_roc_curve",
]
