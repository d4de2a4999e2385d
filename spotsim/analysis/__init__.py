"""Evaluation of label-transfer predictions against the gold standard."""

from spotsim.analysis.roc import (
    compute_region_roc_curve,
    evaluate_region_predictions,
    mock_gene_correlation,
    prediction_scores_from_obs,
    region_mean_profiles,
)

__all__ = [
    "prediction_scores_from_obs",
    "evaluate_region_predictions",
    "compute_region_roc_curve",
    "region_mean_profiles",
    "mock_gene_correlation",
]
