"""
ROC/PR evaluation of region-membership predictions.

A label-transfer method projects region labels from the synthetic spots
back onto the single cells, giving a cells x regions score matrix. Each
region's scores are compared against the gold standard: cells drawn
into that region's spots are positives, every other cell a negative.
"""

import logging
from typing import Optional

import numpy as np
import pandas as pd
from sklearn.metrics import (
    average_precision_score,
    roc_auc_score,
    roc_curve,
)

from spotsim.simulation.gold_standard import gold_standard_matrix

logger = logging.getLogger(__name__)


# ============================================================================
# SCORE EXTRACTION
# ============================================================================

def prediction_scores_from_obs(
    obs: pd.DataFrame,
    prefix: str = "prediction.score.",
    drop: tuple[str, ...] = ("max",),
) -> pd.DataFrame:
    """
    Extract a cells x regions score matrix from label-transfer output.

    Label-transfer tools usually store one column per label named
    ``<prefix><label>`` plus a summary ``<prefix>max`` column.

    Parameters
    ----------
    obs : pd.DataFrame
        Per-cell table indexed by cell id.
    prefix : str
        Column prefix of the per-region scores.
    drop : tuple of str
        Suffixes that are not regions.

    Returns
    -------
    pd.DataFrame
        Scores with one column per region.
    """
    cols = [c for c in obs.columns if str(c).startswith(prefix)]
    regions = [str(c)[len(prefix):] for c in cols]
    keep = [(c, r) for c, r in zip(cols, regions) if r not in drop]
    if not keep:
        raise KeyError(f"No columns with prefix '{prefix}' found")

    scores = obs[[c for c, _ in keep]].astype(float).copy()
    scores.columns = [r for _, r in keep]
    scores.index = scores.index.astype(str)
    return scores


# ============================================================================
# EVALUATION
# ============================================================================

def _labels_for(
    scores: pd.DataFrame,
    gold_standard: pd.DataFrame,
) -> pd.DataFrame:
    truth = gold_standard_matrix(
        gold_standard,
        cell_ids=list(scores.index.astype(str)),
        regions=list(scores.columns),
    )
    truth.index = scores.index
    return truth


def evaluate_region_predictions(
    scores: pd.DataFrame,
    gold_standard: pd.DataFrame,
    regions: Optional[list[str]] = None,
) -> pd.DataFrame:
    """
    Compute per-region AUROC and AUPRC.

    Parameters
    ----------
    scores : pd.DataFrame
        Cells x regions prediction scores (higher = more likely member).
    gold_standard : pd.DataFrame
        Long table with ``cell_id``, ``region_id``, ``present``.
    regions : list of str, optional
        Regions to evaluate. Defaults to every score column.

    Returns
    -------
    pd.DataFrame
        One row per evaluable region with columns region, roc_auc,
        pr_auc, pr_baseline, n_samples, n_positive. Regions whose cells
        are all positive or all negative are skipped.
    """
    if regions is None:
        regions = list(scores.columns)

    gold_regions = set(gold_standard["region_id"].astype(str))
    unknown = [r for r in regions if r not in gold_regions]
    if unknown:
        logger.warning(f"No gold-standard records for regions: {unknown}")

    truth = _labels_for(scores, gold_standard)

    results = []
    for region in regions:
        y_true = truth[region].to_numpy().astype(int)
        y_score = scores[region].to_numpy(dtype=float)
        valid = ~np.isnan(y_score)
        y_true, y_score = y_true[valid], y_score[valid]

        n_pos = int(y_true.sum())
        n_total = len(y_true)
        if n_pos == 0 or n_pos == n_total:
            continue

        results.append(
            {
                "region": region,
                "roc_auc": roc_auc_score(y_true, y_score),
                "pr_auc": average_precision_score(y_true, y_score),
                "pr_baseline": n_pos / n_total,
                "n_samples": n_total,
                "n_positive": n_pos,
            }
        )

    return pd.DataFrame(
        results,
        columns=["region", "roc_auc", "pr_auc", "pr_baseline", "n_samples", "n_positive"],
    )


def compute_region_roc_curve(
    scores: pd.DataFrame,
    gold_standard: pd.DataFrame,
    region: str,
) -> Optional[dict]:
    """
    Compute the ROC curve for one region.

    Parameters
    ----------
    scores : pd.DataFrame
        Cells x regions prediction scores.
    gold_standard : pd.DataFrame
        Long gold-standard table.
    region : str
        Region to evaluate.

    Returns
    -------
    dict or None
        Dictionary with fpr, tpr, thresholds, roc_auc, n_samples,
        n_positive. None if the region is missing or has a single class.
    """
    if region not in scores.columns:
        return None

    truth = _labels_for(scores[[region]], gold_standard)
    y_true = truth[region].to_numpy().astype(int)
    y_score = scores[region].to_numpy(dtype=float)
    valid = ~np.isnan(y_score)
    y_true, y_score = y_true[valid], y_score[valid]

    n_pos = int(y_true.sum())
    if n_pos == 0 or n_pos == len(y_true):
        return None

    fpr, tpr, thresholds = roc_curve(y_true, y_score)
    return {
        "fpr": fpr,
        "tpr": tpr,
        "thresholds": thresholds,
        "roc_auc": roc_auc_score(y_true, y_score),
        "n_samples": int(len(y_true)),
        "n_positive": n_pos,
    }


# ============================================================================
# MOCK REGION CONTROL
# ============================================================================

def region_mean_profiles(result) -> pd.DataFrame:
    """
    Mean spot profile of every generated region.

    Parameters
    ----------
    result : SynthesisResult
        Output of SpotSynthesizer.generate().

    Returns
    -------
    pd.DataFrame
        Regions x genes mean counts.
    """
    profiles = {}
    for region in result.regions:
        rows = result.spots_in_region(region)
        profiles[region] = np.asarray(result.counts[rows].mean(axis=0)).ravel()
    return pd.DataFrame.from_dict(profiles, orient="index", columns=result.gene_names)


def mock_gene_correlation(result) -> pd.Series:
    """
    Correlate the mock region's mean profile with every real region.

    Genes are centered across the real regions' profiles first, so the
    correlation measures region-specific signal rather than overall
    gene abundance. A working mock control gives values near zero.
    At least two real regions are needed; with a single real region the
    centered profile is zero and every value is NaN.

    Parameters
    ----------
    result : SynthesisResult
        Output of a run with the mock region enabled.

    Returns
    -------
    pd.Series
        Real region -> Pearson correlation with the mock profile.
    """
    mock_name = result.config.mock.name
    if result.gene_permutation is None or mock_name not in result.regions:
        raise ValueError("Result has no mock region")

    profiles = region_mean_profiles(result)
    real = profiles.drop(index=mock_name)
    mock = profiles.loc[mock_name]
    if len(real) < 2:
        logger.warning(
            f"Mock correlation needs at least two real regions, got {len(real)}; "
            f"returning NaN"
        )

    baseline = real.mean(axis=0)
    mock_c = mock - baseline
    out = {}
    for region, row in real.iterrows():
        row_c = row - baseline
        denom = np.linalg.norm(mock_c) * np.linalg.norm(row_c)
        out[region] = float(np.dot(mock_c, row_c) / denom) if denom > 0 else np.nan
    return pd.Series(out, name="mock_correlation")
