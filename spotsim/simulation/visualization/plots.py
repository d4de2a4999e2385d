"""
Visualization functions for synthesis results.

Provides plotting utilities for spot depths, spot composition and
region-membership ROC curves.
"""

from typing import Optional

import numpy as np
import pandas as pd


def plot_spot_depths(
    spots: pd.DataFrame,
    title: str = "Spot Depth by Region",
    figsize: tuple[float, float] = (8, 5),
    ax=None,
):
    """
    Plot target vs. achieved total count per spot.

    Parameters
    ----------
    spots : pd.DataFrame
        Spot metadata (``SynthesisResult.spots``).
    title : str
        Plot title.
    figsize : tuple
        Figure size.
    ax : matplotlib axis, optional
        Existing axis to plot on.

    Returns
    -------
    matplotlib axis
        The plot axis.
    """
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=figsize)

    regions = list(pd.unique(spots["region"]))
    colors = plt.cm.tab10(np.linspace(0, 1, max(len(regions), 1)))
    for i, region in enumerate(regions):
        sub = spots[spots["region"] == region]
        ax.scatter(
            sub["target_depth"], sub["total_count"],
            c=[colors[i]], label=region, alpha=0.8, s=25,
        )

    lo = min(spots["target_depth"].min(), spots["total_count"].min())
    hi = max(spots["target_depth"].max(), spots["total_count"].max())
    ax.plot([lo, hi], [lo, hi], "--", color="gray", linewidth=1)

    ax.set_xlabel("Target depth")
    ax.set_ylabel("Total count")
    ax.set_title(title)
    ax.legend(loc="upper left", fontsize=8)
    ax.grid(True, alpha=0.3)

    return ax


def plot_spot_composition(
    composition: pd.DataFrame,
    spots: Optional[pd.DataFrame] = None,
    title: str = "Spot Composition",
    figsize: tuple[float, float] = (12, 5),
    cmap: str = "tab20",
    ax=None,
):
    """
    Stacked bar chart of cell-type fractions per spot.

    Parameters
    ----------
    composition : pd.DataFrame
        Spots x cell types fractions (``SynthesisResult.composition``).
    spots : pd.DataFrame, optional
        Spot metadata; when given, spots are ordered by region.
    title : str
        Plot title.
    figsize : tuple
        Figure size.
    cmap : str
        Colormap for cell types.
    ax : matplotlib axis, optional
        Existing axis to plot on.

    Returns
    -------
    matplotlib axis
        The plot axis.
    """
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=figsize)

    if spots is not None:
        order = spots.sort_values("region", kind="stable").index
        composition = composition.loc[order]

    x = np.arange(len(composition))
    colors = plt.get_cmap(cmap)(np.linspace(0, 1, max(composition.shape[1], 1)))
    bottom = np.zeros(len(composition))
    for i, ct in enumerate(composition.columns):
        values = composition[ct].to_numpy()
        ax.bar(x, values, bottom=bottom, color=colors[i], label=ct, width=1.0)
        bottom += values

    ax.set_xlim(-0.5, len(composition) - 0.5)
    ax.set_ylim(0, 1)
    ax.set_xlabel("Spot")
    ax.set_ylabel("Fraction of cells")
    ax.set_title(title)
    ax.legend(loc="upper left", bbox_to_anchor=(1.0, 1.0), fontsize=8)

    return ax


def plot_region_roc(
    curves: dict,
    title: str = "Region Membership ROC",
    figsize: tuple[float, float] = (6, 6),
    ax=None,
):
    """
    Plot ROC curves for several regions.

    Parameters
    ----------
    curves : dict
        Region -> output of ``compute_region_roc_curve`` (None entries
        are skipped).
    title : str
        Plot title.
    figsize : tuple
        Figure size.
    ax : matplotlib axis, optional
        Existing axis to plot on.

    Returns
    -------
    matplotlib axis
        The plot axis.
    """
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=figsize)

    for region, curve in curves.items():
        if curve is None:
            continue
        ax.plot(
            curve["fpr"], curve["tpr"], linewidth=2,
            label=f"{region} (AUC = {curve['roc_auc']:.3f})",
        )

    ax.plot([0, 1], [0, 1], "--", color="gray", linewidth=1)
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1.01)
    ax.set_xlabel("False positive rate")
    ax.set_ylabel("True positive rate")
    ax.set_title(title)
    ax.legend(loc="lower right", fontsize=8)
    ax.grid(True, alpha=0.3)

    return ax


def save_figure(fig, path: str, dpi: int = 150):
    """
    Save figure to file.

    Parameters
    ----------
    fig : matplotlib figure
        Figure to save.
    path : str
        Output path.
    dpi : int
        Resolution.
    """
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
