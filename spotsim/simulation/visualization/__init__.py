"""Visualization functions for synthesis results."""

from spotsim.simulation.visualization.plots import (
    plot_region_roc,
    plot_spot_composition,
    plot_spot_depths,
    save_figure,
)

__all__ = [
    "plot_spot_depths",
    "plot_spot_composition",
    "plot_region_roc",
    "save_figure",
]
