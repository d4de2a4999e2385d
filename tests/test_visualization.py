"""Tests for visualization module."""

import numpy as np
import pandas as pd
import pytest

# Skip all tests if matplotlib is not available
matplotlib = pytest.importorskip("matplotlib")
matplotlib.use("Agg")

from spotsim.analysis.roc import compute_region_roc_curve
from spotsim.simulation.synthesizer import generate_spots
from spotsim.simulation.visualization import (
    plot_region_roc,
    plot_spot_composition,
    plot_spot_depths,
    save_figure,
)


@pytest.fixture
def result(layered_cells):
    return generate_spots(
        layered_cells,
        n_spots_range=(3, 4),
        depth_distribution=(800.0, 80.0),
        add_mock_region=True,
        seed=0,
    )


class TestPlotSpotDepths:
    """Tests for plot_spot_depths function."""

    def test_basic_plot(self, result):
        import matplotlib.pyplot as plt

        ax = plot_spot_depths(result.spots, title="Depths")

        assert ax is not None
        assert ax.get_title() == "Depths"
        plt.close()

    def test_existing_axis(self, result):
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots()
        out = plot_spot_depths(result.spots, ax=ax)

        assert out is ax
        plt.close(fig)


class TestPlotSpotComposition:
    """Tests for plot_spot_composition function."""

    def test_basic_plot(self, result):
        import matplotlib.pyplot as plt

        ax = plot_spot_composition(result.composition)
        assert ax is not None
        plt.close()

    def test_ordered_by_region(self, result):
        """Test composition bars with spot metadata."""
        import matplotlib.pyplot as plt

        ax = plot_spot_composition(result.composition, spots=result.spots)
        assert ax.get_xlim() == (-0.5, result.n_spots - 0.5)
        plt.close()


class TestPlotRegionRoc:
    """Tests for plot_region_roc function."""

    def test_curves(self):
        import matplotlib.pyplot as plt

        rng = np.random.default_rng(0)
        cells = [f"c{i}" for i in range(40)]
        gold = pd.DataFrame(
            {"cell_id": cells[:20], "region_id": "R1", "present": True}
        )
        scores = pd.DataFrame(
            {"R1": np.r_[rng.uniform(0.5, 1, 20), rng.uniform(0, 0.6, 20)]},
            index=cells,
        )
        curves = {"R1": compute_region_roc_curve(scores, gold, "R1"), "R2": None}

        ax = plot_region_roc(curves)
        labels = [t.get_text() for t in ax.get_legend().get_texts()]

        assert len(labels) == 1
        assert labels[0].startswith("R1")
        plt.close()


class TestSaveFigure:
    """Tests for save_figure."""

    def test_save_png(self, result, tmp_path):
        import matplotlib.pyplot as plt

        ax = plot_spot_depths(result.spots)
        path = tmp_path / "depths.png"
        save_figure(ax.figure, str(path))

        assert path.exists()
        plt.close()
