"""Tests for writing synthesis results."""

import json
import sys

import numpy as np
import pandas as pd
import pytest

from spotsim.io.export import load_gold_standard, save_synthesis
from spotsim.simulation.synthesizer import generate_spots


@pytest.fixture
def result(layered_cells):
    return generate_spots(
        layered_cells,
        mixing_strategy="dominant",
        n_spots_range=(2, 3),
        depth_distribution=(600.0, 60.0),
        add_mock_region=True,
        seed=5,
    )


class TestSaveSynthesis:
    """Tests for save_synthesis."""

    def test_csv_outputs(self, result, tmp_path):
        paths = save_synthesis(result, tmp_path / "out", write_h5ad=False)

        assert set(paths) == {
            "counts", "spots", "gold_standard", "spot_cells",
            "composition", "gene_permutation", "config",
        }
        counts = pd.read_csv(paths["counts"], index_col="spot_id")
        assert list(counts.index) == result.spot_ids
        np.testing.assert_array_equal(counts.to_numpy(), result.counts.toarray())

        spots = pd.read_csv(paths["spots"], index_col="spot_id")
        assert spots["is_mock"].sum() == len(result.spots_in_region("mock"))

        spot_cells = pd.read_csv(paths["spot_cells"])
        assert len(spot_cells) == sum(len(c) for c in result.contributions)

    def test_gene_permutation_table(self, result, tmp_path):
        paths = save_synthesis(result, tmp_path, write_h5ad=False)
        table = pd.read_csv(paths["gene_permutation"])

        assert list(table["gene"]) == result.gene_names
        assert sorted(table["source_gene"]) == sorted(result.gene_names)

    def test_no_permutation_without_mock(self, layered_cells, tmp_path):
        result = generate_spots(layered_cells, n_spots_range=(1, 1), depth_distribution=(300.0, 0.0))
        paths = save_synthesis(result, tmp_path, write_h5ad=False, write_counts_csv=False)

        assert "gene_permutation" not in paths
        assert "counts" not in paths

    def test_config_json(self, result, tmp_path):
        paths = save_synthesis(result, tmp_path, write_h5ad=False)
        with open(paths["config"]) as f:
            saved = json.load(f)

        assert saved["strategy"] == "dominant"
        assert saved["mock"]["enabled"] is True
        assert saved["random_seed"] == 5

    def test_gold_standard_roundtrip(self, result, tmp_path):
        paths = save_synthesis(result, tmp_path, write_h5ad=False)
        gold = load_gold_standard(paths["gold_standard"])
        pd.testing.assert_frame_equal(gold, result.gold_standard)

    def test_h5ad(self, result, tmp_path):
        ad = pytest.importorskip("anndata")
        paths = save_synthesis(result, tmp_path)
        adata = ad.read_h5ad(paths["h5ad"])

        assert adata.shape == (result.n_spots, result.n_genes)
        assert list(adata.obs_names) == result.spot_ids
        assert adata.obsm["composition"].shape == result.composition.shape
        assert json.loads(adata.uns["synthesis_config"])["strategy"] == "dominant"
        np.testing.assert_array_equal(adata.uns["gene_permutation"], result.gene_permutation)

    def test_missing_anndata_writes_nothing(self, result, tmp_path, monkeypatch):
        monkeypatch.setitem(sys.modules, "anndata", None)
        out = tmp_path / "out"

        with pytest.raises(ImportError, match="pip install anndata"):
            save_synthesis(result, out)
        assert not out.exists()

        paths = save_synthesis(result, out, write_h5ad=False)
        assert "h5ad" not in paths


class TestLoadGoldStandard:
    """Tests for load_gold_standard."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_gold_standard(tmp_path / "gold.csv")

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "gold.csv"
        pd.DataFrame({"cell_id": ["c0"], "region": ["R1"]}).to_csv(path, index=False)
        with pytest.raises(KeyError):
            load_gold_standard(path)
