"""
Tests for single-cell data loaders.
"""

import logging

import numpy as np
import pandas as pd
import pytest
from scipy import sparse

from spotsim.exceptions import ConfigurationError
from spotsim.io.loaders import (
    CellData,
    filter_genes,
    from_anndata,
    load_anndata,
    load_csv,
    subset_regions,
)
from spotsim.simulation.synthesizer import generate_spots


def _cell_data(counts, **overrides):
    n_cells, n_genes = np.shape(counts)
    fields = dict(
        counts=counts,
        gene_names=[f"g{i}" for i in range(n_genes)],
        cell_ids=[f"c{i}" for i in range(n_cells)],
        cell_types=["A"] * n_cells,
        regions=["R1"] * n_cells,
    )
    fields.update(overrides)
    return CellData(**fields)


class TestCellData:
    """Tests for the CellData container."""

    def test_depths(self):
        data = _cell_data(np.array([[1, 2, 0], [0, 0, 5]]))
        np.testing.assert_array_equal(data.depths, [3, 5])
        assert data.depths.dtype == np.int64

    def test_sparse_depths(self):
        data = _cell_data(sparse.csc_matrix(np.array([[1, 2], [3, 0]])))
        assert sparse.isspmatrix_csr(data.counts)
        np.testing.assert_array_equal(data.depths, [3, 3])

    def test_labels_normalized_to_str(self):
        data = _cell_data(np.ones((2, 2)), cell_types=[1, 2], cell_ids=[10, 11])
        assert data.cell_types.tolist() == ["1", "2"]
        assert data.cell_ids == ["10", "11"]

    def test_valid(self):
        data = _cell_data(np.ones((3, 2), dtype=int))
        assert data.validate() is data

    @pytest.mark.parametrize(
        "overrides",
        [
            {"gene_names": ["g0"]},
            {"cell_ids": ["c0", "c1"]},
            {"cell_ids": ["c0", "c0", "c1"]},
            {"cell_types": ["A", "A"]},
            {"regions": ["R1"]},
        ],
    )
    def test_label_mismatch(self, overrides):
        data = _cell_data(np.ones((3, 2), dtype=int), **overrides)
        with pytest.raises(ConfigurationError):
            data.validate()

    def test_negative_counts(self):
        with pytest.raises(ConfigurationError, match="non-negative"):
            _cell_data(np.array([[1, -1], [0, 2]])).validate()

    def test_non_integer_counts(self):
        with pytest.raises(ConfigurationError, match="integers"):
            _cell_data(np.array([[1.5, 0.0], [0.0, 2.0]])).validate()

    def test_empty(self):
        with pytest.raises(ConfigurationError):
            _cell_data(np.zeros((0, 3))).validate()


class TestFiltering:
    """Tests for subset_regions and filter_genes."""

    def test_subset_regions(self, layered_cells):
        sub = subset_regions(layered_cells, ["L1", "L3"])

        assert sub.n_cells == 200
        assert set(sub.regions) == {"L1", "L3"}
        assert sub.cell_ids[0] == "cell_0"
        assert sub.cell_ids[100] == "cell_200"

    def test_filter_genes(self):
        counts = np.array([[1, 0, 0, 3], [2, 0, 1, 0]])
        data = filter_genes(_cell_data(counts))
        assert data.gene_names == ["g0", "g2", "g3"]

    def test_filter_genes_min_counts(self):
        counts = np.array([[1, 0, 0, 3], [2, 0, 1, 0]])
        data = filter_genes(_cell_data(sparse.csr_matrix(counts)), min_counts=3)
        assert data.gene_names == ["g0", "g3"]
        np.testing.assert_array_equal(data.counts.toarray(), [[1, 3], [2, 0]])


class TestLoadCsv:
    """Tests for CSV loading."""

    def _write(self, tmp_path, transpose=False):
        counts = pd.DataFrame(
            [[1, 0, 2], [0, 4, 0], [3, 3, 3]],
            index=["c0", "c1", "c2"],
            columns=["g0", "g1", "g2"],
        )
        meta = pd.DataFrame(
            {"cell_type": ["T", "B", "T"], "layer": ["L1", "L1", "L2"]},
            index=["c2", "c0", "c1"],
        )
        counts_path = tmp_path / "counts.csv"
        (counts.T if transpose else counts).to_csv(counts_path)
        meta_path = tmp_path / "meta.csv"
        meta.to_csv(meta_path)
        return counts_path, meta_path

    def test_load(self, tmp_path):
        counts_path, meta_path = self._write(tmp_path)
        data = load_csv(counts_path, meta_path, region_column="layer")

        assert data.cell_ids == ["c0", "c1", "c2"]
        assert data.gene_names == ["g0", "g1", "g2"]
        assert data.cell_types.tolist() == ["B", "T", "T"]
        assert data.regions.tolist() == ["L1", "L2", "L1"]

    def test_transpose(self, tmp_path):
        counts_path, meta_path = self._write(tmp_path, transpose=True)
        data = load_csv(counts_path, meta_path, region_column="layer", transpose=True)
        np.testing.assert_array_equal(data.depths, [3, 4, 9])

    def test_unlabeled_cells_dropped(self, tmp_path, caplog):
        counts_path, _ = self._write(tmp_path)
        meta = pd.DataFrame(
            {"cell_type": ["T", "B", None], "layer": ["L1", None, "L2"]},
            index=["c0", "c1", "c2"],
        )
        meta_path = tmp_path / "partial_meta.csv"
        meta.to_csv(meta_path)

        with caplog.at_level(logging.WARNING):
            data = load_csv(counts_path, meta_path, region_column="layer")

        assert data.cell_ids == ["c0"]
        assert data.regions.tolist() == ["L1"]
        assert "nan" not in data.cell_types.tolist()
        assert "Dropping 2 cells" in caplog.text

    def test_missing_column(self, tmp_path):
        counts_path, meta_path = self._write(tmp_path)
        with pytest.raises(KeyError):
            load_csv(counts_path, meta_path, region_column="region")


class TestAnnData:
    """Tests for AnnData loading."""

    def _adata(self):
        ad = pytest.importorskip("anndata")
        counts = sparse.csr_matrix(np.array([[1, 0, 2], [0, 4, 0], [3, 3, 3]], dtype=np.float32))
        obs = pd.DataFrame(
            {"celltype": ["T", "B", "T"], "layer": pd.Categorical(["L1", "L1", "L2"])},
            index=["c0", "c1", "c2"],
        )
        var = pd.DataFrame(index=["g0", "g1", "g2"])
        adata = ad.AnnData(X=counts, obs=obs, var=var)
        adata.layers["counts"] = counts.copy()
        return adata

    def test_from_anndata(self):
        data = from_anndata(self._adata(), celltype_key="celltype", region_key="layer")

        assert data.n_cells == 3
        assert data.gene_names == ["g0", "g1", "g2"]
        assert data.regions.tolist() == ["L1", "L1", "L2"]
        np.testing.assert_array_equal(data.depths, [3, 4, 9])

    def test_layer(self):
        data = from_anndata(
            self._adata(), celltype_key="celltype", region_key="layer", layer="counts"
        )
        assert data.n_genes == 3

    def test_missing_keys(self):
        adata = self._adata()
        with pytest.raises(KeyError):
            from_anndata(adata, celltype_key="cell_type", region_key="layer")
        with pytest.raises(KeyError):
            from_anndata(adata, celltype_key="celltype", region_key="layer", layer="raw")

    def test_unlabeled_cells_dropped(self, caplog):
        adata = self._adata()
        adata.obs["layer"] = pd.Categorical(["L1", np.nan, "L2"])

        with caplog.at_level(logging.WARNING):
            data = from_anndata(adata, celltype_key="celltype", region_key="layer")

        assert data.cell_ids == ["c0", "c2"]
        assert data.regions.tolist() == ["L1", "L2"]
        np.testing.assert_array_equal(data.depths, [3, 9])
        assert "Dropping 1 cells" in caplog.text

    def test_unlabeled_cells_never_become_a_region(self, layered_cells):
        ad = pytest.importorskip("anndata")
        regions = layered_cells.regions.astype(object)
        regions[::15] = np.nan
        obs = pd.DataFrame(
            {"cell_type": layered_cells.cell_types, "region": regions},
            index=layered_cells.cell_ids,
        )
        adata = ad.AnnData(
            X=layered_cells.counts, obs=obs, var=pd.DataFrame(index=layered_cells.gene_names)
        )

        data = from_anndata(adata)
        result = generate_spots(
            data, n_spots_range=(2, 2), depth_distribution=(500.0, 50.0), seed=0
        )

        assert data.n_cells == 280
        assert result.regions == ["L1", "L2", "L3"]
        assert set(result.gold_standard["region_id"]) == {"L1", "L2", "L3"}

    def test_load_anndata(self, tmp_path):
        path = tmp_path / "cells.h5ad"
        self._adata().write_h5ad(path)

        data = load_anndata(path, celltype_key="celltype", region_key="layer")
        assert data.metadata["source"] == str(path)
        assert data.cell_ids == ["c0", "c1", "c2"]

    def test_missing_file(self, tmp_path):
        pytest.importorskip("anndata")
        with pytest.raises(FileNotFoundError):
            load_anndata(tmp_path / "missing.h5ad")
