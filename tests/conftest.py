"""Shared fixtures for spotsim tests."""

import numpy as np
import pytest
from scipy import sparse

from spotsim.io.loaders import CellData


def _make_cells(
    n_cells: int = 100,
    n_genes: int = 20,
    regions=("R1",),
    types=("A", "B", "C"),
    mean: float = 5.0,
    seed: int = 0,
    as_sparse: bool = False,
) -> CellData:
    rng = np.random.default_rng(seed)
    counts = rng.poisson(mean, size=(n_cells, n_genes)).astype(np.int64)
    # every cell has at least one count
    counts[:, 0] += 1

    cell_types = np.array(types)[np.arange(n_cells) % len(types)]
    region_idx = (np.arange(n_cells) * len(regions)) // n_cells
    cell_regions = np.array(regions)[region_idx]

    return CellData(
        counts=sparse.csr_matrix(counts) if as_sparse else counts,
        gene_names=[f"gene_{i}" for i in range(n_genes)],
        cell_ids=[f"cell_{i}" for i in range(n_cells)],
        cell_types=cell_types,
        regions=cell_regions,
    )


@pytest.fixture
def make_cells():
    """Factory for labeled Poisson count data (types cycle, regions in blocks)."""
    return _make_cells


@pytest.fixture
def cells():
    """100 cells, 3 evenly split types, one region, depth ~100 per cell."""
    return _make_cells()


@pytest.fixture
def layered_cells():
    """300 cells over three regions, each holding all three types."""
    return _make_cells(n_cells=300, regions=("L1", "L2", "L3"))
