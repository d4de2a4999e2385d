"""
Data loaders for single-cell count matrices.

Supports loading from AnnData (h5ad) and CSV files into a CellData
container: a cells x genes count matrix with per-cell cell-type and
region labels.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd
from scipy import sparse

from spotsim.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class CellData:
    """Container for labeled single-cell counts."""

    counts: Union[np.ndarray, sparse.spmatrix]  # (n_cells, n_genes)
    gene_names: list[str]
    cell_ids: list[str]
    cell_types: np.ndarray  # (n_cells,)
    regions: np.ndarray  # (n_cells,)
    metadata: Optional[dict] = None

    def __post_init__(self):
        if sparse.issparse(self.counts):
            self.counts = sparse.csr_matrix(self.counts)
        else:
            self.counts = np.asarray(self.counts)
        self.gene_names = [str(g) for g in self.gene_names]
        self.cell_ids = [str(c) for c in self.cell_ids]
        self.cell_types = np.asarray(self.cell_types).astype(str)
        self.regions = np.asarray(self.regions).astype(str)

    @property
    def n_cells(self) -> int:
        return self.counts.shape[0]

    @property
    def n_genes(self) -> int:
        return self.counts.shape[1]

    @property
    def depths(self) -> np.ndarray:
        """Total count per cell."""
        return np.asarray(self.counts.sum(axis=1)).ravel().astype(np.int64)

    def validate(self) -> "CellData":
        """
        Check shapes, labels and count values.

        Raises
        ------
        ConfigurationError
            If the matrix is empty, labels do not match the matrix,
            cell ids repeat, or counts are negative or non-integral.
        """
        if self.counts.ndim != 2 or self.n_cells == 0 or self.n_genes == 0:
            raise ConfigurationError(
                f"Count matrix must be non-empty 2D, got shape {self.counts.shape}"
            )
        if len(self.gene_names) != self.n_genes:
            raise ConfigurationError(
                f"Got {len(self.gene_names)} gene names for {self.n_genes} genes"
            )
        for name, labels in [
            ("cell ids", self.cell_ids),
            ("cell type labels", self.cell_types),
            ("region labels", self.regions),
        ]:
            if len(labels) != self.n_cells:
                raise ConfigurationError(
                    f"Got {len(labels)} {name} for {self.n_cells} cells"
                )
        if len(set(self.cell_ids)) != self.n_cells:
            raise ConfigurationError("Cell ids must be unique")

        values = self.counts.data if sparse.issparse(self.counts) else self.counts
        if values.size > 0:
            if np.any(values < 0):
                raise ConfigurationError("Counts must be non-negative")
            if not np.all(np.mod(values, 1) == 0):
                raise ConfigurationError("Counts must be integers (raw UMI counts)")

        return self


def _labeled_cells(obs: pd.DataFrame, celltype_key: str, region_key: str) -> np.ndarray:
    """Mask of cells with both a cell type and a region label; unlabeled cells are dropped."""
    keep = (obs[celltype_key].notna() & obs[region_key].notna()).to_numpy()
    n_dropped = int((~keep).sum())
    if n_dropped > 0:
        logger.warning(
            f"Dropping {n_dropped} cells without a '{celltype_key}' or '{region_key}' label"
        )
    return keep


def from_anndata(
    adata,
    celltype_key: str = "cell_type",
    region_key: str = "region",
    layer: Optional[str] = None,
) -> CellData:
    """
    Build CellData from an in-memory AnnData object.

    Parameters
    ----------
    adata : anndata.AnnData
        Cells x genes object with raw counts.
    celltype_key : str
        Key in .obs for cell type labels.
    region_key : str
        Key in .obs for region labels.
    layer : str, optional
        Layer holding raw counts. If None, uses .X.

    Returns
    -------
    CellData
        Validated cell data.
    """
    if layer is not None:
        if layer not in adata.layers:
            raise KeyError(f"Layer '{layer}' not found. Available: {list(adata.layers.keys())}")
        counts = adata.layers[layer]
    else:
        counts = adata.X

    for key in (celltype_key, region_key):
        if key not in adata.obs.columns:
            raise KeyError(f"Key '{key}' not found in obs. Available: {list(adata.obs.columns)}")

    if sparse.issparse(counts):
        counts = sparse.csr_matrix(counts)
    else:
        counts = np.asarray(counts)

    keep = _labeled_cells(adata.obs, celltype_key, region_key)
    obs = adata.obs.loc[keep]

    data = CellData(
        counts=counts[np.where(keep)[0]],
        gene_names=list(adata.var_names),
        cell_ids=list(obs.index),
        cell_types=obs[celltype_key].values,
        regions=obs[region_key].values,
        metadata={"n_obs": adata.n_obs, "n_vars": adata.n_vars},
    )
    return data.validate()


def load_anndata(
    path: Union[str, Path],
    celltype_key: str = "cell_type",
    region_key: str = "region",
    layer: Optional[str] = None,
) -> CellData:
    """
    Load labeled cells from an AnnData (h5ad) file.

    Parameters
    ----------
    path : str or Path
        Path to .h5ad file.
    celltype_key : str
        Key in .obs for cell type labels.
    region_key : str
        Key in .obs for region labels.
    layer : str, optional
        Layer holding raw counts. If None, uses .X.

    Returns
    -------
    CellData
        Loaded cell data.
    """
    try:
        import anndata as ad
    except ImportError:
        raise ImportError("anndata is required. Install with: pip install anndata")

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    adata = ad.read_h5ad(path)
    data = from_anndata(adata, celltype_key=celltype_key, region_key=region_key, layer=layer)
    data.metadata["source"] = str(path)
    return data


def load_csv(
    counts_path: Union[str, Path],
    metadata_path: Union[str, Path],
    celltype_column: str = "cell_type",
    region_column: str = "region",
    transpose: bool = False,
) -> CellData:
    """
    Load labeled cells from CSV files.

    Parameters
    ----------
    counts_path : str or Path
        Count matrix CSV, cells as rows and genes as columns (first
        column holds cell ids).
    metadata_path : str or Path
        Per-cell metadata CSV indexed by cell id.
    celltype_column : str
        Metadata column with cell type labels.
    region_column : str
        Metadata column with region labels.
    transpose : bool
        If True, the counts file has genes as rows.

    Returns
    -------
    CellData
        Loaded cell data.
    """
    counts_df = pd.read_csv(counts_path, index_col=0)
    if transpose:
        counts_df = counts_df.T
    counts_df.index = counts_df.index.astype(str)

    meta_df = pd.read_csv(metadata_path, index_col=0)
    meta_df.index = meta_df.index.astype(str)

    missing = [c for c in (celltype_column, region_column) if c not in meta_df.columns]
    if missing:
        raise KeyError(f"Metadata is missing columns {missing}. Found: {list(meta_df.columns)}")

    absent = counts_df.index.difference(meta_df.index)
    if len(absent) > 0:
        raise ConfigurationError(f"{len(absent)} cells have no metadata row, e.g. '{absent[0]}'")
    meta_df = meta_df.loc[counts_df.index]

    keep = _labeled_cells(meta_df, celltype_column, region_column)
    counts_df = counts_df.loc[keep]
    meta_df = meta_df.loc[keep]

    data = CellData(
        counts=counts_df.to_numpy(),
        gene_names=list(counts_df.columns),
        cell_ids=list(counts_df.index),
        cell_types=meta_df[celltype_column].values,
        regions=meta_df[region_column].values,
        metadata={"source": str(counts_path)},
    )
    return data.validate()


def subset_regions(
    data: CellData,
    regions: list[str],
) -> CellData:
    """
    Subset data to specific regions.

    Parameters
    ----------
    data : CellData
        Input data.
    regions : list of str
        Regions to keep.

    Returns
    -------
    CellData
        Subsetted data.
    """
    mask = np.isin(data.regions, [str(r) for r in regions])
    idx = np.where(mask)[0]

    return CellData(
        counts=data.counts[idx],
        gene_names=data.gene_names,
        cell_ids=[data.cell_ids[i] for i in idx],
        cell_types=data.cell_types[mask],
        regions=data.regions[mask],
        metadata=data.metadata,
    )


def filter_genes(
    data: CellData,
    min_cells: int = 1,
    min_counts: Optional[int] = None,
) -> CellData:
    """
    Filter genes by expression criteria.

    Parameters
    ----------
    data : CellData
        Input data.
    min_cells : int
        Minimum number of cells with non-zero counts.
    min_counts : int, optional
        Minimum total counts across cells.

    Returns
    -------
    CellData
        Filtered data.
    """
    counts = data.counts
    if sparse.issparse(counts):
        n_cells_expressing = np.asarray((counts > 0).sum(axis=0)).ravel()
    else:
        n_cells_expressing = np.sum(counts > 0, axis=0)
    mask = n_cells_expressing >= min_cells

    if min_counts is not None:
        total_counts = np.asarray(counts.sum(axis=0)).ravel()
        mask = mask & (total_counts >= min_counts)

    keep = np.where(mask)[0]

    return CellData(
        counts=counts[:, keep],
        gene_names=[data.gene_names[i] for i in keep],
        cell_ids=data.cell_ids,
        cell_types=data.cell_types,
        regions=data.regions,
        metadata=data.metadata,
    )
