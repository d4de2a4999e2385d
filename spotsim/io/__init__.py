"""I/O utilities for data loading and results export."""

from spotsim.io.export import load_gold_standard, save_synthesis
from spotsim.io.loaders import (
    CellData,
    filter_genes,
    from_anndata,
    load_anndata,
    load_csv,
    subset_regions,
)

__all__ = [
    "CellData",
    "from_anndata",
    "load_anndata",
    "load_csv",
    "subset_regions",
    "filter_genes",
    "save_synthesis",
    "load_gold_standard",
]
