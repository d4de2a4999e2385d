"""Container for the output of one synthesis run."""

import json
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd
from scipy import sparse

from spotsim.simulation.config.dataclasses import SynthesisConfig


@dataclass
class SynthesisResult:
    """
    Synthetic spots, their provenance and the gold standard.

    Attributes
    ----------
    counts : scipy.sparse.csr_matrix
        Spots x genes integer counts.
    spot_ids : list of str
        Spot identifiers (row order of ``counts``).
    gene_names : list of str
        Gene identifiers (column order of ``counts``).
    spots : pd.DataFrame
        Per-spot metadata indexed by spot id: region, is_mock,
        target_depth, total_count, n_cells, reached_target.
    contributions : list of np.ndarray
        Input cell indices drawn into each spot.
    cell_ids : list of str
        Identifiers of the input cells that ``contributions`` index into.
    cell_types : np.ndarray
        Cell type labels of the input cells.
    gold_standard : pd.DataFrame
        Long membership table (cell_id, region_id, present).
    gene_permutation : np.ndarray or None
        Column permutation applied to the mock spots.
    composition : pd.DataFrame
        Spots x cell types fraction of drawn cells.
    config : SynthesisConfig
        Configuration used for the run.
    """

    counts: sparse.csr_matrix
    spot_ids: list[str]
    gene_names: list[str]
    spots: pd.DataFrame
    contributions: list[np.ndarray]
    cell_ids: list[str]
    cell_types: np.ndarray
    gold_standard: pd.DataFrame
    gene_permutation: Optional[np.ndarray]
    composition: pd.DataFrame
    config: SynthesisConfig

    @property
    def n_spots(self) -> int:
        return self.counts.shape[0]

    @property
    def n_genes(self) -> int:
        return self.counts.shape[1]

    @property
    def regions(self) -> list[str]:
        """Generated regions, in generation order."""
        return list(pd.unique(self.spots["region"]))

    def spots_in_region(self, region: str) -> np.ndarray:
        """Row indices of the spots generated for ``region``."""
        return np.where(self.spots["region"].to_numpy() == str(region))[0]

    def to_frame(self) -> pd.DataFrame:
        """Dense spots x genes DataFrame of the counts."""
        return pd.DataFrame(
            self.counts.toarray(), index=self.spot_ids, columns=self.gene_names
        )

    def spot_cell_table(self) -> pd.DataFrame:
        """
        Long table of spot contributions.

        Returns
        -------
        pd.DataFrame
            Columns ``spot_id``, ``cell_id``, ``cell_type``; one row per
            draw, so a cell drawn twice into a spot appears twice.
        """
        rows = []
        for spot_id, cells in zip(self.spot_ids, self.contributions):
            for c in cells:
                rows.append((spot_id, self.cell_ids[c], self.cell_types[c]))
        return pd.DataFrame(rows, columns=["spot_id", "cell_id", "cell_type"])

    def to_anndata(self):
        """
        Wrap the spots in an AnnData object.

        ``obs`` holds the spot metadata, ``obsm["composition"]`` the
        cell-type fractions, and ``uns`` the gold standard, the mock
        gene permutation and the run configuration.
        """
        try:
            import anndata as ad
        except ImportError:
            raise ImportError("anndata is required. Install with: pip install anndata")

        obs = self.spots.copy()
        obs["region"] = obs["region"].astype("category")
        var = pd.DataFrame(index=pd.Index(self.gene_names, name="gene"))

        adata = ad.AnnData(X=self.counts.copy(), obs=obs, var=var)
        adata.obsm["composition"] = self.composition.to_numpy(dtype=np.float64)
        adata.uns["composition_cell_types"] = list(self.composition.columns)
        adata.uns["gold_standard"] = self.gold_standard.copy()
        if self.gene_permutation is not None:
            adata.uns["gene_permutation"] = np.asarray(self.gene_permutation)
        adata.uns["synthesis_config"] = json.dumps(self.config.to_dict())
        return adata
