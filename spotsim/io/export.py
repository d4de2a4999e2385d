"""
Write synthesis results to disk.

Output directory layout:
- spots.h5ad          (AnnData of the spots, unless write_h5ad=False)
- counts.csv          (spots x genes)
- spots.csv           (per-spot metadata)
- gold_standard.csv   (cell_id, region_id, present)
- spot_cells.csv      (spot_id, cell_id, cell_type)
- composition.csv     (spots x cell type fractions)
- gene_permutation.csv (mock region only)
- config.json
"""

import logging
from pathlib import Path
from typing import Union

import pandas as pd

from spotsim.simulation.result import SynthesisResult

logger = logging.getLogger(__name__)


def save_synthesis(
    result: SynthesisResult,
    output_dir: Union[str, Path],
    write_h5ad: bool = True,
    write_counts_csv: bool = True,
) -> dict[str, str]:
    """
    Save a synthesis result.

    Parameters
    ----------
    result : SynthesisResult
        Output of SpotSynthesizer.generate().
    output_dir : str or Path
        Output directory (created if missing).
    write_h5ad : bool
        Write ``spots.h5ad``. Requires anndata; the AnnData object is
        built before any file is written, so a missing install fails
        without leaving partial output.
    write_counts_csv : bool
        Write the dense ``counts.csv``.

    Returns
    -------
    dict
        Name -> path of each written file.

    Raises
    ------
    ImportError
        If ``write_h5ad`` is True and anndata is not installed.
    """
    adata = result.to_anndata() if write_h5ad else None

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = {}

    if write_counts_csv:
        paths["counts"] = output_dir / "counts.csv"
        result.to_frame().to_csv(paths["counts"], index_label="spot_id")

    paths["spots"] = output_dir / "spots.csv"
    result.spots.to_csv(paths["spots"])

    paths["gold_standard"] = output_dir / "gold_standard.csv"
    result.gold_standard.to_csv(paths["gold_standard"], index=False)

    paths["spot_cells"] = output_dir / "spot_cells.csv"
    result.spot_cell_table().to_csv(paths["spot_cells"], index=False)

    paths["composition"] = output_dir / "composition.csv"
    result.composition.to_csv(paths["composition"], index_label="spot_id")

    if result.gene_permutation is not None:
        paths["gene_permutation"] = output_dir / "gene_permutation.csv"
        pd.DataFrame(
            {
                "gene": result.gene_names,
                "source_gene": [result.gene_names[j] for j in result.gene_permutation],
            }
        ).to_csv(paths["gene_permutation"], index=False)

    paths["config"] = output_dir / "config.json"
    result.config.save(str(paths["config"]))

    if write_h5ad:
        paths["h5ad"] = output_dir / "spots.h5ad"
        logger.info(f"Saving AnnData: {result.n_spots} spots x {result.n_genes} genes")
        adata.write_h5ad(paths["h5ad"])

    logger.info(f"Export complete. Files in {output_dir}")

    return {k: str(v) for k, v in paths.items()}


def load_gold_standard(path: Union[str, Path]) -> pd.DataFrame:
    """
    Load a gold-standard CSV written by save_synthesis.

    Parameters
    ----------
    path : str or Path
        Path to ``gold_standard.csv``.

    Returns
    -------
    pd.DataFrame
        Columns ``cell_id``, ``region_id``, ``present``.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    gold = pd.read_csv(path, dtype={"cell_id": str, "region_id": str})
    missing = {"cell_id", "region_id", "present"} - set(gold.columns)
    if missing:
        raise KeyError(f"Gold standard is missing columns {sorted(missing)}")
    gold["present"] = gold["present"].astype(bool)
    return gold
