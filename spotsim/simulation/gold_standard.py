"""
Gold-standard cell-to-region membership tables.

The long table has one row per (contributing cell, region) pair with
``present=True``. Cells never drawn into a region have no row for it and
are treated as absent by the wide form and by the evaluation code.
"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd

GOLD_STANDARD_COLUMNS = ["cell_id", "region_id", "present"]


def build_gold_standard(
    spot_regions: Sequence[str],
    contributions: Sequence[np.ndarray],
    cell_ids: Sequence[str],
) -> pd.DataFrame:
    """
    Derive membership records from the cells drawn into each spot.

    Parameters
    ----------
    spot_regions : sequence of str
        Region of every spot.
    contributions : sequence of np.ndarray
        Input cell indices drawn into every spot.
    cell_ids : sequence of str
        Identifier of every input cell.

    Returns
    -------
    pd.DataFrame
        Columns ``cell_id``, ``region_id``, ``present``; one row per
        distinct (cell, region) pair, ordered by region then cell index.
    """
    per_region = {}
    for region, cells in zip(spot_regions, contributions):
        per_region.setdefault(region, set()).update(int(c) for c in cells)

    rows = []
    for region in sorted(per_region):
        for c in sorted(per_region[region]):
            rows.append((cell_ids[c], region, True))

    gold = pd.DataFrame(rows, columns=GOLD_STANDARD_COLUMNS)
    gold["present"] = gold["present"].astype(bool)
    return gold


def gold_standard_matrix(
    gold_standard: pd.DataFrame,
    cell_ids: Optional[Sequence[str]] = None,
    regions: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Expand the long gold standard into a complete cells x regions table.

    Parameters
    ----------
    gold_standard : pd.DataFrame
        Long table with ``cell_id``, ``region_id``, ``present``.
    cell_ids : sequence of str, optional
        Row order. Defaults to the cells in the table.
    regions : sequence of str, optional
        Column order. Defaults to the regions in the table.

    Returns
    -------
    pd.DataFrame
        Boolean membership matrix; missing pairs are False.
    """
    present = gold_standard[gold_standard["present"].astype(bool)]
    if cell_ids is None:
        cell_ids = sorted(present["cell_id"].unique())
    if regions is None:
        regions = sorted(present["region_id"].unique())

    wide = pd.crosstab(present["cell_id"], present["region_id"]) > 0
    wide = wide.reindex(index=list(cell_ids), columns=list(regions), fill_value=False)
    wide.index.name = "cell_id"
    wide.columns.name = "region_id"
    return wide.astype(bool)
