"""
Weighted cell sampling for pseudo-spot assembly.

Each spot is filled by repeatedly drawing a cell type from the
region's mixing distribution and then a cell of that type uniformly
from the region's pool, until the summed depth of the drawn cells
reaches the spot's target depth. The draw budget and the exhaustion
policy are explicit:

- at most ``max_cells_per_spot`` draws per spot;
- without replacement within a spot (unless ``replace_within_spot``),
  a type whose pool is used up is dropped and the remaining
  probabilities are renormalized;
- across spots, cells are always drawn with replacement.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from spotsim.simulation.config.dataclasses import DepthConfig, SamplingConfig


@dataclass
class SpotDraw:
    """Cells drawn into a single spot."""

    cells: np.ndarray  # input cell indices, in draw order
    total_depth: int
    target_depth: int

    @property
    def reached_target(self) -> bool:
        return self.total_depth >= self.target_depth

    @property
    def n_cells(self) -> int:
        return len(self.cells)


def build_type_pools(cell_indices: np.ndarray, cell_types: np.ndarray) -> dict:
    """
    Group cell indices by cell type.

    Parameters
    ----------
    cell_indices : np.ndarray
        Indices (into the input matrix) of the eligible cells.
    cell_types : np.ndarray
        Cell type label of every input cell.

    Returns
    -------
    dict
        Cell type -> sorted array of cell indices.
    """
    cell_indices = np.asarray(cell_indices)
    labels = np.asarray(cell_types).astype(str)[cell_indices]
    return {
        ct: np.sort(cell_indices[labels == ct])
        for ct in np.unique(labels)
    }


class CellSampler:
    """
    Draws target depths and cells for pseudo-spots.

    Parameters
    ----------
    sampling_config : SamplingConfig
        Draw budget and replacement policy.
    depth_config : DepthConfig
        Target depth distribution.
    rng : np.random.Generator or int, optional
        Random generator (or seed) shared with the caller.

    Example
    -------
    >>> sampler = CellSampler(SamplingConfig(), DepthConfig(mean=1000, std=100), rng=0)
    >>> targets = sampler.draw_target_depths(5)
    >>> draw = sampler.sample_spot(pools, probs, depths, targets[0])
    """

    def __init__(
        self,
        sampling_config: SamplingConfig,
        depth_config: DepthConfig,
        rng=None,
    ):
        self.sampling = sampling_config
        self.depth = depth_config
        if isinstance(rng, np.random.Generator):
            self._rng = rng
        else:
            self._rng = np.random.default_rng(rng)

    def draw_target_depths(self, n_spots: int) -> np.ndarray:
        """
        Draw target depths from Normal(mean, std).

        Draws are rounded to integers and clamped to ``min_depth``.

        Parameters
        ----------
        n_spots : int
            Number of targets to draw.

        Returns
        -------
        np.ndarray
            Integer target depths (n_spots,).
        """
        raw = self._rng.normal(self.depth.mean, self.depth.std, n_spots)
        targets = np.rint(raw).astype(np.int64)
        return np.maximum(targets, int(self.depth.min_depth))

    def draw_spot_count(self, min_spots: int, max_spots: int) -> int:
        """Draw a spot count uniformly from [min_spots, max_spots]."""
        return int(self._rng.integers(min_spots, max_spots + 1))

    def sample_spot(
        self,
        pools: dict,
        type_probs: pd.Series,
        cell_depths: np.ndarray,
        target_depth: int,
    ) -> SpotDraw:
        """
        Fill one spot up to ``target_depth``.

        Parameters
        ----------
        pools : dict
            Cell type -> array of eligible cell indices.
        type_probs : pd.Series
            Cell type -> draw probability (from a mixing strategy).
        cell_depths : np.ndarray
            Total count of every input cell.
        target_depth : int
            Depth at which sampling stops.

        Returns
        -------
        SpotDraw
            Drawn cells. ``reached_target`` is False when the budget or
            the pool ran out first.
        """
        types = [ct for ct in type_probs.index if len(pools.get(ct, ())) > 0]
        probs = type_probs.loc[types].to_numpy(dtype=np.float64).copy()
        remaining = [pools[ct].copy() for ct in types]
        sizes = np.array([len(p) for p in remaining])

        budget = int(self.sampling.max_cells_per_spot)
        replace = self.sampling.replace_within_spot

        chosen = []
        total = 0
        while total < target_depth and len(chosen) < budget:
            mass = probs.sum()
            if mass <= 0:
                break

            t = self._rng.choice(len(types), p=probs / mass)
            k = int(self._rng.integers(sizes[t]))
            cell = remaining[t][k]

            if not replace:
                # swap-remove keeps the pool contiguous
                remaining[t][k] = remaining[t][sizes[t] - 1]
                sizes[t] -= 1
                if sizes[t] == 0:
                    probs[t] = 0.0

            chosen.append(cell)
            total += int(cell_depths[cell])

        return SpotDraw(
            cells=np.asarray(chosen, dtype=np.int64),
            total_depth=total,
            target_depth=int(target_depth),
        )

    def draw_gene_permutation(self, n_genes: int) -> np.ndarray:
        """Draw the gene permutation shared by all mock spots of a run."""
        return self._rng.permutation(n_genes)
