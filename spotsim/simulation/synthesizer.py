"""
SpotSynthesizer - Main orchestrator for pseudo-spot generation.

Mixes real single-cell profiles into synthetic spatial spots, region by
region, following a named cell-type mixing strategy, and records which
cells went into which region as a gold standard for benchmarking
label transfer.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd
from scipy import sparse

from spotsim.exceptions import ConfigurationError, InsufficientDataError
from spotsim.io.loaders import CellData, filter_genes
from spotsim.simulation.composition.strategies import (
    get_strategy,
    region_frequencies,
    uniform_mixing,
)
from spotsim.simulation.config.dataclasses import (
    DepthConfig,
    MixingStrategy,
    MockRegionConfig,
    SamplingConfig,
    SpotCountConfig,
    SynthesisConfig,
)
from spotsim.simulation.gold_standard import build_gold_standard
from spotsim.simulation.result import SynthesisResult
from spotsim.simulation.sampling.sampler import CellSampler, SpotDraw, build_type_pools

logger = logging.getLogger(__name__)


class SpotSynthesizer:
    """
    Generates synthetic spots from labeled single-cell counts.

    For every region (sorted by label) the synthesizer draws a spot count
    within the configured bounds, then fills each spot with cells drawn
    according to the mixing strategy until the spot reaches its target
    depth. The optional mock region draws from all cells with uniform
    cell-type weights and has its gene columns permuted.

    Parameters
    ----------
    config : SynthesisConfig
        Complete synthesis configuration.

    Example
    -------
    >>> from spotsim.simulation import SynthesisPresets
    >>> config = SynthesisPresets.with_mock()
    >>> synth = SpotSynthesizer(config)
    >>> result = synth.generate(cells)
    >>> result.counts.shape
    (n_spots, n_genes)
    """

    def __init__(self, config: SynthesisConfig):
        self.config = config.validate()
        self._mixing = get_strategy(
            self.config.strategy, self.config.sampling.dominant_fraction
        )

    def generate(self, cells: CellData) -> SynthesisResult:
        """
        Run one generation.

        Parameters
        ----------
        cells : CellData
            Labeled input cells with raw counts.

        Returns
        -------
        SynthesisResult
            Spots, contributions, gold standard and mock permutation.

        Raises
        ------
        ConfigurationError
            If the input or configuration is unusable.
        InsufficientDataError
            If any spot of any region cannot reach its target depth.
        """
        cfg = self.config
        cells.validate()

        if cfg.filter_zero_genes:
            n_before = cells.n_genes
            cells = filter_genes(cells, min_cells=1)
            if cells.n_genes == 0:
                raise ConfigurationError("No genes with nonzero counts in the input")
            if cells.n_genes < n_before:
                logger.warning(f"Dropped {n_before - cells.n_genes} genes with zero counts")

        freq = region_frequencies(cells.cell_types, cells.regions)
        if cfg.mock.enabled and cfg.mock.name in freq.index:
            raise ConfigurationError(
                f"Mock region name '{cfg.mock.name}' collides with an existing region"
            )

        logger.info(
            f"Synthesizing spots: {cells.n_cells} cells, {cells.n_genes} genes, "
            f"{len(freq)} regions, strategy={cfg.strategy.value}"
        )

        rng = np.random.default_rng(cfg.random_seed)
        sampler = CellSampler(cfg.sampling, cfg.depth, rng=rng)
        depths = cells.depths

        spot_regions = []
        draws = []

        for region in freq.index:
            region_cells = np.where(cells.regions == region)[0]
            pools = build_type_pools(region_cells, cells.cell_types)
            probs = self._mixing(freq.loc[region])
            region_draws = self._generate_region(region, pools, probs, depths, sampler)
            spot_regions.extend([region] * len(region_draws))
            draws.extend(region_draws)

        n_real = len(draws)
        gene_permutation = None

        if cfg.mock.enabled:
            pools = build_type_pools(np.arange(cells.n_cells), cells.cell_types)
            probs = uniform_mixing(pd.Series({ct: len(p) for ct, p in pools.items()}))
            mock_draws = self._generate_region(cfg.mock.name, pools, probs, depths, sampler)
            spot_regions.extend([cfg.mock.name] * len(mock_draws))
            draws.extend(mock_draws)
            gene_permutation = sampler.draw_gene_permutation(cells.n_genes)
            logger.info(f"Mock region '{cfg.mock.name}': shuffled {cells.n_genes} gene columns")

        counts = aggregate_counts(cells.counts, [d.cells for d in draws])
        if gene_permutation is not None:
            counts = permute_mock_genes(counts, n_real, gene_permutation)

        result = self._assemble(cells, spot_regions, draws, counts, n_real, gene_permutation)

        logger.info(
            f"Generated {result.n_spots} spots, "
            f"{len(result.gold_standard)} gold-standard records"
        )

        if cfg.output_dir:
            from spotsim.io.export import save_synthesis

            save_synthesis(result, cfg.output_dir)
            logger.info(f"Results saved to {cfg.output_dir}")

        return result

    def _generate_region(
        self,
        region: str,
        pools: dict,
        probs: pd.Series,
        depths: np.ndarray,
        sampler: CellSampler,
    ) -> list[SpotDraw]:
        """Generate all spots of one region, failing the run on any short spot."""
        if sum(len(p) for p in pools.values()) == 0:
            raise ConfigurationError(f"Region '{region}' has no eligible cells")

        spots_cfg = self.config.spots
        n_spots = sampler.draw_spot_count(spots_cfg.min_spots, spots_cfg.max_spots)
        targets = sampler.draw_target_depths(n_spots)

        draws = []
        for i, target in enumerate(targets):
            draw = sampler.sample_spot(pools, probs, depths, target)
            if not draw.reached_target:
                raise InsufficientDataError(
                    f"Region '{region}' cannot reach target depth {draw.target_depth} "
                    f"for spot {i}: only {draw.total_depth} counts from {draw.n_cells} cells "
                    f"(budget {self.config.sampling.max_cells_per_spot}). "
                    f"Lower the depth, reduce spots, or allow replacement.",
                    region=region,
                    spot_index=i,
                )
            draws.append(draw)

        logger.info(
            f"Region '{region}': {n_spots} spots, "
            f"mean {np.mean([d.n_cells for d in draws]):.1f} cells/spot"
        )
        return draws

    def _assemble(
        self,
        cells: CellData,
        spot_regions: list[str],
        draws: list[SpotDraw],
        counts: sparse.csr_matrix,
        n_real: int,
        gene_permutation: Optional[np.ndarray],
    ) -> SynthesisResult:
        """Build spot metadata, composition and gold standard."""
        counters = {}
        spot_ids = []
        for region in spot_regions:
            k = counters.get(region, 0)
            counters[region] = k + 1
            spot_ids.append(f"{region}_spot{k}")

        contributions = [d.cells for d in draws]
        totals = np.asarray(counts.sum(axis=1)).ravel().astype(np.int64)

        spots = pd.DataFrame(
            {
                "region": spot_regions,
                "is_mock": np.arange(len(draws)) >= n_real,
                "target_depth": np.array([d.target_depth for d in draws], dtype=np.int64),
                "total_count": totals,
                "n_cells": np.array([d.n_cells for d in draws], dtype=np.int64),
                "reached_target": [d.reached_target for d in draws],
            },
            index=pd.Index(spot_ids, name="spot_id"),
        )

        cell_type_levels = sorted(np.unique(cells.cell_types))
        composition = pd.DataFrame(0.0, index=spots.index, columns=cell_type_levels)
        for spot_id, cells_in_spot in zip(spot_ids, contributions):
            labels = pd.Series(cells.cell_types[cells_in_spot])
            fractions = labels.value_counts(normalize=True)
            composition.loc[spot_id, fractions.index] = fractions.to_numpy()

        gold = build_gold_standard(spot_regions, contributions, cells.cell_ids)

        return SynthesisResult(
            counts=counts,
            spot_ids=spot_ids,
            gene_names=list(cells.gene_names),
            spots=spots,
            contributions=contributions,
            cell_ids=list(cells.cell_ids),
            cell_types=cells.cell_types,
            gold_standard=gold,
            gene_permutation=gene_permutation,
            composition=composition,
            config=self.config,
        )


def aggregate_counts(
    counts: Union[np.ndarray, sparse.spmatrix],
    contributions: Sequence[np.ndarray],
) -> sparse.csr_matrix:
    """
    Sum the count vectors of the cells drawn into each spot.

    Builds a spots x cells multiplicity matrix M, so the result is the
    exact integer product ``M @ counts``.

    Parameters
    ----------
    counts : np.ndarray or sparse matrix
        Cells x genes counts.
    contributions : sequence of np.ndarray
        Cell indices per spot (repeats allowed).

    Returns
    -------
    sparse.csr_matrix
        Spots x genes int64 counts.
    """
    n_cells = counts.shape[0]
    rows = np.concatenate(
        [np.full(len(c), i, dtype=np.int64) for i, c in enumerate(contributions)]
        or [np.zeros(0, dtype=np.int64)]
    )
    cols = np.concatenate(
        [np.asarray(c, dtype=np.int64) for c in contributions]
        or [np.zeros(0, dtype=np.int64)]
    )
    membership = sparse.csr_matrix(
        (np.ones(len(rows), dtype=np.int64), (rows, cols)),
        shape=(len(contributions), n_cells),
    )

    if sparse.issparse(counts):
        matrix = sparse.csr_matrix(counts).astype(np.int64)
    else:
        matrix = sparse.csr_matrix(np.asarray(counts).astype(np.int64))

    out = (membership @ matrix).tocsr()
    out.sum_duplicates()
    return out


def permute_mock_genes(
    counts: sparse.csr_matrix,
    first_mock_row: int,
    permutation: np.ndarray,
) -> sparse.csr_matrix:
    """
    Shuffle the gene columns of the mock spots (rows from ``first_mock_row`` on).

    Column ``j`` of a mock spot takes the value of gene
    ``permutation[j]``; gene names are unchanged, so per-gene signal is
    destroyed while spot totals and nonzero counts are kept.
    """
    counts = sparse.csr_matrix(counts)
    real = counts[:first_mock_row]
    mock = counts[first_mock_row:][:, np.asarray(permutation)]
    return sparse.vstack([real, mock], format="csr")


def generate_spots(
    cells: Union[CellData, np.ndarray, sparse.spmatrix],
    cell_types: Optional[Sequence[str]] = None,
    regions: Optional[Sequence[str]] = None,
    mixing_strategy: Union[str, MixingStrategy] = MixingStrategy.PROPORTIONAL,
    n_spots_range: tuple[int, int] = (10, 20),
    depth_distribution: tuple[float, float] = (5000.0, 1000.0),
    add_mock_region: bool = False,
    gene_names: Optional[Sequence[str]] = None,
    cell_ids: Optional[Sequence[str]] = None,
    max_cells_per_spot: int = 200,
    replace_within_spot: bool = False,
    dominant_fraction: float = 0.8,
    mock_region_name: str = "mock",
    filter_zero_genes: bool = False,
    seed: Optional[int] = None,
    output_dir: Optional[Union[str, Path]] = None,
) -> SynthesisResult:
    """
    Generate synthetic spots with an explicit parameter set.

    Functional front-end to :class:`SpotSynthesizer`. The synthetic
    matrix and the gold standard are ``result.counts`` and
    ``result.gold_standard``.

    Parameters
    ----------
    cells : CellData or array-like
        Labeled cells, or a cells x genes count matrix (then
        ``cell_types`` and ``regions`` are required).
    cell_types, regions : sequence of str, optional
        Per-cell labels when ``cells`` is a matrix.
    mixing_strategy : str or MixingStrategy
        One of 'uniform', 'proportional', 'dominant', 'top2_overlap'.
    n_spots_range : tuple of int
        Inclusive (min, max) spot count per region.
    depth_distribution : tuple of float
        (mean, std) of the target depth.
    add_mock_region : bool
        Generate the shuffled-gene mock region.
    gene_names, cell_ids : sequence of str, optional
        Identifiers when ``cells`` is a matrix. Defaults are
        ``gene_{i}`` and ``cell_{i}``.
    max_cells_per_spot : int
        Draw budget per spot.
    replace_within_spot : bool
        Allow repeated cells within one spot.
    dominant_fraction : float
        Dominant-type mass for the dominant strategies.
    mock_region_name : str
        Label of the mock region.
    filter_zero_genes : bool
        Drop genes with zero total count before sampling.
    seed : int, optional
        Random seed.
    output_dir : str or Path, optional
        If given, results are written there.

    Returns
    -------
    SynthesisResult
        Generated spots and gold standard.
    """
    if not isinstance(cells, CellData):
        if cell_types is None or regions is None:
            raise ConfigurationError(
                "cell_types and regions are required when passing a count matrix"
            )
        if pd.isna(pd.Series(cell_types)).any() or pd.isna(pd.Series(regions)).any():
            raise ConfigurationError("cell_types and regions must not contain missing labels")
        n_cells, n_genes = cells.shape
        cells = CellData(
            counts=cells,
            gene_names=list(gene_names) if gene_names is not None else [f"gene_{i}" for i in range(n_genes)],
            cell_ids=list(cell_ids) if cell_ids is not None else [f"cell_{i}" for i in range(n_cells)],
            cell_types=np.asarray(cell_types),
            regions=np.asarray(regions),
        )

    try:
        min_spots, max_spots = n_spots_range
        depth_mean, depth_std = depth_distribution
    except (TypeError, ValueError):
        raise ConfigurationError(
            "n_spots_range and depth_distribution must be pairs"
        ) from None

    config = SynthesisConfig(
        strategy=MixingStrategy.parse(mixing_strategy),
        spots=SpotCountConfig(min_spots=int(min_spots), max_spots=int(max_spots)),
        depth=DepthConfig(mean=float(depth_mean), std=float(depth_std)),
        sampling=SamplingConfig(
            max_cells_per_spot=max_cells_per_spot,
            replace_within_spot=replace_within_spot,
            dominant_fraction=dominant_fraction,
        ),
        mock=MockRegionConfig(enabled=add_mock_region, name=mock_region_name),
        filter_zero_genes=filter_zero_genes,
        random_seed=seed,
        output_dir=str(output_dir) if output_dir is not None else None,
    )
    return SpotSynthesizer(config).generate(cells)
