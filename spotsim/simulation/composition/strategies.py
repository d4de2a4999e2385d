"""
Cell-type mixing strategies.

A mixing strategy maps the cell-type frequency table of one region to
the distribution used to draw cell types into that region's spots.
All strategies are pure functions of the frequency table.

Dominant types are chosen by count (descending), ties broken by label
(ascending), so the result never depends on input order.
"""

from typing import Callable, Union

import numpy as np
import pandas as pd

from spotsim.exceptions import ConfigurationError
from spotsim.simulation.config.dataclasses import MixingStrategy


def region_frequencies(cell_types, regions) -> pd.DataFrame:
    """
    Count cells of each type in each region.

    Parameters
    ----------
    cell_types : array-like
        Cell type label per cell.
    regions : array-like
        Region label per cell.

    Returns
    -------
    pd.DataFrame
        Regions x cell types count table (sorted labels, zeros filled).
    """
    cell_types = np.asarray(cell_types).astype(str)
    regions = np.asarray(regions).astype(str)
    if len(cell_types) != len(regions):
        raise ConfigurationError(
            f"Got {len(cell_types)} cell type labels but {len(regions)} region labels"
        )

    table = pd.crosstab(
        pd.Series(regions, name="region"),
        pd.Series(cell_types, name="cell_type"),
    )
    return table.sort_index(axis=0).sort_index(axis=1)


def _present(frequencies: pd.Series) -> pd.Series:
    freq = pd.Series(frequencies, dtype=float)
    freq = freq[freq > 0]
    if len(freq) == 0:
        raise ConfigurationError("Region has no eligible cells of any type")
    return freq


def _rank(freq: pd.Series) -> pd.Series:
    """Order types by count descending, then label ascending."""
    order = sorted(freq.index, key=lambda ct: (-freq[ct], str(ct)))
    return freq.loc[order]


def uniform_mixing(frequencies: pd.Series) -> pd.Series:
    """Equal probability for every cell type present in the region."""
    freq = _present(frequencies)
    return pd.Series(1.0 / len(freq), index=freq.index)


def proportional_mixing(frequencies: pd.Series) -> pd.Series:
    """Probability proportional to the observed regional composition."""
    freq = _present(frequencies)
    return freq / freq.sum()


def dominant_mixing(
    frequencies: pd.Series,
    n_dominant: int = 1,
    dominant_fraction: float = 0.8,
) -> pd.Series:
    """
    Give ``dominant_fraction`` of the mass to the top ``n_dominant`` types.

    The dominant types split their share in proportion to their counts;
    the remaining types split ``1 - dominant_fraction`` equally. If the
    region has no more than ``n_dominant`` types, the dominant types take
    all of the mass.

    Parameters
    ----------
    frequencies : pd.Series
        Cell type -> count for one region.
    n_dominant : int
        Number of dominant types.
    dominant_fraction : float
        Mass assigned to the dominant types, in (0, 1].

    Returns
    -------
    pd.Series
        Cell type -> probability, summing to 1.
    """
    if n_dominant < 1:
        raise ConfigurationError(f"n_dominant must be >= 1, got {n_dominant}")
    if not 0.0 < dominant_fraction <= 1.0:
        raise ConfigurationError(
            f"dominant_fraction must be in (0, 1], got {dominant_fraction}"
        )

    freq = _rank(_present(frequencies))
    top = freq.iloc[:n_dominant]
    rest = freq.iloc[n_dominant:]

    if len(rest) == 0:
        probs = top / top.sum()
        return probs.sort_index()

    probs = pd.concat([
        top / top.sum() * dominant_fraction,
        pd.Series((1.0 - dominant_fraction) / len(rest), index=rest.index),
    ])
    probs = probs[probs > 0]
    return (probs / probs.sum()).sort_index()


def get_strategy(
    strategy: Union[str, MixingStrategy],
    dominant_fraction: float = 0.8,
) -> Callable[[pd.Series], pd.Series]:
    """
    Resolve a strategy name to its mixing function.

    Parameters
    ----------
    strategy : str or MixingStrategy
        Strategy identifier.
    dominant_fraction : float
        Bound on dominant-type mass for the dominant strategies.

    Returns
    -------
    callable
        Function mapping a frequency Series to a probability Series.

    Raises
    ------
    ConfigurationError
        If the strategy is unknown.
    """
    strategy = MixingStrategy.parse(strategy)

    if strategy == MixingStrategy.UNIFORM:
        return uniform_mixing
    elif strategy == MixingStrategy.PROPORTIONAL:
        return proportional_mixing
    elif strategy == MixingStrategy.DOMINANT:
        return lambda freq: dominant_mixing(freq, 1, dominant_fraction)
    else:
        return lambda freq: dominant_mixing(freq, 2, dominant_fraction)
