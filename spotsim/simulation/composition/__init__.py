"""Cell-type mixing strategies."""

from spotsim.simulation.composition.strategies import (
    dominant_mixing,
    get_strategy,
    proportional_mixing,
    region_frequencies,
    uniform_mixing,
)

__all__ = [
    "region_frequencies",
    "uniform_mixing",
    "proportional_mixing",
    "dominant_mixing",
    "get_strategy",
]
