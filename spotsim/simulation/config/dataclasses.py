"""
Configuration dataclasses for pseudo-spot synthesis.

These dataclasses provide type-safe, IDE-friendly configuration for
all aspects of spot generation: spot counts, depth, sampling budget,
the mock control region and the mixing strategy.
"""

import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional, Union

import numpy as np

from spotsim.exceptions import ConfigurationError


class MixingStrategy(Enum):
    """How cell types are mixed into the spots of a region."""

    UNIFORM = "uniform"
    PROPORTIONAL = "proportional"
    DOMINANT = "dominant"  # top-1 type dominates
    TOP2_OVERLAP = "top2_overlap"  # top-2 types share the dominant mass

    @classmethod
    def parse(cls, value: Union[str, "MixingStrategy"]) -> "MixingStrategy":
        """Resolve a strategy from its name, raising ConfigurationError if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            available = ", ".join(s.value for s in cls)
            raise ConfigurationError(
                f"Unknown mixing strategy: '{value}'. Available: {available}"
            ) from None


@dataclass
class SpotCountConfig:
    """
    Number of spots generated per region.

    Parameters
    ----------
    min_spots : int
        Lower bound (inclusive).
    max_spots : int
        Upper bound (inclusive).
    """

    min_spots: int = 10
    max_spots: int = 20


@dataclass
class DepthConfig:
    """
    Target total UMI depth per spot.

    Targets are drawn from Normal(mean, std), rounded, and clamped to
    ``min_depth``.

    Parameters
    ----------
    mean : float
        Mean target depth.
    std : float
        Standard deviation of the target depth.
    min_depth : int
        Smallest allowed target depth.
    """

    mean: float = 5000.0
    std: float = 1000.0
    min_depth: int = 1


@dataclass
class SamplingConfig:
    """
    Cell sampling parameters.

    Parameters
    ----------
    max_cells_per_spot : int
        Draw budget per spot. A spot that has not reached its target
        depth after this many draws fails.
    replace_within_spot : bool
        Allow the same cell to contribute more than once to one spot.
    dominant_fraction : float
        Probability mass given to the dominant cell types by the
        ``dominant`` and ``top2_overlap`` strategies.
    """

    max_cells_per_spot: int = 200
    replace_within_spot: bool = False
    dominant_fraction: float = 0.8


@dataclass
class MockRegionConfig:
    """
    Mock (negative control) region.

    Parameters
    ----------
    enabled : bool
        Generate the mock region.
    name : str
        Region label used for mock spots and gold-standard rows.
    """

    enabled: bool = False
    name: str = "mock"


def _convert_to_native(obj: Any) -> Any:
    """Convert numpy types to native Python types for JSON serialization."""
    if isinstance(obj, dict):
        return {k: _convert_to_native(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_convert_to_native(v) for v in obj]
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, Enum):
        return obj.value
    else:
        return obj


@dataclass
class SynthesisConfig:
    """
    Complete spot synthesis configuration.

    Combines all configuration components into a single object.

    Example
    -------
    >>> config = SynthesisConfig()
    >>> config.spots = SpotCountConfig(min_spots=5, max_spots=5)
    >>> config.mock.enabled = True
    >>> config.save("my_config.json")
    """

    strategy: MixingStrategy = MixingStrategy.PROPORTIONAL
    spots: SpotCountConfig = field(default_factory=SpotCountConfig)
    depth: DepthConfig = field(default_factory=DepthConfig)
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    mock: MockRegionConfig = field(default_factory=MockRegionConfig)
    filter_zero_genes: bool = False
    random_seed: Optional[int] = 42
    output_dir: Optional[str] = None

    def validate(self) -> "SynthesisConfig":
        """
        Check parameter consistency.

        Returns
        -------
        SynthesisConfig
            ``self``, with ``strategy`` resolved to a MixingStrategy.

        Raises
        ------
        ConfigurationError
            If any parameter is out of range.
        """
        self.strategy = MixingStrategy.parse(self.strategy)

        lo, hi = self.spots.min_spots, self.spots.max_spots
        if lo <= 0 or hi <= 0:
            raise ConfigurationError(
                f"Spot count bounds must be positive, got [{lo}, {hi}]"
            )
        if lo > hi:
            raise ConfigurationError(
                f"Spot count bounds are inverted: min_spots={lo} > max_spots={hi}"
            )

        if not (np.isfinite(self.depth.mean) and np.isfinite(self.depth.std)):
            raise ConfigurationError(
                f"Depth mean and std must be finite, got mean={self.depth.mean}, std={self.depth.std}"
            )
        if self.depth.std < 0:
            raise ConfigurationError(f"Depth std must be >= 0, got {self.depth.std}")
        if self.depth.min_depth < 1:
            raise ConfigurationError(
                f"min_depth must be >= 1, got {self.depth.min_depth}"
            )

        if self.sampling.max_cells_per_spot < 1:
            raise ConfigurationError(
                f"max_cells_per_spot must be >= 1, got {self.sampling.max_cells_per_spot}"
            )
        if not 0.0 < self.sampling.dominant_fraction <= 1.0:
            raise ConfigurationError(
                f"dominant_fraction must be in (0, 1], got {self.sampling.dominant_fraction}"
            )

        if self.mock.enabled and not self.mock.name:
            raise ConfigurationError("Mock region name must be non-empty")

        return self

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        d = {
            "strategy": MixingStrategy.parse(self.strategy).value,
            "spots": asdict(self.spots),
            "depth": asdict(self.depth),
            "sampling": asdict(self.sampling),
            "mock": asdict(self.mock),
            "filter_zero_genes": self.filter_zero_genes,
            "random_seed": self.random_seed,
            "output_dir": self.output_dir,
        }
        return _convert_to_native(d)

    def save(self, path: str) -> None:
        """Save configuration to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, d: dict) -> "SynthesisConfig":
        """Build a configuration from a dictionary produced by ``to_dict``."""
        config = cls()

        if "strategy" in d:
            config.strategy = MixingStrategy.parse(d["strategy"])

        sections = {
            "spots": config.spots,
            "depth": config.depth,
            "sampling": config.sampling,
            "mock": config.mock,
        }
        for key, section in sections.items():
            for k, v in d.get(key, {}).items():
                if not hasattr(section, k):
                    raise ConfigurationError(f"Unknown {key} option: '{k}'")
                setattr(section, k, v)

        config.filter_zero_genes = bool(d.get("filter_zero_genes", False))
        config.random_seed = d.get("random_seed", config.random_seed)
        config.output_dir = d.get("output_dir")

        return config

    @classmethod
    def load(cls, path: str) -> "SynthesisConfig":
        """Load configuration from JSON file."""
        with open(path) as f:
            d = json.load(f)
        return cls.from_dict(d)
