"""
Preset configurations for common synthesis scenarios.

Each preset provides a complete SynthesisConfig for a specific use
case, from quick unit-test runs to deep Visium-like spots.
"""

from spotsim.simulation.config.dataclasses import (
    DepthConfig,
    MixingStrategy,
    SpotCountConfig,
    SynthesisConfig,
)


class SynthesisPresets:
    """
    Factory class for preset synthesis configurations.

    Example
    -------
    >>> config = SynthesisPresets.default()
    >>> config = SynthesisPresets.with_mock()
    >>> config = SynthesisPresets.get_preset("deep")
    """

    @staticmethod
    def default() -> SynthesisConfig:
        """
        Default configuration.

        - 10-20 spots per region
        - Depth ~ Normal(5000, 1000)
        - Composition proportional to the region
        """
        return SynthesisConfig()

    @staticmethod
    def small_scale() -> SynthesisConfig:
        """
        Small, shallow run for unit tests and prototyping.
        """
        config = SynthesisConfig()
        config.spots = SpotCountConfig(min_spots=3, max_spots=5)
        config.depth = DepthConfig(mean=500.0, std=50.0)
        config.sampling.max_cells_per_spot = 50
        return config

    @staticmethod
    def shallow() -> SynthesisConfig:
        """
        Low-depth spots, closer to sparse platforms.
        """
        config = SynthesisConfig()
        config.depth = DepthConfig(mean=1000.0, std=200.0)
        return config

    @staticmethod
    def deep() -> SynthesisConfig:
        """
        Deep spots resembling Visium (roughly 10 cells per spot).

        Cells may be reused within a spot so small pools still fill.
        """
        config = SynthesisConfig()
        config.depth = DepthConfig(mean=20000.0, std=4000.0)
        config.sampling.max_cells_per_spot = 500
        config.sampling.replace_within_spot = True
        return config

    @staticmethod
    def dominated() -> SynthesisConfig:
        """
        Spots dominated by the two most frequent types of each region.
        """
        config = SynthesisConfig()
        config.strategy = MixingStrategy.TOP2_OVERLAP
        config.sampling.dominant_fraction = 0.8
        return config

    @staticmethod
    def with_mock() -> SynthesisConfig:
        """
        Default configuration plus the shuffled-gene mock region.
        """
        config = SynthesisConfig()
        config.mock.enabled = True
        return config

    @classmethod
    def get_preset(cls, name: str) -> SynthesisConfig:
        """
        Get preset configuration by name.

        Parameters
        ----------
        name : str
            Preset name.

        Returns
        -------
        SynthesisConfig
            Preset configuration.
        """
        presets = {
            'default': cls.default,
            'small_scale': cls.small_scale,
            'shallow': cls.shallow,
            'deep': cls.deep,
            'dominated': cls.dominated,
            'with_mock': cls.with_mock,
        }

        if name not in presets:
            available = ', '.join(sorted(presets.keys()))
            raise ValueError(f"Unknown preset: '{name}'. Available: {available}")

        return presets[name]()

    @classmethod
    def list_presets(cls) -> list:
        """List all available preset names."""
        return [
            'default',
            'small_scale',
            'shallow',
            'deep',
            'dominated',
            'with_mock',
        ]
