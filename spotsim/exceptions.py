"""Exception types raised by spotsim."""


class SpotSimError(Exception):
    """Base class for spotsim errors."""


class ConfigurationError(SpotSimError, ValueError):
    """
    Raised for invalid generation parameters or unusable input data.

    Examples: inverted or non-positive spot bounds, an unknown mixing
    strategy, or a region without any eligible cells.
    """


class InsufficientDataError(SpotSimError):
    """
    Raised when a region's cell pool cannot reach the requested depth.

    The caller should lower the target depth, raise the sampling budget,
    or provide more cells.
    """

    def __init__(self, message: str, region=None, spot_index=None):
        super().__init__(message)
        self.region = region
        self.spot_index = spot_index
