"""Weighted cell sampling."""

from spotsim.simulation.sampling.sampler import CellSampler, SpotDraw, build_type_pools

__all__ = ["CellSampler", "SpotDraw", "build_type_pools"]
