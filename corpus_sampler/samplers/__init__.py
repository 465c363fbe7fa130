"""Sampling strategies."""

from .base import Sample, Sampler
from .seeded import DistinctRandom, MinRatio, Random
from .top import Top

__all__ = ["DistinctRandom", "MinRatio", "Random", "Sample", "Sampler", "Top"]
