"""Deterministic top-K selection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..criteria import STARS, Attribute, Count
from ..models import Project
from .base import Sample, Sampler


@dataclass(frozen=True)
class Top(Sampler):
    """Take the ``size`` projects ranking highest on ``by``.

    Ties keep the population's order; ``sorted`` is stable under ``reverse``.
    """

    by: Attribute | Count = STARS

    def sample(self, population: Sequence[Project]) -> Sample:
        ranked = sorted(population, key=self.by, reverse=True)
        return Sample(projects=ranked[: self.size], requested=self.size)

    def describe(self) -> str:
        return f"Top({self.size}, by={self.by.name})"


__all__ = ["Top"]
