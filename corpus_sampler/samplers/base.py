"""Base classes for sampling strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Iterator, List, Sequence

from ..models import Project


@dataclass
class Sample:
    """Projects chosen by a sampler, in selection order."""

    projects: List[Project] = field(default_factory=list)
    requested: int = 0

    @property
    def underfilled(self) -> bool:
        return len(self.projects) < self.requested

    def __len__(self) -> int:
        return len(self.projects)

    def __iter__(self) -> Iterator[Project]:
        return iter(self.projects)


@dataclass(frozen=True)
class Sampler(ABC):
    """Contract for strategies drawing a bounded subset of a population."""

    size: int

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"Sample size must be non-negative, got {self.size}")

    @abstractmethod
    def sample(self, population: Sequence[Project]) -> Sample:
        """Select at most ``size`` projects from ``population``."""

    def resized(self, size: int) -> "Sampler":
        """Return the same strategy, with the same seed, drawing ``size`` projects."""
        return replace(self, size=size)

    def describe(self) -> str:
        return f"{type(self).__name__}({self.size})"
