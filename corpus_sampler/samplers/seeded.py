"""Seeded random sampling strategies.

Every call builds its own generator from the sampler's seed, so the same seed
and the same population always yield the same sample regardless of call order
or of other samplers running alongside.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, List, Optional, Sequence, Set

import numpy as np

from ..criteria import COMMITS, Attribute
from ..logging import get_logger
from ..models import Project
from .base import Sample, Sampler

_MAX_SEED = 2**128

_logger = get_logger("samplers")


def _permutation(seed: int, length: int) -> List[int]:
    if length == 0:
        return []
    rng = np.random.default_rng(seed)
    return [int(index) for index in rng.permutation(length)]


@dataclass(frozen=True)
class MinRatio:
    """Accept a candidate only if enough of its ``attribute`` is new.

    The ratio is the share of the candidate's collection not already covered
    by the projects accepted so far. Forks and mirrors of an accepted project
    share most of its commits and fall below the minimum.
    """

    attribute: Attribute = COMMITS
    minimum: float = 0.9

    def __post_init__(self) -> None:
        if not 0.0 <= self.minimum <= 1.0:
            raise ValueError(f"MinRatio minimum must lie in [0, 1], got {self.minimum}")

    def members(self, project: Project) -> Set[object]:
        return set(self.attribute(project) or ())

    def ratio(self, project: Project, covered: AbstractSet[object]) -> float:
        members = self.members(project)
        if not members:
            return 1.0
        return len(members - covered) / len(members)

    def accepts(self, project: Project, covered: AbstractSet[object]) -> bool:
        return self.ratio(project, covered) >= self.minimum


@dataclass(frozen=True)
class Random(Sampler):
    """Uniform selection without replacement."""

    seed: int = 0

    def __post_init__(self) -> None:
        super().__post_init__()
        if not 0 <= self.seed < _MAX_SEED:
            raise ValueError(f"Seed must be an unsigned 128-bit integer, got {self.seed}")

    def sample(self, population: Sequence[Project]) -> Sample:
        order = _permutation(self.seed, len(population))
        chosen = [population[index] for index in order[: self.size]]
        result = Sample(projects=chosen, requested=self.size)
        if result.underfilled:
            _logger.warning(
                "%s under-filled: population holds %d of %d requested projects",
                self.describe(),
                len(chosen),
                self.size,
            )
        return result

    def describe(self) -> str:
        return f"{type(self).__name__}({self.size}, seed={self.seed})"


@dataclass(frozen=True)
class DistinctRandom(Random):
    """Seeded selection that never repeats a project and applies ``ratio``.

    Candidates are drawn from the seeded permutation in batches of ``size``.
    Rejected candidates do not count towards the quota, so drawing continues
    past the first batch until the quota is met or the pool is exhausted.
    """

    ratio: Optional[MinRatio] = None

    def sample(self, population: Sequence[Project]) -> Sample:
        order = _permutation(self.seed, len(population))
        batch_size = max(self.size, 1)
        accepted: List[Project] = []
        seen: Set[int] = set()
        covered: Set[object] = set()
        duplicates = 0
        rejected = 0

        for batch, start in enumerate(range(0, len(order), batch_size)):
            if len(accepted) >= self.size:
                break
            _logger.debug("%s drawing batch %d", self.describe(), batch)
            for index in order[start : start + batch_size]:
                candidate = population[index]
                if candidate.id in seen:
                    duplicates += 1
                    continue
                if self.ratio is not None and not self.ratio.accepts(candidate, covered):
                    rejected += 1
                    _logger.debug(
                        "Rejected project %s: %s ratio %.3f below %.2f",
                        candidate.id,
                        self.ratio.attribute.name,
                        self.ratio.ratio(candidate, covered),
                        self.ratio.minimum,
                    )
                    continue
                seen.add(candidate.id)
                if self.ratio is not None:
                    covered.update(self.ratio.members(candidate))
                accepted.append(candidate)
                if len(accepted) >= self.size:
                    break

        result = Sample(projects=accepted, requested=self.size)
        if result.underfilled:
            _logger.warning(
                "%s under-filled: pool exhausted with %d of %d projects "
                "(%d rejected by ratio, %d duplicates)",
                self.describe(),
                len(accepted),
                self.size,
                rejected,
                duplicates,
            )
        return result

    def describe(self) -> str:
        if self.ratio is None:
            return super().describe()
        return (
            f"{type(self).__name__}({self.size}, seed={self.seed}, "
            f"MinRatio({self.ratio.attribute.name}, {self.ratio.minimum}))"
        )


__all__ = ["DistinctRandom", "MinRatio", "Random"]
