"""Project attributes and the predicates used to narrow a population."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from collections.abc import Sized
from typing import Any, Callable, Iterable, List

from .models import Project


@dataclass(frozen=True)
class Attribute:
    """Named accessor for a project metric or collection."""

    name: str
    getter: Callable[[Project], Any]

    def __call__(self, project: Project) -> Any:
        return self.getter(project)


@dataclass(frozen=True)
class Count:
    """Cardinality of a collection-valued attribute."""

    attribute: Attribute

    @property
    def name(self) -> str:
        return f"count({self.attribute.name})"

    def __call__(self, project: Project) -> int:
        value = self.attribute(project)
        return len(value) if isinstance(value, Sized) else 0


LANGUAGE = Attribute("language", lambda project: project.language)
STARS = Attribute("stars", lambda project: project.stars)
AGE = Attribute("age", lambda project: project.age)
DEVELOPERS = Attribute("developers", lambda project: project.developers)
LOCS = Attribute("locs", lambda project: project.locs)
SNAPSHOTS = Attribute("snapshots", lambda project: project.snapshots)
COMMITS = Attribute("commits", lambda project: project.commits)
MAX_H_INDEX = Attribute("max_h_index", lambda project: project.max_h_index)


class Predicate(ABC):
    """A single condition a project must satisfy."""

    @abstractmethod
    def __call__(self, project: Project) -> bool:
        """Return True when the project satisfies this predicate."""


@dataclass(frozen=True)
class Equal(Predicate):
    attribute: Attribute | Count
    value: Any

    def __call__(self, project: Project) -> bool:
        return self.attribute(project) == self.value


@dataclass(frozen=True)
class AtLeast(Predicate):
    """Threshold on a numeric, duration or count attribute."""

    attribute: Attribute | Count
    threshold: Any

    def __call__(self, project: Project) -> bool:
        actual = self.attribute(project)
        if actual is None:
            return False
        return actual >= self.threshold


def filter_projects(projects: Iterable[Project], *predicates: Predicate) -> List[Project]:
    """Return the projects satisfying every predicate, in input order."""
    return [project for project in projects if all(predicate(project) for predicate in predicates)]


__all__ = [
    "AGE",
    "COMMITS",
    "DEVELOPERS",
    "LANGUAGE",
    "LOCS",
    "MAX_H_INDEX",
    "SNAPSHOTS",
    "STARS",
    "AtLeast",
    "Attribute",
    "Count",
    "Equal",
    "Predicate",
    "filter_projects",
]
