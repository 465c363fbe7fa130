"""Core data models shared across corpus_sampler components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Optional, Tuple

ProjectId = int
SnapshotId = int


@dataclass(frozen=True)
class Head:
    """Named pointer into a project's commit graph; ``commit_id`` may be unknown."""

    name: str
    commit_id: Optional[str]


@dataclass(frozen=True)
class Change:
    """One tracked file in a tree listing.

    ``snapshot_id`` is ``None`` for files deleted by this point in history;
    ``path`` is ``None`` only when the store is inconsistent.
    """

    path_id: int
    path: Optional[str]
    snapshot_id: Optional[SnapshotId]


@dataclass(frozen=True)
class Tree:
    """File-system state owned by a commit."""

    id: str
    changes: Tuple[Change, ...] = ()


@dataclass(frozen=True)
class Commit:
    id: str
    tree: Tree


@dataclass(frozen=True)
class Project:
    """Read-only view of a mined project and the metrics supplied by the store."""

    id: ProjectId
    language: Optional[str] = None
    stars: int = 0
    age: timedelta = timedelta(0)
    developers: Tuple[str, ...] = ()
    locs: int = 0
    snapshots: Tuple[SnapshotId, ...] = ()
    commits: Tuple[str, ...] = ()
    max_h_index: int = 0
    default_branch: Optional[str] = None
    heads: Optional[Tuple[Head, ...]] = None
    created: Optional[int] = None


@dataclass(frozen=True)
class SnapshotRow:
    """A single output triple: project, file path, content identifier."""

    pid: ProjectId
    path: str
    hash_id: SnapshotId

    def as_tuple(self) -> Tuple[ProjectId, str, SnapshotId]:
        return (self.pid, self.path, self.hash_id)


@dataclass
class QueryReport:
    """Outcome of a single named query run."""

    name: str
    path: Optional[Path] = None
    candidates: int = 0
    first_pass: int = 0
    extractable: int = 0
    selected: int = 0
    rows: int = 0
    requested: int = 0
    elapsed: float = 0.0
    warnings: list[str] = field(default_factory=list)

    @property
    def underfilled(self) -> bool:
        return self.selected < self.requested
