"""Default-branch snapshot extraction.

For one project the extractor resolves default branch -> head -> commit ->
tree and maps every tracked file to ``(project id, path, snapshot id)``.
Any missing link fails the project with a step-tagged reason; the validity
pre-filter and the full extraction share :func:`extract`, so they cannot
disagree about which projects are usable.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .logging import get_logger
from .models import Project, ProjectId, SnapshotRow
from .stores.base import RepositoryStore

_logger = get_logger("extractor")


class Step(str, Enum):
    """Resolution steps that can fail a project."""

    DEFAULT_BRANCH = "default_branch"
    HEADS = "heads"
    DEFAULT_HEAD = "default_head"
    COMMIT = "commit"


@dataclass(frozen=True)
class Extraction:
    """Outcome of extracting one project: rows on success, a tagged reason otherwise."""

    project_id: ProjectId
    rows: Tuple[SnapshotRow, ...] = ()
    failed_step: Optional[Step] = None
    reason: Optional[str] = None
    warnings: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.failed_step is None

    @classmethod
    def success(
        cls, project_id: ProjectId, rows: Iterable[SnapshotRow], warnings: Sequence[str] = ()
    ) -> "Extraction":
        return cls(project_id=project_id, rows=tuple(rows), warnings=tuple(warnings))

    @classmethod
    def failure(
        cls, project_id: ProjectId, step: Step, reason: str, warnings: Sequence[str] = ()
    ) -> "Extraction":
        return cls(
            project_id=project_id,
            failed_step=step,
            reason=reason,
            warnings=tuple(warnings),
        )


def default_head_ref(branch: str) -> str:
    return f"refs/heads/{branch}"


def extract(store: RepositoryStore, project: Project) -> Extraction:
    """Resolve the default-branch snapshot of ``project``."""
    project_id = project.id
    warnings: List[str] = []

    def _fail(step: Step, reason: str) -> Extraction:
        _logger.warning("Skipping project %s: %s", project_id, reason)
        return Extraction.failure(project_id, step, reason, warnings)

    def _warn(message: str) -> None:
        _logger.warning(message)
        warnings.append(message)

    branch = store.default_branch(project)
    if not branch:
        return _fail(Step.DEFAULT_BRANCH, "no default branch")
    ref = default_head_ref(branch)

    heads = store.heads(project)
    if not heads:
        return _fail(Step.HEADS, "no heads")

    matching = [head for head in heads if head.name == ref]
    if not matching:
        return _fail(Step.DEFAULT_HEAD, f"no default head ({ref})")
    if len(matching) > 1:
        _warn(
            f"Project {project_id} has {len(matching)} heads named {ref}; using the first"
        )
    head = matching[0]

    commit = store.commit(head)
    if commit is None:
        return _fail(Step.COMMIT, f"no commit at head (commit id {head.commit_id})")

    rows: List[SnapshotRow] = []
    for change in store.changes(commit.tree):
        if change.path is None:
            _warn(
                f"Project {project_id} has no path for path id {change.path_id}; dropping change"
            )
            continue
        if change.snapshot_id is None:
            # Deleted file.
            _logger.debug(
                "Project %s: %s deleted at head, dropping", project_id, change.path
            )
            continue
        rows.append(SnapshotRow(pid=project_id, path=change.path, hash_id=change.snapshot_id))

    return Extraction.success(project_id, rows, warnings)


def can_extract(store: RepositoryStore, project: Project) -> bool:
    """Return True when ``extract`` would succeed for ``project``."""
    return extract(store, project).ok


class SnapshotExtractor:
    """Runs extraction over many projects, optionally on a thread pool.

    Results always come back in input order whatever the worker count.
    """

    def __init__(self, store: RepositoryStore, *, workers: int = 1) -> None:
        self.store = store
        self.workers = max(1, workers)

    def extract(self, project: Project) -> Extraction:
        return extract(self.store, project)

    def can_extract(self, project: Project) -> bool:
        return self.extract(project).ok

    def extract_many(self, projects: Sequence[Project]) -> List[Extraction]:
        if self.workers == 1 or len(projects) < 2:
            return [self.extract(project) for project in projects]
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            return list(executor.map(self.extract, projects))


__all__ = [
    "Extraction",
    "SnapshotExtractor",
    "Step",
    "can_extract",
    "default_head_ref",
    "extract",
]
