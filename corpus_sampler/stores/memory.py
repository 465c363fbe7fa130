"""Dictionary-backed repository store."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..models import Change, Commit, Head, Project, Tree


class InMemoryStore:
    """Holds an already-loaded dataset; project order is insertion order."""

    def __init__(
        self,
        projects: Iterable[Project],
        commits: Mapping[str, Commit] | None = None,
    ) -> None:
        self._projects: List[Project] = list(projects)
        self._commits: Dict[str, Commit] = dict(commits or {})

    def projects(self) -> Sequence[Project]:
        return list(self._projects)

    def default_branch(self, project: Project) -> Optional[str]:
        return project.default_branch or None

    def heads(self, project: Project) -> Optional[Sequence[Head]]:
        return project.heads

    def commit(self, head: Head) -> Optional[Commit]:
        if head.commit_id is None:
            return None
        return self._commits.get(head.commit_id)

    def changes(self, tree: Tree) -> Sequence[Change]:
        return tree.changes

    def __len__(self) -> int:
        return len(self._projects)


__all__ = ["InMemoryStore"]
