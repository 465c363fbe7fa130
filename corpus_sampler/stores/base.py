"""Repository store contract consumed by the sampling pipeline."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..models import Change, Commit, Head, Project, Tree


class RepositoryStore(Protocol):
    """Read-only access to projects, heads, commits and trees."""

    def projects(self) -> Sequence[Project]:
        """Return every project visible at the store's epoch, in store order."""

    def default_branch(self, project: Project) -> Optional[str]:
        """Return the project's default branch name, if known."""

    def heads(self, project: Project) -> Optional[Sequence[Head]]:
        """Return the project's branch heads, or None when missing."""

    def commit(self, head: Head) -> Optional[Commit]:
        """Resolve a head to its commit, or None when the commit is unknown."""

    def changes(self, tree: Tree) -> Sequence[Change]:
        """Return the full file listing of a tree."""
