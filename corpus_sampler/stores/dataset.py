"""JSON dataset loader producing an in-memory repository store."""

from __future__ import annotations

from datetime import timedelta
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..logging import get_logger
from ..models import Change, Commit, Head, Project, Tree
from .memory import InMemoryStore

# December 2020 savepoint.
DEFAULT_EPOCH = 1606780800

_logger = get_logger("stores.dataset")


class DatasetError(RuntimeError):
    """Raised when a dataset file cannot be read or is malformed."""


def load_dataset(path: Path, *, epoch: int | None = DEFAULT_EPOCH) -> InMemoryStore:
    """Load a dataset file, hiding projects created after ``epoch``."""
    path = Path(path).expanduser()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise DatasetError(f"Dataset not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise DatasetError(f"Failed to read dataset {path.name}: {exc}") from exc
    return parse_dataset(data, epoch=epoch)


def parse_dataset(data: Any, *, epoch: int | None = DEFAULT_EPOCH) -> InMemoryStore:
    if not isinstance(data, dict):
        raise DatasetError("Dataset must contain a mapping at the root")

    raw_projects = data.get("projects", [])
    raw_commits = data.get("commits", {})
    if not isinstance(raw_projects, list):
        raise DatasetError("'projects' must be a list")
    if not isinstance(raw_commits, dict):
        raise DatasetError("'commits' must be a mapping of commit id to tree")

    commits: Dict[str, Commit] = {}
    for commit_id, raw in raw_commits.items():
        commits[str(commit_id)] = _commit_from_dict(str(commit_id), raw)

    projects: List[Project] = []
    hidden = 0
    for raw in raw_projects:
        project = _project_from_dict(raw)
        if epoch is not None and project.created is not None and project.created > epoch:
            hidden += 1
            continue
        projects.append(project)

    if hidden:
        _logger.debug("Hid %d projects created after epoch %s", hidden, epoch)
    _logger.debug("Loaded %d projects and %d commits", len(projects), len(commits))
    return InMemoryStore(projects, commits)


def _project_from_dict(raw: Any) -> Project:
    if not isinstance(raw, dict):
        raise DatasetError("Project entries must be mappings")
    project_id = _as_int(raw.get("id"))
    if project_id is None:
        raise DatasetError(f"Project entry without an integer id: {raw!r}")

    heads: Optional[Tuple[Head, ...]] = None
    raw_heads = raw.get("heads")
    if isinstance(raw_heads, list):
        heads = tuple(_head_from_dict(project_id, item) for item in raw_heads)

    return Project(
        id=project_id,
        language=_as_str(raw.get("language")),
        stars=_as_int(raw.get("stars")) or 0,
        age=timedelta(days=_as_float(raw.get("age_days")) or 0.0),
        developers=tuple(str(item) for item in _as_list(raw.get("developers"))),
        locs=_as_int(raw.get("locs")) or 0,
        snapshots=tuple(_as_list(raw.get("snapshots"))),
        commits=tuple(str(item) for item in _as_list(raw.get("commits"))),
        max_h_index=_as_int(raw.get("max_h_index")) or 0,
        default_branch=_as_str(raw.get("default_branch")),
        heads=heads,
        created=_as_int(raw.get("created")),
    )


def _head_from_dict(project_id: int, raw: Any) -> Head:
    if not isinstance(raw, dict):
        raise DatasetError(f"Head entries for project {project_id} must be mappings")
    name = _as_str(raw.get("name"))
    if name is None:
        raise DatasetError(f"Head of project {project_id} needs a 'name'")
    # A dangling head stays in the dataset and fails extraction at the commit step.
    return Head(name=name, commit_id=_as_str(raw.get("commit")))


def _commit_from_dict(commit_id: str, raw: Any) -> Commit:
    if not isinstance(raw, dict):
        raise DatasetError(f"Commit {commit_id} must be a mapping")
    changes: List[Change] = []
    for item in _as_list(raw.get("changes")):
        if not isinstance(item, dict):
            raise DatasetError(f"Changes of commit {commit_id} must be mappings")
        path_id = _as_int(item.get("path_id"))
        if path_id is None:
            raise DatasetError(f"Change in commit {commit_id} lacks a path_id")
        raw_snapshot = item.get("snapshot_id")
        snapshot_id = _as_int(raw_snapshot)
        if raw_snapshot is not None and snapshot_id is None:
            raise DatasetError(
                f"Change {path_id} in commit {commit_id} has a non-integer snapshot_id: {raw_snapshot!r}"
            )
        changes.append(
            Change(
                path_id=path_id,
                path=_as_str(item.get("path")),
                snapshot_id=snapshot_id,
            )
        )
    tree_id = _as_str(raw.get("tree")) or commit_id
    return Commit(id=commit_id, tree=Tree(id=tree_id, changes=tuple(changes)))


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value if value else None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return []


__all__ = ["DEFAULT_EPOCH", "DatasetError", "load_dataset", "parse_dataset"]
