"""Tests for the JSON dataset store."""

from __future__ import annotations

from datetime import timedelta
import json
from pathlib import Path

import pytest

from corpus_sampler.extractor import Step, extract
from corpus_sampler.models import Change, Head
from corpus_sampler.stores import DEFAULT_EPOCH, DatasetError, load_dataset, parse_dataset

from tests._fixtures.corpus_builder import CorpusBuilder


def test_load_dataset_round_trips_builder_corpus(corpus: CorpusBuilder, tmp_path: Path) -> None:
    corpus.add_project(1, stars=12, age_days=365, files={"a.py": 3, "gone.py": None})
    corpus.add_project(2, heads=None)
    path = corpus.write(tmp_path / "dataset.json")

    store = load_dataset(path)

    first, second = store.projects()
    assert first.stars == 12
    assert first.age == timedelta(days=365)
    assert len(first.commits) == 30
    assert store.default_branch(first) == "main"
    heads = store.heads(first)
    assert heads == (Head(name="refs/heads/main", commit_id="head-1"),)
    commit = store.commit(heads[0])
    assert commit is not None
    assert list(store.changes(commit.tree)) == [
        Change(path_id=0, path="a.py", snapshot_id=3),
        Change(path_id=1, path="gone.py", snapshot_id=None),
    ]
    assert store.heads(second) is None


def test_epoch_hides_projects_created_later(corpus: CorpusBuilder) -> None:
    corpus.add_project(1, created=DEFAULT_EPOCH - 1)
    corpus.add_project(2, created=DEFAULT_EPOCH + 1)
    corpus.add_project(3)

    visible = [project.id for project in parse_dataset(corpus.to_dataset()).projects()]
    everything = [project.id for project in parse_dataset(corpus.to_dataset(), epoch=None).projects()]

    assert visible == [1, 3]
    assert everything == [1, 2, 3]


def test_unknown_commit_resolves_to_none() -> None:
    store = parse_dataset({"projects": [], "commits": {}})

    assert store.commit(Head(name="refs/heads/main", commit_id="nope")) is None


def test_missing_dataset_raises(tmp_path: Path) -> None:
    with pytest.raises(DatasetError, match="not found"):
        load_dataset(tmp_path / "absent.json")


def test_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(DatasetError):
        load_dataset(path)


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"projects": {}},
        {"projects": [{"language": "Python"}]},
        {"projects": [{"id": 1, "heads": [{"commit": "c1"}]}]},
        {"commits": {"c1": {"changes": [{"path_id": 0, "path": "a.py", "snapshot_id": 12.5}]}}},
        {"commits": {"c1": {"changes": [{"path_id": 0, "path": "a.py", "snapshot_id": "abc"}]}}},
        {"commits": {"c1": {"changes": [{"path": "a.py"}]}}},
    ],
)
def test_malformed_dataset_raises(tmp_path: Path, payload: object) -> None:
    path = tmp_path / "dataset.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(DatasetError):
        load_dataset(path)


def test_head_without_commit_fails_extraction_only_for_its_project() -> None:
    store = parse_dataset(
        {
            "projects": [
                {"id": 1, "default_branch": "main", "heads": [{"name": "refs/heads/main", "commit": None}]},
                {"id": 2, "default_branch": "main", "heads": [{"name": "refs/heads/main", "commit": "c2"}]},
            ],
            "commits": {"c2": {"changes": [{"path_id": 0, "path": "a.py", "snapshot_id": 7}]}},
        }
    )

    dangling, healthy = store.projects()
    assert store.heads(dangling) == (Head(name="refs/heads/main", commit_id=None),)

    failed = extract(store, dangling)
    assert not failed.ok
    assert failed.failed_step is Step.COMMIT
    assert extract(store, healthy).ok


def test_integral_float_snapshot_id_is_kept() -> None:
    store = parse_dataset(
        {"commits": {"c1": {"changes": [{"path_id": 0.0, "path": "a.py", "snapshot_id": 12.0}]}}}
    )

    commit = store.commit(Head(name="refs/heads/main", commit_id="c1"))
    assert commit is not None
    assert list(store.changes(commit.tree)) == [Change(path_id=0, path="a.py", snapshot_id=12)]
