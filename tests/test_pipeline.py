"""Tests for corpus_sampler.pipeline."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, List

import pytest

from corpus_sampler.exporter import ExportError
from corpus_sampler.models import Change, Head
from corpus_sampler.pipeline import Pipeline
from corpus_sampler.queries import Query, build_registry

from tests._fixtures.corpus_builder import CorpusBuilder


def _registry(selection_size: int = 3) -> Dict[str, Query]:
    return build_registry(selection_size=selection_size, oversample=2, top_first_pass=5)


def _read_pids(path: Path) -> List[int]:
    with path.open(encoding="utf-8", newline="") as handle:
        reader = csv.reader(handle)
        assert next(reader) == ["pid", "path", "hash_id"]
        return [int(row[0]) for row in reader]


@pytest.fixture
def populated(corpus: CorpusBuilder) -> CorpusBuilder:
    for pid in range(1, 9):
        broken = pid in (6, 8)
        corpus.add_project(pid, stars=pid * 100, default_branch=None if broken else "main")
    corpus.add_project(20, language="Java", stars=10_000)
    return corpus


def test_stars_query_prefilters_then_takes_top(populated: CorpusBuilder, tmp_path: Path) -> None:
    pipeline = Pipeline(populated.store(), tmp_path)

    report = pipeline.run(_registry()["sample_stars_py"])

    assert report.candidates == 8
    assert report.first_pass == 5
    assert report.extractable == 3
    assert report.selected == 3
    assert report.rows == 6
    assert not report.underfilled
    assert report.path == tmp_path / "sample_stars.csv"
    assert _read_pids(report.path) == [7, 7, 5, 5, 4, 4]


def test_random_query_samples_only_extractable_projects(populated: CorpusBuilder, tmp_path: Path) -> None:
    report = Pipeline(populated.store(), tmp_path).run(_registry()["sample_all_py"])

    pids = _read_pids(tmp_path / "sample_all.csv")
    assert report.selected == 3
    assert len(pids) == 6
    assert not {6, 8, 20} & set(pids)


def test_developed_query_applies_maturity_filters(corpus: CorpusBuilder, tmp_path: Path) -> None:
    corpus.add_project(1)
    corpus.add_project(2, age_days=10)
    corpus.add_project(3, developers=1)
    corpus.add_project(4, commits=[f"x{i}" for i in range(5)])
    corpus.add_project(5, max_h_index=0)
    corpus.add_project(6)

    report = Pipeline(corpus.store(), tmp_path).run(_registry()["sample_developed_py"])

    assert report.candidates == 2
    assert sorted(set(_read_pids(tmp_path / "sample_developed.csv"))) == [1, 6]


def test_underfill_is_reported(populated: CorpusBuilder, tmp_path: Path) -> None:
    report = Pipeline(populated.store(), tmp_path).run(_registry(selection_size=10)["sample_all_py"])

    assert report.extractable == 6
    assert report.selected == 6
    assert report.underfilled
    assert any("only 6 extractable projects" in warning for warning in report.warnings)


def test_run_is_reproducible_and_independent_of_workers(populated: CorpusBuilder, tmp_path: Path) -> None:
    query = _registry()["sample_developed_py"]
    serial = Pipeline(populated.store(), tmp_path / "serial", workers=1).run(query)
    threaded = Pipeline(populated.store(), tmp_path / "threaded", workers=4).run(query)
    again = Pipeline(populated.store(), tmp_path / "again", workers=1).run(query)

    assert serial.path is not None and threaded.path is not None and again.path is not None
    assert serial.path.read_bytes() == threaded.path.read_bytes() == again.path.read_bytes()


def test_run_all_writes_each_query(populated: CorpusBuilder, tmp_path: Path) -> None:
    registry = _registry()
    queries = [registry["sample_stars_py"], registry["sample_all_py"], registry["sample_developed_py"]]

    reports = Pipeline(populated.store(), tmp_path).run_all(queries)

    assert [report.name for report in reports] == ["sample_stars_py", "sample_all_py", "sample_developed_py"]
    assert sorted(path.name for path in tmp_path.iterdir()) == [
        "sample_all.csv",
        "sample_developed.csv",
        "sample_stars.csv",
    ]


def test_export_failure_aborts_run(populated: CorpusBuilder, tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(ExportError):
        Pipeline(populated.store(), blocker / "out").run(_registry()["sample_stars_py"])


def test_run_all_rejects_queries_sharing_a_file(populated: CorpusBuilder, tmp_path: Path) -> None:
    registry = _registry()
    output = tmp_path / "out"

    with pytest.raises(ValueError, match="sample_all.csv"):
        Pipeline(populated.store(), output).run_all([registry["sample_all_py"], registry["sample_all_js"]])
    assert not output.exists()


def test_each_project_is_extracted_once(corpus: CorpusBuilder, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    corpus.add_commit("dup-a", [Change(path_id=0, path="a.py", snapshot_id=1)])
    corpus.add_commit("dup-b", [Change(path_id=0, path="b.py", snapshot_id=2)])
    corpus.add_project(
        1,
        stars=500,
        heads=[
            Head(name="refs/heads/main", commit_id="dup-a"),
            Head(name="refs/heads/main", commit_id="dup-b"),
        ],
    )
    corpus.add_project(2, stars=100)

    with caplog.at_level(logging.WARNING, logger="corpus_sampler"):
        report = Pipeline(corpus.store(), tmp_path).run(_registry(selection_size=2)["sample_stars_py"])

    duplicate_warnings = [
        record for record in caplog.records if "heads named refs/heads/main" in record.getMessage()
    ]
    assert len(duplicate_warnings) == 1
    assert report.selected == 2
    assert _read_pids(tmp_path / "sample_stars.csv") == [1, 2, 2]
    assert sum("heads named refs/heads/main" in warning for warning in report.warnings) == 1


def test_run_logs_query_duration(populated: CorpusBuilder, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="corpus_sampler"):
        report = Pipeline(populated.store(), tmp_path).run(_registry()["sample_all_py"])

    messages = [record.getMessage() for record in caplog.records]
    assert "Starting query sample_all_py" in messages
    assert any(message.startswith("query sample_all_py took ") for message in messages)
    assert report.elapsed >= 0.0
