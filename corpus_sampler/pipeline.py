"""Pipeline orchestration for sampling queries."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List

from .criteria import filter_projects
from .exporter import export_rows, flatten
from .extractor import Extraction, SnapshotExtractor
from .logging import get_logger, timed
from .models import Project, ProjectId, QueryReport
from .queries import Query, check_filenames
from .stores.base import RepositoryStore


class Pipeline:
    """Runs queries end to end: filter, pre-sample, validate, sample, extract, export.

    The first pass draws an oversized sample and keeps only projects whose
    default-branch snapshot can be extracted. The second pass draws the final
    sample with the same strategy and seed from that extractable pool.
    """

    def __init__(
        self,
        store: RepositoryStore,
        output_dir: Path,
        *,
        workers: int = 1,
        extractor: SnapshotExtractor | None = None,
    ) -> None:
        self.store = store
        self.output_dir = Path(output_dir)
        self.extractor = extractor or SnapshotExtractor(store, workers=workers)
        self.logger = get_logger("pipeline")

    def run(self, query: Query) -> QueryReport:
        """Execute one query and write its CSV."""
        with timed(self.logger, f"query {query.name}") as watch:
            report = self._run(query)
        report.elapsed = watch.elapsed
        return report

    def _run(self, query: Query) -> QueryReport:
        report = QueryReport(name=query.name, requested=query.selection_size)

        population = filter_projects(self.store.projects(), *query.predicates)
        report.candidates = len(population)
        self.logger.debug("%s: %d projects pass the filters", query.name, len(population))

        first_pass = query.first_pass().sample(population)
        report.first_pass = len(first_pass)
        # Each first-pass project is extracted exactly once; pass 2 reuses the results.
        outcomes: Dict[ProjectId, Extraction] = {}
        pool: List[Project] = []
        for project, outcome in zip(first_pass.projects, self.extractor.extract_many(first_pass.projects)):
            if outcome.ok:
                outcomes[project.id] = outcome
                pool.append(project)
        report.extractable = len(pool)
        self.logger.debug(
            "%s: %d of %d first-pass projects are extractable",
            query.name,
            len(pool),
            len(first_pass),
        )
        if len(pool) < query.selection_size:
            message = (
                f"{query.name}: only {len(pool)} extractable projects for a sample of "
                f"{query.selection_size}"
            )
            self.logger.warning(message)
            report.warnings.append(message)

        final = query.sampler.sample(pool)
        report.selected = len(final)

        extractions = [outcomes[project.id] for project in final.projects]
        for extraction in extractions:
            report.warnings.extend(extraction.warnings)
        rows = flatten(extractions)
        report.rows = len(rows)

        report.path = export_rows(rows, self.output_dir, query.filename)
        self.logger.info("%s: %d projects, %d rows", query.name, report.selected, report.rows)
        return report

    def run_all(self, queries: Iterable[Query]) -> List[QueryReport]:
        """Run queries in order; an export failure stops at the failing query.

        Queries sharing an output file are rejected before anything is written.
        """
        queries = list(queries)
        check_filenames(queries)
        reports: List[QueryReport] = []
        for query in queries:
            reports.append(self.run(query))
        return reports


__all__ = ["Pipeline"]
