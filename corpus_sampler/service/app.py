"""FastAPI application entrypoint for corpus_sampler service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional

from fastapi import FastAPI, Query as QueryParam
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..exporter import ExportError
from ..models import QueryReport
from ..pipeline import Pipeline
from ..queries import Query, build_registry, select_queries
from ..stores import DEFAULT_EPOCH, DatasetError, InMemoryStore, load_dataset

StoreLoader = Callable[[Path, Optional[int]], InMemoryStore]


class QueryInfo(BaseModel):
    name: str
    language: str
    kind: str
    filename: str
    first_pass: str
    sampler: str


class RunRequest(BaseModel):
    dataset: str
    output_dir: str
    language: str = "python"
    queries: Optional[List[str]] = None
    workers: int = 1
    epoch: Optional[int] = DEFAULT_EPOCH


class ReportModel(BaseModel):
    name: str
    path: Optional[str] = None
    candidates: int
    extractable: int
    selected: int
    requested: int
    rows: int
    underfilled: bool
    warnings: List[str] = []


class RunResponse(BaseModel):
    status: str
    reports: List[ReportModel]


class HealthResponse(BaseModel):
    status: str


def _default_loader(path: Path, epoch: Optional[int]) -> InMemoryStore:
    return load_dataset(path, epoch=epoch)


def _report_model(report: QueryReport) -> ReportModel:
    return ReportModel(
        name=report.name,
        path=str(report.path) if report.path is not None else None,
        candidates=report.candidates,
        extractable=report.extractable,
        selected=report.selected,
        requested=report.requested,
        rows=report.rows,
        underfilled=report.underfilled,
        warnings=list(report.warnings),
    )


def _query_info(query: Query) -> QueryInfo:
    return QueryInfo(
        name=query.name,
        language=query.language,
        kind=query.kind,
        filename=query.filename,
        first_pass=query.first_pass().describe(),
        sampler=query.sampler.describe(),
    )


def create_app(
    store_loader: StoreLoader = _default_loader,
    registry: Mapping[str, Query] | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing sampling runs."""

    queries_by_name = dict(registry) if registry is not None else build_registry()
    app = FastAPI(title="Corpus Sampler Service", version="1.0.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/queries", response_model=List[QueryInfo])
    async def list_queries(language: Optional[str] = QueryParam(default=None)) -> List[QueryInfo]:
        return [
            _query_info(query)
            for query in queries_by_name.values()
            if language is None or query.language == language.lower()
        ]

    @app.post("/run", response_model=RunResponse)
    async def run_queries(payload: RunRequest) -> RunResponse:
        selected = select_queries(queries_by_name, payload.queries, language=payload.language)

        def _run() -> List[QueryReport]:
            store = store_loader(Path(payload.dataset), payload.epoch)
            pipeline = Pipeline(store, Path(payload.output_dir), workers=max(1, payload.workers))
            return pipeline.run_all(selected)

        loop = asyncio.get_running_loop()
        reports = await loop.run_in_executor(None, _run)
        return RunResponse(status="ok", reports=[_report_model(report) for report in reports])

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(DatasetError)
    async def dataset_error_handler(_: Any, exc: DatasetError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ExportError)
    async def export_error_handler(_: Any, exc: ExportError) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
