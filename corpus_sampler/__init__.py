"""Reproducible project sampling and default-branch snapshot export."""

from .extractor import Extraction, SnapshotExtractor, can_extract, extract
from .pipeline import Pipeline
from .queries import build_registry

__all__ = [
    "Extraction",
    "Pipeline",
    "SnapshotExtractor",
    "build_registry",
    "can_extract",
    "extract",
]
