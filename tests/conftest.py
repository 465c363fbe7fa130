from __future__ import annotations

import logging
from typing import Iterator

import pytest

from tests._fixtures.corpus_builder import CorpusBuilder


@pytest.fixture
def corpus() -> CorpusBuilder:
    """Provide an empty corpus builder."""
    return CorpusBuilder()


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """Undo CLI logging setup so caplog sees package records in every test."""
    yield
    logger = logging.getLogger("corpus_sampler")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
