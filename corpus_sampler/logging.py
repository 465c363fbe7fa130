"""Logger hierarchy, handler setup and run timing for corpus_sampler."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from pathlib import Path
import time
from typing import Iterator

ROOT_LOGGER = "corpus_sampler"
CONSOLE_FORMAT = "[corpus-sampler] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``corpus_sampler.<name>``, or the package root when no name is given."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, fmt: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


def _detach_all(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Route package records to stderr and, when ``log_file`` is set, to a file.

    Calling this again replaces the previous handlers, so in-process CLI runs
    do not print every record twice.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = get_logger()
    root.setLevel(level)
    root.propagate = False
    _detach_all(root)

    _attach(root, logging.StreamHandler(), level, CONSOLE_FORMAT)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _attach(root, logging.FileHandler(log_file, encoding="utf-8"), level, FILE_FORMAT)
    return root


class Stopwatch:
    """Wall time of a ``timed`` block; ``elapsed`` is final once the block exits."""

    def __init__(self) -> None:
        self.started = time.perf_counter()
        self.elapsed = 0.0

    def stop(self) -> float:
        self.elapsed = time.perf_counter() - self.started
        return self.elapsed


@contextmanager
def timed(logger: logging.Logger, label: str) -> Iterator[Stopwatch]:
    """Log the start and duration of a block, including blocks that raise."""
    watch = Stopwatch()
    logger.info("Starting %s", label)
    try:
        yield watch
    except BaseException:
        logger.error("%s failed after %.2fs", label, watch.stop())
        raise
    logger.info("%s took %.2fs", label, watch.stop())


__all__ = ["Stopwatch", "configure_logging", "get_logger", "timed"]
