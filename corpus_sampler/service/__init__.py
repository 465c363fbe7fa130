"""HTTP service mode for corpus_sampler."""

from .app import create_app, run_service

__all__ = ["create_app", "run_service"]
