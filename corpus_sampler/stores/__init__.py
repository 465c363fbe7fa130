"""Repository store implementations."""

from .base import RepositoryStore
from .dataset import DEFAULT_EPOCH, DatasetError, load_dataset, parse_dataset
from .memory import InMemoryStore

__all__ = [
    "DEFAULT_EPOCH",
    "DatasetError",
    "InMemoryStore",
    "RepositoryStore",
    "load_dataset",
    "parse_dataset",
]
