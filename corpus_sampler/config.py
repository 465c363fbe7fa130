"""Configuration loading for corpus_sampler (.corpus-sampler.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .stores.dataset import DEFAULT_EPOCH

CONFIG_FILENAME = ".corpus-sampler.yml"

SELECTION_SIZE = 1020
OVERSAMPLE = 1000
TOP_FIRST_PASS = 1500

# Seeds for the different selections.
SEED_ALL = 1
SEED_100LOC_7D_10C = 2


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class Seeds:
    """Named sampling seeds, one per sampling round."""

    all: int = SEED_ALL
    developed: int = SEED_100LOC_7D_10C


@dataclass
class SamplerConfig:
    """Represents the settings defined in .corpus-sampler.yml."""

    root: Path
    dataset: Optional[Path] = None
    output_dir: Optional[Path] = None
    epoch: Optional[int] = DEFAULT_EPOCH
    language: str = "python"
    selection_size: int = SELECTION_SIZE
    oversample: int = OVERSAMPLE
    top_first_pass: int = TOP_FIRST_PASS
    workers: int = 1
    seeds: Seeds = field(default_factory=Seeds)
    queries: List[str] = field(default_factory=list)
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> SamplerConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SamplerConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = SamplerConfig(root=root)

    dataset = _as_str(data.get("dataset"))
    if dataset:
        config.dataset = root / dataset
    output_dir = _as_str(data.get("output_dir"))
    if output_dir:
        config.output_dir = root / output_dir
    log_file = _as_str(data.get("log_file"))
    if log_file:
        config.log_file = root / log_file

    if "epoch" in data:
        raw_epoch = data.get("epoch")
        config.epoch = None if raw_epoch is None else _require_int(raw_epoch, "epoch")

    language = _as_str(data.get("language"))
    if language:
        config.language = language.lower()

    for key in ("selection_size", "oversample", "top_first_pass", "workers"):
        if key in data:
            value = _require_int(data.get(key), key)
            minimum = 1 if key == "workers" else 0
            if value < minimum:
                raise ConfigError(f"'{key}' must be at least {minimum}, got {value}")
            setattr(config, key, value)

    seeds_data = _as_dict(data.get("seeds"))
    if seeds_data:
        defaults = Seeds()
        config.seeds = Seeds(
            all=_seed(seeds_data.get("all"), defaults.all),
            developed=_seed(seeds_data.get("developed"), defaults.developed),
        )

    config.queries = _as_str_list(data.get("queries"))
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _seed(value: Any, default: int) -> int:
    if value is None:
        return default
    seed = _require_int(value, "seed")
    if not 0 <= seed < 2**128:
        raise ConfigError(f"Seeds must be unsigned 128-bit integers, got {seed}")
    return seed


def _require_int(value: Any, key: str) -> int:
    result = _as_int(value)
    if result is None:
        raise ConfigError(f"'{key}' must be an integer, got {value!r}")
    return result


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "OVERSAMPLE",
    "SEED_100LOC_7D_10C",
    "SEED_ALL",
    "SELECTION_SIZE",
    "SamplerConfig",
    "Seeds",
    "TOP_FIRST_PASS",
    "load_config",
]
