"""Registry of named sampling queries.

Each query pairs a language with population filters, a sampling strategy and
an output filename. The maturity thresholds of the ``developed`` queries are
the per-language medians observed in the December 2020 corpus.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .config import OVERSAMPLE, SELECTION_SIZE, TOP_FIRST_PASS, Seeds
from .criteria import (
    AGE,
    COMMITS,
    DEVELOPERS,
    LANGUAGE,
    LOCS,
    MAX_H_INDEX,
    SNAPSHOTS,
    STARS,
    AtLeast,
    Count,
    Equal,
    Predicate,
)
from .samplers import DistinctRandom, MinRatio, Random, Sampler, Top

LANGUAGES: Dict[str, Tuple[str, str]] = {
    # key: (store language tag, query suffix)
    "python": ("Python", "py"),
    "java": ("Java", "java"),
    "javascript": ("JavaScript", "js"),
}

MIN_COMMIT_RATIO = 0.9


@dataclass(frozen=True)
class Maturity:
    max_h_index: int
    age_days: int
    developers: int
    locs: int
    snapshots: int
    commits: int

    def predicates(self) -> Tuple[Predicate, ...]:
        return (
            AtLeast(MAX_H_INDEX, self.max_h_index),
            AtLeast(AGE, timedelta(days=self.age_days)),
            AtLeast(Count(DEVELOPERS), self.developers),
            AtLeast(LOCS, self.locs),
            AtLeast(Count(SNAPSHOTS), self.snapshots),
            AtLeast(Count(COMMITS), self.commits),
        )


_MATURITY: Dict[str, Maturity] = {
    "python": Maturity(max_h_index=3, age_days=240, developers=3, locs=286, snapshots=18, commits=23),
    "java": Maturity(max_h_index=3, age_days=364, developers=3, locs=716, snapshots=20, commits=26),
    "javascript": Maturity(max_h_index=1, age_days=46, developers=2, locs=307, snapshots=16, commits=14),
}

# Languages whose "all" query also deduplicates by commit overlap.
_DISTINCT_ALL = {"java"}


@dataclass(frozen=True)
class Query:
    """A named pipeline configuration."""

    name: str
    language: str
    kind: str
    filename: str
    predicates: Tuple[Predicate, ...]
    sampler: Sampler
    first_pass_size: int

    @property
    def selection_size(self) -> int:
        return self.sampler.size

    def first_pass(self) -> Sampler:
        return self.sampler.resized(self.first_pass_size)


def build_registry(
    *,
    selection_size: int = SELECTION_SIZE,
    oversample: int = OVERSAMPLE,
    top_first_pass: int = TOP_FIRST_PASS,
    seeds: Seeds | None = None,
) -> Dict[str, Query]:
    """Return every registered query keyed by name, in registration order."""
    seeds = seeds or Seeds()
    ratio = MinRatio(COMMITS, MIN_COMMIT_RATIO)
    registry: Dict[str, Query] = {}

    for language, (tag, suffix) in LANGUAGES.items():
        language_filter = Equal(LANGUAGE, tag)

        stars = Query(
            name=f"sample_stars_{suffix}",
            language=language,
            kind="stars",
            filename="sample_stars.csv",
            predicates=(language_filter,),
            sampler=Top(selection_size, by=STARS),
            first_pass_size=max(top_first_pass, selection_size),
        )

        if language in _DISTINCT_ALL:
            all_sampler: Sampler = DistinctRandom(selection_size, seed=seeds.all, ratio=ratio)
        else:
            all_sampler = Random(selection_size, seed=seeds.all)
        everything = Query(
            name=f"sample_all_{suffix}",
            language=language,
            kind="all",
            filename="sample_all.csv",
            predicates=(language_filter,),
            sampler=all_sampler,
            first_pass_size=selection_size + oversample,
        )

        developed = Query(
            name=f"sample_developed_{suffix}",
            language=language,
            kind="developed",
            filename="sample_developed.csv",
            predicates=(language_filter, *_MATURITY[language].predicates()),
            sampler=DistinctRandom(selection_size, seed=seeds.developed, ratio=ratio),
            first_pass_size=selection_size + oversample,
        )

        for query in (stars, everything, developed):
            registry[query.name] = query

    return registry


def queries_for_language(registry: Mapping[str, Query], language: str) -> List[Query]:
    key = language.lower()
    if key not in LANGUAGES:
        known = ", ".join(sorted(LANGUAGES))
        raise ValueError(f"Unknown language '{language}' (expected one of: {known})")
    return [query for query in registry.values() if query.language == key]


def select_queries(
    registry: Mapping[str, Query],
    names: Optional[List[str]] = None,
    *,
    language: str = "python",
) -> List[Query]:
    """Resolve query names, or every query of ``language`` when none are given."""
    if not names:
        return queries_for_language(registry, language)
    missing = [name for name in names if name not in registry]
    if missing:
        raise ValueError(f"Unknown queries requested: {', '.join(missing)}")
    selected = [registry[name] for name in dict.fromkeys(names)]
    check_filenames(selected)
    return selected


def check_filenames(queries: Iterable[Query]) -> None:
    """Raise ValueError when two queries of one run would write the same CSV."""
    owners: Dict[str, List[str]] = {}
    for query in queries:
        owners.setdefault(query.filename, [])
        if query.name not in owners[query.filename]:
            owners[query.filename].append(query.name)
    clashes = [
        f"{filename} ({', '.join(names)})" for filename, names in owners.items() if len(names) > 1
    ]
    if clashes:
        raise ValueError(
            "Queries would overwrite each other's output, run them separately: "
            + "; ".join(clashes)
        )


__all__ = [
    "LANGUAGES",
    "MIN_COMMIT_RATIO",
    "Maturity",
    "Query",
    "build_registry",
    "check_filenames",
    "queries_for_language",
    "select_queries",
]
