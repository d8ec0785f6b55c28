from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from gigboard.core.normalize import Job, normalize_term
from gigboard.filters.classify import Facet, aggregate, classify
from gigboard.filters.rules import matches_any
from gigboard.filters.taxonomy import Industry, Taxonomy, active_taxonomy
from gigboard.search.fuzzy import (
    DEFAULT_SEARCHER,
    JOB_SEARCH_FIELDS,
    STRICT_THRESHOLD,
    FuzzySearcher,
)

LOGGER = logging.getLogger(__name__)

SearchMode = Literal["exact", "fuzzy"]

# A pill this short without spaces is precise enough for substring matching.
EXACT_PILL_MAX_LEN = 6


class PillConflictError(ValueError):
    """A term is both an include pill and an exclude pill."""

    def __init__(self, terms: Iterable[str]):
        self.terms = tuple(sorted(terms))
        super().__init__(f"terms cannot be both included and excluded: {', '.join(self.terms)}")


def _clean_terms(terms: Iterable[str] | None) -> Tuple[str, ...]:
    if isinstance(terms, str):
        terms = (terms,)
    seen: set[str] = set()
    out: List[str] = []
    for raw in terms or ():
        t = normalize_term(raw)
        if t and t not in seen:
            seen.add(t)
            out.append(t)
    return tuple(out)


@dataclass(frozen=True)
class FilterState:
    """User-chosen filter terms. Hashable, so it can key a memo.

    Terms are trimmed, lowercased and de-duplicated on construction; order
    of first appearance is kept for display.
    """

    include_pills: Tuple[str, ...] = ()
    exclude_pills: Tuple[str, ...] = ()
    selected_industry: Optional[str] = None
    excluded_terms: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "include_pills", _clean_terms(self.include_pills))
        object.__setattr__(self, "exclude_pills", _clean_terms(self.exclude_pills))
        object.__setattr__(self, "excluded_terms", _clean_terms(self.excluded_terms))
        selected = (self.selected_industry or "").strip() or None
        object.__setattr__(self, "selected_industry", selected)

        overlap = set(self.include_pills) & set(self.exclude_pills)
        if overlap:
            raise PillConflictError(overlap)

    @property
    def is_empty(self) -> bool:
        return not (self.include_pills or self.exclude_pills or (self.selected_industry and self.excluded_terms))


@dataclass
class PipelineStats:
    total: int = 0
    industry_pills: Tuple[str, ...] = ()
    search_pills: Tuple[str, ...] = ()
    mode: Optional[SearchMode] = None
    after_industry: int = 0
    after_text: int = 0
    after_industry_exclusion: int = 0
    after_exclusion: int = 0
    stages: List[str] = field(default_factory=list)


def split_pills(pills: Sequence[str], facets: Iterable[Facet]) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Return (industry_pills, search_pills).

    An include pill counts as an industry pill when it equals a facet label
    case-insensitively; facets change with the job set, so this has to be
    recomputed against the current facets.
    """
    labels = {f.industry.value.lower() for f in facets}
    industry = tuple(p for p in pills if p.lower() in labels)
    search = tuple(p for p in pills if p.lower() not in labels)
    return industry, search


def search_mode(pills: Sequence[str]) -> SearchMode:
    """Exact substring mode if any pill is short and single-word, else fuzzy."""
    if any(len(p) <= EXACT_PILL_MAX_LEN and " " not in p for p in pills):
        return "exact"
    return "fuzzy"


class _LabelCache:
    """Classify each job at most once per pipeline run."""

    def __init__(self, taxonomy: Taxonomy):
        self.taxonomy = taxonomy
        self._labels: Dict[int, Industry] = {}

    def __call__(self, job: Job) -> Industry:
        key = id(job)
        label = self._labels.get(key)
        if label is None:
            label = classify(job, self.taxonomy)
            self._labels[key] = label
        return label


def _exact_text(job: Job) -> str:
    return f"{job.title} {job.company} {job.location} {job.summary}".lower()


def filter_by_industry(jobs: List[Job], industry_pills: Sequence[str], label_of) -> List[Job]:
    if not industry_pills:
        return jobs
    wanted = {p.lower() for p in industry_pills}
    return [j for j in jobs if label_of(j).value.lower() in wanted]


def filter_by_text(
    jobs: List[Job],
    search_pills: Sequence[str],
    *,
    searcher: FuzzySearcher,
    threshold: float,
) -> List[Job]:
    if not search_pills:
        return jobs
    if search_mode(search_pills) == "exact":
        return [j for j in jobs if all(p in _exact_text(j) for p in search_pills)]
    query = " ".join(search_pills)
    return [m.item for m in searcher.search(jobs, JOB_SEARCH_FIELDS, query, threshold)]


def filter_industry_exclusions(
    jobs: List[Job],
    selected_industry: Optional[str],
    excluded_terms: Sequence[str],
    label_of,
) -> List[Job]:
    if not selected_industry or not excluded_terms:
        return jobs
    selected = selected_industry.lower()
    kept = []
    for j in jobs:
        if label_of(j).value.lower() == selected and matches_any(f"{j.title} {j.summary}".lower(), excluded_terms):
            continue
        kept.append(j)
    return kept


def filter_exclusions(jobs: List[Job], exclude_pills: Sequence[str]) -> List[Job]:
    if not exclude_pills:
        return jobs
    return [
        j for j in jobs
        if not matches_any(f"{j.title} {j.company} {j.summary}".lower(), exclude_pills)
    ]


def filter_with_stats(
    all_jobs: Sequence[Job],
    state: FilterState,
    *,
    facets: Optional[Iterable[Facet]] = None,
    searcher: Optional[FuzzySearcher] = None,
    threshold: float = STRICT_THRESHOLD,
    taxonomy: Optional[Taxonomy] = None,
) -> Tuple[List[Job], PipelineStats]:
    """Run every filter stage in order and report how many jobs each kept."""
    taxonomy = taxonomy or active_taxonomy()
    searcher = searcher or DEFAULT_SEARCHER
    label_of = _LabelCache(taxonomy)
    if facets is None:
        facets = aggregate(all_jobs, taxonomy)

    jobs = list(all_jobs)
    stats = PipelineStats(total=len(jobs))

    industry_pills, search_pills = split_pills(state.include_pills, facets)
    stats.industry_pills, stats.search_pills = industry_pills, search_pills

    jobs = filter_by_industry(jobs, industry_pills, label_of)
    stats.after_industry = len(jobs)
    if industry_pills:
        stats.stages.append("industry")

    if search_pills:
        stats.mode = search_mode(search_pills)
        stats.stages.append(f"text:{stats.mode}")
    jobs = filter_by_text(jobs, search_pills, searcher=searcher, threshold=threshold)
    stats.after_text = len(jobs)

    if state.selected_industry and state.excluded_terms:
        stats.stages.append("industry-exclusion")
    jobs = filter_industry_exclusions(jobs, state.selected_industry, state.excluded_terms, label_of)
    stats.after_industry_exclusion = len(jobs)

    if state.exclude_pills:
        stats.stages.append("exclusion")
    jobs = filter_exclusions(jobs, state.exclude_pills)
    stats.after_exclusion = len(jobs)

    LOGGER.debug(
        "filter total=%s industry=%s text=%s mode=%s industry_excl=%s excl=%s",
        stats.total,
        stats.after_industry,
        stats.after_text,
        stats.mode,
        stats.after_industry_exclusion,
        stats.after_exclusion,
    )
    return jobs, stats


def filter_jobs(
    all_jobs: Sequence[Job],
    state: FilterState,
    *,
    facets: Optional[Iterable[Facet]] = None,
    searcher: Optional[FuzzySearcher] = None,
    threshold: float = STRICT_THRESHOLD,
    taxonomy: Optional[Taxonomy] = None,
) -> List[Job]:
    jobs, _ = filter_with_stats(
        all_jobs,
        state,
        facets=facets,
        searcher=searcher,
        threshold=threshold,
        taxonomy=taxonomy,
    )
    return jobs


__all__ = [
    "FilterState",
    "PillConflictError",
    "PipelineStats",
    "SearchMode",
    "split_pills",
    "search_mode",
    "filter_by_industry",
    "filter_by_text",
    "filter_industry_exclusions",
    "filter_exclusions",
    "filter_with_stats",
    "filter_jobs",
]
