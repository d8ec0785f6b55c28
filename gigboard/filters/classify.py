from __future__ import annotations

import logging
from typing import Dict, Iterable, List, NamedTuple

from gigboard.core.normalize import Job
from gigboard.filters.rules import count_matches
from gigboard.filters.taxonomy import Industry, Taxonomy, active_taxonomy

LOGGER = logging.getLogger(__name__)

# Facets with a single job are not worth offering as a filter.
MIN_FACET_COUNT = 2


class Facet(NamedTuple):
    industry: Industry
    count: int

    @property
    def label(self) -> str:
        return self.industry.value


def score_industries(job: Job, taxonomy: Taxonomy | None = None) -> Dict[Industry, int]:
    """Keyword hit count per industry, in taxonomy declaration order."""
    taxonomy = taxonomy or active_taxonomy()
    text = job.search_text
    return {
        industry: count_matches(text, keywords)
        for industry, keywords in taxonomy.items()
    }


def classify(job: Job, taxonomy: Taxonomy | None = None) -> Industry:
    """Best-scoring industry for a job, or Industry.OTHER.

    Ties go to the industry declared first in the taxonomy.
    """
    best = Industry.OTHER
    best_score = 0
    for industry, score in score_industries(job, taxonomy).items():
        # strict > keeps the first-declared industry on ties
        if score > best_score:
            best, best_score = industry, score
    return best


def aggregate(jobs: Iterable[Job], taxonomy: Taxonomy | None = None) -> List[Facet]:
    """Count jobs per industry, drop singletons, sort by count descending.

    The sort is stable, so industries with equal counts stay in the order
    they were first seen in `jobs`.
    """
    taxonomy = taxonomy or active_taxonomy()
    counts: Dict[Industry, int] = {}
    for job in jobs:
        industry = classify(job, taxonomy)
        counts[industry] = counts.get(industry, 0) + 1

    facets = [
        Facet(industry, count)
        for industry, count in counts.items()
        if count >= MIN_FACET_COUNT
    ]
    facets.sort(key=lambda f: f.count, reverse=True)
    LOGGER.debug(
        "industry facets=%s dropped=%s",
        len(facets),
        len(counts) - len(facets),
    )
    return facets


__all__ = [
    "Facet",
    "MIN_FACET_COUNT",
    "score_industries",
    "classify",
    "aggregate",
]
