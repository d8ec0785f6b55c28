from __future__ import annotations

import logging
from typing import Any, List, NamedTuple, Protocol, Sequence

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

LOGGER = logging.getLogger(__name__)

# 0.0 = exact only, 1.0 = anything matches
BASE_THRESHOLD = 0.4
STRICT_THRESHOLD = 0.2

JOB_SEARCH_FIELDS = ("title", "company", "location", "summary")


class FuzzyMatch(NamedTuple):
    item: Any
    score: float  # 0-100, higher is better
    field: str


class FuzzySearcher(Protocol):
    def search(
        self,
        corpus: Sequence[Any],
        fields: Sequence[str],
        query: str,
        threshold: float,
    ) -> List[FuzzyMatch]: ...


def score_cutoff(threshold: float) -> float:
    """Translate a 0..1 fuzziness threshold into a rapidfuzz 0..100 cutoff."""
    t = min(max(float(threshold), 0.0), 1.0)
    return (1.0 - t) * 100.0


def _field_text(item: Any, field: str) -> str:
    value = item.get(field) if isinstance(item, dict) else getattr(item, field, None)
    return value if isinstance(value, str) else ("" if value is None else str(value))


class RapidFuzzSearcher:
    """Approximate matcher over a few text fields of each item.

    When a field is at least as long as the query, it scores the better of
    ``partial_ratio`` (query as a typo-tolerant substring) and
    ``token_set_ratio`` (all query words present, any order). A field
    shorter than the query can only match as a whole, with ``ratio``, so a
    short company or location that happens to sit inside the query does not
    count as a hit. An item's score is its best field; results come back
    best first, ties in corpus order.
    """

    name = "rapidfuzz"

    @staticmethod
    def score_field(query: str, text: str) -> float:
        """Score preprocessed strings (see ``default_process``)."""
        if not query or not text:
            return 0.0
        if len(text) < len(query):
            return fuzz.ratio(query, text)
        return max(fuzz.partial_ratio(query, text), fuzz.token_set_ratio(query, text))

    def score(self, item: Any, fields: Sequence[str], query: str) -> tuple[float, str]:
        q = default_process(query)
        best, best_field = 0.0, ""
        for field in fields:
            s = self.score_field(q, default_process(_field_text(item, field)))
            if s > best:
                best, best_field = s, field
        return best, best_field

    def search(
        self,
        corpus: Sequence[Any],
        fields: Sequence[str],
        query: str,
        threshold: float,
    ) -> List[FuzzyMatch]:
        q = (query or "").strip()
        if not q or not default_process(q):
            return []
        cutoff = score_cutoff(threshold)

        hits: List[FuzzyMatch] = []
        for item in corpus:
            s, field = self.score(item, fields, q)
            if s >= cutoff and s > 0:
                hits.append(FuzzyMatch(item, s, field))
        # sort is stable: equal scores keep corpus order
        hits.sort(key=lambda m: m.score, reverse=True)
        LOGGER.debug(
            "fuzzy query=%r threshold=%s cutoff=%.1f corpus=%s hits=%s",
            q,
            threshold,
            cutoff,
            len(corpus),
            len(hits),
        )
        return hits


DEFAULT_SEARCHER: FuzzySearcher = RapidFuzzSearcher()


__all__ = [
    "BASE_THRESHOLD",
    "STRICT_THRESHOLD",
    "JOB_SEARCH_FIELDS",
    "FuzzyMatch",
    "FuzzySearcher",
    "RapidFuzzSearcher",
    "DEFAULT_SEARCHER",
    "score_cutoff",
]
