from __future__ import annotations

import logging
import os
import re
from functools import lru_cache
from typing import Iterable

LOGGER = logging.getLogger(__name__)

# Debug flag and helper for rules
GIGBOARD_DEBUG_RULES = os.getenv("GIGBOARD_DEBUG_RULES", "0") == "1"


def _dbg(reason: str, *args) -> None:
    if GIGBOARD_DEBUG_RULES:
        LOGGER.debug("[rules] " + reason, *args)


# Short acronyms that would false-positive as substrings ("ai" in "said",
# "hr" in "three"), so they always need word boundaries.
WHOLE_WORD_ACRONYMS = frozenset({"hr", "bi", "ai", "seo", "sem", "crm"})
WHOLE_WORD_MAX_LEN = 3

SEPARATORS = re.compile(r"[_\-]")


def normalize_text(text: str | None) -> str:
    """Lowercase and turn underscores/hyphens into spaces."""
    return SEPARATORS.sub(" ", text or "").lower()


def needs_word_boundary(keyword: str) -> bool:
    k = (keyword or "").lower()
    return len(k) <= WHOLE_WORD_MAX_LEN or k in WHOLE_WORD_ACRONYMS


@lru_cache(maxsize=1024)
def _boundary_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)


def matches(text: str | None, keyword: str | None) -> bool:
    """Return True if `keyword` occurs in `text`.

    Short or ambiguous keywords are matched as whole words, longer phrases as
    plain substrings so compound forms ("designers", "user interfaces") still
    count.
    """
    k = (keyword or "").lower()
    if not k:
        return False
    normalized = normalize_text(text)
    if not normalized:
        return False
    if needs_word_boundary(k):
        hit = _boundary_pattern(k).search(normalized) is not None
        if hit:
            _dbg("word-boundary hit keyword=%r", k)
        return hit
    return k in normalized


def matches_any(text: str | None, keywords: Iterable[str]) -> bool:
    return any(matches(text, k) for k in keywords)


def count_matches(text: str | None, keywords: Iterable[str]) -> int:
    return sum(1 for k in keywords if matches(text, k))


__all__ = [
    "WHOLE_WORD_ACRONYMS",
    "normalize_text",
    "needs_word_boundary",
    "matches",
    "matches_any",
    "count_matches",
]
