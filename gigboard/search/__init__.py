from .fuzzy import (
    BASE_THRESHOLD,
    STRICT_THRESHOLD,
    JOB_SEARCH_FIELDS,
    FuzzyMatch,
    FuzzySearcher,
    RapidFuzzSearcher,
    DEFAULT_SEARCHER,
)

__all__ = [
    "BASE_THRESHOLD",
    "STRICT_THRESHOLD",
    "JOB_SEARCH_FIELDS",
    "FuzzyMatch",
    "FuzzySearcher",
    "RapidFuzzSearcher",
    "DEFAULT_SEARCHER",
]
