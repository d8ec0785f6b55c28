from .rules import matches, matches_any, normalize_text
from .taxonomy import Industry, KEYWORDS, keywords_for, load_taxonomy_file
from .classify import Facet, classify, score_industries, aggregate
from .pipeline import FilterState, PillConflictError, filter_jobs, filter_with_stats, search_mode, split_pills

__all__ = [
    "matches",
    "matches_any",
    "normalize_text",
    "Industry",
    "KEYWORDS",
    "keywords_for",
    "load_taxonomy_file",
    "Facet",
    "classify",
    "score_industries",
    "aggregate",
    "FilterState",
    "PillConflictError",
    "filter_jobs",
    "filter_with_stats",
    "search_mode",
    "split_pills",
]
