"""Interactive board session.

A `JobBoard` owns one immutable job snapshot, one `FilterState` and the page
index. Every derived view (facets, filtered jobs, current page) is a pure
function of those and is memoised on the snapshot's identity plus the filter
state, so reading a view twice, or reading it after an unrelated change,
does not rerun the pipeline.

Any filter change resets the page to 0 inside the same call, before anything
can read the derived views again.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from gigboard.activity import ActivityLogger, NullActivityLogger, safe_log_search
from gigboard.config import Settings
from gigboard.core.normalize import Job, normalize_term
from gigboard.core.pagination import PageInfo, clamp_page, page_info, paginate, total_pages
from gigboard.filters.classify import Facet, aggregate, classify
from gigboard.filters.pipeline import FilterState, PillConflictError, PipelineStats, filter_with_stats
from gigboard.filters.taxonomy import Industry, Taxonomy, active_taxonomy, keywords_for
from gigboard.providers import JobSource, JobSourceError
from gigboard.search.fuzzy import DEFAULT_SEARCHER, JOB_SEARCH_FIELDS, FuzzyMatch, FuzzySearcher

LOGGER = logging.getLogger(__name__)


class JobBoard:
    def __init__(
        self,
        source: Optional[JobSource] = None,
        *,
        jobs: Optional[Iterable[Job]] = None,
        settings: Optional[Settings] = None,
        activity: Optional[ActivityLogger] = None,
        searcher: Optional[FuzzySearcher] = None,
        taxonomy: Optional[Taxonomy] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.source = source
        self.activity: ActivityLogger = activity or NullActivityLogger()
        self.searcher: FuzzySearcher = searcher or DEFAULT_SEARCHER
        self.taxonomy: Taxonomy = taxonomy or active_taxonomy()

        self._jobs: Tuple[Job, ...] = tuple(jobs or ())
        self._state = FilterState()
        self._page = 0
        self.loading = False
        self.last_error: Optional[str] = None

        self._facets_memo: Optional[Tuple[Tuple[Job, ...], List[Facet]]] = None
        self._filtered_memo: Optional[Tuple[Tuple[Job, ...], FilterState, List[Job], PipelineStats]] = None

    # --- snapshot ------------------------------------------------------------
    @property
    def jobs(self) -> Tuple[Job, ...]:
        return self._jobs

    def set_jobs(self, jobs: Iterable[Job]) -> None:
        """Replace the snapshot wholesale and go back to the first page."""
        self._jobs = tuple(jobs)
        self._page = 0
        self.last_error = None

    def refresh(self) -> bool:
        """Re-fetch every job from the source.

        On failure the previous snapshot stays in place and the error is kept
        in `last_error`; returns whether the snapshot was replaced.
        """
        if self.source is None:
            return False
        self.loading = True
        try:
            jobs = self.source.fetch_all_jobs()
        except JobSourceError as e:
            self.last_error = str(e)
            LOGGER.warning(
                "refresh failed source=%s kept=%s error=%s",
                getattr(self.source, "name", "?"),
                len(self._jobs),
                e,
            )
            return False
        finally:
            self.loading = False
        self.set_jobs(jobs)
        LOGGER.info("refresh source=%s jobs=%s", getattr(self.source, "name", "?"), len(self._jobs))
        return True

    # --- filter state --------------------------------------------------------
    @property
    def state(self) -> FilterState:
        return self._state

    def _apply(self, state: FilterState) -> bool:
        if state == self._state:
            return False
        self._state = state
        self._page = 0
        return True

    def set_filters(
        self,
        include_pills: Sequence[str] = (),
        exclude_pills: Sequence[str] = (),
        selected_industry: Optional[str] = None,
        excluded_terms: Sequence[str] = (),
    ) -> bool:
        return self._apply(
            FilterState(
                include_pills=include_pills,
                exclude_pills=exclude_pills,
                selected_industry=selected_industry,
                excluded_terms=excluded_terms,
            )
        )

    def _log_pills(self) -> None:
        safe_log_search(self.activity, self._state.include_pills, self._state.exclude_pills)

    def add_include_pill(self, term: str) -> bool:
        t = normalize_term(term)
        if not t or t in self._state.include_pills:
            return False
        if t in self._state.exclude_pills:
            raise PillConflictError([t])
        self._apply(replace(self._state, include_pills=self._state.include_pills + (t,)))
        self._log_pills()
        return True

    def remove_include_pill(self, term: str) -> bool:
        t = normalize_term(term)
        if t not in self._state.include_pills:
            return False
        state = replace(self._state, include_pills=tuple(p for p in self._state.include_pills if p != t))
        # dropping the selected industry's pill also drops its refinement
        if state.selected_industry and state.selected_industry.lower() == t:
            state = replace(state, selected_industry=None, excluded_terms=())
        self._apply(state)
        self._log_pills()
        return True

    def add_exclude_pill(self, term: str) -> bool:
        t = normalize_term(term)
        if not t or t in self._state.exclude_pills:
            return False
        if t in self._state.include_pills:
            raise PillConflictError([t])
        return self._apply(replace(self._state, exclude_pills=self._state.exclude_pills + (t,)))

    def remove_exclude_pill(self, term: str) -> bool:
        t = normalize_term(term)
        if t not in self._state.exclude_pills:
            return False
        return self._apply(replace(self._state, exclude_pills=tuple(p for p in self._state.exclude_pills if p != t)))

    def select_industry(self, label: str) -> Industry:
        """Pick an industry: adds it as an include pill and resets its excluded terms."""
        industry = Industry.from_label(label)
        if industry is None:
            raise ValueError(f"unknown industry {label!r}")
        pill = industry.value.lower()
        if pill in self._state.exclude_pills:
            raise PillConflictError([pill])
        added = pill not in self._state.include_pills
        includes = self._state.include_pills + ((pill,) if added else ())
        self._apply(
            replace(
                self._state,
                include_pills=includes,
                selected_industry=industry.value,
                excluded_terms=(),
            )
        )
        if added:
            self._log_pills()
        return industry

    def clear_industry(self) -> bool:
        return self._apply(replace(self._state, selected_industry=None, excluded_terms=()))

    def toggle_excluded_term(self, term: str) -> bool:
        """Flip a refinement term for the selected industry; False without a selection."""
        t = normalize_term(term)
        if not t or not self._state.selected_industry:
            return False
        terms = self._state.excluded_terms
        terms = tuple(x for x in terms if x != t) if t in terms else terms + (t,)
        return self._apply(replace(self._state, excluded_terms=terms))

    def clear_excluded_terms(self) -> bool:
        return self._apply(replace(self._state, excluded_terms=()))

    def industry_keywords(self, label: Optional[str] = None) -> Tuple[str, ...]:
        """Refinement terms offered for `label` (default: the selected industry)."""
        return keywords_for(label or self._state.selected_industry or "", self.taxonomy)

    # --- derived views -------------------------------------------------------
    @property
    def facets(self) -> List[Facet]:
        # memo holds the snapshot itself, so identity can't be recycled
        if self._facets_memo is None or self._facets_memo[0] is not self._jobs:
            self._facets_memo = (self._jobs, aggregate(self._jobs, self.taxonomy))
        return self._facets_memo[1]

    def _filtered(self) -> Tuple[List[Job], PipelineStats]:
        memo = self._filtered_memo
        if memo is None or memo[0] is not self._jobs or memo[1] != self._state:
            jobs, stats = filter_with_stats(
                self._jobs,
                self._state,
                facets=self.facets,
                searcher=self.searcher,
                threshold=self.settings.strict_fuzzy_threshold,
                taxonomy=self.taxonomy,
            )
            self._filtered_memo = (self._jobs, self._state, jobs, stats)
        return self._filtered_memo[2], self._filtered_memo[3]

    @property
    def filtered_jobs(self) -> List[Job]:
        return self._filtered()[0]

    @property
    def pipeline_stats(self) -> PipelineStats:
        return self._filtered()[1]

    @property
    def total_pages(self) -> int:
        return total_pages(len(self.filtered_jobs), self.settings.page_size)

    @property
    def page(self) -> int:
        return self._page

    @property
    def paginated_jobs(self) -> List[Job]:
        return paginate(self.filtered_jobs, self._page, self.settings.page_size)

    @property
    def page_info(self) -> PageInfo:
        return page_info(
            len(self.filtered_jobs),
            self._page,
            self.settings.page_size,
            self.settings.page_window,
        )

    def industry_of(self, job: Job) -> Industry:
        return classify(job, self.taxonomy)

    def quick_search(self, query: str, limit: int = 10) -> List[FuzzyMatch]:
        """Loose fuzzy lookup over the whole snapshot, ignoring pills."""
        hits = self.searcher.search(self._jobs, JOB_SEARCH_FIELDS, query, self.settings.fuzzy_threshold)
        return hits[:max(0, limit)]

    # --- paging --------------------------------------------------------------
    def set_page(self, page: int) -> int:
        self._page = clamp_page(page, self.total_pages)
        return self._page

    def next_page(self) -> int:
        return self.set_page(self._page + 1)

    def prev_page(self) -> int:
        return self.set_page(self._page - 1)

    def first_page(self) -> int:
        return self.set_page(0)

    def last_page(self) -> int:
        return self.set_page(self.total_pages - 1)
