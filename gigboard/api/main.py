from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gigboard.activity import SqlActivityLogger, safe_log_search
from gigboard.api.deps import db_session, settings as get_settings
from gigboard.config import Settings
from gigboard.core.board import JobBoard
from gigboard.core.date_parse import parse_posting_date
from gigboard.core.normalize import Job, is_new
from gigboard.core.pagination import page_info, paginate
from gigboard.core.posting import Poster, PostingForm, build_posted_job
from gigboard.db.crud import create_job, fetch_all_jobs, get_job_by_id, log_job_posting
from gigboard.filters.classify import aggregate, classify
from gigboard.filters.pipeline import PillConflictError
from gigboard.filters.taxonomy import Industry, keywords_for


def require_admin(x_token: str | None, settings: Settings) -> None:
    if not settings.admin_token or x_token != settings.admin_token:
        raise HTTPException(status_code=401, detail="Unauthorized")


# -------------------------
# FastAPI setup
# -------------------------
app = FastAPI(title="Gigboard API", version="0.1.0")
LOGGER = logging.getLogger(__name__)

# CORS (open for now; tighten before public deploy)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------
# Pydantic response models
# -------------------------
class JobOut(BaseModel):
    id: str
    title: str
    company: str
    location: str
    rate: str
    summary: str
    date: str
    posted_on: Optional[str] = None
    url: str
    industry: str
    is_new: bool
    source: Optional[str] = None
    poster_name: Optional[str] = None


class FacetOut(BaseModel):
    industry: str
    count: int


class PageOut(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    window: List[int]
    has_prev: bool
    has_next: bool


class JobsResponse(BaseModel):
    items: List[JobOut]
    total: int
    page: PageOut
    facets: List[FacetOut]
    mode: Optional[str] = None


class SearchHitOut(BaseModel):
    job: JobOut
    score: float


class KeywordsOut(BaseModel):
    industry: str
    keywords: List[str]


class PostJobIn(PostingForm):
    user_id: str
    email: str
    full_name: Optional[str] = None


def _job_out(job: Job, industry: Industry, settings: Settings, now: datetime | None = None) -> JobOut:
    posted = parse_posting_date(job.date, now=now)
    return JobOut(
        id=job.id,
        title=job.title,
        company=job.company,
        location=job.location,
        rate=job.rate,
        summary=job.summary,
        date=job.date,
        posted_on=posted.date().isoformat() if posted else None,
        url=job.url,
        industry=industry.value,
        is_new=is_new(job, now=now, hours=settings.new_job_hours),
        source=job.source,
        poster_name=job.poster_name,
    )


# -------------------------
# Routes
# -------------------------
@app.get("/", tags=["meta"])
async def root():
    return {"message": "Gigboard API is running"}


@app.get("/healthz", tags=["meta"])
async def healthz():
    return {"status": "ok"}


@app.get("/jobs", response_model=JobsResponse, tags=["data"])
def get_jobs(
    include: List[str] = Query([], description="Include pills; industry labels act as industry filters"),
    exclude: List[str] = Query([], description="Exclude pills (whole-word for short terms)"),
    industry: Optional[str] = Query(None, description="Selected industry for term refinement"),
    excluded_term: List[str] = Query([], description="Terms to drop within the selected industry"),
    page: int = Query(0, ge=0),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    x_user_id: str | None = Header(default=None),
    session: Session = Depends(db_session),
    settings: Settings = Depends(get_settings),
):
    """Filter the whole job set in memory and return one page plus facets."""
    if page_size:
        settings = replace(settings, page_size=page_size)

    board = JobBoard(jobs=fetch_all_jobs(session), settings=settings)
    try:
        board.set_filters(include, exclude, industry, excluded_term)
    except PillConflictError as e:
        raise HTTPException(status_code=422, detail=str(e))

    filtered = board.filtered_jobs
    info = page_info(len(filtered), page, settings.page_size, settings.page_window)
    items = [
        _job_out(j, board.industry_of(j), settings)
        for j in paginate(filtered, page, settings.page_size)
    ]

    if x_user_id and board.state.include_pills:
        sink = SqlActivityLogger(x_user_id, lambda: nullcontext(session))
        safe_log_search(sink, board.state.include_pills, board.state.exclude_pills)

    return JobsResponse(
        items=items,
        total=len(filtered),
        page=PageOut(**info._asdict()),
        facets=[FacetOut(industry=f.label, count=f.count) for f in board.facets],
        mode=board.pipeline_stats.mode,
    )


@app.get("/jobs/search", response_model=List[SearchHitOut], tags=["data"])
def search_jobs(
    q: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=50),
    session: Session = Depends(db_session),
    settings: Settings = Depends(get_settings),
):
    """Loose fuzzy lookup for the search box, before a term becomes a pill."""
    board = JobBoard(jobs=fetch_all_jobs(session), settings=settings)
    return [
        SearchHitOut(job=_job_out(m.item, board.industry_of(m.item), settings), score=round(m.score, 2))
        for m in board.quick_search(q, limit)
    ]


@app.get("/jobs/{job_id}", response_model=JobOut, tags=["data"])
def get_job_detail(
    job_id: str,
    session: Session = Depends(db_session),
    settings: Settings = Depends(get_settings),
):
    job = get_job_by_id(session, job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return _job_out(job, classify(job), settings)


@app.get("/industries", response_model=List[FacetOut], tags=["data"])
def get_industries(session: Session = Depends(db_session)):
    return [FacetOut(industry=f.label, count=f.count) for f in aggregate(fetch_all_jobs(session))]


@app.get("/industries/{label}/keywords", response_model=KeywordsOut, tags=["data"])
def get_industry_keywords(label: str):
    industry = Industry.from_label(label)
    if industry is None:
        raise HTTPException(status_code=404, detail="Unknown industry")
    return KeywordsOut(industry=industry.value, keywords=list(keywords_for(industry)))


@app.post("/jobs", response_model=JobOut, status_code=201, tags=["admin"])
def post_job(
    payload: PostJobIn,
    x_token: str | None = Header(default=None),
    user_agent: str | None = Header(default=None),
    session: Session = Depends(db_session),
    settings: Settings = Depends(get_settings),
):
    require_admin(x_token, settings)
    poster = Poster(user_id=payload.user_id, email=payload.email, full_name=payload.full_name)
    job = create_job(session, build_posted_job(payload, poster))

    # The posting stands even if the audit row can't be written
    try:
        log_job_posting(session, job, user_agent=user_agent)
    except SQLAlchemyError:
        session.rollback()
        LOGGER.warning("job posting log failed job_id=%s", job.id, exc_info=True)

    LOGGER.info("job posted id=%s by=%s", job.id, poster.user_id)
    return _job_out(job, classify(job), settings)
