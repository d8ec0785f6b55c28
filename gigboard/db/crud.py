import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gigboard.core.normalize import Job
from gigboard.db.models import JobPostingLog, SearchLog, Vacancy

LOGGER = logging.getLogger(__name__)

# Job field -> Vacancy column where the names differ
_COLUMN_FOR = {"id": "unique_id"}


def vacancy_to_job(row: Vacancy) -> Job:
    return Job(
        id=row.unique_id,
        title=row.title,
        company=row.company,
        location=row.location,
        rate=row.rate,
        summary=row.summary,
        date=row.date,
        url=row.url,
        created_at=row.created_at,
        inserted_at=row.inserted_at,
        added_by=row.added_by,
        added_by_email=row.added_by_email,
        poster_name=row.poster_name,
        source=row.source,
        tags=row.tags,
    )


def _job_columns(job: Job) -> dict:
    data = job.model_dump()
    return {_COLUMN_FOR.get(k, k): v for k, v in data.items()}


def fetch_all_jobs(session: Session) -> List[Job]:
    """Every vacancy, newest first. No paging: the board filters in memory."""
    rows: Sequence[Vacancy] = (
        session.query(Vacancy)
        .order_by(Vacancy.created_at.desc().nullslast(), Vacancy.unique_id.asc())
        .all()
    )
    return [vacancy_to_job(r) for r in rows]


def get_job_by_id(session: Session, job_id: str) -> Optional[Job]:
    row = session.get(Vacancy, job_id)
    return vacancy_to_job(row) if row is not None else None


def create_job(session: Session, job: Job) -> Job:
    """Insert a new vacancy. Raises ValueError when the job has no id."""
    if not job.id:
        raise ValueError("create_job requires a job id")
    data = _job_columns(job)
    # let the column defaults fill timestamps the caller left empty
    for key in ("created_at", "inserted_at"):
        if data.get(key) is None:
            data.pop(key)
    row = Vacancy(**data)
    session.add(row)
    session.commit()
    session.refresh(row)
    return vacancy_to_job(row)


def upsert_job(session: Session, job: Job) -> Job:
    """
    Insert or update a vacancy by its unique id.
    Empty/None values never overwrite stored ones, and an existing
    created_at is kept so re-imports don't make old jobs look new.
    """
    if not job.id:
        raise ValueError("upsert_job requires a job id")

    row = session.get(Vacancy, job.id)
    data = _job_columns(job)
    if row is None:
        for key in ("created_at", "inserted_at"):
            if data.get(key) is None:
                data.pop(key)
        row = Vacancy(**data)
        session.add(row)
    else:
        for key, value in data.items():
            if key == "unique_id":
                continue
            if value is None or value == "":
                continue
            if key == "created_at" and row.created_at is not None:
                continue
            setattr(row, key, value)

    session.commit()
    session.refresh(row)
    return vacancy_to_job(row)


def upsert_jobs(session: Session, jobs: Iterable[Job]) -> int:
    """Upsert each job in its own commit; a failing row is rolled back and skipped."""
    saved = 0
    for job in jobs:
        if not job.id:
            continue
        try:
            upsert_job(session, job)
        except SQLAlchemyError:
            session.rollback()
            LOGGER.warning("upsert failed job_id=%s", job.id, exc_info=True)
            continue
        saved += 1
    return saved


def log_search(
    session: Session,
    user_id: Optional[str],
    search_pills: Sequence[str],
    disregarded_pills: Sequence[str] = (),
) -> SearchLog:
    entry = SearchLog(
        user_id=user_id,
        search_pills=list(search_pills) or None,
        disregarded_pills=list(disregarded_pills) or None,
    )
    session.add(entry)
    session.commit()
    return entry


def log_job_posting(session: Session, job: Job, user_agent: Optional[str] = None) -> JobPostingLog:
    entry = JobPostingLog(
        user_id=job.added_by,
        user_email=job.added_by_email,
        job_id=job.id,
        job_title=job.title,
        company=job.company,
        location=job.location,
        rate=job.rate,
        user_agent=user_agent,
    )
    session.add(entry)
    session.commit()
    return entry
