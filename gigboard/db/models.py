from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# --- SQLAlchemy base ---------------------------------------------------------

class Base(DeclarativeBase):
    """Declarative base for all models."""
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Models ------------------------------------------------------------------

class Vacancy(Base):
    """One job row as stored by the posting workflow / importers."""

    __tablename__ = "vacancies"
    __table_args__ = (
        Index("ix_vacancies_created_at", "created_at"),
    )

    unique_id: Mapped[str] = mapped_column(String(120), primary_key=True)

    title: Mapped[str] = mapped_column(String(300), default="", nullable=False)
    company: Mapped[Optional[str]] = mapped_column(String(200))
    location: Mapped[Optional[str]] = mapped_column(String(300))
    rate: Mapped[Optional[str]] = mapped_column(String(120))
    summary: Mapped[Optional[str]] = mapped_column(Text)
    date: Mapped[Optional[str]] = mapped_column(String(60))
    url: Mapped[Optional[str]] = mapped_column(String(600))

    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=_utcnow)
    inserted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=_utcnow)

    # Poster identity (set for gigs posted through the board)
    added_by: Mapped[Optional[str]] = mapped_column(String(120))
    added_by_email: Mapped[Optional[str]] = mapped_column(String(200))
    poster_name: Mapped[Optional[str]] = mapped_column(String(200))

    source: Mapped[Optional[str]] = mapped_column(String(60), index=True)
    tags: Mapped[Optional[str]] = mapped_column(String(300))

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Vacancy id={self.unique_id!r} title={self.title!r}>"


class SearchLog(Base):
    """Which pills a user had active after adding/removing one."""

    __tablename__ = "search_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(120), index=True)
    search_pills: Mapped[Optional[list]] = mapped_column(JSON)
    disregarded_pills: Mapped[Optional[list]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<SearchLog id={self.id} user={self.user_id!r} pills={self.search_pills!r}>"


class JobPostingLog(Base):
    __tablename__ = "job_postings_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(120), index=True)
    user_email: Mapped[Optional[str]] = mapped_column(String(200))
    job_id: Mapped[str] = mapped_column(String(120), nullable=False)
    job_title: Mapped[Optional[str]] = mapped_column(String(300))
    company: Mapped[Optional[str]] = mapped_column(String(200))
    location: Mapped[Optional[str]] = mapped_column(String(300))
    rate: Mapped[Optional[str]] = mapped_column(String(120))
    posted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    user_agent: Mapped[Optional[str]] = mapped_column(String(400))

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<JobPostingLog id={self.id} job={self.job_id!r}>"


__all__ = [
    "Base",
    "Vacancy",
    "SearchLog",
    "JobPostingLog",
]
