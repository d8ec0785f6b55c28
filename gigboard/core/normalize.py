from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Backend column names as they appear in the vacancies table / REST rows.
BACKEND_COLUMNS = {
    "id": "UNIQUE_ID",
    "title": "Title",
    "company": "Company",
    "location": "Location",
    "summary": "Summary",
    "url": "URL",
}

TEXT_FIELDS = ("id", "title", "company", "location", "rate", "summary", "date", "url")
OPTIONAL_TEXT_FIELDS = ("added_by", "added_by_email", "poster_name", "source", "tags")


def _as_text(v: Any) -> str:
    if isinstance(v, str):
        return v
    # array columns (tags) arrive as lists
    if isinstance(v, (list, tuple, set)):
        return ", ".join(str(x) for x in v if x is not None)
    return str(v)


def _alias(name: str) -> AliasChoices:
    column = BACKEND_COLUMNS.get(name)
    return AliasChoices(name, column) if column else AliasChoices(name)


class Job(BaseModel):
    """Read-only job record as fetched from the backend.

    Accepts either our field names or the backend column names
    (``UNIQUE_ID``, ``Title``, ``Summary``, ...). Missing or null text
    fields become empty strings so downstream matching never sees None.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field("", validation_alias=_alias("id"))
    title: str = Field("", validation_alias=_alias("title"))
    company: str = Field("", validation_alias=_alias("company"))
    location: str = Field("", validation_alias=_alias("location"))
    rate: str = ""
    summary: str = Field("", validation_alias=_alias("summary"))
    date: str = ""
    url: str = Field("", validation_alias=_alias("url"))
    created_at: Optional[datetime] = None
    inserted_at: Optional[datetime] = None
    added_by: Optional[str] = None
    added_by_email: Optional[str] = None
    poster_name: Optional[str] = None
    source: Optional[str] = None
    tags: Optional[str] = None

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _text_or_empty(cls, v: Any) -> str:
        if v is None:
            return ""
        return _as_text(v)

    @field_validator(*OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def _optional_text(cls, v: Any) -> Optional[str]:
        return None if v is None else _as_text(v)

    @field_validator("created_at", "inserted_at", mode="before")
    @classmethod
    def _lenient_timestamp(cls, v: Any) -> Any:
        if v is None or isinstance(v, datetime):
            return v
        raw = str(v).strip()
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None

    @property
    def search_text(self) -> str:
        """Text the industry classifier looks at."""
        return f"{self.title} {self.summary}"


def normalize_title(title: str | None) -> str:
    return " ".join((title or "").split()).strip()


def normalize_company(name: str | None) -> str:
    return " ".join((name or "").split()).strip()


def normalize_term(term: str | None) -> str:
    """Pill text as stored in filter state: trimmed and lowercased."""
    return (term or "").strip().lower()


def job_timestamp(job: Job) -> datetime | None:
    return job.created_at or job.inserted_at


def is_new(job: Job, *, now: datetime | None = None, hours: float = 3) -> bool:
    """True if the job was created within the last `hours` hours (UTC).

    Naive timestamps are treated as UTC.
    """
    ts = job_timestamp(job)
    if ts is None:
        return False
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts > now - timedelta(hours=hours)
