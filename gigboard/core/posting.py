from __future__ import annotations

import secrets
import string
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode

from pydantic import BaseModel, field_validator

from gigboard.core.normalize import Job, normalize_company, normalize_title

CONTACT_URL = "https://allgigs.com/contact"
POSTED_SOURCE = "allGigs"
_ID_ALPHABET = string.ascii_lowercase + string.digits


class PostingForm(BaseModel):
    """Fields a poster fills in. All are required and may not be blank."""

    title: str
    company: str
    location: str
    rate: str
    summary: str

    @field_validator("title", "company", "location", "rate", "summary")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class Poster(BaseModel):
    user_id: str
    email: str
    full_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.full_name and self.full_name.strip():
            return self.full_name.strip()
        local = (self.email or "").split("@")[0]
        return local or "Anonymous"


def new_job_id(now: datetime | None = None) -> str:
    """JOB_<epoch millis>_<9 random base36 chars>."""
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"JOB_{millis}_{suffix}"


def contact_url(job_id: str, poster_email: str) -> str:
    return f"{CONTACT_URL}?{urlencode({'job': job_id, 'poster': poster_email})}"


def build_posted_job(form: PostingForm, poster: Poster, *, now: datetime | None = None) -> Job:
    now = now or datetime.now(timezone.utc)
    job_id = new_job_id(now)
    return Job(
        id=job_id,
        title=normalize_title(form.title),
        company=normalize_company(form.company),
        location=form.location,
        rate=form.rate,
        summary=form.summary,
        url=contact_url(job_id, poster.email),
        date=now.date().isoformat(),
        created_at=now,
        inserted_at=now,
        added_by=poster.user_id,
        added_by_email=poster.email,
        poster_name=poster.display_name,
        source=POSTED_SOURCE,
        tags=POSTED_SOURCE,
    )
