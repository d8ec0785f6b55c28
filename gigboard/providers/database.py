from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gigboard.config import Settings
from gigboard.core.normalize import Job
from gigboard.db.crud import fetch_all_jobs
from gigboard.providers import JobSourceError

LOGGER = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractContextManager[Session]]


class DatabaseJobSource:
    """Reads every vacancy row through SQLAlchemy."""

    name = "database"

    def __init__(self, session_factory: Optional[SessionFactory] = None):
        self._session_factory = session_factory

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseJobSource":
        return cls()

    def _session(self) -> AbstractContextManager[Session]:
        if self._session_factory is not None:
            return self._session_factory()
        # imported lazily so the engine is only built when this source is used
        from gigboard.db.session import get_session
        return get_session()

    def fetch_all_jobs(self) -> List[Job]:
        try:
            with self._session() as session:
                jobs = fetch_all_jobs(session)
        except SQLAlchemyError as e:
            raise JobSourceError(f"database fetch failed: {e}") from e
        LOGGER.info("source=%s fetched=%s", self.name, len(jobs))
        return jobs
