from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Callable, Optional, Protocol, Sequence

from sqlalchemy.orm import Session

from gigboard.db.crud import log_search

LOGGER = logging.getLogger(__name__)


class ActivityLogger(Protocol):
    def log_search(self, include_pills: Sequence[str], exclude_pills: Sequence[str]) -> None: ...


class NullActivityLogger:
    def log_search(self, include_pills: Sequence[str], exclude_pills: Sequence[str]) -> None:
        return None


class SqlActivityLogger:
    """Writes one search_logs row per include-pill change for a user."""

    def __init__(
        self,
        user_id: Optional[str],
        session_factory: Optional[Callable[[], AbstractContextManager[Session]]] = None,
    ):
        self.user_id = user_id
        self._session_factory = session_factory

    def log_search(self, include_pills: Sequence[str], exclude_pills: Sequence[str]) -> None:
        if not self.user_id:
            return
        if self._session_factory is None:
            from gigboard.db.session import get_session
            factory = get_session
        else:
            factory = self._session_factory
        with factory() as session:
            log_search(session, self.user_id, include_pills, exclude_pills)


def safe_log_search(
    logger: ActivityLogger,
    include_pills: Sequence[str],
    exclude_pills: Sequence[str],
) -> bool:
    """Log and carry on: a failing sink never undoes the filter change."""
    try:
        logger.log_search(list(include_pills), list(exclude_pills))
        return True
    except Exception:
        LOGGER.warning(
            "activity log failed include=%s exclude=%s",
            list(include_pills),
            list(exclude_pills),
            exc_info=True,
        )
        return False
