from __future__ import annotations

import logging
from typing import Any, List

import requests
from pydantic import ValidationError

from gigboard.config import Settings
from gigboard.core.normalize import Job
from gigboard.providers import JobSourceError

LOGGER = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 Gigboard/1.0"


def rows_to_jobs(rows: Any, *, source: str) -> List[Job]:
    if not isinstance(rows, list):
        raise JobSourceError(f"{source}: expected a list of rows, got {type(rows).__name__}")
    jobs: List[Job] = []
    skipped = 0
    for row in rows:
        if not isinstance(row, dict):
            skipped += 1
            continue
        try:
            jobs.append(Job.model_validate(row))
        except ValidationError as e:
            skipped += 1
            LOGGER.warning(
                "source=%s skipped row id=%r errors=%s",
                source,
                row.get("UNIQUE_ID", row.get("id")),
                e.error_count(),
            )
    if skipped:
        LOGGER.warning("source=%s skipped=%s unusable rows", source, skipped)
    return jobs


class RestJobSource:
    """Reads the whole vacancies table from the backend's REST interface.

    The backend caps rows per response, so rows are requested in `batch`
    sized ranges until a short batch comes back.
    """

    name = "rest"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        table: str = "Allgigs_All_vacancies_NEW",
        *,
        timeout: float = 20.0,
        batch: int = 1000,
        session: requests.Session | None = None,
    ):
        if not base_url:
            raise JobSourceError("rest source needs GIGBOARD_REST_URL")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout
        self.batch = max(1, batch)
        self.http = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RestJobSource":
        return cls(settings.rest_url, settings.rest_key, settings.rest_table)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _headers(self, start: int, end: int) -> dict[str, str]:
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "Range-Unit": "items",
            "Range": f"{start}-{end}",
        }
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _get_batch(self, start: int) -> list:
        end = start + self.batch - 1
        try:
            resp = self.http.get(
                self.endpoint,
                params={"select": "*", "limit": self.batch, "offset": start},
                headers=self._headers(start, end),
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            raise JobSourceError(f"rest fetch failed at rows {start}-{end}: {e}") from e
        except ValueError as e:
            raise JobSourceError(f"rest fetch returned invalid JSON at rows {start}-{end}") from e

    def fetch_all_jobs(self) -> List[Job]:
        jobs: List[Job] = []
        seen: set[str] = set()
        previous: list = []
        start = 0
        while True:
            rows = self._get_batch(start)
            batch_jobs = rows_to_jobs(rows, source=self.name)
            fresh = [j for j in batch_jobs if not j.id or j.id not in seen]
            if start and (rows == previous or (batch_jobs and not fresh)):
                # the server ignored the range and sent a page we already have
                LOGGER.warning("source=%s repeated rows at offset=%s; stopping", self.name, start)
                break
            seen.update(j.id for j in fresh if j.id)
            jobs.extend(fresh)
            previous = rows
            if len(rows) != self.batch:
                if len(rows) > self.batch:
                    LOGGER.warning(
                        "source=%s got %s rows for a batch of %s; range ignored, stopping",
                        self.name,
                        len(rows),
                        self.batch,
                    )
                break
            start += self.batch
        LOGGER.info("source=%s table=%s fetched=%s", self.name, self.table, len(jobs))
        return jobs
