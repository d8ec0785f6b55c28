from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from gigboard.config import Settings, load_jobs_file
from gigboard.core.normalize import Job
from gigboard.providers import JobSourceError
from gigboard.providers.rest import rows_to_jobs

LOGGER = logging.getLogger(__name__)


class FileJobSource:
    """Job rows from a JSON export of the vacancies table."""

    name = "file"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FileJobSource":
        return cls(settings.jobs_file)

    def fetch_all_jobs(self) -> List[Job]:
        try:
            rows = load_jobs_file(self.path)
        except (OSError, ValueError) as e:
            raise JobSourceError(f"cannot read jobs file {self.path}: {e}") from e
        jobs = rows_to_jobs(rows, source=self.name)
        LOGGER.info("source=%s path=%s fetched=%s", self.name, self.path, len(jobs))
        return jobs
