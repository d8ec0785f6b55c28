"""Environment-based settings for gigboard.

Environment variables (all optional)
------------------------------------
GIGBOARD_DOTENV                   path to a .env file loaded on import (default ".env")
GIGBOARD_PAGE_SIZE                jobs per page (default 30)
GIGBOARD_PAGE_WINDOW              page numbers shown in the pager (default 10)
GIGBOARD_FUZZY_THRESHOLD          base fuzzy threshold, 0 exact .. 1 anything (default 0.4)
GIGBOARD_STRICT_FUZZY_THRESHOLD   threshold for pill searches (default 0.2)
GIGBOARD_NEW_JOB_HOURS            a job is "new" for this many hours (default 3)
GIGBOARD_SOURCE                   database | rest | file (default database)
GIGBOARD_REST_URL / _KEY / _TABLE backend REST endpoint for the rest source
GIGBOARD_JOBS_FILE                JSON export for the file source
GIGBOARD_TAXONOMY_FILE            YAML keyword overrides (see filters.taxonomy)
GIGBOARD_ADMIN_TOKEN              token required to post jobs through the API
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from dotenv import load_dotenv

_ = load_dotenv(dotenv_path=os.getenv("GIGBOARD_DOTENV", ".env"))

DEFAULT_TABLE = "Allgigs_All_vacancies_NEW"


def _int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass
class Settings:
    page_size: int
    page_window: int
    fuzzy_threshold: float
    strict_fuzzy_threshold: float
    new_job_hours: float
    source: str
    rest_url: str
    rest_key: str
    rest_table: str
    jobs_file: str
    admin_token: str

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            page_size=max(1, _int("GIGBOARD_PAGE_SIZE", 30)),
            page_window=max(1, _int("GIGBOARD_PAGE_WINDOW", 10)),
            fuzzy_threshold=_float("GIGBOARD_FUZZY_THRESHOLD", 0.4),
            strict_fuzzy_threshold=_float("GIGBOARD_STRICT_FUZZY_THRESHOLD", 0.2),
            new_job_hours=_float("GIGBOARD_NEW_JOB_HOURS", 3),
            source=os.getenv("GIGBOARD_SOURCE", "database").lower(),
            rest_url=os.getenv("GIGBOARD_REST_URL", ""),
            rest_key=os.getenv("GIGBOARD_REST_KEY", ""),
            rest_table=os.getenv("GIGBOARD_REST_TABLE", DEFAULT_TABLE),
            jobs_file=os.getenv("GIGBOARD_JOBS_FILE", "jobs.json"),
            admin_token=os.getenv("GIGBOARD_ADMIN_TOKEN", ""),
        )


def load_jobs_file(path: Union[str, Path]) -> list[dict]:
    """Read raw job rows from a JSON export (a list, a single row, or {"jobs": [...]})."""
    path = Path(path)
    with path.open(encoding='utf-8') as f:
        data = json.load(f)
    if isinstance(data, dict):
        rows = data.get("jobs")
        return rows if isinstance(rows, list) else [data]
    elif isinstance(data, list):
        return data
    else:
        return []
