from __future__ import annotations
from typing import Callable, Dict, List, Protocol

from gigboard.config import Settings
from gigboard.core.normalize import Job


class JobSourceError(RuntimeError):
    """Fetching the job set failed; callers keep whatever they had before."""


class JobSource(Protocol):
    name: str
    def fetch_all_jobs(self) -> List[Job]: ...


SourceFactory = Callable[[Settings], JobSource]

# Source registry (populated by module imports)
REGISTRY: Dict[str, SourceFactory] = {}


def register(name: str, factory: SourceFactory) -> None:
    REGISTRY[name] = factory


def get(name: str) -> SourceFactory:
    return REGISTRY[name]


def build_source(settings: Settings | None = None) -> JobSource:
    settings = settings or Settings.from_env()
    try:
        factory = get(settings.source)
    except KeyError:
        raise JobSourceError(
            f"unknown job source {settings.source!r}; expected one of {sorted(REGISTRY)}"
        ) from None
    return factory(settings)


# Import source modules to self-register
from .database import DatabaseJobSource  # noqa: E402
from .file import FileJobSource  # noqa: E402
from .rest import RestJobSource  # noqa: E402

register(DatabaseJobSource.name, DatabaseJobSource.from_settings)
register(FileJobSource.name, FileJobSource.from_settings)
register(RestJobSource.name, RestJobSource.from_settings)

__all__ = [
    "JobSource",
    "JobSourceError",
    "REGISTRY",
    "register",
    "get",
    "build_source",
    "DatabaseJobSource",
    "FileJobSource",
    "RestJobSource",
]
