from __future__ import annotations

from datetime import datetime, timedelta, timezone
import re

MONTHS = {name: i for i, name in enumerate(
    ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"), start=1
)}

ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$")
DMY_DATE = re.compile(r"^(\d{1,2})[-/.](\d{1,2})[-/.](\d{4})$")
MONTH_DAY = re.compile(r"^(\w{3,})\.?\s+(\d{1,2})(?:,?\s+(\d{4}))?$")
DAY_MONTH = re.compile(r"^(\d{1,2})\s+(\w{3,})\.?(?:\s+(\d{4}))?$")
DAYS_AGO = re.compile(r"^(\d+)\s*day[s]?\s*ago$", re.I)
AGE_SHORT = re.compile(r"^(\d+)([dhw])$", re.I)


def _midnight(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _month_day(month_name: str, day: int, year: str | None, now: datetime) -> datetime | None:
    month = MONTHS.get(month_name.lower()[:3])
    if month is None:
        return None
    try:
        candidate = datetime(int(year) if year else now.year, month, day)
    except ValueError:
        return None
    # "Dec 30" read in early January belongs to last year
    if not year and candidate - now > timedelta(days=30):
        try:
            candidate = datetime(now.year - 1, month, day)
        except ValueError:
            return None
    return candidate


def parse_posting_date(text: str | None, *, now: datetime | None = None) -> datetime | None:
    """Parse the free-text posting date of a job into a naive UTC date.

    Understands ISO dates (optionally with a time part), ``17-09-2025``,
    ``Sep 17`` / ``17 Sep 2025``, ``today`` / ``yesterday``, ``3 days ago``
    and short ages (``1d``, ``2w``, ``12h``). Returns None for anything else.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)

    if not text:
        return None
    raw = text.strip()
    if not raw:
        return None

    lowered = raw.lower()
    if lowered == "today":
        return _midnight(now)
    if lowered == "yesterday":
        return _midnight(now - timedelta(days=1))

    m = ISO_DATE.match(raw)
    if m:
        year, month, day = map(int, m.groups())
        try:
            return datetime(year, month, day)
        except ValueError:
            return None

    m = DMY_DATE.match(raw)
    if m:
        day, month, year = map(int, m.groups())
        try:
            return datetime(year, month, day)
        except ValueError:
            return None

    m = MONTH_DAY.match(raw)
    if m:
        return _month_day(m.group(1), int(m.group(2)), m.group(3), now)

    m = DAY_MONTH.match(raw)
    if m:
        return _month_day(m.group(2), int(m.group(1)), m.group(3), now)

    m = DAYS_AGO.match(raw)
    if m:
        return _midnight(now - timedelta(days=int(m.group(1))))

    m = AGE_SHORT.match(raw)
    if m:
        value = int(m.group(1))
        unit = m.group(2).lower()
        if unit == 'd':
            return _midnight(now - timedelta(days=value))
        if unit == 'w':
            return _midnight(now - timedelta(weeks=value))
        if unit == 'h':
            return _midnight(now - timedelta(hours=value))

    return None
