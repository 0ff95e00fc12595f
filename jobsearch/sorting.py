"""Sorting and pagination of filtered results.

All sorts are stable, so jobs that compare equal keep the order the
filter pipeline produced. Missing dates sort as the epoch and missing
salaries as 0, which puts them last for "newest" / "salary-high".
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timedelta, timezone
from typing import Callable

from jobsearch.models import JobRecord, PaginatedResultSet
from jobsearch.salary import salary_bounds

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 12
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%m/%d/%Y",
)

_RELATIVE_RE = re.compile(r"(\d+)\+?\s*(day|week|month)s?\s*ago")


# ── Date Parsing ────────────────────────────────────────────────────────────


def parse_posted_date(date_str: str | None) -> datetime | None:
    """Parse a posted date into an aware datetime, or None.

    Handles ISO 8601 dates and datetimes (fractional seconds, space or "T"
    separator), "Feb 1, 2026" style dates and
    relative forms like "today", "yesterday" and "3 days ago".
    """
    if not date_str:
        return None

    date_str = date_str.strip()
    lower = date_str.lower()
    now = datetime.now(timezone.utc)

    if "today" in lower:
        return now
    if "yesterday" in lower:
        return now - timedelta(days=1)

    relative = _RELATIVE_RE.search(lower)
    if relative:
        count = int(relative.group(1))
        unit_days = {"day": 1, "week": 7, "month": 30}[relative.group(2)]
        return now - timedelta(days=count * unit_days)

    try:
        return _as_utc(datetime.fromisoformat(date_str))
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return _as_utc(datetime.strptime(date_str, fmt))
        except ValueError:
            continue

    logger.debug("Could not parse date: %r", date_str)
    return None


def _as_utc(parsed: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def posted_at(job: JobRecord) -> datetime:
    return parse_posted_date(job.posted_date) or EPOCH


# ── Sorting ─────────────────────────────────────────────────────────────────


def _salary_max(job: JobRecord) -> float:
    return salary_bounds(job.salary)[1]


def _salary_min(job: JobRecord) -> float:
    return salary_bounds(job.salary)[0]


def _company(job: JobRecord) -> str:
    return (job.company or "").casefold()


# sort key -> (key function, reverse)
SORTS: dict[str, tuple[Callable[[JobRecord], object], bool] | None] = {
    "newest": (posted_at, True),
    "oldest": (posted_at, False),
    "salary-high": (_salary_max, True),
    "salary-low": (_salary_min, False),
    "company-az": (_company, False),
    "relevant": None,
}

SORT_KEYS = tuple(SORTS)


def sort_jobs(jobs: list[JobRecord], key: str) -> list[JobRecord]:
    """Return a new list sorted by ``key``.

    Raises ValueError for an unknown sort key.
    """
    if key not in SORTS:
        raise ValueError(f"Unknown sort key {key!r}; expected one of {', '.join(SORT_KEYS)}")

    entry = SORTS[key]
    if entry is None:
        return list(jobs)
    key_fn, reverse = entry
    # sorted() with reverse=True is still stable for equal keys
    return sorted(jobs, key=key_fn, reverse=reverse)


# ── Pagination ──────────────────────────────────────────────────────────────


def total_pages(count: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    return math.ceil(count / page_size)


def paginate(
    jobs: list[JobRecord],
    page: int,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> PaginatedResultSet:
    """Slice one page out of ``jobs``.

    The page number is not clamped: a page outside ``[1, total_pages]``
    yields an empty ``items`` list.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")

    pages = total_pages(len(jobs), page_size)
    if page < 1:
        items: list[JobRecord] = []
    else:
        start = (page - 1) * page_size
        items = jobs[start:start + page_size]

    return PaginatedResultSet(
        items=items,
        page=page,
        page_size=page_size,
        total_pages=pages,
        total_items=len(jobs),
    )
