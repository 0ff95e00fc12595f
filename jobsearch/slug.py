"""URL slugs for job and company pages.

Job slugs look like ``<title>[-<location>]-at-<company>-<id>``. The id is
always the trailing component, so ``decode`` can recover it from a slug,
a bare id, or a full path.

Known limitation: ids that are not UUIDs but contain hyphens come back
truncated to their last hyphen-separated token. Existing bookmarked URLs
depend on this behaviour, so it is kept as is.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Optional
from urllib.parse import urlencode

from jobsearch.models import JobRecord

UUID_RE = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUNS = re.compile(r"-+")


def slug_segment(text: Optional[str]) -> str:
    """Lowercase, strip diacritics and punctuation, hyphenate whitespace."""
    normalized = unicodedata.normalize("NFKD", str(text or ""))
    stripped = "".join(c for c in normalized if not unicodedata.combining(c))
    cleaned = _NON_SLUG_CHARS.sub("", stripped.lower()).strip()
    return _HYPHEN_RUNS.sub("-", _WHITESPACE.sub("-", cleaned))


def encode(title: str, company: str, location: Optional[str], job_id: str) -> str:
    """Build the canonical job slug.

    Only the first comma-separated part of the location is used
    ("Pune, Maharashtra" -> "pune"). A missing location is simply omitted.
    """
    location_raw = str(location or "").strip()
    location_part = slug_segment(location_raw.split(",")[0]) if location_raw else ""

    parts = [slug_segment(title)]
    if location_part:
        parts.append(location_part)
    parts.extend(["at", slug_segment(company), str(job_id or "").lower()])
    return "-".join(p for p in parts if p)


def decode(slug_or_id: Optional[str]) -> str:
    """Best-effort recovery of the job id from a slug.

    A UUID anywhere in the input wins; otherwise the last hyphen-delimited
    token is returned. Input with no usable token comes back unchanged.
    """
    if not slug_or_id:
        return ""

    match = UUID_RE.search(slug_or_id)
    if match:
        return match.group(0)

    token = slug_or_id.split("-")[-1]
    return token or slug_or_id


def company_slug(name: str, company_id: str) -> str:
    """``<name>-<id>`` for company pages."""
    parts = [slug_segment(name), str(company_id or "").lower()]
    return "-".join(p for p in parts if p)


def job_slug(job: JobRecord) -> str:
    """The record's precomputed slug if it has one, else a freshly encoded one."""
    if job.slug:
        return job.slug
    return encode(job.title, job.company, job.location, job.id)


def job_url(job: JobRecord) -> str:
    return f"/jobs/{job_slug(job)}"


def search_url(keyword: str = "", location: str = "") -> str:
    """``/search?q=<keyword>&location=<location>``, skipping empty parameters."""
    params = {}
    if keyword and keyword.strip():
        params["q"] = keyword.strip()
    if location and location.strip():
        params["location"] = location.strip()
    return f"/search?{urlencode(params)}"
