"""Experience normalization and bucketing.

Job records describe experience in one of three ways:

- a structured ``{"min": .., "max": ..}`` object,
- free text such as "2-4 yrs", "5+ years", "Fresher" or "Minimum 2 years",
- nothing at all.

``normalize`` turns any of these into an ``ExperienceRange`` and
``matches_bucket`` decides whether a record belongs to one of the search
buckets. Numeric data, when it can be extracted, decides the bucket; the
textual rules only apply when no numbers could be pulled out. The fresher
keywords are the exception and count regardless of the numbers.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from jobsearch.models import ExperienceRange, JobRecord

logger = logging.getLogger(__name__)

FRESHER = "fresher"
JUNIOR = "1-3 yrs"
MID = "3-5 yrs"
SENIOR = "5+ yrs"
UNKNOWN = "unknown"

BUCKETS = (FRESHER, JUNIOR, MID, SENIOR)

_YEARS = r"(?:years?|yrs?)"
_DASH = r"(?:[-–—]|to)"
_NUM = r"(\d+(?:\.\d+)?)"

RANGE_RE = re.compile(rf"{_NUM}\s*{_DASH}\s*{_NUM}\s*{_YEARS}")
PLUS_RE = re.compile(rf"{_NUM}\s*\+")
SINGLE_RE = re.compile(rf"^{_NUM}\s*{_YEARS}")

FRESHER_KEYWORDS = ("fresher", "entry", "no experience")
SENIORITY_KEYWORDS = ("senior", "lead", "executive", "manager", "director", "principal")

# Textual fallbacks, used only when no numeric range could be extracted.
# (?<![\d.]) keeps "1 year" from matching inside "11 years" or "2.1 years".
_TEXT_RULES: dict[str, tuple[re.Pattern, ...]] = {
    FRESHER: (
        re.compile(r"^0$"),
        re.compile(r"(?<![\d.])0\s*(?:years?|yrs?)"),
    ),
    JUNIOR: (
        re.compile(rf"^[1-3]\s*{_YEARS}"),
        re.compile(rf"(?<![\d.])[1-3]\s*{_DASH}\s*[1-3]\s*{_YEARS}"),
        re.compile(rf"(?<![\d.])[1-3]\s*{_YEARS}"),
    ),
    MID: (
        re.compile(rf"^[3-5]\s*{_YEARS}"),
        re.compile(rf"(?<![\d.])[3-5]\s*{_DASH}\s*[3-5]\s*{_YEARS}"),
        re.compile(rf"(?<![\d.])[3-5]\s*{_YEARS}"),
    ),
    SENIOR: (
        re.compile(rf"^[5-9]\s*{_YEARS}"),
        re.compile(rf"^\d{{2,}}\s*{_YEARS}"),
        re.compile(r"(?<![\d.])[5-9]\s*\+"),
        re.compile(rf"(?<![\d.])[5-9]\s*{_DASH}\s*\d+\s*{_YEARS}"),
        re.compile(rf"(?<![\d.])5\s*{_YEARS}"),
    ),
}


def experience_text(job: JobRecord) -> str:
    """The free-text experience description, if the record has one."""
    if isinstance(job.experience, str):
        return job.experience
    return job.experience_level or ""


def _years(token: str) -> float:
    number = float(token)
    return int(number) if number.is_integer() else number


def parse_years(text: Optional[str]) -> ExperienceRange:
    """Extract a numeric range from free text.

    Tried in order: "N-M years" (any dash, or "to"), "N+", and a leading
    "N years". Year counts may be fractional ("2.5 years"). The
    single-number form yields ``min == max``.
    """
    if not text:
        return ExperienceRange()
    lower = text.lower().strip()

    match = RANGE_RE.search(lower)
    if match:
        return ExperienceRange(_years(match.group(1)), _years(match.group(2)))

    match = PLUS_RE.search(lower)
    if match:
        return ExperienceRange(_years(match.group(1)), None)

    match = SINGLE_RE.search(lower)
    if match:
        years = _years(match.group(1))
        return ExperienceRange(years, years)

    return ExperienceRange()


def normalize(job: JobRecord) -> ExperienceRange:
    """Canonical experience range for a record, ``(None, None)`` when unknown."""
    if isinstance(job.experience, ExperienceRange) and job.experience.min is not None:
        return job.experience
    return parse_years(experience_text(job))


def has_fresher_keyword(text: str) -> bool:
    lower = text.lower()
    return any(kw in lower for kw in FRESHER_KEYWORDS)


def _numeric_match(bucket: str, rng: ExperienceRange) -> bool:
    lo, hi = rng.min, rng.max
    if bucket == FRESHER:
        return lo == 0 and (hi is None or hi <= 1)
    if bucket == JUNIOR:
        return 1 <= lo <= 3 or (hi is not None and hi >= 1 and lo <= 3)
    if bucket == MID:
        return 3 <= lo <= 5 or (hi is not None and hi >= 3 and lo <= 5)
    if bucket == SENIOR:
        return lo >= 5
    return False


def _text_match(bucket: str, text: str) -> bool:
    lower = text.lower().strip()
    if any(rule.search(lower) for rule in _TEXT_RULES.get(bucket, ())):
        return True
    if bucket == SENIOR:
        return any(kw in lower for kw in SENIORITY_KEYWORDS)
    return False


def matches_bucket(job: JobRecord, bucket: str) -> bool:
    """Whether a record belongs to an experience bucket.

    Ranges can fall into more than one bucket: 3 years is both "1-3 yrs"
    and "3-5 yrs". Unrecognized bucket labels match nothing.
    """
    bucket = (bucket or "").strip().lower()
    if bucket not in BUCKETS:
        return False

    text = experience_text(job)
    if bucket == FRESHER and has_fresher_keyword(text):
        return True

    rng = normalize(job)
    if rng.is_known:
        return _numeric_match(bucket, rng)
    return _text_match(bucket, text)


def buckets_for(job: JobRecord) -> list[str]:
    """Every bucket the record falls into, in display order."""
    return [b for b in BUCKETS if matches_bucket(job, b)]


def classify(job: JobRecord) -> str:
    """The record's primary bucket, or ``"unknown"``."""
    matched = buckets_for(job)
    if not matched:
        logger.debug("No experience bucket for job %s", job.id)
        return UNKNOWN
    # Shared boundaries (3 and 5 years) resolve to the higher bucket.
    rng = normalize(job)
    if rng.is_known and len(matched) > 1 and rng.max is not None and rng.min == rng.max:
        return matched[-1]
    return matched[0]
