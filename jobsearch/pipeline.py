"""Client-side filter pipeline.

The backend only understands a handful of filters (search, location,
type, category, isRemote), so the full criteria set is applied here over
the fetched collection:

1. Keyword: substring over title, company, description and skills
2. Remote flag: via the remote classifier
3. Location: substring; the literal "remote" uses the remote classifier
4. Experience: bucket match, skipped when the backend already applied it
5. Category: government classifier or plain category equality
6. Salary bounds: missing amounts count as 0
7. Job type: equality
8. Company: substring

Filters are conjunctive and each is skipped when its criterion is unset,
so the order only affects which rejection reason a job is tagged with.
Output order is whatever the input order was; sorting is a separate stage.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, NamedTuple, Optional

from jobsearch import classifier, experience, salary
from jobsearch.models import FilterCriteria, JobRecord

logger = logging.getLogger(__name__)


class RejectionReason(Enum):
    """Why a job was dropped by the pipeline."""

    KEYWORD = "REJECTED_KEYWORD"
    REMOTE = "REJECTED_REMOTE"
    LOCATION = "REJECTED_LOCATION"
    EXPERIENCE = "REJECTED_EXPERIENCE"
    CATEGORY = "REJECTED_CATEGORY"
    SALARY = "REJECTED_SALARY"
    JOB_TYPE = "REJECTED_JOB_TYPE"
    COMPANY = "REJECTED_COMPANY"


class FilterResult(NamedTuple):
    """Result of filtering a single job."""

    job: JobRecord
    passed: bool
    reason: RejectionReason | None = None


Predicate = Callable[[JobRecord], bool]


def _lower(value: Optional[str]) -> str:
    return (value or "").lower()


def _partition(
    jobs: list[JobRecord],
    predicate: Predicate,
    reason: RejectionReason,
) -> tuple[list[JobRecord], list[FilterResult]]:
    passed = []
    rejected = []
    for job in jobs:
        if predicate(job):
            passed.append(job)
        else:
            rejected.append(FilterResult(job, False, reason))

    logger.debug(
        "%s filter: %d passed, %d rejected", reason.name.lower(), len(passed), len(rejected)
    )
    return passed, rejected


# ── Predicates ──────────────────────────────────────────────────────────────


def keyword_matches(job: JobRecord, keyword: str) -> bool:
    """Case-insensitive substring match across title, company, description
    and skills."""
    needle = keyword.strip().lower()
    if not needle:
        return True
    return (
        needle in _lower(job.title)
        or needle in _lower(job.company)
        or needle in _lower(job.description)
        or any(needle in skill.lower() for skill in job.skills)
    )


def location_matches(job: JobRecord, location: str) -> bool:
    wanted = location.strip().lower()
    if not wanted:
        return True
    if wanted == "remote":
        return classifier.is_remote(job)
    return wanted in _lower(job.location)


def job_type_matches(job: JobRecord, job_type: str) -> bool:
    wanted = job_type.strip().lower()
    return not wanted or _lower(job.type).strip() == wanted


def company_matches(job: JobRecord, company: str) -> bool:
    wanted = company.strip().lower()
    return not wanted or wanted in _lower(job.company)


# ── Individual filters ─────────────────────────────────────────────────────


def apply_keyword_filter(jobs: list[JobRecord], keyword: str):
    return _partition(jobs, lambda j: keyword_matches(j, keyword), RejectionReason.KEYWORD)


def apply_remote_filter(jobs: list[JobRecord]):
    return _partition(jobs, classifier.is_remote, RejectionReason.REMOTE)


def apply_location_filter(jobs: list[JobRecord], location: str):
    return _partition(jobs, lambda j: location_matches(j, location), RejectionReason.LOCATION)


def apply_experience_filter(jobs: list[JobRecord], bucket: str):
    """Keep jobs in the requested bucket. Jobs whose experience cannot be
    classified never pass."""
    return _partition(
        jobs, lambda j: experience.matches_bucket(j, bucket), RejectionReason.EXPERIENCE
    )


def apply_category_filter(jobs: list[JobRecord], category: str):
    return _partition(
        jobs, lambda j: classifier.matches_category(j, category), RejectionReason.CATEGORY
    )


def apply_salary_filter(
    jobs: list[JobRecord],
    salary_min: Optional[float],
    salary_max: Optional[float],
):
    return _partition(
        jobs,
        lambda j: salary.within_bounds(j.salary, salary_min, salary_max),
        RejectionReason.SALARY,
    )


def apply_job_type_filter(jobs: list[JobRecord], job_type: str):
    return _partition(jobs, lambda j: job_type_matches(j, job_type), RejectionReason.JOB_TYPE)


def apply_company_filter(jobs: list[JobRecord], company: str):
    return _partition(jobs, lambda j: company_matches(j, company), RejectionReason.COMPANY)


# ── Full pipeline ──────────────────────────────────────────────────────────


def filter_jobs(
    jobs: list[JobRecord],
    criteria: FilterCriteria,
    experience_prefiltered: bool = False,
) -> tuple[list[JobRecord], list[FilterResult]]:
    """Apply every set criterion in sequence.

    Args:
        jobs: The fetched job collection
        criteria: Current filter criteria
        experience_prefiltered: True when the backend already applied the
            same experience criterion; the bucket filter is then skipped

    Returns:
        (passed_jobs, all_rejection_results)
    """
    all_rejected: list[FilterResult] = []
    jobs = list(jobs)

    stages: list[tuple[bool, Callable[[list[JobRecord]], tuple]]] = [
        (bool(criteria.keyword), lambda js: apply_keyword_filter(js, criteria.keyword)),
        (criteria.is_remote, apply_remote_filter),
        (bool(criteria.location), lambda js: apply_location_filter(js, criteria.location)),
        (
            bool(criteria.experience.strip()) and not experience_prefiltered,
            lambda js: apply_experience_filter(js, criteria.experience),
        ),
        (bool(criteria.category), lambda js: apply_category_filter(js, criteria.category)),
        (
            criteria.salary_min is not None or criteria.salary_max is not None,
            lambda js: apply_salary_filter(js, criteria.salary_min, criteria.salary_max),
        ),
        (bool(criteria.job_type), lambda js: apply_job_type_filter(js, criteria.job_type)),
        (bool(criteria.company), lambda js: apply_company_filter(js, criteria.company)),
    ]

    for enabled, stage in stages:
        if not enabled:
            continue
        jobs, rejected = stage(jobs)
        all_rejected.extend(rejected)

    logger.info(
        "Filter pipeline complete: %d passed, %d rejected",
        len(jobs),
        len(all_rejected),
    )
    return jobs, all_rejected


def apply(
    jobs: list[JobRecord],
    criteria: FilterCriteria,
    experience_prefiltered: bool = False,
) -> list[JobRecord]:
    """The jobs that satisfy ``criteria``."""
    passed, _ = filter_jobs(jobs, criteria, experience_prefiltered)
    return passed


def get_rejection_summary(results: list[FilterResult]) -> dict[str, int]:
    """Count rejection results by reason."""
    summary: dict[str, int] = {}
    for result in results:
        if result.reason:
            key = result.reason.value
            summary[key] = summary.get(key, 0) + 1
    return summary
