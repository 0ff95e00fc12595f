"""Data models for the job search engine.

Job records arrive from several upstream tables with inconsistent shapes,
so every field except ``id`` is optional and ``JobRecord.from_dict`` is
deliberately forgiving about what it accepts.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union
from urllib.parse import parse_qs

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


@dataclass
class Salary:
    """Structured compensation. Amounts are in whole currency units."""

    min: Optional[float] = None
    max: Optional[float] = None
    currency: str = ""

    def to_dict(self) -> dict:
        return {"min": self.min, "max": self.max, "currency": self.currency}


@dataclass
class ExperienceRange:
    """Canonical experience requirement in years. ``None`` means unknown."""

    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def is_known(self) -> bool:
        return self.min is not None

    def to_dict(self) -> dict:
        return {"min": self.min, "max": self.max}


@dataclass
class JobRecord:
    """A single job posting as seen by the search engine.

    ``match_percentage`` and ``priority`` are derived per search session and
    are never serialized back out.
    """

    id: str
    title: str = ""
    company: str = ""
    slug: Optional[str] = None
    company_id: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    skills: list[str] = field(default_factory=list)
    category: Optional[str] = None
    type: Optional[str] = None
    is_remote: Optional[bool] = None
    location_type: Optional[str] = None
    experience_level: Optional[str] = None
    experience: Union[ExperienceRange, str, None] = None
    salary: Union[Salary, str, None] = None
    posted_date: Optional[str] = None
    application_deadline: Optional[str] = None

    match_percentage: Optional[float] = field(default=None, compare=False)
    priority: Optional[int] = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> JobRecord:
        """Build a record from a backend payload (camelCase or snake_case).

        Raises ValueError if the payload has no usable ``id``.
        """
        job_id = raw.get("id")
        if job_id is None or str(job_id).strip() == "":
            raise ValueError("job record has no id")

        return cls(
            id=str(job_id),
            title=_text(raw.get("title")),
            company=_text(raw.get("company")),
            slug=_optional_text(raw.get("slug")),
            company_id=_optional_text(_first(raw, "companyId", "company_id")),
            location=_optional_text(raw.get("location")),
            description=_description_text(raw.get("description")),
            skills=_parse_skills(raw.get("skills")),
            category=_optional_text(raw.get("category")),
            type=_optional_text(_first(raw, "type", "jobType", "job_type")),
            is_remote=_parse_bool(_first(raw, "isRemote", "is_remote")),
            location_type=_optional_text(_first(raw, "locationType", "location_type")),
            experience_level=_optional_text(
                _first(raw, "experienceLevel", "experience_level")
            ),
            experience=_parse_experience(raw.get("experience")),
            salary=_parse_salary(raw.get("salary")),
            posted_date=_optional_text(_first(raw, "postedDate", "posted_date")),
            application_deadline=_optional_text(
                _first(raw, "applicationDeadline", "application_deadline")
            ),
        )

    def to_dict(self) -> dict:
        """Serialize to the backend's camelCase shape (derived fields excluded)."""
        experience = self.experience
        salary = self.salary
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "company": self.company,
            "companyId": self.company_id,
            "location": self.location,
            "description": self.description,
            "skills": list(self.skills),
            "category": self.category,
            "type": self.type,
            "isRemote": self.is_remote,
            "locationType": self.location_type,
            "experienceLevel": self.experience_level,
            "experience": experience.to_dict() if isinstance(experience, ExperienceRange) else experience,
            "salary": salary.to_dict() if isinstance(salary, Salary) else salary,
            "postedDate": self.posted_date,
            "applicationDeadline": self.application_deadline,
        }

    def __repr__(self) -> str:
        return (
            f"JobRecord(id={self.id!r}, title={self.title!r}, "
            f"company={self.company!r}, location={self.location!r})"
        )


# ── Filter criteria ────────────────────────────────────────────────────────

# FilterCriteria attribute -> query-string key
QUERY_KEYS = {
    "keyword": "q",
    "location": "location",
    "job_type": "type",
    "salary_min": "minSalary",
    "salary_max": "maxSalary",
    "experience": "experience",
    "company": "company",
    "category": "category",
    "is_remote": "remote",
}


@dataclass
class FilterCriteria:
    """User-entered search criteria. Empty strings and ``None`` mean unset."""

    keyword: str = ""
    location: str = ""
    job_type: str = ""
    experience: str = ""
    category: str = ""
    company: str = ""
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    is_remote: bool = False

    @classmethod
    def from_query_params(cls, params: Mapping[str, Any] | str) -> FilterCriteria:
        """Hydrate criteria from a query string or a mapping of query params."""
        if isinstance(params, str):
            parsed = parse_qs(params.lstrip("?"), keep_blank_values=True)
            params = {k: v[0] for k, v in parsed.items() if v}

        def get(key: str) -> str:
            value = params.get(key)
            if isinstance(value, (list, tuple)):
                value = value[0] if value else ""
            return str(value).strip() if value is not None else ""

        return cls(
            keyword=get("q"),
            location=get("location"),
            job_type=get("type"),
            experience=get("experience"),
            category=get("category"),
            company=get("company"),
            salary_min=_parse_int(get("minSalary")),
            salary_max=_parse_int(get("maxSalary")),
            is_remote=get("remote").lower() == "true",
        )

    def to_query_params(self) -> dict[str, str]:
        """Only set criteria are emitted, in a stable order."""
        params: dict[str, str] = {}
        for attr, key in QUERY_KEYS.items():
            value = getattr(self, attr)
            if value is None or value == "" or value is False:
                continue
            params[key] = "true" if value is True else str(value)
        return params

    def active_count(self) -> int:
        return len(self.to_query_params())

    def is_empty(self) -> bool:
        return self.active_count() == 0

    def copy(self, **changes: Any) -> FilterCriteria:
        return replace(self, **changes)

    def clear(self) -> None:
        for f in fields(self):
            setattr(self, f.name, f.default)

    def server_filters(self, limit: int | None = None) -> dict[str, Any]:
        """The subset of criteria the backend understands.

        Everything else is filtered client-side by the pipeline.
        """
        filters: dict[str, Any] = {}
        if limit:
            filters["limit"] = limit
        if self.keyword:
            filters["search"] = self.keyword
        if self.location:
            filters["location"] = self.location
            if self.location.lower() == "remote":
                filters["isRemote"] = True
        if self.job_type:
            filters["type"] = self.job_type
        if self.category:
            filters["category"] = self.category
        if self.is_remote:
            filters["isRemote"] = True
        return filters


# ── Derived views ──────────────────────────────────────────────────────────


@dataclass
class PaginatedResultSet:
    """One page of a filtered, sorted result set."""

    items: list[JobRecord]
    page: int
    page_size: int
    total_pages: int
    total_items: int

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


@dataclass(frozen=True)
class SavedSearch:
    """A frozen snapshot of search criteria kept in local storage."""

    id: str
    keyword: str = ""
    location: str = ""
    job_type: str = ""
    created_at: str = ""

    @classmethod
    def from_criteria(cls, criteria: FilterCriteria) -> SavedSearch:
        return cls(
            id=new_search_id(),
            keyword=criteria.keyword or "",
            location=criteria.location or "",
            job_type=criteria.job_type or "",
            created_at=datetime.now(timezone.utc).isoformat(),
        )

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> SavedSearch:
        return cls(
            id=str(raw.get("id") or new_search_id()),
            keyword=_text(raw.get("keyword")),
            location=_text(raw.get("location")),
            job_type=_text(raw.get("jobType")),
            created_at=_text(raw.get("createdAt")),
        )

    @property
    def dedup_key(self) -> tuple[str, str, str]:
        return (self.keyword, self.location, self.job_type or "")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "keyword": self.keyword,
            "location": self.location,
            "jobType": self.job_type,
            "createdAt": self.created_at,
        }


def new_search_id() -> str:
    """Client-generated id: millisecond timestamp plus a short random suffix."""
    return f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"


# ── Parsing helpers ────────────────────────────────────────────────────────


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _optional_text(value: Any) -> Optional[str]:
    text = _text(value)
    return text or None


def _parse_int(value: str) -> Optional[int]:
    if not value:
        return None
    try:
        return int(float(value))
    except ValueError:
        logger.debug("Ignoring non-numeric salary bound: %r", value)
        return None


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(str(value).replace(",", "").strip())
    except ValueError:
        return None
    return int(number) if number.is_integer() else number


def _parse_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def _parse_skills(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [s.strip() for s in value.split(",") if s.strip()]
    return [str(s).strip() for s in value if s is not None and str(s).strip()]


def _parse_experience(value: Any) -> Union[ExperienceRange, str, None]:
    if value is None:
        return None
    if isinstance(value, Mapping):
        return ExperienceRange(_to_number(value.get("min")), _to_number(value.get("max")))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return ExperienceRange(value, value)
    return _optional_text(value)


def _parse_salary(value: Any) -> Union[Salary, str, None]:
    if value is None:
        return None
    if isinstance(value, Mapping):
        return Salary(
            min=_to_number(value.get("min")),
            max=_to_number(value.get("max")),
            currency=_text(value.get("currency")).upper(),
        )
    return _optional_text(value)


def _description_text(value: Any) -> Optional[str]:
    """Descriptions sometimes arrive as HTML; keyword matching needs plain text."""
    text = _optional_text(value)
    if text and "<" in text and ">" in text:
        soup = BeautifulSoup(text, "html.parser")
        return soup.get_text(separator="\n", strip=True) or None
    return text
