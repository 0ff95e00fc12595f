"""Keyword classifiers for government, internship and remote jobs.

Each classifier is a table of ``(field, predicate)`` rules combined with a
short-circuit OR. The government rules are intentionally over-inclusive:
a false positive on the government listing is cheaper than a missed
posting.
"""

from __future__ import annotations

from typing import Callable, NamedTuple

from jobsearch.models import JobRecord

GOVERNMENT_CATEGORIES = frozenset(
    {"central", "state", "banking", "psu", "defence", "university", "government"}
)
GOVERNMENT_TERMS = ("government", "govt", "public sector")
GOVERNMENT_BODY_TERMS = ("commission", "ministry", "board")
INTERNSHIP_TERMS = ("intern",)

# Category filter values that route to the government classifier.
GOVERNMENT_FILTER_VALUES = frozenset({"government", "govt"})
INTERNSHIP_FILTER_VALUES = frozenset({"internship", "internships", "intern"})


class Rule(NamedTuple):
    """A single classification rule: read ``field`` then test it."""

    field: str
    predicate: Callable[[str], bool]
    description: str


def _contains_any(terms: tuple[str, ...]) -> Callable[[str], bool]:
    return lambda value: any(term in value for term in terms)


def _field_value(job: JobRecord, field: str) -> str:
    value = getattr(job, field, None)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else ""
    return str(value).strip().lower()


GOVERNMENT_RULES: tuple[Rule, ...] = (
    Rule("category", lambda v: v in GOVERNMENT_CATEGORIES, "category is a government sector"),
    Rule("category", _contains_any(GOVERNMENT_TERMS), "category mentions government"),
    Rule("company", _contains_any(GOVERNMENT_TERMS), "company mentions government"),
    Rule("title", _contains_any(GOVERNMENT_TERMS), "title mentions government"),
    Rule("company", _contains_any(GOVERNMENT_BODY_TERMS), "company is a public body"),
)

INTERNSHIP_RULES: tuple[Rule, ...] = (
    Rule("title", _contains_any(INTERNSHIP_TERMS), "title mentions intern"),
    Rule("type", _contains_any(INTERNSHIP_TERMS), "employment type mentions intern"),
    Rule("category", _contains_any(INTERNSHIP_TERMS), "category mentions intern"),
)

REMOTE_RULES: tuple[Rule, ...] = (
    Rule("is_remote", lambda v: v == "true", "remote flag set"),
    Rule("location_type", lambda v: v == "remote", "location type is remote"),
    Rule("location", lambda v: "remote" in v, "location mentions remote"),
    Rule("type", lambda v: v == "remote", "employment type is remote"),
)


def first_matching_rule(job: JobRecord, rules: tuple[Rule, ...]) -> Rule | None:
    """The first rule that fires for ``job``, or None."""
    for rule in rules:
        if rule.predicate(_field_value(job, rule.field)):
            return rule
    return None


def is_government(job: JobRecord) -> bool:
    return first_matching_rule(job, GOVERNMENT_RULES) is not None


def is_remote(job: JobRecord) -> bool:
    return first_matching_rule(job, REMOTE_RULES) is not None


def is_internship(job: JobRecord) -> bool:
    return first_matching_rule(job, INTERNSHIP_RULES) is not None


def matches_category(job: JobRecord, category: str) -> bool:
    """Category filter: government and internship go through their
    classifiers, anything else is a case-insensitive equality test on the
    record's category."""
    wanted = (category or "").strip().lower()
    if not wanted:
        return True
    if wanted in GOVERNMENT_FILTER_VALUES:
        return is_government(job)
    if wanted in INTERNSHIP_FILTER_VALUES:
        return is_internship(job)
    return _field_value(job, "category") == wanted
