"""Tests for data models."""

import pytest

from jobsearch.models import (
    ExperienceRange,
    FilterCriteria,
    JobRecord,
    PaginatedResultSet,
    Salary,
    SavedSearch,
)


class TestJobRecord:
    def test_from_dict_camel_case(self):
        job = JobRecord.from_dict({
            "id": 42,
            "title": " Data Analyst ",
            "company": "Acme",
            "companyId": "c-1",
            "jobType": "Contract",
            "isRemote": "true",
            "locationType": "Remote",
            "experienceLevel": "Mid",
            "skills": "Python, SQL, ",
            "salary": {"min": "5,00,000", "max": 900000, "currency": "inr"},
            "postedDate": "2026-01-02",
            "applicationDeadline": "2026-02-02",
        })
        assert job.id == "42"
        assert job.title == "Data Analyst"
        assert job.company_id == "c-1"
        assert job.type == "Contract"
        assert job.is_remote is True
        assert job.location_type == "Remote"
        assert job.experience_level == "Mid"
        assert job.skills == ["Python", "SQL"]
        assert job.salary == Salary(500000, 900000, "INR")
        assert job.posted_date == "2026-01-02"
        assert job.application_deadline == "2026-02-02"

    def test_from_dict_snake_case(self):
        job = JobRecord.from_dict({"id": "x", "job_type": "Full-time", "is_remote": False})
        assert job.type == "Full-time"
        assert job.is_remote is False

    def test_missing_id(self):
        with pytest.raises(ValueError):
            JobRecord.from_dict({"title": "Nameless"})
        with pytest.raises(ValueError):
            JobRecord.from_dict({"id": "  "})

    def test_experience_shapes(self):
        assert JobRecord.from_dict({"id": "1", "experience": {"min": 2, "max": 4}}).experience == ExperienceRange(2, 4)
        assert JobRecord.from_dict({"id": "1", "experience": 3}).experience == ExperienceRange(3, 3)
        assert JobRecord.from_dict({"id": "1", "experience": "2-4 yrs"}).experience == "2-4 yrs"
        assert JobRecord.from_dict({"id": "1", "experience": ""}).experience is None

    def test_salary_text(self):
        job = JobRecord.from_dict({"id": "1", "salary": "Not disclosed"})
        assert job.salary == "Not disclosed"

    def test_html_description_becomes_text(self):
        job = JobRecord.from_dict({"id": "1", "description": "<p>Build <b>APIs</b> in Python</p>"})
        assert "<" not in job.description
        assert "APIs" in job.description

    def test_plain_description_untouched(self):
        job = JobRecord.from_dict({"id": "1", "description": "Salary > 5L"})
        assert job.description == "Salary > 5L"

    def test_to_dict_excludes_derived_fields(self):
        job = JobRecord(
            id="1",
            title="Engineer",
            experience=ExperienceRange(1, 3),
            salary=Salary(100, 200, "USD"),
            match_percentage=87.5,
            priority=1,
        )
        data = job.to_dict()
        assert "matchPercentage" not in data
        assert "priority" not in data
        assert data["experience"] == {"min": 1, "max": 3}
        assert data["salary"] == {"min": 100, "max": 200, "currency": "USD"}
        assert JobRecord.from_dict(data) == job

    def test_derived_fields_ignored_in_equality(self):
        assert JobRecord(id="1", priority=1) == JobRecord(id="1", priority=2)


class TestFilterCriteria:
    def test_from_query_string(self):
        criteria = FilterCriteria.from_query_params(
            "?q=python&location=Pune&type=Full-time&minSalary=500000&remote=true&experience=1-3+yrs"
        )
        assert criteria.keyword == "python"
        assert criteria.location == "Pune"
        assert criteria.job_type == "Full-time"
        assert criteria.salary_min == 500000
        assert criteria.salary_max is None
        assert criteria.is_remote is True
        assert criteria.experience == "1-3 yrs"

    def test_from_mapping_with_lists(self):
        criteria = FilterCriteria.from_query_params({"q": ["go", "rust"], "maxSalary": "abc"})
        assert criteria.keyword == "go"
        assert criteria.salary_max is None

    def test_to_query_params_only_set_values(self):
        criteria = FilterCriteria(keyword="python", salary_max=0, is_remote=True)
        assert criteria.to_query_params() == {"q": "python", "maxSalary": "0", "remote": "true"}
        assert criteria.active_count() == 3

    def test_query_params_round_trip(self):
        criteria = FilterCriteria(keyword="data", location="Delhi", category="government", salary_min=300000)
        assert FilterCriteria.from_query_params(criteria.to_query_params()) == criteria

    def test_empty_and_clear(self):
        criteria = FilterCriteria(keyword="python", is_remote=True, salary_min=1)
        assert not criteria.is_empty()
        criteria.clear()
        assert criteria.is_empty()
        assert criteria == FilterCriteria()

    def test_copy(self):
        criteria = FilterCriteria(keyword="python")
        other = criteria.copy(location="Pune")
        assert other.location == "Pune"
        assert criteria.location == ""

    def test_server_filters(self):
        criteria = FilterCriteria(
            keyword="python", location="Pune", job_type="Full-time",
            category="Technology", experience="1-3 yrs", company="Acme", salary_min=1,
        )
        assert criteria.server_filters(limit=500) == {
            "limit": 500,
            "search": "python",
            "location": "Pune",
            "type": "Full-time",
            "category": "Technology",
        }

    def test_server_filters_remote_location(self):
        filters = FilterCriteria(location="Remote").server_filters()
        assert filters == {"location": "Remote", "isRemote": True}


class TestSavedSearch:
    def test_from_criteria(self):
        entry = SavedSearch.from_criteria(FilterCriteria(keyword="python", job_type="Contract"))
        assert entry.dedup_key == ("python", "", "Contract")
        assert entry.created_at.endswith("+00:00")

    def test_from_dict(self):
        entry = SavedSearch.from_dict({"id": "1_abc", "keyword": "go", "jobType": None, "createdAt": "t"})
        assert entry == SavedSearch(id="1_abc", keyword="go", created_at="t")
        assert entry.to_dict()["jobType"] == ""


def test_paginated_result_set_flags():
    page = PaginatedResultSet(items=[], page=2, page_size=12, total_pages=3, total_items=30)
    assert page.has_next
    assert page.has_previous
