"""Tests for sorting, date parsing and pagination."""

from datetime import datetime, timedelta, timezone

import pytest

from jobsearch.models import JobRecord, Salary
from jobsearch.sorting import (
    EPOCH,
    SORT_KEYS,
    paginate,
    parse_posted_date,
    posted_at,
    sort_jobs,
    total_pages,
)


def _job(job_id, **kwargs):
    return JobRecord(id=job_id, **kwargs)


@pytest.fixture
def jobs():
    return [
        _job("a", company="beta", posted_date="2026-01-10", salary=Salary(300000, 500000, "INR")),
        _job("b", company="Alpha", posted_date="2026-02-01", salary=Salary(800000, 900000, "INR")),
        _job("c", company="gamma", posted_date=None, salary=None),
        _job("d", company="alpha", posted_date="2026-01-20", salary=Salary(100000, 900000, "INR")),
    ]


class TestParsePostedDate:
    def test_iso_date(self):
        assert parse_posted_date("2026-02-01") == datetime(2026, 2, 1, tzinfo=timezone.utc)

    def test_iso_datetime_with_z(self):
        parsed = parse_posted_date("2026-02-01T10:30:00Z")
        assert parsed == datetime(2026, 2, 1, 10, 30, tzinfo=timezone.utc)

    def test_iso_datetime_with_offset(self):
        parsed = parse_posted_date("2026-02-01T10:30:00+0530")
        assert parsed.utcoffset() == timedelta(hours=5, minutes=30)

    def test_iso_fractional_seconds_and_space_separator(self):
        expected = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert parse_posted_date("2024-01-15 10:30:00") == expected
        parsed = parse_posted_date("2024-01-15T10:30:00.123456")
        assert parsed == expected.replace(microsecond=123456)

    def test_fractional_timestamp_sorts_by_date(self):
        older = _job("old", posted_date="2024-01-15T10:30:00.123456")
        newer = _job("new", posted_date="2024-02-01 08:00:00")
        assert [j.id for j in sort_jobs([older, newer, _job("none")], "newest")] == ["new", "old", "none"]

    def test_month_name(self):
        assert parse_posted_date("Feb 1, 2026") == datetime(2026, 2, 1, tzinfo=timezone.utc)

    def test_relative(self):
        now = datetime.now(timezone.utc)
        parsed = parse_posted_date("3 days ago")
        assert abs((now - parsed) - timedelta(days=3)) < timedelta(minutes=1)
        assert parse_posted_date("Posted today") is not None
        assert parse_posted_date("yesterday") < now

    def test_unparseable(self):
        assert parse_posted_date("sometime soon") is None
        assert parse_posted_date("") is None
        assert parse_posted_date(None) is None

    def test_missing_date_is_epoch(self):
        assert posted_at(_job("x")) == EPOCH


class TestSortJobs:
    def test_newest(self, jobs):
        assert [j.id for j in sort_jobs(jobs, "newest")] == ["b", "d", "a", "c"]

    def test_oldest(self, jobs):
        assert [j.id for j in sort_jobs(jobs, "oldest")] == ["c", "a", "d", "b"]

    def test_salary_high_is_stable(self, jobs):
        # b and d tie on max salary and keep their input order
        assert [j.id for j in sort_jobs(jobs, "salary-high")] == ["b", "d", "a", "c"]

    def test_salary_low(self, jobs):
        assert [j.id for j in sort_jobs(jobs, "salary-low")] == ["c", "d", "a", "b"]

    def test_company_az_ignores_case(self, jobs):
        assert [j.id for j in sort_jobs(jobs, "company-az")] == ["b", "d", "a", "c"]

    def test_relevant_keeps_order(self, jobs):
        assert sort_jobs(jobs, "relevant") == jobs

    def test_returns_new_list(self, jobs):
        before = list(jobs)
        sort_jobs(jobs, "oldest")
        assert jobs == before

    def test_unknown_key(self, jobs):
        with pytest.raises(ValueError, match="Unknown sort key"):
            sort_jobs(jobs, "popular")

    def test_sort_keys(self):
        assert SORT_KEYS[0] == "newest"
        assert "company-az" in SORT_KEYS


class TestPaginate:
    @pytest.fixture
    def many(self):
        return [_job(str(i)) for i in range(25)]

    def test_total_pages(self):
        assert total_pages(25, 12) == 3
        assert total_pages(24, 12) == 2
        assert total_pages(0, 12) == 0

    def test_first_page(self, many):
        page = paginate(many, 1, 12)
        assert [j.id for j in page.items] == [str(i) for i in range(12)]
        assert page.total_pages == 3
        assert page.total_items == 25
        assert page.has_next
        assert not page.has_previous

    def test_last_page(self, many):
        page = paginate(many, 3, 12)
        assert [j.id for j in page.items] == ["24"]
        assert not page.has_next
        assert page.has_previous

    def test_out_of_range_is_empty(self, many):
        assert paginate(many, 4, 12).items == []
        assert paginate(many, 0, 12).items == []
        assert paginate(many, -1, 12).items == []

    def test_empty_collection(self):
        page = paginate([], 1)
        assert page.items == []
        assert page.total_pages == 0

    def test_bad_page_size(self, many):
        with pytest.raises(ValueError):
            paginate(many, 1, 0)
