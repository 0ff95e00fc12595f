"""Tests for salary formatting and salary-bound filtering."""

from jobsearch.models import Salary
from jobsearch.salary import (
    NOT_SPECIFIED,
    format_amount,
    format_salary,
    salary_bounds,
    within_bounds,
)


class TestFormatSalary:
    def test_inr_range_in_lakhs(self):
        assert format_salary(Salary(500000, 1000000, "INR")) == "₹5.0L - ₹10.0L"

    def test_usd_range_in_thousands(self):
        assert format_salary(Salary(50000, 80000, "USD")) == "$50K - $80K"

    def test_other_currency_uses_dollar(self):
        assert format_salary(Salary(40000, 60000, "EUR")) == "$40K - $60K"
        assert format_salary(Salary(40000, 60000, "")) == "$40K - $60K"

    def test_min_only(self):
        assert format_salary(Salary(750000, None, "INR")) == "₹7.5L+"
        assert format_salary(Salary(90000, 0, "USD")) == "$90K+"

    def test_not_specified(self):
        assert format_salary(Salary(0, 0)) == NOT_SPECIFIED
        assert format_salary(None) == NOT_SPECIFIED
        assert format_salary(Salary(None, 120000, "USD")) == NOT_SPECIFIED

    def test_string_passes_through(self):
        assert format_salary("As per industry standards") == "As per industry standards"

    def test_halves_round_up(self):
        assert format_salary(Salary(12500, 20500, "USD")) == "$13K - $21K"
        assert format_salary(Salary(125000, None, "INR")) == "₹1.3L+"
        assert format_amount(1049999, "INR") == "₹10.5L"
        assert format_amount(80499, "USD") == "$80K"

    def test_format_amount(self):
        assert format_amount(1250000, "inr") == "₹12.5L"
        assert format_amount(120000, "USD") == "$120K"


class TestBounds:
    def test_salary_bounds_default_to_zero(self):
        assert salary_bounds(None) == (0, 0)
        assert salary_bounds("Negotiable") == (0, 0)
        assert salary_bounds(Salary(300000, None, "INR")) == (300000, 0)

    def test_min_bound(self):
        assert within_bounds(Salary(600000, 900000, "INR"), bound_min=500000)
        assert not within_bounds(Salary(400000, 900000, "INR"), bound_min=500000)

    def test_max_bound(self):
        assert within_bounds(Salary(400000, 900000, "INR"), bound_max=1000000)
        assert not within_bounds(Salary(400000, 1200000, "INR"), bound_max=1000000)

    def test_missing_salary_fails_positive_min(self):
        assert not within_bounds(None, bound_min=1)

    def test_missing_salary_passes_any_max(self):
        assert within_bounds(None, bound_max=500000)
        assert within_bounds(None, bound_max=0)

    def test_no_bounds(self):
        assert within_bounds(None)
