"""Salary display and salary-bound filtering.

INR amounts are shown in lakhs (``₹5.0L``), everything else in thousands
(``$50K``). Free-text salaries pass through untouched.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from jobsearch.models import Salary

NOT_SPECIFIED = "Salary not specified"

LAKH = Decimal(100_000)
THOUSAND = Decimal(1_000)
ONE_PLACE = Decimal("0.1")
WHOLE = Decimal("1")


def currency_symbol(currency: Optional[str]) -> str:
    return "₹" if (currency or "").upper() == "INR" else "$"


def format_amount(amount: float, currency: Optional[str]) -> str:
    """One amount with symbol and magnitude suffix, e.g. ``₹5.0L`` or ``$80K``.

    Halves round up ($12,500 is ``$13K``), not to even.
    """
    symbol = currency_symbol(currency)
    if (currency or "").upper() == "INR":
        return f"{symbol}{_scaled(amount, LAKH, ONE_PLACE)}L"
    return f"{symbol}{_scaled(amount, THOUSAND, WHOLE)}K"


def _scaled(amount: float, unit: Decimal, places: Decimal) -> str:
    value = (Decimal(str(amount)) / unit).quantize(places, rounding=ROUND_HALF_UP)
    return format(value, "f")


def format_salary(salary: Union[Salary, str, None]) -> str:
    """Human-readable salary, or ``"Salary not specified"``."""
    if isinstance(salary, str):
        return salary
    if salary is None:
        return NOT_SPECIFIED

    if salary.min and salary.max:
        low = format_amount(salary.min, salary.currency)
        high = format_amount(salary.max, salary.currency)
        return f"{low} - {high}"
    if salary.min:
        return f"{format_amount(salary.min, salary.currency)}+"
    return NOT_SPECIFIED


def salary_bounds(salary: Union[Salary, str, None]) -> tuple[float, float]:
    """``(min, max)`` used for filtering and sorting; missing parts count as 0."""
    if isinstance(salary, Salary):
        return salary.min or 0, salary.max or 0
    return 0, 0


def within_bounds(
    salary: Union[Salary, str, None],
    bound_min: Optional[float] = None,
    bound_max: Optional[float] = None,
) -> bool:
    """Whether a salary satisfies the filter bounds.

    Missing amounts count as 0, so a record without a salary fails any
    positive lower bound and passes any upper bound. This is the intended
    behaviour of the filter for now.
    """
    low, high = salary_bounds(salary)
    if bound_min is not None and low < bound_min:
        return False
    if bound_max is not None and high > bound_max:
        return False
    return True
