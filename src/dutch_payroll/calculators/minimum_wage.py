"""Statutory minimum wage checks.

The engine only reports a shortfall as a warning; a salary below the
minimum is never rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from dutch_payroll.calculators.rate_resolver import age_on
from dutch_payroll.calculators.rate_table import RateTable
from dutch_payroll.calculators.types import ZERO

ADULT_AGE = 21
MINIMUM_AGE = 15
WEEKS_PER_YEAR = Decimal("52")
MONTHS_PER_YEAR = Decimal("12")


@dataclass(frozen=True)
class MinimumWageCheck:
    """Applicable minimum wage for an employee on a reference date."""

    age: int
    category: str  # "adult", "youth" or "none"
    hourly: Decimal
    monthly: Decimal
    percentage: Decimal = Decimal("100")
    gross_monthly: Decimal | None = None

    @property
    def is_compliant(self) -> bool:
        if self.gross_monthly is None:
            return True
        return self.gross_monthly >= self.monthly

    @property
    def shortfall(self) -> Decimal:
        if self.gross_monthly is None:
            return ZERO
        return max(ZERO, self.monthly - self.gross_monthly)


def monthly_minimum(hourly: Decimal, hours_per_week: Decimal) -> Decimal:
    """Hourly rate x weekly hours x 52 weeks / 12 months, rounded to cents."""
    return (hourly * hours_per_week * WEEKS_PER_YEAR / MONTHS_PER_YEAR).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )


def minimum_wage_for(
    date_of_birth: date,
    reference_date: date,
    table: RateTable,
    hours_per_week: Decimal | None = None,
) -> MinimumWageCheck:
    """Minimum wage by age; youth rates are a percentage of the adult rate.

    Monthly amounts are for ``hours_per_week``, the table's full-time week
    when not given.
    """
    age = age_on(date_of_birth, reference_date)
    if hours_per_week is None:
        hours_per_week = table.minimum_wage.full_time_hours_per_week
    adult_hourly = table.minimum_wage.hourly

    if age >= ADULT_AGE:
        return MinimumWageCheck(
            age=age,
            category="adult",
            hourly=adult_hourly,
            monthly=monthly_minimum(adult_hourly, hours_per_week),
        )

    percentage = table.minimum_wage.youth_percentages.get(age)
    if age < MINIMUM_AGE or percentage is None:
        return MinimumWageCheck(
            age=age, category="none", hourly=ZERO, monthly=ZERO, percentage=ZERO
        )

    hourly = (adult_hourly * percentage / Decimal("100")).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )
    return MinimumWageCheck(
        age=age,
        category="youth",
        hourly=hourly,
        monthly=monthly_minimum(hourly, hours_per_week),
        percentage=percentage,
    )


def check_minimum_wage(
    gross_monthly: Decimal,
    date_of_birth: date,
    reference_date: date,
    table: RateTable,
    hours_per_week: Decimal | None = None,
) -> MinimumWageCheck:
    """Compare a monthly salary with the applicable minimum."""
    check = minimum_wage_for(date_of_birth, reference_date, table, hours_per_week)
    return MinimumWageCheck(
        age=check.age,
        category=check.category,
        hourly=check.hourly,
        monthly=check.monthly,
        percentage=check.percentage,
        gross_monthly=gross_monthly,
    )
