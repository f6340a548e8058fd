"""Holiday allowance (vakantiegeld) accrual, reserve schedule and vacation days.

Holiday allowance is disclosed on the payslip as an accrual. It is never
netted into the monthly salary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from dutch_payroll.calculators.rate_table import RateTable
from dutch_payroll.calculators.types import ZERO, HolidayAllowance
from dutch_payroll.exceptions import ValidationError

MONTHS_PER_YEAR = Decimal("12")
DEFAULT_PAYOUT_MONTH = 5  # May
STATUTORY_VACATION_WEEKS = Decimal("4")
WORKING_DAYS_PER_WEEK = Decimal("5")


def _two_decimals(amount: Decimal) -> Decimal:
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def compute_holiday_allowance(
    gross_monthly: Decimal,
    rate_table: RateTable,
    pro_rata_factor: Decimal = Decimal("1"),
) -> HolidayAllowance:
    """Annual accrual and its monthly equivalent, rounded to cents."""
    rate = rate_table.holiday_allowance_rate
    annual = gross_monthly * MONTHS_PER_YEAR * rate * pro_rata_factor
    return HolidayAllowance(
        rate=rate,
        annual_accrual=_two_decimals(annual),
        monthly_equivalent=_two_decimals(annual / MONTHS_PER_YEAR),
    )


@dataclass(frozen=True)
class HolidayReserveEntry:
    """One month of the holiday allowance reserve."""

    month: int
    reserved: Decimal
    paid: Decimal
    balance: Decimal
    is_payout_month: bool


def holiday_allowance_schedule(
    gross_monthly: Decimal,
    rate_table: RateTable,
    payout_month: int = DEFAULT_PAYOUT_MONTH,
) -> tuple[HolidayReserveEntry, ...]:
    """Month-by-month reserve for a year of full-time employment.

    The reserve builds up by the monthly equivalent, is paid out in full in
    the payout month and starts building again the month after.

    Raises:
        ValidationError: If ``payout_month`` is not a calendar month
    """
    if not 1 <= payout_month <= 12:
        raise ValidationError(
            "payout_month", "range", f"payout_month must be between 1 and 12, got {payout_month}"
        )

    monthly = compute_holiday_allowance(gross_monthly, rate_table).monthly_equivalent
    entries: list[HolidayReserveEntry] = []
    balance = ZERO

    for month in range(1, 13):
        balance += monthly
        paid = ZERO
        if month == payout_month:
            paid = balance
            balance = ZERO
        entries.append(
            HolidayReserveEntry(
                month=month,
                reserved=monthly,
                paid=paid,
                balance=balance,
                is_payout_month=month == payout_month,
            )
        )

    return tuple(entries)


@dataclass(frozen=True)
class VacationDays:
    """Vacation day entitlement and balance through a month, in days."""

    statutory_days: Decimal  # Per full year
    contract_days: Decimal  # Per full year, never below statutory
    annual_entitlement: Decimal  # For the months employed this year
    monthly_accrual: Decimal
    earned_to_date: Decimal
    used: Decimal
    remaining: Decimal


def statutory_vacation_days(contract_hours_per_week: Decimal, rate_table: RateTable) -> Decimal:
    """Four times the working days per week, scaled to the contract hours."""
    full_time_hours = rate_table.minimum_wage.full_time_hours_per_week
    return (
        STATUTORY_VACATION_WEEKS
        * WORKING_DAYS_PER_WEEK
        * Decimal(contract_hours_per_week)
        / full_time_hours
    )


def compute_vacation_days(
    contract_hours_per_week: Decimal,
    rate_table: RateTable,
    month: int,
    contract_days: Decimal | None = None,
    employment_start_date: date | None = None,
    used: Decimal = ZERO,
) -> VacationDays:
    """Vacation days earned in ``rate_table``'s year through ``month``.

    Days accrue evenly per month of employment. A start during the year
    counts from the start month; an earlier start counts the whole year.

    Raises:
        ValidationError: If an argument is out of range or employment
            starts after the table's year
    """
    if not 1 <= month <= 12:
        raise ValidationError("month", "range", f"month must be between 1 and 12, got {month}")
    if contract_hours_per_week <= 0:
        raise ValidationError(
            "contract_hours_per_week",
            "positive",
            f"contract_hours_per_week must be positive, got {contract_hours_per_week}",
        )
    if used < 0:
        raise ValidationError("used", "non_negative", f"used must not be negative, got {used}")

    year = rate_table.year
    first_month = 1
    if employment_start_date is not None:
        if employment_start_date.year > year:
            raise ValidationError(
                "employment_start_date",
                "overlaps_period",
                f"Employment starting {employment_start_date} has no days in {year}",
            )
        if employment_start_date.year == year:
            first_month = employment_start_date.month

    statutory = statutory_vacation_days(contract_hours_per_week, rate_table)
    entitled = statutory if contract_days is None else max(Decimal(contract_days), statutory)
    per_month = entitled / MONTHS_PER_YEAR
    months_employed = 12 - first_month + 1
    months_to_date = max(0, month - first_month + 1)
    earned = _two_decimals(per_month * months_to_date)

    return VacationDays(
        statutory_days=_two_decimals(statutory),
        contract_days=_two_decimals(entitled),
        annual_entitlement=_two_decimals(per_month * months_employed),
        monthly_accrual=_two_decimals(per_month),
        earned_to_date=earned,
        used=used,
        remaining=earned - used,
    )
