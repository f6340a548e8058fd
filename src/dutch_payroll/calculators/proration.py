"""Pro-rata factors for partial employment periods.

The calendar-day method is the default: worked days are the calendar days
of the month that fall inside the employment interval. The working-day
method counts Monday-Friday days that are not Dutch public holidays and is
only used when explicitly requested.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from functools import lru_cache

from dateutil.easter import easter

from dutch_payroll.calculators.types import Period, ProRataMethod, ProRataResult
from dutch_payroll.exceptions import ValidationError


@lru_cache(maxsize=64)
def dutch_public_holidays(year: int) -> frozenset[date]:
    """National public holidays observed for payroll in a year."""
    easter_sunday = easter(year)
    kings_day = date(year, 4, 27)
    if kings_day.weekday() == 6:
        kings_day = date(year, 4, 26)

    return frozenset(
        {
            date(year, 1, 1),
            easter_sunday,
            easter_sunday + timedelta(days=1),
            kings_day,
            date(year, 5, 5),  # Liberation Day
            easter_sunday + timedelta(days=39),  # Ascension Day
            easter_sunday + timedelta(days=49),  # Whit Sunday
            easter_sunday + timedelta(days=50),  # Whit Monday
            date(year, 12, 25),
            date(year, 12, 26),
        }
    )


def is_working_day(day: date) -> bool:
    return day.weekday() < 5 and day not in dutch_public_holidays(day.year)


def working_days_between(start: date, end: date) -> int:
    """Count working days in ``[start, end]``, both inclusive."""
    if start > end:
        return 0
    return sum(
        1
        for offset in range((end - start).days + 1)
        if is_working_day(start + timedelta(days=offset))
    )


def effective_interval(
    period: Period,
    start: date | None = None,
    end: date | None = None,
) -> tuple[date, date]:
    """Intersection of the employment interval with the period.

    Raises:
        ValidationError: If start is after end or the employment does not
            overlap the period
    """
    if start is not None and end is not None and start > end:
        raise ValidationError(
            "employment_start_date",
            "before_end_date",
            f"Employment start {start} is after employment end {end}",
        )

    effective_start = max(start, period.first_day) if start else period.first_day
    effective_end = min(end, period.last_day) if end else period.last_day

    if effective_start > effective_end:
        raise ValidationError(
            "employment_start_date" if start and start > period.last_day else "employment_end_date",
            "overlaps_period",
            f"Employment does not overlap {period.year}-{period.month:02d}",
        )

    return effective_start, effective_end


def compute_pro_rata(
    period: Period,
    start: date | None = None,
    end: date | None = None,
    method: ProRataMethod = ProRataMethod.CALENDAR,
) -> ProRataResult:
    """Fraction of the period covered by employment.

    Defaults to the period's own employment dates when ``start`` / ``end``
    are not given.

    Raises:
        ValidationError: Under the working-day method, if the employment
            interval holds no working days.
    """
    start = start if start is not None else period.employment_start_date
    end = end if end is not None else period.employment_end_date
    method = ProRataMethod(method)

    effective_start, effective_end = effective_interval(period, start, end)

    if method == ProRataMethod.WORKING:
        total = working_days_between(period.first_day, period.last_day)
        worked = working_days_between(effective_start, effective_end)
        if worked == 0:
            raise ValidationError(
                "employment_start_date",
                "working_days_in_period",
                f"No working days in {period.year}-{period.month:02d} "
                f"between {effective_start} and {effective_end}",
            )
    else:
        total = period.total_days
        worked = (effective_end - effective_start).days + 1

    if worked == total:
        factor = Decimal("1")
    else:
        factor = Decimal(worked) / Decimal(total)

    return ProRataResult(
        factor=factor,
        working_days=worked,
        total_days=total,
        method=method,
        effective_start=effective_start,
        effective_end=effective_end,
    )


def daily_rate(gross_monthly: Decimal, period: Period) -> Decimal:
    """Calendar-day rate of a monthly salary."""
    return gross_monthly / Decimal(period.total_days)
