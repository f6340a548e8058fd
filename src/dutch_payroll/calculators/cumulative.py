"""Year-to-date (cumulative) payroll totals.

Totals are a pure fold over per-period results:
    Cumulative(y, m) = Cumulative(y, m - 1) + Result(y, m)
Nothing here reads or writes storage; callers pass the history in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from decimal import Decimal
from typing import Iterable, Sequence

from dutch_payroll.calculators.types import ZERO, PayrollResult
from dutch_payroll.exceptions import ValidationError

logger = logging.getLogger(__name__)

AMOUNT_FIELDS = (
    "gross_salary",
    "net_salary",
    "aow",
    "ww",
    "wia",
    "zvw",
    "income_tax",
    "holiday_allowance_accrued",
)


@dataclass(frozen=True)
class CumulativeTotals:
    """Year-to-date sums through ``through_month`` (0 = nothing yet).

    ``employee_id`` is taken from the first result folded in; every later
    result must belong to the same employee.
    """

    tax_year: int
    employee_id: str | None = None
    through_month: int = 0
    periods: int = 0
    gross_salary: Decimal = ZERO
    net_salary: Decimal = ZERO
    aow: Decimal = ZERO
    ww: Decimal = ZERO
    wia: Decimal = ZERO
    zvw: Decimal = ZERO
    income_tax: Decimal = ZERO
    holiday_allowance_accrued: Decimal = ZERO
    working_days: int = 0

    @classmethod
    def empty(cls, tax_year: int, employee_id: str | None = None) -> CumulativeTotals:
        return cls(tax_year=tax_year, employee_id=employee_id)

    @property
    def total_contributions(self) -> Decimal:
        return self.aow + self.ww + self.wia + self.zvw

    def as_dict(self) -> dict[str, object]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _result_amounts(result: PayrollResult) -> dict[str, Decimal]:
    return {
        "gross_salary": result.gross_monthly_salary,
        "net_salary": result.net_monthly_salary,
        "aow": result.aow_contribution,
        "ww": result.ww_contribution,
        "wia": result.wia_contribution,
        "zvw": result.zvw_contribution,
        "income_tax": result.income_tax,
        "holiday_allowance_accrued": result.holiday_allowance.monthly_equivalent,
    }


def accumulate(prior: CumulativeTotals, current: PayrollResult) -> CumulativeTotals:
    """Add one period's result to the prior totals.

    Raises:
        ValidationError: If the result belongs to another tax year or does
            not come after the prior totals' last month, or if it belongs
            to another employee
    """
    if (prior.periods or prior.employee_id is not None) and (
        current.employee_id != prior.employee_id
    ):
        raise ValidationError(
            "employee_id",
            "same_employee",
            f"Cannot add a result for employee {current.employee_id} to totals of "
            f"employee {prior.employee_id}",
        )
    if current.tax_year != prior.tax_year:
        raise ValidationError(
            "tax_year",
            "same_tax_year",
            f"Cannot add a {current.tax_year} result to {prior.tax_year} totals",
        )
    if current.month <= prior.through_month:
        raise ValidationError(
            "month",
            "after_through_month",
            f"Month {current.month} does not follow month {prior.through_month}",
        )

    amounts = _result_amounts(current)
    return replace(
        prior,
        employee_id=current.employee_id,
        through_month=current.month,
        periods=prior.periods + 1,
        working_days=prior.working_days + current.working_days_in_period,
        **{name: getattr(prior, name) + amounts[name] for name in AMOUNT_FIELDS},
    )


def _ordered(results: Iterable[PayrollResult]) -> list[PayrollResult]:
    return sorted(results, key=lambda r: (r.tax_year, r.month))


def _tax_year(results: Sequence[PayrollResult], tax_year: int | None) -> int:
    if tax_year is not None:
        return tax_year
    if not results:
        raise ValidationError(
            "tax_year", "required", "tax_year is required when there is no history"
        )
    return results[0].tax_year


def cumulative_series(
    results: Iterable[PayrollResult], tax_year: int | None = None
) -> tuple[CumulativeTotals, ...]:
    """Running totals after each period, in month order."""
    ordered = _ordered(results)
    totals = CumulativeTotals.empty(_tax_year(ordered, tax_year))
    series: list[CumulativeTotals] = []
    for result in ordered:
        totals = accumulate(totals, result)
        series.append(totals)
    return tuple(series)


def cumulative_from_history(
    results: Iterable[PayrollResult], tax_year: int | None = None
) -> CumulativeTotals:
    """Totals over every given period of one tax year."""
    ordered = _ordered(results)
    year = _tax_year(ordered, tax_year)
    series = cumulative_series(ordered, year)
    return series[-1] if series else CumulativeTotals.empty(year)


def recompute_from(
    history: Iterable[PayrollResult], correction: PayrollResult
) -> tuple[CumulativeTotals, ...]:
    """Replace one month's result and rebuild the running totals.

    Totals before the corrected month are unchanged; every later month is
    rebuilt on top of the corrected figure.
    """
    ordered = _ordered(history)
    if ordered and ordered[0].tax_year != correction.tax_year:
        raise ValidationError(
            "tax_year",
            "same_tax_year",
            f"Correction for {correction.tax_year} does not match history year "
            f"{ordered[0].tax_year}",
        )

    before = [r for r in ordered if r.month < correction.month]
    after = [r for r in ordered if r.month > correction.month]

    series = list(cumulative_series(before, correction.tax_year))
    totals = series[-1] if series else CumulativeTotals.empty(correction.tax_year)
    for result in [correction, *after]:
        totals = accumulate(totals, result)
        series.append(totals)

    logger.debug(
        "Recomputed cumulative totals from %s-%02d (%d periods)",
        correction.tax_year,
        correction.month,
        len(series),
    )
    return tuple(series)


def reconcile(
    stored: CumulativeTotals,
    results: Iterable[PayrollResult],
    tolerance: Decimal = Decimal("0.01"),
) -> list[str]:
    """Compare stored totals with totals recomputed from results.

    Returns list of discrepancy messages (empty if consistent).
    """
    ordered = [r for r in _ordered(results) if r.month <= stored.through_month]
    recomputed = cumulative_from_history(ordered, stored.tax_year)
    discrepancies: list[str] = []

    if stored.periods and stored.employee_id != recomputed.employee_id:
        discrepancies.append(
            f"employee_id: stored {stored.employee_id}, recomputed {recomputed.employee_id}"
        )

    if stored.periods != recomputed.periods:
        discrepancies.append(
            f"periods: stored {stored.periods}, recomputed {recomputed.periods}"
        )

    for name in AMOUNT_FIELDS:
        expected = getattr(recomputed, name)
        actual = getattr(stored, name)
        if abs(expected - actual) > tolerance:
            discrepancies.append(
                f"{name}: stored {actual}, recomputed {expected} "
                f"(difference {actual - expected})"
            )

    if discrepancies:
        logger.warning(
            "Cumulative totals for %s through month %s have %d discrepancies",
            stored.tax_year,
            stored.through_month,
            len(discrepancies),
        )
    return discrepancies
