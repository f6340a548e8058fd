"""Wage tax (loonheffing) calculation over progressive brackets."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from dutch_payroll.calculators.rate_resolver import resolve_tax_profile
from dutch_payroll.calculators.rate_table import IncomeTaxBracket, RateTable
from dutch_payroll.calculators.types import (
    ZERO,
    BracketLine,
    EmployeeInput,
    IncomeTaxBreakdown,
    TaxProfile,
)

MONTHS_PER_YEAR = Decimal("12")


def round_to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def progressive_tax(
    annual_income: Decimal,
    brackets: Sequence[IncomeTaxBracket],
) -> tuple[Decimal, tuple[BracketLine, ...]]:
    """Marginal tax over ordered brackets, at full precision.

    Each bracket taxes the slice of income between the previous upper bound
    and its own; the final bracket has no upper bound.
    """
    if annual_income <= 0:
        return ZERO, ()

    total_tax = ZERO
    lines: list[BracketLine] = []
    lower = ZERO

    for index, bracket in enumerate(brackets, start=1):
        if annual_income <= lower:
            break

        upper = bracket.upto_annual_income
        top = annual_income if upper is None else min(annual_income, upper)
        taxable_in_bracket = top - lower
        if taxable_in_bracket > 0:
            tax = taxable_in_bracket * bracket.rate
            total_tax += tax
            lines.append(
                BracketLine(
                    bracket=index,
                    lower=lower,
                    upper=upper,
                    rate=bracket.rate,
                    income_in_bracket=taxable_in_bracket,
                    tax=tax,
                )
            )

        if upper is None:
            break
        lower = upper

    return total_tax, tuple(lines)


class IncomeTaxCalculator:
    """Calculates wage tax from a resolved tax profile.

    The profile already carries the bracket set, credit and any taxable-wage
    floor, so this class knows nothing about DGA, young-disabled or
    multiple-jobs rules.
    """

    def calculate(self, monthly_gross: Decimal, profile: TaxProfile) -> IncomeTaxBreakdown:
        annual_taxable = max(monthly_gross * MONTHS_PER_YEAR, profile.minimum_annual_income)
        tax_before_credit, lines = progressive_tax(annual_taxable, profile.brackets)

        credit_applied = min(profile.annual_credit, tax_before_credit)
        annual_tax = max(ZERO, tax_before_credit - profile.annual_credit)

        return IncomeTaxBreakdown(
            variant=profile.variant,
            annual_taxable_income=annual_taxable,
            brackets=lines,
            tax_before_credit=tax_before_credit,
            credit_applied=credit_applied,
            annual_tax=annual_tax,
            monthly_tax=annual_tax / MONTHS_PER_YEAR,
            adjustments=profile.adjustments,
        )

    def calculate_for_employee(
        self,
        employee: EmployeeInput,
        rate_table: RateTable,
        monthly_gross: Decimal | None = None,
        reference_date: date | None = None,
    ) -> IncomeTaxBreakdown:
        profile = resolve_tax_profile(employee, rate_table, reference_date)
        gross = employee.gross_monthly_salary if monthly_gross is None else monthly_gross
        return self.calculate(gross, profile)


def compute_income_tax(
    employee: EmployeeInput, rate_table: RateTable, reference_date: date | None = None
) -> Decimal:
    """Monthly wage tax for a full period, rounded to cents."""
    breakdown = IncomeTaxCalculator().calculate_for_employee(
        employee, rate_table, reference_date=reference_date
    )
    return round_to_cents(breakdown.monthly_tax)
