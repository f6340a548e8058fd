"""Employee social security contributions (AOW, WW, WIA, Zvw)."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from dutch_payroll.calculators.rate_table import ContributionRate, RateTable
from dutch_payroll.calculators.types import ZERO, ContributionBreakdown, ContributionLine

MONTHS_PER_YEAR = Decimal("12")

DESCRIPTIONS = {
    "aow": "AOW (Algemene Ouderdomswet)",
    "ww": "WW (Werkloosheidswet)",
    "wia": "WIA (Wet werk en inkomen naar arbeidsvermogen)",
    "zvw": "Zvw (Zorgverzekeringswet)",
}


def compute_contribution(annual_gross: Decimal, rate_entry: ContributionRate) -> Decimal:
    """Annual contribution: income is capped first, then the flat rate applies."""
    if annual_gross <= 0:
        return ZERO
    return min(annual_gross, rate_entry.max_annual_income) * rate_entry.rate


def contribution_line(
    name: str,
    annual_gross: Decimal,
    rate_entry: ContributionRate,
    exempt: bool = False,
) -> ContributionLine:
    """One capped flat-rate contribution, monthly amount rounded to cents."""
    if exempt:
        annual = ZERO
    else:
        annual = compute_contribution(annual_gross, rate_entry)

    return ContributionLine(
        name=name,
        rate=rate_entry.rate,
        max_annual_income=rate_entry.max_annual_income,
        applicable_annual_income=(
            ZERO if exempt else max(ZERO, min(annual_gross, rate_entry.max_annual_income))
        ),
        annual_amount=annual,
        monthly_amount=(annual / MONTHS_PER_YEAR).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        ),
    )


class SocialSecurityCalculator:
    """Computes the four employee contributions for one monthly period.

    Each monthly amount is rounded half-up to cents on its own; the total
    is the sum of the rounded amounts, so it always matches the payslip.
    """

    def calculate(
        self,
        monthly_gross: Decimal,
        rate_table: RateTable,
        aow_exempt: bool = False,
    ) -> ContributionBreakdown:
        annual_gross = monthly_gross * MONTHS_PER_YEAR
        lines = {
            name: contribution_line(
                name,
                annual_gross,
                rate_entry,
                exempt=(name == "aow" and aow_exempt),
            )
            for name, rate_entry in rate_table.contribution_rates().items()
        }
        return ContributionBreakdown(**lines)
