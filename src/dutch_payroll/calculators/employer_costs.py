"""Employer premiums (AWF, Aof, Zvw employer levy) and total employment cost.

Employer premiums come on top of gross salary. They are reported next to
the employee result and never reduce net pay.
"""

from __future__ import annotations

from decimal import Decimal

from dutch_payroll.calculators.rate_table import RateTable
from dutch_payroll.calculators.social_security import MONTHS_PER_YEAR, contribution_line
from dutch_payroll.calculators.types import ZERO, CompanyInput, EmployerCosts

DESCRIPTIONS = {
    "awf": "AWF (Algemeen Werkloosheidsfonds)",
    "aof": "Aof (Arbeidsongeschiktheidsfonds)",
    "zvw": "Zvw werkgeversheffing",
}


class EmployerCostCalculator:
    """Computes employer premiums for one monthly period.

    AWF and Aof rates follow the company's sector risk level; the Zvw
    employer levy is flat. All three are capped at their annual ceiling.
    """

    def calculate(
        self,
        monthly_gross: Decimal,
        rate_table: RateTable,
        company: CompanyInput,
        holiday_allowance_accrual: Decimal = ZERO,
    ) -> EmployerCosts | None:
        """Employer costs, or None when the table publishes no employer rates."""
        employer = rate_table.employer
        if employer is None:
            return None

        annual_gross = monthly_gross * MONTHS_PER_YEAR
        return EmployerCosts(
            awf=contribution_line("awf", annual_gross, employer.awf.for_level(company.awf_rate)),
            aof=contribution_line("aof", annual_gross, employer.aof.for_level(company.aof_rate)),
            zvw=contribution_line("zvw", annual_gross, employer.zvw),
            gross_salary=monthly_gross,
            holiday_allowance_accrual=holiday_allowance_accrual,
        )


def compute_employer_costs(
    monthly_gross: Decimal,
    rate_table: RateTable,
    company: CompanyInput | None = None,
    holiday_allowance_accrual: Decimal = ZERO,
) -> EmployerCosts | None:
    return EmployerCostCalculator().calculate(
        monthly_gross,
        rate_table,
        company if company is not None else CompanyInput(),
        holiday_allowance_accrual,
    )
