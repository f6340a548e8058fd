"""Rate table and tax variant resolution."""

from __future__ import annotations

from datetime import date

from dateutil.relativedelta import relativedelta

from dutch_payroll.calculators.rate_table import (
    RateTable,
    RateTableRegistry,
    get_default_registry,
)
from dutch_payroll.calculators.types import ZERO, EmployeeInput, TaxProfile, TaxTable
from dutch_payroll.exceptions import ValidationError


def age_on(date_of_birth: date, reference_date: date) -> int:
    """Age in whole years on the reference date."""
    return relativedelta(reference_date, date_of_birth).years


def normalize_tax_table(value: TaxTable | str) -> TaxTable:
    """Coerce a tax table name to ``TaxTable``."""
    if isinstance(value, TaxTable):
        return value
    try:
        return TaxTable(str(value).lower())
    except ValueError:
        raise ValidationError(
            "tax_table",
            "one_of",
            f"tax_table must be one of {[t.value for t in TaxTable]}, got {value!r}",
        ) from None


def has_reached_pension_age(
    employee: EmployeeInput, table: RateTable, reference_date: date
) -> bool:
    """Whether the employee has reached state pension age on the date."""
    return age_on(employee.date_of_birth, reference_date) >= table.eligibility.state_pension_age


def resolve_tax_profile(
    employee: EmployeeInput, table: RateTable, reference_date: date | None = None
) -> TaxProfile:
    """Select the bracket set and credit that apply to an employee.

    Rule order:
    1. ``tax_table`` picks the wit or groen bracket set; from state pension
       age on ``reference_date`` the pension-age set is used when the table
       publishes one
    2. ``has_multiple_jobs`` withholds the credit unless the table allows
       the credit with a second employer
    3. ``is_young_disabled`` adds the young-disabled credit when a credit applies
    4. ``is_dga`` floors the annual taxable wage at the usual DGA salary
    """
    variant = normalize_tax_table(employee.tax_table)
    rules = table.eligibility
    adjustments: list[str] = []

    pension_age = (
        reference_date is not None
        and table.has_pension_age_brackets
        and has_reached_pension_age(employee, table, reference_date)
    )
    if pension_age:
        adjustments.append("pension_age_brackets")

    credit_applies = not employee.has_multiple_jobs or rules.credit_with_multiple_jobs
    credit = employee.tax_credit if credit_applies else ZERO
    if not credit_applies:
        adjustments.append("credit_withheld_multiple_jobs")

    if employee.is_young_disabled and credit_applies:
        credit += rules.young_disabled_credit
        adjustments.append("young_disabled_credit")

    minimum_income = ZERO
    if employee.is_dga:
        minimum_income = rules.dga_usual_salary
        adjustments.append("dga_usual_salary")

    return TaxProfile(
        variant=variant,
        brackets=table.brackets_for(variant, pension_age=pension_age),
        annual_credit=credit,
        minimum_annual_income=minimum_income,
        adjustments=tuple(adjustments),
    )


class RateResolver:
    """Resolves rate tables and per-employee tax profiles.

    Tables come from a ``RateTableRegistry``; the packaged registry is used
    when none is given.
    """

    def __init__(self, registry: RateTableRegistry | None = None):
        self.registry = registry if registry is not None else get_default_registry()

    def resolve_table(self, year: int) -> RateTable:
        """Get the rate table for a tax year.

        Raises:
            RateTableNotFoundError: If no table exists for the year
        """
        return self.registry.get(year)

    def resolve_tax_profile(
        self, employee: EmployeeInput, table: RateTable, reference_date: date | None = None
    ) -> TaxProfile:
        return resolve_tax_profile(employee, table, reference_date)

    def is_aow_exempt(
        self, employee: EmployeeInput, table: RateTable, reference_date: date
    ) -> bool:
        """Whether the employee pays no AOW contribution on the date."""
        return has_reached_pension_age(employee, table, reference_date)
