"""Type definitions for calculation pipeline."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any
from uuid import UUID

ZERO = Decimal("0")


class TaxTable(str, Enum):
    """Wage-tax table the employee is taxed under."""

    WIT = "wit"  # Standard table
    GROEN = "groen"  # Special table


class CompanySize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class SectorRiskLevel(str, Enum):
    """AWF/AOF premium level of the employer's sector."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ProRataMethod(str, Enum):
    """How the worked fraction of a month is measured."""

    CALENDAR = "calendar"
    WORKING = "working"


class TaxProrationPolicy(str, Enum):
    """Ordering of tax computation and pro-ration for partial periods."""

    # Annualize nominal salary, compute tax, then scale the monthly tax.
    PRORATE_RESULT = "prorate_result"
    # Annualize the pro-rated salary and compute tax on that directly.
    ANNUALIZE_EFFECTIVE_GROSS = "annualize_effective_gross"


class LineType(str, Enum):
    """Payslip line item types."""

    EARNING = "EARNING"
    TAX = "TAX"
    CONTRIBUTION = "CONTRIBUTION"
    ACCRUAL = "ACCRUAL"  # Disclosure only, never part of net


# ============================================================================
# Inputs
# ============================================================================


@dataclass(frozen=True)
class EmployeeInput:
    """Employee data needed for one calculation."""

    gross_monthly_salary: Decimal
    date_of_birth: date
    tax_table: TaxTable | str = TaxTable.WIT
    tax_credit: Decimal = ZERO  # Annual loonheffingskorting
    is_dga: bool = False
    is_young_disabled: bool = False
    has_multiple_jobs: bool = False

    # Identity, validated but never used in computation
    bsn: str | None = None
    employee_id: str | None = None

    # Only used for minimum-wage warnings
    contract_hours_per_week: Decimal = Decimal("40")


@dataclass(frozen=True)
class CompanyInput:
    """Employer data needed for one calculation."""

    size: CompanySize | str = CompanySize.MEDIUM
    sector: str = "general"
    awf_rate: SectorRiskLevel | str = SectorRiskLevel.LOW
    aof_rate: SectorRiskLevel | str = SectorRiskLevel.LOW

    # Identity, validated but never used in computation
    kvk_number: str | None = None
    loonheffingennummer: str | None = None
    rsin: str | None = None


@dataclass(frozen=True)
class Period:
    """A monthly pay period, optionally bounded by employment dates."""

    year: int
    month: int
    employment_start_date: date | None = None
    employment_end_date: date | None = None

    @property
    def total_days(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, self.total_days)


# ============================================================================
# Intermediate results
# ============================================================================


@dataclass(frozen=True)
class ContributionLine:
    """One statutory contribution, flat rate up to an income ceiling."""

    name: str
    rate: Decimal
    max_annual_income: Decimal
    applicable_annual_income: Decimal
    annual_amount: Decimal  # Full precision
    monthly_amount: Decimal  # Rounded to cents


@dataclass(frozen=True)
class ContributionBreakdown:
    """Employee social security contributions for one period."""

    aow: ContributionLine
    ww: ContributionLine
    wia: ContributionLine
    zvw: ContributionLine

    @property
    def lines(self) -> tuple[ContributionLine, ...]:
        return (self.aow, self.ww, self.wia, self.zvw)

    @property
    def total(self) -> Decimal:
        return sum((line.monthly_amount for line in self.lines), ZERO)


@dataclass(frozen=True)
class BracketLine:
    """Tax levied within one income-tax bracket."""

    bracket: int
    lower: Decimal
    upper: Decimal | None
    rate: Decimal
    income_in_bracket: Decimal
    tax: Decimal


@dataclass(frozen=True)
class TaxProfile:
    """Bracket set and credit selected for an employee.

    Produced by the rate resolver so the bracket walk never needs to know
    about DGA, young-disabled or multiple-jobs policy.
    """

    variant: TaxTable
    brackets: tuple[Any, ...]  # IncomeTaxBracket
    annual_credit: Decimal = ZERO
    minimum_annual_income: Decimal = ZERO
    adjustments: tuple[str, ...] = ()


@dataclass(frozen=True)
class IncomeTaxBreakdown:
    """Annual and monthly wage tax with per-bracket detail."""

    variant: TaxTable
    annual_taxable_income: Decimal
    brackets: tuple[BracketLine, ...]
    tax_before_credit: Decimal
    credit_applied: Decimal
    annual_tax: Decimal
    monthly_tax: Decimal  # Unrounded
    adjustments: tuple[str, ...] = ()

    @property
    def rounded_monthly_tax(self) -> Decimal:
        return self.monthly_tax.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class HolidayAllowance:
    """Accrued holiday allowance (vakantiegeld) for disclosure."""

    rate: Decimal
    annual_accrual: Decimal
    monthly_equivalent: Decimal


@dataclass(frozen=True)
class EmployerCosts:
    """Employer premiums and total employment cost of one period.

    Reported beside the employee result; nothing here is deducted from net.
    """

    awf: ContributionLine
    aof: ContributionLine
    zvw: ContributionLine
    gross_salary: Decimal
    holiday_allowance_accrual: Decimal

    @property
    def lines(self) -> tuple[ContributionLine, ...]:
        return (self.awf, self.aof, self.zvw)

    @property
    def total_contributions(self) -> Decimal:
        return sum((line.monthly_amount for line in self.lines), ZERO)

    @property
    def total_cost(self) -> Decimal:
        return self.gross_salary + self.total_contributions + self.holiday_allowance_accrual


@dataclass(frozen=True)
class ProRataResult:
    """Fraction of a period actually worked."""

    factor: Decimal
    working_days: int
    total_days: int
    method: ProRataMethod = ProRataMethod.CALENDAR
    effective_start: date | None = None
    effective_end: date | None = None

    @property
    def is_partial(self) -> bool:
        return self.factor < 1


@dataclass(frozen=True)
class PayslipLine:
    """A signed payslip line."""

    line_type: LineType
    code: str
    description: str
    amount: Decimal

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict for hashing (deterministic ordering)."""
        return {
            "line_type": self.line_type.value,
            "code": self.code,
            "description": self.description,
            "amount": str(self.amount),
        }


# ============================================================================
# Final result
# ============================================================================


@dataclass(frozen=True)
class PayrollResult:
    """Immutable outcome of calculating one employee for one period.

    ``net_monthly_salary`` always equals ``gross_monthly_salary`` minus
    income tax and the four contributions; holiday allowance and employer
    costs are reported alongside and never netted.
    """

    calculation_id: UUID
    employee_id: str | None
    tax_year: int
    month: int
    rate_table_version: str
    contractual_gross_monthly_salary: Decimal
    gross_monthly_salary: Decimal
    net_monthly_salary: Decimal
    contributions: ContributionBreakdown
    income_tax: Decimal
    tax_breakdown: IncomeTaxBreakdown
    holiday_allowance: HolidayAllowance
    pro_rata: ProRataResult
    tax_proration_policy: TaxProrationPolicy
    lines: tuple[PayslipLine, ...] = ()
    warnings: tuple[str, ...] = ()
    employer_costs: EmployerCosts | None = None

    @property
    def aow_contribution(self) -> Decimal:
        return self.contributions.aow.monthly_amount

    @property
    def ww_contribution(self) -> Decimal:
        return self.contributions.ww.monthly_amount

    @property
    def wia_contribution(self) -> Decimal:
        return self.contributions.wia.monthly_amount

    @property
    def zvw_contribution(self) -> Decimal:
        return self.contributions.zvw.monthly_amount

    @property
    def total_contributions(self) -> Decimal:
        return self.contributions.total

    @property
    def holiday_allowance_gross(self) -> HolidayAllowance:
        return self.holiday_allowance

    @property
    def pro_rata_factor(self) -> Decimal:
        return self.pro_rata.factor

    @property
    def working_days_in_period(self) -> int:
        return self.pro_rata.working_days

    @property
    def total_days_in_period(self) -> int:
        return self.pro_rata.total_days

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

