"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from dutch_payroll.calculators.cumulative import CumulativeTotals
from dutch_payroll.calculators.line_builder import LineItemBuilder
from dutch_payroll.calculators.types import (
    CompanyInput,
    CompanySize,
    EmployeeInput,
    EmployerCosts,
    PayrollResult,
    Period,
    SectorRiskLevel,
    TaxTable,
)


# ============================================================================
# Calculation request schemas
# ============================================================================


class EmployeeSchema(BaseModel):
    """Employee data for a calculation."""

    gross_monthly_salary: Decimal = Field(gt=0)
    date_of_birth: date
    tax_table: TaxTable = TaxTable.WIT
    tax_credit: Decimal = Field(default=Decimal("0"), ge=0)
    is_dga: bool = False
    is_young_disabled: bool = False
    has_multiple_jobs: bool = False
    bsn: str | None = None
    employee_id: str | None = None
    contract_hours_per_week: Decimal = Field(default=Decimal("40"), gt=0)

    def to_input(self) -> EmployeeInput:
        return EmployeeInput(**self.model_dump())


class CompanySchema(BaseModel):
    """Employer data for a calculation."""

    size: CompanySize = CompanySize.MEDIUM
    sector: str = "general"
    awf_rate: SectorRiskLevel = SectorRiskLevel.LOW
    aof_rate: SectorRiskLevel = SectorRiskLevel.LOW
    kvk_number: str | None = None
    loonheffingennummer: str | None = None
    rsin: str | None = None

    def to_input(self) -> CompanyInput:
        return CompanyInput(**self.model_dump())


class PeriodSchema(BaseModel):
    """Monthly pay period."""

    year: int
    month: int = Field(ge=1, le=12)
    employment_start_date: date | None = None
    employment_end_date: date | None = None

    def to_input(self) -> Period:
        return Period(**self.model_dump())


class CalculateRequest(BaseModel):
    """Schema for calculating one employee for one period."""

    employee: EmployeeSchema
    company: CompanySchema = Field(default_factory=CompanySchema)
    period: PeriodSchema


class CumulativeRequest(BaseModel):
    """Schema for year-to-date totals over a series of periods."""

    periods: list[CalculateRequest] = Field(min_length=1)


# ============================================================================
# Calculation result schemas
# ============================================================================


class ContributionLineResponse(BaseModel):
    """Schema for one social security contribution."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    rate: Decimal
    max_annual_income: Decimal
    applicable_annual_income: Decimal
    annual_amount: Decimal
    monthly_amount: Decimal


class BracketLineResponse(BaseModel):
    """Schema for tax levied in one bracket."""

    model_config = ConfigDict(from_attributes=True)

    bracket: int
    lower: Decimal
    upper: Decimal | None = None
    rate: Decimal
    income_in_bracket: Decimal
    tax: Decimal


class TaxBreakdownResponse(BaseModel):
    """Schema for the wage tax breakdown."""

    model_config = ConfigDict(from_attributes=True)

    variant: TaxTable
    annual_taxable_income: Decimal
    brackets: list[BracketLineResponse]
    tax_before_credit: Decimal
    credit_applied: Decimal
    annual_tax: Decimal
    adjustments: list[str] = []


class HolidayAllowanceResponse(BaseModel):
    """Schema for the holiday allowance accrual."""

    model_config = ConfigDict(from_attributes=True)

    rate: Decimal
    annual_accrual: Decimal
    monthly_equivalent: Decimal


class ProRataResponse(BaseModel):
    """Schema for the pro-rata factor of a period."""

    model_config = ConfigDict(from_attributes=True)

    factor: Decimal
    working_days: int
    total_days: int
    method: str
    effective_start: date | None = None
    effective_end: date | None = None


class PayslipLineResponse(BaseModel):
    """Schema for a payslip line."""

    model_config = ConfigDict(from_attributes=True)

    line_type: str
    code: str
    description: str
    amount: Decimal
    line_hash: str


class EmployerCostsResponse(BaseModel):
    """Schema for employer premiums and total employment cost."""

    awf: ContributionLineResponse
    aof: ContributionLineResponse
    zvw: ContributionLineResponse
    gross_salary: Decimal
    holiday_allowance_accrual: Decimal
    total_contributions: Decimal
    total_cost: Decimal

    @classmethod
    def from_costs(cls, costs: EmployerCosts) -> EmployerCostsResponse:
        return cls(
            awf=ContributionLineResponse.model_validate(costs.awf),
            aof=ContributionLineResponse.model_validate(costs.aof),
            zvw=ContributionLineResponse.model_validate(costs.zvw),
            gross_salary=costs.gross_salary,
            holiday_allowance_accrual=costs.holiday_allowance_accrual,
            total_contributions=costs.total_contributions,
            total_cost=costs.total_cost,
        )


class PayrollResultResponse(BaseModel):
    """Schema for a calculated period."""

    calculation_id: UUID
    employee_id: str | None = None
    tax_year: int
    month: int
    rate_table_version: str
    contractual_gross_monthly_salary: Decimal
    gross_monthly_salary: Decimal
    net_monthly_salary: Decimal
    aow_contribution: Decimal
    ww_contribution: Decimal
    wia_contribution: Decimal
    zvw_contribution: Decimal
    total_contributions: Decimal
    income_tax: Decimal
    contributions: list[ContributionLineResponse]
    tax_breakdown: TaxBreakdownResponse
    holiday_allowance: HolidayAllowanceResponse
    pro_rata: ProRataResponse
    tax_proration_policy: str
    lines: list[PayslipLineResponse]
    warnings: list[str] = []
    employer_costs: EmployerCostsResponse | None = None

    @classmethod
    def from_result(cls, result: PayrollResult) -> PayrollResultResponse:
        return cls(
            calculation_id=result.calculation_id,
            employee_id=result.employee_id,
            tax_year=result.tax_year,
            month=result.month,
            rate_table_version=result.rate_table_version,
            contractual_gross_monthly_salary=result.contractual_gross_monthly_salary,
            gross_monthly_salary=result.gross_monthly_salary,
            net_monthly_salary=result.net_monthly_salary,
            aow_contribution=result.aow_contribution,
            ww_contribution=result.ww_contribution,
            wia_contribution=result.wia_contribution,
            zvw_contribution=result.zvw_contribution,
            total_contributions=result.total_contributions,
            income_tax=result.income_tax,
            contributions=[
                ContributionLineResponse.model_validate(line)
                for line in result.contributions.lines
            ],
            tax_breakdown=TaxBreakdownResponse.model_validate(result.tax_breakdown),
            holiday_allowance=HolidayAllowanceResponse.model_validate(result.holiday_allowance),
            pro_rata=ProRataResponse(
                factor=result.pro_rata.factor,
                working_days=result.pro_rata.working_days,
                total_days=result.pro_rata.total_days,
                method=result.pro_rata.method.value,
                effective_start=result.pro_rata.effective_start,
                effective_end=result.pro_rata.effective_end,
            ),
            tax_proration_policy=result.tax_proration_policy.value,
            lines=[
                PayslipLineResponse(
                    line_type=line.line_type.value,
                    code=line.code,
                    description=line.description,
                    amount=line.amount,
                    line_hash=LineItemBuilder.compute_line_hash(line),
                )
                for line in result.lines
            ],
            warnings=list(result.warnings),
            employer_costs=(
                EmployerCostsResponse.from_costs(result.employer_costs)
                if result.employer_costs is not None
                else None
            ),
        )


# ============================================================================
# Cumulative schemas
# ============================================================================


class CumulativeTotalsResponse(BaseModel):
    """Schema for year-to-date totals."""

    model_config = ConfigDict(from_attributes=True)

    tax_year: int
    employee_id: str | None = None
    through_month: int
    periods: int
    gross_salary: Decimal
    net_salary: Decimal
    aow: Decimal
    ww: Decimal
    wia: Decimal
    zvw: Decimal
    income_tax: Decimal
    holiday_allowance_accrued: Decimal
    working_days: int

    @classmethod
    def from_totals(cls, totals: CumulativeTotals) -> CumulativeTotalsResponse:
        return cls.model_validate(totals)


class CumulativeResponse(BaseModel):
    """Schema for a cumulative calculation."""

    totals: CumulativeTotalsResponse
    series: list[CumulativeTotalsResponse]
    results: list[PayrollResultResponse]


# ============================================================================
# Rate table schemas
# ============================================================================


class RateTableResponse(BaseModel):
    """Schema for a published rate table."""

    year: int
    version: str
    fingerprint: str
    table: dict[str, Any]


# ============================================================================
# Identifier validation schemas
# ============================================================================


class IdentifierRequest(BaseModel):
    """Schema for validating a single identifier."""

    value: str


class IdentifierValidationResponse(BaseModel):
    """Schema for identifier validation outcome."""

    is_valid: bool
    error: str | None = None
    formatted: str | None = None


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    field: str | None = None
    constraint: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    rate_tables: list[int]
