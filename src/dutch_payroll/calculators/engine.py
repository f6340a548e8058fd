"""Payroll calculation engine - main orchestrator."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict, dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from dutch_payroll.calculators.employer_costs import EmployerCostCalculator
from dutch_payroll.calculators.holiday_allowance import compute_holiday_allowance
from dutch_payroll.calculators.line_builder import LineItemBuilder
from dutch_payroll.calculators.minimum_wage import check_minimum_wage
from dutch_payroll.calculators.proration import compute_pro_rata
from dutch_payroll.calculators.rate_resolver import RateResolver, normalize_tax_table
from dutch_payroll.calculators.rate_table import RateTable, RateTableRegistry
from dutch_payroll.calculators.social_security import DESCRIPTIONS, SocialSecurityCalculator
from dutch_payroll.calculators.tax_calculator import IncomeTaxCalculator
from dutch_payroll.calculators.types import (
    CompanyInput,
    CompanySize,
    ContributionBreakdown,
    EmployeeInput,
    HolidayAllowance,
    IncomeTaxBreakdown,
    PayrollResult,
    PayslipLine,
    Period,
    ProRataMethod,
    ProRataResult,
    SectorRiskLevel,
    TaxProrationPolicy,
)
from dutch_payroll.config import Settings, get_settings
from dutch_payroll.exceptions import ConfigurationError, InvariantViolation, ValidationError
from dutch_payroll.services.state_machine import CalculationState, CalculationTrace
from dutch_payroll.validators.identifiers import (
    validate_bsn,
    validate_kvk_number,
    validate_loonheffingennummer,
    validate_rsin,
)

logger = logging.getLogger(__name__)


@dataclass
class CalculationOutcome:
    """Result of ``PayrollEngine.try_calculate``."""

    state: CalculationState
    trace: CalculationTrace
    result: PayrollResult | None = None
    error: ValidationError | None = None

    @property
    def success(self) -> bool:
        return self.state == CalculationState.FINALIZED


@dataclass
class _Calculation:
    """Working values of one calculation, discarded once the result is built."""

    employee: EmployeeInput
    company: CompanyInput
    period: Period
    trace: CalculationTrace
    table: RateTable | None = None
    pro_rata: ProRataResult | None = None
    effective_gross: Decimal = Decimal("0")
    contributions: ContributionBreakdown | None = None
    tax_breakdown: IncomeTaxBreakdown | None = None
    income_tax: Decimal = Decimal("0")
    holiday_allowance: HolidayAllowance | None = None
    warnings: list[str] = field(default_factory=list)


class PayrollEngine:
    """Main payroll calculation engine.

    Calculation pipeline (stable order per employee and period):
    1) Validate inputs and identifiers, resolve the rate table
    2) Pro-rate the period
    3) Compute employee social security contributions on the effective gross
    4) Compute wage tax, ordered per the tax proration policy
    5) Compute holiday allowance accrual
    6) Build payslip lines and validate net = sum(lines)
    7) Report employer costs beside the result

    The engine keeps no per-call state; one instance can serve concurrent
    calculations.
    """

    def __init__(
        self,
        registry: RateTableRegistry | None = None,
        settings: Settings | None = None,
        tax_proration_policy: TaxProrationPolicy | str | None = None,
        pro_rata_method: ProRataMethod | str | None = None,
    ):
        self.settings = settings if settings is not None else get_settings()
        self.rate_resolver = RateResolver(registry)
        self.contribution_calculator = SocialSecurityCalculator()
        self.tax_calculator = IncomeTaxCalculator()
        self.employer_cost_calculator = EmployerCostCalculator()

        try:
            self.tax_proration_policy = TaxProrationPolicy(
                tax_proration_policy or self.settings.tax_proration_policy
            )
            self.pro_rata_method = ProRataMethod(
                pro_rata_method or self.settings.pro_rata_method
            )
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def calculate(
        self,
        employee: EmployeeInput,
        company: CompanyInput,
        period: Period,
    ) -> PayrollResult:
        """Calculate one employee for one period.

        Raises:
            ValidationError: If an input is malformed or out of range
            ConfigurationError: If no rate table exists for the period's year
            InvariantViolation: If the computed result is internally inconsistent
        """
        return self._run(_Calculation(employee, company, period, CalculationTrace()))

    def try_calculate(
        self,
        employee: EmployeeInput,
        company: CompanyInput,
        period: Period,
    ) -> CalculationOutcome:
        """Like ``calculate`` but returns a rejected outcome for invalid input."""
        calc = _Calculation(employee, company, period, CalculationTrace())
        try:
            result = self._run(calc)
        except ValidationError as e:
            calc.trace.reject(e.message)
            logger.info(
                "Rejected calculation for %s-%02d: %s", period.year, period.month, e.message
            )
            return CalculationOutcome(state=calc.trace.state, trace=calc.trace, error=e)

        return CalculationOutcome(state=calc.trace.state, trace=calc.trace, result=result)

    def _run(self, calc: _Calculation) -> PayrollResult:
        self._validate(calc)
        self._prorate(calc)
        self._compute_contributions(calc)
        self._compute_tax(calc)
        self._compute_holiday_allowance(calc)
        return self._finalize(calc)

    # ------------------------------------------------------------------
    # 1) Validation
    # ------------------------------------------------------------------

    def _validate(self, calc: _Calculation) -> None:
        employee, company, period = calc.employee, calc.company, calc.period

        gross = _to_decimal(employee.gross_monthly_salary, "gross_monthly_salary")
        if gross <= 0:
            raise ValidationError(
                "gross_monthly_salary",
                "positive",
                f"gross_monthly_salary must be positive, got {gross}",
            )

        tax_credit = _to_decimal(employee.tax_credit, "tax_credit")
        if tax_credit < 0:
            raise ValidationError(
                "tax_credit", "non_negative", f"tax_credit must not be negative, got {tax_credit}"
            )

        if not 1 <= period.month <= 12:
            raise ValidationError(
                "month", "range", f"month must be between 1 and 12, got {period.month}"
            )
        if not 1900 <= period.year <= 2100:
            raise ValidationError(
                "year", "range", f"year must be between 1900 and 2100, got {period.year}"
            )

        if employee.date_of_birth > period.last_day:
            raise ValidationError(
                "date_of_birth",
                "before_period_end",
                f"date_of_birth {employee.date_of_birth} is after the pay period",
            )

        # Normalized copy so every later step sees Decimals and enums
        calc.employee = EmployeeInput(
            **{
                **asdict(employee),
                "gross_monthly_salary": gross,
                "tax_credit": tax_credit,
                "tax_table": normalize_tax_table(employee.tax_table),
                "contract_hours_per_week": _to_decimal(
                    employee.contract_hours_per_week, "contract_hours_per_week"
                ),
            }
        )
        calc.company = CompanyInput(
            **{
                **asdict(company),
                "size": _to_enum(CompanySize, company.size, "size"),
                "awf_rate": _to_enum(SectorRiskLevel, company.awf_rate, "awf_rate"),
                "aof_rate": _to_enum(SectorRiskLevel, company.aof_rate, "aof_rate"),
            }
        )

        self._validate_identifiers(calc.employee, calc.company)

        calc.table = self.rate_resolver.resolve_table(period.year)
        calc.trace.advance(CalculationState.VALIDATED)

    def _validate_identifiers(self, employee: EmployeeInput, company: CompanyInput) -> None:
        if employee.bsn is not None:
            bsn = validate_bsn(employee.bsn)
            if not bsn.is_valid:
                raise ValidationError("bsn", "eleven_proof", bsn.error)

        if company.kvk_number is not None and not validate_kvk_number(company.kvk_number):
            raise ValidationError(
                "kvk_number", "eight_digits", "KvK number must contain exactly 8 digits"
            )

        if company.rsin is not None:
            rsin = validate_rsin(company.rsin)
            if not rsin.is_valid:
                raise ValidationError("rsin", "checksum", rsin.error)

        if company.loonheffingennummer is not None:
            lhn = validate_loonheffingennummer(company.loonheffingennummer)
            if not lhn.is_valid:
                raise ValidationError("loonheffingennummer", "format", lhn.error)

    # ------------------------------------------------------------------
    # 2-5) Computation steps
    # ------------------------------------------------------------------

    def _prorate(self, calc: _Calculation) -> None:
        calc.pro_rata = compute_pro_rata(calc.period, method=self.pro_rata_method)
        calc.effective_gross = LineItemBuilder.round_to_cents(
            calc.employee.gross_monthly_salary * calc.pro_rata.factor
        )
        calc.trace.advance(
            CalculationState.PRORATED,
            f"{calc.pro_rata.working_days}/{calc.pro_rata.total_days} {calc.pro_rata.method.value} days",
        )

    def _compute_contributions(self, calc: _Calculation) -> None:
        aow_exempt = self.rate_resolver.is_aow_exempt(
            calc.employee, calc.table, calc.period.first_day
        )
        calc.contributions = self.contribution_calculator.calculate(
            calc.effective_gross, calc.table, aow_exempt=aow_exempt
        )
        calc.trace.advance(
            CalculationState.CONTRIBUTIONS_COMPUTED,
            "aow_exempt" if aow_exempt else None,
        )

    def _compute_tax(self, calc: _Calculation) -> None:
        profile = self.rate_resolver.resolve_tax_profile(
            calc.employee, calc.table, calc.period.first_day
        )

        if self.tax_proration_policy == TaxProrationPolicy.ANNUALIZE_EFFECTIVE_GROSS:
            calc.tax_breakdown = self.tax_calculator.calculate(calc.effective_gross, profile)
            monthly_tax = calc.tax_breakdown.monthly_tax
        else:
            calc.tax_breakdown = self.tax_calculator.calculate(
                calc.employee.gross_monthly_salary, profile
            )
            monthly_tax = calc.tax_breakdown.monthly_tax * calc.pro_rata.factor

        # Single rounding step, after pro-ration
        calc.income_tax = LineItemBuilder.round_to_cents(monthly_tax)
        calc.trace.advance(CalculationState.TAX_COMPUTED, self.tax_proration_policy.value)

    def _compute_holiday_allowance(self, calc: _Calculation) -> None:
        calc.holiday_allowance = compute_holiday_allowance(
            calc.employee.gross_monthly_salary, calc.table, calc.pro_rata.factor
        )
        calc.trace.advance(CalculationState.HOLIDAY_ALLOWANCE_COMPUTED)

    # ------------------------------------------------------------------
    # 6) Finalization
    # ------------------------------------------------------------------

    def _finalize(self, calc: _Calculation) -> PayrollResult:
        lines = self._build_lines(calc)

        sign_errors = LineItemBuilder.validate_line_signs(lines)
        if sign_errors:
            raise InvariantViolation("line_signs", [], sign_errors)

        gross = LineItemBuilder.calculate_gross_from_lines(lines)
        if gross != calc.effective_gross:
            raise InvariantViolation("gross_salary", calc.effective_gross, gross)

        net = LineItemBuilder.calculate_net_from_lines(lines)
        expected_net = calc.effective_gross - calc.income_tax - calc.contributions.total
        if net != expected_net:
            logger.error("Net from lines %s differs from expected net %s", net, expected_net)
            raise InvariantViolation("net_salary", expected_net, net)

        self._collect_warnings(calc, net)
        employer_costs = self.employer_cost_calculator.calculate(
            calc.effective_gross,
            calc.table,
            calc.company,
            calc.holiday_allowance.monthly_equivalent,
        )

        calculation_id = self._generate_calculation_id(calc)
        calc.trace.advance(CalculationState.FINALIZED)

        return PayrollResult(
            calculation_id=calculation_id,
            employee_id=calc.employee.employee_id,
            tax_year=calc.period.year,
            month=calc.period.month,
            rate_table_version=calc.table.version,
            contractual_gross_monthly_salary=calc.employee.gross_monthly_salary,
            gross_monthly_salary=calc.effective_gross,
            net_monthly_salary=net,
            contributions=calc.contributions,
            income_tax=calc.income_tax,
            tax_breakdown=calc.tax_breakdown,
            holiday_allowance=calc.holiday_allowance,
            pro_rata=calc.pro_rata,
            tax_proration_policy=self.tax_proration_policy,
            lines=tuple(lines),
            warnings=tuple(calc.warnings),
            employer_costs=employer_costs,
        )

    def _build_lines(self, calc: _Calculation) -> list[PayslipLine]:
        description = "Brutoloon"
        if calc.pro_rata.is_partial:
            description = (
                f"Brutoloon ({calc.pro_rata.working_days}/{calc.pro_rata.total_days} dagen)"
            )

        lines = [LineItemBuilder.create_earning_line(calc.effective_gross, description=description)]
        lines.append(LineItemBuilder.create_tax_line(calc.income_tax))
        for contribution in calc.contributions.lines:
            lines.append(
                LineItemBuilder.create_contribution_line(
                    contribution, DESCRIPTIONS.get(contribution.name)
                )
            )
        lines.append(
            LineItemBuilder.create_accrual_line(calc.holiday_allowance.monthly_equivalent)
        )
        return lines

    def _collect_warnings(self, calc: _Calculation, net: Decimal) -> None:
        if net < 0:
            calc.warnings.append(f"Negative net pay: {net}")

        if calc.table.minimum_wage.hourly > 0:
            check = check_minimum_wage(
                calc.employee.gross_monthly_salary,
                calc.employee.date_of_birth,
                calc.period.first_day,
                calc.table,
                calc.employee.contract_hours_per_week,
            )
            if not check.is_compliant:
                calc.warnings.append(
                    f"Salary is {check.shortfall} below the {check.category} minimum wage "
                    f"of {check.monthly}"
                )

        for warning in calc.warnings:
            logger.warning(
                "%s-%02d employee %s: %s",
                calc.period.year,
                calc.period.month,
                calc.employee.employee_id,
                warning,
            )

    def _generate_calculation_id(self, calc: _Calculation) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "employee": asdict(calc.employee),
            "company": asdict(calc.company),
            "period": asdict(calc.period),
            "pro_rata_method": self.pro_rata_method.value,
            "tax_proration_policy": self.tax_proration_policy.value,
            "engine_version": self.settings.engine_version,
            "rate_table_fingerprint": calc.table.fingerprint,
        }
        json_str = json.dumps(data, sort_keys=True, default=str)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])


def _to_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, float):
        raise ValidationError(field_name, "decimal", f"{field_name} must not be a float")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        amount = None
    if amount is None or not amount.is_finite():
        raise ValidationError(
            field_name, "decimal", f"{field_name} is not a valid amount: {value!r}"
        )
    return amount


def _to_enum(enum_cls: Any, value: Any, field_name: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(
            field_name,
            "one_of",
            f"{field_name} must be one of {[e.value for e in enum_cls]}, got {value!r}",
        ) from None
