"""Property-based tests for payroll invariants.

These tests use hypothesis to generate salaries, dates and identifiers and
verify that the invariants hold for every combination, not just the
hand-picked examples elsewhere.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from hypothesis import assume, given, settings, strategies as st

from dutch_payroll.calculators.cumulative import (
    CumulativeTotals,
    accumulate,
    cumulative_from_history,
)
from dutch_payroll.calculators.engine import PayrollEngine
from dutch_payroll.calculators.line_builder import LineItemBuilder
from dutch_payroll.calculators.proration import compute_pro_rata
from dutch_payroll.calculators.rate_table import RateTableRegistry
from dutch_payroll.calculators.social_security import SocialSecurityCalculator
from dutch_payroll.calculators.tax_calculator import IncomeTaxCalculator, progressive_tax
from dutch_payroll.calculators.types import (
    CompanyInput,
    LineType,
    Period,
    ProRataMethod,
    TaxProrationPolicy,
    TaxTable,
)
from dutch_payroll.config import DEFAULT_RATE_TABLE_DIR
from dutch_payroll.exceptions import ValidationError
from dutch_payroll.validators.identifiers import rsin_check_digit, validate_bsn, validate_rsin
from tests.conftest import make_employee, make_settings, make_zero_rate_table

# Built once: hypothesis reruns each test body many times
REGISTRY = RateTableRegistry.from_directory(DEFAULT_RATE_TABLE_DIR)
TABLE = REGISTRY.get(2025)
ENGINE = PayrollEngine(registry=REGISTRY, settings=make_settings())
ENGINES = {
    policy: PayrollEngine(registry=REGISTRY, settings=make_settings(), tax_proration_policy=policy)
    for policy in TaxProrationPolicy
}
ZERO_REGISTRY = RateTableRegistry([make_zero_rate_table()])
COMPANY = CompanyInput()

salaries = st.decimals(
    min_value=Decimal("0.01"), max_value=Decimal("100000"), places=2, allow_nan=False
)
births = st.dates(min_value=date(1940, 1, 1), max_value=date(2009, 12, 31))


# =============================================================================
# Engine invariants
# =============================================================================


class TestEngineInvariants:
    """Invariants of a single calculation."""

    @given(
        gross=salaries,
        date_of_birth=births,
        tax_table=st.sampled_from(list(TaxTable)),
        credit=st.decimals(min_value=Decimal("0"), max_value=Decimal("5000"), places=2),
        month=st.integers(min_value=1, max_value=12),
    )
    @settings(max_examples=100)
    def test_net_equals_gross_minus_deductions(
        self, gross, date_of_birth, tax_table, credit, month
    ):
        """Net is gross minus tax and contributions, and the lines agree."""
        employee = make_employee(
            gross_monthly_salary=gross,
            date_of_birth=date_of_birth,
            tax_table=tax_table,
            tax_credit=credit,
        )
        result = ENGINE.calculate(employee, COMPANY, Period(2025, month))

        assert result.net_monthly_salary == (
            result.gross_monthly_salary - result.income_tax - result.total_contributions
        )
        assert LineItemBuilder.calculate_net_from_lines(result.lines) == result.net_monthly_salary
        assert LineItemBuilder.validate_line_signs(result.lines) == []

    @given(
        gross=salaries,
        start_day=st.integers(min_value=1, max_value=28),
        policy=st.sampled_from(list(TaxProrationPolicy)),
    )
    @settings(max_examples=100)
    def test_net_never_exceeds_gross(self, gross, start_day, policy):
        engine = ENGINES[policy]
        period = Period(2025, 2, employment_start_date=date(2025, 2, start_day))
        result = engine.calculate(make_employee(gross_monthly_salary=gross), COMPANY, period)

        assert result.net_monthly_salary <= result.gross_monthly_salary

    @given(gross=salaries, policy=st.sampled_from(list(TaxProrationPolicy)))
    @settings(max_examples=50)
    def test_zero_rates_keep_gross(self, gross, policy):
        engine = PayrollEngine(
            registry=ZERO_REGISTRY, settings=make_settings(), tax_proration_policy=policy
        )
        employee = make_employee(gross_monthly_salary=gross)
        result = engine.calculate(employee, COMPANY, Period(2025, 2))

        assert result.net_monthly_salary == result.gross_monthly_salary

    @given(gross=salaries, date_of_birth=births)
    @settings(max_examples=50)
    def test_amounts_are_cents(self, gross, date_of_birth):
        result = ENGINE.calculate(
            make_employee(gross_monthly_salary=gross, date_of_birth=date_of_birth),
            COMPANY,
            Period(2025, 6),
        )

        for line in result.lines:
            assert line.amount == line.amount.quantize(Decimal("0.01"))
        assert result.income_tax >= 0

    @given(gross=salaries, start_day=st.integers(min_value=1, max_value=30))
    @settings(max_examples=50)
    def test_holiday_allowance_never_in_net(self, gross, start_day):
        period = Period(2025, 4, employment_start_date=date(2025, 4, start_day))
        result = ENGINE.calculate(make_employee(gross_monthly_salary=gross), COMPANY, period)

        non_accrual = [line for line in result.lines if line.line_type != LineType.ACCRUAL]
        assert LineItemBuilder.round_to_cents(
            sum(line.amount for line in non_accrual)
        ) == result.net_monthly_salary

    @given(gross=salaries, date_of_birth=births)
    @settings(max_examples=30)
    def test_deterministic(self, gross, date_of_birth):
        employee = make_employee(gross_monthly_salary=gross, date_of_birth=date_of_birth)
        first = ENGINE.calculate(employee, COMPANY, Period(2025, 2))
        second = ENGINE.calculate(employee, COMPANY, Period(2025, 2))

        assert first == second


# =============================================================================
# Contribution and tax invariants
# =============================================================================


class TestContributionInvariants:
    """Caps and monotonicity of contributions and tax."""

    @given(gross=salaries)
    @settings(max_examples=100)
    def test_contributions_never_exceed_cap(self, gross):
        breakdown = SocialSecurityCalculator().calculate(gross, TABLE)

        for line in breakdown.lines:
            ceiling = LineItemBuilder.round_to_cents(
                line.max_annual_income * line.rate / Decimal("12")
            )
            assert Decimal("0") <= line.monthly_amount <= ceiling

    @given(low=salaries, high=salaries)
    @settings(max_examples=100)
    def test_more_gross_never_less_deduction(self, low, high):
        assume(low <= high)
        calculator = SocialSecurityCalculator()
        tax = IncomeTaxCalculator()

        assert calculator.calculate(low, TABLE).total <= calculator.calculate(high, TABLE).total
        assert (
            tax.calculate_for_employee(make_employee(), TABLE, low).annual_tax
            <= tax.calculate_for_employee(make_employee(), TABLE, high).annual_tax
        )

    @given(
        income=st.decimals(min_value=Decimal("0"), max_value=Decimal("200000"), places=2),
        step=st.decimals(min_value=Decimal("0.01"), max_value=Decimal("50000"), places=2),
        tax_table=st.sampled_from(list(TaxTable)),
    )
    @settings(max_examples=100)
    def test_brackets_are_convex(self, income, step, tax_table):
        """Each extra euro is taxed at least as heavily as the one before."""
        brackets = TABLE.brackets_for(tax_table)
        low, _ = progressive_tax(income, brackets)
        mid, _ = progressive_tax(income + step, brackets)
        high, _ = progressive_tax(income + step + step, brackets)

        assert mid - low <= high - mid

    @given(gross=st.decimals(min_value=Decimal("6000"), max_value=Decimal("50000"), places=2))
    @settings(max_examples=50)
    def test_flat_above_every_cap(self, gross):
        calculator = SocialSecurityCalculator()
        assert calculator.calculate(gross, TABLE).total == calculator.calculate(
            gross + Decimal("1000"), TABLE
        ).total


# =============================================================================
# Pro-rata invariants
# =============================================================================


class TestProRataInvariants:
    @given(
        month=st.integers(min_value=1, max_value=12),
        start_day=st.integers(min_value=1, max_value=28),
        length=st.integers(min_value=0, max_value=40),
        method=st.sampled_from(list(ProRataMethod)),
    )
    @settings(max_examples=100)
    def test_factor_in_unit_interval(self, month, start_day, length, method):
        period = Period(2025, month)
        start = date(2025, month, start_day)
        end = date.fromordinal(start.toordinal() + length)

        try:
            result = compute_pro_rata(period, start, end, method)
        except ValidationError as exc:
            assert method == ProRataMethod.WORKING
            assert exc.constraint == "working_days_in_period"
            return

        assert Decimal("0") < result.factor <= Decimal("1")
        assert 0 < result.working_days <= result.total_days


# =============================================================================
# Identifier invariants
# =============================================================================


class TestIdentifierInvariants:
    """Any single-digit change of a valid number is detected."""

    @given(
        digits=st.lists(st.integers(min_value=0, max_value=9), min_size=8, max_size=8),
        position=st.integers(min_value=0, max_value=8),
        delta=st.integers(min_value=1, max_value=9),
    )
    @settings(max_examples=200)
    def test_bsn_single_digit_change(self, digits, position, delta):
        check = sum(d * w for d, w in zip(digits, range(9, 1, -1))) % 11
        assume(check != 10)
        valid = "".join(str(d) for d in digits) + str(check)
        assert validate_bsn(valid).is_valid

        mutated = list(valid)
        mutated[position] = str((int(valid[position]) + delta) % 10)
        assert not validate_bsn("".join(mutated)).is_valid

    @given(
        digits=st.lists(st.integers(min_value=0, max_value=9), min_size=7, max_size=7),
        delta=st.integers(min_value=1, max_value=9),
    )
    @settings(max_examples=100)
    def test_rsin_check_digit_change(self, digits, delta):
        body = "".join(str(d) for d in digits)
        check = rsin_check_digit(body)
        assume(check < 10)
        valid = body + str(check)
        assume(len(set(valid)) > 1)
        assert validate_rsin(valid).is_valid

        wrong = body + str((check + delta) % 10)
        assert not validate_rsin(wrong).is_valid


# =============================================================================
# Cumulative invariants
# =============================================================================


class TestCumulativeInvariants:
    @given(
        salaries_by_month=st.lists(
            st.decimals(min_value=Decimal("1000"), max_value=Decimal("9000"), places=2),
            min_size=1,
            max_size=12,
        )
    )
    @settings(max_examples=20)
    def test_incremental_equals_batch(self, salaries_by_month):
        results = [
            ENGINE.calculate(make_employee(gross_monthly_salary=gross), COMPANY, Period(2025, m))
            for m, gross in enumerate(salaries_by_month, start=1)
        ]

        totals = CumulativeTotals.empty(2025)
        for result in results:
            totals = accumulate(totals, result)

        assert totals == cumulative_from_history(reversed(results))
        assert totals.gross_salary == sum(r.gross_monthly_salary for r in results)
        assert totals.net_salary == sum(r.net_monthly_salary for r in results)
