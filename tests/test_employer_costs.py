"""Tests for employer premiums and total employment cost."""

from decimal import Decimal

import pytest

from dutch_payroll.calculators.employer_costs import (
    EmployerCostCalculator,
    compute_employer_costs,
)
from dutch_payroll.calculators.types import CompanyInput, SectorRiskLevel
from tests.conftest import make_zero_rate_table


class TestEmployerCostCalculator:
    """Test employer premiums on the 2025 table."""

    def test_low_risk_3500(self, table_2025):
        costs = compute_employer_costs(Decimal("3500"), table_2025)

        assert costs.awf.monthly_amount == Decimal("95.90")
        assert costs.aof.monthly_amount == Decimal("219.80")
        assert costs.zvw.monthly_amount == Decimal("227.85")
        assert costs.total_contributions == Decimal("543.55")

    def test_total_cost_includes_accrual(self, table_2025):
        costs = compute_employer_costs(
            Decimal("3500"), table_2025, holiday_allowance_accrual=Decimal("280.00")
        )

        assert costs.total_cost == Decimal("4323.55")

    @pytest.mark.parametrize(
        "level,awf,aof",
        [
            (SectorRiskLevel.LOW, "95.90", "219.80"),
            (SectorRiskLevel.MEDIUM, "183.40", "243.60"),
            (SectorRiskLevel.HIGH, "270.90", "267.40"),
        ],
    )
    def test_sector_risk_level(self, table_2025, level, awf, aof):
        company = CompanyInput(awf_rate=level, aof_rate=level)
        costs = EmployerCostCalculator().calculate(Decimal("3500"), table_2025, company)

        assert costs.awf.monthly_amount == Decimal(awf)
        assert costs.aof.monthly_amount == Decimal(aof)
        assert costs.zvw.monthly_amount == Decimal("227.85")

    def test_string_levels(self, table_2025):
        company = CompanyInput(awf_rate="high", aof_rate="low")
        costs = EmployerCostCalculator().calculate(Decimal("3500"), table_2025, company)

        assert costs.awf.rate == Decimal("0.0774")
        assert costs.aof.rate == Decimal("0.0628")

    def test_capped_above_ceiling(self, table_2025):
        costs = compute_employer_costs(Decimal("8000"), table_2025)

        assert costs.awf.applicable_annual_income == Decimal("69398")
        assert costs.awf.monthly_amount == Decimal("158.46")

    def test_table_without_employer_rates(self):
        assert compute_employer_costs(Decimal("3500"), make_zero_rate_table()) is None
