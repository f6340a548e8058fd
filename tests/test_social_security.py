"""Tests for employee social security contributions."""

from decimal import Decimal

from dutch_payroll.calculators.rate_table import ContributionRate
from dutch_payroll.calculators.social_security import (
    SocialSecurityCalculator,
    compute_contribution,
    contribution_line,
)


class TestComputeContribution:
    """Test the capped flat-rate formula."""

    def test_below_cap(self):
        rate = ContributionRate(Decimal("0.0290"), Decimal("69398"))
        assert compute_contribution(Decimal("42000"), rate) == Decimal("1218.0000")

    def test_above_cap(self):
        rate = ContributionRate(Decimal("0.1790"), Decimal("38441"))
        assert compute_contribution(Decimal("42000"), rate) == Decimal("6880.9390")

    def test_non_positive_income(self):
        rate = ContributionRate(Decimal("0.1790"), Decimal("38441"))
        assert compute_contribution(Decimal("0"), rate) == Decimal("0")
        assert compute_contribution(Decimal("-100"), rate) == Decimal("0")


class TestContributionLine:
    def test_monthly_amount_in_cents(self):
        line = contribution_line(
            "awf", Decimal("42000"), ContributionRate(Decimal("0.0274"), Decimal("69398"))
        )

        assert line.name == "awf"
        assert line.applicable_annual_income == Decimal("42000")
        assert line.monthly_amount == Decimal("95.90")

    def test_exempt(self):
        line = contribution_line(
            "aow",
            Decimal("42000"),
            ContributionRate(Decimal("0.1790"), Decimal("38441")),
            exempt=True,
        )

        assert line.applicable_annual_income == Decimal("0")
        assert line.monthly_amount == Decimal("0.00")


class TestSocialSecurityCalculator:
    """Test monthly contribution breakdowns."""

    def test_full_month_3500(self, table_2025):
        breakdown = SocialSecurityCalculator().calculate(Decimal("3500"), table_2025)

        assert breakdown.aow.monthly_amount == Decimal("573.41")
        assert breakdown.ww.monthly_amount == Decimal("101.50")
        assert breakdown.wia.monthly_amount == Decimal("21.00")
        assert breakdown.zvw.monthly_amount == Decimal("197.75")
        assert breakdown.total == Decimal("893.66")

    def test_aow_capped(self, table_2025):
        breakdown = SocialSecurityCalculator().calculate(Decimal("3500"), table_2025)

        assert breakdown.aow.applicable_annual_income == Decimal("38441")
        assert breakdown.ww.applicable_annual_income == Decimal("42000")

    def test_high_salary_caps_every_contribution(self, table_2025):
        low = SocialSecurityCalculator().calculate(Decimal("10000"), table_2025)
        high = SocialSecurityCalculator().calculate(Decimal("20000"), table_2025)

        assert low.total == high.total
        # 69398 * 0.0290 / 12
        assert high.ww.monthly_amount == Decimal("167.71")

    def test_aow_exempt(self, table_2025):
        breakdown = SocialSecurityCalculator().calculate(
            Decimal("3500"), table_2025, aow_exempt=True
        )

        assert breakdown.aow.monthly_amount == Decimal("0.00")
        assert breakdown.aow.applicable_annual_income == Decimal("0")
        assert breakdown.total == Decimal("320.25")

    def test_total_is_sum_of_rounded_lines(self, table_2025):
        breakdown = SocialSecurityCalculator().calculate(Decimal("1919.35"), table_2025)

        assert [line.monthly_amount for line in breakdown.lines] == [
            Decimal("343.56"),
            Decimal("55.66"),
            Decimal("11.52"),
            Decimal("108.44"),
        ]
        assert breakdown.total == Decimal("519.18")
