"""Tests for payslip line builder."""

from decimal import Decimal

from dutch_payroll.calculators.line_builder import LineItemBuilder
from dutch_payroll.calculators.types import ContributionLine, LineType, PayslipLine


def _contribution(name: str, monthly: str) -> ContributionLine:
    return ContributionLine(
        name=name,
        rate=Decimal("0.0290"),
        max_annual_income=Decimal("69398"),
        applicable_annual_income=Decimal("42000"),
        annual_amount=Decimal(monthly) * 12,
        monthly_amount=Decimal(monthly),
    )


class TestLineItemBuilder:
    """Test line item builder functionality."""

    def test_round_to_cents(self):
        """Test rounding to 2 decimal places."""
        # Standard rounding
        assert LineItemBuilder.round_to_cents(Decimal("10.125")) == Decimal("10.13")
        assert LineItemBuilder.round_to_cents(Decimal("10.124")) == Decimal("10.12")

        # Half-up rounding
        assert LineItemBuilder.round_to_cents(Decimal("10.135")) == Decimal("10.14")

    def test_create_earning_line(self):
        """Test creating earning line (positive amount)."""
        line = LineItemBuilder.create_earning_line(Decimal("3500"))

        assert line.line_type == LineType.EARNING
        assert line.code == "SALARY"
        assert line.amount == Decimal("3500.00")
        assert line.amount > 0  # Earnings are positive

    def test_create_tax_line(self):
        """Test creating wage tax line (negative amount)."""
        line = LineItemBuilder.create_tax_line(Decimal("372.88"))

        assert line.line_type == LineType.TAX
        assert line.code == "LOONHEFFING"
        assert line.amount == Decimal("-372.88")
        assert line.amount < 0  # Employee taxes are negative

    def test_zero_tax_line_is_not_negative_zero(self):
        line = LineItemBuilder.create_tax_line(Decimal("0"))
        assert line.amount == Decimal("0.00")
        assert not line.amount.is_signed()

    def test_create_contribution_line(self):
        """Test creating contribution line (negative amount)."""
        line = LineItemBuilder.create_contribution_line(_contribution("ww", "101.50"))

        assert line.line_type == LineType.CONTRIBUTION
        assert line.code == "WW"
        assert line.description == "WW"
        assert line.amount == Decimal("-101.50")

    def test_create_accrual_line(self):
        """Test creating holiday allowance accrual (positive, disclosure only)."""
        line = LineItemBuilder.create_accrual_line(Decimal("280"))

        assert line.line_type == LineType.ACCRUAL
        assert line.code == "VAKANTIEGELD"
        assert line.amount == Decimal("280.00")

    def test_calculate_net_from_lines(self):
        """Test net pay calculation, accruals excluded."""
        lines = [
            LineItemBuilder.create_earning_line(Decimal("3500")),
            LineItemBuilder.create_tax_line(Decimal("372.88")),
            LineItemBuilder.create_contribution_line(_contribution("aow", "573.41")),
            LineItemBuilder.create_contribution_line(_contribution("ww", "101.50")),
            LineItemBuilder.create_contribution_line(_contribution("wia", "21.00")),
            LineItemBuilder.create_contribution_line(_contribution("zvw", "197.75")),
            LineItemBuilder.create_accrual_line(Decimal("280")),
        ]

        assert LineItemBuilder.calculate_net_from_lines(lines) == Decimal("2233.46")
        assert LineItemBuilder.calculate_gross_from_lines(lines) == Decimal("3500.00")

    def test_validate_line_signs(self):
        """Test line sign validation."""
        valid_lines = [
            LineItemBuilder.create_earning_line(Decimal("1000")),
            LineItemBuilder.create_tax_line(Decimal("100")),
        ]
        assert LineItemBuilder.validate_line_signs(valid_lines) == []

        invalid_lines = [
            PayslipLine(LineType.EARNING, "SALARY", "Brutoloon", Decimal("-1000")),
            PayslipLine(LineType.TAX, "LOONHEFFING", "Loonheffing", Decimal("100")),
        ]
        errors = LineItemBuilder.validate_line_signs(invalid_lines)
        assert len(errors) == 2
        assert "expected positive" in errors[0]
        assert "expected negative" in errors[1]


class TestLineHash:
    """Test deterministic line hashing."""

    def test_line_hash_deterministic(self):
        """Test that line hash is deterministic."""
        line1 = LineItemBuilder.create_earning_line(Decimal("1000"))
        line2 = LineItemBuilder.create_earning_line(Decimal("1000"))

        hash1 = LineItemBuilder.compute_line_hash(line1)
        hash2 = LineItemBuilder.compute_line_hash(line2)

        assert hash1 == hash2
        assert len(hash1) == 32

    def test_different_lines_different_hash(self):
        """Test that different lines produce different hashes."""
        line1 = LineItemBuilder.create_earning_line(Decimal("1000"))
        line2 = LineItemBuilder.create_earning_line(Decimal("1001"))

        assert LineItemBuilder.compute_line_hash(line1) != LineItemBuilder.compute_line_hash(
            line2
        )
