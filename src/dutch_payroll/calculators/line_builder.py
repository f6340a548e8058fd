"""Payslip line builder with deterministic hashing."""

from __future__ import annotations

import hashlib
import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from dutch_payroll.calculators.types import ContributionLine, LineType, PayslipLine


class LineItemBuilder:
    """Builds signed payslip lines.

    Sign conventions (non-negotiable):
    - EARNING: positive
    - TAX (employee): negative
    - CONTRIBUTION (employee): negative
    - ACCRUAL: positive, disclosure only, excluded from net

    Rounding:
    - Euro amounts to 2 decimals on every line
    - Upstream calculators keep full precision until the line is built
    """

    OUTPUT_PRECISION = Decimal("0.01")

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (cents)."""
        return amount.quantize(LineItemBuilder.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def _negative(amount: Decimal) -> Decimal:
        rounded = LineItemBuilder.round_to_cents(abs(amount))
        return -rounded if rounded else rounded

    @staticmethod
    def compute_line_hash(line: PayslipLine) -> str:
        """Compute deterministic hash for a payslip line."""
        json_str = json.dumps(line.to_canonical_dict(), sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    @staticmethod
    def create_earning_line(
        amount: Decimal,
        code: str = "SALARY",
        description: str = "Brutoloon",
    ) -> PayslipLine:
        """Create an earning line (positive amount)."""
        return PayslipLine(
            line_type=LineType.EARNING,
            code=code,
            description=description,
            amount=LineItemBuilder.round_to_cents(abs(amount)),
        )

    @staticmethod
    def create_tax_line(
        amount: Decimal,
        code: str = "LOONHEFFING",
        description: str = "Loonheffing",
    ) -> PayslipLine:
        """Create an employee tax line (negative amount)."""
        return PayslipLine(
            line_type=LineType.TAX,
            code=code,
            description=description,
            amount=LineItemBuilder._negative(amount),
        )

    @staticmethod
    def create_contribution_line(
        contribution: ContributionLine,
        description: str | None = None,
    ) -> PayslipLine:
        """Create an employee contribution line (negative amount)."""
        return PayslipLine(
            line_type=LineType.CONTRIBUTION,
            code=contribution.name.upper(),
            description=description or contribution.name.upper(),
            amount=LineItemBuilder._negative(contribution.monthly_amount),
        )

    @staticmethod
    def create_accrual_line(
        amount: Decimal,
        code: str = "VAKANTIEGELD",
        description: str = "Reservering vakantiegeld",
    ) -> PayslipLine:
        """Create an accrual line (positive amount, not part of net)."""
        return PayslipLine(
            line_type=LineType.ACCRUAL,
            code=code,
            description=description,
            amount=LineItemBuilder.round_to_cents(abs(amount)),
        )

    @staticmethod
    def calculate_net_from_lines(lines: Iterable[PayslipLine]) -> Decimal:
        """Calculate net pay from payslip lines.

        NET = Σ(EARNING) + Σ(TAX) + Σ(CONTRIBUTION)

        Note: ACCRUAL is excluded from net calculation (it's a reserve).
        """
        net = Decimal("0")
        for line in lines:
            if line.line_type != LineType.ACCRUAL:
                net += line.amount
        return LineItemBuilder.round_to_cents(net)

    @staticmethod
    def calculate_gross_from_lines(lines: Iterable[PayslipLine]) -> Decimal:
        """GROSS = Σ(EARNING)"""
        gross = Decimal("0")
        for line in lines:
            if line.line_type == LineType.EARNING:
                gross += line.amount
        return LineItemBuilder.round_to_cents(gross)

    @staticmethod
    def validate_line_signs(lines: Iterable[PayslipLine]) -> list[str]:
        """Validate that all payslip lines have correct signs.

        Returns list of error messages (empty if all valid).
        """
        errors: list[str] = []

        for i, line in enumerate(lines):
            if line.line_type in (LineType.EARNING, LineType.ACCRUAL):
                if line.amount < 0:
                    errors.append(
                        f"Line {i} ({line.line_type.value}) has negative amount {line.amount}, expected positive"
                    )
            elif line.line_type in (LineType.TAX, LineType.CONTRIBUTION):
                if line.amount > 0:
                    errors.append(
                        f"Line {i} ({line.line_type.value}) has positive amount {line.amount}, expected negative"
                    )

        return errors
