"""Payroll Command Line Interface.

Provides tools for:
- Calculating one employee for one period
- Validating statutory identifiers
- Inspecting rate tables
- Printing the holiday allowance reserve schedule
- Reporting vacation days earned

Usage:
    python -m dutch_payroll.cli calculate --salary 3500 --date-of-birth 1990-01-01 --year 2025 --month 3
    python -m dutch_payroll.cli validate bsn 111222333
    python -m dutch_payroll.cli rate-table 2025
    python -m dutch_payroll.cli holiday-reserve --salary 3500 --year 2025
    python -m dutch_payroll.cli vacation-days --hours 32 --month 6
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable

from dutch_payroll.api.schemas import PayrollResultResponse
from dutch_payroll.calculators.engine import PayrollEngine
from dutch_payroll.calculators.holiday_allowance import (
    compute_vacation_days,
    holiday_allowance_schedule,
)
from dutch_payroll.calculators.rate_table import RateTableRegistry, get_default_registry
from dutch_payroll.calculators.types import (
    CompanyInput,
    EmployeeInput,
    Period,
    ProRataMethod,
    TaxProrationPolicy,
    TaxTable,
)
from dutch_payroll.config import Settings, get_settings
from dutch_payroll.exceptions import ConfigurationError, ValidationError
from dutch_payroll.validators.identifiers import (
    validate_bsn,
    validate_kvk_number,
    validate_loonheffingennummer,
    validate_rsin,
)


def parse_date(s: str) -> date:
    """Parse ISO date string."""
    try:
        return date.fromisoformat(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date: {s!r} (expected YYYY-MM-DD)") from None


def parse_decimal(s: str) -> Decimal:
    """Parse decimal amount string."""
    try:
        return Decimal(s)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {s!r}") from None


class PayrollCli:
    """Payroll Command Line Interface."""

    def __init__(
        self,
        registry: RateTableRegistry | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.registry = registry
        self.settings = settings
        self.parser = self._build_parser()

    def _get_registry(self) -> RateTableRegistry:
        if self.registry is None:
            self.registry = get_default_registry()
        return self.registry

    def _get_settings(self) -> Settings:
        if self.settings is None:
            self.settings = get_settings()
        return self.settings

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m dutch_payroll.cli",
            description="Dutch payroll calculation tools",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # calculate command
        calc = subparsers.add_parser(
            "calculate",
            help="Calculate one employee for one monthly period",
        )
        calc.add_argument(
            "--salary",
            type=parse_decimal,
            required=True,
            help="Gross monthly salary in euro",
        )
        calc.add_argument(
            "--date-of-birth",
            type=parse_date,
            required=True,
            help="Employee date of birth (YYYY-MM-DD)",
        )
        calc.add_argument("--year", type=int, required=True, help="Tax year")
        calc.add_argument("--month", type=int, required=True, help="Month (1-12)")
        calc.add_argument(
            "--tax-table",
            choices=[t.value for t in TaxTable],
            default=TaxTable.WIT.value,
            help="Wage tax table (default: wit)",
        )
        calc.add_argument(
            "--tax-credit",
            type=parse_decimal,
            default=Decimal("0"),
            help="Annual wage tax credit (default: 0)",
        )
        calc.add_argument("--dga", action="store_true", help="Employee is a DGA")
        calc.add_argument(
            "--young-disabled", action="store_true", help="Employee is young-disabled"
        )
        calc.add_argument(
            "--multiple-jobs", action="store_true", help="Employee has another employer"
        )
        calc.add_argument("--bsn", type=str, help="Employee BSN")
        calc.add_argument("--employee-id", type=str, help="Opaque employee reference")
        calc.add_argument(
            "--start-date",
            type=parse_date,
            help="Employment start date, for partial periods",
        )
        calc.add_argument(
            "--end-date",
            type=parse_date,
            help="Employment end date, for partial periods",
        )
        calc.add_argument(
            "--pro-rata-method",
            choices=[m.value for m in ProRataMethod],
            help="Pro-rata method (default from PRO_RATA_METHOD)",
        )
        calc.add_argument(
            "--tax-proration-policy",
            choices=[p.value for p in TaxProrationPolicy],
            help="Tax proration ordering (default from TAX_PRORATION_POLICY)",
        )

        # validate command
        validate = subparsers.add_parser(
            "validate",
            help="Validate a statutory identifier",
        )
        validate.add_argument(
            "kind",
            choices=["bsn", "rsin", "loonheffingennummer", "kvk"],
            help="Identifier type",
        )
        validate.add_argument("value", type=str, help="Identifier value")

        # rate-table command
        rate_table = subparsers.add_parser(
            "rate-table",
            help="Print the rate table for a tax year",
        )
        rate_table.add_argument(
            "year", type=int, nargs="?", help="Tax year (default from DEFAULT_TAX_YEAR)"
        )

        # holiday-reserve command
        reserve = subparsers.add_parser(
            "holiday-reserve",
            help="Print the monthly holiday allowance reserve for a year",
        )
        reserve.add_argument(
            "--salary",
            type=parse_decimal,
            required=True,
            help="Gross monthly salary in euro",
        )
        reserve.add_argument("--year", type=int, help="Tax year (default from DEFAULT_TAX_YEAR)")
        reserve.add_argument(
            "--payout-month",
            type=int,
            default=5,
            help="Month the allowance is paid out (default: 5)",
        )

        # vacation-days command
        vacation = subparsers.add_parser(
            "vacation-days",
            help="Print vacation days earned through a month",
        )
        vacation.add_argument(
            "--hours",
            type=parse_decimal,
            required=True,
            help="Contract hours per week",
        )
        vacation.add_argument("--month", type=int, required=True, help="Month (1-12)")
        vacation.add_argument("--year", type=int, help="Tax year (default from DEFAULT_TAX_YEAR)")
        vacation.add_argument(
            "--contract-days",
            type=parse_decimal,
            help="Annual vacation days agreed in the contract",
        )
        vacation.add_argument(
            "--start-date",
            type=parse_date,
            help="Employment start date",
        )
        vacation.add_argument(
            "--used",
            type=parse_decimal,
            default=Decimal("0"),
            help="Vacation days already taken (default: 0)",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        handlers: dict[str, Callable[..., int]] = {
            "calculate": self._cmd_calculate,
            "validate": self._cmd_validate,
            "rate-table": self._cmd_rate_table,
            "holiday-reserve": self._cmd_holiday_reserve,
            "vacation-days": self._cmd_vacation_days,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return handler(parsed)
        except ValidationError as e:
            print(f"Invalid input ({e.field}): {e.message}", file=sys.stderr)
            return 2
        except ConfigurationError as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            return 1

    def _cmd_calculate(self, args: argparse.Namespace) -> int:
        """Calculate and print a result as JSON."""
        engine = PayrollEngine(
            registry=self._get_registry(),
            settings=self._get_settings(),
            tax_proration_policy=args.tax_proration_policy,
            pro_rata_method=args.pro_rata_method,
        )
        result = engine.calculate(
            EmployeeInput(
                gross_monthly_salary=args.salary,
                date_of_birth=args.date_of_birth,
                tax_table=TaxTable(args.tax_table),
                tax_credit=args.tax_credit,
                is_dga=args.dga,
                is_young_disabled=args.young_disabled,
                has_multiple_jobs=args.multiple_jobs,
                bsn=args.bsn,
                employee_id=args.employee_id,
            ),
            CompanyInput(),
            Period(
                year=args.year,
                month=args.month,
                employment_start_date=args.start_date,
                employment_end_date=args.end_date,
            ),
        )
        print(PayrollResultResponse.from_result(result).model_dump_json(indent=2))
        return 0

    def _cmd_validate(self, args: argparse.Namespace) -> int:
        """Validate an identifier; exit code 0 when valid."""
        if args.kind == "bsn":
            bsn = validate_bsn(args.value)
            is_valid, error, formatted = bsn.is_valid, bsn.error, None
        elif args.kind == "kvk":
            is_valid = validate_kvk_number(args.value)
            error = None if is_valid else "KvK number must contain exactly 8 digits"
            formatted = None
        else:
            validator = validate_rsin if args.kind == "rsin" else validate_loonheffingennummer
            outcome = validator(args.value)
            is_valid, error, formatted = outcome.is_valid, outcome.error, outcome.formatted

        if is_valid:
            print(f"✓ valid {args.kind}" + (f": {formatted}" if formatted else ""))
            return 0

        print(f"✗ invalid {args.kind}: {error}")
        return 1

    def _year(self, args: argparse.Namespace) -> int:
        return args.year if args.year is not None else self._get_settings().default_tax_year

    def _cmd_rate_table(self, args: argparse.Namespace) -> int:
        """Print a rate table as JSON."""
        table = self._get_registry().get(self._year(args))
        payload = table.to_payload()
        payload["fingerprint"] = table.fingerprint
        print(json.dumps(payload, indent=2))
        return 0

    def _cmd_holiday_reserve(self, args: argparse.Namespace) -> int:
        """Print the reserve schedule."""
        table = self._get_registry().get(self._year(args))
        schedule = holiday_allowance_schedule(args.salary, table, payout_month=args.payout_month)

        print(f"Holiday allowance reserve {table.year} ({table.holiday_allowance_rate:%})")
        print("=" * 40)
        for entry in schedule:
            marker = "  <- payout" if entry.is_payout_month else ""
            print(
                f"{entry.month:>2}  reserved {entry.reserved:>9}  paid {entry.paid:>9}  "
                f"balance {entry.balance:>9}{marker}"
            )
        return 0

    def _cmd_vacation_days(self, args: argparse.Namespace) -> int:
        """Print vacation days earned and remaining."""
        table = self._get_registry().get(self._year(args))
        days = compute_vacation_days(
            args.hours,
            table,
            args.month,
            contract_days=args.contract_days,
            employment_start_date=args.start_date,
            used=args.used,
        )

        print(f"Vacation days {table.year}-{args.month:02d} ({args.hours} hours/week)")
        print("=" * 40)
        print(f"Statutory      {days.statutory_days:>8}")
        print(f"Entitlement    {days.annual_entitlement:>8}")
        print(f"Earned to date {days.earned_to_date:>8}")
        print(f"Used           {days.used:>8}")
        print(f"Remaining      {days.remaining:>8}")
        return 0


def main() -> int:
    """CLI entry point."""
    logging.basicConfig(level=get_settings().log_level)
    cli = PayrollCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
