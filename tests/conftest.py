"""Pytest fixtures for payroll engine tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from dutch_payroll.calculators.engine import PayrollEngine
from dutch_payroll.calculators.rate_table import (
    ContributionRate,
    IncomeTaxBracket,
    MinimumWage,
    RateTable,
    RateTableRegistry,
)
from dutch_payroll.calculators.types import (
    CompanyInput,
    EmployeeInput,
    Period,
    TaxProrationPolicy,
    TaxTable,
)
from dutch_payroll.config import DEFAULT_RATE_TABLE_DIR, Settings


def make_settings(**overrides) -> Settings:
    """Settings independent of the test runner's environment."""
    values = {
        "engine_version": "test",
        "rate_table_dir": DEFAULT_RATE_TABLE_DIR,
        "default_tax_year": 2025,
        "tax_proration_policy": "prorate_result",
        "pro_rata_method": "calendar",
        "host": "127.0.0.1",
        "port": 8000,
        "debug": False,
        "log_level": "INFO",
    }
    values.update(overrides)
    return Settings(**values)


def make_zero_rate_table(year: int = 2025) -> RateTable:
    """A table where every contribution and tax rate is zero."""
    zero = ContributionRate(rate=Decimal("0"), max_annual_income=Decimal("100000"))
    return RateTable(
        year=year,
        version=f"{year}-zero",
        aow=zero,
        ww=zero,
        wia=zero,
        zvw=zero,
        income_tax_brackets={
            TaxTable.WIT: (IncomeTaxBracket(None, Decimal("0")),),
            TaxTable.GROEN: (IncomeTaxBracket(None, Decimal("0")),),
        },
        holiday_allowance_rate=Decimal("0.08"),
        minimum_wage=MinimumWage(hourly=Decimal("0")),
    )


def make_employee(**overrides) -> EmployeeInput:
    values = {
        "gross_monthly_salary": Decimal("3500"),
        "date_of_birth": date(1990, 1, 1),
        "tax_table": TaxTable.WIT,
        "employee_id": "EMP-001",
    }
    values.update(overrides)
    return EmployeeInput(**values)


@pytest.fixture(scope="session")
def registry() -> RateTableRegistry:
    """Registry of the packaged rate tables."""
    return RateTableRegistry.from_directory(DEFAULT_RATE_TABLE_DIR)


@pytest.fixture(scope="session")
def table_2025(registry: RateTableRegistry) -> RateTable:
    return registry.get(2025)


@pytest.fixture(scope="session")
def table_2024(registry: RateTableRegistry) -> RateTable:
    return registry.get(2024)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def engine(registry: RateTableRegistry, settings: Settings) -> PayrollEngine:
    """Engine with the default (prorate result) tax ordering."""
    return PayrollEngine(
        registry=registry,
        settings=settings,
        tax_proration_policy=TaxProrationPolicy.PRORATE_RESULT,
    )


@pytest.fixture
def employee() -> EmployeeInput:
    """Adult employee earning 3500/month on the standard table."""
    return make_employee()


@pytest.fixture
def company() -> CompanyInput:
    return CompanyInput(
        kvk_number="12345678",
        loonheffingennummer="123456789L01",
        rsin="12345679",
    )


@pytest.fixture
def period() -> Period:
    """Full month of March 2025."""
    return Period(year=2025, month=3)
