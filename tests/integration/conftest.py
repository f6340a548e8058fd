"""Integration test fixtures for the HTTP API."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dutch_payroll.api.app import create_app
from dutch_payroll.api.dependencies import get_engine, get_registry
from dutch_payroll.calculators.engine import PayrollEngine
from tests.conftest import make_settings


@pytest_asyncio.fixture
async def client(registry) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against a fresh app wired to the packaged rate tables."""
    app = create_app()
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_engine] = lambda: PayrollEngine(
        registry=registry, settings=make_settings()
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def calculate_payload() -> dict[str, Any]:
    """Full month of March 2025 at 3500 on the standard table."""
    return {
        "employee": {
            "gross_monthly_salary": "3500",
            "date_of_birth": "1990-01-01",
            "tax_table": "wit",
            "employee_id": "EMP-001",
        },
        "company": {
            "kvk_number": "12345678",
            "loonheffingennummer": "123456789L01",
            "rsin": "12345679",
        },
        "period": {"year": 2025, "month": 3},
    }
