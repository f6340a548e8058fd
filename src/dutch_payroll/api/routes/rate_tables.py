"""Rate table endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path

from dutch_payroll.api.dependencies import Registry
from dutch_payroll.api.schemas import ErrorResponse, RateTableResponse

router = APIRouter(prefix="/rate-tables", tags=["rate-tables"])


@router.get("", response_model=list[int])
async def list_rate_tables(registry: Registry) -> list[int]:
    """List the tax years with a configured rate table."""
    return registry.years


@router.get(
    "/{year}",
    response_model=RateTableResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_rate_table(
    registry: Registry,
    year: Annotated[int, Path(ge=1900, le=2100)],
) -> RateTableResponse:
    """Get the rate table for a tax year."""
    table = registry.get(year)
    return RateTableResponse(
        year=table.year,
        version=table.version,
        fingerprint=table.fingerprint,
        table=table.to_payload(),
    )
