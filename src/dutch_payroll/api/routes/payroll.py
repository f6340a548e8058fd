"""Payroll calculation endpoints."""

from fastapi import APIRouter, status

from dutch_payroll.api.dependencies import Engine
from dutch_payroll.api.schemas import (
    CalculateRequest,
    CumulativeRequest,
    CumulativeResponse,
    CumulativeTotalsResponse,
    ErrorResponse,
    PayrollResultResponse,
)
from dutch_payroll.calculators.cumulative import cumulative_series

router = APIRouter(prefix="/payroll", tags=["payroll"])


@router.post(
    "/calculate",
    response_model=PayrollResultResponse,
    status_code=status.HTTP_200_OK,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def calculate(engine: Engine, payload: CalculateRequest) -> PayrollResultResponse:
    """Calculate one employee for one monthly period."""
    result = engine.calculate(
        payload.employee.to_input(),
        payload.company.to_input(),
        payload.period.to_input(),
    )
    return PayrollResultResponse.from_result(result)


@router.post(
    "/cumulative",
    response_model=CumulativeResponse,
    status_code=status.HTTP_200_OK,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def cumulative(engine: Engine, payload: CumulativeRequest) -> CumulativeResponse:
    """Calculate a series of periods and their year-to-date totals."""
    results = [
        engine.calculate(
            request.employee.to_input(),
            request.company.to_input(),
            request.period.to_input(),
        )
        for request in payload.periods
    ]
    series = cumulative_series(results)

    return CumulativeResponse(
        totals=CumulativeTotalsResponse.from_totals(series[-1]),
        series=[CumulativeTotalsResponse.from_totals(totals) for totals in series],
        results=[
            PayrollResultResponse.from_result(result)
            for result in sorted(results, key=lambda r: r.month)
        ],
    )
