"""Statutory identifier validation endpoints."""

from fastapi import APIRouter

from dutch_payroll.api.schemas import IdentifierRequest, IdentifierValidationResponse
from dutch_payroll.validators.identifiers import (
    validate_bsn,
    validate_kvk_number,
    validate_loonheffingennummer,
    validate_rsin,
)

router = APIRouter(prefix="/validation", tags=["validation"])


@router.post("/bsn", response_model=IdentifierValidationResponse)
async def check_bsn(payload: IdentifierRequest) -> IdentifierValidationResponse:
    """Validate a BSN with the 11-proof."""
    result = validate_bsn(payload.value)
    return IdentifierValidationResponse(is_valid=result.is_valid, error=result.error)


@router.post("/rsin", response_model=IdentifierValidationResponse)
async def check_rsin(payload: IdentifierRequest) -> IdentifierValidationResponse:
    """Validate an RSIN."""
    result = validate_rsin(payload.value)
    return IdentifierValidationResponse(
        is_valid=result.is_valid, error=result.error, formatted=result.formatted
    )


@router.post("/loonheffingennummer", response_model=IdentifierValidationResponse)
async def check_loonheffingennummer(
    payload: IdentifierRequest,
) -> IdentifierValidationResponse:
    """Validate a payroll tax number."""
    result = validate_loonheffingennummer(payload.value)
    return IdentifierValidationResponse(
        is_valid=result.is_valid, error=result.error, formatted=result.formatted
    )


@router.post("/kvk", response_model=IdentifierValidationResponse)
async def check_kvk(payload: IdentifierRequest) -> IdentifierValidationResponse:
    """Validate a Chamber of Commerce number."""
    is_valid = validate_kvk_number(payload.value)
    return IdentifierValidationResponse(
        is_valid=is_valid,
        error=None if is_valid else "KvK number must contain exactly 8 digits",
    )
