"""Statutory identifier validators."""

from dutch_payroll.validators.identifiers import (
    BSNValidationResult,
    TaxNumberValidationResult,
    TaxNumbersValidation,
    format_loonheffingennummer,
    format_rsin,
    validate_bsn,
    validate_kvk_number,
    validate_loonheffingennummer,
    validate_rsin,
    validate_tax_numbers,
)

__all__ = [
    "BSNValidationResult",
    "TaxNumberValidationResult",
    "TaxNumbersValidation",
    "format_loonheffingennummer",
    "format_rsin",
    "validate_bsn",
    "validate_kvk_number",
    "validate_loonheffingennummer",
    "validate_rsin",
    "validate_tax_numbers",
]
