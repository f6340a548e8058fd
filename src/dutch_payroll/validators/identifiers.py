"""Validators for Dutch statutory identifiers.

Covers the BSN (Burgerservicenummer), RSIN, Loonheffingennummer and KvK
number. All validators are pure: malformed input yields a failed result,
never an exception. Integers are checked as their decimal digits; other
non-string values fail.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_NON_DIGITS = re.compile(r"\D")
_SPACES_AND_DASHES = re.compile(r"[\s-]")
_WHITESPACE = re.compile(r"\s")
_LOONHEFFINGENNUMMER = re.compile(r"^(\d{9})L(\d{2})$")
_KVK_NUMBER = re.compile(r"^\d{8}$")


@dataclass(frozen=True)
class BSNValidationResult:
    """Outcome of a BSN check."""

    is_valid: bool
    error: str | None = None


@dataclass(frozen=True)
class TaxNumberValidationResult:
    """Outcome of an RSIN or Loonheffingennummer check."""

    is_valid: bool
    error: str | None = None
    formatted: str | None = None


@dataclass(frozen=True)
class TaxNumbersValidation:
    """Combined RSIN and Loonheffingennummer outcome."""

    rsin: TaxNumberValidationResult
    loonheffingennummer: TaxNumberValidationResult

    @property
    def is_valid(self) -> bool:
        return self.rsin.is_valid and self.loonheffingennummer.is_valid


def _as_text(value: object) -> str | None:
    """Identifier as text; integers are accepted, other non-strings are not."""
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def _is_repeated_digit(digits: str) -> bool:
    return len(set(digits)) == 1


def validate_bsn(value: str | None) -> BSNValidationResult:
    """Validate a BSN with the 11-proof.

    Non-digits are stripped, 8-digit numbers are left-padded with a zero.
    The weighted sum of the first eight digits (weights 9..2) minus the
    ninth digit must be divisible by 11.
    """
    if not value:
        return BSNValidationResult(False, "BSN is required")

    text = _as_text(value)
    if text is None:
        return BSNValidationResult(False, "BSN must be a string of digits")

    digits = _NON_DIGITS.sub("", text)
    if len(digits) not in (8, 9):
        return BSNValidationResult(False, "BSN must contain 8 or 9 digits")

    digits = digits.rjust(9, "0")
    total = sum(int(digit) * weight for digit, weight in zip(digits[:8], range(9, 1, -1)))
    total -= int(digits[8])

    if total % 11 != 0:
        return BSNValidationResult(False, "Invalid BSN checksum")

    return BSNValidationResult(True)


def rsin_check_digit(first_seven: str) -> int:
    """Compute the RSIN check digit for the first seven digits."""
    total = sum(int(digit) * weight for digit, weight in zip(first_seven, range(8, 1, -1)))
    remainder = total % 11
    return remainder if remainder < 2 else 11 - remainder


def validate_rsin(value: str | None) -> TaxNumberValidationResult:
    """Validate an RSIN and format it as ``XXXX XXXX``."""
    if not value:
        return TaxNumberValidationResult(False, "RSIN is required")

    text = _as_text(value)
    if text is None:
        return TaxNumberValidationResult(False, "RSIN must be a string of digits")

    digits = _NON_DIGITS.sub("", text)
    if len(digits) != 8:
        return TaxNumberValidationResult(False, "RSIN must be exactly 8 digits")

    if _is_repeated_digit(digits):
        return TaxNumberValidationResult(
            False, "RSIN cannot consist of the same digit repeated"
        )

    if int(digits[7]) != rsin_check_digit(digits[:7]):
        return TaxNumberValidationResult(False, "Invalid RSIN checksum")

    return TaxNumberValidationResult(True, formatted=f"{digits[:4]} {digits[4:]}")


def validate_loonheffingennummer(value: str | None) -> TaxNumberValidationResult:
    """Validate a payroll tax number (``123456789L01``).

    Spaces are ignored and the ``L`` is case-insensitive. A body of nine
    zeros or nine identical digits is rejected.
    """
    if not value:
        return TaxNumberValidationResult(False, "Loonheffingennummer is required")

    text = _as_text(value)
    if text is None:
        return TaxNumberValidationResult(False, "Loonheffingennummer must be a string")

    cleaned = _WHITESPACE.sub("", text).upper()
    match = _LOONHEFFINGENNUMMER.match(cleaned)
    if match is None:
        return TaxNumberValidationResult(
            False, "Loonheffingennummer must be in format: 123456789L01"
        )

    body, suffix = match.groups()
    if _is_repeated_digit(body):
        return TaxNumberValidationResult(
            False,
            "Invalid Loonheffingennummer: main number cannot be all zeros or same digit",
        )

    return TaxNumberValidationResult(
        True, formatted=f"{body[:3]} {body[3:6]} {body[6:]}L{suffix}"
    )


def validate_kvk_number(value: str | None) -> bool:
    """Check that a Chamber of Commerce number has exactly 8 digits."""
    text = _as_text(value) if value else None
    if text is None:
        return False
    return bool(_KVK_NUMBER.match(_SPACES_AND_DASHES.sub("", text)))


def validate_tax_numbers(
    rsin: str | None = None, loonheffingennummer: str | None = None
) -> TaxNumbersValidation:
    """Validate both employer tax numbers; absent numbers count as valid."""
    return TaxNumbersValidation(
        rsin=validate_rsin(rsin) if rsin else TaxNumberValidationResult(True),
        loonheffingennummer=(
            validate_loonheffingennummer(loonheffingennummer)
            if loonheffingennummer
            else TaxNumberValidationResult(True)
        ),
    )


def format_rsin(value: str) -> str:
    """Format an RSIN for display, returning the input if it does not parse."""
    text = _as_text(value)
    if text is None:
        return value
    digits = _NON_DIGITS.sub("", text)
    if len(digits) == 8:
        return f"{digits[:4]} {digits[4:]}"
    return value


def format_loonheffingennummer(value: str) -> str:
    """Format a Loonheffingennummer for display."""
    text = _as_text(value)
    match = _LOONHEFFINGENNUMMER.match(_WHITESPACE.sub("", text).upper()) if text else None
    if match:
        body, suffix = match.groups()
        return f"{body[:3]} {body[3:6]} {body[6:]}L{suffix}"
    return value
