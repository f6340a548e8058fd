"""Error taxonomy for the payroll calculation engine."""

from __future__ import annotations

from typing import Any


class PayrollEngineError(Exception):
    """Base class for all errors raised by the engine."""


class ValidationError(PayrollEngineError):
    """Raised when an input value is malformed or out of range.

    Carries the offending field and the violated constraint so callers can
    render a specific message instead of a generic failure.
    """

    def __init__(self, field: str, constraint: str, message: str | None = None):
        self.field = field
        self.constraint = constraint
        self.message = message or f"{field} violates constraint '{constraint}'"
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "constraint": self.constraint,
            "detail": self.message,
        }


class ConfigurationError(PayrollEngineError):
    """Raised when rate-table configuration is missing or inconsistent."""


class RateTableNotFoundError(ConfigurationError):
    """Raised when no rate table is configured for a tax year."""

    def __init__(self, year: int):
        self.year = year
        super().__init__(f"No rate table configured for tax year {year}")


class InvariantViolation(PayrollEngineError):
    """Raised when a computed result breaks an internal invariant.

    This signals a defect in the engine itself, never bad input.
    """

    def __init__(self, name: str, expected: Any, actual: Any):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invariant '{name}' violated: expected {expected}, got {actual}"
        )
