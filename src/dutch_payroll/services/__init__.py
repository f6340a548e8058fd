"""Calculation services."""

from dutch_payroll.services.state_machine import (
    CalculationState,
    CalculationStateMachine,
    CalculationTrace,
    InvalidTransitionError,
    TraceEntry,
)

__all__ = [
    "CalculationState",
    "CalculationStateMachine",
    "CalculationTrace",
    "InvalidTransitionError",
    "TraceEntry",
]
