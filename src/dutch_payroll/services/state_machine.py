"""Calculation state machine with transition validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class CalculationState(str, Enum):
    """Payroll calculation states."""

    PENDING = "pending"
    VALIDATED = "validated"
    PRORATED = "prorated"
    CONTRIBUTIONS_COMPUTED = "contributions_computed"
    TAX_COMPUTED = "tax_computed"
    HOLIDAY_ALLOWANCE_COMPUTED = "holiday_allowance_computed"
    FINALIZED = "finalized"
    REJECTED = "rejected"


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: str, to_state: str, reason: str | None = None):
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason
        msg = f"Invalid transition from '{from_state}' to '{to_state}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class CalculationStateMachine:
    """State machine for a single payroll calculation.

    Allowed transitions:
    - pending → validated
    - validated → prorated
    - prorated → contributions_computed
    - contributions_computed → tax_computed
    - tax_computed → holiday_allowance_computed
    - holiday_allowance_computed → finalized
    - any non-terminal state → rejected
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        CalculationState.PENDING: [CalculationState.VALIDATED, CalculationState.REJECTED],
        CalculationState.VALIDATED: [CalculationState.PRORATED, CalculationState.REJECTED],
        CalculationState.PRORATED: [
            CalculationState.CONTRIBUTIONS_COMPUTED,
            CalculationState.REJECTED,
        ],
        CalculationState.CONTRIBUTIONS_COMPUTED: [
            CalculationState.TAX_COMPUTED,
            CalculationState.REJECTED,
        ],
        CalculationState.TAX_COMPUTED: [
            CalculationState.HOLIDAY_ALLOWANCE_COMPUTED,
            CalculationState.REJECTED,
        ],
        CalculationState.HOLIDAY_ALLOWANCE_COMPUTED: [
            CalculationState.FINALIZED,
            CalculationState.REJECTED,
        ],
        CalculationState.FINALIZED: [],  # Terminal state
        CalculationState.REJECTED: [],  # Terminal state
    }

    TERMINAL_STATES = {CalculationState.FINALIZED, CalculationState.REJECTED}

    @classmethod
    def can_transition(cls, from_state: str, to_state: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_state, [])
        return to_state in allowed

    @classmethod
    def validate_transition(cls, from_state: str, to_state: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_state, to_state):
            reason = "state is terminal" if cls.is_terminal(from_state) else None
            raise InvalidTransitionError(from_state, to_state, reason)

    @classmethod
    def is_terminal(cls, state: str) -> bool:
        return state in cls.TERMINAL_STATES

    @classmethod
    def get_next_states(cls, current_state: str) -> list[str]:
        """Get list of valid next states from current state."""
        return cls.VALID_TRANSITIONS.get(current_state, [])


@dataclass(frozen=True)
class TraceEntry:
    """One recorded transition."""

    from_state: CalculationState
    to_state: CalculationState
    note: str | None = None


@dataclass
class CalculationTrace:
    """Transition log owned by exactly one calculation."""

    state: CalculationState = CalculationState.PENDING
    entries: list[TraceEntry] = field(default_factory=list)

    def advance(self, to_state: CalculationState, note: str | None = None) -> None:
        CalculationStateMachine.validate_transition(self.state, to_state)
        self.entries.append(TraceEntry(self.state, to_state, note))
        self.state = to_state

    def reject(self, reason: str) -> None:
        self.advance(CalculationState.REJECTED, reason)

    @property
    def states(self) -> list[CalculationState]:
        """Every state visited, in order."""
        return [CalculationState.PENDING] + [entry.to_state for entry in self.entries]

    @property
    def is_finalized(self) -> bool:
        return self.state == CalculationState.FINALIZED
