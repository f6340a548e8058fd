"""Tests for calculation state machine."""

import pytest

from dutch_payroll.services.state_machine import (
    CalculationState,
    CalculationStateMachine,
    CalculationTrace,
    InvalidTransitionError,
)


class TestCalculationStateMachine:
    """Test state machine transitions."""

    def test_valid_transitions(self):
        """Test that valid transitions are allowed."""
        # pending → validated
        assert CalculationStateMachine.can_transition("pending", "validated") is True

        # validated → prorated
        assert CalculationStateMachine.can_transition("validated", "prorated") is True

        # tax_computed → holiday_allowance_computed
        assert (
            CalculationStateMachine.can_transition("tax_computed", "holiday_allowance_computed")
            is True
        )

        # holiday_allowance_computed → finalized
        assert (
            CalculationStateMachine.can_transition("holiday_allowance_computed", "finalized")
            is True
        )

    def test_invalid_transitions(self):
        """Test that invalid transitions are blocked."""
        # Can't skip steps
        assert CalculationStateMachine.can_transition("pending", "prorated") is False
        assert CalculationStateMachine.can_transition("prorated", "tax_computed") is False

        # Can't go backwards
        assert CalculationStateMachine.can_transition("validated", "pending") is False

        # Terminal states
        assert CalculationStateMachine.can_transition("finalized", "rejected") is False
        assert CalculationStateMachine.can_transition("rejected", "pending") is False

    def test_any_step_can_reject(self):
        for state in CalculationState:
            if CalculationStateMachine.is_terminal(state):
                continue
            assert CalculationStateMachine.can_transition(state, CalculationState.REJECTED)

    def test_validate_transition_raises(self):
        """Test that validate_transition raises for invalid transitions."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            CalculationStateMachine.validate_transition("pending", "finalized")

        assert exc_info.value.from_state == "pending"
        assert exc_info.value.to_state == "finalized"
        assert exc_info.value.reason is None

    def test_terminal_reason(self):
        with pytest.raises(InvalidTransitionError, match="state is terminal"):
            CalculationStateMachine.validate_transition("finalized", "validated")

    def test_get_next_states(self):
        """Test getting valid next states."""
        assert set(CalculationStateMachine.get_next_states("pending")) == {
            "validated",
            "rejected",
        }
        assert CalculationStateMachine.get_next_states("finalized") == []
        assert CalculationStateMachine.get_next_states("unknown") == []


class TestCalculationTrace:
    """Test per-calculation transition logs."""

    def test_advance(self):
        trace = CalculationTrace()
        trace.advance(CalculationState.VALIDATED)
        trace.advance(CalculationState.PRORATED, "17/31 calendar days")

        assert trace.state == CalculationState.PRORATED
        assert trace.states == [
            CalculationState.PENDING,
            CalculationState.VALIDATED,
            CalculationState.PRORATED,
        ]
        assert trace.entries[-1].note == "17/31 calendar days"

    def test_invalid_advance_leaves_state(self):
        trace = CalculationTrace()
        with pytest.raises(InvalidTransitionError):
            trace.advance(CalculationState.FINALIZED)

        assert trace.state == CalculationState.PENDING
        assert trace.entries == []

    def test_reject(self):
        trace = CalculationTrace()
        trace.reject("bad input")

        assert trace.state == CalculationState.REJECTED
        assert trace.is_finalized is False
        with pytest.raises(InvalidTransitionError):
            trace.reject("again")

    def test_traces_are_independent(self):
        first, second = CalculationTrace(), CalculationTrace()
        first.advance(CalculationState.VALIDATED)

        assert second.state == CalculationState.PENDING
        assert second.entries == []
