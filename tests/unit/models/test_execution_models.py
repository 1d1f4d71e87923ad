"""Tests for execution phase models.

Covers the phase/payload consistency of ExecutionSnapshot and the transition
table.
"""

import pytest
from pydantic import ValidationError

from scopetrade.models.execution import (
    PHASE_TRANSITIONS,
    ExecutionOutcome,
    ExecutionPhase,
    ExecutionSnapshot,
    SwapExecutionRequest,
    SwapExecutionResult,
)


class TestPhaseTransitions:
    """Tests for PHASE_TRANSITIONS."""

    def test_every_phase_has_entry(self) -> None:
        assert set(PHASE_TRANSITIONS) == set(ExecutionPhase)

    def test_terminal_phases_only_reset(self) -> None:
        assert PHASE_TRANSITIONS[ExecutionPhase.SUCCESS] == [ExecutionPhase.IDLE]
        assert PHASE_TRANSITIONS[ExecutionPhase.FAILED] == [ExecutionPhase.IDLE]

    def test_quoted_cannot_skip_confirmation(self) -> None:
        assert ExecutionPhase.SUBMITTING not in PHASE_TRANSITIONS[ExecutionPhase.QUOTED]

    def test_idle_only_starts_quoting(self) -> None:
        assert PHASE_TRANSITIONS[ExecutionPhase.IDLE] == [ExecutionPhase.QUOTING]


class TestExecutionSnapshot:
    """Tests for snapshot payload validation."""

    def test_default_is_idle(self) -> None:
        snapshot = ExecutionSnapshot()
        assert snapshot.phase == ExecutionPhase.IDLE
        assert snapshot.quote is None
        assert snapshot.outcome is None

    @pytest.mark.parametrize(
        "phase",
        [ExecutionPhase.QUOTED, ExecutionPhase.CONFIRMING, ExecutionPhase.SUBMITTING],
    )
    def test_holding_phases_require_quote(self, phase: ExecutionPhase) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ExecutionSnapshot(phase=phase)
        assert "requires a held quote" in str(exc_info.value)

    def test_idle_cannot_hold_quote(self, quote_factory) -> None:
        with pytest.raises(ValidationError):
            ExecutionSnapshot(phase=ExecutionPhase.IDLE, quote=quote_factory())

    def test_success_requires_signature(self) -> None:
        with pytest.raises(ValidationError):
            ExecutionSnapshot(phase=ExecutionPhase.SUCCESS, outcome=ExecutionOutcome())

        snapshot = ExecutionSnapshot(
            phase=ExecutionPhase.SUCCESS, outcome=ExecutionOutcome(signature="abc123")
        )
        assert snapshot.signature == "abc123"
        assert snapshot.is_terminal

    def test_failed_exposes_error(self) -> None:
        snapshot = ExecutionSnapshot(
            phase=ExecutionPhase.FAILED, outcome=ExecutionOutcome(error_preview="boom")
        )
        assert snapshot.error == "boom"
        assert snapshot.signature is None

    def test_quoting_cannot_carry_outcome(self) -> None:
        with pytest.raises(ValidationError):
            ExecutionSnapshot(
                phase=ExecutionPhase.QUOTING, outcome=ExecutionOutcome(error_preview="x")
            )


class TestSwapExecutionModels:
    """Tests for execution request/result."""

    def test_request_from_quote(self, quote_factory) -> None:
        quote = quote_factory(amount_atomic=500_000_000, slippage_bps=1500)

        request = SwapExecutionRequest.from_quote(
            quote, priority_fee_lamports=100_000, jito_tip_lamports=50_000
        )

        assert request.wallet_address == quote.wallet_address
        assert request.amount_atomic == 500_000_000
        assert request.slippage_bps == 1500
        assert request.priority_fee_lamports == 100_000
        assert request.jito_tip_lamports == 50_000

    def test_result_success_depends_on_signature(self) -> None:
        assert SwapExecutionResult(requested_at_ms=1, signature="sig").was_successful
        assert not SwapExecutionResult(requested_at_ms=1, status="failed").was_successful

    def test_result_to_outcome(self) -> None:
        result = SwapExecutionResult(
            requested_at_ms=1,
            status="confirmed",
            signature="sig",
            execution_time="2025-01-15T12:00:01Z",
        )

        outcome = result.to_outcome()

        assert outcome.signature == "sig"
        assert outcome.status == "confirmed"
        assert outcome.execution_time == "2025-01-15T12:00:01Z"
