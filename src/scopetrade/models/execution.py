"""Execution phase model and swap execution payloads.

A single trade attempt moves through ``ExecutionPhase`` values. The phase and
its payload are carried together in ``ExecutionSnapshot`` so that combinations
such as "submitting without a quote" cannot be represented.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from scopetrade.models.quote import QuoteResult


class ExecutionPhase(str, Enum):
    """Phase of a single trade attempt."""

    IDLE = "idle"  # Nothing held
    QUOTING = "quoting"  # Pricing RPC outstanding
    QUOTED = "quoted"  # Quote held, awaiting user confirmation
    CONFIRMING = "confirming"  # User confirmed, about to submit
    SUBMITTING = "submitting"  # Execution RPC outstanding
    SUCCESS = "success"  # Terminal, signature received
    FAILED = "failed"  # Terminal, error preview available


# Valid phase transitions. IDLE is reachable from everywhere through reset.
PHASE_TRANSITIONS: dict[ExecutionPhase, list[ExecutionPhase]] = {
    ExecutionPhase.IDLE: [ExecutionPhase.QUOTING],
    ExecutionPhase.QUOTING: [
        ExecutionPhase.QUOTING,  # Superseded by a newer request
        ExecutionPhase.QUOTED,
        ExecutionPhase.SUBMITTING,  # Instant mode
        ExecutionPhase.FAILED,
        ExecutionPhase.IDLE,
    ],
    ExecutionPhase.QUOTED: [
        ExecutionPhase.QUOTING,  # Refresh
        ExecutionPhase.CONFIRMING,
        ExecutionPhase.IDLE,  # Expired or reset
    ],
    ExecutionPhase.CONFIRMING: [
        ExecutionPhase.SUBMITTING,
        ExecutionPhase.QUOTED,  # Confirmation cancelled
        ExecutionPhase.IDLE,  # Expired or reset
    ],
    ExecutionPhase.SUBMITTING: [
        ExecutionPhase.SUCCESS,
        ExecutionPhase.FAILED,
        ExecutionPhase.IDLE,
    ],
    ExecutionPhase.SUCCESS: [ExecutionPhase.IDLE],
    ExecutionPhase.FAILED: [ExecutionPhase.IDLE],
}

QUOTE_HOLDING_PHASES = frozenset(
    {ExecutionPhase.QUOTED, ExecutionPhase.CONFIRMING, ExecutionPhase.SUBMITTING}
)
TERMINAL_PHASES = frozenset({ExecutionPhase.SUCCESS, ExecutionPhase.FAILED})


class ExecutionOutcome(BaseModel):
    """Result surfaced in a terminal phase."""

    model_config = ConfigDict(frozen=True)

    signature: str | None = None
    status: str | None = None
    execution_time: str | None = None
    error_preview: str | None = None


class ExecutionSnapshot(BaseModel):
    """Current phase of the state machine together with its payload."""

    model_config = ConfigDict(frozen=True)

    phase: ExecutionPhase = ExecutionPhase.IDLE
    quote: QuoteResult | None = None
    outcome: ExecutionOutcome | None = None

    @model_validator(mode="after")
    def check_payload_matches_phase(self) -> ExecutionSnapshot:
        """Reject payloads that do not belong to the phase."""
        holds_quote = self.phase in QUOTE_HOLDING_PHASES
        if holds_quote and self.quote is None:
            raise ValueError(f"{self.phase.value} requires a held quote")
        if not holds_quote and self.quote is not None:
            raise ValueError(f"{self.phase.value} cannot hold a quote")

        if self.phase in TERMINAL_PHASES:
            if self.outcome is None:
                raise ValueError(f"{self.phase.value} requires an outcome")
            if self.phase == ExecutionPhase.SUCCESS and not self.outcome.signature:
                raise ValueError("success requires a transaction signature")
        elif self.outcome is not None:
            raise ValueError(f"{self.phase.value} cannot carry an outcome")
        return self

    @property
    def is_terminal(self) -> bool:
        """Check if the attempt has finished."""
        return self.phase in TERMINAL_PHASES

    @property
    def error(self) -> str | None:
        """Failure text for the failed phase."""
        if self.phase == ExecutionPhase.FAILED and self.outcome is not None:
            return self.outcome.error_preview
        return None

    @property
    def signature(self) -> str | None:
        """Transaction signature for the success phase."""
        return self.outcome.signature if self.outcome is not None else None


class PhaseChange(BaseModel):
    """One entry of the state machine's audit trail."""

    model_config = ConfigDict(frozen=True)

    from_phase: ExecutionPhase
    to_phase: ExecutionPhase
    event: str
    at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class SwapExecutionRequest(BaseModel):
    """Request sent to the execution RPC."""

    wallet_address: str = Field(..., min_length=1)
    input_mint: str = Field(..., min_length=1)
    output_mint: str = Field(..., min_length=1)
    amount_atomic: int = Field(..., ge=1)
    slippage_bps: int = Field(..., ge=0, le=10000)
    priority_fee_lamports: int = Field(default=0, ge=0)
    jito_tip_lamports: int = Field(default=0, ge=0)

    @classmethod
    def from_quote(
        cls,
        quote: QuoteResult,
        priority_fee_lamports: int = 0,
        jito_tip_lamports: int = 0,
    ) -> SwapExecutionRequest:
        """Build the execution request for a held quote."""
        return cls(
            wallet_address=quote.wallet_address,
            input_mint=quote.input_mint,
            output_mint=quote.output_mint,
            amount_atomic=quote.amount_atomic,
            slippage_bps=quote.slippage_bps,
            priority_fee_lamports=priority_fee_lamports,
            jito_tip_lamports=jito_tip_lamports,
        )


class SwapExecutionResult(BaseModel):
    """Parsed response of the execution RPC."""

    requested_at_ms: int
    status: str | None = None
    signature: str | None = None
    execution_id: int | None = None
    creation_time: str | None = None
    execution_time: str | None = None
    error_preview: str | None = None
    raw: Any = None

    @property
    def was_successful(self) -> bool:
        """Check if the swap produced a transaction signature."""
        return bool(self.signature)

    def to_outcome(self) -> ExecutionOutcome:
        """Project into the outcome shown in a terminal phase."""
        return ExecutionOutcome(
            signature=self.signature,
            status=self.status,
            execution_time=self.execution_time,
            error_preview=self.error_preview,
        )
