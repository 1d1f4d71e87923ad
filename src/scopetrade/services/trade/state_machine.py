"""Execution state machine for a single trade attempt.

Drives quote -> confirmation -> submission -> terminal outcome:

    idle -> quoting -> quoted -> confirming -> submitting -> success | failed

Rules:
- Only the latest quote request may move the machine out of ``quoting``.
- A held quote expires back to ``idle`` on the staleness tick.
- Confirm and submit re-check staleness; an expired quote is never submitted.
- ``success`` and ``failed`` stay put until ``reset()``.
- Instant mode goes ``quoting -> submitting`` without a confirmation step.

Every transition is validated against PHASE_TRANSITIONS, logged and appended
to ``history``.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from scopetrade.config.settings import Settings, get_settings
from scopetrade.config.trade_settings import TradeProfile
from scopetrade.core.clock import Clock, system_clock_ms
from scopetrade.core.exceptions import (
    ExecutionDisabledError,
    ExecutionFaultError,
    PhaseTransitionError,
    QuoteFaultError,
    StaleQuoteError,
)
from scopetrade.models.execution import (
    PHASE_TRANSITIONS,
    ExecutionOutcome,
    ExecutionPhase,
    ExecutionSnapshot,
    PhaseChange,
    SwapExecutionRequest,
)
from scopetrade.models.quote import QuoteRequest, QuoteResult
from scopetrade.services.trade.execution_service import SwapExecutionService
from scopetrade.services.trade.quote_service import QuoteService
from scopetrade.services.trade.sequencer import RequestSequencer, RequestTicket
from scopetrade.services.trade.staleness import StalenessPolicy

logger = structlog.get_logger(__name__)

STALE_QUOTE_MESSAGE = "Quote expired. Refresh quote before execution."
EXECUTION_DISABLED_MESSAGE = "Execution is disabled in this build."

SnapshotListener = Callable[[ExecutionSnapshot], None]


class ExecutionStateMachine:
    """Owns the phase and held quote of one trade screen.

    One instance per owning view; call ``reset()`` when the view goes away so
    that a later visit never resumes a stale attempt.
    """

    def __init__(
        self,
        quote_service: QuoteService,
        execution_service: SwapExecutionService,
        policy: StalenessPolicy | None = None,
        settings: Settings | None = None,
        profile: TradeProfile | None = None,
        clock: Clock = system_clock_ms,
    ) -> None:
        self._settings = settings or get_settings()
        self._quotes = quote_service
        self._executions = execution_service
        self._policy = policy or StalenessPolicy(ttl_seconds=self._settings.quote_ttl_seconds)
        self._profile = profile
        self._clock = clock

        self._snapshot = ExecutionSnapshot()
        self._quote_requests = RequestSequencer("quote")
        self._submissions = RequestSequencer("submit")
        self._listeners: list[SnapshotListener] = []
        self.history: list[PhaseChange] = []

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> ExecutionSnapshot:
        """Current phase and payload."""
        return self._snapshot

    @property
    def phase(self) -> ExecutionPhase:
        return self._snapshot.phase

    @property
    def quote(self) -> QuoteResult | None:
        return self._snapshot.quote

    @property
    def policy(self) -> StalenessPolicy:
        return self._policy

    @property
    def settings(self) -> Settings:
        return self._settings

    def seconds_remaining(self, now_ms: int | None = None) -> int | None:
        """Validity left on the held quote, None when nothing is held."""
        quote = self.quote
        if quote is None:
            return None
        now = self._clock() if now_ms is None else now_ms
        return self._policy.seconds_remaining(quote.requested_at_ms, now)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a callback for every new snapshot.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def request_quote(self, request: QuoteRequest) -> ExecutionSnapshot:
        """Fetch a quote and hold it for confirmation.

        Allowed from ``idle``, ``quoting`` (supersedes the outstanding
        request) and ``quoted`` (refresh). A pricing fault moves the machine
        to ``failed``; a response for a superseded request changes nothing.

        Raises:
            InvalidAmountError: Before any state change or network call.
            DecimalsUnavailableError: Before any state change or network call.
            PhaseTransitionError: From any other phase.
        """
        self._require_phase(
            "request_quote",
            ExecutionPhase.IDLE,
            ExecutionPhase.QUOTING,
            ExecutionPhase.QUOTED,
        )
        self._quotes.validate(request)

        ticket = self._quote_requests.issue()
        self._transition(ExecutionPhase.QUOTING, "request_quote")

        quote = await self._fetch_quote(request, ticket)
        if quote is None:
            return self._snapshot

        self._quote_requests.apply(
            ticket, self._transition, ExecutionPhase.QUOTED, "quote_received", quote
        )
        return self._snapshot

    def check_expiry(self, now_ms: int | None = None) -> bool:
        """Drop the held quote once it is stale.

        Driven by the staleness tick while ``quoted`` or ``confirming``.

        Returns:
            True if the quote expired and the machine went back to ``idle``.
        """
        if self.phase not in (ExecutionPhase.QUOTED, ExecutionPhase.CONFIRMING):
            return False

        quote = self.quote
        assert quote is not None
        now = self._clock() if now_ms is None else now_ms
        if not self._policy.is_stale(quote.requested_at_ms, now):
            return False

        logger.info(
            "quote_expired",
            phase=self.phase.value,
            age_ms=self._policy.age_ms(quote.requested_at_ms, now),
        )
        self._transition(ExecutionPhase.IDLE, "quote_expired")
        return True

    def confirm(self, now_ms: int | None = None) -> ExecutionSnapshot:
        """Move a fresh held quote to ``confirming``.

        A stale quote is rejected and the phase stays ``quoted``; the next
        expiry check takes it to ``idle``.

        Raises:
            PhaseTransitionError: If no quote is held.
            ExecutionDisabledError: If execution is turned off. The gate is
                closed by default; enable it with ``execution_enabled=True``
                in Settings (env ``EXECUTION_ENABLED=true``).
            StaleQuoteError: If the held quote has expired.
        """
        self._require_phase("confirm", ExecutionPhase.QUOTED)
        self._require_execution_enabled()

        quote = self.quote
        assert quote is not None
        now = self._clock() if now_ms is None else now_ms
        if self._policy.is_stale(quote.requested_at_ms, now):
            logger.warning(
                "stale_quote_rejected",
                action="confirm",
                requested_at_ms=quote.requested_at_ms,
                now_ms=now,
            )
            raise StaleQuoteError(STALE_QUOTE_MESSAGE, requested_at_ms=quote.requested_at_ms)

        self._transition(ExecutionPhase.CONFIRMING, "confirm", quote)
        return self._snapshot

    def cancel_confirmation(self) -> ExecutionSnapshot:
        """Back out of the confirmation step, keeping the quote."""
        self._require_phase("cancel_confirmation", ExecutionPhase.CONFIRMING)
        self._transition(ExecutionPhase.QUOTED, "cancel_confirmation", self.quote)
        return self._snapshot

    async def submit(self, now_ms: int | None = None) -> ExecutionSnapshot:
        """Submit the confirmed quote to the execution RPC.

        Raises:
            PhaseTransitionError: If not ``confirming``.
            ExecutionDisabledError: If execution is turned off (the default;
                see ``Settings.execution_enabled``).
            StaleQuoteError: If the quote expired while confirming. The
                machine returns to ``idle`` and nothing is sent upstream.
        """
        self._require_phase("submit", ExecutionPhase.CONFIRMING)
        self._require_execution_enabled()

        quote = self.quote
        assert quote is not None
        self._ensure_fresh(quote, now_ms, action="submit")

        ticket = self._submissions.issue()
        self._transition(ExecutionPhase.SUBMITTING, "submit", quote)
        return await self._execute(quote, ticket)

    async def execute_instant(self, request: QuoteRequest) -> ExecutionSnapshot:
        """Quote and submit in one step, with no confirmation phase.

        Raises:
            PhaseTransitionError: If not ``idle``.
            ExecutionDisabledError: If execution is turned off.
            InvalidAmountError: Before any state change or network call.
            DecimalsUnavailableError: Before any state change or network call.
            StaleQuoteError: If the quote expired before it could be sent.
        """
        self._require_phase("execute_instant", ExecutionPhase.IDLE)
        self._require_execution_enabled()
        self._quotes.validate(request)

        ticket = self._quote_requests.issue()
        self._transition(ExecutionPhase.QUOTING, "instant_quote")

        quote = await self._fetch_quote(request, ticket)
        if quote is None or not ticket.is_current:
            return self._snapshot

        self._ensure_fresh(quote, None, action="instant")

        submission = self._submissions.issue()
        self._transition(ExecutionPhase.SUBMITTING, "instant_submit", quote)
        return await self._execute(quote, submission)

    def reset(self, reason: str = "reset") -> ExecutionSnapshot:
        """Clear all held data and return to ``idle``.

        Outstanding quote or execution requests are superseded so their
        results are discarded when they land.
        """
        self._quote_requests.invalidate()
        self._submissions.invalidate()
        if self.phase != ExecutionPhase.IDLE:
            self._transition(ExecutionPhase.IDLE, reason)
        return self._snapshot

    def close(self) -> None:
        """Tear down with the owning view."""
        self.reset("teardown")
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _fetch_quote(
        self, request: QuoteRequest, ticket: RequestTicket
    ) -> QuoteResult | None:
        """Await the pricing call, failing the attempt if it is still current."""
        try:
            quote = await self._quotes.request_quote(request)
        except QuoteFaultError as e:
            self._quote_requests.apply(
                ticket,
                self._transition,
                ExecutionPhase.FAILED,
                "quote_failed",
                None,
                ExecutionOutcome(error_preview=str(e)),
            )
            return None

        if not ticket.is_current:
            logger.debug("superseded_quote_dropped", request_id=ticket.request_id)
            return None
        return quote

    async def _execute(self, quote: QuoteResult, ticket: RequestTicket) -> ExecutionSnapshot:
        """Call the execution RPC and land in ``success`` or ``failed``."""
        request = SwapExecutionRequest.from_quote(
            quote,
            priority_fee_lamports=self._profile.priority_lamports if self._profile else 0,
            jito_tip_lamports=self._profile.tip_lamports if self._profile else 0,
        )

        try:
            result = await self._executions.request_execution(request)
        except ExecutionFaultError as e:
            self._submissions.apply(
                ticket,
                self._transition,
                ExecutionPhase.FAILED,
                "execution_failed",
                None,
                ExecutionOutcome(status=e.status, error_preview=e.preview),
            )
            return self._snapshot

        if result.was_successful:
            self._submissions.apply(
                ticket,
                self._transition,
                ExecutionPhase.SUCCESS,
                "execution_succeeded",
                None,
                result.to_outcome(),
            )
        else:
            status = result.status or "unknown"
            outcome = result.to_outcome().model_copy(
                update={
                    "error_preview": result.error_preview
                    or f"Execution returned no signature (status: {status})."
                }
            )
            self._submissions.apply(
                ticket,
                self._transition,
                ExecutionPhase.FAILED,
                "execution_without_signature",
                None,
                outcome,
            )
        return self._snapshot

    def _ensure_fresh(self, quote: QuoteResult, now_ms: int | None, action: str) -> None:
        """Expire the attempt and raise if the quote is stale."""
        now = self._clock() if now_ms is None else now_ms
        if not self._policy.is_stale(quote.requested_at_ms, now):
            return

        logger.warning(
            "stale_quote_rejected",
            action=action,
            requested_at_ms=quote.requested_at_ms,
            now_ms=now,
        )
        self._transition(ExecutionPhase.IDLE, "quote_expired")
        raise StaleQuoteError(STALE_QUOTE_MESSAGE, requested_at_ms=quote.requested_at_ms)

    def _require_phase(self, event: str, *allowed: ExecutionPhase) -> None:
        if self.phase not in allowed:
            raise PhaseTransitionError(
                f"Cannot {event} while {self.phase.value}. "
                f"Allowed from: {[p.value for p in allowed]}"
            )

    def _require_execution_enabled(self) -> None:
        if not self._settings.execution_enabled:
            logger.warning("execution_blocked_disabled", phase=self.phase.value)
            raise ExecutionDisabledError(EXECUTION_DISABLED_MESSAGE)

    def _transition(
        self,
        to_phase: ExecutionPhase,
        event: str,
        quote: QuoteResult | None = None,
        outcome: ExecutionOutcome | None = None,
    ) -> None:
        """Validate, apply, record and publish a phase change."""
        from_phase = self.phase
        valid_next = PHASE_TRANSITIONS.get(from_phase, [])
        if to_phase not in valid_next:
            raise PhaseTransitionError(
                f"Invalid transition: {from_phase.value} -> {to_phase.value}. "
                f"Valid transitions: {[p.value for p in valid_next]}"
            )

        self._snapshot = ExecutionSnapshot(phase=to_phase, quote=quote, outcome=outcome)
        self.history.append(PhaseChange(from_phase=from_phase, to_phase=to_phase, event=event))

        logger.info(
            "phase_changed",
            from_phase=from_phase.value,
            to_phase=to_phase.value,
            trigger=event,
            signature=outcome.signature[:16] if outcome and outcome.signature else None,
            error=outcome.error_preview if outcome else None,
        )

        for listener in list(self._listeners):
            listener(self._snapshot)
