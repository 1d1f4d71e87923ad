"""Latest-request-wins sequencing for asynchronous operations.

Each logical operation ("fetch a quote", "load trending tokens") owns one
``RequestSequencer``. Issuing a request bumps the generation; when the
request completes, its result is applied only if no newer request was issued
in the meantime. Superseded transport calls are not cancelled, their results
are simply dropped.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RequestTicket:
    """Handle captured when a request is issued."""

    sequencer: RequestSequencer
    request_id: int

    @property
    def is_current(self) -> bool:
        """Check if this is still the most recently issued request."""
        return self.sequencer.is_current(self)


class RequestSequencer:
    """Owned generation counter for one logical operation."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._generation = 0

    @property
    def generation(self) -> int:
        """Id of the most recently issued request (0 before the first)."""
        return self._generation

    def issue(self) -> RequestTicket:
        """Start a new request, superseding any outstanding one."""
        self._generation += 1
        return RequestTicket(sequencer=self, request_id=self._generation)

    def invalidate(self) -> None:
        """Supersede outstanding requests without starting a new one."""
        self._generation += 1

    def is_current(self, ticket: RequestTicket) -> bool:
        """Check a ticket against the counter."""
        return ticket.sequencer is self and ticket.request_id == self._generation

    def apply(self, ticket: RequestTicket, fn: Callable[..., Any], *args: Any) -> bool:
        """Call ``fn(*args)`` only if the ticket is current.

        Returns:
            True if ``fn`` ran, False if the result was discarded.
        """
        if not self.is_current(ticket):
            logger.debug(
                "stale_response_discarded",
                operation=self.name,
                request_id=ticket.request_id,
                current=self._generation,
            )
            return False
        fn(*args)
        return True

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        on_result: Callable[[T], Any],
        on_error: Callable[[Exception], Any] | None = None,
    ) -> bool:
        """Issue a request, await it and apply its outcome if still current.

        Failures of a superseded request are discarded like its results. A
        failure of the current request goes to ``on_error`` when given and is
        re-raised otherwise.

        Returns:
            True if the outcome was applied.
        """
        ticket = self.issue()
        try:
            result = await operation()
        except Exception as e:
            if on_error is not None:
                return self.apply(ticket, on_error, e)
            if self.is_current(ticket):
                raise
            logger.debug(
                "stale_failure_discarded",
                operation=self.name,
                request_id=ticket.request_id,
                error=str(e),
            )
            return False
        return self.apply(ticket, on_result, result)
