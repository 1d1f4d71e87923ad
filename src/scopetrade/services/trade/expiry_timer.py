"""Staleness tick for a held quote.

Runs a polling loop that asks the state machine to drop its quote once the
quote's TTL has elapsed.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

from scopetrade.core.clock import Clock, system_clock_ms
from scopetrade.models.execution import ExecutionPhase

if TYPE_CHECKING:
    from scopetrade.services.trade.state_machine import ExecutionStateMachine

logger = structlog.get_logger(__name__)

_TICKING_PHASES = (ExecutionPhase.QUOTED, ExecutionPhase.CONFIRMING)


class QuoteExpiryTimer:
    """Polls ``machine.check_expiry`` every ``tick_seconds``.

    The cadence defaults to the machine's ``staleness_tick_seconds`` setting.

    The tick only does work while a quote is held; in any other phase it is a
    no-op, so the timer can run for the whole life of the owning screen.
    """

    def __init__(
        self,
        machine: ExecutionStateMachine,
        clock: Clock = system_clock_ms,
        tick_seconds: float | None = None,
        on_tick: Callable[[int | None], None] | None = None,
    ) -> None:
        self._machine = machine
        self._clock = clock
        self._tick_seconds = (
            tick_seconds if tick_seconds is not None else machine.settings.staleness_tick_seconds
        )
        self._on_tick = on_tick
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def tick_seconds(self) -> float:
        return self._tick_seconds

    @property
    def is_running(self) -> bool:
        """Check if the timer loop is active."""
        return self._running

    async def start(self) -> None:
        """Start the tick loop."""
        if self._running:
            logger.warning("expiry_timer_already_running")
            return

        self._running = True
        self._task = asyncio.create_task(self._tick_loop())
        logger.debug("expiry_timer_started", tick_seconds=self._tick_seconds)

    async def stop(self) -> None:
        """Stop the tick loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.debug("expiry_timer_stopped")

    def tick(self) -> bool:
        """Run one staleness check now.

        Returns:
            True if the held quote expired on this tick.
        """
        if self._machine.phase not in _TICKING_PHASES:
            return False

        now = self._clock()
        expired = self._machine.check_expiry(now)
        if self._on_tick is not None:
            self._on_tick(self._machine.seconds_remaining(now))
        return expired

    async def _tick_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self._tick_seconds)
            try:
                self.tick()
            except Exception as e:
                logger.error("expiry_tick_error", error=str(e))

    async def __aenter__(self) -> QuoteExpiryTimer:
        await self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.stop()
