"""Quote, staleness and swap execution flow."""

from scopetrade.services.trade.execution_service import SwapExecutionService
from scopetrade.services.trade.expiry_timer import QuoteExpiryTimer
from scopetrade.services.trade.quote_service import QuoteService
from scopetrade.services.trade.sequencer import RequestSequencer, RequestTicket
from scopetrade.services.trade.staleness import StalenessPolicy
from scopetrade.services.trade.state_machine import ExecutionStateMachine

__all__ = [
    "ExecutionStateMachine",
    "QuoteExpiryTimer",
    "QuoteService",
    "RequestSequencer",
    "RequestTicket",
    "StalenessPolicy",
    "SwapExecutionService",
]
