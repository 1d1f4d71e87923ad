"""Test data factories using factory_boy.

These factories generate realistic test data for ScopeTrade models.
"""

from tests.factories.quote import QuoteRequestFactory, QuoteResultFactory, QuoteSummaryFactory
from tests.factories.trigger_order import TriggerOrderPayloadFactory

__all__ = [
    "QuoteRequestFactory",
    "QuoteResultFactory",
    "QuoteSummaryFactory",
    "TriggerOrderPayloadFactory",
]
