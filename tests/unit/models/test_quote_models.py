"""Tests for quote models."""

import pytest
from pydantic import ValidationError

from scopetrade.models.quote import QuoteRequest, QuoteResult, QuoteSummary


class TestQuoteRequest:
    """Tests for QuoteRequest."""

    def test_amount_is_not_validated_by_model(self) -> None:
        """A zero amount is accepted here so the service can reject it."""
        request = QuoteRequest(
            wallet_address="wallet",
            input_mint="in",
            output_mint="out",
            amount_ui=0,
        )
        assert request.amount_ui == 0
        assert request.slippage_bps is None

    def test_slippage_bounds(self) -> None:
        with pytest.raises(ValidationError):
            QuoteRequest(
                wallet_address="wallet",
                input_mint="in",
                output_mint="out",
                amount_ui=1,
                slippage_bps=10_001,
            )


class TestQuoteSummary:
    """Tests for QuoteSummary."""

    def test_all_fields_default_to_unknown(self) -> None:
        summary = QuoteSummary()
        assert all(value is None for value in summary.model_dump().values())


class TestQuoteResult:
    """Tests for QuoteResult."""

    def test_is_frozen(self, quote_factory) -> None:
        quote = quote_factory()

        with pytest.raises(ValidationError):
            quote.amount_atomic = 1

    def test_rejects_zero_atomic_amount(self, quote_factory) -> None:
        with pytest.raises(ValidationError):
            quote_factory(amount_atomic=0)

    def test_rejects_missing_timestamp(self, quote_factory) -> None:
        with pytest.raises(ValidationError):
            quote_factory(requested_at_ms=0)

    def test_short_label(self, quote_factory) -> None:
        quote = quote_factory(
            input_mint="So11111111111111111111111111111111111111112",
            output_mint="DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
        )
        assert quote.short_label == "0.5 So111111->DezXAZ8z"
