"""ScopeTrade exception hierarchy.

This module defines the base exception class and the specialized exceptions
raised by the quote, execution and trigger-order flows. Every failure is
scoped to a single in-flight operation; none of them is fatal to the process.
"""


class ScopeTradeError(Exception):
    """Base exception for all ScopeTrade errors.

    All custom exceptions in ScopeTrade should inherit from this class
    to enable consistent error handling and logging.
    """

    pass


class ValidationError(ScopeTradeError):
    """Raised when user input fails validation before any network call."""

    pass


class InvalidAmountError(ValidationError):
    """Raised when a UI amount is not finite or not strictly positive.

    Also raised when a decimal count yields an unusable unit multiplier.

    Example:
        raise InvalidAmountError("Enter an amount greater than 0.")
    """

    pass


class DecimalsUnavailableError(ValidationError):
    """Raised when a token's decimal count cannot be resolved.

    Attributes:
        mint: Mint address whose decimals were unknown.
    """

    def __init__(self, message: str, mint: str | None = None) -> None:
        super().__init__(message)
        self.mint = mint


class QuoteFaultError(ScopeTradeError):
    """Raised when the pricing RPC fails or returns nothing usable."""

    pass


class ExecutionFaultError(ScopeTradeError):
    """Raised when the execution RPC fails or returns no signature.

    Attributes:
        preview: Short human-readable failure text for display.
        status: Upstream execution status if one was reported.
    """

    def __init__(
        self,
        message: str,
        preview: str | None = None,
        status: str | None = None,
    ) -> None:
        super().__init__(message)
        self.preview = preview or message
        self.status = status


class StaleQuoteError(ScopeTradeError):
    """Raised when confirm/submit is attempted on an expired quote.

    Enforced locally; the quote is never sent upstream.

    Attributes:
        requested_at_ms: Request timestamp of the expired quote.
    """

    def __init__(self, message: str, requested_at_ms: int | None = None) -> None:
        super().__init__(message)
        self.requested_at_ms = requested_at_ms


class TriggerUnresolvableError(ScopeTradeError):
    """Raised when a trigger price cannot be derived (non-positive supply)."""

    pass


class PhaseTransitionError(ScopeTradeError):
    """Raised when an event is not valid for the current execution phase."""

    pass


class ExecutionDisabledError(ScopeTradeError):
    """Raised when submission is attempted in a build with execution off."""

    pass


class ExternalServiceError(ScopeTradeError):
    """Raised when an external service call fails.

    Attributes:
        service: Name of the external service that failed.
        status_code: HTTP status code if available, None otherwise.

    Example:
        raise ExternalServiceError(service="rpc", message="Bad gateway", status_code=502)
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


class RpcError(ExternalServiceError):
    """Raised when the RPC service answers with an error envelope.

    Callers can switch on ``code`` instead of parsing the message.

    Attributes:
        code: Numeric RPC error code (-32600 means auth required).
    """

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        super().__init__(service="rpc", message=f"RPC {code}: {message}")


class CircuitBreakerOpenError(ScopeTradeError):
    """Raised when circuit breaker is open.

    Example:
        raise CircuitBreakerOpenError("Circuit is open for the RPC host")
    """

    pass
