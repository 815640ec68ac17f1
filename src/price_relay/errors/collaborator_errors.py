"""Quote source and webhook delivery errors."""

from __future__ import annotations

from price_relay.errors.relay_errors import RelayError


class QuoteError(RelayError):
    """Error fetching or decoding a price quote."""

    def __init__(self, message: str, *, status_code: int = 502, code: str = "quote-error") -> None:
        super().__init__(message, status_code=status_code, code=code)


class InvalidKeyError(QuoteError):
    """The quote provider rejected the configured API key."""

    def __init__(self) -> None:
        super().__init__("invalid CoinMarketCap key", code="quote-invalid-key")


class QuoteNotFoundError(QuoteError):
    """The requested symbol or currency is missing from the response."""

    def __init__(self, message: str = "requested token not found") -> None:
        super().__init__(message, code="quote-not-found")


class ExternalAPIError(QuoteError):
    """Non-success status reported by the quote provider."""

    def __init__(self, message: str, *, error_code: int) -> None:
        super().__init__(
            f"CoinMarketCap error: {message} {error_code}",
            code="quote-external-error",
        )
        self.error_code = error_code
        self.error_message = message


class WebhookError(RelayError):
    """Error delivering a payload to a webhook endpoint."""

    def __init__(self, message: str, *, response_status: int | None = None) -> None:
        super().__init__(message, status_code=502, code="webhook-error")
        self.response_status = response_status
