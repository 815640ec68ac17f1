"""RelayError: base exception class for all price-relay errors."""

from __future__ import annotations


class RelayError(Exception):
    """Base error for all price-relay operations.

    Attributes:
        message: Human-readable error description.
        status_code: Suggested HTTP status code.
        code: Machine-readable error code string.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        code: str = "relay-error",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class ServerError(RelayError):
    """The inbound HTTP server stopped for a reason other than shutdown."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=500, code="server-error")
