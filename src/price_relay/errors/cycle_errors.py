"""Errors that abort a single relay cycle."""

from __future__ import annotations

from price_relay.errors.relay_errors import RelayError


class CycleError(RelayError):
    """A relay cycle was aborted before dispatch."""

    def __init__(self, message: str, *, code: str = "cycle-error") -> None:
        super().__init__(message, status_code=500, code=code)


class CycleCancelledError(CycleError):
    """Stop was requested before the cycle started."""

    def __init__(self, message: str = "stop requested before the cycle started") -> None:
        super().__init__(message, code="cycle-cancelled")


class CycleTimeoutError(CycleError):
    """A fetch step ran past the cycle deadline."""

    def __init__(self, step: str, timeout: float) -> None:
        super().__init__(f"{step} exceeded the {timeout:g}s cycle budget", code="cycle-timeout")
        self.step = step
