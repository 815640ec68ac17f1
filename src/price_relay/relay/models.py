"""Value types passed through a relay cycle."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003
from decimal import ROUND_HALF_UP, Decimal


@dataclass(frozen=True)
class Sample:
    """One price observation, alive for a single cycle."""

    value: float
    observed_at: datetime


@dataclass(frozen=True)
class Subscriber:
    """Snapshot of a registered delivery endpoint."""

    id: str
    endpoint: str


@dataclass(frozen=True)
class CycleOutcome:
    """Delivery counts for one cycle, plus the error that aborted it (if any).

    ``sample`` is the price that was relayed; it is unset when the cycle
    aborted before a price was formatted.
    """

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    error: BaseException | None = None
    sample: Sample | None = None

    @property
    def ok(self) -> bool:
        """Whether the cycle reached dispatch."""
        return self.error is None


def format_price(sample: Sample) -> str:
    """Render the sample as whole units, rounding halves away from zero."""
    rounded = Decimal(repr(sample.value)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return str(int(rounded))
