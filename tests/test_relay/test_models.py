"""Tests for relay value types and payload formatting."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from price_relay.errors.collaborator_errors import QuoteError
from price_relay.relay.models import CycleOutcome, Sample, format_price

_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


class TestFormatPrice:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (64213.4, "64213"),
            (64213.5, "64214"),
            (2.5, "3"),
            (0.49, "0"),
            (-1.5, "-2"),
            (100.0, "100"),
        ],
    )
    def test_rounds_half_up(self, value: float, expected: str) -> None:
        assert format_price(Sample(value=value, observed_at=_NOW)) == expected


class TestCycleOutcome:
    def test_defaults(self) -> None:
        outcome = CycleOutcome()
        assert (outcome.attempted, outcome.succeeded, outcome.failed) == (0, 0, 0)
        assert outcome.ok

    def test_error_marks_not_ok(self) -> None:
        assert not CycleOutcome(error=QuoteError("down")).ok

    def test_frozen(self) -> None:
        outcome = CycleOutcome()
        with pytest.raises(AttributeError):
            outcome.attempted = 3  # type: ignore[misc]
