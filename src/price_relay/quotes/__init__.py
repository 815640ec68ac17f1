"""Price quotes: CoinMarketCap client implementing the relay's price source."""

from __future__ import annotations

from price_relay.quotes.client import QuoteClient

__all__ = ["QuoteClient"]
