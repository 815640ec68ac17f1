"""CoinMarketCap REST client: latest quote for one symbol.

- GET /v2/cryptocurrency/quotes/latest?symbol=<symbol>

Errors come back as ``{"status": {"error_code": ..., "error_message": ...}}``;
code 1001 means the API key was rejected.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import TYPE_CHECKING, Any

import httpx

from price_relay.errors.collaborator_errors import (
    ExternalAPIError,
    InvalidKeyError,
    QuoteError,
    QuoteNotFoundError,
)
from price_relay.relay.models import Sample

if TYPE_CHECKING:
    from price_relay.config.settings import QuoteConfig

API_KEY_HEADER = "X-CMC_PRO_API_KEY"
INVALID_KEY_CODE = 1001

_LATEST_PATH = "/v2/cryptocurrency/quotes/latest"


class QuoteClient:
    """Async HTTP client for the CoinMarketCap quotes API.

    Usage::

        quotes = QuoteClient(config)
        await quotes.connect()
        try:
            sample = await quotes.latest()
        finally:
            await quotes.close()
    """

    def __init__(self, config: QuoteConfig) -> None:
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._config.url.rstrip("/"),
            headers={
                "Accept": "application/json",
                API_KEY_HEADER: self._config.api_key,
            },
            timeout=self._config.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def latest(self) -> Sample:
        """Fetch the latest price for the configured symbol.

        Returns:
            A ``Sample`` with the price in the configured currency.

        Raises:
            InvalidKeyError: If the API key was rejected.
            ExternalAPIError: On any other provider-reported error.
            QuoteNotFoundError: If the symbol or currency is missing.
            QuoteError: On transport or decoding failures.
        """
        client = self._ensure_connected()
        try:
            response = await client.get(_LATEST_PATH, params={"symbol": self._config.symbol})
        except httpx.HTTPError as exc:
            raise QuoteError(f"quote request failed: {exc}") from exc

        if response.status_code != 200:
            raise self._decode_error(response)
        return self._decode_success(response)

    async def fetch_sample(self) -> Sample:
        """Return one price sample for the relay loop."""
        return await self.latest()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_connected(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "QuoteClient is not connected. Call connect() first."
            raise RuntimeError(msg)
        return self._client

    @staticmethod
    def _decode_error(response: httpx.Response) -> QuoteError:
        try:
            status = response.json()["status"]
            code = int(status["error_code"])
            message = str(status.get("error_message") or "")
        except (ValueError, KeyError, TypeError) as exc:
            return QuoteError(
                f"decoding failed response failed (HTTP {response.status_code}): {exc}"
            )
        if code == INVALID_KEY_CODE:
            return InvalidKeyError()
        return ExternalAPIError(message, error_code=code)

    def _decode_success(self, response: httpx.Response) -> Sample:
        try:
            body: dict[str, Any] = response.json()
            data: dict[str, Any] = body["data"]
        except (ValueError, KeyError, TypeError) as exc:
            raise QuoteError(f"decoding success response failed: {exc}") from exc
        if not isinstance(data, dict):
            raise QuoteError("decoding success response failed: data is not an object")

        entries = data.get(self._config.symbol)
        if not entries:
            raise QuoteNotFoundError
        entry = next(
            (e for e in entries if isinstance(e, dict) and e.get("id") == self._config.coin_id),
            None,
        )
        if entry is None:
            raise QuoteNotFoundError
        quote = (entry.get("quote") or {}).get(self._config.convert)
        if quote is None:
            raise QuoteNotFoundError

        try:
            price = float(quote["price"])
            observed_at = datetime.fromisoformat(quote["last_updated"])
        except (KeyError, TypeError, ValueError) as exc:
            raise QuoteError(f"decoding quote failed: {exc}") from exc
        if not math.isfinite(price):
            raise QuoteError(f"quote price is not a finite number: {price!r}")
        return Sample(value=price, observed_at=observed_at)
