"""Webhook delivery: one POST per message.

Messages use the Discord-compatible body ``{"content": "<text>"}``.
A 200 or 204 response counts as delivered; the caller bounds the call
with its own deadline and decides what a failure means.
"""

from __future__ import annotations

import httpx

from price_relay.errors.collaborator_errors import WebhookError

WEBHOOK_TIMEOUT = 10.0  # seconds
_SUCCESS_STATUSES = frozenset({200, 204})


class WebhookClient:
    """Posts text messages to webhook URLs.

    Usage::

        webhooks = WebhookClient(timeout=10.0)
        await webhooks.connect()
        try:
            await webhooks.send("https://discord.com/api/webhooks/...", "64213")
        finally:
            await webhooks.close()
    """

    def __init__(self, *, timeout: float = WEBHOOK_TIMEOUT) -> None:
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(timeout=self._timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    async def send(self, url: str, text: str) -> None:
        """POST *text* to *url*.

        Raises:
            WebhookError: On transport errors or a non-2xx response.
        """
        client = self._ensure_connected()
        try:
            response = await client.post(url, json={"content": text})
        except httpx.HTTPError as exc:
            raise WebhookError(f"webhook request failed: {exc}") from exc

        if response.status_code not in _SUCCESS_STATUSES:
            raise WebhookError(
                f"received non-2xx response: {response.status_code} | ({response.text})",
                response_status=response.status_code,
            )

    async def deliver_one(self, endpoint: str, payload: str) -> None:
        """Deliver one relay payload to one subscriber endpoint."""
        await self.send(endpoint, payload)

    def _ensure_connected(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "WebhookClient is not connected. Call connect() first."
            raise RuntimeError(msg)
        return self._client
