"""Shared API error definitions."""

from __future__ import annotations

from price_relay.errors.relay_errors import RelayError

# -- Subscriptions ---------------------------------------------------------

ErrSubscriptionDuplicate = RelayError(
    "webhook url is already subscribed", status_code=409, code="subscription-duplicate"
)
ErrWebhookUnreachable = RelayError(
    "could not deliver a test message to the webhook url",
    status_code=400,
    code="webhook-unreachable",
)

# -- Service ---------------------------------------------------------------

ErrServiceNotReady = RelayError("service is not initialized", status_code=503, code="not-ready")
ErrDatastoreUnavailable = RelayError(
    "subscriber store is unavailable", status_code=503, code="datastore-unavailable"
)
