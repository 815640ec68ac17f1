"""price-relay: scheduled price sampling relayed to webhook subscribers."""

__version__ = "0.1.0"
