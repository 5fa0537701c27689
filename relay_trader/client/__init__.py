"""
Client module for relay-trader.

This module provides the high-level client interface users initialize and
trade through.
"""

from .relay_client import RelayClient, RelayClientError, DEFAULT_INIT_STEPS

__all__ = [
    "RelayClient",
    "RelayClientError",
    "DEFAULT_INIT_STEPS",
]
