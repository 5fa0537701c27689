"""
Agents module for relay-trader.

Interfaces of the external collaborators the client drives during
initialization (chain provider, order protocol) and the HTTP catalog fetcher.
"""

from .provider import ChainProvider
from .protocol import OrderProtocol, ProtocolFactory
from .fetcher import CatalogFetcher, CatalogFetchError

__all__ = [
    "ChainProvider",
    "OrderProtocol",
    "ProtocolFactory",
    "CatalogFetcher",
    "CatalogFetchError",
]
