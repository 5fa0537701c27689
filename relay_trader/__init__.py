"""
relay-trader - a client SDK for trading against a relay order book.

The client bootstraps itself through an ordered chain of asynchronous steps
(provider, network, protocol client, tokens, account, trade facade, markets)
driven by an event-gated initialization lifecycle.
"""

__version__ = "0.1.0"

from relay_trader.client.relay_client import RelayClient, RelayClientError
from relay_trader.core.lifecycle import InitLifecycle, StepDescriptor, insert_step
from relay_trader.core.event_bus import EventBus

__all__ = [
    "RelayClient",
    "RelayClientError",
    "InitLifecycle",
    "StepDescriptor",
    "insert_step",
    "EventBus",
    "__version__",
]
