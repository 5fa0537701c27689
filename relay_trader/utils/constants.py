from typing import Dict

from relay_trader.utils.enums import NetworkId

_ENDPOINTS: Dict[NetworkId, Dict[str, str]] = {
    NetworkId.MAINNET: {
        "endpoint": "https://api.radarrelay.com/v2",
        "websocket_endpoint": "wss://ws.radarrelay.com/v2",
    },
    NetworkId.KOVAN: {
        "endpoint": "https://api.kovan.radarrelay.com/v2",
        "websocket_endpoint": "wss://ws.kovan.radarrelay.com/v2",
    },
}

DEFAULT_INIT_TIMEOUT_MS = 10000


def endpoints_for_network(network_id: int) -> Dict[str, str]:
    """Return the REST and websocket endpoints serving `network_id`."""
    try:
        network = NetworkId(network_id)
    except ValueError:
        raise ValueError(f"Unsupported network: {network_id}") from None
    return dict(_ENDPOINTS[network])
