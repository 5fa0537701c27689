import asyncio
import logging
from typing import Any, Dict, List, Optional

import pytest

from relay_trader.agents.fetcher import CatalogFetchError
from relay_trader.agents.protocol import OrderProtocol
from relay_trader.agents.provider import ChainProvider
from relay_trader.client.relay_client import RelayClient
from relay_trader.core.event_bus import EventBus
from relay_trader.domain.account.account import BaseAccount
from relay_trader.utils.config import RelayConfig

ENDPOINT = "https://api.test.relay/v2"

TOKENS = [
    {"address": "0xweth", "symbol": "WETH", "decimals": 18, "name": "Wrapped Ether"},
    {"address": "0xdai", "symbol": "DAI", "decimals": 18, "name": "Dai Stablecoin"},
]

MARKETS = [
    {
        "id": "WETH-DAI",
        "displayName": "WETH/DAI",
        "baseTokenAddress": "0xweth",
        "quoteTokenAddress": "0xdai",
        "baseTokenDecimals": 18,
        "quoteTokenDecimals": 18,
        "quoteIncrement": 8,
        "minOrderSize": "0.01",
        "maxOrderSize": "1000",
        "score": 9.5,
    },
]

BOOK = {
    "bids": [{"signedOrder": {"hash": "0xbid1"}}],
    "asks": [{"signedOrder": {"hash": "0xask1"}}, {"signedOrder": {"hash": "0xask2"}}],
}


class FakeProvider(ChainProvider):
    def __init__(self, network_id: int = 1, hangs: bool = False):
        self.network_id = network_id
        self.hangs = hangs
        self.blocked_task: Optional[asyncio.Task] = None
        self.wallet_type = None
        self.wallet_config = None
        self._default_account: Optional[str] = None

    async def set_provider(self, wallet_type, wallet_config):
        if self.hangs:
            self.blocked_task = asyncio.current_task()
            await asyncio.sleep(3600)
        self.wallet_type = wallet_type
        self.wallet_config = wallet_config

    async def get_network_id(self) -> int:
        return self.network_id

    async def set_default_account(self, account):
        self._default_account = account if isinstance(account, str) else f"0xaccount{account}"

    @property
    def default_account(self) -> Optional[str]:
        return self._default_account

    @property
    def transport(self) -> Any:
        return object()


class FakeProtocol(OrderProtocol):
    def __init__(self, provider: ChainProvider, network_id: int):
        self.provider = provider
        self.network_id = network_id
        self.filled: List[Any] = []
        self.cancelled: List[Any] = []

    def build_order(self, maker, base_token, quote_token, side, quantity, price, expiration):
        return {
            "maker": maker,
            "base": base_token,
            "quote": quote_token,
            "side": side.value,
            "quantity": str(quantity),
            "price": str(price),
            "expiration": expiration,
        }

    async def fill_orders(self, orders, quantity, taker) -> str:
        self.filled.append((orders, quantity, taker))
        return "0xfill"

    async def cancel_order(self, order, owner) -> str:
        self.cancelled.append((order, owner))
        return "0xcancel"

    async def await_transaction(self, tx_hash) -> Dict[str, Any]:
        return {"transactionHash": tx_hash, "status": 1}


class FakeAccount(BaseAccount):
    def __init__(self, params):
        super().__init__(params)
        self.submitted: List[Dict[str, Any]] = []

    async def sign(self, order):
        return {**order, "signature": f"signed-by-{self.address}"}

    async def submit(self, signed_order):
        self.submitted.append(signed_order)
        return True


class FakeFetcher:
    """Serves canned catalogs by URL suffix; `fail_on` makes a suffix raise."""

    def __init__(self, fail_on: Optional[str] = None):
        self.fail_on = fail_on
        self.requested: List[str] = []
        self.closed = False

    async def get(self, url: str) -> Any:
        self.requested.append(url)
        if self.fail_on and url.endswith(self.fail_on):
            raise CatalogFetchError(url, "503 Service Unavailable")
        if url.endswith("/tokens"):
            return TOKENS
        if url.endswith("/markets"):
            return MARKETS
        if url.endswith("/book"):
            return BOOK
        raise CatalogFetchError(url, "404 Not Found")

    def close(self):
        self.closed = True


@pytest.fixture
def logger():
    return logging.getLogger("relay-trader-tests")


@pytest.fixture
def events(logger):
    return EventBus(logger)


@pytest.fixture
def config():
    return RelayConfig(
        Endpoint=ENDPOINT,
        WebsocketEndpoint="wss://ws.test.relay/v2",
        SdkInitializationTimeout=500,
        ConsoleLevel="ERROR",
    )


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def make_client(config, fetcher, provider):
    """Build RelayClients wired to the fakes and close them afterwards."""
    clients = []

    def factory(**overrides):
        kwargs = dict(
            wallet=FakeAccount,
            provider=provider,
            protocol_factory=FakeProtocol,
            config=config,
            fetcher=fetcher,
        )
        kwargs.update(overrides)
        client = RelayClient(**kwargs)
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()
