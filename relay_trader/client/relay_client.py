from __future__ import annotations
import asyncio
import logging
from typing import Any, Dict, Hashable, List, Optional, Sequence, Type, Union

from relay_trader.agents.fetcher import CatalogFetcher
from relay_trader.agents.protocol import OrderProtocol, ProtocolFactory
from relay_trader.agents.provider import ChainProvider
from relay_trader.core.event_bus import EventBus
from relay_trader.core.lifecycle import InitLifecycle, StepDescriptor
from relay_trader.core.state import WiredState
from relay_trader.domain.account.account import AccountParams, BaseAccount
from relay_trader.domain.market.market import Market
from relay_trader.domain.token import Token
from relay_trader.trade.trade import Trade
from relay_trader.utils.config import RelayConfig, create_default_config, read_config
from relay_trader.utils.constants import endpoints_for_network
from relay_trader.utils.enums import InitEvent, WalletType
from relay_trader.utils.logger import ThreadLogger, create_console_handler, create_file_handler


class RelayClientError(Exception):
    """Custom exception for RelayClient errors"""
    pass


############################
### Initialization Steps ###
############################

async def init_provider(client: RelayClient):
    await client.provider.set_provider(client.active_wallet_type, client.wallet_config)

    if client.active_wallet_type is WalletType.INJECTED and not client.wallet_config.get("web3"):
        # Injected wallets pick the network, so follow it
        endpoints = endpoints_for_network(await client.provider.get_network_id())
        client.endpoint = endpoints["endpoint"]
        client.websocket_endpoint = endpoints["websocket_endpoint"]
        client.logger.info(f"Injected wallet: switched API endpoint to {client.endpoint}")

    return await client.get_callback(InitEvent.PROVIDER_INITIALIZED, client.provider)


async def init_network_id(client: RelayClient):
    client.network_id = await client.provider.get_network_id()
    return await client.get_callback(InitEvent.NETWORK_ID_INITIALIZED, client.network_id)


def init_protocol(client: RelayClient):
    client.protocol = client.protocol_factory(client.provider, client.network_id)
    return client.get_callback(InitEvent.PROTOCOL_INITIALIZED, client.protocol)


async def init_tokens(client: RelayClient):
    tokens = await client.fetcher.get(f"{client.endpoint}/tokens")
    client.tokens = {}
    for entry in tokens:
        token = Token.from_dict(entry)
        client.tokens[token.address] = token
    client.logger.info(f"Loaded {len(client.tokens)} tokens")
    return await client.get_callback(InitEvent.TOKENS_INITIALIZED, client.tokens)


async def init_account(client: RelayClient, account: Union[str, int]):
    await client.provider.set_default_account(account)
    client.account = client.wallet(AccountParams(
        provider=client.provider,
        events=client.events,
        protocol=client.protocol,
        endpoint=client.endpoint,
        tokens=client.tokens,
    ))
    return await client.get_callback(InitEvent.ACCOUNT_INITIALIZED, client.account)


def init_trade(client: RelayClient):
    client.trade = Trade(
        client.logger,
        client.protocol,
        client.endpoint,
        client.account,
        client.events,
        client.tokens,
        client.fetcher,
    )
    return client.get_callback(InitEvent.TRADE_INITIALIZED, client.trade)


async def init_markets(client: RelayClient):
    entries = await client.fetcher.get(f"{client.endpoint}/markets")
    client.markets = {}
    for entry in entries:
        market = Market(entry, client.endpoint, client.websocket_endpoint, client.trade)
        client.markets[market.market_id] = market
    client.logger.info(f"Loaded {len(client.markets)} markets")
    return await client.get_callback(InitEvent.MARKETS_INITIALIZED, client.markets)


# Call order of the init steps. Extend with `insert_step` and pass the
# result as `steps=` to add phases.
DEFAULT_INIT_STEPS: List[StepDescriptor] = [
    StepDescriptor(InitEvent.PROVIDER_INITIALIZED, init_provider),
    StepDescriptor(InitEvent.NETWORK_ID_INITIALIZED, init_network_id, trigger_event=InitEvent.PROVIDER_INITIALIZED),
    StepDescriptor(InitEvent.PROTOCOL_INITIALIZED, init_protocol, trigger_event=InitEvent.NETWORK_ID_INITIALIZED),
    StepDescriptor(InitEvent.TOKENS_INITIALIZED, init_tokens, trigger_event=InitEvent.PROTOCOL_INITIALIZED),
    # Default account index 0
    StepDescriptor(InitEvent.ACCOUNT_INITIALIZED, init_account, trigger_event=InitEvent.TOKENS_INITIALIZED, args=(0,)),
    StepDescriptor(InitEvent.TRADE_INITIALIZED, init_trade, trigger_event=InitEvent.ACCOUNT_INITIALIZED),
    StepDescriptor(InitEvent.MARKETS_INITIALIZED, init_markets, trigger_event=InitEvent.TRADE_INITIALIZED),
]


class RelayClient:
    """
    Main entry point for the relay-trader SDK.

    Owns everything the initialization steps produce. The steps run in the
    order of the step table, each started by the previous step's event.
    """

    def __init__(self,
                wallet: Type[BaseAccount],
                provider: ChainProvider,
                protocol_factory: ProtocolFactory,
                config_path: Optional[str] = None,
                config: Optional[RelayConfig] = None,
                network_id: int = 1,
                fetcher: Optional[CatalogFetcher] = None,
                steps: Optional[Sequence[StepDescriptor]] = None,
                log_level: str = "INFO"):
        """
        Args:
            wallet: Account class, instantiated with AccountParams
            provider: Chain provider for the wallet
            protocol_factory: Builds the order protocol client from (provider, network_id)
            config_path: Path to configuration file (YAML)
            config: Configuration object, used when no path is given
            network_id: Network whose default endpoints apply without a config
            fetcher: Catalog fetcher, a requests-backed one by default
            steps: Replacement step table
            log_level: Signal-controlled logging level
        """
        try:
            self.thread_logger = ThreadLogger(name="relay-trader", signal_level=log_level)
            self.logger = self.thread_logger.get_logger()
        except Exception as e:
            raise RelayClientError(f"Failed to initialize logger: {e}") from e

        self.config_path = config_path
        self.config = config
        self._load_configuration(network_id)
        self._setup_log_handlers()

        self.wallet = wallet
        self.provider = provider
        self.protocol_factory = protocol_factory
        self.fetcher = fetcher or CatalogFetcher(self.logger)
        self.events = EventBus(self.logger)

        self.endpoint: str = self.config.Endpoint
        self.websocket_endpoint: str = self.config.WebsocketEndpoint
        self.active_wallet_type: Optional[WalletType] = None
        self.wallet_config: Dict[str, Any] = {}

        # Populated by the init steps
        self.network_id: Optional[int] = None
        self.protocol: Optional[OrderProtocol] = None
        self.tokens: Dict[str, Token] = {}
        self.account: Optional[BaseAccount] = None
        self.trade: Optional[Trade] = None
        self.markets: Dict[str, Market] = {}

        self._initialized = False

        self.load_priority_list: List[StepDescriptor] = list(steps) if steps is not None else list(DEFAULT_INIT_STEPS)
        try:
            self._lifecycle = InitLifecycle(
                self.logger,
                self.events,
                self.load_priority_list,
                self.config.SdkInitializationTimeout,
            )
            self._lifecycle.setup(self)
        except Exception as e:
            raise RelayClientError(f"Failed to set up init lifecycle: {e}") from e

    def _load_configuration(self, network_id: int):
        try:
            if self.config_path:
                self.config = read_config(self.config_path, self.logger)
            elif self.config is None:
                self.config = create_default_config(self.logger, network_id)
                self.logger.info("Using default configuration")
        except Exception as e:
            raise RelayClientError(f"Failed to load configuration: {e}") from e

    def _setup_log_handlers(self):
        self.add_log_handler(create_console_handler(level=self.config.ConsoleLevel))
        if self.config.LogPath:
            self.add_log_handler(create_file_handler(log_file=self.config.LogPath, level=self.config.FileLevel))

    def add_log_handler(self, handler: logging.Handler):
        self.thread_logger.add_handler(handler)

    def remove_log_handler(self, handler: logging.Handler):
        self.thread_logger.remove_handler(handler)

    @property
    def lifecycle(self) -> InitLifecycle:
        return self._lifecycle

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self, wallet_config: Optional[Dict[str, Any]] = None, wallet_type: WalletType = WalletType.LOCAL) -> RelayClient:
        """
        Run the init chain for the given wallet.

        Raises RelayClientError with the first step error or timeout. The client
        is then left partially initialized and `is_initialized` stays False.
        """
        if self._initialized:
            self.logger.warning("Client already initialized")
            return self
        if not isinstance(self._lifecycle.state, WiredState):
            raise RelayClientError(f"Initialization already attempted (lifecycle {self._lifecycle.state.name})")

        self.active_wallet_type = wallet_type
        self.wallet_config = dict(wallet_config or {})

        try:
            self.logger.info(f"Initializing relay client with {wallet_type.value} wallet...")
            await self._lifecycle.run()
        except Exception as e:
            self.logger.error(f"Failed to initialize relay client: {e}")
            raise RelayClientError(f"Initialization failed: {e}") from e

        self._initialized = True
        self.logger.info("Relay client initialized successfully")
        return self

    def get_market(self, market_id: str) -> Market:
        self._require_initialized()
        if market_id not in self.markets:
            raise RelayClientError(f"Market {market_id} not found")
        return self.markets[market_id]

    def get_token(self, address: str) -> Token:
        self._require_initialized()
        if address not in self.tokens:
            raise RelayClientError(f"Token {address} not found")
        return self.tokens[address]

    def close(self):
        self.fetcher.close()
        self.thread_logger.shutdown()

    def _require_initialized(self):
        if not self._initialized:
            raise RelayClientError("Client not initialized. Call initialize() first.")

    def get_callback(self, event: Hashable, data: Any) -> asyncio.Future:
        """
        Announce that the step completing `event` is done.

        Steps return (or await) the result, which resolves with `data` once the
        next step has been started.
        """
        # Subscribe before emitting so the emission settles this waiter
        callback = self._lifecycle.promise(event)
        self._lifecycle.emit(event, data)
        return callback
