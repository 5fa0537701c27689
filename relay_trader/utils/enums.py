from enum import Enum, IntEnum


class Side(Enum):
    BUY = "buy"
    SELL = "sell"


class WalletType(Enum):
    LOCAL = "local"
    RPC = "rpc"
    INJECTED = "injected"


class NetworkId(IntEnum):
    MAINNET = 1
    KOVAN = 42


class InitEvent(str, Enum):
    """Completion events of the default initialization chain, in order."""
    PROVIDER_INITIALIZED = "providerInitialized"
    NETWORK_ID_INITIALIZED = "networkIdInitialized"
    PROTOCOL_INITIALIZED = "protocolInitialized"
    TOKENS_INITIALIZED = "tokensInitialized"
    ACCOUNT_INITIALIZED = "accountInitialized"
    TRADE_INITIALIZED = "tradeInitialized"
    MARKETS_INITIALIZED = "marketsInitialized"

    # Plain event names and members are interchangeable as table keys
    __hash__ = str.__hash__


class TradeEvent(str, Enum):
    TRANSACTION_PENDING = "transactionPending"
    TRANSACTION_COMPLETE = "transactionComplete"

    __hash__ = str.__hash__


class StepStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class SlotState(Enum):
    PENDING = "pending"
    SETTLED_OK = "settled_ok"
    SETTLED_TIMEOUT = "settled_timeout"
    SETTLED_ERROR = "settled_error"
