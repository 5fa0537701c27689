"""
Utilities module for relay-trader.

Configuration loading, enums and constants, and the queue-backed logger.
"""

# Configuration management
from .config import read_config, create_default_config, RelayConfig

# Enums and constants
from .enums import Side, WalletType, NetworkId, InitEvent, TradeEvent, StepStatus, SlotState
from .constants import endpoints_for_network, DEFAULT_INIT_TIMEOUT_MS

# Logging utilities
from .logger import ThreadLogger, create_console_handler, create_file_handler

__all__ = [
    # Configuration
    "read_config",
    "create_default_config",
    "RelayConfig",

    # Enums
    "Side",
    "WalletType",
    "NetworkId",
    "InitEvent",
    "TradeEvent",
    "StepStatus",
    "SlotState",

    # Constants
    "endpoints_for_network",
    "DEFAULT_INIT_TIMEOUT_MS",

    # Logging
    "ThreadLogger",
    "create_console_handler",
    "create_file_handler",
]
