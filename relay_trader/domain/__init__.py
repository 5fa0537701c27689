"""
Domain module for relay-trader.

Typed wrappers around catalog entries (tokens, markets) and the account
capability set the client constructs during initialization.
"""

from .token import Token
from .account.account import AccountParams, BaseAccount
from .market.market import Market

__all__ = [
    "Token",
    "AccountParams",
    "BaseAccount",
    "Market",
]
