from __future__ import annotations
from decimal import Decimal
from typing import Any, Dict, TYPE_CHECKING

from relay_trader.utils.enums import Side

if TYPE_CHECKING:
    from relay_trader.trade.trade import Trade


class Market:
    def __init__(self, market: Dict[str, Any], endpoint: str, websocket_endpoint: str, trade: Trade):
        self.market_id: str = market["id"]
        self.display_name: str = market.get("displayName", self.market_id)
        self.base_token_address: str = market["baseTokenAddress"]
        self.quote_token_address: str = market["quoteTokenAddress"]
        self.base_token_decimals: int = int(market.get("baseTokenDecimals", 18))
        self.quote_token_decimals: int = int(market.get("quoteTokenDecimals", 18))

        # Sizing constraints
        self.quote_increment: Decimal | None = _decimal(market.get("quoteIncrement"))
        self.min_order_size: Decimal | None = _decimal(market.get("minOrderSize"))
        self.max_order_size: Decimal | None = _decimal(market.get("maxOrderSize"))
        self.score: Decimal | None = _decimal(market.get("score"))

        self.endpoint = endpoint
        self.websocket_endpoint = websocket_endpoint
        self._trade = trade

    @property
    def book_url(self) -> str:
        return f"{self.endpoint}/markets/{self.market_id}/book"

    async def limit_order(self, side: Side, quantity: Decimal, price: Decimal, expiration: int) -> Dict[str, Any]:
        return await self._trade.limit_order(self, side, quantity, price, expiration)

    async def market_order(self, side: Side, quantity: Decimal, await_transaction: bool = False):
        return await self._trade.market_order(self, side, quantity, await_transaction=await_transaction)

    async def cancel_order(self, order: Dict[str, Any], await_transaction: bool = False):
        return await self._trade.cancel_order(order, await_transaction=await_transaction)

    def __repr__(self):
        return f"Market({self.market_id})"


def _decimal(value) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))
