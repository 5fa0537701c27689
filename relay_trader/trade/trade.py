from __future__ import annotations
import logging
from decimal import Decimal
from typing import Any, Dict, List, TYPE_CHECKING

from relay_trader.agents.fetcher import CatalogFetcher
from relay_trader.agents.protocol import OrderProtocol
from relay_trader.core.event_bus import EventBus
from relay_trader.domain.account.account import BaseAccount
from relay_trader.domain.token import Token
from relay_trader.utils.enums import Side, TradeEvent

if TYPE_CHECKING:
    from relay_trader.domain.market.market import Market


class TradeError(Exception):
    pass


class Trade:
    """
    Order entry facade. Order construction, hashing and settlement are
    delegated to the protocol client; signing to the account.
    """

    def __init__(
        self,
        logger: logging.Logger,
        protocol: OrderProtocol,
        endpoint: str,
        account: BaseAccount,
        events: EventBus,
        tokens: Dict[str, Token],
        fetcher: CatalogFetcher,
    ):
        self.logger = logger
        self.protocol = protocol
        self.endpoint = endpoint
        self.account = account
        self.events = events
        self.tokens = tokens
        self.fetcher = fetcher

    def _require_signer(self) -> str:
        if not self.account.can_sign_transaction():
            raise TradeError("Account has no default address to trade with")
        return self.account.address

    async def limit_order(
        self,
        market: Market,
        side: Side,
        quantity: Decimal,
        price: Decimal,
        expiration: int,
    ) -> Dict[str, Any]:
        """
        Build and sign a limit order, then hand it to the account for submission.

        Args:
            market: Market to quote in
            side: BUY bids for base with quote, SELL asks
            quantity: Base token quantity
            price: Price in quote token
            expiration: Unix timestamp after which the order is void

        Returns:
            dict: The signed order
        """
        maker = self._require_signer()
        if quantity <= 0 or price <= 0:
            raise TradeError(f"Quantity and price must be positive, got {quantity} @ {price}")

        order = self.protocol.build_order(
            maker,
            market.base_token_address,
            market.quote_token_address,
            side,
            Decimal(quantity),
            Decimal(price),
            expiration,
        )
        signed_order = await self.account.sign(order)
        await self.account.submit(signed_order)
        self.logger.info(f"Submitted {side.value} limit order on {market.market_id}: {quantity} @ {price}")
        return signed_order

    async def market_order(self, market: Market, side: Side, quantity: Decimal, await_transaction: bool = False):
        taker = self._require_signer()
        book = await self.fetcher.get(market.book_url)
        # A buy takes asks, a sell takes bids
        entries: List[Dict[str, Any]] = book.get("asks" if side is Side.BUY else "bids", [])
        orders = [entry.get("signedOrder", entry) for entry in entries]
        if not orders:
            raise TradeError(f"No liquidity on {market.market_id} for a {side.value} order")

        tx_hash = await self.protocol.fill_orders(orders, Decimal(quantity), taker)
        return await self._follow_transaction(tx_hash, await_transaction)

    async def cancel_order(self, order: Dict[str, Any], await_transaction: bool = False):
        owner = self._require_signer()
        tx_hash = await self.protocol.cancel_order(order, owner)
        return await self._follow_transaction(tx_hash, await_transaction)

    async def _follow_transaction(self, tx_hash: str, await_transaction: bool):
        self.events.emit(TradeEvent.TRANSACTION_PENDING, tx_hash)
        if not await_transaction:
            return tx_hash
        receipt = await self.protocol.await_transaction(tx_hash)
        self.events.emit(TradeEvent.TRANSACTION_COMPLETE, receipt)
        return receipt
