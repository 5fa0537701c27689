from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Callable, Dict, List

from relay_trader.agents.provider import ChainProvider
from relay_trader.utils.enums import Side


class OrderProtocol(ABC):
    '''
    On-chain order protocol client. Hashing and signing formats belong to the
    implementation.
    '''

    @abstractmethod
    def build_order(
        self,
        maker: str,
        base_token: str,
        quote_token: str,
        side: Side,
        quantity: Decimal,
        price: Decimal,
        expiration: int,
    ) -> Dict[str, Any]:
        '''
        Unsigned order for the given market side
        '''
        pass

    @abstractmethod
    async def fill_orders(self, orders: List[Dict[str, Any]], quantity: Decimal, taker: str) -> str:
        '''
        Fill up to `quantity` against `orders`; returns the transaction hash
        '''
        pass

    @abstractmethod
    async def cancel_order(self, order: Dict[str, Any], owner: str) -> str:
        pass

    @abstractmethod
    async def await_transaction(self, tx_hash: str) -> Dict[str, Any]:
        '''
        Wait for the transaction to be mined; returns the receipt
        '''
        pass


ProtocolFactory = Callable[[ChainProvider, int], OrderProtocol]
