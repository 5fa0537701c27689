import hashlib
import json
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from relay_trader.agents.protocol import OrderProtocol
from relay_trader.agents.provider import ChainProvider
from relay_trader.domain.account.account import BaseAccount
from relay_trader.utils.enums import Side, WalletType


class PaperProvider(ChainProvider):
    """
    Offline provider: a fixed network and a list of made-up addresses.
    """

    def __init__(self, network_id: int = 1, addresses: Optional[List[str]] = None):
        self.network_id = network_id
        self.addresses = addresses or ["0x0000000000000000000000000000000000000001"]
        self._default_account: Optional[str] = None

    async def set_provider(self, wallet_type: WalletType, wallet_config: Dict[str, Any]):
        self.wallet_type = wallet_type

    async def get_network_id(self) -> int:
        return self.network_id

    async def set_default_account(self, account: Union[str, int]):
        self._default_account = self.addresses[account] if isinstance(account, int) else account

    @property
    def default_account(self) -> Optional[str]:
        return self._default_account

    @property
    def transport(self) -> Any:
        return None


class PaperProtocol(OrderProtocol):
    """
    Builds orders locally and settles nothing; transactions are fake hashes.
    """

    def __init__(self, provider: ChainProvider, network_id: int):
        self.provider = provider
        self.network_id = network_id

    def build_order(self, maker, base_token, quote_token, side, quantity, price, expiration):
        base_amount = Decimal(quantity)
        quote_amount = base_amount * Decimal(price)
        if side is Side.BUY:
            maker_token, maker_amount, taker_token, taker_amount = quote_token, quote_amount, base_token, base_amount
        else:
            maker_token, maker_amount, taker_token, taker_amount = base_token, base_amount, quote_token, quote_amount
        return {
            "makerAddress": maker,
            "makerAssetAddress": maker_token,
            "makerAssetAmount": str(maker_amount),
            "takerAssetAddress": taker_token,
            "takerAssetAmount": str(taker_amount),
            "expirationTimeSeconds": str(expiration),
        }

    async def fill_orders(self, orders, quantity, taker) -> str:
        return _digest({"fill": orders, "quantity": str(quantity), "taker": taker})

    async def cancel_order(self, order, owner) -> str:
        return _digest({"cancel": order, "owner": owner})

    async def await_transaction(self, tx_hash) -> Dict[str, Any]:
        return {"transactionHash": tx_hash, "status": 1}


class PaperAccount(BaseAccount):
    """
    Signs with a digest of the order and keeps submitted orders in memory.
    """

    def __init__(self, params):
        super().__init__(params)
        self.orders: List[Dict[str, Any]] = []

    async def sign(self, order):
        return {**order, "signature": _digest({"order": order, "signer": self.address})}

    async def submit(self, signed_order):
        self.orders.append(signed_order)
        return True


def _digest(payload: Dict[str, Any]) -> str:
    return "0x" + hashlib.sha256(json.dumps(payload, sort_keys=True, default=str).encode()).hexdigest()
