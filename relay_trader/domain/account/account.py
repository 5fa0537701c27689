from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from relay_trader.agents.protocol import OrderProtocol
    from relay_trader.agents.provider import ChainProvider
    from relay_trader.core.event_bus import EventBus
    from relay_trader.domain.token import Token


@dataclass
class AccountParams:
    provider: ChainProvider
    events: EventBus
    protocol: OrderProtocol
    endpoint: str
    tokens: Dict[str, Token]


class BaseAccount(ABC):
    """
    Wallet-backed account. Implementations own key handling; the client only
    needs them to sign orders and submit signed orders.
    """

    def __init__(self, params: AccountParams):
        self.provider = params.provider
        self.events = params.events
        self.protocol = params.protocol
        self.endpoint = params.endpoint
        self.tokens = params.tokens

    @property
    def address(self) -> Optional[str]:
        return self.provider.default_account

    def can_sign_transaction(self) -> bool:
        return self.address is not None

    @abstractmethod
    async def sign(self, order: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def submit(self, signed_order: Dict[str, Any]) -> Any:
        pass
