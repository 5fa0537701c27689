from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

from relay_trader.utils.enums import WalletType


class ChainProvider(ABC):
    '''
    Base class for wallet / network providers
    '''

    @abstractmethod
    async def set_provider(self, wallet_type: WalletType, wallet_config: Dict[str, Any]):
        '''
        Connect the underlying transport for the given wallet type
        '''
        pass

    @abstractmethod
    async def get_network_id(self) -> int:
        pass

    @abstractmethod
    async def set_default_account(self, account: Union[str, int]):
        '''
        Select the signing account, by address or by index in the wallet
        '''
        pass

    @property
    @abstractmethod
    def default_account(self) -> Optional[str]:
        pass

    @property
    @abstractmethod
    def transport(self) -> Any:
        '''
        Handle passed on to the order protocol client
        '''
        pass
