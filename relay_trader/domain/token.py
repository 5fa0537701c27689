from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class Token:
    address: str
    symbol: str
    decimals: int
    name: str = ""
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Token":
        known = {"address", "symbol", "decimals", "name"}
        return cls(
            address=data["address"],
            symbol=data["symbol"],
            decimals=int(data["decimals"]),
            name=data.get("name", ""),
            extra={k: v for k, v in data.items() if k not in known},
        )
