from .trade import Trade, TradeError

__all__ = ["Trade", "TradeError"]
