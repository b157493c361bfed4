"""Order and trade records exchanged with the matching engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class Side(IntEnum):
    """Which side of the book an order is on."""

    BUY = 0
    SELL = 1


class OrderType(IntEnum):
    """What an order asks the engine to do."""

    LIMIT = 0
    MARKET = 1
    CANCEL = 2


@dataclass
class Order:
    """An instruction submitted to the engine."""

    order_id: int
    account_id: int
    symbol: str
    side: Side
    type: OrderType
    price: float
    quantity: int
    timestamp: int = 0  # nanoseconds since the epoch

    def to_json(self) -> dict[str, Any]:
        """Return the order as a JSON-ready mapping."""
        return {
            "orderId": self.order_id,
            "accountId": self.account_id,
            "symbol": self.symbol,
            "side": int(self.side),
            "type": int(self.type),
            "price": self.price,
            "quantity": self.quantity,
            "timestamp": self.timestamp,
        }


@dataclass
class Trade:
    """A fill between a buy order and a sell order."""

    trade_id: int
    buy_order_id: int
    sell_order_id: int
    symbol: str
    price: float
    quantity: int
    timestamp: int = 0

    def to_json(self) -> dict[str, Any]:
        """Return the trade as a JSON-ready mapping."""
        return {
            "tradeId": self.trade_id,
            "buyOrderId": self.buy_order_id,
            "sellOrderId": self.sell_order_id,
            "symbol": self.symbol,
            "price": self.price,
            "quantity": self.quantity,
            "timestamp": self.timestamp,
        }