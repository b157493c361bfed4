"""Text formats for the order ingest stream and the order and trade logs."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .models import Order, OrderType, Side, Trade

_FIELD_COUNT = 8


def _unsigned(token: str, name: str) -> int:
    value = int(token)
    if value < 0:
        raise ValueError(f"{name} must not be negative: {token!r}")
    return value


def parse_order_line(line: str) -> Order:
    """Parse ``id,account,symbol,side,type,price,quantity,timestamp`` into an Order.

    Raises ValueError if the line is malformed.
    """
    text = line.rstrip("\r\n")
    fields = text.split(",", _FIELD_COUNT - 1)
    if len(fields) != _FIELD_COUNT:
        raise ValueError(
            f"expected {_FIELD_COUNT} comma-separated fields, got {len(fields)}: {text!r}"
        )
    order_id, account_id, symbol, side, kind, price, quantity, timestamp = fields
    try:
        return Order(
            order_id=_unsigned(order_id, "order id"),
            account_id=_unsigned(account_id, "account id"),
            symbol=symbol,
            side=Side(int(side)),
            type=OrderType(int(kind)),
            price=float(price),
            quantity=_unsigned(quantity, "quantity"),
            timestamp=_unsigned(timestamp, "timestamp"),
        )
    except ValueError as exc:
        raise ValueError(f"malformed order line {text!r}: {exc}") from exc


def _number(value: float) -> str:
    return format(value, "g")


def format_order_log(order: Order) -> str:
    """Return the order-log record: ``id,type,side,price,quantity``."""
    return ",".join(
        (
            str(order.order_id),
            str(int(order.type)),
            str(int(order.side)),
            _number(order.price),
            str(order.quantity),
        )
    )


def format_trade_log(trade: Trade) -> str:
    """Return the trade-log record: ``id,buy id,sell id,price,quantity``."""
    return ",".join(
        (
            str(trade.trade_id),
            str(trade.buy_order_id),
            str(trade.sell_order_id),
            _number(trade.price),
            str(trade.quantity),
        )
    )


def iter_orders(lines: Iterable[str]) -> Iterator[Order]:
    """Yield an Order for every non-empty line; malformed lines raise ValueError."""
    for raw in lines:
        text = raw.rstrip("\r\n")
        if not text:
            continue
        yield parse_order_line(text)