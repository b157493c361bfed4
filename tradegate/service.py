"""Engine worker loop and the TCP order ingest server."""

from __future__ import annotations

import json
import logging
import queue
import socketserver
import threading
import time
from collections.abc import Callable, Iterator
from typing import Any, BinaryIO, TextIO

from .models import Order, Trade
from .wire import format_order_log, format_trade_log, iter_orders

_log = logging.getLogger(__name__)

_ORDERS_TOPIC = "orders"
_TRADES_TOPIC = "trades"
_METRICS_TOPIC = "metrics"
_WINDOW_NS = 1_000_000_000
_POLL_INTERVAL = 0.001

Publisher = Callable[[str, dict[str, Any]], None]


def _log_publish(topic: str, message: dict[str, Any]) -> None:
    """Default publisher: emit each event to the module logger."""
    _log.debug("%s %s", topic, json.dumps(message, separators=(",", ":")))


class EngineWorker:
    """Feeds orders to the engine, logs them and publishes events and metrics.

    ``publish(topic, message)`` receives every event on the topics
    ``orders``, ``trades`` and ``metrics``; ``clock`` returns nanoseconds.
    """

    def __init__(
        self,
        engine: Any,
        order_log: TextIO,
        trade_log: TextIO,
        publish: Publisher | None = None,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self.engine = engine
        self.order_log = order_log
        self.trade_log = trade_log
        self._publish = publish or _log_publish
        self._clock = clock
        self._order_count = 0
        self._window_start = clock()

    def process(self, order: Order) -> list[Trade]:
        """Handle one order and return the trades it produced."""
        self.order_log.write(format_order_log(order) + "\n")
        self.order_log.flush()
        self._publish(_ORDERS_TOPIC, order.to_json())

        started = self._clock()
        trades = list(self.engine.on_new_order(order))
        finished = self._clock()
        self._publish(
            _METRICS_TOPIC,
            {
                "metric": "order_latency_ns",
                "value": finished - started,
                "symbol": order.symbol,
                "timestamp": finished,
            },
        )

        self._order_count += 1
        now = self._clock()
        if now - self._window_start >= _WINDOW_NS:
            self._publish(
                _METRICS_TOPIC,
                {"metric": "orders_per_sec", "value": self._order_count, "timestamp": now},
            )
            self._order_count = 0
            self._window_start = now

        for trade in trades:
            self.trade_log.write(format_trade_log(trade) + "\n")
            self.trade_log.flush()
            self._publish(_TRADES_TOPIC, trade.to_json())
        return trades

    def run(self, orders: "queue.Queue[Order]", stop: threading.Event | None = None) -> None:
        """Process orders from the queue until ``stop`` is set (forever if None)."""
        while stop is None or not stop.is_set():
            try:
                order = orders.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            self.process(order)


def _complete_lines(stream: BinaryIO) -> Iterator[str]:
    # A trailing line without a newline is never delivered.
    for raw in stream:
        if not raw.endswith(b"\n"):
            break
        yield raw.decode("utf-8")


class _OrderIngestHandler(socketserver.StreamRequestHandler):
    server: "_OrderIngestServer"

    def handle(self) -> None:
        try:
            for order in iter_orders(_complete_lines(self.rfile)):
                self.server.orders.put(order)
        except ValueError as exc:
            _log.warning("dropping connection from %s: %s", self.client_address, exc)


class _OrderIngestServer(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, address: tuple[str, int], orders: "queue.Queue[Order]") -> None:
        self.orders = orders
        super().__init__(address, _OrderIngestHandler)


def serve_orders(
    host: str, port: int, orders: "queue.Queue[Order]"
) -> socketserver.ThreadingTCPServer:
    """Create (but do not start) a TCP server that queues orders read line by line."""
    return _OrderIngestServer((host, port), orders)