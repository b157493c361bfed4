"""Read-only HTTP API over the matching engine.

Serves:
  GET /book/{symbol}?depth={n}    JSON order-book snapshot
  GET /trades/{symbol}?limit={n}  JSON recent trades

The engine must provide ``snapshot_book(symbol, depth)`` returning levels with
``price`` and ``quantity`` attributes, and ``recent_trades(symbol, limit)``
returning Trade objects.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any

_log = logging.getLogger(__name__)

_BOOK_PREFIX = "/book/"
_TRADES_PREFIX = "/trades/"
_DEFAULT_COUNT = 10
_NOT_FOUND_BODY = '{"error":"unknown endpoint"}'
_LEADING_NUMBER = re.compile(r"\s*\+?(\d+)")


@dataclass
class Response:
    """An HTTP response: status code, headers and body text."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


def _leading_unsigned(text: str) -> int:
    match = _LEADING_NUMBER.match(text)
    if match is None:
        raise ValueError(f"invalid number: {text!r}")
    return int(match.group(1))


def _parse_target(target: str, prefix: str, param: str) -> tuple[str, int]:
    query_start = target.find("?")
    if query_start < 0:
        return target[len(prefix):], _DEFAULT_COUNT
    symbol = target[len(prefix):query_start]
    marker = f"?{param}="
    if target.startswith(marker, query_start):
        return symbol, _leading_unsigned(target[query_start + len(marker):])
    return symbol, _DEFAULT_COUNT


def _json_headers() -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }


def handle_request(method: str, target: str, engine: Any) -> Response:
    """Answer one request. Raises ValueError for a malformed depth or limit."""
    method = method.upper()
    if method == "OPTIONS":
        return Response(
            204,
            {
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "GET,OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
        )

    if method == "GET" and target.startswith(_BOOK_PREFIX):
        symbol, depth = _parse_target(target, _BOOK_PREFIX, "depth")
        levels = engine.snapshot_book(symbol, depth)
        body = {"bids": [{"price": lvl.price, "qty": lvl.quantity} for lvl in levels]}
        return Response(200, _json_headers(), _dumps(body))

    if method == "GET" and target.startswith(_TRADES_PREFIX):
        symbol, limit = _parse_target(target, _TRADES_PREFIX, "limit")
        trades = [
            {
                "tradeId": t.trade_id,
                "price": t.price,
                "qty": t.quantity,
                "buyOrderId": t.buy_order_id,
                "sellOrderId": t.sell_order_id,
            }
            for t in engine.recent_trades(symbol, limit)
        ]
        return Response(200, _json_headers(), _dumps(trades))

    return Response(404, _json_headers(), _NOT_FOUND_BODY)


class _ApiServer(HTTPServer):
    def __init__(self, address: tuple[str, int], engine: Any) -> None:
        self.engine = engine
        super().__init__(address, _ApiHandler)


class _ApiHandler(BaseHTTPRequestHandler):
    server: _ApiServer

    def _dispatch(self) -> None:
        try:
            response = handle_request(self.command, self.path, self.server.engine)
        except ValueError as exc:
            response = Response(400, _json_headers(), _dumps({"error": str(exc)}))
        payload = response.body.encode("utf-8")
        self.send_response(response.status)
        for name, value in response.headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if payload:
            self.wfile.write(payload)

    do_GET = _dispatch
    do_OPTIONS = _dispatch
    do_POST = _dispatch
    do_PUT = _dispatch
    do_DELETE = _dispatch
    do_PATCH = _dispatch

    def log_message(self, format: str, *args: Any) -> None:
        """Route access logs to the module logger instead of stderr."""
        _log.debug("%s - %s", self.address_string(), format % args)


def make_server(host: str, port: int, engine: Any) -> HTTPServer:
    """Create (but do not start) an HTTP server bound to ``host:port``."""
    return _ApiServer((host, port), engine)


def run_http_server(port: int, engine: Any) -> None:
    """Serve the API on all interfaces at ``port`` until interrupted."""
    with make_server("0.0.0.0", port, engine) as server:
        server.serve_forever()