import json
import threading
import urllib.error
import urllib.request
from collections import namedtuple

import pytest

from tradegate.http_api import handle_request, make_server
from tradegate.models import Trade

Level = namedtuple("Level", "price quantity")


class FakeEngine:
    def __init__(self, levels=(), trades=()):
        self.levels = list(levels)
        self.trades = list(trades)
        self.book_calls = []
        self.trade_calls = []

    def snapshot_book(self, symbol, depth):
        self.book_calls.append((symbol, depth))
        return self.levels[:depth]

    def recent_trades(self, symbol, limit):
        self.trade_calls.append((symbol, limit))
        return self.trades[:limit]


@pytest.fixture
def engine():
    return FakeEngine(
        levels=[Level(101.5, 3), Level(101.0, 7), Level(100.0, 2)],
        trades=[Trade(1, 2, 1, "TSLA", 200.0, 2, 5), Trade(2, 4, 3, "TSLA", 201.0, 1, 6)],
    )


def test_options_preflight(engine):
    response = handle_request("OPTIONS", "/book/AAPL", engine)
    assert response.status == 204
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET,OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type"
    assert response.body == ""
    assert engine.book_calls == []


def test_book_default_depth(engine):
    response = handle_request("GET", "/book/AAPL", engine)
    assert response.status == 200
    assert response.headers["Content-Type"] == "application/json"
    assert engine.book_calls == [("AAPL", 10)]
    assert json.loads(response.body) == {
        "bids": [{"price": lvl.price, "qty": lvl.quantity} for lvl in engine.levels]
    }


def test_book_explicit_depth(engine):
    response = handle_request("GET", "/book/AAPL?depth=2", engine)
    assert engine.book_calls == [("AAPL", 2)]
    assert len(json.loads(response.body)["bids"]) == 2


def test_book_depth_takes_leading_digits(engine):
    handle_request("GET", "/book/MSFT?depth=7abc", engine)
    assert engine.book_calls == [("MSFT", 7)]


def test_book_ignores_other_query(engine):
    handle_request("GET", "/book/AAPL?limit=3", engine)
    assert engine.book_calls == [("AAPL", 10)]


def test_book_bad_depth_raises(engine):
    with pytest.raises(ValueError):
        handle_request("GET", "/book/AAPL?depth=lots", engine)


def test_trades_with_limit(engine):
    response = handle_request("GET", "/trades/TSLA?limit=1", engine)
    assert response.status == 200
    assert engine.trade_calls == [("TSLA", 1)]
    first = engine.trades[0]
    assert json.loads(response.body) == [
        {
            "tradeId": first.trade_id,
            "price": first.price,
            "qty": first.quantity,
            "buyOrderId": first.buy_order_id,
            "sellOrderId": first.sell_order_id,
        }
    ]


def test_trades_body_keys_sorted(engine):
    response = handle_request("GET", "/trades/TSLA", engine)
    assert engine.trade_calls == [("TSLA", 10)]
    keys = list(json.loads(response.body)[0].keys())
    assert keys == sorted(keys)


@pytest.mark.parametrize(
    "method,target",
    [("GET", "/nope"), ("POST", "/book/AAPL"), ("DELETE", "/trades/TSLA")],
)
def test_unknown_endpoint(engine, method, target):
    response = handle_request(method, target, engine)
    assert response.status == 404
    assert response.body == '{"error":"unknown endpoint"}'
    assert engine.book_calls == [] and engine.trade_calls == []


@pytest.fixture
def live(engine):
    server = make_server("127.0.0.1", 0, engine)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    base = f"http://127.0.0.1:{server.server_address[1]}"
    yield base, engine
    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


def test_live_book(live):
    base, engine = live
    with urllib.request.urlopen(f"{base}/book/AAPL?depth=1", timeout=5) as resp:
        assert resp.status == 200
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        body = json.loads(resp.read())
    assert body == {"bids": [{"price": 101.5, "qty": 3}]}
    assert engine.book_calls == [("AAPL", 1)]


def test_live_unknown_endpoint(live):
    base, _ = live
    with pytest.raises(urllib.error.HTTPError) as info:
        urllib.request.urlopen(f"{base}/missing", timeout=5)
    assert info.value.code == 404
    assert json.loads(info.value.read()) == {"error": "unknown endpoint"}


def test_live_bad_depth_is_client_error(live):
    base, _ = live
    with pytest.raises(urllib.error.HTTPError) as info:
        urllib.request.urlopen(f"{base}/book/AAPL?depth=x", timeout=5)
    assert info.value.code == 400