# tradegate

`tradegate` is the plumbing around a limit-order matching engine. It reads
orders from a line-based TCP feed and passes them to the engine one at a
time. It writes the orders and the trades they produce to append-only CSV
logs, and sends every order, trade and metric to a publish callback as a
JSON-ready mapping. A small read-only HTTP API serves order-book snapshots
and recent trades.

## What you supply

This package does not include a matching engine or an order book. You pass
in an engine object that provides:

- `on_new_order(order)`, which returns an iterable of `Trade` objects;
- `snapshot_book(symbol, depth)`, which returns levels that have `price` and
  `quantity` attributes (used by the HTTP API);
- `recent_trades(symbol, limit)`, which returns `Trade` objects (used by the
  HTTP API).

The package also has no message-broker client. Events go to the `publish`
callback you give `EngineWorker`. If you give none, each event is written to
the `tradegate.service` logger at debug level. The package installs no
command-line program either, so you start the pieces from your own code.

## Modules

### `tradegate.models`

- `Side`: `BUY` (0) and `SELL` (1).
- `OrderType`: `LIMIT` (0), `MARKET` (1) and `CANCEL` (2).
- `Order(order_id, account_id, symbol, side, type, price, quantity, timestamp=0)`.
  `to_json()` returns a mapping with the keys `orderId`, `accountId`,
  `symbol`, `side`, `type`, `price`, `quantity` and `timestamp`. `side` and
  `type` are given as integers.
- `Trade(trade_id, buy_order_id, sell_order_id, symbol, price, quantity, timestamp=0)`.
  `to_json()` returns a mapping with the keys `tradeId`, `buyOrderId`,
  `sellOrderId`, `symbol`, `price`, `quantity` and `timestamp`.

### `tradegate.wire`

- `parse_order_line(line)` parses
  `orderId,accountId,symbol,side,type,price,quantity,timestamp` into an
  `Order`. A trailing newline is ignored. It raises `ValueError` in these
  cases: the field count is wrong, a field is not a number, the side or type
  code is unknown, or an id, quantity or timestamp is negative.
- `iter_orders(lines)` yields an `Order` for each non-blank line and raises
  `ValueError` on the first malformed one.
- `format_order_log(order)` returns `orderId,type,side,price,quantity`.
- `format_trade_log(trade)` returns
  `tradeId,buyOrderId,sellOrderId,price,quantity`.

Prices in the log rows use the shortest general form, so `150.0` is written
as `150`.

### `tradegate.service`

- `EngineWorker(engine, order_log, trade_log, publish=None, clock=time.time_ns)`.
  `process(order)` does the following, in order:
  1. writes the order's log row and publishes it on the `orders` topic;
  2. calls `engine.on_new_order(order)` and publishes an `order_latency_ns`
     metric on the `metrics` topic;
  3. once at least one second (by `clock`, in nanoseconds) has passed since
     the last count, publishes an `orders_per_sec` metric with the number of
     orders since then;
  4. writes each trade's log row and publishes the trade on the `trades`
     topic.

  It returns the list of trades. `run(orders, stop=None)` takes orders from a
  `queue.Queue` and processes them until the `threading.Event` `stop` is set,
  or forever if `stop` is `None`.
- `serve_orders(host, port, orders)` creates a threaded TCP server but does
  not start it. The server reads newline-terminated order lines from each
  connection and puts the parsed orders on `orders`. It skips blank lines. A
  final line with no newline is dropped. A malformed line is logged as a
  warning and ends that connection.

### `tradegate.http_api`

- `handle_request(method, target, engine)` returns a `Response` with
  `status`, `headers` and `body`. It answers the following requests:
  - `OPTIONS`: `204` with CORS headers that allow `GET,OPTIONS`.
  - `GET /book/{symbol}?depth={n}`: `{"bids":[{"price":...,"qty":...},...]}`.
    The depth defaults to 10.
  - `GET /trades/{symbol}?limit={n}`: a list of
    `{"buyOrderId","price","qty","sellOrderId","tradeId"}` objects. The limit
    defaults to 10.
  - Anything else: `404` with `{"error":"unknown endpoint"}`.

  A depth or limit that does not start with a number raises `ValueError`.
- `make_server(host, port, engine)` creates an `http.server.HTTPServer` that
  answers through `handle_request`. It does not start the server. A
  `ValueError` becomes a `400` response.
- `run_http_server(port, engine)` serves on all interfaces until interrupted.

## Example

```python
import queue
import threading

from tradegate.http_api import run_http_server
from tradegate.service import EngineWorker, serve_orders

engine = ...  # your matching engine
orders = queue.Queue()
stop = threading.Event()

def publish(topic, payload):
    print(topic, payload)

with open("orders.log", "a") as order_log, open("trades.log", "a") as trade_log:
    worker = EngineWorker(engine, order_log, trade_log, publish)
    threading.Thread(target=worker.run, args=(orders, stop), daemon=True).start()
    threading.Thread(target=run_http_server, args=(8080, engine), daemon=True).start()
    with serve_orders("0.0.0.0", 9000, orders) as server:
        server.serve_forever()
```

To feed the example, send lines such as `1,42,AAPL,0,0,150.0,10,0` to port
9000, one order per line.

## Requirements

Python 3.10 or later. The package uses only the standard library. The tests
use pytest (`pip install tradegate[test]`).