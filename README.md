# roxydemo

Tools for showing off a JSON-RPC proxy in front of a set of Ethereum nodes,
without needing any real nodes.

## What is in the package

- `roxydemo.state.NodeState` holds the simulated chain of one node: block
  number, account balances, health flag and request count. It is thread-safe;
  its `latency` is in seconds.
- `roxydemo.handlers` turns JSON-RPC requests into responses.
  `handle_single_request(state, request)` answers one request given as a
  mapping, `handle_body(state, body)` answers a raw body (single or batch) with
  the JSON payload to send back, and `handle_rpc` / `health_check` are the
  aiohttp handlers built on them. `JsonRpcResponse` builds responses with
  `success(id, result)` and `error(id, code, message)`.
- `roxydemo.node` serves a node over HTTP. `create_app(state)` builds the
  aiohttp application (`POST /` for JSON-RPC, `GET /health` for health), and
  `MockNode.start(name, port, chain_id, initial_block, latency)` starts one on
  `127.0.0.1` (port 0 picks a free port). A running node offers `url()`,
  `name()`, `start_block_progression(interval)`, `set_healthy(healthy)`,
  `request_count()` and `shutdown()`, and works as an async context manager.
- `roxydemo.client.DemoClient` sends JSON-RPC requests to a proxy on
  `127.0.0.1:<port>`: `request`, `request_timed`, `request_raw`, `batch`, and
  the shortcuts `get_client_version`, `get_block_number`, `get_chain_id` and
  `get_net_version`. Error responses raise `RpcError` (except from
  `request_raw`, which returns a `RawResult` either way).
- `roxydemo.config.DemoConfig` describes a demo setup: three main nodes
  (`node-1`, `node-2`, `node-3` on ports 9001–9003 with 10, 50 and 100 ms
  latency), two sequencer nodes on ports 9011–9012 with 5 ms latency, a proxy
  port of 18545, rate limiting at 50 requests per second, a 1500 ms pause
  between sections, and `admin_addPeer`, `admin_removePeer` and
  `debug_traceTransaction` as blocked methods.
- `roxydemo.demo` runs the scenarios against a proxy: `demo_load_balancing`,
  `demo_caching`, `demo_batch_requests`, `demo_rate_limiting`,
  `demo_method_routing`, `demo_method_blocking`, `demo_ema_load_balancing`
  and `demo_failover`, plus `start_mock_nodes(config)` (returning `DemoNodes`)
  and `section_delay(config)`. Output is printed in colour by
  `roxydemo.output`.

## Methods the mock nodes answer

`eth_blockNumber`, `eth_chainId`, `net_version`, `web3_clientVersion`,
`eth_gasPrice`, `eth_getBalance`, `eth_getTransactionCount` (always `0x0`),
`eth_call` (always `0x`), `eth_estimateGas` (always `0x5208`),
`eth_sendRawTransaction` (a fixed fake hash) and `rpc_nodeInfo`, which returns
the node's name, client version, chain ID, block number, health, request count
and latency.

Any other method gets `-32601` "Method not found"; `eth_getBalance` without an
address gets `-32602`; a body that is not JSON gets `-32700`; JSON that is not
a request gets `-32600`. In a batch, malformed entries are left out of the
answer. An unhealthy node answers HTTP 503 after its latency has passed.

## Handling requests without a server

```python
from roxydemo.handlers import handle_body
from roxydemo.state import NodeState

state = NodeState("node-1", 1, 21_000_000, 0.0)
handle_body(state, '{"jsonrpc":"2.0","method":"eth_chainId","id":1}')
# {"jsonrpc": "2.0", "id": 1, "result": "0x1"}
```

## Running a mock node

```python
from roxydemo.node import MockNode

async def main():
    async with await MockNode.start("node-1", 0, 1, 21_000_000, 0.01) as node:
        node.start_block_progression(2.0)
        print(node.url())
```

## Identifying which node answered

Every mock node reports its name in its client version string,
`MockNode/<name>/v1.0.0`. `parse_node_name` extracts it:

```python
from roxydemo.client import parse_node_name

parse_node_name("MockNode/node-2/v1.0.0")   # "node-2"
parse_node_name("Geth/v1.13.0")             # None
```

## What the package does not do

It contains no proxy. The demo scenarios talk to a proxy that must already be
listening on the configured port and be set up to match `DemoConfig` (groups,
routes, caching, rate limiting, blocked methods); the package neither provides
nor configures one. There is also no command-line entry point that runs the
whole walkthrough: the scenarios are functions to be called from your own
async code.

## Running the tests

The test suite uses pytest and pytest-asyncio, listed under the `test` extra:

```
pip install -e .[test]
pytest
```