import json

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from roxydemo.handlers import (
    FAKE_TX_HASH,
    STATE_KEY,
    JsonRpcResponse,
    handle_body,
    handle_rpc,
    handle_single_request,
    health_check,
)
from roxydemo.state import NodeState


def _state(latency=0.0):
    return NodeState("node-1", 1, 21_000_000, latency)


def _app(state):
    app = web.Application()
    app[STATE_KEY] = state
    app.router.add_post("/", handle_rpc)
    app.router.add_get("/health", health_check)
    return app


def _req(method, params=None, request_id=1):
    out = {"jsonrpc": "2.0", "method": method, "id": request_id}
    if params is not None:
        out["params"] = params
    return out


def test_success_response_dict():
    response = JsonRpcResponse.success(7, "0x5208")
    assert response.to_dict() == {"jsonrpc": "2.0", "id": 7, "result": "0x5208"}
    assert not response.is_error


def test_error_response_dict():
    response = JsonRpcResponse.error(None, -32700, "Parse error")
    assert response.to_dict() == {
        "jsonrpc": "2.0",
        "id": None,
        "error": {"code": -32700, "message": "Parse error"},
    }
    assert response.is_error


@pytest.mark.parametrize(
    "method, expected",
    [
        ("eth_getTransactionCount", "0x0"),
        ("eth_call", "0x"),
        ("eth_estimateGas", "0x5208"),
        ("eth_sendRawTransaction", FAKE_TX_HASH),
        ("eth_gasPrice", "0x4a817c800"),
        ("web3_clientVersion", "MockNode/node-1/v1.0.0"),
    ],
)
def test_fixed_answers(method, expected):
    response = handle_single_request(_state(), _req(method, []))
    assert response.result == expected
    assert response.failure is None


def test_state_backed_answers():
    state = _state()
    assert handle_single_request(state, _req("eth_blockNumber")).result == state.block_number()
    assert handle_single_request(state, _req("eth_chainId")).result == state.chain_id_hex()
    assert handle_single_request(state, _req("net_version")).result == state.net_version()


def test_block_number_follows_state():
    state = _state()
    state.advance_block()
    assert handle_single_request(state, _req("eth_blockNumber")).result == state.block_number()


def test_get_balance_known_address_any_case():
    response = handle_single_request(
        _state(), _req("eth_getBalance", ["0x742D35CC6634C0532925A3B844BC9E7595F1E3B8", "latest"])
    )
    assert response.result == "0x56bc75e2d63100000"


def test_get_balance_unknown_address():
    response = handle_single_request(_state(), _req("eth_getBalance", ["0xabc", "latest"]))
    assert response.result == "0x0"


@pytest.mark.parametrize("params", [None, [], [5], {"0": "0xabc"}])
def test_get_balance_missing_address(params):
    response = handle_single_request(_state(), _req("eth_getBalance", params))
    assert response.failure.code == -32602
    assert response.failure.message == "Invalid params: missing address"


def test_unknown_method():
    response = handle_single_request(_state(), _req("foo_bar", [], request_id="abc"))
    assert response.to_dict() == {
        "jsonrpc": "2.0",
        "id": "abc",
        "error": {"code": -32601, "message": "Method not found: foo_bar"},
    }


def test_node_info():
    state = _state(latency=0.25)
    state.record_request()
    info = handle_single_request(state, _req("rpc_nodeInfo")).result
    assert info["name"] == "node-1"
    assert info["clientVersion"] == state.client_version()
    assert info["chainId"] == state.chain_id
    assert info["blockNumber"] == state.block_number_value()
    assert info["healthy"] is True
    assert info["requestCount"] == state.request_count()
    assert info["latencyMs"] == 250


def test_body_single():
    state = _state()
    payload = handle_body(state, json.dumps(_req("eth_chainId", [], 3)))
    assert payload == {"jsonrpc": "2.0", "id": 3, "result": state.chain_id_hex()}


@pytest.mark.parametrize("body", ["not json", "", "{", "NaN", b"\xff\xfe"])
def test_body_parse_error(body):
    payload = handle_body(_state(), body)
    assert payload["error"] == {"code": -32700, "message": "Parse error"}
    assert payload["id"] is None


@pytest.mark.parametrize(
    "body",
    [
        '{"method":"eth_chainId","id":1}',
        '{"jsonrpc":"2.0","id":1}',
        '{"jsonrpc":"2.0","method":"eth_chainId"}',
        '{"jsonrpc":"2.0","method":5,"id":1}',
        '"hello"',
        "42",
    ],
)
def test_body_invalid_request(body):
    payload = handle_body(_state(), body)
    assert payload["error"] == {"code": -32600, "message": "Invalid Request"}


def test_body_batch_drops_invalid_entries():
    state = _state()
    body = json.dumps([_req("eth_chainId", [], 1), {"bogus": True}, _req("net_version", [], 2)])
    payload = handle_body(state, body)
    assert [item["id"] for item in payload] == [1, 2]
    assert payload[0]["result"] == state.chain_id_hex()
    assert payload[1]["result"] == state.net_version()


def test_body_empty_batch():
    assert handle_body(_state(), "[]") == []


@pytest.mark.asyncio
async def test_http_rpc_and_health():
    state = _state()
    async with TestClient(TestServer(_app(state))) as client:
        resp = await client.post("/", data=json.dumps(_req("web3_clientVersion", [])))
        assert resp.status == 200
        assert (await resp.json())["result"] == state.client_version()

        health = await client.get("/health")
        assert health.status == 200
        assert await health.text() == "OK"
    assert state.request_count() == 1


@pytest.mark.asyncio
async def test_http_unhealthy():
    state = _state()
    state.set_healthy(False)
    async with TestClient(TestServer(_app(state))) as client:
        resp = await client.post("/", data=json.dumps(_req("eth_chainId", [])))
        assert resp.status == 503
        assert await resp.text() == "Node unhealthy"

        health = await client.get("/health")
        assert health.status == 503
        assert await health.text() == "Unhealthy"
    assert state.request_count() == 0