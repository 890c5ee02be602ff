"""JSON-RPC method handlers of the mock Ethereum node."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from aiohttp import web

from .state import NodeState

STATE_KEY = web.AppKey("state", NodeState)
"""Application key under which the node state is stored."""

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

FAKE_TX_HASH = "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef"

_FIXED_ANSWERS: dict[str, Callable[[NodeState], Any]] = {
    "eth_blockNumber": NodeState.block_number,
    "eth_chainId": NodeState.chain_id_hex,
    "net_version": NodeState.net_version,
    "web3_clientVersion": NodeState.client_version,
    "eth_gasPrice": NodeState.gas_price,
    # Every account is treated as having sent no transactions.
    "eth_getTransactionCount": lambda _state: "0x0",
    "eth_call": lambda _state: "0x",
    # 21000, the cost of a plain transfer.
    "eth_estimateGas": lambda _state: "0x5208",
    "eth_sendRawTransaction": lambda _state: FAKE_TX_HASH,
}


@dataclass(frozen=True)
class JsonRpcError:
    """Error object of a JSON-RPC response."""

    code: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class JsonRpcResponse:
    """A JSON-RPC 2.0 response carrying either a result or an error."""

    JSONRPC: ClassVar[str] = "2.0"

    id: Any
    result: Any = None
    failure: JsonRpcError | None = None

    @classmethod
    def success(cls, id: Any, result: Any) -> JsonRpcResponse:
        """Build a success response."""
        return cls(id=id, result=result)

    @classmethod
    def error(cls, id: Any, code: int, message: str) -> JsonRpcResponse:
        """Build an error response."""
        return cls(id=id, failure=JsonRpcError(code, message))

    @property
    def is_error(self) -> bool:
        return self.failure is not None

    def to_dict(self) -> dict[str, Any]:
        """The response as a JSON-serialisable dict."""
        out: dict[str, Any] = {"jsonrpc": self.JSONRPC, "id": self.id}
        if self.failure is None:
            out["result"] = self.result
        else:
            out["error"] = self.failure.to_dict()
        return out


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def _as_request(value: Any) -> Mapping[str, Any] | None:
    """Return ``value`` if it has the shape of a JSON-RPC request, else None."""
    if not isinstance(value, dict):
        return None
    if not isinstance(value.get("jsonrpc"), str) or not isinstance(value.get("method"), str):
        return None
    if "id" not in value:
        return None
    return value


def handle_single_request(state: NodeState, request: Mapping[str, Any]) -> JsonRpcResponse:
    """Answer one request, given as a mapping with ``method``, ``id`` and ``params``."""
    method = request["method"]
    request_id = request.get("id")
    params = request.get("params")

    answer = _FIXED_ANSWERS.get(method)
    if answer is not None:
        return JsonRpcResponse.success(request_id, answer(state))

    if method == "eth_getBalance":
        address = params[0] if isinstance(params, list) and params else None
        if isinstance(address, str):
            return JsonRpcResponse.success(request_id, state.get_balance(address))
        return JsonRpcResponse.error(
            request_id, INVALID_PARAMS, "Invalid params: missing address"
        )

    if method == "rpc_nodeInfo":
        return JsonRpcResponse.success(
            request_id,
            {
                "name": state.name,
                "clientVersion": state.client_version(),
                "chainId": state.chain_id,
                "blockNumber": state.block_number_value(),
                "healthy": state.is_healthy(),
                "requestCount": state.request_count(),
                "latencyMs": int(round(state.latency * 1_000_000)) // 1000,
            },
        )

    return JsonRpcResponse.error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")


def handle_body(state: NodeState, body: str | bytes) -> dict[str, Any] | list[dict[str, Any]]:
    """Answer a raw request body, single or batch, with the JSON payload to send back.

    Malformed entries of a batch are left out of the answer.
    """
    try:
        parsed = json.loads(body, parse_constant=_reject_constant)
    except ValueError:
        return JsonRpcResponse.error(None, PARSE_ERROR, "Parse error").to_dict()

    if isinstance(parsed, list):
        requests = (_as_request(item) for item in parsed)
        return [
            handle_single_request(state, request).to_dict()
            for request in requests
            if request is not None
        ]

    request = _as_request(parsed)
    if request is None:
        return JsonRpcResponse.error(None, INVALID_REQUEST, "Invalid Request").to_dict()
    return handle_single_request(state, request).to_dict()


async def handle_rpc(request: web.Request) -> web.Response:
    """HTTP handler for JSON-RPC calls, after the simulated latency and health check."""
    state = request.app[STATE_KEY]
    body = await request.read()

    if state.latency > 0:
        await asyncio.sleep(state.latency)

    if not state.is_healthy():
        return web.Response(status=503, text="Node unhealthy")

    state.record_request()
    return web.json_response(handle_body(state, body))


async def health_check(request: web.Request) -> web.Response:
    """HTTP handler reporting whether the node is healthy."""
    if request.app[STATE_KEY].is_healthy():
        return web.Response(status=200, text="OK")
    return web.Response(status=503, text="Unhealthy")