"""Client that sends JSON-RPC requests through the proxy."""

from __future__ import annotations

import itertools
import json
import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import aiohttp


class RpcError(Exception):
    """An error object returned in a JSON-RPC response."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message


@dataclass(frozen=True)
class TimedResult:
    """Result of a request together with how long it took."""

    value: Any
    duration: timedelta


@dataclass(frozen=True)
class RawResult:
    """Full response of a request, whether or not it carries an error."""

    response: Any
    success: bool
    duration: timedelta


def _decode_response(item: Any) -> tuple[Any, RpcError | None]:
    """Check the shape of one response and return its result and error."""
    if (
        not isinstance(item, dict)
        or not isinstance(item.get("jsonrpc"), str)
        or "id" not in item
    ):
        raise ValueError("failed to parse response")
    error = item.get("error")
    if error is None:
        return item.get("result"), None
    if (
        not isinstance(error, dict)
        or not isinstance(error.get("code"), int)
        or isinstance(error.get("code"), bool)
        or not isinstance(error.get("message"), str)
    ):
        raise ValueError("failed to parse response")
    return item.get("result"), RpcError(error["code"], error["message"])


def _unwrap(decoded: tuple[Any, RpcError | None]) -> Any:
    result, error = decoded
    if error is not None:
        raise error
    if result is None:
        raise ValueError("no result in response")
    return result


def _parse_json(body: bytes, what: str) -> Any:
    try:
        return json.loads(body)
    except ValueError as exc:
        raise ValueError(f"failed to parse {what}") from exc


class DemoClient:
    """Sends JSON-RPC requests to the proxy on ``127.0.0.1``."""

    def __init__(self, roxy_port: int) -> None:
        self.roxy_url = f"http://127.0.0.1:{roxy_port}"
        self._ids = itertools.count(1)
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> DemoClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _envelope(self, method: str, params: Any) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "method": method, "params": params, "id": next(self._ids)}

    async def _post(self, payload: Any) -> tuple[bytes, timedelta]:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        start = time.perf_counter()
        async with self._session.post(self.roxy_url, json=payload) as resp:
            elapsed = timedelta(seconds=time.perf_counter() - start)
            body = await resp.read()
        return body, elapsed

    async def request(self, method: str, params: Any) -> Any:
        """Send one request and return its result; raise RpcError on an error response."""
        body, _ = await self._post(self._envelope(method, params))
        return _unwrap(_decode_response(_parse_json(body, "response")))

    async def request_timed(self, method: str, params: Any) -> TimedResult:
        """Like ``request``, with the time the round trip took."""
        start = time.perf_counter()
        value = await self.request(method, params)
        return TimedResult(value, timedelta(seconds=time.perf_counter() - start))

    async def request_raw(self, method: str, params: Any) -> RawResult:
        """Send one request and return the whole response, error responses included."""
        body, elapsed = await self._post(self._envelope(method, params))
        response = _parse_json(body, "response")
        success = not (isinstance(response, dict) and "error" in response)
        return RawResult(response, success, elapsed)

    async def batch(self, requests: Iterable[tuple[str, Any]]) -> list[Any]:
        """Send a batch and return the results in order; any error response raises."""
        payload = [self._envelope(method, params) for method, params in requests]
        body, _ = await self._post(payload)
        data = _parse_json(body, "batch response")
        if not isinstance(data, list):
            raise ValueError("failed to parse batch response")
        decoded = [_decode_response(item) for item in data]
        return [_unwrap(item) for item in decoded]

    async def _string_result(self, method: str, what: str) -> str:
        result = await self.request(method, [])
        if not isinstance(result, str):
            raise ValueError(f"invalid {what}")
        return result

    async def get_client_version(self) -> str:
        """Client version, which names the backend that answered."""
        return await self._string_result("web3_clientVersion", "client version")

    async def get_block_number(self) -> str:
        """Current block number as hex."""
        return await self._string_result("eth_blockNumber", "block number")

    async def get_chain_id(self) -> str:
        """Chain ID as hex."""
        return await self._string_result("eth_chainId", "chain id")

    async def get_net_version(self) -> str:
        """Network version."""
        return await self._string_result("net_version", "net version")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None


def parse_node_name(client_version: str) -> str | None:
    """Node name from a ``MockNode/{name}/v1.0.0`` client version, or None."""
    parts = client_version.split("/")
    if len(parts) >= 2 and parts[0] == "MockNode":
        return parts[1]
    return None