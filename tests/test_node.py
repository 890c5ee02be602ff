import asyncio
import contextlib
import json

import aiohttp
import pytest

from roxydemo.node import MockNode, create_app
from roxydemo.handlers import STATE_KEY
from roxydemo.state import NodeState


@contextlib.asynccontextmanager
async def _node(name="node-1", initial_block=100):
    node = await MockNode.start(name, 0, 1, initial_block, 0)
    try:
        yield node
    finally:
        await node.shutdown()


def test_create_app_holds_state():
    state = NodeState("node-1", 1, 5, 0)
    app = create_app(state)
    assert app[STATE_KEY] is state


@pytest.mark.asyncio
async def test_start_reports_port_url_and_name():
    async with _node("node-2") as node:
        assert node.port > 0
        assert node.url() == f"http://127.0.0.1:{node.port}"
        assert node.name() == "node-2"


@pytest.mark.asyncio
async def test_serves_rpc_and_counts_requests():
    async with _node() as node, aiohttp.ClientSession() as session:
        body = json.dumps({"jsonrpc": "2.0", "method": "web3_clientVersion", "id": 1})
        async with session.post(node.url() + "/", data=body) as resp:
            data = await resp.json()
        assert data["result"] == node.state.client_version()
        assert node.request_count() == 1


@pytest.mark.asyncio
async def test_health_endpoint_follows_set_healthy():
    async with _node() as node, aiohttp.ClientSession() as session:
        async with session.get(node.url() + "/health") as resp:
            assert resp.status == 200
        node.set_healthy(False)
        async with session.get(node.url() + "/health") as resp:
            assert resp.status == 503
        body = json.dumps({"jsonrpc": "2.0", "method": "eth_chainId", "id": 1})
        async with session.post(node.url() + "/", data=body) as resp:
            assert resp.status == 503
        assert node.request_count() == 0


@pytest.mark.asyncio
async def test_block_progression_advances_blocks():
    async with _node(initial_block=100) as node:
        node.start_block_progression(0.01)
        await asyncio.sleep(0.1)
        assert node.state.block_number_value() > 100


@pytest.mark.asyncio
async def test_shutdown_stops_progression_and_server():
    node = await MockNode.start("node-1", 0, 1, 100, 0)
    node.start_block_progression(0.01)
    await node.shutdown()
    frozen = node.state.block_number_value()
    await asyncio.sleep(0.05)
    assert node.state.block_number_value() == frozen
    async with aiohttp.ClientSession() as session:
        with pytest.raises(aiohttp.ClientConnectionError):
            await session.get(node.url() + "/health")


@pytest.mark.asyncio
async def test_port_in_use_raises():
    async with _node() as node:
        with pytest.raises(OSError, match="failed to bind mock node"):
            await MockNode.start("node-2", node.port, 1, 100, 0)