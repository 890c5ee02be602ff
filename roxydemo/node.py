"""HTTP server of a mock Ethereum node."""

from __future__ import annotations

import asyncio
import contextlib

from aiohttp import web

from .handlers import STATE_KEY, handle_rpc, health_check
from .state import NodeState

_HOST = "127.0.0.1"


def create_app(state: NodeState) -> web.Application:
    """Build the node's web application: JSON-RPC on ``POST /``, health on ``GET /health``."""
    app = web.Application()
    app[STATE_KEY] = state
    app.router.add_post("/", handle_rpc)
    app.router.add_get("/health", health_check)
    return app


class MockNode:
    """A running mock node answering common Ethereum JSON-RPC methods."""

    def __init__(self, state: NodeState, port: int, runner: web.AppRunner) -> None:
        self.state = state
        self.port = port
        self._runner = runner
        self._block_task: asyncio.Task[None] | None = None

    @classmethod
    async def start(
        cls, name: str, port: int, chain_id: int, initial_block: int, latency: float
    ) -> MockNode:
        """Start a node listening on ``127.0.0.1:port``; ``latency`` is in seconds.

        Port 0 picks a free port, which is then reported by ``port``.
        """
        state = NodeState(name, chain_id, initial_block, latency)
        runner = web.AppRunner(create_app(state), access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, _HOST, port)
        try:
            await site.start()
        except OSError as exc:
            await runner.cleanup()
            raise OSError(exc.errno, f"failed to bind mock node to {_HOST}:{port}") from exc
        bound_port = runner.addresses[0][1]
        return cls(state, bound_port, runner)

    async def __aenter__(self) -> MockNode:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    def url(self) -> str:
        """Base URL of this node."""
        return f"http://{_HOST}:{self.port}"

    def name(self) -> str:
        """Name of this node."""
        return self.state.name

    def start_block_progression(self, interval: float) -> None:
        """Advance the block number every ``interval`` seconds, replacing any earlier ticker."""
        if self._block_task is not None:
            self._block_task.cancel()
        self._block_task = asyncio.get_running_loop().create_task(self._progress(interval))

    async def _progress(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.state.advance_block()

    def set_healthy(self, healthy: bool) -> None:
        """Mark the node healthy or unhealthy."""
        self.state.set_healthy(healthy)

    def request_count(self) -> int:
        """Number of requests this node has served."""
        return self.state.request_count()

    async def shutdown(self) -> None:
        """Stop block progression and the HTTP server."""
        task, self._block_task = self._block_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._runner.cleanup()