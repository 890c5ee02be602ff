"""Demo scenarios run against the proxy and the mock nodes behind it."""

from __future__ import annotations

import asyncio
import itertools
import json
from collections import Counter
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from . import output
from .client import DemoClient, parse_node_name
from .config import DemoConfig, MockNodeConfig
from .node import MockNode

BLOCK_INTERVAL_SECONDS = 2.0
"""How often each mock node advances its block number."""

BLOCK_ADVANCE_WAIT_SECONDS = 2.0
"""Pause in the caching demo so that the block number can move on."""

RATE_LIMIT_RESET_SECONDS = 1.0
"""Pause in the rate limiting demo so that the limit window resets."""

FAILOVER_SETTLE_SECONDS = 0.1
"""Pause after taking a node offline in the failover demo."""

UNKNOWN = "unknown"


@dataclass
class DemoNodes:
    """All mock nodes started for the demo."""

    main_nodes: list[MockNode] = field(default_factory=list)
    sequencer_nodes: list[MockNode] = field(default_factory=list)

    def all_nodes(self) -> Iterator[MockNode]:
        """Main group nodes followed by sequencer group nodes."""
        return itertools.chain(self.main_nodes, self.sequencer_nodes)

    async def shutdown_all(self) -> None:
        """Shut every node down."""
        for node in self.all_nodes():
            await node.shutdown()


async def _start_node(config: DemoConfig, node_cfg: MockNodeConfig) -> MockNode:
    try:
        node = await MockNode.start(
            node_cfg.name,
            node_cfg.port,
            config.chain_id,
            config.initial_block,
            node_cfg.latency_ms / 1000,
        )
    except OSError as exc:
        raise RuntimeError(f"failed to start {node_cfg.name}") from exc
    node.start_block_progression(BLOCK_INTERVAL_SECONDS)
    output.print_node_started(node_cfg.name, node.url(), node_cfg.latency_ms)
    return node


async def start_mock_nodes(config: DemoConfig) -> DemoNodes:
    """Start the main and sequencer nodes of ``config``; raise RuntimeError if one fails."""
    nodes = DemoNodes()
    try:
        print("  Main group nodes:")
        for node_cfg in config.nodes:
            nodes.main_nodes.append(await _start_node(config, node_cfg))

        print()
        print("  Sequencer group nodes:")
        for node_cfg in config.sequencer_nodes:
            nodes.sequencer_nodes.append(await _start_node(config, node_cfg))
    except BaseException:
        await nodes.shutdown_all()
        raise
    return nodes


async def section_delay(config: DemoConfig) -> None:
    """Announce and wait out the pause between demo sections."""
    seconds = config.section_delay_ms / 1000
    output.print_delay(seconds)
    await asyncio.sleep(seconds)


def _node_of(value: Any) -> str:
    version = value if isinstance(value, str) else UNKNOWN
    return parse_node_name(version) or UNKNOWN


async def demo_load_balancing(client: DemoClient, count: int) -> dict[str, int]:
    """Send ``count`` requests and return how many each node served."""
    output.print_section("Load Balancing Demo (Round Robin)")
    print(f"  Sending {count} requests through roxy...")
    print()

    distribution: Counter[str] = Counter()
    for number in range(1, count + 1):
        result = await client.request_timed("web3_clientVersion", [])
        node_name = _node_of(result.value)
        output.print_request_served(number, node_name, result.duration)
        distribution[node_name] += 1

    output.print_distribution(distribution)
    return dict(distribution)


async def demo_caching(client: DemoClient) -> tuple[str, str]:
    """Show cached and uncached calls; return the two block numbers seen."""
    output.print_section("Caching Demo")
    print("  Sending net_version (should be cached after first request)...")
    print()

    first = await client.request_timed("net_version", [])
    output.print_cache_result("First request", first.duration, False)

    second = await client.request_timed("net_version", [])
    output.print_cache_result("Second request", second.duration, second.duration < first.duration / 2)

    third = await client.request_timed("net_version", [])
    output.print_cache_result("Third request", third.duration, True)

    print()
    print("  eth_blockNumber (NOT cached - changes over time):")
    block1 = await client.get_block_number()
    print(f"    Block 1: {block1}")

    await asyncio.sleep(BLOCK_ADVANCE_WAIT_SECONDS)

    block2 = await client.get_block_number()
    print(f"    Block 2: {block2} (after 2s)")
    return block1, block2


async def demo_batch_requests(client: DemoClient) -> list[Any]:
    """Send one batch of four requests and return their results in order."""
    output.print_section("Batch Request Demo")

    methods = ["eth_chainId", "eth_blockNumber", "eth_gasPrice", "net_version"]
    print(f"  Sending batch of {len(methods)} requests...")
    print()

    results = await client.batch((method, []) for method in methods)
    for method, result in zip(methods, results, strict=True):
        output.print_batch_result(method, format_result(result))

    output.print_success("All batch responses received successfully")
    return results


async def demo_failover(client: DemoClient, nodes: Sequence[MockNode]) -> None:
    """Take the first node offline, send a request, then bring the node back."""
    output.print_section("Failover Demo")

    print("  All backends healthy. Sending request...")
    node_name = parse_node_name(await client.get_client_version()) or UNKNOWN
    output.print_success(f"Served by {node_name}")
    print()

    first = nodes[0]
    output.print_failover_action("Taking node-1 offline...")
    first.set_healthy(False)

    await asyncio.sleep(FAILOVER_SETTLE_SECONDS)

    print("  Sending request (should failover)...")
    node_name = parse_node_name(await client.get_client_version()) or UNKNOWN
    output.print_success(f"Request served by {node_name} (failover worked!)")
    print()

    output.print_failover_action("Restoring node-1...")
    first.set_healthy(True)
    output.print_success("All backends healthy again")


async def demo_rate_limiting(client: DemoClient, config: DemoConfig) -> tuple[int, int]:
    """Fire requests past the limit; return how many were allowed and how many limited."""
    output.print_section("Rate Limiting Demo")

    limit = config.requests_per_second
    total = limit + 10

    print(f"  Rate limit: {limit} requests per second")
    print(f"  Sending {total} rapid requests to trigger rate limiting...")
    print()

    allowed = limited = 0
    for number in range(1, total + 1):
        result = await client.request_raw("eth_chainId", [])
        if result.success:
            allowed += 1
        else:
            limited += 1
        if number <= 5 or number > total - 3:
            output.print_rate_limit_result(number, result.success, result.duration)
        elif number == 6:
            print("  ...")

    print()
    print(f"  Results: {allowed} allowed, {limited} rate limited")

    print()
    print("  Waiting 1s for rate limit window to reset...")
    await asyncio.sleep(RATE_LIMIT_RESET_SECONDS)

    result = await client.request_raw("eth_chainId", [])
    if result.success:
        output.print_success("Rate limit reset - request allowed again")
    return allowed, limited


async def demo_method_routing(client: DemoClient) -> None:
    """Show regular methods going to the demo group and transactions to the sequencers."""
    output.print_section("Method Routing Demo")

    print("  Routing configuration:")
    print("    eth_sendRawTransaction -> 'sequencer' group")
    print("    All other methods      -> 'demo' group")

    output.print_subsection("Regular methods (demo group)")
    for _ in range(3):
        result = await client.request_timed("web3_clientVersion", [])
        output.print_routing_result("web3_clientVersion", "demo", _node_of(result.value))

    output.print_subsection("Routed methods (sequencer group)")
    for _ in range(3):
        result = await client.request_timed("eth_sendRawTransaction", ["0x"])
        tx_hash = result.value if isinstance(result.value, str) else "0x..."
        print(
            "  [eth_sendRawTransaction] -> group 'sequencer' -> "
            f"tx: {tx_hash[:8]}...{tx_hash[-6:]}"
        )

    print()
    output.print_success("Methods correctly routed to designated groups")


async def demo_method_blocking(client: DemoClient, config: DemoConfig) -> dict[str, int]:
    """Call each blocked method; return the error code each rejected one came back with."""
    output.print_section("Method Blocking Demo")

    print(f"  Blocked methods: {', '.join(config.blocked_methods)}")
    print()

    rejected: dict[str, int] = {}
    for method in config.blocked_methods:
        result = await client.request_raw(method, [])
        if result.success:
            continue
        error = result.response.get("error")
        error = error if isinstance(error, dict) else {}
        code = error.get("code")
        code = code if isinstance(code, int) and not isinstance(code, bool) else -1
        message = error.get("message")
        message = message if isinstance(message, str) else UNKNOWN
        output.print_blocked_method(method, code, message)
        rejected[method] = code

    print()

    print("  Allowed method for comparison:")
    result = await client.request_raw("eth_blockNumber", [])
    if result.success:
        value = result.response.get("result")
        output.print_allowed_method("eth_blockNumber", value if isinstance(value, str) else "?")
    return rejected


async def demo_ema_load_balancing(client: DemoClient) -> dict[str, int]:
    """Show round-robin spread and explain latency-aware balancing; return the spread."""
    output.print_section("EMA Load Balancing Demo")

    print("  Node latencies:")
    print("    node-1: 10ms  (fastest)")
    print("    node-2: 50ms  (medium)")
    print("    node-3: 100ms (slowest)")

    output.print_subsection("Current: Round-Robin distribution")
    print("  Requests distributed evenly regardless of latency:")
    print()

    distribution: Counter[str] = Counter()
    for number in range(1, 7):
        result = await client.request_timed("web3_clientVersion", [])
        node_name = _node_of(result.value)
        distribution[node_name] += 1
        output.print_request_served(number, node_name, result.duration)

    output.print_distribution(distribution)

    output.print_subsection("With EMA (intelligent routing)")
    output.print_ema_explanation("EMA tracks response latency with Exponential Moving Average")
    output.print_ema_explanation("Prefers backends with lower latency and error rates")
    output.print_ema_explanation("Would route most traffic to node-1 (10ms) over node-3 (100ms)")
    print()
    output.print_ema_explanation('Configure with: load_balancer = "ema" in group config')
    return dict(distribution)


def format_result(value: Any) -> str:
    """Strings as they are, anything else as compact JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))