"""Settings for the demo and its mock nodes."""

from __future__ import annotations

from dataclasses import dataclass, field

ROXY_PORT = 18545
"""Proxy port, chosen to avoid clashing with a local node."""

CHAIN_ID = 1
"""Chain ID served by the mock nodes (Ethereum mainnet)."""

INITIAL_BLOCK = 21_000_000
"""Starting block number of the mock nodes."""


@dataclass(frozen=True)
class MockNodeConfig:
    """Name, port and simulated latency of one mock node."""

    name: str
    port: int
    latency_ms: int


def _default_nodes() -> list[MockNodeConfig]:
    return [
        MockNodeConfig("node-1", 9001, 10),
        MockNodeConfig("node-2", 9002, 50),
        MockNodeConfig("node-3", 9003, 100),
    ]


def _default_sequencer_nodes() -> list[MockNodeConfig]:
    return [
        MockNodeConfig("sequencer-1", 9011, 5),
        MockNodeConfig("sequencer-2", 9012, 5),
    ]


def _default_blocked_methods() -> list[str]:
    return ["admin_addPeer", "admin_removePeer", "debug_traceTransaction"]


@dataclass
class DemoConfig:
    """Everything the demo run needs to know."""

    roxy_port: int = ROXY_PORT
    nodes: list[MockNodeConfig] = field(default_factory=_default_nodes)
    sequencer_nodes: list[MockNodeConfig] = field(default_factory=_default_sequencer_nodes)
    load_balancer: str = "round_robin"
    cache_enabled: bool = True
    chain_id: int = CHAIN_ID
    initial_block: int = INITIAL_BLOCK
    rate_limit_enabled: bool = True
    requests_per_second: int = 50
    blocked_methods: list[str] = field(default_factory=_default_blocked_methods)
    section_delay_ms: int = 1500