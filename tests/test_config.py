from dataclasses import FrozenInstanceError

import pytest

from roxydemo.config import CHAIN_ID, INITIAL_BLOCK, ROXY_PORT, DemoConfig, MockNodeConfig


def test_mock_node_config_fields():
    cfg = MockNodeConfig("node-1", 9001, 10)
    assert (cfg.name, cfg.port, cfg.latency_ms) == ("node-1", 9001, 10)


def test_mock_node_config_is_frozen():
    cfg = MockNodeConfig("node-1", 9001, 10)
    with pytest.raises(FrozenInstanceError):
        cfg.port = 1
    assert cfg.port == 9001


def test_defaults_match_constants():
    cfg = DemoConfig()
    assert cfg.roxy_port == ROXY_PORT == 18545
    assert cfg.chain_id == CHAIN_ID == 1
    assert cfg.initial_block == INITIAL_BLOCK == 21_000_000
    assert cfg.load_balancer == "round_robin"
    assert cfg.cache_enabled is True
    assert cfg.rate_limit_enabled is True
    assert cfg.requests_per_second == 50
    assert cfg.section_delay_ms == 1500


def test_default_nodes():
    cfg = DemoConfig()
    assert [n.name for n in cfg.nodes] == ["node-1", "node-2", "node-3"]
    assert [n.latency_ms for n in cfg.nodes] == [10, 50, 100]
    assert [n.name for n in cfg.sequencer_nodes] == ["sequencer-1", "sequencer-2"]
    assert all(n.latency_ms == 5 for n in cfg.sequencer_nodes)


def test_all_ports_distinct_and_not_proxy_port():
    cfg = DemoConfig()
    ports = [n.port for n in cfg.nodes + cfg.sequencer_nodes]
    assert len(set(ports)) == len(ports)
    assert cfg.roxy_port not in ports


def test_default_blocked_methods():
    assert DemoConfig().blocked_methods == [
        "admin_addPeer",
        "admin_removePeer",
        "debug_traceTransaction",
    ]


def test_default_lists_not_shared():
    a = DemoConfig()
    b = DemoConfig()
    a.blocked_methods.append("eth_call")
    a.nodes.pop()
    assert "eth_call" not in b.blocked_methods
    assert len(b.nodes) == 3


def test_overrides():
    cfg = DemoConfig(roxy_port=1234, cache_enabled=False)
    assert cfg.roxy_port == 1234
    assert cfg.cache_enabled is False
    assert len(cfg.nodes) == 3