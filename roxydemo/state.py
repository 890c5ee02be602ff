"""Simulated blockchain state for a mock Ethereum node."""

from __future__ import annotations

import threading

_GAS_PRICE = "0x4a817c800"  # 20 Gwei

_SEED_BALANCES = {
    "0x742d35cc6634c0532925a3b844bc9e7595f1e3b8": "0x56bc75e2d63100000",  # 100 ETH
    "0xde0b295669a9fd93d5f28d9ec85e40f4cb697bae": "0x21e19e0c9bab2400000",  # 10000 ETH
}


class NodeState:
    """Block height, balances, health and request count of one mock node.

    All mutating operations are thread-safe. ``latency`` is in seconds.
    """

    def __init__(self, name: str, chain_id: int, initial_block: int, latency: float) -> None:
        self.name = name
        self.chain_id = chain_id
        self.latency = latency
        self._lock = threading.Lock()
        self._block_number = initial_block
        self._balances: dict[str, str] = dict(_SEED_BALANCES)
        self._healthy = True
        self._request_count = 0

    def advance_block(self) -> int:
        """Increment the block number and return the new value."""
        with self._lock:
            self._block_number += 1
            return self._block_number

    def block_number(self) -> str:
        """Current block number as a hex string."""
        return f"0x{self.block_number_value():x}"

    def block_number_value(self) -> int:
        """Current block number as an integer."""
        with self._lock:
            return self._block_number

    def chain_id_hex(self) -> str:
        """Chain ID as a hex string."""
        return f"0x{self.chain_id:x}"

    def get_balance(self, address: str) -> str:
        """Balance of an address as hex; unknown addresses hold ``0x0``."""
        with self._lock:
            return self._balances.get(address.lower(), "0x0")

    def set_balance(self, address: str, balance: str) -> None:
        """Set the balance of an address."""
        with self._lock:
            self._balances[address.lower()] = balance

    def set_healthy(self, healthy: bool) -> None:
        """Mark the node healthy or unhealthy."""
        with self._lock:
            self._healthy = bool(healthy)

    def is_healthy(self) -> bool:
        """Whether the node currently answers requests."""
        with self._lock:
            return self._healthy

    def record_request(self) -> int:
        """Count one request and return the new total."""
        with self._lock:
            self._request_count += 1
            return self._request_count

    def request_count(self) -> int:
        """Total number of requests recorded."""
        with self._lock:
            return self._request_count

    def client_version(self) -> str:
        """Client version string identifying this node."""
        return f"MockNode/{self.name}/v1.0.0"

    def net_version(self) -> str:
        """Network version, the chain ID in decimal."""
        return str(self.chain_id)

    def gas_price(self) -> str:
        """Simulated gas price as hex."""
        return _GAS_PRICE