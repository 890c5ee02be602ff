"""Mock Ethereum JSON-RPC nodes, a demo client and scripted proxy feature demos."""

__version__ = "0.1.0"