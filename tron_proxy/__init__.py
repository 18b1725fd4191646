"""JSON-RPC 2.0 proxy in front of a Tron node."""

__version__ = "1.0.0"
