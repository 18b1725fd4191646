"""JSON-RPC 2.0 implementation for the Tron node proxy."""
from .models import JSONRPCRequest, JSONRPCResponse, JSONRPCError, ErrorCode, TransactionInfo
from .handler import MethodRouter

__all__ = [
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPCError",
    "ErrorCode",
    "TransactionInfo",
    "MethodRouter",
]
