"""Execution strategies for routed JSON-RPC calls."""
from .base import Executor
from .block_info import BlockTransactionInfoExecutor
from .forward import ForwardProxyExecutor
from .trace import TraceFileExecutor

__all__ = [
    "Executor",
    "BlockTransactionInfoExecutor",
    "ForwardProxyExecutor",
    "TraceFileExecutor",
]
