"""Pre-computed transaction traces for ``eth_debugTransactionTrace``.

Traces are read from ``<trace_dir>/<tx_id>.json``. Batches fan out one task
per call, bounded by ``max_batch_concurrency``; every task writes only its own
response slot, so completion order does not matter.
"""
import asyncio
import logging
from pathlib import Path
from typing import Any, List, Optional

from ..config import ProxyConfig
from ..jsonrpc.models import JSONRPCRequest, JSONRPCResponse
from ..utils.errors import InvalidParamsError, TraceFileError
from ..utils.security import resolve_trace_path
from ..utils import strict_json
from .base import Executor

logger = logging.getLogger(__name__)


class TraceFileExecutor(Executor):
    """Serves transaction traces from the trace directory."""

    name = "trace"

    def __init__(self, config: ProxyConfig):
        self.trace_dir = config.trace_dir
        self.max_concurrency = config.max_batch_concurrency

    def _tx_id(self, call: JSONRPCRequest) -> str:
        if not call.params:
            raise InvalidParamsError("Invalid params")
        tx_id = call.params[0]
        if not isinstance(tx_id, str):
            raise InvalidParamsError("Invalid params: must be string TxId")
        return tx_id

    async def _read(self, path: Path) -> Any:
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            logger.warning(f"Trace file unreadable: {e}")
            raise TraceFileError("cannot read trace file") from e

        try:
            return strict_json.loads(data)
        except ValueError as e:
            logger.warning(f"Invalid JSON in {path}: {e}")
            raise TraceFileError("Invalid JSON in trace file") from e

    async def run(self, call: JSONRPCRequest) -> Any:
        tx_id = self._tx_id(call)
        path = resolve_trace_path(self.trace_dir, tx_id)
        logger.info(f"Trace lookup for {tx_id}")
        return await self._read(path)

    async def execute_batch(
        self, calls: List[JSONRPCRequest], raw_body: bytes
    ) -> List[JSONRPCResponse]:
        """Read all traces of a batch concurrently and wait for every one."""
        responses: List[Optional[JSONRPCResponse]] = [None] * len(calls)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch(index: int, call: JSONRPCRequest) -> None:
            async with semaphore:
                responses[index] = await self.execute(call)

        await asyncio.gather(*(fetch(i, call) for i, call in enumerate(calls)))
        return responses
