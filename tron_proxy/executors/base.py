"""Executor base class.

An executor turns decoded calls into responses. Whatever goes wrong inside an
executor is converted into an error response here, so callers only ever see
``JSONRPCResponse`` objects.
"""
import logging
from typing import Any, List

from ..jsonrpc.models import (
    ErrorCode,
    JSONRPC_VERSION,
    JSONRPCRequest,
    JSONRPCResponse,
)
from ..utils.errors import InvalidRequestError, ProxyError

logger = logging.getLogger(__name__)


class Executor:
    """Base executor: version check, error conversion, sequential batches."""

    name = "executor"

    async def run(self, call: JSONRPCRequest) -> Any:
        """Compute the ``result`` for one call. Subclasses raise ``ProxyError`` on failure."""
        raise NotImplementedError

    @staticmethod
    def check_version(call: JSONRPCRequest) -> None:
        if call.jsonrpc != JSONRPC_VERSION:
            raise InvalidRequestError("Invalid Request")

    async def execute(self, call: JSONRPCRequest) -> JSONRPCResponse:
        """Execute one call and wrap the outcome in a response.

        Args:
            call: Decoded JSON-RPC call

        Returns:
            JSONRPCResponse with result or error, carrying the call's id
        """
        try:
            self.check_version(call)
            result = await self.run(call)
            return JSONRPCResponse(id=call.id, result=result)

        except ProxyError as e:
            logger.warning(f"{self.name} failed for {call.method} (id={call.id!r}): {e}")
            return JSONRPCResponse.failure(call.id, e.code, str(e))
        except Exception as e:
            logger.error(f"Internal error handling {call.method}: {e}", exc_info=True)
            return JSONRPCResponse.failure(
                call.id,
                ErrorCode.INTERNAL_ERROR,
                "Internal error",
                data={"details": str(e)},
            )

    async def execute_batch(
        self, calls: List[JSONRPCRequest], raw_body: bytes
    ) -> List[JSONRPCResponse]:
        """Execute a homogeneous batch, one call after the other.

        ``raw_body`` is the request body exactly as received; only executors
        that pass batches through untouched need it.
        """
        return [await self.execute(call) for call in calls]
