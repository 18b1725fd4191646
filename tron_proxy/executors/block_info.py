"""REST translation for ``debug_traceBlockByHash``.

The node has no JSON-RPC method for per-block transaction info, so the call's
block number is posted to the node's REST API and the returned list of
transaction-info records becomes the JSON-RPC result.
"""
import logging
from typing import Any, List

import httpx
from pydantic import TypeAdapter, ValidationError

from ..config import ProxyConfig
from ..jsonrpc.models import JSONRPCRequest, TransactionInfo
from ..utils.errors import InvalidParamsError, UpstreamError
from ..utils import strict_json
from ..utils.validation import is_block_number
from .base import Executor

logger = logging.getLogger(__name__)

_transaction_infos = TypeAdapter(List[TransactionInfo])


class BlockTransactionInfoExecutor(Executor):
    """Fetches a block's transaction info records over the node's REST API."""

    name = "rest"

    def __init__(self, config: ProxyConfig, client: httpx.AsyncClient):
        self.url = config.rest_url
        self.client = client

    def _block_number(self, call: JSONRPCRequest) -> int:
        if not call.params:
            raise InvalidParamsError("Invalid params")
        block_num = call.params[0]
        if not is_block_number(block_num):
            raise InvalidParamsError("Invalid params: must be integer block number")
        return block_num

    async def run(self, call: JSONRPCRequest) -> Any:
        block_num = self._block_number(call)

        logger.info(f"Block transaction info for block {block_num}")
        try:
            response = await self.client.post(self.url, json={"num": block_num})
        except httpx.HTTPError as e:
            logger.error(f"REST call to {self.url} failed: {e!r}")
            raise UpstreamError(f"Internal error: {e}") from e

        logger.info(f"REST reply for block {block_num}: status {response.status_code}, {len(response.content)} bytes")

        try:
            records = strict_json.loads(response.content)
            if not isinstance(records, list):
                raise ValueError(f"expected array, got {type(records).__name__}")
            _transaction_infos.validate_python(records)
        except (ValueError, ValidationError) as e:
            raise UpstreamError(f"Invalid response from TronNode REST: {e}") from e

        return records
