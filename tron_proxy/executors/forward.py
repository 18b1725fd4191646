"""Pass-through of calls the proxy does not handle itself.

Single calls are rebuilt from the decoded request and the reply's ``id`` is
forced back to the caller's. Batches go upstream as the exact bytes received.
"""
import logging
from typing import Any, List

import httpx
from pydantic import TypeAdapter, ValidationError

from ..config import ProxyConfig
from ..jsonrpc.models import ErrorCode, JSONRPCRequest, JSONRPCResponse
from ..utils.errors import InvalidRequestError
from ..utils import strict_json
from .base import Executor

logger = logging.getLogger(__name__)

INVALID_UPSTREAM_RESPONSE = "Invalid response from forwarded service"

_batch_responses = TypeAdapter(List[JSONRPCResponse])


class ForwardProxyExecutor(Executor):
    """Forwards calls verbatim to the upstream JSON-RPC endpoint."""

    name = "forward"

    def __init__(self, config: ProxyConfig, client: httpx.AsyncClient):
        self.url = config.jsonrpc_endpoint
        self.client = client

    async def _post(self, content: bytes) -> bytes:
        response = await self.client.post(
            self.url,
            content=content,
            headers={"Content-Type": "application/json"},
        )
        logger.debug(f"Upstream replied with status {response.status_code}")
        return response.content

    async def execute(self, call: JSONRPCRequest) -> JSONRPCResponse:
        try:
            self.check_version(call)
        except InvalidRequestError as e:
            return JSONRPCResponse.failure(call.id, e.code, str(e))

        logger.info(f"Forwarding {call.method} (id={call.id!r}) to {self.url}")
        try:
            body = await self._post(strict_json.dumps(call.to_dict()).encode())
        except httpx.HTTPError as e:
            logger.error(f"Forwarding {call.method} failed: {e!r}")
            return JSONRPCResponse.failure(call.id, ErrorCode.INTERNAL_ERROR, f"Internal error: {e}")

        try:
            reply = strict_json.loads(body)
            if not isinstance(reply, dict):
                raise ValueError(f"expected object, got {type(reply).__name__}")
            # replaced by the caller's id below
            reply.pop("id", None)
            response = JSONRPCResponse.model_validate(reply)
        except (ValueError, ValidationError) as e:
            logger.warning(f"Undecodable forwarded response: {e}")
            return JSONRPCResponse.failure(call.id, ErrorCode.INTERNAL_ERROR, INVALID_UPSTREAM_RESPONSE)

        response.id = call.id
        return response

    async def execute_batch(
        self, calls: List[JSONRPCRequest], raw_body: bytes
    ) -> List[JSONRPCResponse]:
        logger.info(f"Forwarding batch of {len(calls)} calls to {self.url}")
        try:
            body = await self._post(raw_body)
        except httpx.HTTPError as e:
            logger.error(f"Forwarding batch failed: {e!r}")
            return self._fail_all(calls, f"Internal error: {e}")

        try:
            reply: Any = strict_json.loads(body)
        except ValueError as e:
            logger.warning(f"Undecodable forwarded batch response: {e}")
            return self._fail_all(calls, INVALID_UPSTREAM_RESPONSE)

        if isinstance(reply, list):
            try:
                return _batch_responses.validate_python(reply)
            except ValidationError as e:
                logger.warning(f"Malformed forwarded batch response: {e.error_count()} errors")
                return self._fail_all(calls, INVALID_UPSTREAM_RESPONSE)

        # Some upstreams answer a batch with one object; accept it as a one-item batch.
        if isinstance(reply, dict) and reply.get("id") is not None:
            try:
                return [JSONRPCResponse.model_validate(reply)]
            except ValidationError as e:
                logger.warning(f"Malformed forwarded response: {e.error_count()} errors")

        return self._fail_all(calls, INVALID_UPSTREAM_RESPONSE)

    @staticmethod
    def _fail_all(calls: List[JSONRPCRequest], message: str) -> List[JSONRPCResponse]:
        return [
            JSONRPCResponse.failure(call.id, ErrorCode.INTERNAL_ERROR, message)
            for call in calls
        ]
