"""JSON-RPC dispatch: shape detection, routing and response assembly."""
import logging
from typing import Any, Dict, List, Optional, Union

from .jsonrpc.handler import MethodRouter
from .jsonrpc.models import ErrorCode, JSONRPCRequest, JSONRPCResponse
from .jsonrpc.parser import decode_batch, decode_call, ensure_single_method, parse_envelope
from .utils.errors import MixedMethodsError, ParseError

logger = logging.getLogger(__name__)

Payload = Union[Dict[str, Any], List[Dict[str, Any]]]


class JSONRPCDispatcher:
    """Turns a raw request body into the JSON payload to send back.

    Every failure is answered with a JSON-RPC error; ``dispatch`` never raises.
    """

    def __init__(self, router: MethodRouter):
        self.router = router

    async def dispatch(self, body: bytes) -> Optional[Payload]:
        """Handle one request body.

        Args:
            body: Raw HTTP request body

        Returns:
            A response object, a list of response objects, or None when the
            request was a single notification and nothing must be sent.
        """
        try:
            try:
                payload = parse_envelope(body)
            except ParseError as e:
                return JSONRPCResponse.failure(None, e.code, str(e)).to_dict()

            if isinstance(payload, dict):
                logger.debug("Single JSON-RPC call")
                return await self._dispatch_single(payload)

            return await self._dispatch_batch(payload, body)

        except Exception as e:
            logger.error(f"Unhandled error during dispatch: {e}", exc_info=True)
            return JSONRPCResponse.failure(
                None, ErrorCode.INTERNAL_ERROR, "Internal error", data={"details": str(e)}
            ).to_dict()

    async def _dispatch_single(self, obj: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            call = decode_call(obj)
        except ParseError as e:
            logger.warning(f"Rejected single call: {e}")
            return JSONRPCResponse.failure(None, e.code, str(e)).to_dict()

        executor = self.router.resolve(call.method)
        logger.info(f"Dispatching {call.method} (id={call.id!r}) to {executor.name}")
        response = await executor.execute(call)

        if call.is_notification:
            logger.info(f"Notification {call.method} handled, no response sent")
            return None
        return response.to_dict()

    async def _dispatch_batch(self, items: List[Any], body: bytes) -> List[Dict[str, Any]]:
        if not items:
            logger.info("Empty batch, nothing to dispatch")
            return []
        logger.info(f"Batch of {len(items)} calls")

        calls, errors = decode_batch(items)
        if errors is not None:
            return [error.to_dict() for error in errors]

        try:
            method = ensure_single_method(calls)
        except MixedMethodsError as e:
            logger.warning(f"Rejected batch of {len(calls)} calls: mixed methods")
            return self._fail_all(calls, e.code, str(e))

        executor = self.router.resolve(method)
        logger.info(f"Dispatching batch of {len(calls)} {method} calls to {executor.name}")
        responses = await executor.execute_batch(calls, body)
        logger.debug(f"Batch produced {len(responses)} responses")
        return [response.to_dict() for response in responses]

    @staticmethod
    def _fail_all(calls: List[JSONRPCRequest], code: int, message: str) -> List[Dict[str, Any]]:
        return [JSONRPCResponse.failure(call.id, code, message).to_dict() for call in calls]
