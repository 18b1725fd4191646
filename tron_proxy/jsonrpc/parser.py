"""Envelope parsing, call decoding and the batch homogeneity guard."""
from ..utils import strict_json
import logging
from typing import Any, List, Optional, Tuple, Union

from pydantic import ValidationError

from ..utils.errors import MixedMethodsError, ParseError
from .models import ErrorCode, JSONRPCRequest, JSONRPCResponse

logger = logging.getLogger(__name__)

BATCH_PARSE_ERROR_MESSAGE = "Parse error: invalid request in batch"


def parse_envelope(body: bytes) -> Union[dict, list]:
    """Decode the raw request body and classify its shape.

    Returns:
        A dict for a single call or a list for a batch.

    Raises:
        ParseError: If the body is not JSON, or is JSON but neither an
            object nor an array.
    """
    try:
        payload = strict_json.loads(body)
    except ValueError as e:
        logger.warning(f"Request body is not JSON: {e}")
        raise ParseError("Parse error: invalid JSON") from e

    if not isinstance(payload, (dict, list)):
        logger.warning(f"Request body is a JSON {type(payload).__name__}, not a call or batch")
        raise ParseError("Parse error: invalid structure")

    return payload


def decode_call(obj: Any) -> JSONRPCRequest:
    """Convert one loosely-typed call object into a ``JSONRPCRequest``.

    Raises:
        ParseError: If fields are missing or have the wrong types.
    """
    try:
        return JSONRPCRequest.model_validate(obj)
    except ValidationError as e:
        logger.debug(f"Call decode failed: {e}")
        raise ParseError("Parse error: invalid request object") from e


def decode_batch(
    items: List[Any],
) -> Tuple[Optional[List[JSONRPCRequest]], Optional[List[JSONRPCResponse]]]:
    """Decode every element of a batch, all or nothing.

    Returns:
        ``(calls, None)`` when every element decoded, otherwise
        ``(None, errors)`` with one PARSE_ERROR response per element in the
        original order. Elements that did decode keep their ``id`` in the
        error set; the rest get ``null``.
    """
    decoded: List[Optional[JSONRPCRequest]] = []
    failures = 0
    for item in items:
        try:
            decoded.append(decode_call(item))
        except ParseError:
            decoded.append(None)
            failures += 1

    if not failures:
        return decoded, None

    logger.warning(f"{failures} of {len(items)} batch entries failed to decode, rejecting batch")
    errors = [
        JSONRPCResponse.failure(
            call.id if call is not None else None,
            ErrorCode.PARSE_ERROR,
            BATCH_PARSE_ERROR_MESSAGE,
        )
        for call in decoded
    ]
    return None, errors


def ensure_single_method(calls: List[JSONRPCRequest]) -> str:
    """Return the one method name shared by every call of a batch.

    Raises:
        MixedMethodsError: If the batch mixes method names.
    """
    method = calls[0].method
    for call in calls[1:]:
        if call.method != method:
            raise MixedMethodsError("Mixed methods not supported")
    return method
