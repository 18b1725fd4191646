"""Custom exception classes for the proxy."""
from ..jsonrpc.models import ErrorCode


class ProxyError(Exception):
    """Base exception for proxy errors.

    Each subclass knows the JSON-RPC error code it is reported with.
    """

    code = ErrorCode.INTERNAL_ERROR


class ParseError(ProxyError):
    """Request envelope or call object could not be decoded."""

    code = ErrorCode.PARSE_ERROR


class InvalidRequestError(ProxyError):
    """Call is well-formed JSON but not a valid JSON-RPC 2.0 request."""

    code = ErrorCode.INVALID_REQUEST


class MixedMethodsError(ProxyError):
    """Batch contains more than one method name."""

    code = ErrorCode.MIXED_METHODS


class InvalidParamsError(ProxyError):
    """Missing or mistyped call parameters."""

    code = ErrorCode.INVALID_PARAMS


class SecurityError(InvalidParamsError):
    """Parameter would escape its allowed location (path traversal, etc.)."""


class UpstreamError(ProxyError):
    """Upstream node unreachable or replied with something unusable."""

    pass


class TraceFileError(ProxyError):
    """Trace file missing, unreadable or malformed."""

    pass
