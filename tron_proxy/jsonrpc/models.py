"""JSON-RPC 2.0 request/response models."""
from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr, model_validator
from typing import Any, Dict, List, Optional, Union

JSONRPC_VERSION = "2.0"

# Correlation IDs are echoed back untouched: null, number or string only.
RequestId = Optional[Union[StrictInt, StrictFloat, StrictStr]]


class JSONRPCRequest(BaseModel):
    """JSON-RPC 2.0 request model.

    ``jsonrpc`` is deliberately loose here so that a wrong version can be
    reported as INVALID_REQUEST instead of failing the decode.
    """

    jsonrpc: StrictStr = ""
    method: StrictStr
    params: Optional[List[Any]] = None
    id: RequestId = None

    @property
    def is_notification(self) -> bool:
        """A call without an ``id`` key never gets a response."""
        return "id" not in self.model_fields_set

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
            "params": self.params,
        }
        if not self.is_notification:
            data["id"] = self.id
        return data


class JSONRPCError(BaseModel):
    """JSON-RPC 2.0 error model.

    Fields an upstream node adds to its error objects are kept.
    """

    model_config = ConfigDict(extra="allow")

    code: StrictInt
    message: str
    data: Optional[Any] = None


class JSONRPCResponse(BaseModel):
    """JSON-RPC 2.0 response model.

    Extra top-level members of a forwarded reply are carried through to the
    wire form.
    """

    model_config = ConfigDict(extra="allow")

    jsonrpc: str = JSONRPC_VERSION
    id: RequestId = None
    result: Optional[Any] = None
    error: Optional[JSONRPCError] = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> "JSONRPCResponse":
        if self.error is not None and self.result is not None:
            raise ValueError("response cannot carry both result and error")
        return self

    @classmethod
    def failure(
        cls, id: Any, code: int, message: str, data: Optional[Any] = None
    ) -> "JSONRPCResponse":
        error = JSONRPCError(code=code, message=message)
        if data is not None:
            error.data = data
        return cls(id=id, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: exactly one of ``result`` / ``error``, id always present."""
        data: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump(exclude_unset=True)
        else:
            data["result"] = self.result
        data.update(self.model_extra or {})
        return data


class TransactionInfo(BaseModel):
    """One record of the node's ``gettransactioninfobyblocknum`` reply.

    Only used to check the reply's shape; unknown fields are allowed and the
    caller receives the node's objects as-is.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[StrictStr] = None
    blockNumber: Optional[StrictInt] = None
    transactionHash: Optional[StrictStr] = None
    internal_transactions: Optional[List[Any]] = None


class ErrorCode:
    """JSON-RPC 2.0 standard error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Mixed-method batches share the method-not-found code on the wire.
    MIXED_METHODS = METHOD_NOT_FOUND
