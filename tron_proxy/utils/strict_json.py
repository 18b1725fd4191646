"""JSON encoding limited to RFC 8259.

The stdlib codec accepts and emits ``NaN``, ``Infinity`` and ``-Infinity``;
neither peers nor the node understand them, so both directions refuse them.
"""
import json
import math
from typing import Any, Union


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _parse_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def loads(data: Union[str, bytes]) -> Any:
    """Decode JSON; raises ``ValueError`` for malformed or non-standard input."""
    return json.loads(data, parse_constant=_reject_constant, parse_float=_parse_float)


def dumps(obj: Any) -> str:
    """Encode JSON; raises ``ValueError`` for non-finite floats."""
    return json.dumps(obj, allow_nan=False)
