"""Input validation utilities."""
import re
from typing import Any

VALID_TX_ID = re.compile(r"[A-Za-z0-9_-]{1,128}")


def validate_tx_id(tx_id: str) -> bool:
    """Validate a transaction id usable as a trace file stem."""
    return bool(VALID_TX_ID.fullmatch(tx_id))


def is_block_number(value: Any) -> bool:
    """Check that a decoded JSON value is an integer block number.

    JSON booleans decode to ``bool`` (an ``int`` subclass) and ``100.0``
    decodes to ``float``; neither counts.
    """
    return isinstance(value, int) and not isinstance(value, bool)
