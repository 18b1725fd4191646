"""Path confinement for trace file lookups."""
from pathlib import Path
from .validation import validate_tx_id
from .errors import SecurityError


def resolve_trace_path(trace_dir: Path, tx_id: str) -> Path:
    """Return ``<trace_dir>/<tx_id>.json``, refusing ids that could leave the directory.

    Only the id is checked, the directory itself may be a symlink or hold
    symlinked trace files.
    """
    if not validate_tx_id(tx_id):
        raise SecurityError(f"Invalid params: malformed transaction id {tx_id!r}")

    return trace_dir / f"{tx_id}.json"
