"""Method routing for JSON-RPC calls."""
from typing import Dict, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from ..executors.base import Executor

logger = logging.getLogger(__name__)


class MethodRouter:
    """Maps method names to executors, falling back to a default executor.

    Methods without a registered executor are never rejected here: they go
    to the fallback, which in the proxy forwards them upstream.
    """

    def __init__(self, fallback: "Executor"):
        self.methods: Dict[str, "Executor"] = {}
        self.fallback = fallback

    def register_method(self, method_name: str, executor: "Executor"):
        """Register a locally handled JSON-RPC method.

        Args:
            method_name: Name of the JSON-RPC method (e.g., "eth_debugTransactionTrace")
            executor: Executor that handles calls to the method
        """
        self.methods[method_name] = executor
        logger.info(f"Registered JSON-RPC method: {method_name} -> {executor.name}")

    def resolve(self, method_name: str) -> "Executor":
        """Return the executor for a method name."""
        return self.methods.get(method_name, self.fallback)
