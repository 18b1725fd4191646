"""Proxy configuration.

Configuration is built once at startup and handed to ``create_app``; request
handling code never looks at the process environment.

Sources, later ones winning:
  1. field defaults
  2. YAML file named by ``PROXY_CONFIG`` (optional)
  3. environment variables (see ``ENV_VARS``)
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "PROXY_CONFIG"

ENV_VARS = {
    "jsonrpc_endpoint": "TRON_JSONRPC_ENDPOINT",
    "rest_endpoint": "TRON_REST_ENDPOINT",
    "rest_path": "TRON_REST_PATH",
    "trace_dir": "TRACE_DIR",
    "max_batch_concurrency": "PROXY_MAX_BATCH_CONCURRENCY",
    "upstream_timeout": "PROXY_UPSTREAM_TIMEOUT",
    "host": "PROXY_HOST",
    "port": "PROXY_PORT",
    "log_level": "PROXY_LOG_LEVEL",
}


class ProxyConfig(BaseModel):
    jsonrpc_endpoint: str = "http://127.0.0.1:8545/jsonrpc"
    rest_endpoint: str = "http://127.0.0.1:8090"
    rest_path: str = "/wallet/gettransactioninfobyblocknum"
    trace_dir: Path = Path("/project/trace")
    max_batch_concurrency: int = Field(default=32, ge=1)
    # None keeps outbound calls unbounded
    upstream_timeout: Optional[float] = Field(default=None, gt=0)
    host: str = "0.0.0.0"
    port: int = Field(default=9090, ge=1, le=65535)
    log_level: str = "INFO"

    @property
    def rest_url(self) -> str:
        """Full URL of the block transaction-info REST call."""
        if self.rest_endpoint.rstrip("/").endswith(self.rest_path.rstrip("/")):
            return self.rest_endpoint
        return self.rest_endpoint.rstrip("/") + "/" + self.rest_path.lstrip("/")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        base: Optional[Dict[str, Any]] = None,
    ) -> "ProxyConfig":
        """Build a config from environment variables layered over ``base``."""
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = dict(base or {})
        for field_name, env_name in ENV_VARS.items():
            raw = environ.get(env_name)
            if raw is not None and raw != "":
                values[field_name] = raw
        return cls.model_validate(values)


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """Load configuration values from a YAML file.

    Args:
        path: Path to config file

    Returns:
        Configuration dictionary (empty for an empty file)
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def load_config(environ: Optional[Mapping[str, str]] = None) -> ProxyConfig:
    """Load the proxy configuration from the optional YAML file and the environment."""
    environ = os.environ if environ is None else environ
    base: Dict[str, Any] = {}
    config_path = environ.get(CONFIG_PATH_ENV)
    if config_path:
        logger.info(f"Loading config file: {config_path}")
        base = load_yaml_config(Path(config_path))
    return ProxyConfig.from_env(environ, base=base)
