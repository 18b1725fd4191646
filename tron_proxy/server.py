"""FastAPI server exposing the Tron JSON-RPC proxy."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import Response
from starlette.requests import ClientDisconnect

from .config import ProxyConfig, load_config
from .dispatcher import JSONRPCDispatcher
from .executors import BlockTransactionInfoExecutor, ForwardProxyExecutor, TraceFileExecutor
from .jsonrpc.handler import MethodRouter
from .jsonrpc.models import ErrorCode, JSONRPCResponse
from .utils import strict_json

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"


def build_dispatcher(config: ProxyConfig, client: httpx.AsyncClient) -> JSONRPCDispatcher:
    """Wire the method router and its executors."""
    router = MethodRouter(fallback=ForwardProxyExecutor(config, client))
    router.register_method(
        "debug_traceBlockByHash", BlockTransactionInfoExecutor(config, client)
    )
    router.register_method("eth_debugTransactionTrace", TraceFileExecutor(config))
    return JSONRPCDispatcher(router)


def create_app(
    config: Optional[ProxyConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """Create the proxy application.

    Args:
        config: Proxy configuration; loaded from the environment when omitted
        http_client: Outbound HTTP client; when given, the caller owns and
            closes it (tests pass one backed by ``httpx.MockTransport``)
    """
    config = config or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle manager for FastAPI app."""
        client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.upstream_timeout)
        )
        app.state.dispatcher = build_dispatcher(config, client)
        logger.info(
            f"Proxy started: jsonrpc={config.jsonrpc_endpoint}, rest={config.rest_url}, "
            f"trace_dir={config.trace_dir}"
        )
        yield
        logger.info("Shutting down proxy...")
        if http_client is None:
            await client.aclose()

    app = FastAPI(
        title="Tron JSON-RPC Proxy",
        description="JSON-RPC 2.0 front for a Tron node with local trace and block-info methods",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config

    @app.post("/jsonrpc")
    async def jsonrpc_endpoint(request: Request) -> Response:
        """JSON-RPC 2.0 endpoint for single calls and batches."""
        try:
            body = await request.body()
        except ClientDisconnect as e:
            logger.warning(f"Client went away before the body was read: {e!r}")
            error = JSONRPCResponse.failure(
                None,
                ErrorCode.INTERNAL_ERROR,
                "Internal error: unable to read request body",
            )
            return Response(content=strict_json.dumps(error.to_dict()), media_type=JSON_MEDIA_TYPE)

        logger.info(f"Request body: {body.decode('utf-8', errors='replace')}")

        payload = await request.app.state.dispatcher.dispatch(body)
        if payload is None:
            return Response(status_code=200, media_type=JSON_MEDIA_TYPE)
        return Response(content=strict_json.dumps(payload), media_type=JSON_MEDIA_TYPE)

    @app.api_route(
        "/test",
        methods=["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"],
    )
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app
