"""Tests for request dispatch: routing, batch policies and response assembly."""
import json

import httpx
import pytest

from tron_proxy.config import ProxyConfig
from tron_proxy.jsonrpc.models import ErrorCode
from tron_proxy.server import build_dispatcher


class Upstream:
    """Fake Tron node answering both the REST and the JSON-RPC endpoints."""

    def __init__(self):
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content) if request.content else None
        if request.url.path.startswith("/wallet/"):
            num = body["num"]
            if num == 666:
                return httpx.Response(500, content=b"node exploded")
            return httpx.Response(200, json=[{"id": f"tx{num}", "blockNumber": num}])
        if isinstance(body, list):
            return httpx.Response(200, json=[
                {"jsonrpc": "2.0", "id": item.get("id"), "result": item["method"]} for item in body
            ])
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": "upstream", "result": body["method"]})


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def dispatcher(tmp_path, upstream):
    config = ProxyConfig(
        jsonrpc_endpoint="http://tron-node:8545/jsonrpc",
        rest_endpoint="http://tron-node:8090",
        trace_dir=tmp_path,
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    return build_dispatcher(config, client)


def body(payload) -> bytes:
    return json.dumps(payload).encode()


class TestEnvelopeErrors:
    """Test errors detected before any call is decoded."""

    @pytest.mark.asyncio
    async def test_invalid_json(self, dispatcher):
        result = await dispatcher.dispatch(b"{oops")
        assert result == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32700, "message": "Parse error: invalid JSON"},
        }

    @pytest.mark.asyncio
    async def test_invalid_structure(self, dispatcher):
        result = await dispatcher.dispatch(b"12")
        assert result["id"] is None
        assert result["error"] == {"code": -32700, "message": "Parse error: invalid structure"}

    @pytest.mark.asyncio
    async def test_undecodable_single_call(self, dispatcher, upstream):
        result = await dispatcher.dispatch(body({"jsonrpc": "2.0", "method": 5, "id": 9}))
        assert result["id"] is None
        assert result["error"]["code"] == ErrorCode.PARSE_ERROR
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_non_standard_json_not_forwarded(self, dispatcher, upstream):
        """Test that NaN / Infinity bodies are parse errors and never reach the node."""
        result = await dispatcher.dispatch(
            b'{"jsonrpc":"2.0","method":"eth_call","params":[NaN],"id":Infinity}'
        )

        assert result == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32700, "message": "Parse error: invalid JSON"},
        }
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_trace_file_with_nan(self, dispatcher, tmp_path):
        (tmp_path / "nan.json").write_text('{"gas": NaN}')
        result = await dispatcher.dispatch(body({
            "jsonrpc": "2.0", "method": "eth_debugTransactionTrace", "params": ["nan"], "id": 1,
        }))

        assert result == {
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32603, "message": "Invalid JSON in trace file"},
        }

    @pytest.mark.asyncio
    async def test_empty_batch(self, dispatcher, upstream):
        """Test that an empty batch returns [] without touching any executor."""
        assert await dispatcher.dispatch(b"[]") == []
        assert upstream.requests == []


class TestSingleDispatch:
    """Test single-call routing and response assembly."""

    @pytest.mark.asyncio
    async def test_trace_scenario(self, dispatcher, tmp_path):
        trace = {"output": "0x", "calls": []}
        (tmp_path / "abc123.json").write_text(json.dumps(trace))

        result = await dispatcher.dispatch(body({
            "jsonrpc": "2.0",
            "method": "eth_debugTransactionTrace",
            "params": ["abc123"],
            "id": 1,
        }))

        assert result == {"jsonrpc": "2.0", "id": 1, "result": trace}

    @pytest.mark.asyncio
    async def test_rest_route(self, dispatcher, upstream):
        result = await dispatcher.dispatch(body({
            "jsonrpc": "2.0", "method": "debug_traceBlockByHash", "params": [42], "id": "blk",
        }))

        assert result["id"] == "blk"
        assert result["result"] == [{"id": "tx42", "blockNumber": 42}]
        assert upstream.requests[0].url.path == "/wallet/gettransactioninfobyblocknum"

    @pytest.mark.asyncio
    async def test_unknown_method_forwarded(self, dispatcher, upstream):
        """Test that any other method is forwarded and the caller's id restored."""
        result = await dispatcher.dispatch(body({
            "jsonrpc": "2.0", "method": "eth_chainId", "params": [], "id": 17,
        }))

        assert result == {"jsonrpc": "2.0", "id": 17, "result": "eth_chainId"}
        assert upstream.requests[0].url.path == "/jsonrpc"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("request_id", [0, 17, "17", "a-b", 2.5, None])
    async def test_id_echoed_exactly(self, dispatcher, tmp_path, request_id):
        (tmp_path / "t.json").write_text("{}")
        result = await dispatcher.dispatch(body({
            "jsonrpc": "2.0", "method": "eth_debugTransactionTrace", "params": ["t"], "id": request_id,
        }))

        assert result["id"] == request_id
        assert type(result["id"]) is type(request_id)

    @pytest.mark.asyncio
    async def test_notification_executed_but_silent(self, dispatcher, upstream):
        """Test that a call without id is executed but produces no response."""
        result = await dispatcher.dispatch(body({
            "jsonrpc": "2.0", "method": "eth_sendRawTransaction", "params": ["0xf8"],
        }))

        assert result is None
        assert len(upstream.requests) == 1

    @pytest.mark.asyncio
    async def test_local_notification_silent(self, dispatcher):
        result = await dispatcher.dispatch(body({
            "jsonrpc": "2.0", "method": "eth_debugTransactionTrace", "params": ["missing"],
        }))
        assert result is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["eth_debugTransactionTrace", "debug_traceBlockByHash", "eth_chainId"])
    async def test_wrong_version(self, dispatcher, upstream, method):
        result = await dispatcher.dispatch(body({"jsonrpc": "1.0", "method": method, "params": [1], "id": 3}))

        assert result == {
            "jsonrpc": "2.0",
            "id": 3,
            "error": {"code": -32600, "message": "Invalid Request"},
        }
        assert upstream.requests == []


class TestBatchDispatch:
    """Test batch policies and ordering."""

    @pytest.mark.asyncio
    async def test_rest_batch_scenario(self, dispatcher):
        """Test two block lookups come back in order with independent outcomes."""
        result = await dispatcher.dispatch(body([
            {"jsonrpc": "2.0", "method": "debug_traceBlockByHash", "params": [100], "id": 1},
            {"jsonrpc": "2.0", "method": "debug_traceBlockByHash", "params": [200], "id": 2},
        ]))

        assert result == [
            {"jsonrpc": "2.0", "id": 1, "result": [{"id": "tx100", "blockNumber": 100}]},
            {"jsonrpc": "2.0", "id": 2, "result": [{"id": "tx200", "blockNumber": 200}]},
        ]

    @pytest.mark.asyncio
    async def test_rest_batch_partial_failure(self, dispatcher):
        result = await dispatcher.dispatch(body([
            {"jsonrpc": "2.0", "method": "debug_traceBlockByHash", "params": [666], "id": 1},
            {"jsonrpc": "2.0", "method": "debug_traceBlockByHash", "params": ["bad"], "id": 2},
            {"jsonrpc": "2.0", "method": "debug_traceBlockByHash", "params": [3], "id": 3},
        ]))

        assert [r["id"] for r in result] == [1, 2, 3]
        assert result[0]["error"]["code"] == ErrorCode.INTERNAL_ERROR
        assert result[1]["error"]["code"] == ErrorCode.INVALID_PARAMS
        assert result[2]["result"] == [{"id": "tx3", "blockNumber": 3}]

    @pytest.mark.asyncio
    async def test_trace_batch_missing_file(self, dispatcher, tmp_path):
        for name in ("a", "c"):
            (tmp_path / f"{name}.json").write_text(json.dumps({"tx": name}))

        result = await dispatcher.dispatch(body([
            {"jsonrpc": "2.0", "method": "eth_debugTransactionTrace", "params": [name], "id": i}
            for i, name in enumerate(["a", "b", "c"])
        ]))

        assert result[0] == {"jsonrpc": "2.0", "id": 0, "result": {"tx": "a"}}
        assert result[1] == {
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32603, "message": "cannot read trace file"},
        }
        assert result[2] == {"jsonrpc": "2.0", "id": 2, "result": {"tx": "c"}}

    @pytest.mark.asyncio
    async def test_mixed_methods(self, dispatcher, upstream):
        """Test that a batch with two method names is rejected as a whole."""
        result = await dispatcher.dispatch(body([
            {"jsonrpc": "2.0", "method": "eth_debugTransactionTrace", "params": ["a"], "id": 1},
            {"jsonrpc": "2.0", "method": "eth_chainId", "params": [], "id": "two"},
            {"jsonrpc": "2.0", "method": "eth_debugTransactionTrace", "params": ["b"]},
        ]))

        assert [r["id"] for r in result] == [1, "two", None]
        assert all(r["error"] == {"code": -32601, "message": "Mixed methods not supported"} for r in result)
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_decode_failure_fails_whole_batch(self, dispatcher, upstream):
        result = await dispatcher.dispatch(body([
            {"jsonrpc": "2.0", "method": "eth_chainId", "id": 1},
            {"jsonrpc": "2.0", "id": 2},
            "garbage",
        ]))

        assert len(result) == 3
        assert [r["id"] for r in result] == [1, None, None]
        assert all(r["error"]["code"] == ErrorCode.PARSE_ERROR for r in result)
        assert all("result" not in r for r in result)
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_forward_batch(self, dispatcher, upstream):
        payload = [
            {"jsonrpc": "2.0", "method": "eth_getBalance", "params": ["0x1"], "id": 1},
            {"jsonrpc": "2.0", "method": "eth_getBalance", "params": ["0x2"], "id": 2},
        ]
        raw = body(payload)

        result = await dispatcher.dispatch(raw)

        assert result == [
            {"jsonrpc": "2.0", "id": 1, "result": "eth_getBalance"},
            {"jsonrpc": "2.0", "id": 2, "result": "eth_getBalance"},
        ]
        assert upstream.requests[0].content == raw

    @pytest.mark.asyncio
    async def test_batch_notifications_keep_their_slot(self, dispatcher, tmp_path):
        (tmp_path / "a.json").write_text("{}")
        result = await dispatcher.dispatch(body([
            {"jsonrpc": "2.0", "method": "eth_debugTransactionTrace", "params": ["a"]},
            {"jsonrpc": "2.0", "method": "eth_debugTransactionTrace", "params": ["a"], "id": 5},
        ]))

        assert result == [
            {"jsonrpc": "2.0", "id": None, "result": {}},
            {"jsonrpc": "2.0", "id": 5, "result": {}},
        ]

    @pytest.mark.asyncio
    async def test_batch_wrong_version_isolated(self, dispatcher, tmp_path):
        (tmp_path / "a.json").write_text("{}")
        result = await dispatcher.dispatch(body([
            {"jsonrpc": "2.0", "method": "eth_debugTransactionTrace", "params": ["a"], "id": 1},
            {"method": "eth_debugTransactionTrace", "params": ["a"], "id": 2},
        ]))

        assert result[0]["result"] == {}
        assert result[1]["error"]["code"] == ErrorCode.INVALID_REQUEST
