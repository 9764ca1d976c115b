"""
RPC Client Tests.

============================================================
PURPOSE
============================================================
Real HTTP round trips against an in-process aiohttp server.

TEST CATEGORIES:
- Envelope: JSON-RPC body shape, monotonically increasing ids
- Failure mapping: 429, non-2xx, error envelope, timeout, bad JSON
- Breaker: 429 trips the breaker, nothing else does

============================================================
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import pytest
from aiohttp import web
from aiohttp import test_utils

from sui_truth.circuit_breaker import CircuitBreaker
from sui_truth.clock import MockClock
from sui_truth.models import RpcFailureKind
from sui_truth.rpc_client import GET_OBJECT_METHOD, SuiRpcClient


@asynccontextmanager
async def rpc_server(handler):
    """Serve `handler` on POST / and yield its URL."""
    app = web.Application()
    app.router.add_post("/", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield str(server.make_url("/"))
    finally:
        await server.close()


def json_handler(body, status=200, received=None):
    async def handler(request):
        if received is not None:
            received.append(await request.json())
        return web.json_response(body, status=status)
    return handler


@pytest.fixture
def breaker():
    return CircuitBreaker(
        cooldown_seconds=60,
        clock=MockClock(datetime(2025, 1, 1, tzinfo=timezone.utc)),
    )


# ============================================================
# ENVELOPE TESTS
# ============================================================

class TestEnvelope:
    """Request body and successful responses."""

    @pytest.mark.asyncio
    async def test_success_returns_result(self, breaker):
        payload = {"data": {"objectId": "0x5", "type": "package"}}
        received = []

        async with rpc_server(json_handler({"jsonrpc": "2.0", "id": 1, "result": payload}, received=received)) as url:
            async with SuiRpcClient(endpoint=url, breaker=breaker) as client:
                result = await client.get_object("0x5")

        assert result.ok is True
        assert result.payload == payload
        assert received[0]["jsonrpc"] == "2.0"
        assert received[0]["method"] == GET_OBJECT_METHOD
        assert received[0]["params"][0] == "0x5"
        assert received[0]["params"][1] == {
            "showType": True,
            "showOwner": True,
            "showContent": True,
            "showDisplay": True,
        }

    @pytest.mark.asyncio
    async def test_request_ids_increase(self):
        received = []

        async with rpc_server(json_handler({"jsonrpc": "2.0", "id": 0, "result": None}, received=received)) as url:
            async with SuiRpcClient(endpoint=url) as client:
                first = await client.call("sui_getObject", ["0x5"])
                second = await client.call("sui_getObject", ["0x6"])
            async with SuiRpcClient(endpoint=url) as other:
                third = await other.call("sui_getObject", ["0x7"])

        ids = [body["id"] for body in received]
        assert ids == sorted(ids)
        assert len(set(ids)) == 3
        assert [first.request_id, second.request_id, third.request_id] == ids

    @pytest.mark.asyncio
    async def test_stats(self):
        async with rpc_server(json_handler({"jsonrpc": "2.0", "id": 1, "result": {}})) as url:
            async with SuiRpcClient(endpoint=url) as client:
                await client.call("sui_getObject", ["0x5"])
                stats = client.get_stats()

        assert stats["requests"] == 1
        assert stats["successes"] == 1
        assert stats["last_latency_ms"] is not None


# ============================================================
# FAILURE MAPPING TESTS
# ============================================================

class TestFailureMapping:
    """Every upstream failure becomes a typed RpcResult."""

    @pytest.mark.asyncio
    async def test_rate_limited_trips_breaker(self, breaker):
        async with rpc_server(json_handler({"error": "slow down"}, status=429)) as url:
            async with SuiRpcClient(endpoint=url, breaker=breaker) as client:
                result = await client.get_object("0x5")

        assert result.ok is False
        assert result.kind is RpcFailureKind.RATE_LIMITED
        assert result.status == 429
        assert breaker.is_open() is True

    @pytest.mark.asyncio
    async def test_server_error_is_transport(self, breaker):
        async with rpc_server(json_handler({}, status=503)) as url:
            async with SuiRpcClient(endpoint=url, breaker=breaker) as client:
                result = await client.get_object("0x5")

        assert result.kind is RpcFailureKind.TRANSPORT_ERROR
        assert result.status == 503
        assert "503" in result.message
        assert breaker.is_open() is False

    @pytest.mark.asyncio
    async def test_error_envelope_is_verbatim(self, breaker):
        envelope = {
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32602, "message": "Invalid params: object id 0xZZ"},
        }
        async with rpc_server(json_handler(envelope)) as url:
            async with SuiRpcClient(endpoint=url, breaker=breaker) as client:
                result = await client.get_object("0xzz")

        assert result.kind is RpcFailureKind.PROTOCOL_ERROR
        assert result.code == -32602
        assert result.message == "Invalid params: object id 0xZZ"
        assert breaker.is_open() is False

    @pytest.mark.asyncio
    async def test_timeout(self, breaker):
        async def slow(request):
            await asyncio.sleep(0.5)
            return web.json_response({"jsonrpc": "2.0", "id": 1, "result": {}})

        async with rpc_server(slow) as url:
            async with SuiRpcClient(endpoint=url, timeout=0.05, breaker=breaker) as client:
                result = await client.get_object("0x5")
                stats = client.get_stats()

        assert result.kind is RpcFailureKind.TIMEOUT
        assert stats["failures"] == {"TIMEOUT": 1}
        assert breaker.is_open() is False

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        async def garbage(request):
            return web.Response(text="<html>oops</html>", content_type="text/html")

        async with rpc_server(garbage) as url:
            async with SuiRpcClient(endpoint=url) as client:
                result = await client.get_object("0x5")

        assert result.kind is RpcFailureKind.TRANSPORT_ERROR
        assert result.message == "Invalid JSON response"

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        async with rpc_server(json_handler({})) as url:
            pass

        async with SuiRpcClient(endpoint=url, timeout=1.0) as client:
            result = await client.get_object("0x5")

        assert result.ok is False
        assert result.kind in (RpcFailureKind.TRANSPORT_ERROR, RpcFailureKind.TIMEOUT)
