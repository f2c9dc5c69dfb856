"""
Tests for the aiohttp-backed transport.

Runs against a local aiohttp test server; nothing leaves the machine.
"""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from mediahub.core.exceptions import UpstreamError
from mediahub.core.transport import HttpTransport, TransportResponse


async def _json_handler(request):
    return web.json_response({"ok": True, "ua": request.headers.get("User-Agent")})


async def _echo_handler(request):
    return web.json_response({"received": await request.json(), "q": request.query.get("q")})


async def _missing_handler(request):
    return web.Response(status=404, text="not here")


async def _html_handler(request):
    return web.Response(text="<html>not json</html>", content_type="text/html")


async def _slow_handler(request):
    await asyncio.sleep(2)
    return web.Response(text="late")


@pytest.fixture
async def server():
    app = web.Application()
    app.router.add_get("/json", _json_handler)
    app.router.add_post("/echo", _echo_handler)
    app.router.add_get("/missing", _missing_handler)
    app.router.add_get("/html", _html_handler)
    app.router.add_get("/slow", _slow_handler)

    test_server = test_utils.TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


@pytest.fixture
async def transport(server):
    client = HttpTransport(base_url=str(server.make_url("/")), timeout=5, user_agent="mediahub-tests")
    yield client
    await client.close()


class TestHttpTransport:
    """Tests for HttpTransport request handling."""

    async def test_get_json_with_relative_url(self, transport):
        data = await transport.get_json("/json")
        assert data == {"ok": True, "ua": "mediahub-tests"}

    async def test_post_json_body_and_params(self, transport):
        data = await transport.post_json("/echo", {"query": "overlord"}, params={"q": "x"})
        assert data == {"received": {"query": "overlord"}, "q": "x"}

    async def test_non_success_status(self, transport, server):
        with pytest.raises(UpstreamError) as exc_info:
            await transport.get_text("/missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == str(server.make_url("/missing"))
        assert exc_info.value.details == "not here"

    async def test_malformed_json(self, transport):
        with pytest.raises(UpstreamError) as exc_info:
            await transport.get_json("/html")

        assert "Malformed JSON" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ValueError)

    async def test_timeout(self, server):
        client = HttpTransport(base_url=str(server.make_url("/")), timeout=0.2)
        try:
            with pytest.raises(UpstreamError) as exc_info:
                await client.get_text("/slow")
            assert "timed out" in str(exc_info.value)
        finally:
            await client.close()

    async def test_connection_refused(self, unused_tcp_port):
        client = HttpTransport(timeout=5)
        try:
            with pytest.raises(UpstreamError) as exc_info:
                await client.get_text(f"http://127.0.0.1:{unused_tcp_port}/")
            assert exc_info.value.cause is not None
        finally:
            await client.close()

    async def test_one_session_under_concurrency(self, transport):
        await asyncio.gather(*(transport.get_json("/json") for _ in range(10)))
        first = transport._session

        await transport.get_json("/json")
        assert transport._session is first

    async def test_close_and_reopen(self, transport):
        await transport.get_json("/json")
        assert transport.is_open

        await transport.close()
        assert not transport.is_open

        # A closed transport lazily opens a fresh session
        assert (await transport.get_json("/json"))["ok"] is True


class TestTransportResponse:
    """Tests for the fully read response record."""

    def test_ok_range(self):
        assert TransportResponse(status=204, url="u").ok
        assert not TransportResponse(status=301, url="u").ok

    def test_json(self):
        assert TransportResponse(status=200, url="u", text='{"a": 1}').json() == {"a": 1}
