from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import pytest
from aiohttp import web
from aiohttp import test_utils

from handlers.async_comm import AsyncCommError, AsyncCommInvalidContentTypeError, AsyncCommTimeoutError, AsyncHttp

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


async def echo(request: web.Request) -> web.Response:
    body = await request.json()
    return web.json_response({"body": body, "key": request.query.get("key")})


async def limited(_request: web.Request) -> web.Response:
    return web.json_response({"error": "slow down"}, status=429)


async def plain(_request: web.Request) -> web.Response:
    return web.Response(text="hello")


async def binary(_request: web.Request) -> web.Response:
    return web.Response(body=b"\x00\x01", content_type="application/octet-stream")


async def empty(_request: web.Request) -> web.Response:
    return web.Response(status=204)


async def slow(_request: web.Request) -> web.Response:
    await asyncio.sleep(0.5)
    return web.json_response({})


@pytest.fixture
async def server() -> AsyncGenerator[test_utils.TestServer]:
    app = web.Application()
    app.router.add_post("/echo", echo)
    app.router.add_post("/limited", limited)
    app.router.add_get("/plain", plain)
    app.router.add_get("/binary", binary)
    app.router.add_get("/empty", empty)
    app.router.add_get("/slow", slow)
    test_server = test_utils.TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


@pytest.fixture
async def http() -> AsyncGenerator[AsyncHttp]:
    client = AsyncHttp()
    yield client
    await client.close()


@pytest.mark.asyncio
async def test_session_is_created_lazily(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG)

    http = AsyncHttp()
    assert http.is_open is False
    assert not any("session initialized" in rec.message for rec in caplog.records)

    async with http:
        assert http.is_open is True
    assert http.is_open is False


@pytest.mark.asyncio
async def test_reenter_after_close_creates_new_session(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG)
    http = AsyncHttp()
    async with http:
        pass

    caplog.clear()
    async with http:
        pass

    assert any("AsyncHttp session initialized" in rec.message for rec in caplog.records)


def test_add_handler_replaces_existing(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    http = AsyncHttp()

    http.add_handler("text/plain", lambda raw: raw.upper())

    assert http.content_handlers["text/plain"](b"abc") == b"ABC"
    assert any("already exists" in rec.message for rec in caplog.records)


@pytest.mark.asyncio
async def test_post_sends_json_and_params(server: test_utils.TestServer, http: AsyncHttp) -> None:
    result = await http.post(url=str(server.make_url("/echo")), params={"key": "k0"}, data={"q": "привіт"})

    assert result == {"body": {"q": "привіт"}, "key": "k0"}


@pytest.mark.asyncio
async def test_get_decodes_text(server: test_utils.TestServer, http: AsyncHttp) -> None:
    assert await http.get(url=str(server.make_url("/plain"))) == "hello"


@pytest.mark.asyncio
async def test_empty_body_returns_none(server: test_utils.TestServer, http: AsyncHttp) -> None:
    assert await http.get(url=str(server.make_url("/empty"))) is None


@pytest.mark.asyncio
async def test_unknown_content_type(server: test_utils.TestServer, http: AsyncHttp) -> None:
    with pytest.raises(AsyncCommInvalidContentTypeError):
        await http.get(url=str(server.make_url("/binary")))


@pytest.mark.asyncio
async def test_error_status_is_kept(server: test_utils.TestServer, http: AsyncHttp) -> None:
    with pytest.raises(AsyncCommError) as excinfo:
        await http.post(url=str(server.make_url("/limited")), data={})

    assert excinfo.value.status == 429
    assert "status='429'" in str(excinfo.value)


@pytest.mark.asyncio
async def test_timeout(server: test_utils.TestServer, http: AsyncHttp) -> None:
    with pytest.raises(AsyncCommTimeoutError):
        await http.get(url=str(server.make_url("/slow")), total_timeout=0.1)


@pytest.mark.asyncio
async def test_connection_refused(http: AsyncHttp) -> None:
    with pytest.raises(AsyncCommError) as excinfo:
        await http.get(url=f"http://127.0.0.1:{test_utils.unused_port()}/")

    assert excinfo.value.status is None
