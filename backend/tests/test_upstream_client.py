"""
Tests for the provider client against a local aiohttp test server
"""
import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from earnings_insight.errors import ParseError, UpstreamUnavailable
from earnings_insight.services.upstream_client import FetchStatus, UpstreamClient


def build_provider() -> web.Application:
    async def stockprice(request):
        if request.headers.get("X-Api-Key") != "secret":
            return web.json_response({"error": "bad key"}, status=401)
        return web.json_response({"ticker": request.query["ticker"], "price": 189.5})

    async def missing(request):
        return web.json_response({"error": "not found"}, status=404)

    async def broken(request):
        return web.json_response({"error": "boom"}, status=502)

    async def garbage(request):
        return web.Response(text="<html>not json</html>", content_type="text/html")

    async def slow(request):
        await asyncio.sleep(1)
        return web.json_response({})

    app = web.Application()
    app.router.add_get("/v1/stockprice", stockprice)
    app.router.add_get("/v1/missing", missing)
    app.router.add_get("/v1/broken", broken)
    app.router.add_get("/v1/garbage", garbage)
    app.router.add_get("/v1/slow", slow)
    return app


def client_for(server: test_utils.TestServer, api_key: str = "secret", timeout: float = 2) -> UpstreamClient:
    return UpstreamClient(api_key, base_url=str(server.make_url("/")), timeout=timeout)


@pytest.mark.asyncio
async def test_success_returns_payload_and_sends_key():
    async with test_utils.TestServer(build_provider()) as server:
        result = await client_for(server).fetch("/v1/stockprice", {"ticker": "AAPL"})

    assert result.ok
    assert result.status is FetchStatus.OK
    assert result.data == {"ticker": "AAPL", "price": 189.5}
    assert result.unwrap() == result.data


@pytest.mark.asyncio
async def test_wrong_key_is_provider_error():
    async with test_utils.TestServer(build_provider()) as server:
        result = await client_for(server, api_key="wrong").fetch("/v1/stockprice", {"ticker": "AAPL"})

    assert result.status is FetchStatus.PROVIDER_ERROR
    assert result.status_code == 401


@pytest.mark.asyncio
async def test_404_is_not_found():
    async with test_utils.TestServer(build_provider()) as server:
        result = await client_for(server).fetch("/v1/missing")

    assert result.status is FetchStatus.NOT_FOUND
    assert result.status_code == 404
    with pytest.raises(UpstreamUnavailable):
        result.unwrap()


@pytest.mark.asyncio
async def test_other_status_is_provider_error():
    async with test_utils.TestServer(build_provider()) as server:
        result = await client_for(server).fetch("/v1/broken")

    assert result.status is FetchStatus.PROVIDER_ERROR
    assert result.status_code == 502
    assert not result.ok


@pytest.mark.asyncio
async def test_malformed_json_is_parse_error():
    async with test_utils.TestServer(build_provider()) as server:
        result = await client_for(server).fetch("/v1/garbage")

    assert result.status is FetchStatus.PARSE_ERROR
    with pytest.raises(ParseError):
        result.unwrap()


@pytest.mark.asyncio
async def test_slow_response_times_out():
    async with test_utils.TestServer(build_provider()) as server:
        result = await client_for(server, timeout=0.2).fetch("/v1/slow")

    assert result.status is FetchStatus.TIMEOUT


@pytest.mark.asyncio
async def test_unreachable_host_is_network_error():
    client = UpstreamClient("secret", base_url="http://127.0.0.1:1", timeout=2)
    result = await client.fetch("/v1/stockprice", {"ticker": "AAPL"})

    assert result.status is FetchStatus.NETWORK_ERROR
