"""Remote fetcher against httpx.MockTransport."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from llm_capabilities.errors import (
    BadStatusError,
    FetchTimeoutError,
    PayloadParseError,
    TransportError,
)
from llm_capabilities.fetcher import RemoteFetcher

URL = "https://config.example.test/models-config.json"


def _fetcher(handler) -> RemoteFetcher:
    return RemoteFetcher(URL, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_success_sends_no_cache_get(remote_document):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["cache_control"] = request.headers.get("cache-control")
        return httpx.Response(200, json=remote_document("3.1.0"))

    config = await _fetcher(handler).fetch(5_000)

    assert config.version == "3.1.0"
    assert "openai" in config.providers
    assert seen == {"method": "GET", "url": URL, "cache_control": "no-cache"}


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [301, 404, 500, 503])
async def test_non_success_status(status):
    fetcher = _fetcher(lambda request: httpx.Response(status, text="nope"))
    with pytest.raises(BadStatusError) as info:
        await fetcher.fetch(5_000)
    assert info.value.status_code == status
    assert info.value.url == URL


@pytest.mark.asyncio
async def test_malformed_body():
    fetcher = _fetcher(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(PayloadParseError):
        await fetcher.fetch(5_000)


@pytest.mark.asyncio
async def test_connection_failure_is_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("name resolution failed", request=request)

    with pytest.raises(TransportError):
        await _fetcher(handler).fetch(5_000)


@pytest.mark.asyncio
async def test_httpx_timeout_is_timeout_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(FetchTimeoutError):
        await _fetcher(handler).fetch(5_000)


@pytest.mark.asyncio
async def test_slow_server_is_cancelled_after_timeout(remote_document):
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json=remote_document())

    with pytest.raises(FetchTimeoutError) as info:
        await _fetcher(handler).fetch(50)
    assert info.value.timeout_ms == 50


def test_default_url_comes_from_settings(monkeypatch):
    from llm_capabilities.config import settings

    monkeypatch.setattr(settings, "config_url", "https://override.example.test/doc.json")
    assert RemoteFetcher().url == "https://override.example.test/doc.json"
