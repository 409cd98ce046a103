"""
fetcher.py — Bounded-time download of the remote models document.

Every failure is reported as one of the typed errors in ``errors.py`` so the
engine can log what went wrong before falling back:

  FetchTimeoutError   request cancelled after ``timeout_ms``
  TransportError      DNS / connect / read failures
  BadStatusError      any non-2xx response
  PayloadParseError   malformed JSON or unexpected shape

Dependencies: httpx (async HTTP)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from .config import settings
from .errors import BadStatusError, FetchTimeoutError, TransportError
from .models import ModelsConfig, parse_models_config

logger = logging.getLogger(__name__)

_NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Accept": "application/json",
}


class RemoteFetcher:
    """
    Downloads the configuration document from a fixed URL.

    ``transport`` is forwarded to ``httpx.AsyncClient``; tests pass an
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url or settings.config_url
        self._transport = transport

    async def fetch(self, timeout_ms: int) -> ModelsConfig:
        timeout_s = timeout_ms / 1000
        try:
            response = await asyncio.wait_for(self._get(timeout_s), timeout=timeout_s)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise FetchTimeoutError(timeout_ms) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise BadStatusError(response.status_code, self.url)

        config = parse_models_config(response.content)
        logger.debug(
            "Fetched models config v%s (%d providers) from %s",
            config.version,
            len(config.providers),
            self.url,
        )
        return config

    async def _get(self, timeout_s: float) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=timeout_s, transport=self._transport, follow_redirects=True
        ) as client:
            return await client.get(self.url, headers=_NO_CACHE_HEADERS)


__all__ = ["RemoteFetcher"]
