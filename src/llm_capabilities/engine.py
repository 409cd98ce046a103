"""
engine.py — Tiered cache and fallback resolution for the models document.

Decision flow for every ``resolve``:

  1.  Fresh memory entry and no forced refresh  → serve it, no I/O
  2.  Otherwise fetch remotely (bounded by the fetch timeout)
        a. success → replace memory entry, write back to the store, serve it
        b. failure → serve the memory entry even if stale
        c. no memory entry at all → serve the bundled default dataset
  3.  Nothing is ever raised to the caller

At construction the persisted entry is adopted when still fresh and purged
when expired; a purged entry forces the first ``resolve`` to fetch.

Overlapping resolves that reach step 2 share one in-flight fetch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

from .config import CONFIG_TTL_MS, FETCH_TIMEOUT_MS
from .defaults import default_config
from .errors import RegistryError
from .models import CacheEntry, ModelsConfig

logger = logging.getLogger(__name__)

# Where the last resolved value came from
SOURCE_MEMORY = "memory"
SOURCE_REMOTE = "remote"
SOURCE_STALE = "stale"
SOURCE_DEFAULT = "default"


def now_ms() -> int:
    return int(time.time() * 1000)


class ConfigCacheEngine:
    """
    Owns the single in-memory CacheEntry and decides which tier answers.

    Usage::

        engine = ConfigCacheEngine(RemoteFetcher(), open_disk_store(path))
        config = await engine.resolve()          # cached when fresh
        config = await engine.refresh()          # always tries the network
    """

    def __init__(
        self,
        fetcher: Any,
        store: Any,
        *,
        ttl_ms: int = CONFIG_TTL_MS,
        fetch_timeout_ms: int = FETCH_TIMEOUT_MS,
        clock: Callable[[], int] = now_ms,
        default_factory: Callable[[], ModelsConfig] = default_config,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._ttl_ms = ttl_ms
        self._fetch_timeout_ms = fetch_timeout_ms
        self._clock = clock
        self._default_factory = default_factory

        self._entry: Optional[CacheEntry] = None
        self._inflight: Optional[asyncio.Task] = None
        self.last_source: Optional[str] = None

        # Stats
        self._memory_hits = 0
        self._fetches = 0
        self._fetch_failures = 0

        self._load_persisted()

    # ── Startup ────────────────────────────────────────────────────────────────

    def _load_persisted(self) -> None:
        loaded = self._store.load()
        if loaded is None:
            return
        config, timestamp = loaded
        age = self._clock() - timestamp
        if age < self._ttl_ms:
            self._entry = CacheEntry(config=config, timestamp=timestamp)
            logger.info("Loaded persisted models config v%s (age %d ms)", config.version, age)
        else:
            logger.info("Persisted models config expired (age %d ms), purging", age)
            self._store.clear()

    # ── Public interface ───────────────────────────────────────────────────────

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def is_fresh(self) -> bool:
        entry = self._entry
        return entry is not None and entry.is_fresh(self._clock(), self._ttl_ms)

    async def resolve(self, force_refresh: bool = False) -> ModelsConfig:
        entry = self._entry
        if not force_refresh and entry is not None and entry.is_fresh(self._clock(), self._ttl_ms):
            self._memory_hits += 1
            self.last_source = SOURCE_MEMORY
            logger.debug("Serving models config from memory cache")
            return entry.config

        fetched = await self._fetch_shared()
        if fetched is not None:
            self.last_source = SOURCE_REMOTE
            return fetched

        entry = self._entry
        if entry is not None:
            if entry.is_fresh(self._clock(), self._ttl_ms):
                self.last_source = SOURCE_MEMORY
            else:
                self.last_source = SOURCE_STALE
                logger.warning("Serving stale models config v%s", entry.config.version)
            return entry.config

        self.last_source = SOURCE_DEFAULT
        logger.warning("Serving bundled default models config")
        return self._default_factory()

    async def refresh(self) -> ModelsConfig:
        return await self.resolve(force_refresh=True)

    def stats(self) -> Dict[str, Any]:
        entry = self._entry
        now = self._clock()
        return {
            "has_entry": entry is not None,
            "fresh": entry is not None and entry.is_fresh(now, self._ttl_ms),
            "age_ms": entry.age_ms(now) if entry is not None else None,
            "version": entry.config.version if entry is not None else None,
            "last_source": self.last_source,
            "memory_hits": self._memory_hits,
            "fetches": self._fetches,
            "fetch_failures": self._fetch_failures,
            "ttl_ms": self._ttl_ms,
        }

    # ── Internal ───────────────────────────────────────────────────────────────

    async def _fetch_shared(self) -> Optional[ModelsConfig]:
        """Join the in-flight fetch or start one. A cancelled caller leaves it running."""
        task = self._inflight
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store())
            self._inflight = task
            task.add_done_callback(self._forget_inflight)
        return await asyncio.shield(task)

    def _forget_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _fetch_and_store(self) -> Optional[ModelsConfig]:
        started = self._clock()
        self._fetches += 1
        logger.info("Loading models config from remote …")
        try:
            config = await self._fetcher.fetch(self._fetch_timeout_ms)
        except RegistryError as exc:
            self._fetch_failures += 1
            logger.warning("Remote models config load failed: %s", exc)
            return None
        except Exception:  # pylint: disable=broad-except
            self._fetch_failures += 1
            logger.exception("Unexpected error while loading remote models config")
            return None

        self._entry = CacheEntry(config=config, timestamp=started)
        self._store.save(config, started)
        logger.info(
            "Remote models config v%s loaded and cached (%d providers)",
            config.version,
            len(config.providers),
        )
        return config


__all__ = ["ConfigCacheEngine", "now_ms"]
