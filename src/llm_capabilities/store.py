"""
store.py — Persistent copy of the last successfully fetched configuration.

Two string values are kept in a durable key/value substrate:

  models_config_cache       JSON-serialised ModelsConfig
  models_config_cache_time  decimal epoch-millisecond timestamp

Backend: diskcache.Cache (persistent across restarts).  Any mapping that
offers ``get`` / ``__setitem__`` / ``pop`` works, which is how tests use a
plain dict.

``read`` raises; ``load`` / ``save`` / ``clear`` never do.  A broken store
must not affect the in-memory result of whatever triggered the access.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Tuple

import diskcache

from .config import CACHE_KEY, CACHE_TIME_KEY
from .errors import PayloadParseError, RegistryError, StorageError
from .models import ModelsConfig, parse_models_config

logger = logging.getLogger(__name__)


class ConfigStore:
    """
    Thin adapter over a durable string-keyed store.

    Usage::

        store = open_disk_store("/var/cache/llm_capabilities")
        store.save(config, timestamp_ms)
        loaded = store.load()          # (config, timestamp_ms) or None
    """

    def __init__(self, backend: Any) -> None:
        self._backend = backend
        self._closed = False

    # ── Read ───────────────────────────────────────────────────────────────────

    def read(self) -> Optional[Tuple[ModelsConfig, int]]:
        """Return the persisted entry, None when absent.

        Raises StorageError when the substrate fails and PayloadParseError
        when the stored values are not a valid entry.
        """
        try:
            raw = self._backend.get(CACHE_KEY)
            raw_time = self._backend.get(CACHE_TIME_KEY)
        except Exception as exc:
            raise StorageError(f"cannot read persisted config: {exc}") from exc

        if raw is None or raw_time is None:
            return None
        try:
            timestamp = int(raw_time)
        except (TypeError, ValueError) as exc:
            raise PayloadParseError(f"bad persisted timestamp {raw_time!r}") from exc
        return parse_models_config(raw), timestamp

    def load(self) -> Optional[Tuple[ModelsConfig, int]]:
        """Like ``read`` but any failure is logged and treated as absent."""
        try:
            return self.read()
        except RegistryError as exc:
            logger.warning("Ignoring persisted models config: %s", exc)
            return None

    # ── Write ──────────────────────────────────────────────────────────────────

    def save(self, config: ModelsConfig, timestamp: int) -> bool:
        """Best-effort write of both keys. Returns False when it did not stick.

        The pair is replaced as a unit: inside ``transact()`` when the backend
        offers one (diskcache), otherwise by restoring the previous values when
        the second write fails.
        """
        payload = config.model_dump_json()
        stamp = str(int(timestamp))
        transact = getattr(self._backend, "transact", None)
        try:
            if callable(transact):
                with transact():
                    self._write_pair(payload, stamp)
            else:
                self._write_pair_or_restore(payload, stamp)
        except Exception as exc:
            logger.warning("Failed to persist models config: %s", exc)
            return False
        logger.debug("Persisted models config v%s @ %d", config.version, timestamp)
        return True

    def _write_pair(self, payload: str, stamp: str) -> None:
        self._backend[CACHE_KEY] = payload
        self._backend[CACHE_TIME_KEY] = stamp

    def _write_pair_or_restore(self, payload: str, stamp: str) -> None:
        previous = {key: self._backend.get(key) for key in (CACHE_KEY, CACHE_TIME_KEY)}
        written = []
        try:
            for key, value in ((CACHE_KEY, payload), (CACHE_TIME_KEY, stamp)):
                self._backend[key] = value
                written.append(key)
        except Exception:
            self._restore({key: previous[key] for key in written})
            raise

    def _restore(self, previous: Dict[str, Any]) -> None:
        try:
            for key, value in previous.items():
                if value is None:
                    self._backend.pop(key, None)
                else:
                    self._backend[key] = value
        except Exception as exc:
            # a half-written pair must not survive; drop both keys instead
            logger.warning("Could not restore persisted models config: %s", exc)
            self.clear()

    def clear(self) -> None:
        """Remove both keys."""
        try:
            self._backend.pop(CACHE_KEY, None)
            self._backend.pop(CACHE_TIME_KEY, None)
        except Exception as exc:
            logger.warning("Failed to purge persisted models config: %s", exc)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        closer = getattr(self._backend, "close", None)
        if callable(closer):
            try:
                closer()
            except Exception as exc:
                logger.debug("Error closing config store backend: %s", exc)


def open_disk_store(directory: str) -> ConfigStore:
    """Build a ConfigStore backed by a diskcache directory."""
    os.makedirs(directory, exist_ok=True)
    backend = diskcache.Cache(directory)
    logger.info("Models config store: diskcache at %s", directory)
    return ConfigStore(backend)


__all__ = ["ConfigStore", "open_disk_store"]
