"""
errors.py — Failure taxonomy for the configuration fetch and storage paths.

These are raised by the low-level primitives (fetcher, store) and absorbed by
the engine, the store's ``load``/``save`` wrappers, the scheduler and the
capability queries.  None of them reach a caller of the public API.
"""

from __future__ import annotations

from typing import Optional


class RegistryError(Exception):
    """Base class for every failure the registry knows how to absorb."""


class TransportError(RegistryError):
    """Network unreachable, DNS failure, connection reset, ..."""


class FetchTimeoutError(RegistryError):
    """The remote fetch exceeded its time bound and was cancelled."""

    def __init__(self, timeout_ms: int) -> None:
        super().__init__(f"fetch timed out after {timeout_ms} ms")
        self.timeout_ms = timeout_ms


class BadStatusError(RegistryError):
    """The remote document answered with a non-2xx status."""

    def __init__(self, status_code: int, url: Optional[str] = None) -> None:
        super().__init__(f"failed to fetch config: {status_code}")
        self.status_code = status_code
        self.url = url


class PayloadParseError(RegistryError):
    """Malformed JSON or a document that does not have the expected shape."""


class StorageError(RegistryError):
    """The persistent store could not be read or written."""


__all__ = [
    "BadStatusError",
    "FetchTimeoutError",
    "PayloadParseError",
    "RegistryError",
    "StorageError",
    "TransportError",
]
