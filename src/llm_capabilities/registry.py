"""
registry.py — Public entry point and composition root.

Combines:
  • ConfigCacheEngine     — memory / persisted / remote / default tiers
  • CapabilityQueries     — yes/no capability answers with heuristic fallback
  • AutoRefreshScheduler  — periodic background refresh

Every async operation resolves to best-effort data; none of them raise.
Build one registry per application with ``build_registry`` and pass it to
the code that needs it.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .capabilities import CapabilityQueries
from .config import Settings, settings
from .engine import ConfigCacheEngine
from .fetcher import RemoteFetcher
from .models import ModelCapabilities, ModelConfig, ModelsConfig, ProviderConfig
from .scheduler import AutoRefreshScheduler
from .store import ConfigStore, open_disk_store

logger = logging.getLogger(__name__)


class ModelRegistry:
    """
    Capability registry for AI model providers.

    Usage::

        async with build_registry() as registry:
            models = await registry.get_provider_models("google")
            if await registry.supports_streaming("google", "gemini-2.5-pro"):
                ...

    The registry takes ownership of ``store`` and closes it on ``destroy``.
    """

    def __init__(
        self,
        engine: ConfigCacheEngine,
        *,
        store: Optional[ConfigStore] = None,
        auto_refresh: bool = True,
        refresh_interval_ms: Optional[int] = None,
    ) -> None:
        self.engine = engine
        self.queries = CapabilityQueries(engine)
        self.scheduler = AutoRefreshScheduler(
            engine,
            interval_ms=engine.ttl_ms if refresh_interval_ms is None else refresh_interval_ms,
        )
        self._store = store
        self._auto_refresh = auto_refresh
        self._destroyed = False

    # ── Lifecycle ───────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Start background refresh from the running event loop.

        Any registry operation also starts it on first use, so calling this
        explicitly is only needed to begin refreshing before the first query.
        """
        self._ensure_refreshing()

    def _ensure_refreshing(self) -> None:
        if self._auto_refresh and not self._destroyed and not self.scheduler.running:
            self.scheduler.start()

    def destroy(self) -> None:
        """Stop the scheduler and release the store. Idempotent."""
        if self._destroyed:
            return
        self._destroyed = True
        self.scheduler.stop()
        if self._store is not None:
            self._store.close()
        logger.info("Model registry destroyed")

    async def aclose(self) -> None:
        await self.scheduler.aclose()
        self.destroy()

    async def __aenter__(self) -> "ModelRegistry":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ── Configuration access ────────────────────────────────────────────────

    async def load_config(self, force_refresh: bool = False) -> ModelsConfig:
        self._ensure_refreshing()
        return await self.engine.resolve(force_refresh=force_refresh)

    async def refresh_config(self) -> ModelsConfig:
        logger.info("Manual models config refresh")
        self._ensure_refreshing()
        return await self.engine.refresh()

    async def get_providers(self) -> Mapping[str, ProviderConfig]:
        config = await self.load_config()
        return config.providers

    async def get_provider_models(self, provider_id: str) -> Mapping[str, ModelConfig]:
        config = await self.load_config()
        provider = config.provider(provider_id)
        return provider.models if provider is not None else MappingProxyType({})

    async def get_model_config(self, provider_id: str, model_id: str) -> Optional[ModelConfig]:
        models = await self.get_provider_models(provider_id)
        return models.get(model_id)

    # ── Capability queries ──────────────────────────────────────────────────

    async def is_responses_api(self, model_id: str, provider: str = "openai") -> bool:
        self._ensure_refreshing()
        return await self.queries.is_responses_api(model_id, provider)

    async def is_chat_completions_api(self, model_id: str, provider: str = "openai") -> bool:
        self._ensure_refreshing()
        return await self.queries.is_chat_completions_api(model_id, provider)

    async def is_image_model(self, model_id: str, provider: str = "google") -> bool:
        self._ensure_refreshing()
        return await self.queries.is_image_model(model_id, provider)

    async def supports_streaming(self, provider: str, model_id: str) -> bool:
        self._ensure_refreshing()
        return await self.queries.supports_streaming(provider, model_id)

    async def is_thinking_model(self, provider: str, model_id: str) -> bool:
        self._ensure_refreshing()
        return await self.queries.is_thinking_model(provider, model_id)

    async def describe_model(self, provider: str, model_id: str) -> ModelCapabilities:
        self._ensure_refreshing()
        return await self.queries.describe(provider, model_id)

    # ── Stats ───────────────────────────────────────────────────────────────

    def stats(self) -> Dict[str, Any]:
        return {
            **self.engine.stats(),
            "auto_refresh": self.scheduler.running,
            "destroyed": self._destroyed,
        }


def build_registry(
    cfg: Optional[Settings] = None,
    *,
    fetcher: Any = None,
    store: Optional[ConfigStore] = None,
) -> ModelRegistry:
    """Wire the default collaborators from settings; any of them can be overridden."""
    cfg = cfg or settings
    if store is None:
        store = open_disk_store(cfg.cache_dir)
    if fetcher is None:
        fetcher = RemoteFetcher(cfg.config_url)
    engine = ConfigCacheEngine(
        fetcher,
        store,
        ttl_ms=cfg.ttl_ms,
        fetch_timeout_ms=cfg.fetch_timeout_ms,
    )
    return ModelRegistry(
        engine,
        store=store,
        auto_refresh=cfg.auto_refresh,
        refresh_interval_ms=cfg.refresh_interval_ms,
    )


__all__ = ["ModelRegistry", "build_registry"]
