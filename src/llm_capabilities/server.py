"""
server.py — FastAPI surface over the model capability registry.

  GET  /health                                              — cache state check
  GET  /v1/config                                           — full models document
  GET  /v1/providers                                        — provider mapping
  GET  /v1/providers/{provider}/models                      — models of a provider
  GET  /v1/providers/{provider}/models/{model_id}           — one model (404 if unknown)
  GET  /v1/providers/{provider}/models/{model_id}/capabilities
                                                            — aggregated yes/no answers
  POST /admin/refresh                                       — force a remote refresh

The registry is built in the lifespan handler (the composition root) and kept
on ``app.state``; handlers receive it through a dependency.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Callable, Optional

from fastapi import Depends, FastAPI, HTTPException, Request

from .config import settings
from .registry import ModelRegistry, build_registry

logger = logging.getLogger(__name__)


def get_registry(request: Request) -> ModelRegistry:
    """Return the registry owned by the running application.

    Raises RuntimeError if the lifespan handler has not run.
    """
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise RuntimeError("Registry not initialised; lifespan startup has not run")
    return registry


def create_app(registry_factory: Optional[Callable[[], ModelRegistry]] = None) -> FastAPI:
    """Build the FastAPI app; ``registry_factory`` defaults to ``build_registry``."""
    factory = registry_factory or build_registry

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        registry = factory()
        await registry.start()
        app.state.registry = registry
        logger.info("Model capability registry started")
        try:
            yield
        finally:
            try:
                await registry.aclose()
                logger.info("Model capability registry stopped")
            except Exception:
                logger.exception("Error while stopping the model registry during shutdown")

    app = FastAPI(
        title="LLM Capability Registry",
        version="1.0.0",
        description=(
            "Cached provider/model capability metadata with graceful fallback"
            " to bundled defaults when the remote document is unreachable."
        ),
        lifespan=lifespan,
    )

    # ── Health ────────────────────────────────────────────────────────────────

    @app.get("/health", tags=["Observability"])
    async def health(registry: ModelRegistry = Depends(get_registry)) -> dict[str, Any]:
        stats = registry.stats()
        return {
            "status": "healthy" if stats["fresh"] else "degraded",
            "cache": stats,
        }

    # ── Configuration ─────────────────────────────────────────────────────────

    @app.get("/v1/config", tags=["Configuration"])
    async def get_config(registry: ModelRegistry = Depends(get_registry)) -> dict[str, Any]:
        config = await registry.load_config()
        return config.model_dump(mode="json")

    @app.get("/v1/providers", tags=["Configuration"])
    async def list_providers(registry: ModelRegistry = Depends(get_registry)) -> dict[str, Any]:
        providers = await registry.get_providers()
        return {pid: p.model_dump(mode="json") for pid, p in providers.items()}

    @app.get("/v1/providers/{provider}/models", tags=["Configuration"])
    async def list_provider_models(
        provider: str, registry: ModelRegistry = Depends(get_registry)
    ) -> dict[str, Any]:
        models = await registry.get_provider_models(provider)
        return {
            "provider": provider,
            "count": len(models),
            "models": {mid: m.model_dump(mode="json") for mid, m in models.items()},
        }

    @app.get("/v1/providers/{provider}/models/{model_id}", tags=["Configuration"])
    async def get_model(
        provider: str, model_id: str, registry: ModelRegistry = Depends(get_registry)
    ) -> dict[str, Any]:
        model = await registry.get_model_config(provider, model_id)
        if model is None:
            raise HTTPException(
                status_code=404, detail=f"Model '{provider}/{model_id}' not found"
            )
        return model.model_dump(mode="json")

    # ── Capabilities ──────────────────────────────────────────────────────────

    @app.get("/v1/providers/{provider}/models/{model_id}/capabilities", tags=["Capabilities"])
    async def get_capabilities(
        provider: str, model_id: str, registry: ModelRegistry = Depends(get_registry)
    ) -> dict[str, Any]:
        caps = await registry.describe_model(provider, model_id)
        return caps.model_dump()

    # ── Admin ─────────────────────────────────────────────────────────────────

    @app.post("/admin/refresh", tags=["Admin"])
    async def refresh(registry: ModelRegistry = Depends(get_registry)) -> dict[str, Any]:
        config = await registry.refresh_config()
        return {
            "version": config.version,
            "providers": len(config.providers),
            "cache": registry.stats(),
        }

    return app


app = create_app()


def main() -> None:
    import uvicorn
    from dotenv import load_dotenv

    env_path = Path.cwd() / ".env"
    if load_dotenv(env_path, override=False):
        logger.debug("Loaded environment from %s", env_path)

    # pick up values from .env
    settings.reload()
    cfg = settings

    parser = argparse.ArgumentParser(description="Start the LLM capability registry server.")
    parser.add_argument("--host", default=cfg.host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=cfg.port, help="Port to bind to")
    parser.add_argument(
        "--debug",
        action="store_true",
        default=cfg.debug,
        help="Enable reload/debug mode",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    uvicorn.run(
        "llm_capabilities.server:app",
        host=args.host,
        port=args.port,
        reload=args.debug,
        log_level=cfg.log_level.lower(),
    )


if __name__ == "__main__":
    main()
