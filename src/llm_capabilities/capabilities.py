"""
capabilities.py — Yes/no capability questions answered from the models document.

Every query has two tiers:

  primary   the field on the resolved ModelConfig
  fallback  a static table / predicate, used only when resolving the
            configuration raises or the provider/model is not in it

A flag that is present but false (or an optional flag that is absent on a
known model) is a primary answer, never a reason to consult the fallback.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from .models import ApiType, ModelCapabilities, ModelConfig

logger = logging.getLogger(__name__)

# ── Fallback tables for well-known models ─────────────────────────────────────

_RESPONSES_API_MODELS: frozenset = frozenset(
    [
        "chatgpt-4o-latest",
        "gpt-4o-realtime-preview",
        "gpt-4o-realtime-preview-2024-10-01",
        "gpt-5",
        "gpt-5-mini",
        "gpt-5-nano",
        "gpt-5-chat-latest",
        "gpt-4o",
        "gpt-4o-mini",
        "gpt-4.1",
        "gpt-4.1-mini",
        "gpt-4.1-nano",
        "o1",
        "o1-preview",
        "o1-mini",
        "o3",
        "o3-mini",
        "o4-mini",
    ]
)
_IMAGE_MODEL_FRAGMENTS: tuple = ("gemini-2.5-flash-image", "gemini-image", "imagen-4")
_ALWAYS_STREAMING_PROVIDERS: frozenset = frozenset(["openai", "anthropic"])


# ══════════════════════════════════════════════════════════════════════════════
# Heuristics
# ══════════════════════════════════════════════════════════════════════════════


def heuristic_is_responses_api(model_id: str) -> bool:
    return model_id in _RESPONSES_API_MODELS


def heuristic_is_image_model(model_id: str) -> bool:
    return any(fragment in model_id for fragment in _IMAGE_MODEL_FRAGMENTS)


def heuristic_supports_streaming(provider: str, model_id: str) -> bool:
    if provider in _ALWAYS_STREAMING_PROVIDERS:
        return True
    if provider == "google":
        return "image" not in model_id
    return False


# ══════════════════════════════════════════════════════════════════════════════
# CapabilityQueries
# ══════════════════════════════════════════════════════════════════════════════


class CapabilityQueries:
    """
    Stateless query layer over anything exposing ``async resolve()``.

    Usage::

        queries = CapabilityQueries(engine)
        await queries.supports_streaming("google", "gemini-2.5-pro")
    """

    def __init__(self, engine: Any) -> None:
        self._engine = engine

    async def is_responses_api(self, model_id: str, provider: str = "openai") -> bool:
        model = await self._lookup(provider, model_id, "API type")
        if model is None:
            return heuristic_is_responses_api(model_id)
        return model.api_type is ApiType.RESPONSES

    async def is_chat_completions_api(self, model_id: str, provider: str = "openai") -> bool:
        return not await self.is_responses_api(model_id, provider)

    async def is_image_model(self, model_id: str, provider: str = "google") -> bool:
        model = await self._lookup(provider, model_id, "image model")
        if model is None:
            return heuristic_is_image_model(model_id)
        return "image" in model_id or "image" in model.name.lower()

    async def supports_streaming(self, provider: str, model_id: str) -> bool:
        model = await self._lookup(provider, model_id, "streaming support")
        if model is None:
            return heuristic_supports_streaming(provider, model_id)
        # Every Google model streams except the image generators
        if provider == "google":
            return "image" not in model_id
        return bool(model.supports_streaming)

    async def is_thinking_model(self, provider: str, model_id: str) -> bool:
        model = await self._lookup(provider, model_id, "thinking support")
        if model is None:
            return False
        return bool(model.supports_thinking)

    async def describe(self, provider: str, model_id: str) -> ModelCapabilities:
        """All answers for one model; concurrent lookups share a single fetch."""
        responses, image, streaming, thinking = await asyncio.gather(
            self.is_responses_api(model_id, provider),
            self.is_image_model(model_id, provider),
            self.supports_streaming(provider, model_id),
            self.is_thinking_model(provider, model_id),
        )
        return ModelCapabilities(
            provider=provider,
            model_id=model_id,
            responses_api=responses,
            chat_completions_api=not responses,
            image_model=image,
            streaming=streaming,
            thinking=thinking,
        )

    # ── Internal ───────────────────────────────────────────────────────────────

    async def _lookup(self, provider: str, model_id: str, what: str) -> Optional[ModelConfig]:
        """Resolved model entry, or None when the fallback tier should answer."""
        try:
            config = await self._engine.resolve()
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning(
                "Cannot check %s for %s/%s, using fallback: %s", what, provider, model_id, exc
            )
            return None
        model = config.model(provider, model_id)
        if model is None:
            logger.debug("%s/%s not in models config, using fallback for %s", provider, model_id, what)
        return model


__all__ = [
    "CapabilityQueries",
    "heuristic_is_image_model",
    "heuristic_is_responses_api",
    "heuristic_supports_streaming",
]
