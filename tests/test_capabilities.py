"""Capability queries: primary answers from the document, heuristic fallbacks."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from llm_capabilities.capabilities import (
    CapabilityQueries,
    heuristic_is_image_model,
    heuristic_is_responses_api,
    heuristic_supports_streaming,
)
from llm_capabilities.engine import ConfigCacheEngine
from llm_capabilities.errors import TransportError


@pytest.fixture
def queries(fetcher, store, clock) -> CapabilityQueries:
    """Queries over an engine serving the remote test document."""
    return CapabilityQueries(ConfigCacheEngine(fetcher, store, clock=clock))


@pytest.fixture
def default_queries(store, clock) -> CapabilityQueries:
    """Queries over an engine that can only serve the bundled default dataset."""
    fetcher = AsyncMock()
    fetcher.fetch.side_effect = TransportError("offline")
    return CapabilityQueries(ConfigCacheEngine(fetcher, store, clock=clock))


@pytest.fixture
def broken_queries() -> CapabilityQueries:
    """Queries whose configuration resolution itself raises."""
    engine = AsyncMock()
    engine.resolve.side_effect = RuntimeError("resolution exploded")
    return CapabilityQueries(engine)


class TestHeuristics:
    def test_responses_list(self):
        assert heuristic_is_responses_api("o3")
        assert heuristic_is_responses_api("gpt-5-mini")
        assert not heuristic_is_responses_api("gpt-3.5-turbo")

    def test_image_fragments(self):
        assert heuristic_is_image_model("imagen-4-ultra")
        assert heuristic_is_image_model("gemini-2.5-flash-image-preview")
        assert not heuristic_is_image_model("gemini-2.5-pro")

    def test_streaming_defaults(self):
        assert heuristic_supports_streaming("openai", "anything")
        assert heuristic_supports_streaming("anthropic", "anything")
        assert heuristic_supports_streaming("google", "gemini-2.5-pro")
        assert not heuristic_supports_streaming("google", "gemini-image-x")
        assert not heuristic_supports_streaming("mistral", "mistral-large")


class TestResponsesApi:
    @pytest.mark.asyncio
    async def test_primary_answers(self, queries):
        assert await queries.is_responses_api("gpt-5") is True
        # listed by the heuristic, but the document says chat completions
        assert await queries.is_responses_api("gpt-4o") is False
        assert await queries.is_chat_completions_api("gpt-4o") is True

    @pytest.mark.asyncio
    async def test_unknown_api_type_is_not_responses(self, queries):
        assert await queries.is_responses_api("gpt-next") is False

    @pytest.mark.asyncio
    async def test_absent_model_uses_heuristic(self, queries):
        assert await queries.is_responses_api("o3") is True
        assert await queries.is_chat_completions_api("o3") is False
        assert await queries.is_responses_api("davinci-002") is False

    @pytest.mark.asyncio
    async def test_resolution_failure_uses_heuristic(self, broken_queries):
        assert await broken_queries.is_responses_api("gpt-4.1") is True
        assert await broken_queries.is_chat_completions_api("gpt-4.1") is False


class TestImageModel:
    @pytest.mark.asyncio
    async def test_display_name_counts(self, queries):
        assert await queries.is_image_model("nano-banana") is True
        assert await queries.is_image_model("gemini-2.5-pro") is False

    @pytest.mark.asyncio
    async def test_default_dataset_image_model(self, default_queries):
        assert await default_queries.is_image_model("gemini-2.5-flash-image") is True

    @pytest.mark.asyncio
    async def test_absent_model_uses_fragments(self, queries):
        assert await queries.is_image_model("imagen-4") is True
        assert await queries.is_image_model("veo-3") is False

    @pytest.mark.asyncio
    async def test_resolution_failure_uses_fragments(self, broken_queries):
        assert await broken_queries.is_image_model("gemini-image-2") is True
        assert await broken_queries.is_image_model("gemini-2.5-pro") is False


class TestStreaming:
    @pytest.mark.asyncio
    async def test_google_image_model_via_primary(self, default_queries):
        assert await default_queries.supports_streaming("google", "gemini-2.5-flash-image") is False

    @pytest.mark.asyncio
    async def test_google_rule_overrides_flag(self, queries):
        # the document says False, but every non-image Google model streams
        assert await queries.supports_streaming("google", "gemini-2.5-pro") is True

    @pytest.mark.asyncio
    async def test_flag_used_for_other_providers(self, queries):
        assert await queries.supports_streaming("openai", "gpt-5") is True
        assert await queries.supports_streaming("openai", "gpt-4o") is False

    @pytest.mark.asyncio
    async def test_absent_flag_defaults_false_not_heuristic(self, queries):
        assert await queries.supports_streaming("anthropic", "claude-sonnet-4") is False

    @pytest.mark.asyncio
    async def test_absent_model_uses_provider_default(self, queries):
        assert await queries.supports_streaming("anthropic", "claude-unreleased") is True
        assert await queries.supports_streaming("deepseek", "deepseek-chat") is False

    @pytest.mark.asyncio
    async def test_resolution_failure_uses_provider_default(self, broken_queries):
        assert await broken_queries.supports_streaming("openai", "any-model") is True
        assert await broken_queries.supports_streaming("google", "gemini-2.5-flash-image") is False
        assert await broken_queries.supports_streaming("xai", "grok-4") is False


class TestThinking:
    @pytest.mark.asyncio
    async def test_primary(self, queries):
        assert await queries.is_thinking_model("openai", "gpt-5") is True
        assert await queries.is_thinking_model("anthropic", "claude-sonnet-4") is False

    @pytest.mark.asyncio
    async def test_absent_or_broken_is_false(self, queries, broken_queries):
        assert await queries.is_thinking_model("openai", "o3") is False
        assert await broken_queries.is_thinking_model("anthropic", "claude-opus-4-1-20250805") is False


class TestDescribe:
    @pytest.mark.asyncio
    async def test_aggregates_answers(self, queries, fetcher):
        caps = await queries.describe("openai", "gpt-5")
        assert caps.provider == "openai"
        assert caps.model_id == "gpt-5"
        assert caps.responses_api is True
        assert caps.chat_completions_api is False
        assert caps.image_model is False
        assert caps.streaming is True
        assert caps.thinking is True
        # four concurrent lookups, one fetch
        assert fetcher.fetch.await_count == 1
