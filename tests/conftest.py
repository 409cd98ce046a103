"""Shared fixtures for the capability registry tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from llm_capabilities.config import CONFIG_TTL_MS
from llm_capabilities.models import ModelsConfig, parse_models_config
from llm_capabilities.store import ConfigStore

T0 = 1_760_000_000_000  # arbitrary epoch-ms starting point
TTL = CONFIG_TTL_MS


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start: int = T0) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def _remote_document(version: str = "2.0.0") -> dict[str, Any]:
    return {
        "version": version,
        "last_updated": "2025-09-01T00:00:00Z",
        "providers": {
            "openai": {
                "name": "OpenAI",
                "description": "OpenAI models",
                "supports_thinking": True,
                "models": {
                    "gpt-5": {
                        "name": "GPT-5",
                        "description": "Flagship",
                        "api_type": "responses",
                        "context_length": 400_000,
                        "supports_vision": True,
                        "supports_function_calling": True,
                        "supports_thinking": True,
                        "supports_streaming": True,
                        "pricing": {"input": 1.25, "output": 10.0},
                    },
                    "gpt-4o": {
                        "name": "GPT-4o",
                        "description": "Omni",
                        "api_type": "chat_completions",
                        "context_length": 128_000,
                        "supports_vision": True,
                        "supports_function_calling": True,
                        "supports_streaming": False,
                        "pricing": {"input": 5.0, "output": 15.0},
                    },
                    "gpt-next": {
                        "name": "GPT Next",
                        "description": "Speaks a dialect this client has never seen",
                        "api_type": "realtime_v9",
                        "context_length": 1_000,
                        "supports_vision": False,
                        "supports_function_calling": False,
                        "pricing": {"input": 0.0, "output": 0.0},
                    },
                },
            },
            "anthropic": {
                "name": "Anthropic",
                "description": "Claude",
                "supports_thinking": True,
                "models": {
                    "claude-sonnet-4": {
                        "name": "Claude Sonnet 4",
                        "description": "No optional flags present",
                        "api_type": "messages",
                        "context_length": 200_000,
                        "supports_vision": True,
                        "supports_function_calling": True,
                        "pricing": {"input": 3.0, "output": 15.0},
                    },
                },
            },
            "google": {
                "name": "Google",
                "description": "Gemini",
                "supports_thinking": True,
                "models": {
                    "gemini-2.5-pro": {
                        "name": "Gemini 2.5 Pro",
                        "description": "Reasoning",
                        "api_type": "generate_content",
                        "context_length": 2_000_000,
                        "supports_vision": True,
                        "supports_function_calling": True,
                        "supports_thinking": True,
                        "supports_streaming": False,
                        "pricing": {"input": 3.0, "output": 12.0},
                    },
                    "nano-banana": {
                        "name": "Nano Banana Image",
                        "description": "Image generation under a codename",
                        "api_type": "generate_content",
                        "context_length": 32_000,
                        "supports_vision": False,
                        "supports_function_calling": False,
                        "pricing": {"input": 30.0, "output": 30.0},
                    },
                },
            },
        },
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def remote_document():
    """Factory for the raw JSON document served by the remote source."""
    return _remote_document


@pytest.fixture
def remote_config() -> ModelsConfig:
    return parse_models_config(_remote_document())


@pytest.fixture
def backend() -> dict[str, Any]:
    """Plain dict standing in for the durable key/value substrate."""
    return {}


@pytest.fixture
def store(backend: dict[str, Any]) -> ConfigStore:
    return ConfigStore(backend)


@pytest.fixture
def fetcher(remote_config: ModelsConfig) -> AsyncMock:
    """Fetcher double whose ``fetch`` succeeds with ``remote_config``."""
    fake = AsyncMock()
    fake.fetch.return_value = remote_config
    return fake
