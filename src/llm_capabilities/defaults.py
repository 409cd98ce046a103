"""
defaults.py — Bundled last-resort dataset.

Served only when no remote document has ever been obtained in this process
and the remote source is unreachable.  Keep the version pinned at ``1.0.0``:
callers use it to recognise that they are looking at bundled data.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from .models import ModelsConfig

DEFAULT_VERSION = "1.0.0"

# ── Static provider/model snapshot ────────────────────────────────────────────

DEFAULT_PROVIDERS: dict[str, dict[str, Any]] = {
    "openai": {
        "name": "OpenAI",
        "description": "OpenAI official models",
        "supports_thinking": True,
        "models": {
            "gpt-4o": {
                "name": "GPT-4o",
                "description": "Latest GPT-4 class model",
                "api_type": "chat_completions",
                "context_length": 128_000,
                "supports_vision": True,
                "supports_function_calling": True,
                "supports_streaming": True,
                "pricing": {"input": 5.0, "output": 15.0},
            },
        },
    },
    "anthropic": {
        "name": "Anthropic",
        "description": "Anthropic Claude models",
        "supports_thinking": True,
        "models": {
            "claude-opus-4-1-20250805": {
                "name": "Claude Opus 4.1",
                "description": "Most capable Claude model",
                "api_type": "messages",
                "context_length": 200_000,
                "supports_vision": True,
                "supports_function_calling": True,
                "supports_thinking": True,
                "supports_streaming": True,
                "pricing": {"input": 15.0, "output": 75.0},
            },
        },
    },
    "google": {
        "name": "Google",
        "description": "Google Gemini models",
        "supports_thinking": True,
        "models": {
            "gemini-2.5-pro": {
                "name": "Gemini 2.5 Pro",
                "description": "Strongest Gemini reasoning model for complex tasks",
                "api_type": "generate_content",
                "context_length": 2_000_000,
                "supports_vision": True,
                "supports_function_calling": True,
                "supports_thinking": True,
                "supports_streaming": True,
                "pricing": {"input": 3.0, "output": 12.0},
            },
            "gemini-2.5-flash": {
                "name": "Gemini 2.5 Flash",
                "description": "Fast multimodal model with thinking mode",
                "api_type": "generate_content",
                "context_length": 1_000_000,
                "supports_vision": True,
                "supports_function_calling": True,
                "supports_thinking": True,
                "supports_streaming": True,
                "pricing": {"input": 0.075, "output": 0.3},
            },
            "gemini-2.5-flash-lite": {
                "name": "Gemini 2.5 Flash Lite",
                "description": "Fastest, lowest-cost multimodal model with thinking mode",
                "api_type": "generate_content",
                "context_length": 1_000_000,
                "supports_vision": True,
                "supports_function_calling": True,
                "supports_thinking": True,
                "supports_streaming": True,
                "pricing": {"input": 0.0375, "output": 0.15},
            },
            "gemini-2.5-flash-image": {
                "name": "Gemini 2.5 Flash Image",
                "description": "Dedicated image generation model",
                "api_type": "generate_content",
                "context_length": 32_000,
                "supports_vision": False,
                "supports_function_calling": False,
                "supports_thinking": False,
                "supports_streaming": False,
                "pricing": {"input": 30.0, "output": 30.0},
            },
            "gemini-2.0-flash-exp": {
                "name": "Gemini 2.0 Flash (Experimental)",
                "description": "Experimental model with thinking mode",
                "api_type": "generate_content",
                "context_length": 1_000_000,
                "supports_vision": True,
                "supports_function_calling": True,
                "supports_thinking": True,
                "supports_streaming": True,
                "pricing": {"input": 0.075, "output": 0.3},
            },
        },
    },
}


def default_config() -> ModelsConfig:
    """Build the bundled dataset, stamped with the current time."""
    return ModelsConfig.model_validate(
        {
            "version": DEFAULT_VERSION,
            "last_updated": datetime.now(UTC).isoformat(),
            "providers": DEFAULT_PROVIDERS,
        }
    )
