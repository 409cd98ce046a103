"""
config.py — Centralised configuration for the model capability registry.

Every tunable knob (remote document URL, TTL, fetch timeout, cache location,
server binding) is read from the environment here.  Nothing deeper in the
stack reads ``os.environ`` directly.
"""

from __future__ import annotations

import os


def _env_bool(key: str, default: bool) -> bool:
    val = os.getenv(key, "").lower()
    if val in ("1", "true", "yes"):
        return True
    if val in ("0", "false", "no"):
        return False
    return default


def _env_positive_int(key: str, default: int) -> int:
    value = int(os.getenv(key, str(default)))
    if value <= 0:
        raise ValueError(f"{key} must be a positive integer, got {value}")
    return value


# ══════════════════════════════════════════════════════════════════════════════
# Constants
# ══════════════════════════════════════════════════════════════════════════════

DEFAULT_CONFIG_URL = (
    "https://raw.githubusercontent.com/marvinli001/MineChatWeb/main/models-config.json"
)

# 10 minutes: freshness window of a cached document and auto-refresh period
CONFIG_TTL_MS = 600_000
FETCH_TIMEOUT_MS = 5_000

# Keys in the persistent store
CACHE_KEY = "models_config_cache"
CACHE_TIME_KEY = "models_config_cache_time"


class Settings:
    """
    Simple settings object populated from environment variables.

    Values are read when the object is built; call ``reload()`` after changing
    the environment (e.g. after loading a .env file).
    """

    def __init__(self) -> None:
        self.reload()

    def reload(self) -> None:
        # Remote document
        self.config_url: str = os.getenv("MODELS_CONFIG_URL", DEFAULT_CONFIG_URL)
        self.ttl_ms: int = _env_positive_int("MODELS_CONFIG_TTL_MS", CONFIG_TTL_MS)
        self.fetch_timeout_ms: int = _env_positive_int(
            "MODELS_CONFIG_FETCH_TIMEOUT_MS", FETCH_TIMEOUT_MS
        )

        # Persistent cache
        self.cache_dir: str = os.getenv("MODELS_CONFIG_CACHE_DIR", "/tmp/llm_capabilities_cache")

        # Background refresh
        self.auto_refresh: bool = _env_bool("MODELS_CONFIG_AUTO_REFRESH", True)

        # Server
        self.host: str = os.getenv("CAPABILITIES_HOST", "127.0.0.1")
        self.port: int = int(os.getenv("CAPABILITIES_PORT", "7545"))
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.debug: bool = _env_bool("DEBUG", False)

    @property
    def refresh_interval_ms(self) -> int:
        """Auto-refresh fires once per TTL window."""
        return self.ttl_ms


settings = Settings()
