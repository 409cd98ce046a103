"""Public package surface for llm_capabilities.

Expose the primary entry points used by consumers of the package.
"""

__version__ = "1.0.0"

from llm_capabilities.config import settings
from llm_capabilities.engine import ConfigCacheEngine
from llm_capabilities.models import (
    ApiType,
    ModelCapabilities,
    ModelConfig,
    ModelsConfig,
    ProviderConfig,
)
from llm_capabilities.registry import ModelRegistry, build_registry

__all__ = [
    "ApiType",
    "ConfigCacheEngine",
    "ModelCapabilities",
    "ModelConfig",
    "ModelRegistry",
    "ModelsConfig",
    "ProviderConfig",
    "__version__",
    "build_registry",
    "settings",
]
