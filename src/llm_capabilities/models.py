"""
models.py — Pydantic schemas and runtime dataclasses for the capability registry.

Three layers:
  1. Document schemas  (ModelsConfig → ProviderConfig → ModelConfig)
     matching the remote JSON document field-for-field
  2. Query results     (ModelCapabilities)
  3. Runtime state     (CacheEntry)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from .errors import PayloadParseError


# ══════════════════════════════════════════════════════════════════════════════
# Enumerations
# ══════════════════════════════════════════════════════════════════════════════


class ApiType(str, Enum):
    """Wire-protocol dialect a model expects."""

    CHAT_COMPLETIONS = "chat_completions"
    RESPONSES        = "responses"
    MESSAGES         = "messages"
    GENERATE_CONTENT = "generate_content"
    UNKNOWN          = "unknown"   # any value this client does not know yet

    @classmethod
    def parse(cls, value: Any) -> "ApiType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


# ══════════════════════════════════════════════════════════════════════════════
# Document schemas
# ══════════════════════════════════════════════════════════════════════════════


class Pricing(BaseModel):
    model_config = ConfigDict(frozen=True)

    input: float = 0.0
    output: float = 0.0


class ModelConfig(BaseModel):
    """A single model entry of a provider."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    description: str = ""
    api_type: ApiType = ApiType.UNKNOWN
    context_length: int = 0
    supports_vision: bool = False
    supports_function_calling: bool = False
    supports_thinking: Optional[bool] = None
    supports_streaming: Optional[bool] = None
    pricing: Pricing = Field(default_factory=Pricing)

    @field_validator("api_type", mode="before")
    @classmethod
    def coerce_api_type(cls, v: Any) -> ApiType:
        return ApiType.parse(v)


class ProviderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    description: str = ""
    supports_thinking: bool = False
    models: Dict[str, ModelConfig] = Field(default_factory=dict, validate_default=True)

    @field_validator("models", mode="after")
    @classmethod
    def freeze_models(cls, v: Dict[str, ModelConfig]) -> Mapping[str, ModelConfig]:
        return MappingProxyType(dict(v))

    @field_serializer("models")
    def dump_models(self, v: Mapping[str, ModelConfig]) -> Dict[str, ModelConfig]:
        return dict(v)


class ModelsConfig(BaseModel):
    """Root of the remote document. Replaced wholesale, never merged.

    The provider and model mappings are read-only views; a fetched document
    cannot be edited in place.
    """

    model_config = ConfigDict(frozen=True)

    version: str
    last_updated: str = ""
    providers: Dict[str, ProviderConfig]

    @field_validator("providers", mode="after")
    @classmethod
    def freeze_providers(cls, v: Dict[str, ProviderConfig]) -> Mapping[str, ProviderConfig]:
        return MappingProxyType(dict(v))

    @field_serializer("providers")
    def dump_providers(self, v: Mapping[str, ProviderConfig]) -> Dict[str, ProviderConfig]:
        return dict(v)

    def provider(self, provider_id: str) -> Optional[ProviderConfig]:
        return self.providers.get(provider_id)

    def model(self, provider_id: str, model_id: str) -> Optional[ModelConfig]:
        prov = self.providers.get(provider_id)
        if prov is None:
            return None
        return prov.models.get(model_id)


class ModelCapabilities(BaseModel):
    """Aggregated capability answers for one provider/model pair."""

    model_config = ConfigDict(protected_namespaces=())

    provider: str
    model_id: str
    responses_api: bool
    chat_completions_api: bool
    image_model: bool
    streaming: bool
    thinking: bool


def parse_models_config(payload: Union[str, bytes, Dict[str, Any]]) -> ModelsConfig:
    """Parse a JSON document (text or already-decoded) into a ModelsConfig.

    Raises PayloadParseError on malformed JSON or an unexpected shape.
    """
    try:
        if isinstance(payload, (str, bytes)):
            return ModelsConfig.model_validate_json(payload)
        return ModelsConfig.model_validate(payload)
    except ValidationError as exc:
        raise PayloadParseError(f"invalid models config: {exc.error_count()} error(s)") from exc


# ══════════════════════════════════════════════════════════════════════════════
# Runtime state
# ══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CacheEntry:
    """The configuration currently held by the engine and when it was obtained."""
    config: ModelsConfig
    timestamp: int                              # epoch milliseconds

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.timestamp

    def is_fresh(self, now_ms: int, ttl_ms: int) -> bool:
        return self.age_ms(now_ms) < ttl_ms


__all__ = [
    "ApiType",
    "CacheEntry",
    "ModelCapabilities",
    "ModelConfig",
    "ModelsConfig",
    "Pricing",
    "ProviderConfig",
    "parse_models_config",
]
