"""Top-level package exports for llm_cloud.

This package holds the language-model infrastructure:
    • provider.py – static provider registry built from config + environment
    • adapters.py – API adapters that turn a prompt pair into answer text

Selection policy and orchestration live in core/.
"""

from .adapters import (
    AnthropicAdapter,
    MalformedPayloadError,
    OpenAICompatibleAdapter,
    ProviderAdapter,
    ProviderCallError,
    ProviderTimeoutError,
    build_adapters,
)
from .provider import build_provider_registry

__all__ = [
    "ProviderAdapter",          # Adapter contract and implementations
    "OpenAICompatibleAdapter",
    "AnthropicAdapter",
    "ProviderCallError",        # Failure taxonomy
    "ProviderTimeoutError",
    "MalformedPayloadError",
    "build_adapters",           # Factories
    "build_provider_registry",
]
