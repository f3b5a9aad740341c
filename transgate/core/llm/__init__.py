"""LLM provider integration package.

This package provides:
- Provider configuration and its persisted file (ProviderConfig, ModelsConfig)
- The read-only provider registry (ProviderRegistry)
- The upstream chat-completion client (UpstreamTranslationClient)
"""

from .config import (
    ModelsConfig,
    ProviderConfig,
    load_models_config,
    load_or_create_models_config,
    save_models_config,
)
from .registry import ProviderRegistry
from .client import UpstreamTranslationClient, build_chat_request

__all__ = [
    "ModelsConfig",
    "ProviderConfig",
    "load_models_config",
    "load_or_create_models_config",
    "save_models_config",

    "ProviderRegistry",

    "UpstreamTranslationClient",
    "build_chat_request",
]
