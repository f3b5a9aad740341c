"""API dependencies.

The registry, upstream client and settings are built once at startup and
attached to ``app.state``. Routes receive them through these providers so
tests can build an app around stubs without touching module globals.
"""

from typing import Annotated

from fastapi import Depends, Request

from transgate.config import Settings
from transgate.core.llm import ProviderRegistry, UpstreamTranslationClient


def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry


def get_translator(request: Request) -> UpstreamTranslationClient:
    return request.app.state.translator


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# Type aliases for cleaner dependency injection
RegistryDep = Annotated[ProviderRegistry, Depends(get_registry)]
TranslatorDep = Annotated[UpstreamTranslationClient, Depends(get_translator)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
