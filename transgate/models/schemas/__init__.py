"""Shared Pydantic schemas for API requests and responses."""

from .translation import (
    InfoResponse,
    TranslationRequest,
    TranslationResponse,
)

__all__ = [
    "InfoResponse",
    "TranslationRequest",
    "TranslationResponse",
]
