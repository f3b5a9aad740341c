"""Request validation.

Runs before any network activity. Two rule sets share one entry point:

- registry mode: the caller names a registered model type (or none, for
  the default); only the text is checked here, the registry handles the rest.
- inline mode: the caller supplies a complete one-off provider; every
  provider field must be present.

Checks run in order and the first failure is reported.
"""

import enum

from pydantic import SecretStr

from transgate.core.errors import ValidationError
from transgate.core.llm.config import ProviderConfig
from transgate.models.schemas import TranslationRequest


class ValidationMode(str, enum.Enum):
    REGISTRY = "registry"
    INLINE = "inline"


def validation_mode(request: TranslationRequest) -> ValidationMode:
    if request.has_inline_provider:
        return ValidationMode.INLINE
    return ValidationMode.REGISTRY


def validate_request(request: TranslationRequest) -> ValidationMode:
    """Validate a translation request.

    Returns:
        The mode the request was validated under

    Raises:
        ValidationError: Naming the first missing field
    """
    if not request.text:
        raise ValidationError("no text provided for translation")

    mode = validation_mode(request)
    if mode is ValidationMode.REGISTRY:
        return mode

    if not request.model_type:
        raise ValidationError("missing required model configuration (modelType)")
    if not request.system_msg:
        raise ValidationError("missing required model configuration (systemMsg)")
    if not (request.api_key and request.api_url and request.model_name):
        raise ValidationError(
            "missing required model configuration (apiKey, apiUrl, modelName)"
        )
    return mode


def provider_from_request(request: TranslationRequest) -> ProviderConfig:
    """Build a one-off provider from a validated inline request."""
    return ProviderConfig(
        kind=request.model_type,
        api_key=SecretStr(request.api_key),
        api_url=request.api_url,
        model_name=request.model_name,
        system_msg=request.system_msg,
    )
