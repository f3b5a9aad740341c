"""Provider configuration - persisted model definitions.

The models config file is a JSON object::

    {
      "port": 8080,
      "defaultModel": "deepseek",
      "models": {
        "deepseek": {"type": "deepseek", "apiKey": "...", "apiUrl": "...",
                     "modelName": "...", "systemMsg": "..."}
      }
    }

It is read once at startup. When missing, a file with the built-in
defaults is written so operators can fill in credentials out-of-band.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_serializer
from pydantic import ValidationError as PydanticValidationError

from transgate.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_MSG = (
    "You are a professional translator. Translate the user's text into "
    "Simplified Chinese. Reply with the translation only, without "
    "explanations or notes."
)


class ProviderConfig(BaseModel):
    """Configuration for one upstream chat-completion backend."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        protected_namespaces=(),
    )

    kind: str = Field(default="openai", alias="type")
    api_key: SecretStr = Field(default=SecretStr(""), alias="apiKey")
    api_url: str = Field(default="", alias="apiUrl")
    model_name: str = Field(default="", alias="modelName")
    system_msg: str = Field(default="", alias="systemMsg")

    @field_serializer("api_key", when_used="json")
    def _dump_api_key(self, value: SecretStr) -> str:
        # Persisted in clear so the file stays hand-editable
        return value.get_secret_value()


class ModelsConfig(BaseModel):
    """Schema of the persisted models config file."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    port: Optional[int] = None
    default_model: str = Field(default="", alias="defaultModel")
    models: Dict[str, ProviderConfig] = Field(default_factory=dict)


# Built-in providers written on first start. Credentials are left empty.
DEFAULT_MODELS: Dict[str, ProviderConfig] = {
    "deepseek": ProviderConfig(
        kind="deepseek",
        api_url="https://api.deepseek.com/chat/completions",
        model_name="deepseek-chat",
        system_msg=DEFAULT_SYSTEM_MSG,
    ),
    "openai": ProviderConfig(
        kind="openai",
        api_url="https://api.openai.com/v1/chat/completions",
        model_name="gpt-4o-mini",
        system_msg=DEFAULT_SYSTEM_MSG,
    ),
}

DEFAULT_MODEL_TYPE = "deepseek"
DEFAULT_PORT = 8080


def default_models_config() -> ModelsConfig:
    """Build the configuration used when no file exists yet."""
    return ModelsConfig(
        port=DEFAULT_PORT,
        default_model=DEFAULT_MODEL_TYPE,
        models=dict(DEFAULT_MODELS),
    )


def load_models_config(path: Path) -> ModelsConfig:
    """Load and validate the models config file.

    Raises:
        ConfigError: If the file cannot be read or does not match the schema
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return ModelsConfig.model_validate(data)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Models config {path} is not valid JSON: {e}") from e
    except PydanticValidationError as e:
        raise ConfigError(f"Models config {path} has an invalid schema: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read models config {path}: {e}") from e


def save_models_config(config: ModelsConfig, path: Path) -> None:
    """Write the models config file as indented UTF-8 JSON."""
    data = config.model_dump(mode="json", by_alias=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def load_or_create_models_config(path: Path) -> ModelsConfig:
    """Load the models config, creating it from defaults when missing."""
    if path.exists():
        config = load_models_config(path)
        logger.info(
            "Loaded %d model(s) from %s, default=%s",
            len(config.models),
            path,
            config.default_model or "<none>",
        )
        return config

    config = default_models_config()
    try:
        save_models_config(config, path)
    except OSError as e:
        raise ConfigError(f"Failed to write default models config {path}: {e}") from e
    logger.warning(
        "No models config found, wrote defaults to %s. "
        "Fill in apiKey for each model before use.",
        path,
    )
    return config
