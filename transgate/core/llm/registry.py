"""Provider registry - resolves a model type to its provider configuration.

The registry is built once during startup, before the server accepts any
connection, and is read-only afterwards. It is handed to the request
handlers through ``app.state`` rather than living in a module global.
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import List, Mapping, Optional

from transgate.core.errors import ConfigError, NoDefaultModelError, UnknownModelError
from transgate.core.llm.config import (
    ModelsConfig,
    ProviderConfig,
    load_or_create_models_config,
)

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Read-only mapping of model type name to ProviderConfig."""

    def __init__(
        self,
        models: Mapping[str, ProviderConfig],
        default_model: Optional[str] = None,
        port: Optional[int] = None,
    ):
        default_model = default_model or None
        if default_model is not None and default_model not in models:
            raise ConfigError(
                f"Default model '{default_model}' is not among the configured "
                f"models: {sorted(models)}"
            )
        self._models: Mapping[str, ProviderConfig] = MappingProxyType(dict(models))
        self._default_model = default_model
        self._port = port

    @classmethod
    def from_models_config(cls, config: ModelsConfig) -> "ProviderRegistry":
        return cls(config.models, config.default_model, port=config.port)

    @classmethod
    def from_file(cls, path: Path) -> "ProviderRegistry":
        """Provision the registry from the models config file.

        Creates the file with built-in defaults when it does not exist.

        Raises:
            ConfigError: If the file is malformed or inconsistent
        """
        registry = cls.from_models_config(load_or_create_models_config(path))
        logger.info(
            "Provider registry ready: models=%s, default=%s",
            registry.model_types,
            registry.default_model,
        )
        return registry

    @property
    def default_model(self) -> Optional[str]:
        return self._default_model

    @property
    def model_types(self) -> List[str]:
        return sorted(self._models)

    @property
    def port(self) -> Optional[int]:
        """Listen port stored alongside the models, if any."""
        return self._port

    def resolve(self, model_type: Optional[str] = None) -> ProviderConfig:
        """Resolve a model type to its provider configuration.

        An empty model type selects the default model.

        Raises:
            NoDefaultModelError: If no model type was given and no default is set
            UnknownModelError: If the model type is not registered
        """
        if not model_type:
            if self._default_model is None:
                raise NoDefaultModelError()
            model_type = self._default_model

        provider = self._models.get(model_type)
        if provider is None:
            raise UnknownModelError(model_type)
        return provider

    def __contains__(self, model_type: object) -> bool:
        return model_type in self._models

    def __len__(self) -> int:
        return len(self._models)
