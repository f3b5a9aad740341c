"""Translation API request and response schemas."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TranslationRequest(BaseModel):
    """Inbound translation request.

    Callers either select a registered provider:
    - Option 1: modelType (or nothing, for the default model)

    or supply a complete one-off provider inline:
    - Option 2: modelType + systemMsg + apiKey + apiUrl + modelName
    """

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    text: Optional[str] = None
    model_type: Optional[str] = Field(default=None, alias="modelType")

    # Inline provider fields
    api_key: Optional[str] = Field(default=None, alias="apiKey", repr=False)
    api_url: Optional[str] = Field(default=None, alias="apiUrl")
    model_name: Optional[str] = Field(default=None, alias="modelName")
    system_msg: Optional[str] = Field(default=None, alias="systemMsg")

    @property
    def has_inline_provider(self) -> bool:
        """Whether any inline provider field was supplied."""
        return any((self.api_key, self.api_url, self.model_name, self.system_msg))


class TranslationResponse(BaseModel):
    translation: str


class InfoResponse(BaseModel):
    """Models available through the registry."""

    model_config = ConfigDict(populate_by_name=True)

    default_model: Optional[str] = Field(default=None, alias="defaultModel")
    available_models: List[str] = Field(default_factory=list, alias="availableModels")
