"""Chat-completion wire models.

Only the minimal shape shared by OpenAI-compatible providers is modelled:
the request carries ``model`` and ``messages``; from the response only
``choices[0].message.content`` is read and everything else is ignored.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A single role/content pair."""

    role: Literal["system", "user"]
    content: str


class ChatCompletionRequest(BaseModel):
    """Body POSTed to the provider endpoint."""

    model: str = Field(..., description="Provider model identifier")
    messages: List[ChatMessage] = Field(..., description="System first, then user")


class ResponseMessage(BaseModel):
    content: Optional[str] = None


class ChatChoice(BaseModel):
    message: ResponseMessage = Field(default_factory=ResponseMessage)


class ChatCompletionResponse(BaseModel):
    """Subset of the provider response the gateway consults."""

    choices: List[ChatChoice] = Field(default_factory=list)
