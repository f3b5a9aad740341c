"""Upstream translation client.

Builds a provider-agnostic chat-completion request, sends it to the
resolved provider and extracts the translated text.

Two time bounds apply to every call:
- the transport timeout configured on the shared httpx client
  (connect/read/write/pool), independent of the caller;
- the caller deadline passed to :meth:`UpstreamTranslationClient.translate`.

Whichever elapses first aborts the request. Only the caller deadline is
reported as TranslationTimeoutError; a transport timeout is a network
failure (UpstreamRequestError). No retries are attempted.
"""

import asyncio
import logging
import time
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from transgate.config import Settings
from transgate.core.errors import (
    EmptyResultError,
    InternalError,
    ProviderError,
    ResponseParseError,
    TranslationTimeoutError,
    UpstreamRequestError,
)
from transgate.core.llm.config import ProviderConfig
from transgate.core.llm.models import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
)

logger = logging.getLogger(__name__)


def build_chat_request(text: str, provider: ProviderConfig) -> ChatCompletionRequest:
    """Assemble the chat request: system instruction first, user text second."""
    return ChatCompletionRequest(
        model=provider.model_name,
        messages=[
            ChatMessage(role="system", content=provider.system_msg),
            ChatMessage(role="user", content=text),
        ],
    )


class UpstreamTranslationClient:
    """Sends translation requests to chat-completion providers.

    One instance is shared by all requests; the underlying httpx client
    keeps a bounded pool of idle connections per upstream host.

    Usage:
        client = UpstreamTranslationClient.from_settings(settings)
        text = await client.translate("Hello", provider, deadline=30.0)
        await client.aclose()
    """

    def __init__(
        self,
        timeout: float = 25.0,
        max_keepalive_connections: int = 10,
        keepalive_expiry: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(
                max_keepalive_connections=max_keepalive_connections,
                keepalive_expiry=keepalive_expiry,
            ),
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "UpstreamTranslationClient":
        return cls(
            timeout=settings.upstream_timeout,
            max_keepalive_connections=settings.upstream_max_connections,
            keepalive_expiry=settings.upstream_keepalive_expiry,
            transport=transport,
        )

    async def translate(
        self,
        text: str,
        provider: ProviderConfig,
        *,
        deadline: Optional[float] = None,
    ) -> str:
        """Translate text with the given provider.

        Args:
            text: Source text, sent as the user message
            provider: Resolved provider configuration
            deadline: Caller deadline in seconds; None means transport timeout only

        Returns:
            Content of the first choice returned by the provider

        Raises:
            TranslationTimeoutError: If the caller deadline elapsed first
            UpstreamRequestError: On network or transport failure
            ProviderError: If the provider answered with a non-2xx status
            ResponseParseError: If the 2xx response is not chat-completion JSON
            EmptyResultError: If the response has no choices
            InternalError: If the request could not be serialized or built
        """
        if deadline is None:
            return await self._send(text, provider)

        try:
            return await asyncio.wait_for(self._send(text, provider), timeout=deadline)
        except asyncio.TimeoutError:
            logger.warning(
                "Upstream call timed out: model=%s, deadline=%.1fs",
                provider.model_name,
                deadline,
            )
            raise TranslationTimeoutError(deadline) from None

    async def _send(self, text: str, provider: ProviderConfig) -> str:
        chat_request = build_chat_request(text, provider)
        try:
            body = chat_request.model_dump_json().encode("utf-8")
        except (TypeError, ValueError) as e:
            raise InternalError(f"Failed to encode chat request: {e}") from e

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {provider.api_key.get_secret_value()}",
        }
        try:
            request = self._client.build_request(
                "POST", provider.api_url, content=body, headers=headers
            )
        except httpx.InvalidURL as e:
            raise UpstreamRequestError(
                f"Invalid upstream URL {provider.api_url}: {e}"
            ) from e
        except (TypeError, ValueError) as e:
            # Header values must be ASCII; the message never includes the key
            raise InternalError(
                f"Failed to build upstream request: {type(e).__name__}"
            ) from e

        start_time = time.monotonic()
        try:
            response = await self._client.send(request)
        except httpx.HTTPError as e:
            raise UpstreamRequestError(
                f"Request to {provider.api_url} failed: {e!r}"
            ) from e
        latency_ms = int((time.monotonic() - start_time) * 1000)

        if not response.is_success:
            logger.debug("Upstream error response headers: %s", dict(response.headers))
            raise ProviderError(response.status_code, response.text)

        logger.info(
            "Upstream response: kind=%s, model=%s, status=%d, latency=%dms",
            provider.kind,
            provider.model_name,
            response.status_code,
            latency_ms,
        )

        try:
            completion = ChatCompletionResponse.model_validate_json(response.content)
        except PydanticValidationError as e:
            raise ResponseParseError(f"Invalid chat completion response: {e}") from e

        if not completion.choices:
            raise EmptyResultError("Provider returned no choices")

        return completion.choices[0].message.content or ""

    async def aclose(self) -> None:
        """Close pooled upstream connections."""
        await self._client.aclose()

    async def __aenter__(self) -> "UpstreamTranslationClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
