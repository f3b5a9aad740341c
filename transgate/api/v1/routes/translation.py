"""Translation API routes.

Pipeline for one request:
bounded body read -> JSON parse -> validation ->
provider resolution (registry or inline) -> upstream call under the
request deadline -> ``{"translation": ...}``.
Other methods on the same path get a 405 from a hidden route.

Errors are raised as GatewayError subclasses and turned into plain-text
responses by the application's exception handler. Causes are logged here,
where the request context is known; only generic messages reach the caller.
"""

import asyncio
import logging
import time
from typing import Awaitable, TypeVar

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.requests import ClientDisconnect

from transgate.api.dependencies import RegistryDep, SettingsDep, TranslatorDep
from transgate.core.errors import (
    ClientClosedRequestError,
    GatewayError,
    InternalError,
    InvalidJSONError,
    MethodNotAllowedError,
    PayloadTooLargeError,
    ProviderError,
    RequestReadError,
    TranslationError,
)
from transgate.core.validation import (
    ValidationMode,
    provider_from_request,
    validate_request,
)
from transgate.models.schemas import TranslationRequest, TranslationResponse
from transgate.utils import truncate_for_log

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")

# Methods answered with 405 before the body is touched
REJECTED_METHODS = ["GET", "PUT", "PATCH", "DELETE"]

DISCONNECT_POLL_INTERVAL = 0.5  # seconds


class UTF8JSONResponse(JSONResponse):
    media_type = "application/json; charset=utf-8"


async def read_body(request: Request, limit: int) -> bytes:
    """Read the request body, refusing anything larger than ``limit`` bytes.

    A declared Content-Length over the limit is rejected before reading;
    chunked bodies are cut off as soon as they pass the limit.
    """
    content_length = request.headers.get("content-length")
    if content_length is not None:
        try:
            declared = int(content_length)
        except ValueError:
            raise RequestReadError()
        if declared > limit:
            raise PayloadTooLargeError(limit)

    body = bytearray()
    try:
        async for chunk in request.stream():
            body.extend(chunk)
            if len(body) > limit:
                raise PayloadTooLargeError(limit)
    except ClientDisconnect as e:
        raise RequestReadError(e)
    return bytes(body)


async def run_unless_disconnected(
    request: Request,
    awaitable: Awaitable[T],
    poll_interval: float = DISCONNECT_POLL_INTERVAL,
) -> T:
    """Await ``awaitable`` and cancel it if the client goes away.

    Raises:
        ClientClosedRequestError: If the client disconnected first
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                await asyncio.wait({task})
                raise ClientClosedRequestError()
    finally:
        if not task.done():
            task.cancel()


@router.post(
    "/translate",
    response_model=TranslationResponse,
    response_class=UTF8JSONResponse,
)
async def translate(
    request: Request,
    registry: RegistryDep,
    translator: TranslatorDep,
    settings: SettingsDep,
) -> TranslationResponse:
    """Translate text with a registered or inline provider.

    Request body:
        text: Text to translate (required)
        modelType: Registered model type; the default model when omitted
        apiKey, apiUrl, modelName, systemMsg: Inline provider, all required
            together with modelType when any of them is given
    """
    path = request.url.path
    start_time = time.monotonic()

    try:
        body = await read_body(request, settings.max_request_body_size)
    except GatewayError as e:
        logger.warning(f"[Translate API] Failed to read body: path={path}, error={e}")
        raise

    try:
        payload = TranslationRequest.model_validate_json(body)
    except PydanticValidationError as e:
        problems = [(err["loc"], err["type"]) for err in e.errors()]
        logger.warning(f"[Translate API] Invalid JSON body: path={path}, errors={problems}")
        raise InvalidJSONError(e)

    model_type = payload.model_type or registry.default_model or "<none>"
    try:
        mode = validate_request(payload)
        if mode is ValidationMode.INLINE:
            provider = provider_from_request(payload)
        else:
            provider = registry.resolve(payload.model_type)
    except GatewayError as e:
        logger.warning(
            f"[Translate API] Rejected request: path={path}, model_type={model_type}, error={e}"
        )
        raise

    deadline = max(settings.request_timeout - (time.monotonic() - start_time), 0.0)
    logger.info(
        f"[Translate API] Starting translation: path={path}, mode={mode.value}, "
        f"model_type={model_type}, model={provider.model_name}, text_len={len(payload.text)}"
    )

    try:
        translation = await run_unless_disconnected(
            request,
            translator.translate(payload.text, provider, deadline=deadline),
        )
    except ClientClosedRequestError:
        logger.info(
            f"[Translate API] Client disconnected, upstream call cancelled: "
            f"path={path}, model_type={model_type}"
        )
        raise
    except TranslationError as e:
        latency_ms = int((time.monotonic() - start_time) * 1000)
        if isinstance(e, ProviderError):
            logger.error(
                f"[Translate API] Provider error: path={path}, model_type={model_type}, "
                f"upstream_status={e.upstream_status}, latency={latency_ms}ms, "
                f"body={truncate_for_log(e.body)}"
            )
        else:
            logger.error(
                f"[Translate API] Translation failed: path={path}, model_type={model_type}, "
                f"error={type(e).__name__}: {e}, latency={latency_ms}ms"
            )
        raise
    except Exception as e:
        latency_ms = int((time.monotonic() - start_time) * 1000)
        logger.exception(
            f"[Translate API] Unexpected error: path={path}, model_type={model_type}, "
            f"error={type(e).__name__}, latency={latency_ms}ms"
        )
        raise InternalError(f"unexpected {type(e).__name__}") from e

    latency_ms = int((time.monotonic() - start_time) * 1000)
    logger.info(
        f"[Translate API] Translation complete: model_type={model_type}, "
        f"result_len={len(translation)}, latency={latency_ms}ms"
    )
    return TranslationResponse(translation=translation)


@router.api_route("/translate", methods=REJECTED_METHODS, include_in_schema=False)
async def translate_method_not_allowed() -> None:
    raise MethodNotAllowedError()
