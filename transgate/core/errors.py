"""Error taxonomy for the translation gateway.

Every error raised while handling a request derives from GatewayError and
carries the HTTP status it maps to, plus a ``public_message`` that is safe
to return to the caller. ``str(error)`` holds the detailed cause and is
meant for server-side logs only.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for all request-level gateway errors."""

    status_code: int = 500
    public_message: str = "internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)


class ConfigError(Exception):
    """Provider configuration could not be loaded. Fatal at startup."""


# ----- caller errors -----


class ValidationError(GatewayError):
    """Malformed or incomplete translation request."""

    status_code = 400

    @property
    def public_message(self) -> str:
        return str(self)


class InvalidJSONError(ValidationError):
    """Request body is not a JSON translation request."""

    def __init__(self, cause: Optional[Exception] = None):
        super().__init__("invalid JSON format")
        self.cause = cause


class UnknownModelError(GatewayError):
    status_code = 400

    def __init__(self, model_type: str):
        super().__init__(f"unknown model type: {model_type}")
        self.model_type = model_type

    @property
    def public_message(self) -> str:
        return str(self)


class NoDefaultModelError(GatewayError):
    status_code = 400
    public_message = "no model type given and no default model configured"


class MethodNotAllowedError(GatewayError):
    status_code = 405
    public_message = "only POST requests are supported"


class RequestReadError(ValidationError):
    """The request body could not be read."""

    def __init__(self, cause: Optional[Exception] = None):
        super().__init__("failed to read request body")
        self.cause = cause


class PayloadTooLargeError(GatewayError):
    status_code = 413
    public_message = "request body too large"

    def __init__(self, limit: int):
        super().__init__(f"request body exceeds {limit} bytes")
        self.limit = limit


class ClientClosedRequestError(GatewayError):
    """The caller disconnected before the translation finished."""

    status_code = 499
    public_message = "client closed request"


# ----- upstream errors -----


class TranslationError(GatewayError):
    """The upstream call did not produce a translation."""

    status_code = 500
    public_message = "translation failed"


class TranslationTimeoutError(TranslationError):
    """The caller deadline elapsed before the upstream answered."""

    public_message = "translation request timed out"

    def __init__(self, deadline: float):
        super().__init__(f"upstream call exceeded deadline of {deadline:.1f}s")
        self.deadline = deadline


class UpstreamRequestError(TranslationError):
    """Network or transport failure talking to the provider."""

    public_message = "translation failed: upstream request failed"


class ProviderError(TranslationError):
    """The provider answered with a non-2xx status."""

    public_message = "translation failed: provider returned an error"

    def __init__(self, status_code: int, body: str):
        super().__init__(f"provider returned status {status_code}: {body}")
        self.upstream_status = status_code
        self.body = body


class ResponseParseError(TranslationError):
    public_message = "translation failed: invalid provider response"


class EmptyResultError(TranslationError):
    public_message = "translation failed: no translation returned"


class InternalError(TranslationError):
    public_message = "internal server error"