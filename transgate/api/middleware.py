"""HTTP middleware chain.

Both middlewares are plain ASGI wrappers. Register them with
``app.add_middleware`` so that CORS ends up outermost: preflight requests
are answered there and never reach request logging or the routes.
"""

import logging
import time
from typing import Dict, Sequence

from starlette.datastructures import MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

DEFAULT_ALLOW_METHODS = ("GET", "POST", "OPTIONS", "PUT", "DELETE")
DEFAULT_ALLOW_HEADERS = ("Content-Type", "Authorization", "Accept", "X-Requested-With")
DEFAULT_EXPOSE_HEADERS = ("Content-Length", "Content-Type")


class CORSHeadersMiddleware:
    """Adds permissive cross-origin headers to every response.

    Unlike Starlette's CORSMiddleware the headers are set unconditionally,
    whether or not the request carries an Origin, and any OPTIONS request
    is answered with 200 and an empty body.
    """

    def __init__(
        self,
        app: ASGIApp,
        allow_origin: str = "*",
        allow_methods: Sequence[str] = DEFAULT_ALLOW_METHODS,
        allow_headers: Sequence[str] = DEFAULT_ALLOW_HEADERS,
        expose_headers: Sequence[str] = DEFAULT_EXPOSE_HEADERS,
        max_age: int = 86400,
    ) -> None:
        self.app = app
        self.cors_headers: Dict[str, str] = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": ", ".join(allow_methods),
            "Access-Control-Allow-Headers": ", ".join(allow_headers),
            "Access-Control-Expose-Headers": ", ".join(expose_headers),
            "Access-Control-Max-Age": str(max_age),
        }

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if scope["method"] == "OPTIONS":
            response = Response(status_code=200, headers=self.cors_headers)
            await response(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in self.cors_headers.items():
                    headers[name] = value
            await send(message)

        await self.app(scope, receive, send_with_cors)


class RequestLoggingMiddleware:
    """Logs method, path, status and latency of every request it sees."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope["method"]
        path = scope["path"]
        status_code = 500
        start_time = time.monotonic()
        logger.info("Request started: %s %s", method, path)

        async def send_with_status(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_with_status)
        finally:
            latency_ms = (time.monotonic() - start_time) * 1000
            logger.info(
                "Request finished: %s %s, status=%d, latency=%.1fms",
                method,
                path,
                status_code,
                latency_ms,
            )
