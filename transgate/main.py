"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse

from transgate import __version__
from transgate.api.middleware import CORSHeadersMiddleware, RequestLoggingMiddleware
from transgate.api.v1.routes import info, translation
from transgate.config import Settings, get_settings
from transgate.core.errors import GatewayError, MethodNotAllowedError
from transgate.core.llm import ProviderRegistry, UpstreamTranslationClient

logger = logging.getLogger(__name__)

HOME_PAGE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>AI Translation Gateway</title>
</head>
<body>
    <h1>AI Translation Gateway is running!</h1>
    <p>POST <code>{"text": "...", "modelType": "..."}</code> to <code>/translate</code>.</p>
</body>
</html>
"""


async def gateway_error_handler(request: Request, exc: GatewayError) -> PlainTextResponse:
    """Turn a GatewayError into a plain-text response with its status."""
    headers = {"Allow": "POST"} if isinstance(exc, MethodNotAllowedError) else None
    return PlainTextResponse(exc.public_message, status_code=exc.status_code, headers=headers)


def create_app(
    registry: ProviderRegistry,
    settings: Optional[Settings] = None,
    translator: Optional[UpstreamTranslationClient] = None,
) -> FastAPI:
    """Build the gateway application.

    Args:
        registry: Provider registry, fully provisioned before serving
        settings: Application settings (defaults to environment settings)
        translator: Upstream client; one is created for the app's lifespan
            when not given. An injected client is left open on shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup: open the pooled upstream client
        owns_translator = translator is None
        app.state.translator = translator or UpstreamTranslationClient.from_settings(settings)
        logger.info(
            "Gateway ready: models=%s, default=%s",
            registry.model_types,
            registry.default_model,
        )

        yield

        # Shutdown: release upstream connections
        if owns_translator:
            await app.state.translator.aclose()

    app = FastAPI(
        title=settings.app_name,
        description="Text translation gateway for chat-completion providers",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.settings = settings

    # Middleware added last runs first: CORS wraps logging wraps the routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CORSHeadersMiddleware)

    app.add_exception_handler(GatewayError, gateway_error_handler)

    # Include routers
    app.include_router(translation.router, tags=["translation"])
    app.include_router(translation.router, prefix="/api/v1", tags=["translation"])
    app.include_router(info.router, prefix="/api", tags=["info"])

    @app.get("/", response_class=HTMLResponse)
    async def root():
        """Static info page."""
        return HOME_PAGE

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
