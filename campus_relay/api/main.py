"""
FastAPI Application Entry Point.

This module creates and configures the FastAPI application:
1. Settings and logging initialization
2. Lifespan: shared HTTP client and relay handler
3. Middleware (CORS, security headers, audit)
4. Exception handlers mapping RelayError to JSON responses
5. Router registration

Run with: uvicorn campus_relay.api.main:app --reload
"""
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from campus_relay import __version__
from campus_relay.api.cors import CORS_HEADERS, RelayCORSMiddleware
from campus_relay.api.routes import chat_router, health_router
from campus_relay.core.audit import AuditMiddleware, SecurityHeadersMiddleware
from campus_relay.core.config import Settings, get_settings
from campus_relay.core.exceptions import RelayError
from campus_relay.core.logging_config import get_logger, setup_logging
from campus_relay.services.relay_service import RelayHandler, build_relay_handler

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    handler: Optional[RelayHandler] = None,
) -> FastAPI:
    """
    Build the relay application.

    Args:
        settings: Explicit settings; defaults to the environment
        handler: Prebuilt relay handler. When omitted, the lifespan
            builds one around a pooled httpx.AsyncClient.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name} in {settings.app_env} mode")
        logger.info(f"Providers configured: {settings.configured_providers() or 'none'}")
        if not settings.has_provider_credentials():
            logger.error("No AI provider keys configured; chat requests will fail with 500")

        http_client = None
        if app.state.relay_handler is None:
            http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(settings.provider_timeout_seconds),
                follow_redirects=True,
            )
            app.state.relay_handler = build_relay_handler(settings, http_client)

        yield

        logger.info(f"Shutting down {settings.app_name}")
        if http_client is not None:
            await http_client.aclose()
            app.state.relay_handler = None

    app = FastAPI(
        title="Campus Assistant Chat Relay",
        description="""
        Server-side relay between the campus enquiry web app and hosted
        LLM chat-completion providers.

        - Bearer-authenticated chat turns (Supabase access tokens)
        - Fixed institutional system prompt
        - Primary provider with automatic fallback on transient failures
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.relay_handler = handler

    # Last added runs first: audit wraps everything, CORS sits closest to the routes
    app.add_middleware(RelayCORSMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    if settings.enable_audit_logging:
        app.add_middleware(AuditMiddleware)

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        log_fn = logger.error if exc.status_code >= 500 else logger.info
        log_fn(
            f"{exc.category} error {exc.status_code} {type(exc).__name__}: "
            f"{exc.message} (upstream status={exc.upstream_status})"
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Handle uncaught exceptions.

        This response bypasses the middleware stack, so CORS headers are
        set here directly. Details are only exposed in development.
        """
        logger.exception(f"Unhandled exception: {exc}")
        content = {"error": "An unexpected error occurred"}
        if settings.is_development():
            content["details"] = str(exc)
        return JSONResponse(status_code=500, content=content, headers=CORS_HEADERS)

    app.include_router(health_router)
    app.include_router(chat_router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "Campus Assistant Chat Relay",
            "version": __version__,
            "documentation": "/docs",
            "health": "/health",
        }

    return app


# Initialize logging before serving anything
settings = get_settings()
setup_logging(settings.log_level, settings.log_dir)

app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "campus_relay.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
    )
