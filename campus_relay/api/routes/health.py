"""
Health Check Routes - Liveness and readiness probes.

/health answers as long as the process serves HTTP. /health/ready also
requires at least one provider credential, since without one every chat
request fails.
"""
from typing import List

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from campus_relay import __version__
from campus_relay.core.logging_config import get_logger
from campus_relay.models.chat import HealthResponse

logger = get_logger(__name__)

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


def _configured_providers(request: Request) -> List[str]:
    handler = getattr(request.app.state, "relay_handler", None)
    if handler is not None:
        return handler.provider_names
    return request.app.state.settings.configured_providers()


@router.get(
    "",
    response_model=HealthResponse,
    summary="Liveness check",
)
async def health_check(request: Request) -> HealthResponse:
    logger.debug("Health check requested")
    return HealthResponse(
        status="healthy",
        version=__version__,
        providers=_configured_providers(request),
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness check",
    responses={503: {"model": HealthResponse, "description": "No provider configured"}},
)
async def readiness_check(request: Request):
    """Return 503 while no provider credential is configured."""
    providers = _configured_providers(request)
    if not providers:
        logger.warning("Readiness check failed: no AI provider configured")
        body = HealthResponse(status="not_configured", version=__version__, providers=[])
        return JSONResponse(status_code=503, content=body.model_dump(mode="json"))

    return HealthResponse(status="ready", version=__version__, providers=providers)
