"""
API Routes module - Endpoint definitions.

- chat.py   : The chat relay endpoint
- health.py : Liveness and readiness probes
"""
from campus_relay.api.routes.chat import router as chat_router
from campus_relay.api.routes.health import router as health_router

__all__ = [
    "chat_router",
    "health_router",
]
