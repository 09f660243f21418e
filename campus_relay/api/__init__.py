"""
API module - FastAPI application and HTTP handling.
"""
from campus_relay.api.main import app, create_app

__all__ = ["app", "create_app"]
