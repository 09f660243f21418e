"""
Models module - Pydantic schemas for the relay's HTTP contract.
"""
from campus_relay.models.chat import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    HistoryMessage,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ErrorResponse",
    "HealthResponse",
    "HistoryMessage",
]
