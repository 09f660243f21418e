"""
Request and Response models for the Chat API.

These Pydantic models define the contract between the browser client
and the relay:
- ChatRequest: one chat turn (message + prior history)
- ChatResponse: the generated reply and which provider produced it
- ErrorResponse: the body of every non-200 answer
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HistoryMessage(BaseModel):
    """
    One prior message of the conversation as sent by the client.

    Only `role` and `content` are forwarded to providers; any other keys
    the client includes (ids, timestamps) are dropped.
    """
    model_config = ConfigDict(extra="ignore")

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """
    Request model for POST /chat.

    Attributes:
        message: The new user message. Must be a non-empty string.
        conversation_history: Prior turns, oldest first. Truncation
            (the web client keeps the last 10) happens client-side.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: str = Field(
        ...,
        min_length=1,
        description="The user's question",
        examples=["What are the admission routes for CSE?"]
    )
    conversation_history: List[HistoryMessage] = Field(
        default_factory=list,
        alias="conversationHistory",
        description="Previous user/assistant messages, oldest first"
    )

    @field_validator("conversation_history", mode="before")
    @classmethod
    def _null_history_is_empty(cls, value):
        return [] if value is None else value


class ChatResponse(BaseModel):
    """Response model for a successful POST /chat."""
    response: str = Field(
        ...,
        description="The assistant's reply, verbatim from the provider"
    )
    provider: Literal["primary", "secondary"] = Field(
        ...,
        description="Which provider produced the reply"
    )


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
    details: Optional[str] = None
    status: Optional[int] = None


class HealthResponse(BaseModel):
    """Response model for the /health endpoints."""
    status: str = Field(default="healthy")
    version: str
    providers: List[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
