"""
Chat Routes - The relay endpoint.

POST /chat takes one chat turn from the campus web app and returns the
assistant's reply. Authentication, body validation, and provider
failover all happen in RelayHandler; this module only moves bytes in
and out and cancels the work when the caller hangs up.
"""
import asyncio
from typing import Awaitable, TypeVar

from fastapi import APIRouter, Depends, Request

from campus_relay.core.exceptions import ClientDisconnectedError
from campus_relay.core.logging_config import get_logger
from campus_relay.models.chat import ChatResponse, ErrorResponse
from campus_relay.services.relay_service import RelayHandler

logger = get_logger(__name__)

T = TypeVar("T")

# How often a slow relay checks whether the caller is still connected
DISCONNECT_POLL_SECONDS = 0.5

router = APIRouter(
    prefix="/chat",
    tags=["Chat"],
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid message"},
        401: {"model": ErrorResponse, "description": "Missing or rejected bearer token"},
        402: {"model": ErrorResponse, "description": "Fallback provider out of credits"},
        429: {"model": ErrorResponse, "description": "Fallback provider rate limited"},
        500: {"model": ErrorResponse, "description": "Not configured or provider hard failure"},
        503: {"model": ErrorResponse, "description": "No provider could answer"},
    }
)


def get_relay_handler(request: Request) -> RelayHandler:
    """Return the handler created by the application lifespan (or injected by tests)."""
    handler = getattr(request.app.state, "relay_handler", None)
    if handler is None:
        raise RuntimeError("Relay handler is not initialized; is the app lifespan running?")
    return handler


async def run_until_disconnected(request: Request, work: Awaitable[T]) -> T:
    """
    Await `work`, cancelling it if the client disconnects first.

    Cancellation propagates into the in-flight provider request, so an
    abandoned chat turn stops consuming upstream quota.

    Raises:
        ClientDisconnectedError: If the caller went away before completion
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("Client disconnected, cancelling in-flight relay")
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
                raise ClientDisconnectedError()
    finally:
        if not task.done():
            task.cancel()


@router.post(
    "",
    response_model=ChatResponse,
    summary="Relay a chat turn to the campus assistant",
    description="""
    Send one user message plus the recent conversation history.

    Requires `Authorization: Bearer <access token>` from the campus web
    app's sign-in. The reply comes from the primary provider when it is
    healthy and from the fallback provider when the primary is rate
    limited, out of credits, or temporarily down.

    Body:
    - `message` (required): the new question
    - `conversationHistory` (optional): prior `{role, content}` messages,
      oldest first, roles `user` or `assistant`
    """
)
async def relay_chat(
    request: Request,
    handler: RelayHandler = Depends(get_relay_handler),
) -> ChatResponse:
    # The body is read raw so that auth is checked before it is validated
    body = await request.body()
    result = await run_until_disconnected(
        request,
        handler.handle(request.headers.get("authorization"), body),
    )
    return ChatResponse(response=result.text, provider=result.provider)
