"""
Custom Exceptions - Relay error taxonomy.

Every non-success outcome of a chat turn is one of these exceptions.
Each carries the HTTP status it maps to and renders the wire error body
`{"error": ..., "details"?: ..., "status"?: ...}`. The API layer turns
them into JSON responses through registered exception handlers.

Buckets:
- Client errors (401, 400): the caller must fix the request
- Upstream transient (429, 402, 503): retry later
- Upstream hard (echoed status, 500, 502): operator must fix a provider
- Fatal (500): the deployment has no provider credentials at all
"""
from typing import Any, Dict, Optional


class RelayError(Exception):
    """
    Base exception for all relay outcomes other than success.

    Subclass this for specific error types.
    """
    status_code: int = 500
    category: str = "internal"
    default_message: str = "An error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.upstream_status = upstream_status

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the error response body, omitting unset fields."""
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        if self.upstream_status is not None:
            body["status"] = self.upstream_status
        return body


class ServiceNotConfiguredError(RelayError):
    """Raised when no provider credential is configured at all."""
    status_code = 500
    category = "fatal"
    default_message = "AI service not configured. Please contact administrator."


class UnauthorizedError(RelayError):
    """Raised when the bearer token is missing or fails verification."""
    status_code = 401
    category = "client"
    default_message = "Unauthorized"


class BadRequestError(RelayError):
    """Raised when the request body is not a valid chat turn."""
    status_code = 400
    category = "client"
    default_message = "Message is required"


class UpstreamHardFailureError(RelayError):
    """
    Raised when a provider fails in a way switching providers won't fix.

    The response status is chosen per attempt: the primary echoes the
    upstream status, the secondary answers 500, and a malformed upstream
    body answers 502.
    """
    category = "upstream_hard"
    default_message = "AI service error. Please try again."

    def __init__(
        self,
        status_code: int,
        message: Optional[str] = None,
        details: Optional[str] = None,
        upstream_status: Optional[int] = None,
        provider: Optional[str] = None,
    ):
        super().__init__(message, details=details, upstream_status=upstream_status)
        self.status_code = status_code
        self.provider = provider


class RateLimitedError(RelayError):
    """Raised when the last provider in the chain rate-limits the request."""
    status_code = 429
    category = "upstream_transient"
    default_message = "Rate limit exceeded. Please try again in a moment."


class CreditsExhaustedError(RelayError):
    """Raised when the last provider in the chain reports no credits left."""
    status_code = 402
    category = "upstream_transient"
    default_message = "AI credits exhausted. Please add credits to your workspace."


class AllProvidersFailedError(RelayError):
    """Raised when every configured provider failed without a single cause."""
    status_code = 503
    category = "upstream_transient"
    default_message = "No AI provider could fulfill the request."


class ClientDisconnectedError(RelayError):
    """Raised when the caller went away before the relay finished."""
    status_code = 499
    category = "client"
    default_message = "Client closed request"
