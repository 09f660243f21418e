"""
Audit Middleware - Request/response logging for the relay.

Logs one line per request with method, path, status, duration, and
client address, and tags every response with a request id and timing.
Request bodies and Authorization headers are never logged.

Both middlewares are plain ASGI callables that only wrap `send`; the
`receive` channel reaches the routes untouched so a client disconnect
is still visible to the chat route.
"""
import time
import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from campus_relay.core.logging_config import get_logger

logger = get_logger(__name__)

QUIET_PATHS = ("/health", "/health/ready")


class AuditMiddleware:
    """Log every request and stamp X-Request-ID / X-Response-Time headers."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        start_time = time.perf_counter()
        request_id = Headers(scope=scope).get("x-request-id") or uuid.uuid4().hex[:12]
        scope.setdefault("state", {})["request_id"] = request_id

        method = scope["method"]
        path = scope["path"]
        client = scope.get("client")
        client_ip = client[0] if client else "unknown"
        status_code = 500

        async def send_with_audit(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                duration = time.perf_counter() - start_time
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id
                headers["X-Response-Time"] = f"{duration:.3f}s"
            await send(message)

        try:
            await self.app(scope, receive, send_with_audit)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(
                f"REQUEST FAILED: {method} {path} id={request_id} "
                f"client={client_ip} duration={duration:.3f}s error={e}"
            )
            raise

        duration = time.perf_counter() - start_time
        self._log_request(method, path, status_code, duration, client_ip, request_id)

    def _log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration: float,
        client_ip: str,
        request_id: str,
    ) -> None:
        # Health probes and CORS preflights would drown out chat traffic
        if path in QUIET_PATHS or method == "OPTIONS":
            logger.debug(f"{method} {path} status={status_code} duration={duration:.3f}s")
            return

        if status_code >= 500:
            log_fn = logger.error
        elif status_code >= 400:
            log_fn = logger.warning
        else:
            log_fn = logger.info

        log_fn(
            f"REQUEST: {method} {path} status={status_code} "
            f"duration={duration:.3f}s client={client_ip} id={request_id}"
        )


class SecurityHeadersMiddleware:
    """
    Add hardening headers to every response.

    The relay only serves JSON, so framing and MIME sniffing are disabled
    outright.
    """

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "no-referrer",
        "Cache-Control": "no-store",
    }

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.update(self.HEADERS)
            await send(message)

        await self.app(scope, receive, send_with_headers)
