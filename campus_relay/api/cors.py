"""
CORS handling for the browser client.

The relay is called cross-origin from the campus web app with the
Supabase client's header set. Every response carries the allow headers,
and every OPTIONS request is answered as a preflight with 204 and no body.

Written as plain ASGI middleware: the chat route watches the `receive`
channel for the client hanging up, so nothing in front of it may replace
that channel.
"""
from starlette.datastructures import MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


class RelayCORSMiddleware:
    """Answer preflights directly and add CORS headers to everything else."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        if scope["method"] == "OPTIONS":
            response = Response(status_code=204, headers=CORS_HEADERS)
            return await response(scope, receive, send)

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.update(CORS_HEADERS)
            await send(message)

        await self.app(scope, receive, send_with_cors)
