"""FastAPI middleware for request tracing, observability and response formatting."""

import json
import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.datastructures import QueryParams
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from gathevent_api.handlers import handle_error
from gathevent_api.logging import get_logger

REQUEST_ID_HEADER = "X-Request-ID"
PRETTY_QUERY_PARAM = "pretty"

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add request ID to every request for tracing and write one access log line.

    - Reads X-Request-ID from request headers, or generates a UUID if missing
    - Binds request_id to structlog context (auto-included in all logs)
    - Renders unhandled exceptions into the error envelope here, so 500s carry the header too
    - Adds X-Request-ID to response headers
    - Logs method, path, status and duration once the response is ready

    Usage:
        app.add_middleware(RequestIDMiddleware)
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            response = handle_error(exc)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=_elapsed_ms(started),
        )
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class PrettyJSONMiddleware:
    """Re-indent JSON responses when the query string contains ``?pretty``.

    Pure ASGI: buffers the body of JSON responses for flagged requests only and
    rewrites Content-Length to match. Other requests stream through untouched.

    Usage:
        app.add_middleware(PrettyJSONMiddleware)
    """

    def __init__(self, app: ASGIApp, *, indent: int = 2) -> None:
        self.app = app
        self.indent = indent

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or PRETTY_QUERY_PARAM not in QueryParams(scope["query_string"]):
            await self.app(scope, receive, send)
            return

        start: Message | None = None
        chunks: list[bytes] = []

        async def send_pretty(message: Message) -> None:
            nonlocal start
            if message["type"] == "http.response.start":
                if _is_json(message):
                    start = message
                    return
                await send(message)
                return

            if start is None or message["type"] != "http.response.body":
                await send(message)
                return

            chunks.append(message.get("body", b""))
            if message.get("more_body", False):
                return

            body = self._reindent(b"".join(chunks))
            headers = [(k, v) for k, v in start.get("headers", []) if k.lower() != b"content-length"]
            headers.append((b"content-length", str(len(body)).encode()))
            await send({**start, "headers": headers})
            await send({"type": "http.response.body", "body": body})

        await self.app(scope, receive, send_pretty)

    def _reindent(self, body: bytes) -> bytes:
        try:
            data = json.loads(body)
        except ValueError:
            return body
        return json.dumps(data, indent=self.indent, ensure_ascii=False).encode("utf-8")


def _is_json(start: Message) -> bool:
    for key, value in start.get("headers", []):
        if key.lower() == b"content-type":
            return value.split(b";")[0].strip().lower() == b"application/json"
    return False
