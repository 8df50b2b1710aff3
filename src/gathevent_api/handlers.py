"""Exception handlers: every failure becomes the standard error envelope.

Three entry points, all returning a JSONResponse:

- handle_error: any exception raised while serving a request
- handle_not_found: no route matched the path
- handle_validation_error: request data failed schema validation

register_exception_handlers() wires them into a FastAPI app.
"""

from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import Receive, Scope, Send
from starlette.websockets import WebSocketClose

from gathevent_api.exceptions import (
    ApiError,
    ErrorCode,
    code_to_default_message,
    code_to_status,
    status_to_code,
)
from gathevent_api.logging import get_logger
from gathevent_api.schemas.error import create_error_response, render_error_response
from gathevent_api.validation import parse_validation_error

logger = get_logger(__name__)

HTTP_ERROR_NAME = "HttpError"
VALIDATION_ERROR_NAME = "ValidationError"
VALIDATION_ERROR_MESSAGE = "The request data is invalid."


def _json_response(
    code: ErrorCode,
    name: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the envelope; the status always comes from the code."""
    try:
        content = render_error_response(create_error_response(code, name, message, details))
    except (ValidationError, PydanticSerializationError):
        logger.warning("error_details_not_serializable", code=code.value, name=name)
        content = render_error_response(create_error_response(code, name, message))
    return JSONResponse(status_code=code_to_status(code), content=content, headers=headers)


def _exception_message(exc: BaseException) -> str:
    try:
        return str(exc)
    except Exception:
        return ""


def _http_exception_message(exc: StarletteHTTPException) -> str:
    """The exception's own detail, or "" when it is missing or just the status reason phrase."""
    if not isinstance(exc.detail, str):
        return ""
    try:
        phrase = HTTPStatus(exc.status_code).phrase
    except ValueError:
        phrase = ""
    # Starlette fills a missing detail with the reason phrase
    return "" if exc.detail == phrase else exc.detail


def handle_error(exc: BaseException) -> JSONResponse:
    """Classify any exception and render it.

    Checked in this order, first match wins:
    1. ApiError: raised deliberately by application code
    2. Starlette/FastAPI HTTPException: raised by routing or the framework
    3. anything else: reported as INTERNAL_SERVER_ERROR
    """
    if isinstance(exc, ApiError):
        logger.warning("api_error", code=exc.code.value, name=exc.name)
        return _json_response(exc.code, exc.name, exc.message, exc.details)

    if isinstance(exc, StarletteHTTPException):
        code = status_to_code(exc.status_code)
        message = _http_exception_message(exc) or code_to_default_message(code)
        logger.info("http_error", status=exc.status_code, code=code.value)
        return _json_response(code, HTTP_ERROR_NAME, message, headers=exc.headers)

    logger.exception("unhandled_exception", exc_info=exc)
    code = ErrorCode.INTERNAL_SERVER_ERROR
    message = _exception_message(exc) or code_to_default_message(code)
    return _json_response(code, HTTP_ERROR_NAME, message)


def handle_not_found() -> JSONResponse:
    """Render the envelope for a path that matched no route."""
    code = ErrorCode.NOT_FOUND
    return _json_response(code, HTTP_ERROR_NAME, code_to_default_message(code))


def handle_validation_error(exc: Exception) -> JSONResponse:
    """Render a request-validation failure with its field-level issues."""
    issues = parse_validation_error(exc)
    errors: list[dict[str, Any]] | str
    if isinstance(issues, str):
        errors = issues
    else:
        errors = [issue.model_dump() for issue in issues]
    return _json_response(
        ErrorCode.BAD_REQUEST,
        VALIDATION_ERROR_NAME,
        VALIDATION_ERROR_MESSAGE,
        {"errors": errors},
    )


async def not_found_app(scope: Scope, receive: Receive, send: Send) -> None:
    """ASGI app used as the router default when no route matches."""
    if scope["type"] == "websocket":
        await WebSocketClose()(scope, receive, send)
        return
    response = handle_not_found()
    await response(scope, receive, send)


def register_exception_handlers(app: FastAPI) -> None:
    """Register the error envelope handlers on a FastAPI application.

    ApiError and HTTPException are registered explicitly so they are answered
    by the exception middleware; the bare Exception handler is the last line
    of defense for everything else.
    """

    async def error_handler(request: Request, exc: Exception) -> JSONResponse:
        return handle_error(exc)

    async def validation_handler(request: Request, exc: Exception) -> JSONResponse:
        return handle_validation_error(exc)

    app.add_exception_handler(ApiError, error_handler)
    app.add_exception_handler(StarletteHTTPException, error_handler)
    app.add_exception_handler(RequestValidationError, validation_handler)
    app.add_exception_handler(Exception, error_handler)

    app.router.default = not_found_app
