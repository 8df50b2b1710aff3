"""Error taxonomy and the domain exception raised by handlers.

Every failure that reaches a client is classified into one of the ``ErrorCode``
members below. Each code owns exactly one HTTP status and one default message;
handlers.py turns an ``ApiError`` (or any other exception) into the standard
error envelope: {"success": false, "error": {"code": "...", "name": "...", ...}}.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from functools import partial
from types import MappingProxyType
from typing import Any


class ErrorCode(StrEnum):
    """Machine-readable error codes. Closed set, one per supported status."""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CONFLICT = "CONFLICT"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


@dataclass(frozen=True)
class ErrorConfig:
    """HTTP status and default human-readable message for one error code."""

    status: int
    message: str


ERROR_CONFIG: Mapping[ErrorCode, ErrorConfig] = MappingProxyType(
    {
        ErrorCode.BAD_REQUEST: ErrorConfig(
            status=400,
            message="The request was invalid or cannot be served.",
        ),
        ErrorCode.UNAUTHORIZED: ErrorConfig(
            status=401,
            message="Authentication is required and has failed or has not yet been provided.",
        ),
        ErrorCode.FORBIDDEN: ErrorConfig(
            status=403,
            message="The request was a valid request, but the server is refusing to respond to it.",
        ),
        ErrorCode.NOT_FOUND: ErrorConfig(
            status=404,
            message="The requested resource could not be found.",
        ),
        ErrorCode.METHOD_NOT_ALLOWED: ErrorConfig(
            status=405,
            message="The request method is not supported for the requested resource.",
        ),
        ErrorCode.CONFLICT: ErrorConfig(
            status=409,
            message=(
                "The request could not be completed due to a conflict "
                "with the current state of the resource."
            ),
        ),
        ErrorCode.TOO_MANY_REQUESTS: ErrorConfig(
            status=429,
            message=(
                "You have sent too many requests in a given amount of time. "
                "Please try again later."
            ),
        ),
        ErrorCode.INTERNAL_SERVER_ERROR: ErrorConfig(
            status=500,
            message="An unexpected error occurred on the server.",
        ),
    }
)


def _build_status_index(config: Mapping[ErrorCode, ErrorConfig]) -> Mapping[int, ErrorCode]:
    """Invert the taxonomy into status -> code.

    If two codes ever share a status, the first one registered in ERROR_CONFIG
    keeps the status; later duplicates are ignored.
    """
    index: dict[int, ErrorCode] = {}
    for code, entry in config.items():
        index.setdefault(entry.status, code)
    return MappingProxyType(index)


STATUS_TO_CODE: Mapping[int, ErrorCode] = _build_status_index(ERROR_CONFIG)


def code_to_status(code: ErrorCode) -> int:
    """Return the HTTP status for an error code."""
    return ERROR_CONFIG[code].status


def code_to_default_message(code: ErrorCode) -> str:
    """Return the default human-readable message for an error code."""
    return ERROR_CONFIG[code].message


def status_to_code(status: int) -> ErrorCode:
    """Return the error code for an HTTP status.

    Statuses without a registered code fall back to INTERNAL_SERVER_ERROR so an
    unmappable status never reaches a client.
    """
    return STATUS_TO_CODE.get(status, ErrorCode.INTERNAL_SERVER_ERROR)


class ApiError(Exception):
    """Domain error raised by route handlers and services.

    ``code`` picks the HTTP status and the default message; ``name`` is a short
    identifier clients can key translations on (e.g. "EmailAlreadyInUse").
    All attributes are read-only once the error is constructed.

    Prefer the named constructors::

        raise ApiError.conflict("SlugTaken")
        raise ApiError.not_found("EventNotFound", details={"event_id": event_id})
    """

    def __init__(
        self,
        *,
        code: ErrorCode,
        name: str,
        message: str | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        self._code = ErrorCode(code)
        self._name = name
        self._message = message if message is not None else code_to_default_message(self._code)
        self._details = dict(details) if details is not None else None
        super().__init__(self._message)

    @property
    def code(self) -> ErrorCode:
        return self._code

    @property
    def name(self) -> str:
        return self._name

    @property
    def message(self) -> str:
        return self._message

    @property
    def details(self) -> dict[str, Any] | None:
        # Copy so callers can't mutate the error through the returned dict
        return dict(self._details) if self._details is not None else None

    @property
    def status_code(self) -> int:
        return code_to_status(self._code)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self._code.value!r}, name={self._name!r})"

    def __reduce__(self) -> tuple[Any, tuple[()]]:
        # Keyword-only __init__: the default Exception pickling would call cls(message)
        rebuild = partial(
            type(self),
            code=self._code,
            name=self._name,
            message=self._message,
            details=self._details,
        )
        return rebuild, ()

    @classmethod
    def bad_request(
        cls, name: str, message: str | None = None, details: Mapping[str, Any] | None = None
    ) -> "ApiError":
        return cls(code=ErrorCode.BAD_REQUEST, name=name, message=message, details=details)

    @classmethod
    def unauthorized(
        cls, name: str, message: str | None = None, details: Mapping[str, Any] | None = None
    ) -> "ApiError":
        return cls(code=ErrorCode.UNAUTHORIZED, name=name, message=message, details=details)

    @classmethod
    def forbidden(
        cls, name: str, message: str | None = None, details: Mapping[str, Any] | None = None
    ) -> "ApiError":
        return cls(code=ErrorCode.FORBIDDEN, name=name, message=message, details=details)

    @classmethod
    def not_found(
        cls, name: str, message: str | None = None, details: Mapping[str, Any] | None = None
    ) -> "ApiError":
        return cls(code=ErrorCode.NOT_FOUND, name=name, message=message, details=details)

    @classmethod
    def method_not_allowed(
        cls, name: str, message: str | None = None, details: Mapping[str, Any] | None = None
    ) -> "ApiError":
        return cls(code=ErrorCode.METHOD_NOT_ALLOWED, name=name, message=message, details=details)

    @classmethod
    def conflict(
        cls, name: str, message: str | None = None, details: Mapping[str, Any] | None = None
    ) -> "ApiError":
        return cls(code=ErrorCode.CONFLICT, name=name, message=message, details=details)

    @classmethod
    def too_many_requests(
        cls, name: str, message: str | None = None, details: Mapping[str, Any] | None = None
    ) -> "ApiError":
        return cls(code=ErrorCode.TOO_MANY_REQUESTS, name=name, message=message, details=details)

    @classmethod
    def internal_server_error(
        cls, name: str, message: str | None = None, details: Mapping[str, Any] | None = None
    ) -> "ApiError":
        return cls(
            code=ErrorCode.INTERNAL_SERVER_ERROR, name=name, message=message, details=details
        )
