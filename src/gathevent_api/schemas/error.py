"""Error response schemas.

All error responses use the same envelope:
{"success": false, "error": {"code": "...", "name": "...", "message": "...", "details": {...}}}.
``details`` only appears when the raiser supplied it. Exception handlers in
handlers.py construct these through ``create_error_response``.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from gathevent_api.exceptions import ErrorCode, code_to_default_message, code_to_status


class ValidationIssue(BaseModel):
    """One field-level validation failure."""

    path: str = Field(description="Dotted location of the invalid field")
    message: str = Field(description="Why the value was rejected")


class ErrorDetail(BaseModel):
    """Inner error object with machine-readable code/name and a human-readable message."""

    code: ErrorCode = Field(description="A machine-readable error code", examples=["BAD_REQUEST"])
    name: str = Field(
        description=(
            "A short, machine-readable identifier for the error, "
            "used as a key for i18n translations"
        ),
        examples=["EmailAlreadyInUse"],
    )
    message: str = Field(description="A human-readable explanation of the error")
    details: dict[str, Any] | None = Field(
        default=None, description="Additional details about the error"
    )


class ErrorResponse(BaseModel):
    """Top-level error envelope returned by all error responses."""

    success: Literal[False] = False
    error: ErrorDetail


def create_error_response(
    code: ErrorCode,
    name: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> ErrorResponse:
    """Assemble the error envelope. ``details`` is left unset when not supplied."""
    fields: dict[str, Any] = {"code": code, "name": name, "message": message}
    if details is not None:
        fields["details"] = details
    return ErrorResponse(success=False, error=ErrorDetail(**fields))


def render_error_response(response: ErrorResponse) -> dict[str, Any]:
    """Dump an envelope to a JSON-ready dict, dropping fields that were never set."""
    return response.model_dump(mode="json", exclude_unset=True)


def error_responses(*codes: ErrorCode) -> dict[int | str, dict[str, Any]]:
    """OpenAPI ``responses`` entries documenting the error envelope for each code.

    Usage:
        @router.post("/things", responses=error_responses(ErrorCode.CONFLICT))
    """
    responses: dict[int | str, dict[str, Any]] = {}
    for code in codes:
        message = code_to_default_message(code)
        responses[code_to_status(code)] = {
            "model": ErrorResponse,
            "description": message,
            "content": {
                "application/json": {
                    "example": {
                        "success": False,
                        "error": {"code": code.value, "name": "HttpError", "message": message},
                    }
                }
            },
        }
    return responses
