"""Translate validator-native failures into field-level issues.

Best effort: if the failure can't be read as a list of (path, message) pairs,
the raw message text is returned instead. Translation must never raise, since
it runs while a validation failure is already being reported.
"""

import json
from collections.abc import Iterable, Mapping
from typing import Any

from gathevent_api.schemas.error import ValidationIssue


def _join_path(path: Any) -> str:
    if isinstance(path, str):
        return path
    return ".".join(str(part) for part in path)


def _to_issue(entry: Mapping[str, Any]) -> ValidationIssue:
    """Read one entry in either pydantic shape (loc/msg) or path/message shape."""
    path = entry["loc"] if "loc" in entry else entry["path"]
    message = entry["msg"] if "msg" in entry else entry["message"]
    return ValidationIssue(path=_join_path(path), message=str(message))


def _native_entries(error: Exception) -> Iterable[Mapping[str, Any]]:
    # pydantic.ValidationError and fastapi.exceptions.RequestValidationError
    errors = getattr(error, "errors", None)
    if callable(errors):
        return errors()
    entries = json.loads(str(error))
    if not isinstance(entries, list):
        raise TypeError("validation message is not a list")
    return entries


def parse_validation_error(error: Exception) -> list[ValidationIssue] | str:
    """Return the ordered validation issues, or the raw message if they can't be parsed.

    Example:
        # exc.errors() == [{"loc": ("body", "email"), "msg": "Invalid email", ...}]
        parse_validation_error(exc)
        # [ValidationIssue(path="body.email", message="Invalid email")]
    """
    try:
        return [_to_issue(entry) for entry in _native_entries(error)]
    except Exception:
        return _raw_message(error)


def _raw_message(error: Exception) -> str:
    try:
        return str(error)
    except Exception:
        return type(error).__name__
