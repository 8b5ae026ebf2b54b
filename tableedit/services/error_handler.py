"""Mapping of HTTP, network and server-reported failures onto user errors."""

import logging
import re
from typing import Any, Optional

import httpx

from tableedit.core.exceptions import ErrorCode
from tableedit.schemas.errors import UserError

logger = logging.getLogger(__name__)

ERROR_MESSAGES = {
    ErrorCode.SERVER_UNREACHABLE: (
        "Cannot reach server. Please verify the server address and that the database is running."
    ),
    ErrorCode.AUTH_FAILED: "Authentication failed. Please check your username and password.",
    ErrorCode.CONNECTION_TIMEOUT: "Connection timed out. The server may be busy or unreachable.",
    ErrorCode.CONNECTION_FAILED: "Connection failed. Please check your network and server settings.",
    ErrorCode.CONNECTION_CANCELLED: "Operation cancelled.",
    ErrorCode.CONSTRAINT_VIOLATION: "The change violates a table constraint.",
    ErrorCode.INVALID_INPUT: "Invalid input provided. Please check your data and try again.",
}

AUTH_WORDING = ("authentication", "unauthorized", "password")

CONSTRAINT_WORDING = re.compile(
    r"unique|foreign key|constraint|required field|SQLCODE[:=]?\s*<?\s*-(119|120|121|108)\b",
    re.IGNORECASE,
)


def create_error(
    code: ErrorCode,
    context: str,
    message: Optional[str] = None,
    recoverable: bool = True,
) -> UserError:
    """Build a UserError, falling back to the standard message for the code."""
    return UserError(
        message=message or ERROR_MESSAGES[code],
        code=code,
        recoverable=recoverable,
        context=context,
    )


def from_status(status_code: int, context: str) -> Optional[UserError]:
    """Map an HTTP status to a user error; None for 2xx."""
    if 200 <= status_code < 300:
        return None
    if status_code in (401, 403):
        return create_error(ErrorCode.AUTH_FAILED, context)
    if status_code == 404:
        return create_error(ErrorCode.SERVER_UNREACHABLE, context)
    return create_error(
        ErrorCode.CONNECTION_FAILED,
        context,
        f"Server returned status {status_code}",
    )


def from_response_body(body: Any, context: str) -> Optional[UserError]:
    """
    Map the errors reported in a response body.

    Args:
        body: Decoded JSON body, ``{"status": {"errors": [{"error": ...}]}}``
        context: Operation that issued the request

    Returns:
        UserError for the first reported error, or None when there is none
    """
    if not isinstance(body, dict):
        return None
    status = body.get("status") or {}
    errors = status.get("errors") if isinstance(status, dict) else None
    if not errors:
        return None

    first = errors[0]
    text = str(first.get("error", "") if isinstance(first, dict) else first).strip()
    lowered = text.lower()

    if any(word in lowered for word in AUTH_WORDING):
        return create_error(ErrorCode.AUTH_FAILED, context)

    if CONSTRAINT_WORDING.search(text):
        return create_error(ErrorCode.CONSTRAINT_VIOLATION, context, text or None)

    return create_error(ErrorCode.INVALID_INPUT, context, text or None)


def from_exception(exc: Exception, context: str) -> UserError:
    """Map an httpx exception raised while sending a request."""
    if isinstance(exc, httpx.TimeoutException):
        return create_error(ErrorCode.CONNECTION_TIMEOUT, context)
    if isinstance(exc, httpx.ConnectError):
        return create_error(ErrorCode.SERVER_UNREACHABLE, context)

    logger.warning(f"{context}: request failed: {type(exc).__name__}")
    return create_error(ErrorCode.CONNECTION_FAILED, context)
