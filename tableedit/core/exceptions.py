"""Custom exception classes and the closed error-code taxonomy."""

from enum import Enum

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    """Error codes surfaced to the user."""

    SERVER_UNREACHABLE = "SERVER_UNREACHABLE"
    AUTH_FAILED = "AUTH_FAILED"
    CONNECTION_TIMEOUT = "CONNECTION_TIMEOUT"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    CONNECTION_CANCELLED = "CONNECTION_CANCELLED"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
    INVALID_INPUT = "INVALID_INPUT"


class InvalidIdentifierError(ValueError):
    """Raised when an identifier fails validation before SQL interpolation."""

    def __init__(self, role: str, identifier: object, reason: str):
        self.role = role
        self.identifier = identifier
        message = f"Invalid {role}: {reason}"
        super().__init__(message)


class InvalidNumericError(ValueError):
    """Raised when a paging number is not a non-negative integer."""

    def __init__(self, role: str, value: object):
        self.role = role
        self.value = value
        super().__init__(f"Invalid {role}: must be a non-negative integer")


class CredentialsException(HTTPException):
    """Exception for a missing, invalid or expired session token."""

    def __init__(self, detail: str = "Could not validate session"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class NotFound(HTTPException):
    """Exception for resource not found."""

    def __init__(self, resource: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )


class BadRequest(HTTPException):
    """Exception for bad request."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class UpstreamError(HTTPException):
    """Exception for a failed call to the remote query endpoint."""

    def __init__(self, error: dict, status_code: int = status.HTTP_502_BAD_GATEWAY):
        super().__init__(status_code=status_code, detail=error)
