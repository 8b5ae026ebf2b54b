"""User-facing error and operation result schemas."""

from typing import Any, Optional

from pydantic import BaseModel

from tableedit.core.exceptions import ErrorCode


class UserError(BaseModel):
    """Error as presented to the user."""

    message: str
    code: ErrorCode
    recoverable: bool = True
    context: str


class OperationResult(BaseModel):
    """Result of every transport, metadata and executor call.

    Exactly one of ``data`` (on success) or ``error`` (on failure) is meaningful.
    """

    success: bool
    data: Any = None
    error: Optional[UserError] = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: UserError) -> "OperationResult":
        return cls(success=False, error=error)
