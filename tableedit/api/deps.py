"""API dependencies."""

from functools import lru_cache
from typing import Annotated, Any, Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tableedit.core.exceptions import CredentialsException, ErrorCode, UpstreamError
from tableedit.core.security import decode_session_token
from tableedit.schemas.errors import OperationResult
from tableedit.services.session_manager import Session, SessionManager

bearer_scheme = HTTPBearer(auto_error=False)

# HTTP status for failures reported by the remote query endpoint
UPSTREAM_STATUS = {
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CONSTRAINT_VIOLATION: status.HTTP_409_CONFLICT,
    ErrorCode.CONNECTION_TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
}


@lru_cache()
def get_session_manager() -> SessionManager:
    """Get the process-wide session manager."""
    return SessionManager()


Sessions = Annotated[SessionManager, Depends(get_session_manager)]


async def get_current_session(
    sessions: Sessions,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Session:
    """Resolve the bearer token to a live session."""
    if credentials is None:
        raise CredentialsException("Not authenticated")

    session_id = decode_session_token(credentials.credentials)
    if session_id is None:
        raise CredentialsException()

    session = await sessions.get_session(session_id)
    if session is None:
        raise CredentialsException("Session expired or ended")
    return session


CurrentSession = Annotated[Session, Depends(get_current_session)]


def unwrap(result: OperationResult) -> Any:
    """Return the result data, or raise UpstreamError for a failed result."""
    if result.success:
        return result.data
    error = result.error
    raise UpstreamError(
        error.model_dump(mode="json"),
        status_code=UPSTREAM_STATUS.get(error.code, status.HTTP_502_BAD_GATEWAY),
    )
