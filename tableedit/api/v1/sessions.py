"""Session endpoints."""

from fastapi import APIRouter, Response, status

from tableedit.api.deps import CurrentSession, Sessions, unwrap
from tableedit.core.security import create_session_token
from tableedit.schemas.server import ConnectRequest, SessionResponse

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def start_session(request: ConnectRequest, sessions: Sessions) -> SessionResponse:
    """
    Connect to a server and open a session.

    The connection is tested first; a server that cannot be reached or refuses
    the credentials does not get a session.
    """
    session = unwrap(await sessions.start_session(request))
    return SessionResponse(
        access_token=create_session_token(session.session_id),
        server_name=session.server_name,
    )


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(session: CurrentSession, sessions: Sessions) -> Response:
    """End the current session and forget its credentials."""
    await sessions.end_session(session.session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
