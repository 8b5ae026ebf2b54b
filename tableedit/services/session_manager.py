"""In-memory sessions: one authenticated transport and command handler each."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from tableedit.config import get_settings
from tableedit.schemas.errors import OperationResult
from tableedit.schemas.server import ConnectRequest, ServerSpec
from tableedit.services.command_handler import CommandHandler
from tableedit.services.transport import TransportClient

settings = get_settings()
logger = logging.getLogger(__name__)

TransportFactory = Callable[[ServerSpec, str, str], TransportClient]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    session_id: str
    server_name: str
    transport: TransportClient
    handler: CommandHandler
    last_activity: datetime = field(default_factory=_now)

    def touch(self) -> None:
        self.last_activity = _now()


class SessionManager:
    """
    Owns every live session.

    Credentials live only inside a session's transport; ending or expiring the
    session closes the transport and drops them.
    """

    def __init__(
        self,
        timeout_minutes: Optional[int] = None,
        transport_factory: Optional[TransportFactory] = None,
    ):
        self.timeout = timedelta(minutes=timeout_minutes or settings.SESSION_TIMEOUT_MINUTES)
        self._transport_factory = transport_factory or TransportClient
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def start_session(self, request: ConnectRequest) -> OperationResult:
        """
        Test the connection and, if it works, open a session.

        Returns:
            OperationResult with the new Session, or the connection error
        """
        await self.cleanup_expired()

        transport = self._transport_factory(request.server, request.username, request.password)
        result = await transport.test_connection()
        if not result.success:
            await transport.aclose()
            logger.info(
                f"Connection to {request.server.host}:{request.server.port} refused: "
                f"{result.error.code.value}"
            )
            return result

        session = Session(
            session_id=uuid.uuid4().hex,
            server_name=request.server.name,
            transport=transport,
            handler=CommandHandler(transport),
        )
        self._sessions[session.session_id] = session
        logger.info(f"Session {session.session_id[:8]} started for server {session.server_name}")
        return OperationResult.ok(session)

    async def get_session(self, session_id: str) -> Optional[Session]:
        """Return a live session and mark it active; expired sessions are ended."""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._is_expired(session):
            logger.info(f"Session {session_id[:8]} expired")
            await self.end_session(session_id)
            return None
        session.touch()
        return session

    async def end_session(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        await session.transport.aclose()
        logger.info(f"Session {session_id[:8]} ended")
        return True

    async def cleanup_expired(self) -> int:
        """End every expired session and return how many were ended."""
        expired = [sid for sid, session in self._sessions.items() if self._is_expired(session)]
        for session_id in expired:
            await self.end_session(session_id)
        if expired:
            logger.info(f"Expired {len(expired)} idle session(s)")
        return len(expired)

    async def sweep_forever(self, interval: Optional[float] = None) -> None:
        """Run ``cleanup_expired`` every ``interval`` seconds until cancelled."""
        interval = interval or settings.SESSION_SWEEP_INTERVAL
        while True:
            await asyncio.sleep(interval)
            try:
                await self.cleanup_expired()
            except Exception as e:
                logger.error(f"Session sweep error: {e}", exc_info=True)

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.end_session(session_id)

    def _is_expired(self, session: Session) -> bool:
        return _now() - session.last_activity > self.timeout
