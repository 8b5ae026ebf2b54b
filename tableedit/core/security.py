"""Session token helpers and basic-auth header construction."""

import base64
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from tableedit.config import get_settings

settings = get_settings()


def basic_auth_header(username: str, password: str) -> str:
    """Build an HTTP Basic Authorization header value.

    The password is only ever used here and is never stored by the caller.
    """
    credentials = f"{username}:{password}".encode("utf-8")
    return "Basic " + base64.b64encode(credentials).decode("ascii")


def create_session_token(
    session_id: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed token that carries a session id."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.SESSION_TIMEOUT_MINUTES)
    )
    to_encode = {"sid": session_id, "exp": expire}
    return jwt.encode(
        to_encode,
        settings.SESSION_SECRET_KEY,
        algorithm=settings.SESSION_ALGORITHM,
    )


def decode_session_token(token: str) -> Optional[str]:
    """Decode a session token and return its session id, or None if invalid."""
    try:
        payload = jwt.decode(
            token,
            settings.SESSION_SECRET_KEY,
            algorithms=[settings.SESSION_ALGORITHM],
        )
    except JWTError:
        return None
    session_id = payload.get("sid")
    return session_id if isinstance(session_id, str) else None
