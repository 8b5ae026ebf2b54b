"""Server connection schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from tableedit.schemas.base import WireModel


class ServerSpec(WireModel):
    """Where the remote query endpoint lives."""

    name: str = "default"
    scheme: Literal["http", "https"] = "http"
    host: str = Field(..., min_length=1)
    port: int = Field(52773, ge=1, le=65535)
    path_prefix: str = ""
    username: Optional[str] = None


class ConnectRequest(BaseModel):
    """Session start request."""

    server: ServerSpec
    username: str = Field(..., min_length=1)
    password: str


class SessionResponse(BaseModel):
    """Session token response."""

    access_token: str
    token_type: str = "bearer"
    server_name: str
