"""Pydantic schemas for the command/event boundary and the HTTP API."""

from tableedit.schemas.errors import OperationResult, UserError
from tableedit.schemas.messages import Command, Event
from tableedit.schemas.server import ConnectRequest, ServerSpec, SessionResponse
from tableedit.schemas.table import (
    ColumnInfo,
    FilterCriterion,
    TablePage,
    TableSchema,
)

__all__ = [
    "OperationResult",
    "UserError",
    "Command",
    "Event",
    "ConnectRequest",
    "ServerSpec",
    "SessionResponse",
    "ColumnInfo",
    "FilterCriterion",
    "TablePage",
    "TableSchema",
]
