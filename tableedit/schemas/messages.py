"""Command and event payloads exchanged between the grid and the command handler."""

from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from tableedit.schemas.base import WireModel
from tableedit.schemas.table import ColumnInfo, FilterCriterion, SortDirection

# Commands that read a page of rows
READ_COMMANDS = ("requestData", "paginateNext", "paginatePrev", "refresh")

# Commands that load a page; a newer one supersedes any still in flight
PAGE_LOAD_COMMANDS = ("selectTable",) + READ_COMMANDS


class Command(WireModel):
    """Command envelope."""

    command: str = Field(..., min_length=1)
    payload: Dict[str, Any] = Field(default_factory=dict)


class Event(WireModel):
    """Event envelope."""

    event: str
    payload: Dict[str, Any] = Field(default_factory=dict)


# Command payloads


class GetTablesPayload(WireModel):
    namespace: str = Field(..., min_length=1)


class SelectTablePayload(WireModel):
    namespace: str = Field(..., min_length=1)
    table_name: str = Field(..., min_length=1)


class RequestDataPayload(WireModel):
    """Payload shared by requestData, paginateNext, paginatePrev and refresh."""

    page: int = Field(0, ge=0)
    page_size: Optional[int] = Field(None, ge=1)
    filters: List[FilterCriterion] = Field(default_factory=list)
    sort_column: Optional[str] = None
    sort_direction: SortDirection = None


class SaveCellPayload(WireModel):
    row_index: int
    col_index: int
    column_name: str = Field(..., min_length=1)
    value: Any = None
    old_value: Any = None
    pk_column: str = Field(..., min_length=1)
    pk_value: Any
    seq: Optional[int] = None


class InsertRowPayload(WireModel):
    columns: List[str]
    values: List[Any]
    new_row_index: Optional[int] = None
    row_id: Optional[int] = None

    @model_validator(mode="after")
    def check_lengths(self) -> "InsertRowPayload":
        if len(self.columns) != len(self.values):
            raise ValueError("columns and values must have the same length")
        return self


class DeleteRowPayload(WireModel):
    primary_key_column: str = Field(..., min_length=1)
    primary_key_value: Any
    row_index: Optional[int] = None


# Event payloads


class ResultError(WireModel):
    message: str
    code: str


class TableSchemaEvent(WireModel):
    table_name: str
    namespace: str
    columns: List[ColumnInfo]


class TableDataEvent(WireModel):
    table_name: str
    namespace: str
    rows: List[Dict[str, Any]]
    total_rows: int
    page: int
    page_size: int


class TableLoadingEvent(WireModel):
    loading: bool
    context: str


class SaveCellResult(WireModel):
    success: bool
    row_index: int
    col_index: int
    column_name: str
    old_value: Any = None
    new_value: Any = None
    primary_key_value: Any = None
    seq: Optional[int] = None
    error: Optional[ResultError] = None


class InsertRowResult(WireModel):
    success: bool
    new_row_index: Optional[int] = None
    row_id: Optional[int] = None
    error: Optional[ResultError] = None


class DeleteRowResult(WireModel):
    success: bool
    row_index: Optional[int] = None
    error: Optional[ResultError] = None


class ErrorEvent(WireModel):
    message: str
    code: str
    recoverable: bool = True
    context: str


class CommandResponse(WireModel):
    """Events produced by one command."""

    events: List[Event] = Field(default_factory=list)
