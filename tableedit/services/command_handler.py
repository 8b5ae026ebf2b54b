"""Routes grid commands to the metadata service and query executor."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from tableedit.config import get_settings
from tableedit.core.exceptions import ErrorCode
from tableedit.schemas.errors import UserError
from tableedit.schemas.messages import (
    DeleteRowPayload,
    DeleteRowResult,
    ErrorEvent,
    Event,
    GetTablesPayload,
    InsertRowPayload,
    InsertRowResult,
    RequestDataPayload,
    ResultError,
    SaveCellPayload,
    SaveCellResult,
    SelectTablePayload,
    TableDataEvent,
    TableLoadingEvent,
    TableSchemaEvent,
)
from tableedit.schemas.table import TableSchema
from tableedit.services.error_handler import create_error
from tableedit.services.metadata_service import TableMetadataService
from tableedit.services.query_executor import QueryExecutor
from tableedit.services.transport import TransportClient

settings = get_settings()
logger = logging.getLogger(__name__)

NO_TABLE_SELECTED = "No table selected"


@dataclass
class ConnectionContext:
    """Browsing context of one connection."""

    namespace: Optional[str] = None
    table_name: Optional[str] = None
    schema: Optional[TableSchema] = None


def error_event(error: UserError) -> Event:
    payload = ErrorEvent(
        message=error.message,
        code=error.code.value,
        recoverable=error.recoverable,
        context=error.context,
    )
    return Event(event="error", payload=payload.to_wire())


def _result_error(error: Optional[UserError]) -> Optional[ResultError]:
    if error is None:
        return None
    return ResultError(message=error.message, code=error.code.value)


def _no_table(context: str) -> UserError:
    return create_error(ErrorCode.INVALID_INPUT, context, NO_TABLE_SELECTED)


class CommandHandler:
    """
    Per-connection command handler.

    ``handle`` never raises for bad input: unknown commands and malformed
    payloads come back as ``error`` events.
    """

    def __init__(self, transport: TransportClient, page_size: Optional[int] = None):
        self.transport = transport
        self.metadata = TableMetadataService(transport)
        self.executor = QueryExecutor(transport)
        self.context = ConnectionContext()
        self.page_size = page_size or settings.DEFAULT_PAGE_SIZE
        self._handlers: Dict[str, Callable[..., Awaitable[List[Event]]]] = {
            "getNamespaces": self._get_namespaces,
            "getTables": self._get_tables,
            "selectTable": self._select_table,
            "requestData": self._read_page,
            "paginateNext": self._read_page,
            "paginatePrev": self._read_page,
            "refresh": self._read_page,
            "saveCell": self._save_cell,
            "insertRow": self._insert_row,
            "deleteRow": self._delete_row,
        }

    @property
    def commands(self) -> List[str]:
        return list(self._handlers)

    async def handle(
        self,
        command: str,
        payload: Optional[Dict[str, Any]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[Event]:
        """
        Run one command.

        Args:
            command: Command name
            payload: Command payload (camelCase or snake_case keys)
            cancel_event: Optional signal that cancels an in-flight read

        Returns:
            Events to deliver, in order
        """
        handler = self._handlers.get(command)
        if handler is None:
            logger.warning(f"Unknown command: {command!r}")
            return [error_event(create_error(ErrorCode.INVALID_INPUT, command, f"Unknown command: {command}"))]

        try:
            return await handler(command, payload or {}, cancel_event)
        except ValidationError as e:
            logger.warning(f"{command}: invalid payload ({e.error_count()} errors)")
            return [
                error_event(
                    create_error(ErrorCode.INVALID_INPUT, command, f"Invalid payload for {command}")
                )
            ]

    async def _get_namespaces(self, command, payload, cancel_event) -> List[Event]:
        result = await self.metadata.get_namespaces()
        if not result.success:
            return [error_event(result.error)]
        return [Event(event="namespaceList", payload={"namespaces": result.data})]

    async def _get_tables(self, command, payload, cancel_event) -> List[Event]:
        request = GetTablesPayload.model_validate(payload)
        self.context.namespace = request.namespace

        result = await self.metadata.get_tables(request.namespace)
        if not result.success:
            return [error_event(result.error)]
        return [
            Event(
                event="tableList",
                payload={"tables": result.data, "namespace": request.namespace},
            )
        ]

    async def _select_table(self, command, payload, cancel_event) -> List[Event]:
        request = SelectTablePayload.model_validate(payload)
        events = [self._loading(True, command)]

        schema_result = await self.metadata.get_table_schema(request.namespace, request.table_name)
        if not schema_result.success:
            events.append(error_event(schema_result.error))
            events.append(self._loading(False, command))
            return events

        if cancel_event is not None and cancel_event.is_set():
            # Superseded while the schema was fetched; the browsing context stays put
            events.append(error_event(create_error(ErrorCode.CONNECTION_CANCELLED, command)))
            events.append(self._loading(False, command))
            return events

        schema: TableSchema = schema_result.data
        self.context = ConnectionContext(
            namespace=request.namespace,
            table_name=request.table_name,
            schema=schema,
        )
        events.append(
            Event(
                event="tableSchema",
                payload=TableSchemaEvent(
                    table_name=schema.table_name,
                    namespace=schema.namespace,
                    columns=schema.columns,
                ).to_wire(),
            )
        )
        events.append(await self._load(schema, 0, self.page_size, RequestDataPayload(), cancel_event))
        events.append(self._loading(False, command))
        return events

    async def _read_page(self, command, payload, cancel_event) -> List[Event]:
        request = RequestDataPayload.model_validate(payload)
        schema = self.context.schema
        if schema is None:
            return [error_event(_no_table(command))]

        page = request.page
        if command == "paginateNext":
            page += 1
        elif command == "paginatePrev":
            page = max(0, page - 1)
        page_size = min(request.page_size or self.page_size, settings.MAX_PAGE_SIZE)

        return [
            self._loading(True, command),
            await self._load(schema, page, page_size, request, cancel_event),
            self._loading(False, command),
        ]

    async def _load(
        self,
        schema: TableSchema,
        page: int,
        page_size: int,
        request: RequestDataPayload,
        cancel_event: Optional[asyncio.Event],
    ) -> Event:
        result = await self.executor.get_table_data(
            schema,
            page_size,
            page * page_size,
            request.filters,
            request.sort_column,
            request.sort_direction,
            cancel_event=cancel_event,
        )
        if not result.success:
            return error_event(result.error)
        return Event(
            event="tableData",
            payload=TableDataEvent(
                table_name=schema.table_name,
                namespace=schema.namespace,
                rows=result.data.rows,
                total_rows=result.data.total_rows,
                page=page,
                page_size=page_size,
            ).to_wire(),
        )

    async def _save_cell(self, command, payload, cancel_event) -> List[Event]:
        request = SaveCellPayload.model_validate(payload)
        schema = self.context.schema
        if schema is None:
            error = _no_table("updateCell")
        else:
            result = await self.executor.update_cell(
                schema, request.pk_column, request.pk_value, request.column_name, request.value
            )
            error = result.error

        return [
            Event(
                event="saveCellResult",
                payload=SaveCellResult(
                    success=error is None,
                    row_index=request.row_index,
                    col_index=request.col_index,
                    column_name=request.column_name,
                    old_value=request.old_value,
                    new_value=request.value,
                    primary_key_value=request.pk_value,
                    seq=request.seq,
                    error=_result_error(error),
                ).to_wire(),
            )
        ]

    async def _insert_row(self, command, payload, cancel_event) -> List[Event]:
        request = InsertRowPayload.model_validate(payload)
        schema = self.context.schema
        if schema is None:
            error = _no_table("insertRow")
        else:
            result = await self.executor.insert_row(schema, request.columns, request.values)
            error = result.error

        return [
            Event(
                event="insertRowResult",
                payload=InsertRowResult(
                    success=error is None,
                    new_row_index=request.new_row_index,
                    row_id=request.row_id,
                    error=_result_error(error),
                ).to_wire(),
            )
        ]

    async def _delete_row(self, command, payload, cancel_event) -> List[Event]:
        request = DeleteRowPayload.model_validate(payload)
        schema = self.context.schema
        if schema is None:
            error = _no_table("deleteRow")
        else:
            result = await self.executor.delete_row(
                schema, request.primary_key_column, request.primary_key_value
            )
            error = result.error

        return [
            Event(
                event="deleteRowResult",
                payload=DeleteRowResult(
                    success=error is None,
                    row_index=request.row_index,
                    error=_result_error(error),
                ).to_wire(),
            )
        ]

    @staticmethod
    def _loading(loading: bool, context: str) -> Event:
        return Event(
            event="tableLoading",
            payload=TableLoadingEvent(loading=loading, context=context).to_wire(),
        )
