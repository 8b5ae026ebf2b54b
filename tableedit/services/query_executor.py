"""Paginated reads and single-row mutations."""

import asyncio
import logging
from typing import Any, Iterable, List, Optional, Sequence

from tableedit.config import get_settings
from tableedit.core.exceptions import ErrorCode, InvalidIdentifierError
from tableedit.schemas.errors import OperationResult
from tableedit.schemas.table import FilterCriterion, TablePage, TableSchema
from tableedit.services.error_handler import create_error
from tableedit.services.transport import TransportClient
from tableedit.sql.builder import build_filter_where_clause, build_order_by_clause
from tableedit.sql.identifiers import (
    escape_table_name,
    validate_and_escape_identifier,
    validate_numeric,
)

settings = get_settings()
logger = logging.getLogger(__name__)


def _invalid(error: ValueError, context: str) -> OperationResult:
    logger.warning(f"{context}: validation failed: {error}")
    return OperationResult.fail(
        create_error(ErrorCode.INVALID_INPUT, context, str(error), recoverable=False)
    )


def _require_column(schema: TableSchema, name: str, role: str) -> str:
    """Escape a column name that must exist in the schema."""
    escaped = validate_and_escape_identifier(name, role)
    if schema.get_column(name) is None:
        raise InvalidIdentifierError(role, name, f'"{name}" is not a column of {schema.table_name}')
    return escaped


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


class QueryExecutor:
    """
    Builds and runs the SQL for grid reads and edits.

    Identifiers are validated and escaped before they reach the statement text;
    every value travels as a ``?`` parameter.
    """

    def __init__(self, transport: TransportClient):
        self.transport = transport

    async def get_table_data(
        self,
        schema: TableSchema,
        page_size: int,
        offset: int,
        filters: Iterable[FilterCriterion] = (),
        sort_column: Optional[str] = None,
        sort_direction: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> OperationResult:
        """
        Read one page of rows and the filtered row count.

        Args:
            schema: Schema of the table, also naming its namespace
            page_size: Rows per page (capped at MAX_PAGE_SIZE)
            offset: Rows to skip
            filters: Column filters
            sort_column: Column to order by, or None
            sort_direction: ``asc``, ``desc`` or None
            cancel_event: Optional external cancellation signal

        Returns:
            OperationResult with a TablePage
        """
        context = "getTableData"
        filters = list(filters or ())
        try:
            table = escape_table_name(schema.table_name)
            if not schema.columns:
                raise InvalidIdentifierError("column list", schema.table_name, "table has no columns")
            column_list = ", ".join(
                validate_and_escape_identifier(column.name, "column name")
                for column in schema.columns
            )
            page_size = min(validate_numeric(page_size, "page size"), settings.MAX_PAGE_SIZE)
            offset = validate_numeric(offset, "offset")
            where_clause, params = build_filter_where_clause(filters, schema)
            order_by = build_order_by_clause(sort_column, sort_direction, schema)
        except ValueError as e:
            return _invalid(e, context)

        if offset > 0:
            # %VID numbers the rows of the inner result, after filtering and ordering
            inner = _join(
                f"SELECT TOP {offset + page_size} {column_list} FROM {table}",
                where_clause,
                order_by,
            )
            query = f"SELECT TOP {page_size} {column_list} FROM ({inner}) WHERE %VID > {offset}"
        else:
            query = _join(
                f"SELECT TOP {page_size} {column_list} FROM {table}", where_clause, order_by
            )

        logger.debug(
            f"Fetching {schema.table_name} (page size {page_size}, offset {offset}, "
            f"filters {len(filters)}, sort {sort_column or 'none'})"
        )
        result = await self.transport.execute_query(
            schema.namespace, query, params, context=context, cancel_event=cancel_event
        )
        if not result.success:
            return result

        rows = [row for row in result.data if isinstance(row, dict)]
        total_rows = await self._count_rows(schema.namespace, table, where_clause, params)

        logger.debug(f"Retrieved {len(rows)} of {total_rows} rows from {schema.table_name}")
        return OperationResult.ok(TablePage(rows=rows, total_rows=total_rows))

    async def update_cell(
        self,
        schema: TableSchema,
        pk_column: str,
        pk_value: Any,
        column_name: str,
        new_value: Any,
    ) -> OperationResult:
        """
        Update one column of one row, addressed by primary key only.

        The endpoint reports no affected-row count, so success means the
        statement ran, not that a row matched.

        Returns:
            OperationResult with no data
        """
        context = "updateCell"
        try:
            table = escape_table_name(schema.table_name)
            column = _require_column(schema, column_name, "column name")
            pk = _require_column(schema, pk_column, "primary key column")
        except ValueError as e:
            return _invalid(e, context)

        query = f"UPDATE {table} SET {column} = ? WHERE {pk} = ?"
        logger.debug(f"Updating {schema.table_name}.{column_name} WHERE {pk_column}={pk_value!r}")

        result = await self.transport.execute_query(
            schema.namespace, query, [new_value, pk_value], context=context
        )
        if not result.success:
            return result
        return OperationResult.ok()

    async def insert_row(
        self,
        schema: TableSchema,
        columns: Sequence[str],
        values: Sequence[Any],
    ) -> OperationResult:
        """
        Insert one row.

        The primary-key column and read-only (identity or generated) columns are
        left out so the server assigns them.
        """
        context = "insertRow"
        if len(columns) != len(values):
            return _invalid(ValueError("columns and values must have the same length"), context)

        pk_column = schema.primary_key_column()
        insert_columns: List[str] = []
        insert_values: List[Any] = []
        try:
            table = escape_table_name(schema.table_name)
            for name, value in zip(columns, values):
                escaped = _require_column(schema, name, "column name")
                if name == pk_column or schema.get_column(name).read_only:
                    continue
                insert_columns.append(escaped)
                insert_values.append(value)
        except ValueError as e:
            return _invalid(e, context)

        if insert_columns:
            placeholders = ", ".join("?" for _ in insert_columns)
            query = f"INSERT INTO {table} ({', '.join(insert_columns)}) VALUES ({placeholders})"
        else:
            query = f"INSERT INTO {table} DEFAULT VALUES"

        logger.debug(f"Inserting row into {schema.table_name} with {len(insert_columns)} columns")
        result = await self.transport.execute_query(
            schema.namespace, query, insert_values, context=context
        )
        if not result.success:
            return result
        return OperationResult.ok()

    async def delete_row(
        self,
        schema: TableSchema,
        pk_column: str,
        pk_value: Any,
    ) -> OperationResult:
        """
        Delete the row whose primary key equals ``pk_value``.

        Succeeds with no data even when no row had that key; the endpoint does
        not report a count.
        """
        context = "deleteRow"
        try:
            table = escape_table_name(schema.table_name)
            pk = _require_column(schema, pk_column, "primary key column")
        except ValueError as e:
            return _invalid(e, context)

        query = f"DELETE FROM {table} WHERE {pk} = ?"
        logger.debug(f"Deleting from {schema.table_name} WHERE {pk_column}={pk_value!r}")

        result = await self.transport.execute_query(
            schema.namespace, query, [pk_value], context=context
        )
        if not result.success:
            return result
        return OperationResult.ok()

    async def _count_rows(
        self, namespace: str, table: str, where_clause: str, params: List[str]
    ) -> int:
        """Count rows under the page's filter; 0 when the count cannot be read."""
        query = _join(f"SELECT COUNT(*) AS total FROM {table}", where_clause)
        result = await self.transport.execute_query(
            namespace, query, params, context="getTableData"
        )
        if not result.success or not result.data:
            logger.debug("Row count unavailable, reporting 0")
            return 0

        row = result.data[0]
        if not isinstance(row, dict) or not row:
            return 0
        total = row.get("total", next(iter(row.values())))
        try:
            return int(total or 0)
        except (TypeError, ValueError):
            return 0
