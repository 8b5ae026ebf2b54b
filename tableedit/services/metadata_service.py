"""Namespace, table and column metadata retrieval."""

import logging
from typing import Any, List, Optional

from tableedit.schemas.errors import OperationResult
from tableedit.schemas.table import ColumnInfo, TableSchema
from tableedit.services.transport import TransportClient
from tableedit.sql.identifiers import parse_qualified_table_name

logger = logging.getLogger(__name__)

TABLES_QUERY = """
    SELECT TABLE_SCHEMA, TABLE_NAME
    FROM INFORMATION_SCHEMA.TABLES
    WHERE TABLE_TYPE = 'BASE TABLE'
    ORDER BY TABLE_SCHEMA, TABLE_NAME
"""

COLUMNS_QUERY = """
    SELECT
        COLUMN_NAME,
        DATA_TYPE,
        IS_NULLABLE,
        CHARACTER_MAXIMUM_LENGTH,
        NUMERIC_PRECISION,
        NUMERIC_SCALE,
        IS_IDENTITY,
        IS_GENERATED
    FROM INFORMATION_SCHEMA.COLUMNS
    WHERE TABLE_SCHEMA = ? AND TABLE_NAME = ?
    ORDER BY ORDINAL_POSITION
"""


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def column_from_row(row: Any) -> Optional[ColumnInfo]:
    """Build a ColumnInfo from an INFORMATION_SCHEMA.COLUMNS row, None if unusable."""
    if not isinstance(row, dict):
        return None
    name = row.get("COLUMN_NAME")
    data_type = row.get("DATA_TYPE")
    if not isinstance(name, str) or not name or not isinstance(data_type, str):
        logger.debug(f"Skipping column row without name or data type: {row!r}")
        return None

    return ColumnInfo(
        name=name,
        data_type=data_type,
        nullable=row.get("IS_NULLABLE") == "YES",
        max_length=_optional_int(row.get("CHARACTER_MAXIMUM_LENGTH")),
        precision=_optional_int(row.get("NUMERIC_PRECISION")),
        scale=_optional_int(row.get("NUMERIC_SCALE")),
        read_only=row.get("IS_IDENTITY") == "YES" or row.get("IS_GENERATED") == "YES",
    )


class TableMetadataService:
    """Service for namespace, table and schema introspection."""

    def __init__(self, transport: TransportClient):
        self.transport = transport

    async def get_namespaces(self) -> OperationResult:
        """List the namespaces advertised by the server descriptor."""
        result = await self.transport.fetch_server_info(context="getNamespaces")
        if not result.success:
            return result

        namespaces = [ns for ns in result.data.get("namespaces") or [] if isinstance(ns, str)]
        logger.debug(f"Retrieved {len(namespaces)} namespaces")
        return OperationResult.ok(namespaces)

    async def get_tables(self, namespace: str) -> OperationResult:
        """
        List base tables in a namespace.

        Returns:
            OperationResult with ``Schema.Table`` names ordered by schema, then name
        """
        result = await self.transport.execute_query(
            namespace, TABLES_QUERY, context="getTables"
        )
        if not result.success:
            return result

        tables: List[str] = []
        for row in result.data:
            if not isinstance(row, dict):
                continue
            schema_name = row.get("TABLE_SCHEMA")
            table_name = row.get("TABLE_NAME")
            if isinstance(schema_name, str) and isinstance(table_name, str):
                tables.append(f"{schema_name}.{table_name}")

        logger.debug(f"Retrieved {len(tables)} tables from {namespace}")
        return OperationResult.ok(tables)

    async def get_table_schema(self, namespace: str, table_name: str) -> OperationResult:
        """
        Read column metadata for a table.

        Args:
            namespace: Target namespace
            table_name: Qualified (``Schema.Table``) or bare table name

        Returns:
            OperationResult with a TableSchema
        """
        schema_name, base_name = parse_qualified_table_name(table_name)
        result = await self.transport.execute_query(
            namespace,
            COLUMNS_QUERY,
            [schema_name, base_name],
            context="getTableSchema",
        )
        if not result.success:
            return result

        columns = [column for column in map(column_from_row, result.data) if column]
        logger.debug(f"Retrieved schema for {schema_name}.{base_name}: {len(columns)} columns")
        return OperationResult.ok(
            TableSchema(table_name=table_name, namespace=namespace, columns=columns)
        )
