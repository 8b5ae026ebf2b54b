"""Namespace and table explorer endpoints."""

from typing import List

from fastapi import APIRouter

from tableedit.api.deps import CurrentSession, unwrap
from tableedit.schemas.table import TableSchema

router = APIRouter(prefix="/namespaces", tags=["tables"])


@router.get("", response_model=List[str])
async def list_namespaces(session: CurrentSession) -> List[str]:
    """List namespaces on the connected server."""
    return unwrap(await session.handler.metadata.get_namespaces())


@router.get("/{namespace}/tables", response_model=List[str])
async def list_tables(namespace: str, session: CurrentSession) -> List[str]:
    """List base tables in a namespace as ``Schema.Table``."""
    return unwrap(await session.handler.metadata.get_tables(namespace))


@router.get("/{namespace}/tables/{table_name}/schema", response_model=TableSchema)
async def get_table_schema(
    namespace: str,
    table_name: str,
    session: CurrentSession,
) -> TableSchema:
    """Get column schema for a table."""
    return unwrap(await session.handler.metadata.get_table_schema(namespace, table_name))
