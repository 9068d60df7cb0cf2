"""
Data API Routes
Table introspection and row CRUD on registered connections.
"""
from dataclasses import asdict
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status

from dbworks.api.deps import get_current_caller, get_data_service
from dbworks.connections.datasources import RowsQuery
from dbworks.schemas import RowsResponse, TableInfoResponse, TableSchemaResponse
from dbworks.security import Caller
from dbworks.services import DataAccessService

router = APIRouter()


@router.get("/{connection_id}/tables", response_model=List[TableInfoResponse])
async def list_tables(
    connection_id: UUID,
    caller: Caller = Depends(get_current_caller),
    service: DataAccessService = Depends(get_data_service)
):
    """List base tables of a connection. Requires read on the connection."""
    tables = service.list_tables(caller, connection_id)
    return [asdict(t) for t in tables]


@router.get("/{connection_id}/tables/{table}/schema", response_model=TableSchemaResponse)
async def get_table_schema(
    connection_id: UUID,
    table: str,
    caller: Caller = Depends(get_current_caller),
    service: DataAccessService = Depends(get_data_service)
):
    """Column metadata and primary key of a table."""
    return asdict(service.get_table_schema(caller, connection_id, table))


@router.get("/{connection_id}/tables/{table}/rows", response_model=RowsResponse)
async def list_rows(
    connection_id: UUID,
    table: str,
    page: Optional[int] = Query(None),
    per_page: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
    filter: Optional[str] = Query(None, description="column:op:value"),
    caller: Caller = Depends(get_current_caller),
    service: DataAccessService = Depends(get_data_service)
):
    """
    Paginated rows.

    page and per_page are clamped (page >= 1, per_page 1..100) rather than rejected.
    """
    query = RowsQuery(
        page=page,
        per_page=per_page,
        sort_by=sort_by,
        sort_order=sort_order,
        filter=filter
    )
    return asdict(service.list_rows(caller, connection_id, table, query))


@router.post("/{connection_id}/tables/{table}/rows", status_code=status.HTTP_201_CREATED)
async def create_row(
    connection_id: UUID,
    table: str,
    data: Any = Body(...),
    caller: Caller = Depends(get_current_caller),
    service: DataAccessService = Depends(get_data_service)
) -> Dict[str, Any]:
    """Insert a row. Null fields are left to the column defaults."""
    return service.insert_row(caller, connection_id, table, data)


@router.get("/{connection_id}/tables/{table}/rows/{pk}")
async def get_row(
    connection_id: UUID,
    table: str,
    pk: str,
    caller: Caller = Depends(get_current_caller),
    service: DataAccessService = Depends(get_data_service)
) -> Dict[str, Any]:
    return service.get_row(caller, connection_id, table, pk)


@router.put("/{connection_id}/tables/{table}/rows/{pk}")
async def update_row(
    connection_id: UUID,
    table: str,
    pk: str,
    data: Any = Body(...),
    caller: Caller = Depends(get_current_caller),
    service: DataAccessService = Depends(get_data_service)
) -> Dict[str, Any]:
    return service.update_row(caller, connection_id, table, pk, data)


@router.delete("/{connection_id}/tables/{table}/rows/{pk}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_row(
    connection_id: UUID,
    table: str,
    pk: str,
    caller: Caller = Depends(get_current_caller),
    service: DataAccessService = Depends(get_data_service)
):
    service.delete_row(caller, connection_id, table, pk)
