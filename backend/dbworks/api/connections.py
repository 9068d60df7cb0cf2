"""
Connections API
Register, list and remove data source connections.
"""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from dbworks.api.deps import get_connection_service, get_current_caller
from dbworks.schemas import ConnectionCreateRequest, ConnectionResponse
from dbworks.security import Caller
from dbworks.services import ConnectionService

router = APIRouter()


@router.post("", response_model=ConnectionResponse, status_code=status.HTTP_201_CREATED)
async def create_connection(
    request: ConnectionCreateRequest,
    caller: Caller = Depends(get_current_caller),
    service: ConnectionService = Depends(get_connection_service)
):
    """
    Connect to a database and register it.

    Callers in an organization must be super admins and create an
    organization connection; other callers create a personal one.
    """
    return service.create(caller, request)


@router.get("", response_model=List[ConnectionResponse])
async def list_connections(
    scope: Optional[str] = Query(None, description='"personal" or "org:<organization id>"'),
    caller: Caller = Depends(get_current_caller),
    service: ConnectionService = Depends(get_connection_service)
):
    return service.list(caller, scope)


@router.delete("/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_connection(
    connection_id: UUID,
    caller: Caller = Depends(get_current_caller),
    service: ConnectionService = Depends(get_connection_service)
):
    """Unregister a connection and delete its saved row. Requires super admin."""
    service.delete(caller, connection_id)
