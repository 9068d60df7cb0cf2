"""
Connection Permissions API
Grant, revoke and list user and group permissions on a connection.
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from dbworks.api.deps import get_current_caller, get_permission_service
from dbworks.schemas import (
    UserConnectionGrantRequest,
    UserTableGrantRequest,
    GroupConnectionGrantRequest,
    GroupTableGrantRequest,
    UserConnectionPermissionResponse,
    UserTablePermissionResponse,
    GroupConnectionPermissionResponse,
    GroupTablePermissionResponse,
)
from dbworks.security import Caller, PermissionLevel
from dbworks.services import PermissionService

router = APIRouter()


# ------------------------------------------------------------------
# User connection permissions
# ------------------------------------------------------------------

@router.post(
    "/{connection_id}/user-permissions",
    response_model=UserConnectionPermissionResponse,
    status_code=status.HTTP_201_CREATED
)
async def grant_user_connection_permission(
    connection_id: UUID,
    request: UserConnectionGrantRequest,
    caller: Caller = Depends(get_current_caller),
    service: PermissionService = Depends(get_permission_service)
):
    """
    Grant (or update) a user's permission on a connection.
    Requires super admin.
    """
    return service.grant_user_connection(
        caller,
        connection_id,
        request.user_id,
        PermissionLevel.from_str(request.permission),
        request.all_tables
    )


@router.get("/{connection_id}/user-permissions", response_model=List[UserConnectionPermissionResponse])
async def list_user_connection_permissions(
    connection_id: UUID,
    caller: Caller = Depends(get_current_caller),
    service: PermissionService = Depends(get_permission_service)
):
    return service.list_user_connection(connection_id)


@router.delete("/{connection_id}/user-permissions/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_user_connection_permission(
    connection_id: UUID,
    user_id: UUID,
    caller: Caller = Depends(get_current_caller),
    service: PermissionService = Depends(get_permission_service)
):
    service.revoke_user_connection(caller, connection_id, user_id)


# ------------------------------------------------------------------
# User table permissions
# ------------------------------------------------------------------

@router.post(
    "/{connection_id}/user-permissions/{user_id}/tables",
    response_model=UserTablePermissionResponse,
    status_code=status.HTTP_201_CREATED
)
async def grant_user_table_permission(
    connection_id: UUID,
    user_id: UUID,
    request: UserTableGrantRequest,
    caller: Caller = Depends(get_current_caller),
    service: PermissionService = Depends(get_permission_service)
):
    return service.grant_user_table(
        caller,
        connection_id,
        user_id,
        request.table_name,
        PermissionLevel.from_str(request.permission)
    )


@router.get(
    "/{connection_id}/user-permissions/{user_id}/tables",
    response_model=List[UserTablePermissionResponse]
)
async def list_user_table_permissions(
    connection_id: UUID,
    user_id: UUID,
    caller: Caller = Depends(get_current_caller),
    service: PermissionService = Depends(get_permission_service)
):
    return service.list_user_table(connection_id, user_id)


@router.delete(
    "/{connection_id}/user-permissions/{user_id}/tables/{table}",
    status_code=status.HTTP_204_NO_CONTENT
)
async def revoke_user_table_permission(
    connection_id: UUID,
    user_id: UUID,
    table: str,
    caller: Caller = Depends(get_current_caller),
    service: PermissionService = Depends(get_permission_service)
):
    service.revoke_user_table(caller, connection_id, user_id, table)


# ------------------------------------------------------------------
# Group connection permissions
# ------------------------------------------------------------------

@router.post(
    "/{connection_id}/group-permissions",
    response_model=GroupConnectionPermissionResponse,
    status_code=status.HTTP_201_CREATED
)
async def grant_group_connection_permission(
    connection_id: UUID,
    request: GroupConnectionGrantRequest,
    caller: Caller = Depends(get_current_caller),
    service: PermissionService = Depends(get_permission_service)
):
    """
    Grant (or update) a group's permission on a connection.
    Requires super admin.
    """
    return service.grant_group_connection(
        caller,
        connection_id,
        request.group_id,
        PermissionLevel.from_str(request.permission),
        request.all_tables
    )


@router.get("/{connection_id}/group-permissions", response_model=List[GroupConnectionPermissionResponse])
async def list_group_connection_permissions(
    connection_id: UUID,
    caller: Caller = Depends(get_current_caller),
    service: PermissionService = Depends(get_permission_service)
):
    return service.list_group_connection(connection_id)


@router.delete("/{connection_id}/group-permissions/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_group_connection_permission(
    connection_id: UUID,
    group_id: UUID,
    caller: Caller = Depends(get_current_caller),
    service: PermissionService = Depends(get_permission_service)
):
    service.revoke_group_connection(caller, connection_id, group_id)


# ------------------------------------------------------------------
# Group table permissions
# ------------------------------------------------------------------

@router.post(
    "/{connection_id}/group-permissions/{group_id}/tables",
    response_model=GroupTablePermissionResponse,
    status_code=status.HTTP_201_CREATED
)
async def grant_group_table_permission(
    connection_id: UUID,
    group_id: UUID,
    request: GroupTableGrantRequest,
    caller: Caller = Depends(get_current_caller),
    service: PermissionService = Depends(get_permission_service)
):
    return service.grant_group_table(
        caller,
        connection_id,
        group_id,
        request.table_name,
        PermissionLevel.from_str(request.permission)
    )


@router.get(
    "/{connection_id}/group-permissions/{group_id}/tables",
    response_model=List[GroupTablePermissionResponse]
)
async def list_group_table_permissions(
    connection_id: UUID,
    group_id: UUID,
    caller: Caller = Depends(get_current_caller),
    service: PermissionService = Depends(get_permission_service)
):
    return service.list_group_table(connection_id, group_id)


@router.delete(
    "/{connection_id}/group-permissions/{group_id}/tables/{table}",
    status_code=status.HTTP_204_NO_CONTENT
)
async def revoke_group_table_permission(
    connection_id: UUID,
    group_id: UUID,
    table: str,
    caller: Caller = Depends(get_current_caller),
    service: PermissionService = Depends(get_permission_service)
):
    service.revoke_group_table(caller, connection_id, group_id, table)
