"""
Schemas Package
"""
from dbworks.schemas.data import (
    TableInfoResponse, ColumnInfoResponse, TableSchemaResponse, RowsResponse
)
from dbworks.schemas.connection import ConnectionCreateRequest, ConnectionResponse
from dbworks.schemas.permission import (
    PermissionName,
    UserConnectionGrantRequest, UserTableGrantRequest,
    GroupConnectionGrantRequest, GroupTableGrantRequest,
    UserConnectionPermissionResponse, UserTablePermissionResponse,
    GroupConnectionPermissionResponse, GroupTablePermissionResponse
)

__all__ = [
    # Connections
    "ConnectionCreateRequest", "ConnectionResponse",
    # Data
    "TableInfoResponse", "ColumnInfoResponse", "TableSchemaResponse", "RowsResponse",
    # Permissions
    "PermissionName",
    "UserConnectionGrantRequest", "UserTableGrantRequest",
    "GroupConnectionGrantRequest", "GroupTableGrantRequest",
    "UserConnectionPermissionResponse", "UserTablePermissionResponse",
    "GroupConnectionPermissionResponse", "GroupTablePermissionResponse",
]
