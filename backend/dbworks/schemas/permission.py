"""
Permission Grant Schemas
"""
from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime
from uuid import UUID

PermissionName = Literal["read", "write", "admin"]


class UserConnectionGrantRequest(BaseModel):
    user_id: UUID
    permission: PermissionName
    all_tables: bool = True


class UserTableGrantRequest(BaseModel):
    table_name: str = Field(..., min_length=1, max_length=200)
    permission: PermissionName


class GroupConnectionGrantRequest(BaseModel):
    group_id: UUID
    permission: PermissionName
    all_tables: bool = True


class GroupTableGrantRequest(BaseModel):
    table_name: str = Field(..., min_length=1, max_length=200)
    permission: PermissionName


class UserConnectionPermissionResponse(BaseModel):
    id: UUID
    connection_id: UUID
    user_id: UUID
    permission: str
    all_tables: bool
    granted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserTablePermissionResponse(BaseModel):
    id: UUID
    connection_id: UUID
    user_id: UUID
    table_name: str
    permission: str
    granted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GroupConnectionPermissionResponse(BaseModel):
    id: UUID
    connection_id: UUID
    group_id: UUID
    permission: str
    all_tables: bool
    granted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GroupTablePermissionResponse(BaseModel):
    id: UUID
    connection_id: UUID
    group_id: UUID
    table_name: str
    permission: str
    granted_at: Optional[datetime] = None

    class Config:
        from_attributes = True
