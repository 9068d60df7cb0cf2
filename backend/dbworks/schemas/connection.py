"""
Connection Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID

from dbworks.models import ConnectionType


class ConnectionCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    db_type: ConnectionType = ConnectionType.POSTGRESQL
    host: Optional[str] = None
    port: Optional[int] = Field(None, ge=1, le=65535)
    database: str = Field(..., min_length=1)
    user: Optional[str] = None
    password: Optional[str] = None


class ConnectionResponse(BaseModel):
    """Registered connection. The password is never returned."""
    id: UUID
    name: str
    db_type: str
    host: Optional[str] = None
    port: Optional[int] = None
    database: str
    user: Optional[str] = None
    organization_id: Optional[UUID] = None
    owner_user_id: Optional[UUID] = None

    class Config:
        from_attributes = True
