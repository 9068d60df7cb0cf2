"""
API Dependencies
Caller identification and service wiring for the routers.
"""
import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from dbworks.connections import ConnectionRegistry
from dbworks.database import get_app_db
from dbworks.models import AppUser
from dbworks.security import Caller, GrantStore, PermissionResolver, SqlAlchemyGrantStore
from dbworks.core.crypto import Encryptor
from dbworks.services import ConnectionService, DataAccessService, PermissionService


class UnauthorizedError(HTTPException):
    """Unauthorized exception."""
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


async def get_current_caller(
    x_user_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_app_db)
) -> Caller:
    """
    Identify the caller from the X-User-Id header.

    Token authentication is handled upstream; this only maps an already
    authenticated user id to its role.
    """
    if not x_user_id:
        raise UnauthorizedError("Missing X-User-Id header")

    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError:
        raise UnauthorizedError("Invalid X-User-Id header")

    user = db.query(AppUser).filter(AppUser.id == user_id).first()
    if not user:
        raise UnauthorizedError("User not found")

    return Caller.from_user(user)


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


def get_encryptor(request: Request) -> Optional[Encryptor]:
    return request.app.state.encryptor


def get_grant_store(db: Session = Depends(get_app_db)) -> GrantStore:
    return SqlAlchemyGrantStore(db)


def get_resolver(grant_store: GrantStore = Depends(get_grant_store)) -> PermissionResolver:
    return PermissionResolver(grant_store)


def get_data_service(
    resolver: PermissionResolver = Depends(get_resolver),
    registry: ConnectionRegistry = Depends(get_registry)
) -> DataAccessService:
    return DataAccessService(resolver, registry)


def get_permission_service(grant_store: GrantStore = Depends(get_grant_store)) -> PermissionService:
    return PermissionService(grant_store)


def get_connection_service(
    db: Session = Depends(get_app_db),
    registry: ConnectionRegistry = Depends(get_registry),
    encryptor: Optional[Encryptor] = Depends(get_encryptor)
) -> ConnectionService:
    return ConnectionService(db, registry, encryptor)
