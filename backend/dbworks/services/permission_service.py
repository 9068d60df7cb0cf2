"""
Permission Service
Grant, revoke and list the four kinds of permission grants.
"""
import uuid
from typing import List

import structlog
from sqlalchemy.exc import SQLAlchemyError

from dbworks.core.exceptions import BadRequestError, ForbiddenError, InternalError, NotFoundError
from dbworks.models import (
    GroupConnectionPermission,
    GroupTablePermission,
    UserConnectionPermission,
    UserTablePermission,
)
from dbworks.security import Caller, GrantStore, PermissionLevel

logger = structlog.get_logger()


def require_super_admin(caller: Caller, message: str = "Only super admins can manage permissions") -> None:
    if not caller.is_super_admin:
        raise ForbiddenError(message)


class PermissionService:
    """Administration of grants. Listing is open to any caller; changes need super_admin."""

    def __init__(self, grant_store: GrantStore):
        self.grant_store = grant_store

    def _write_failed(self, action: str, e: SQLAlchemyError) -> BadRequestError:
        logger.warning("permission_change_failed", action=action, error=str(e))
        return BadRequestError(f"Failed to {action}: {e}")

    def _read_failed(self, e: SQLAlchemyError) -> InternalError:
        logger.error("permission_list_failed", error=str(e))
        return InternalError(f"Failed to list permissions: {e}")

    # User connection grants

    def grant_user_connection(
        self,
        caller: Caller,
        connection_id: uuid.UUID,
        user_id: uuid.UUID,
        permission: PermissionLevel,
        all_tables: bool = True
    ) -> UserConnectionPermission:
        require_super_admin(caller)
        try:
            return self.grant_store.grant_user_connection_permission(
                connection_id, user_id, permission.as_str(), all_tables
            )
        except SQLAlchemyError as e:
            raise self._write_failed("grant permission", e) from e

    def revoke_user_connection(self, caller: Caller, connection_id: uuid.UUID, user_id: uuid.UUID) -> None:
        require_super_admin(caller)
        try:
            deleted = self.grant_store.revoke_user_connection_permission(connection_id, user_id)
        except SQLAlchemyError as e:
            raise self._write_failed("revoke permission", e) from e
        if not deleted:
            raise NotFoundError("Permission not found")

    def list_user_connection(self, connection_id: uuid.UUID) -> List[UserConnectionPermission]:
        try:
            return self.grant_store.list_user_connection_permissions(connection_id)
        except SQLAlchemyError as e:
            raise self._read_failed(e) from e

    # User table grants

    def grant_user_table(
        self,
        caller: Caller,
        connection_id: uuid.UUID,
        user_id: uuid.UUID,
        table_name: str,
        permission: PermissionLevel
    ) -> UserTablePermission:
        require_super_admin(caller)
        try:
            return self.grant_store.grant_user_table_permission(
                connection_id, user_id, table_name, permission.as_str()
            )
        except SQLAlchemyError as e:
            raise self._write_failed("grant table permission", e) from e

    def revoke_user_table(
        self, caller: Caller, connection_id: uuid.UUID, user_id: uuid.UUID, table_name: str
    ) -> None:
        require_super_admin(caller)
        try:
            deleted = self.grant_store.revoke_user_table_permission(connection_id, user_id, table_name)
        except SQLAlchemyError as e:
            raise self._write_failed("revoke table permission", e) from e
        if not deleted:
            raise NotFoundError("Table permission not found")

    def list_user_table(self, connection_id: uuid.UUID, user_id: uuid.UUID) -> List[UserTablePermission]:
        try:
            return self.grant_store.list_user_table_permissions(connection_id, user_id)
        except SQLAlchemyError as e:
            raise self._read_failed(e) from e

    # Group connection grants

    def grant_group_connection(
        self,
        caller: Caller,
        connection_id: uuid.UUID,
        group_id: uuid.UUID,
        permission: PermissionLevel,
        all_tables: bool = True
    ) -> GroupConnectionPermission:
        require_super_admin(caller)
        try:
            return self.grant_store.grant_group_connection_permission(
                connection_id, group_id, permission.as_str(), all_tables
            )
        except SQLAlchemyError as e:
            raise self._write_failed("grant group permission", e) from e

    def revoke_group_connection(self, caller: Caller, connection_id: uuid.UUID, group_id: uuid.UUID) -> None:
        require_super_admin(caller)
        try:
            deleted = self.grant_store.revoke_group_connection_permission(connection_id, group_id)
        except SQLAlchemyError as e:
            raise self._write_failed("revoke group permission", e) from e
        if not deleted:
            raise NotFoundError("Group permission not found")

    def list_group_connection(self, connection_id: uuid.UUID) -> List[GroupConnectionPermission]:
        try:
            return self.grant_store.list_group_connection_permissions(connection_id)
        except SQLAlchemyError as e:
            raise self._read_failed(e) from e

    # Group table grants

    def grant_group_table(
        self,
        caller: Caller,
        connection_id: uuid.UUID,
        group_id: uuid.UUID,
        table_name: str,
        permission: PermissionLevel
    ) -> GroupTablePermission:
        require_super_admin(caller)
        try:
            return self.grant_store.grant_group_table_permission(
                connection_id, group_id, table_name, permission.as_str()
            )
        except SQLAlchemyError as e:
            raise self._write_failed("grant group table permission", e) from e

    def revoke_group_table(
        self, caller: Caller, connection_id: uuid.UUID, group_id: uuid.UUID, table_name: str
    ) -> None:
        require_super_admin(caller)
        try:
            deleted = self.grant_store.revoke_group_table_permission(connection_id, group_id, table_name)
        except SQLAlchemyError as e:
            raise self._write_failed("revoke group table permission", e) from e
        if not deleted:
            raise NotFoundError("Group table permission not found")

    def list_group_table(self, connection_id: uuid.UUID, group_id: uuid.UUID) -> List[GroupTablePermission]:
        try:
            return self.grant_store.list_group_table_permissions(connection_id, group_id)
        except SQLAlchemyError as e:
            raise self._read_failed(e) from e
