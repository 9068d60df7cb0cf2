"""
Permission Resolver
Computes the effective access level of a caller on a connection or table.
"""
import uuid
from typing import Tuple

import structlog

from dbworks.security.grant_store import GrantStore
from dbworks.security.permission_level import Caller, PermissionLevel

logger = structlog.get_logger()


class PermissionResolver:
    """
    Resolves grants into a PermissionLevel.

    Nothing is cached: every call reads the current grant rows. A missing
    grant resolves to NONE; only grant store failures raise.
    """

    def __init__(self, grant_store: GrantStore):
        self.grant_store = grant_store

    def resolve_connection_permission(
        self,
        caller: Caller,
        connection_id: uuid.UUID
    ) -> Tuple[PermissionLevel, bool]:
        """
        Resolve (level, all_tables) for the caller on a connection.

        Precedence, first match wins:
            1. super_admin role -> (ADMIN, True)
            2. connection owner -> (ADMIN, True)
            3. user-level grant -> its (level, all_tables), group grants ignored
            4. group-level grants -> max level, all_tables OR-ed across grants
        """
        if caller.is_super_admin:
            return PermissionLevel.ADMIN, True

        if self.grant_store.is_connection_owner(caller.id, connection_id):
            return PermissionLevel.ADMIN, True

        user_grant = self.grant_store.get_user_connection_grant(caller.id, connection_id)
        if user_grant is not None:
            return PermissionLevel.from_str(user_grant.permission), user_grant.all_tables

        group_grants = self.grant_store.get_group_connection_grants(caller.id, connection_id)
        if not group_grants:
            return PermissionLevel.NONE, False

        best_level = max(PermissionLevel.from_str(g.permission) for g in group_grants)
        any_all_tables = any(g.all_tables for g in group_grants)

        logger.debug(
            "connection_permission_from_groups",
            user_id=str(caller.id),
            connection_id=str(connection_id),
            grants=len(group_grants),
            level=best_level.as_str(),
            all_tables=any_all_tables,
        )
        return best_level, any_all_tables

    def resolve_table_permission(
        self,
        caller: Caller,
        connection_id: uuid.UUID,
        table_name: str
    ) -> PermissionLevel:
        """
        Resolve the caller's level on a single table.

        With all_tables=True the connection level is the default and a user
        table grant overrides it (up or down). With all_tables=False an
        explicit user or group table grant is required; the connection level
        only gates access and is not an upper bound.
        """
        if caller.is_super_admin:
            return PermissionLevel.ADMIN

        conn_level, all_tables = self.resolve_connection_permission(caller, connection_id)
        if conn_level == PermissionLevel.NONE:
            return PermissionLevel.NONE

        user_table = self.grant_store.get_user_table_grant(caller.id, connection_id, table_name)
        if user_table is not None:
            return PermissionLevel.from_str(user_table)

        if all_tables:
            return conn_level

        group_table = self.grant_store.get_group_table_grants(caller.id, connection_id, table_name)
        return max(
            (PermissionLevel.from_str(p) for p in group_table),
            default=PermissionLevel.NONE
        )
