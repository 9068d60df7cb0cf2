"""
Grant Store
Read and write access to the four permission grant tables.
"""
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select, exists
from sqlalchemy.orm import Session
import structlog

from dbworks.models import (
    SavedConnection,
    UserConnectionPermission,
    UserTablePermission,
    GroupConnectionPermission,
    GroupTablePermission,
    group_members,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class ConnectionGrant:
    """Raw connection-level grant as stored: permission text plus the all_tables flag."""
    permission: str
    all_tables: bool


class GrantStore(ABC):
    """
    Storage interface the permission resolver and admin service depend on.

    Read methods return raw permission strings; conversion to
    PermissionLevel happens in the resolver.
    """

    # Resolution reads

    @abstractmethod
    def is_connection_owner(self, user_id: uuid.UUID, connection_id: uuid.UUID) -> bool:
        pass

    @abstractmethod
    def get_user_connection_grant(
        self, user_id: uuid.UUID, connection_id: uuid.UUID
    ) -> Optional[ConnectionGrant]:
        pass

    @abstractmethod
    def get_group_connection_grants(
        self, user_id: uuid.UUID, connection_id: uuid.UUID
    ) -> List[ConnectionGrant]:
        """Connection grants of every group the user belongs to."""
        pass

    @abstractmethod
    def get_user_table_grant(
        self, user_id: uuid.UUID, connection_id: uuid.UUID, table_name: str
    ) -> Optional[str]:
        pass

    @abstractmethod
    def get_group_table_grants(
        self, user_id: uuid.UUID, connection_id: uuid.UUID, table_name: str
    ) -> List[str]:
        """Table grants of every group the user belongs to."""
        pass

    # User connection grants

    @abstractmethod
    def grant_user_connection_permission(
        self, connection_id: uuid.UUID, user_id: uuid.UUID, permission: str, all_tables: bool
    ) -> UserConnectionPermission:
        pass

    @abstractmethod
    def revoke_user_connection_permission(self, connection_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        pass

    @abstractmethod
    def list_user_connection_permissions(self, connection_id: uuid.UUID) -> List[UserConnectionPermission]:
        pass

    # User table grants

    @abstractmethod
    def grant_user_table_permission(
        self, connection_id: uuid.UUID, user_id: uuid.UUID, table_name: str, permission: str
    ) -> UserTablePermission:
        pass

    @abstractmethod
    def revoke_user_table_permission(
        self, connection_id: uuid.UUID, user_id: uuid.UUID, table_name: str
    ) -> bool:
        pass

    @abstractmethod
    def list_user_table_permissions(
        self, connection_id: uuid.UUID, user_id: uuid.UUID
    ) -> List[UserTablePermission]:
        pass

    # Group connection grants

    @abstractmethod
    def grant_group_connection_permission(
        self, connection_id: uuid.UUID, group_id: uuid.UUID, permission: str, all_tables: bool
    ) -> GroupConnectionPermission:
        pass

    @abstractmethod
    def revoke_group_connection_permission(self, connection_id: uuid.UUID, group_id: uuid.UUID) -> bool:
        pass

    @abstractmethod
    def list_group_connection_permissions(self, connection_id: uuid.UUID) -> List[GroupConnectionPermission]:
        pass

    # Group table grants

    @abstractmethod
    def grant_group_table_permission(
        self, connection_id: uuid.UUID, group_id: uuid.UUID, table_name: str, permission: str
    ) -> GroupTablePermission:
        pass

    @abstractmethod
    def revoke_group_table_permission(
        self, connection_id: uuid.UUID, group_id: uuid.UUID, table_name: str
    ) -> bool:
        pass

    @abstractmethod
    def list_group_table_permissions(
        self, connection_id: uuid.UUID, group_id: uuid.UUID
    ) -> List[GroupTablePermission]:
        pass


class SqlAlchemyGrantStore(GrantStore):
    """Grant store backed by the app database session."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Resolution reads
    # ------------------------------------------------------------------

    def is_connection_owner(self, user_id, connection_id) -> bool:
        stmt = select(
            exists().where(
                SavedConnection.id == connection_id,
                SavedConnection.owner_user_id == user_id,
            )
        )
        return bool(self.db.execute(stmt).scalar())

    def get_user_connection_grant(self, user_id, connection_id) -> Optional[ConnectionGrant]:
        row = self.db.query(UserConnectionPermission).filter(
            UserConnectionPermission.user_id == user_id,
            UserConnectionPermission.connection_id == connection_id
        ).first()
        if row is None:
            return None
        return ConnectionGrant(permission=row.permission, all_tables=row.all_tables)

    def get_group_connection_grants(self, user_id, connection_id) -> List[ConnectionGrant]:
        rows = self.db.query(GroupConnectionPermission).join(
            group_members,
            group_members.c.group_id == GroupConnectionPermission.group_id
        ).filter(
            group_members.c.user_id == user_id,
            GroupConnectionPermission.connection_id == connection_id
        ).all()
        return [ConnectionGrant(permission=r.permission, all_tables=r.all_tables) for r in rows]

    def get_user_table_grant(self, user_id, connection_id, table_name) -> Optional[str]:
        row = self.db.query(UserTablePermission).filter(
            UserTablePermission.user_id == user_id,
            UserTablePermission.connection_id == connection_id,
            UserTablePermission.table_name == table_name
        ).first()
        return row.permission if row else None

    def get_group_table_grants(self, user_id, connection_id, table_name) -> List[str]:
        rows = self.db.query(GroupTablePermission).join(
            group_members,
            group_members.c.group_id == GroupTablePermission.group_id
        ).filter(
            group_members.c.user_id == user_id,
            GroupTablePermission.connection_id == connection_id,
            GroupTablePermission.table_name == table_name
        ).all()
        return [r.permission for r in rows]

    # ------------------------------------------------------------------
    # User connection grants
    # ------------------------------------------------------------------

    def grant_user_connection_permission(self, connection_id, user_id, permission, all_tables):
        existing = self.db.query(UserConnectionPermission).filter(
            UserConnectionPermission.connection_id == connection_id,
            UserConnectionPermission.user_id == user_id
        ).first()

        if existing:
            existing.permission = permission
            existing.all_tables = all_tables
            grant = existing
        else:
            grant = UserConnectionPermission(
                connection_id=connection_id,
                user_id=user_id,
                permission=permission,
                all_tables=all_tables
            )
            self.db.add(grant)

        self.db.commit()
        self.db.refresh(grant)
        logger.info(
            "user_connection_permission_granted",
            connection_id=str(connection_id),
            user_id=str(user_id),
            permission=permission,
            all_tables=all_tables,
            updated=existing is not None,
        )
        return grant

    def revoke_user_connection_permission(self, connection_id, user_id) -> bool:
        deleted = self.db.query(UserConnectionPermission).filter(
            UserConnectionPermission.connection_id == connection_id,
            UserConnectionPermission.user_id == user_id
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted > 0

    def list_user_connection_permissions(self, connection_id):
        return self.db.query(UserConnectionPermission).filter(
            UserConnectionPermission.connection_id == connection_id
        ).all()

    # ------------------------------------------------------------------
    # User table grants
    # ------------------------------------------------------------------

    def grant_user_table_permission(self, connection_id, user_id, table_name, permission):
        existing = self.db.query(UserTablePermission).filter(
            UserTablePermission.connection_id == connection_id,
            UserTablePermission.user_id == user_id,
            UserTablePermission.table_name == table_name
        ).first()

        if existing:
            existing.permission = permission
            grant = existing
        else:
            grant = UserTablePermission(
                connection_id=connection_id,
                user_id=user_id,
                table_name=table_name,
                permission=permission
            )
            self.db.add(grant)

        self.db.commit()
        self.db.refresh(grant)
        logger.info(
            "user_table_permission_granted",
            connection_id=str(connection_id),
            user_id=str(user_id),
            table=table_name,
            permission=permission,
            updated=existing is not None,
        )
        return grant

    def revoke_user_table_permission(self, connection_id, user_id, table_name) -> bool:
        deleted = self.db.query(UserTablePermission).filter(
            UserTablePermission.connection_id == connection_id,
            UserTablePermission.user_id == user_id,
            UserTablePermission.table_name == table_name
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted > 0

    def list_user_table_permissions(self, connection_id, user_id):
        return self.db.query(UserTablePermission).filter(
            UserTablePermission.connection_id == connection_id,
            UserTablePermission.user_id == user_id
        ).all()

    # ------------------------------------------------------------------
    # Group connection grants
    # ------------------------------------------------------------------

    def grant_group_connection_permission(self, connection_id, group_id, permission, all_tables):
        existing = self.db.query(GroupConnectionPermission).filter(
            GroupConnectionPermission.connection_id == connection_id,
            GroupConnectionPermission.group_id == group_id
        ).first()

        if existing:
            existing.permission = permission
            existing.all_tables = all_tables
            grant = existing
        else:
            grant = GroupConnectionPermission(
                connection_id=connection_id,
                group_id=group_id,
                permission=permission,
                all_tables=all_tables
            )
            self.db.add(grant)

        self.db.commit()
        self.db.refresh(grant)
        logger.info(
            "group_connection_permission_granted",
            connection_id=str(connection_id),
            group_id=str(group_id),
            permission=permission,
            all_tables=all_tables,
            updated=existing is not None,
        )
        return grant

    def revoke_group_connection_permission(self, connection_id, group_id) -> bool:
        deleted = self.db.query(GroupConnectionPermission).filter(
            GroupConnectionPermission.connection_id == connection_id,
            GroupConnectionPermission.group_id == group_id
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted > 0

    def list_group_connection_permissions(self, connection_id):
        return self.db.query(GroupConnectionPermission).filter(
            GroupConnectionPermission.connection_id == connection_id
        ).all()

    # ------------------------------------------------------------------
    # Group table grants
    # ------------------------------------------------------------------

    def grant_group_table_permission(self, connection_id, group_id, table_name, permission):
        existing = self.db.query(GroupTablePermission).filter(
            GroupTablePermission.connection_id == connection_id,
            GroupTablePermission.group_id == group_id,
            GroupTablePermission.table_name == table_name
        ).first()

        if existing:
            existing.permission = permission
            grant = existing
        else:
            grant = GroupTablePermission(
                connection_id=connection_id,
                group_id=group_id,
                table_name=table_name,
                permission=permission
            )
            self.db.add(grant)

        self.db.commit()
        self.db.refresh(grant)
        logger.info(
            "group_table_permission_granted",
            connection_id=str(connection_id),
            group_id=str(group_id),
            table=table_name,
            permission=permission,
            updated=existing is not None,
        )
        return grant

    def revoke_group_table_permission(self, connection_id, group_id, table_name) -> bool:
        deleted = self.db.query(GroupTablePermission).filter(
            GroupTablePermission.connection_id == connection_id,
            GroupTablePermission.group_id == group_id,
            GroupTablePermission.table_name == table_name
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted > 0

    def list_group_table_permissions(self, connection_id, group_id):
        return self.db.query(GroupTablePermission).filter(
            GroupTablePermission.connection_id == connection_id,
            GroupTablePermission.group_id == group_id
        ).all()
