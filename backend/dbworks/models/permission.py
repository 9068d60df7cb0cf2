"""
Permission Grant Models - Per-connection and per-table access control

Each table stores the permission as text ("read", "write", "admin"); the
ordered in-memory form is dbworks.security.PermissionLevel.
"""
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.sql import func

from dbworks.database import Base


class UserConnectionPermission(Base):
    """Grant of a level on a whole connection to a single user."""
    __tablename__ = "user_connection_permissions"
    __table_args__ = (UniqueConstraint("user_id", "connection_id"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("app_users.id", ondelete="CASCADE"), nullable=False, index=True)
    connection_id = Column(Uuid, ForeignKey("saved_connections.id", ondelete="CASCADE"), nullable=False, index=True)
    permission = Column(String(20), nullable=False, default="read")
    all_tables = Column(Boolean, nullable=False, default=True)
    granted_at = Column(DateTime(timezone=True), server_default=func.now())


class UserTablePermission(Base):
    """Grant of a level on one table of a connection to a single user."""
    __tablename__ = "user_table_permissions"
    __table_args__ = (UniqueConstraint("user_id", "connection_id", "table_name"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("app_users.id", ondelete="CASCADE"), nullable=False, index=True)
    connection_id = Column(Uuid, ForeignKey("saved_connections.id", ondelete="CASCADE"), nullable=False, index=True)
    table_name = Column(String(200), nullable=False)
    permission = Column(String(20), nullable=False, default="read")
    granted_at = Column(DateTime(timezone=True), server_default=func.now())


class GroupConnectionPermission(Base):
    """Grant of a level on a whole connection to every member of a group."""
    __tablename__ = "group_connection_permissions"
    __table_args__ = (UniqueConstraint("group_id", "connection_id"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    group_id = Column(Uuid, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    connection_id = Column(Uuid, ForeignKey("saved_connections.id", ondelete="CASCADE"), nullable=False, index=True)
    permission = Column(String(20), nullable=False, default="read")
    all_tables = Column(Boolean, nullable=False, default=True)
    granted_at = Column(DateTime(timezone=True), server_default=func.now())


class GroupTablePermission(Base):
    """Grant of a level on one table of a connection to every member of a group."""
    __tablename__ = "group_table_permissions"
    __table_args__ = (UniqueConstraint("group_id", "connection_id", "table_name"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    group_id = Column(Uuid, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    connection_id = Column(Uuid, ForeignKey("saved_connections.id", ondelete="CASCADE"), nullable=False, index=True)
    table_name = Column(String(200), nullable=False)
    permission = Column(String(20), nullable=False, default="read")
    granted_at = Column(DateTime(timezone=True), server_default=func.now())
