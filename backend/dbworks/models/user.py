"""
Organization, User and Group Models
"""
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Table, Text, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from dbworks.database import Base

SUPER_ADMIN_ROLE = "super_admin"
DEFAULT_ROLE = "member"

# Association table
group_members = Table(
    'group_members',
    Base.metadata,
    Column('group_id', Uuid, ForeignKey('groups.id', ondelete='CASCADE'), primary_key=True),
    Column('user_id', Uuid, ForeignKey('app_users.id', ondelete='CASCADE'), primary_key=True),
    Column('joined_at', DateTime(timezone=True), server_default=func.now())
)


class Organization(Base):
    """Tenant that owns users, groups and shared connections."""
    __tablename__ = "organizations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class AppUser(Base):
    """Application user. `role` is either "member" or "super_admin"."""
    __tablename__ = "app_users"
    __table_args__ = (
        UniqueConstraint("organization_id", "email"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default=DEFAULT_ROLE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    groups = relationship("Group", secondary=group_members, back_populates="members")

    @property
    def is_super_admin(self) -> bool:
        return self.role == SUPER_ADMIN_ROLE


class Group(Base):
    """Named set of users that can receive grants collectively."""
    __tablename__ = "groups"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    members = relationship("AppUser", secondary=group_members, back_populates="groups")
