"""
Models Package - Export all SQLAlchemy models
"""
from dbworks.models.user import (
    Organization,
    AppUser,
    Group,
    group_members,
    SUPER_ADMIN_ROLE,
    DEFAULT_ROLE,
)
from dbworks.models.connection import SavedConnection, ConnectionType
from dbworks.models.permission import (
    UserConnectionPermission,
    UserTablePermission,
    GroupConnectionPermission,
    GroupTablePermission,
)

__all__ = [
    # Users & groups
    "Organization",
    "AppUser",
    "Group",
    "group_members",
    "SUPER_ADMIN_ROLE",
    "DEFAULT_ROLE",

    # Connections
    "SavedConnection",
    "ConnectionType",

    # Grants
    "UserConnectionPermission",
    "UserTablePermission",
    "GroupConnectionPermission",
    "GroupTablePermission",
]
