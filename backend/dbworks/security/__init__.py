"""
Security module initialization
"""
from dbworks.security.permission_level import PermissionLevel, Caller
from dbworks.security.grant_store import GrantStore, SqlAlchemyGrantStore, ConnectionGrant
from dbworks.security.resolver import PermissionResolver

__all__ = [
    "PermissionLevel",
    "Caller",
    "GrantStore",
    "SqlAlchemyGrantStore",
    "ConnectionGrant",
    "PermissionResolver",
]
