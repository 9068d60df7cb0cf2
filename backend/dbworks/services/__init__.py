"""
Services
"""
from dbworks.services.data_access import DataAccessService
from dbworks.services.permission_service import PermissionService, require_super_admin
from dbworks.services.connection_service import ConnectionService

__all__ = ["ConnectionService", "DataAccessService", "PermissionService", "require_super_admin"]
