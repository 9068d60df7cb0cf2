"""
API Routes Package
"""
from dbworks.api import connections, data, permissions

__all__ = ["connections", "data", "permissions"]
