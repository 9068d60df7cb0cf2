"""
DBWorks - permission-gated data access over registered database connections
"""
__version__ = "1.0.0"
