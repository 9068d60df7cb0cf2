"""
Core Package
"""
from dbworks.core.exceptions import (
    DBWorksError, ForbiddenError, NotFoundError, BadRequestError, InternalError
)
from dbworks.core.crypto import Encryptor

__all__ = [
    # Errors
    "DBWorksError", "ForbiddenError", "NotFoundError", "BadRequestError", "InternalError",
    # Crypto
    "Encryptor",
]
