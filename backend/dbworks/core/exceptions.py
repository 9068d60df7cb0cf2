"""
Domain errors raised by the access-gated services.

The HTTP layer maps each class to its `status_code`; the services and
datasources stay free of web framework types.
"""
from fastapi import status


class DBWorksError(Exception):
    """Base class for errors that carry a client-facing message."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ForbiddenError(DBWorksError):
    """Resolved permission level is insufficient for the operation."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(DBWorksError):
    """No such row, grant, or live connection."""
    status_code = status.HTTP_404_NOT_FOUND


class BadRequestError(DBWorksError):
    """Caller-correctable problem: malformed input or a rejected write."""
    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(DBWorksError):
    """Grant store or catalog failure."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
