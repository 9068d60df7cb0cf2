"""
Permission levels and the caller identity they are resolved for.
"""
import enum
import uuid
from dataclasses import dataclass
from typing import Optional

from dbworks.models.user import SUPER_ADMIN_ROLE


class PermissionLevel(enum.IntEnum):
    """Ordered access tier: NONE < READ < WRITE < ADMIN."""
    NONE = 0
    READ = 1
    WRITE = 2
    ADMIN = 3

    @classmethod
    def from_str(cls, value: str) -> "PermissionLevel":
        """Parse a stored permission string. Case-sensitive; unknown values map to NONE."""
        return _FROM_STR.get(value, cls.NONE)

    def as_str(self) -> str:
        """Storage form of the level."""
        return self.name.lower()

    def can_read(self) -> bool:
        return self >= PermissionLevel.READ

    def can_write(self) -> bool:
        return self >= PermissionLevel.WRITE


_FROM_STR = {
    "read": PermissionLevel.READ,
    "write": PermissionLevel.WRITE,
    "admin": PermissionLevel.ADMIN,
}


@dataclass(frozen=True)
class Caller:
    """Already-authenticated identity a request is evaluated for."""
    id: uuid.UUID
    role: str
    organization_id: Optional[uuid.UUID] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == SUPER_ADMIN_ROLE

    @classmethod
    def from_user(cls, user) -> "Caller":
        return cls(id=user.id, role=user.role, organization_id=user.organization_id)
