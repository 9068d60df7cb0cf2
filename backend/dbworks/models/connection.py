"""
Saved Connection Model - Stores user data source configurations
"""
import enum
import uuid

from sqlalchemy import Column, Integer, String, DateTime, Text, Uuid, ForeignKey, CheckConstraint
from sqlalchemy.engine import URL
from sqlalchemy.sql import func

from dbworks.database import Base


class ConnectionType(str, enum.Enum):
    """Supported database types."""
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"


class SavedConnection(Base):
    """Persisted data source. Owned by an organization, a user, or both."""
    __tablename__ = "saved_connections"
    __table_args__ = (
        CheckConstraint(
            "organization_id IS NOT NULL OR owner_user_id IS NOT NULL",
            name="chk_connection_owner",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True)
    owner_user_id = Column(Uuid, ForeignKey("app_users.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String(200), nullable=False)

    db_type = Column(String(50), nullable=False, default=ConnectionType.POSTGRESQL.value)
    host = Column(String(500), nullable=True)  # Nullable for sqlite
    port = Column(Integer, nullable=True, default=5432)
    database_name = Column(String(500), nullable=False)
    username = Column(String(200), nullable=True)
    encrypted_password = Column(Text, nullable=True)  # AES-GCM, see dbworks.core.crypto

    created_by = Column(Uuid, ForeignKey("app_users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def get_connection_string(self, decrypted_password: str = None) -> str:
        """
        Generate connection string from the saved row.

        Credentials are percent-encoded by the SQLAlchemy URL builder.
        """
        if self.db_type == ConnectionType.POSTGRESQL:
            url = URL.create(
                drivername="postgresql",
                username=self.username or None,
                password=decrypted_password or None,
                host=self.host,
                port=self.port,
                database=self.database_name,
            )
        elif self.db_type == ConnectionType.SQLITE:
            url = URL.create(drivername="sqlite", database=self.database_name)
        else:
            raise ValueError(f"Unsupported database type: {self.db_type}")
        return url.render_as_string(hide_password=False)
