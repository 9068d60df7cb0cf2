"""
Connection Registry - Live data sources keyed by connection id
"""
import threading
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.orm import Session

from dbworks.config import settings
from dbworks.connections.datasources import (
    DataSource,
    PostgresDataSource,
    SQLiteDataSource,
)
from dbworks.core.crypto import Encryptor
from dbworks.models import ConnectionType, SavedConnection

logger = structlog.get_logger()


@dataclass(frozen=True)
class ConnectionInfo:
    """Public description of a registered connection. Never holds the password."""
    id: uuid.UUID
    name: str
    db_type: str
    host: Optional[str]
    port: Optional[int]
    database: str
    user: Optional[str]
    organization_id: Optional[uuid.UUID] = None
    owner_user_id: Optional[uuid.UUID] = None

    @classmethod
    def from_saved(cls, saved: SavedConnection) -> "ConnectionInfo":
        return cls(
            id=saved.id,
            name=saved.name,
            db_type=saved.db_type,
            host=saved.host,
            port=saved.port,
            database=saved.database_name,
            user=saved.username,
            organization_id=saved.organization_id,
            owner_user_id=saved.owner_user_id,
        )


def mask_url(url: str) -> str:
    """Render a connection URL with the password replaced by ***."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return "<unparseable url>"


def create_datasource(
    db_type: str,
    url: str,
    schema: Optional[str] = None,
    pool_size: Optional[int] = None,
    timeout: Optional[int] = None
) -> DataSource:
    """
    Build the data source backend for a database type.

    Raises:
        ValueError: If database type is not supported
    """
    pool_size = pool_size or settings.DATASOURCE_POOL_SIZE
    timeout = timeout or settings.DATASOURCE_TIMEOUT_SECONDS

    if db_type == ConnectionType.POSTGRESQL:
        return PostgresDataSource.from_url(
            url,
            schema=schema or settings.DATASOURCE_SCHEMA,
            pool_size=pool_size,
            timeout=timeout
        )
    if db_type == ConnectionType.SQLITE:
        return SQLiteDataSource.from_url(url, timeout=timeout)

    raise ValueError(f"Unsupported database type: {db_type}")


class ConnectionRegistry:
    """
    Thread-safe map of connection id to (ConnectionInfo, DataSource).

    One instance lives on `app.state.registry` for the life of the process.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._entries: Dict[uuid.UUID, Tuple[ConnectionInfo, DataSource]] = {}

    def get(self, connection_id: uuid.UUID) -> Optional[DataSource]:
        with self._lock:
            entry = self._entries.get(connection_id)
            return entry[1] if entry else None

    def get_info(self, connection_id: uuid.UUID) -> Optional[ConnectionInfo]:
        with self._lock:
            entry = self._entries.get(connection_id)
            return entry[0] if entry else None

    def insert(self, info: ConnectionInfo, datasource: DataSource) -> None:
        """Register a data source, replacing (and closing) any previous one with the same id."""
        with self._lock:
            previous = self._entries.get(info.id)
            self._entries[info.id] = (info, datasource)

        if previous is not None and previous[1] is not datasource:
            previous[1].close()
        logger.info(
            "connection_registered",
            connection_id=str(info.id),
            name=info.name,
            db_type=info.db_type,
            replaced=previous is not None,
        )

    def remove(self, connection_id: uuid.UUID) -> bool:
        with self._lock:
            entry = self._entries.pop(connection_id, None)

        if entry is None:
            return False
        entry[1].close()
        logger.info("connection_removed", connection_id=str(connection_id))
        return True

    def list(self) -> List[ConnectionInfo]:
        with self._lock:
            return [info for info, _ in self._entries.values()]

    def list_by_org(self, organization_id: uuid.UUID) -> List[ConnectionInfo]:
        return [c for c in self.list() if c.organization_id == organization_id]

    def list_personal(self, user_id: uuid.UUID) -> List[ConnectionInfo]:
        return [c for c in self.list() if c.owner_user_id == user_id]

    def close_all(self) -> None:
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()

        for _, datasource in entries:
            datasource.close()
        logger.info("connections_closed", count=len(entries))

    def load_saved_connections(self, db: Session, encryptor: Optional[Encryptor]) -> int:
        """
        Register every saved connection.

        Each row is decrypted, connected and pinged. Failing rows are logged
        and skipped so one bad connection does not block startup.

        Returns:
            Number of connections registered
        """
        loaded = 0
        for saved in db.query(SavedConnection).all():
            url = None
            datasource = None
            try:
                password = None
                if saved.encrypted_password:
                    if encryptor is None:
                        raise ValueError("ENCRYPTION_KEY is not set")
                    password = encryptor.decrypt(saved.encrypted_password)

                url = saved.get_connection_string(password)
                datasource = create_datasource(saved.db_type, url)
                datasource.ping()
            except (ValueError, SQLAlchemyError) as e:
                logger.warning(
                    "saved_connection_load_failed",
                    connection_id=str(saved.id),
                    name=saved.name,
                    target=mask_url(url) if url else None,
                    error=str(e),
                )
                if datasource is not None:
                    datasource.close()
                continue

            self.insert(ConnectionInfo.from_saved(saved), datasource)
            logger.info(
                "saved_connection_loaded",
                connection_id=str(saved.id),
                target=mask_url(url),
            )
            loaded += 1

        return loaded
