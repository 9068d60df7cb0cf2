"""
Connection Service
Create, list and delete registered data source connections.
"""
import uuid
from typing import List, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dbworks.connections import ConnectionInfo, ConnectionRegistry, create_datasource, mask_url
from dbworks.core.crypto import Encryptor
from dbworks.core.exceptions import BadRequestError, InternalError, NotFoundError
from dbworks.models import ConnectionType, SavedConnection
from dbworks.schemas.connection import ConnectionCreateRequest
from dbworks.security import Caller
from dbworks.services.permission_service import require_super_admin

logger = structlog.get_logger()

DEFAULT_POSTGRES_PORT = 5432
ORG_SCOPE_PREFIX = "org:"


class ConnectionService:
    """
    Connection lifecycle over the saved_connections table and the live registry.

    A caller who belongs to an organization creates organization connections
    and must be a super admin to do so. A caller without an organization
    creates a personal connection owned by themselves.
    """

    def __init__(self, db: Session, registry: ConnectionRegistry, encryptor: Optional[Encryptor] = None):
        self.db = db
        self.registry = registry
        self.encryptor = encryptor

    def create(self, caller: Caller, request: ConnectionCreateRequest) -> ConnectionInfo:
        if caller.organization_id is not None:
            require_super_admin(caller, "Only super admins can create organization connections")
            organization_id, owner_user_id = caller.organization_id, None
        else:
            organization_id, owner_user_id = None, caller.id

        saved = SavedConnection(
            id=uuid.uuid4(),
            organization_id=organization_id,
            owner_user_id=owner_user_id,
            name=request.name,
            db_type=request.db_type.value,
            database_name=request.database,
            created_by=caller.id,
        )
        if request.db_type == ConnectionType.POSTGRESQL:
            if not request.host:
                raise BadRequestError("host is required for PostgreSQL connections")
            saved.host = request.host
            saved.port = request.port or DEFAULT_POSTGRES_PORT
            saved.username = request.user

        if request.password:
            if self.encryptor is None:
                raise BadRequestError("ENCRYPTION_KEY is not set; cannot store a password")
            saved.encrypted_password = self.encryptor.encrypt(request.password)

        url = saved.get_connection_string(request.password)
        logger.info("connection_create_started", name=request.name, target=mask_url(url))

        datasource = None
        try:
            datasource = create_datasource(saved.db_type, url)
            datasource.ping()
        except (ValueError, SQLAlchemyError) as e:
            if datasource is not None:
                datasource.close()
            logger.warning("connection_create_failed", name=request.name, target=mask_url(url), error=str(e))
            raise BadRequestError(f"Failed to connect: {e}") from e

        try:
            self.db.add(saved)
            self.db.commit()
            self.db.refresh(saved)
        except SQLAlchemyError as e:
            self.db.rollback()
            datasource.close()
            logger.error("connection_save_failed", name=request.name, error=str(e))
            raise InternalError(f"Failed to save connection: {e}") from e

        info = ConnectionInfo.from_saved(saved)
        self.registry.insert(info, datasource)
        return info

    def list(self, caller: Caller, scope: Optional[str] = None) -> List[ConnectionInfo]:
        """
        List registered connections.

        `scope` may be "personal" (owned by the caller) or "org:<uuid>";
        anything else lists every registered connection.
        """
        if scope == "personal":
            return self.registry.list_personal(caller.id)
        if scope and scope.startswith(ORG_SCOPE_PREFIX):
            try:
                organization_id = uuid.UUID(scope[len(ORG_SCOPE_PREFIX):])
            except ValueError:
                raise BadRequestError("Invalid org ID in scope")
            return self.registry.list_by_org(organization_id)
        return self.registry.list()

    def delete(self, caller: Caller, connection_id: uuid.UUID) -> None:
        require_super_admin(caller, "Only super admins can delete connections")
        if not self.registry.remove(connection_id):
            raise NotFoundError("Connection not found")

        try:
            self.db.query(SavedConnection).filter(SavedConnection.id == connection_id).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("connection_delete_failed", connection_id=str(connection_id), error=str(e))
            raise InternalError(f"Failed to delete saved connection: {e}") from e
