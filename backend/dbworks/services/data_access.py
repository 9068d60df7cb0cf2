"""
Data Access Service
Checks the caller's resolved permission before every data source call.
"""
import uuid
from typing import Any, List

import structlog
from sqlalchemy.exc import SQLAlchemyError

from dbworks.connections.connection_registry import ConnectionRegistry
from dbworks.connections.datasources import (
    DataSource,
    Row,
    RowsPage,
    RowsQuery,
    TableInfo,
    TableSchema,
)
from dbworks.core.exceptions import (
    BadRequestError,
    ForbiddenError,
    InternalError,
    NotFoundError,
)
from dbworks.security import Caller, PermissionLevel, PermissionResolver

logger = structlog.get_logger()


class DataAccessService:
    """
    Access-gated facade over the connection registry.

    Every operation resolves the caller's level first and raises
    ForbiddenError before any data source is looked up or SQL is issued.
    """

    def __init__(self, resolver: PermissionResolver, registry: ConnectionRegistry):
        self.resolver = resolver
        self.registry = registry

    # ------------------------------------------------------------------
    # Permission checks
    # ------------------------------------------------------------------

    def _resolve_connection(self, caller: Caller, connection_id: uuid.UUID) -> PermissionLevel:
        try:
            level, _ = self.resolver.resolve_connection_permission(caller, connection_id)
        except SQLAlchemyError as e:
            logger.error("permission_resolution_failed", connection_id=str(connection_id), error=str(e))
            raise InternalError("Failed to resolve permissions") from e
        return level

    def _resolve_table(self, caller: Caller, connection_id: uuid.UUID, table: str) -> PermissionLevel:
        try:
            return self.resolver.resolve_table_permission(caller, connection_id, table)
        except SQLAlchemyError as e:
            logger.error(
                "permission_resolution_failed",
                connection_id=str(connection_id),
                table=table,
                error=str(e),
            )
            raise InternalError("Failed to resolve permissions") from e

    def require_connection_read(self, caller: Caller, connection_id: uuid.UUID) -> None:
        if not self._resolve_connection(caller, connection_id).can_read():
            raise ForbiddenError("No read access to this connection")

    def require_table_read(self, caller: Caller, connection_id: uuid.UUID, table: str) -> None:
        if not self._resolve_table(caller, connection_id, table).can_read():
            raise ForbiddenError(f"No read access to table '{table}'")

    def require_table_write(self, caller: Caller, connection_id: uuid.UUID, table: str) -> None:
        if not self._resolve_table(caller, connection_id, table).can_write():
            raise ForbiddenError(f"No write access to table '{table}'")

    def _datasource(self, connection_id: uuid.UUID) -> DataSource:
        datasource = self.registry.get(connection_id)
        if datasource is None:
            raise NotFoundError("Connection not found")
        return datasource

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def list_tables(self, caller: Caller, connection_id: uuid.UUID) -> List[TableInfo]:
        self.require_connection_read(caller, connection_id)
        datasource = self._datasource(connection_id)
        try:
            return datasource.list_tables()
        except SQLAlchemyError as e:
            logger.error("list_tables_failed", connection_id=str(connection_id), error=str(e))
            raise InternalError(f"Failed to list tables: {e}") from e

    def get_table_schema(self, caller: Caller, connection_id: uuid.UUID, table: str) -> TableSchema:
        self.require_table_read(caller, connection_id, table)
        datasource = self._datasource(connection_id)
        try:
            return datasource.get_table_schema(table)
        except SQLAlchemyError as e:
            logger.error("table_schema_failed", connection_id=str(connection_id), table=table, error=str(e))
            raise InternalError(f"Failed to read table schema: {e}") from e

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def list_rows(
        self,
        caller: Caller,
        connection_id: uuid.UUID,
        table: str,
        query: RowsQuery
    ) -> RowsPage:
        self.require_table_read(caller, connection_id, table)
        datasource = self._datasource(connection_id)
        try:
            return datasource.list_rows(table, query)
        except SQLAlchemyError as e:
            logger.error("list_rows_failed", connection_id=str(connection_id), table=table, error=str(e))
            raise InternalError(f"Failed to list rows: {e}") from e

    def get_row(self, caller: Caller, connection_id: uuid.UUID, table: str, pk_value: str) -> Row:
        self.require_table_read(caller, connection_id, table)
        datasource = self._datasource(connection_id)
        try:
            return datasource.get_row(table, pk_value)
        except SQLAlchemyError as e:
            logger.warning("get_row_failed", connection_id=str(connection_id), table=table, error=str(e))
            raise NotFoundError(f"Row not found: {e}") from e

    def insert_row(self, caller: Caller, connection_id: uuid.UUID, table: str, data: Any) -> Row:
        self.require_table_write(caller, connection_id, table)
        datasource = self._datasource(connection_id)
        try:
            return datasource.insert_row(table, data)
        except SQLAlchemyError as e:
            logger.warning("insert_row_failed", connection_id=str(connection_id), table=table, error=str(e))
            raise BadRequestError(f"Insert failed: {e}") from e

    def update_row(
        self,
        caller: Caller,
        connection_id: uuid.UUID,
        table: str,
        pk_value: str,
        data: Any
    ) -> Row:
        self.require_table_write(caller, connection_id, table)
        datasource = self._datasource(connection_id)
        try:
            return datasource.update_row(table, pk_value, data)
        except SQLAlchemyError as e:
            logger.warning("update_row_failed", connection_id=str(connection_id), table=table, error=str(e))
            raise BadRequestError(f"Update failed: {e}") from e

    def delete_row(self, caller: Caller, connection_id: uuid.UUID, table: str, pk_value: str) -> None:
        self.require_table_write(caller, connection_id, table)
        datasource = self._datasource(connection_id)
        try:
            datasource.delete_row(table, pk_value)
        except SQLAlchemyError as e:
            logger.warning("delete_row_failed", connection_id=str(connection_id), table=table, error=str(e))
            raise BadRequestError(f"Delete failed: {e}") from e
