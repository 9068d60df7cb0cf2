"""
SQL DataSource
Row gateway shared by the SQLAlchemy-backed backends.
"""
from typing import Any, Dict, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.engine import Engine

from dbworks.connections.datasources.base_datasource import (
    DataSource,
    Row,
    RowsPage,
    RowsQuery,
)
from dbworks.connections.datasources.query_builder import (
    QueryBuilder,
    clamp_pagination,
    parse_filter,
)
from dbworks.core.exceptions import BadRequestError, NotFoundError

logger = structlog.get_logger()


def json_safe_value(value: Any) -> Any:
    """Binary values are rendered as \\x-prefixed hex text."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "\\x" + bytes(value).hex()
    return value


def row_to_dict(row) -> Row:
    return {key: json_safe_value(value) for key, value in row._mapping.items()}


class SqlDataSource(DataSource):
    """
    Generic row access over a SQLAlchemy engine.

    Subclasses provide catalog introspection and the dialect's LIKE operator.
    Each call runs in its own transaction and is committed before returning.
    """

    like_operator = "LIKE"

    def __init__(self, engine: Engine, schema: Optional[str] = None):
        self.engine = engine
        self.schema = schema
        self.builder = QueryBuilder(schema=schema, like_operator=self.like_operator)

    def ping(self) -> None:
        """Round-trip SELECT 1; raises on failure."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def close(self) -> None:
        self.engine.dispose()

    def _require_primary_key(self, table: str) -> str:
        pk_columns = self.get_primary_key_columns(table)
        if not pk_columns:
            raise BadRequestError(f"Table '{table}' has no primary key")
        return pk_columns[0]

    @staticmethod
    def _require_object(data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise BadRequestError("Row data must be a JSON object")
        return data

    def list_rows(self, table: str, query: RowsQuery) -> RowsPage:
        page, per_page = clamp_pagination(query.page, query.per_page)
        offset = (page - 1) * per_page
        column_filter = parse_filter(query.filter) if query.filter else None

        count_sql, count_params = self.builder.count_rows(table, column_filter)
        select_sql, select_params = self.builder.select_rows(
            table,
            column_filter=column_filter,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
            limit=per_page,
            offset=offset
        )

        with self.engine.begin() as conn:
            total_count = conn.execute(text(count_sql), count_params).scalar() or 0
            result = conn.execute(text(select_sql), select_params)
            rows = [row_to_dict(row) for row in result]

        logger.debug(
            "rows_listed",
            table=table,
            page=page,
            per_page=per_page,
            returned=len(rows),
            total_count=total_count,
        )
        return RowsPage(rows=rows, total_count=int(total_count), page=page, per_page=per_page)

    def get_row(self, table: str, pk_value: str) -> Row:
        pk_column = self._require_primary_key(table)
        sql, params = self.builder.select_row_by_pk(table, pk_column, pk_value)

        with self.engine.begin() as conn:
            row = conn.execute(text(sql), params).first()

        if row is None:
            raise NotFoundError("Row not found")
        return row_to_dict(row)

    def insert_row(self, table: str, data: Any) -> Row:
        payload = self._require_object(data)
        sql, params = self.builder.insert_row(table, payload)

        with self.engine.begin() as conn:
            row = conn.execute(text(sql), params).first()

        logger.info("row_inserted", table=table, columns=len(params))
        return row_to_dict(row) if row is not None else {}

    def update_row(self, table: str, pk_value: str, data: Any) -> Row:
        payload = self._require_object(data)
        pk_column = self._require_primary_key(table)
        sql, params = self.builder.update_row(table, pk_column, pk_value, payload)

        with self.engine.begin() as conn:
            row = conn.execute(text(sql), params).first()

        if row is None:
            raise NotFoundError("Row not found")
        logger.info("row_updated", table=table, pk=pk_value)
        return row_to_dict(row)

    def delete_row(self, table: str, pk_value: str) -> None:
        pk_column = self._require_primary_key(table)
        sql, params = self.builder.delete_row(table, pk_column, pk_value)

        with self.engine.begin() as conn:
            result = conn.execute(text(sql), params)

        logger.info("row_deleted", table=table, pk=pk_value, affected=result.rowcount)
