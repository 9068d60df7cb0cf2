"""
PostgreSQL DataSource
"""
from typing import List

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from dbworks.connections.datasources.base_datasource import (
    ColumnInfo,
    TableInfo,
    TableSchema,
)
from dbworks.connections.datasources.sql_datasource import SqlDataSource

LIST_TABLES_SQL = """
    SELECT table_name, table_schema
    FROM information_schema.tables
    WHERE table_schema = :schema AND table_type = 'BASE TABLE'
    ORDER BY table_name
"""

PRIMARY_KEY_SQL = """
    SELECT kcu.column_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
        ON tc.constraint_name = kcu.constraint_name
        AND tc.table_schema = kcu.table_schema
    WHERE tc.constraint_type = 'PRIMARY KEY'
        AND tc.table_schema = :schema
        AND tc.table_name = :table
    ORDER BY kcu.ordinal_position
"""

COLUMNS_SQL = """
    SELECT column_name, data_type, is_nullable, column_default, character_maximum_length
    FROM information_schema.columns
    WHERE table_schema = :schema AND table_name = :table
    ORDER BY ordinal_position
"""


class PostgresDataSource(SqlDataSource):
    """PostgreSQL data source, scoped to one schema (public by default)."""

    like_operator = "ILIKE"

    def __init__(self, engine: Engine, schema: str = "public"):
        super().__init__(engine, schema=schema)

    @classmethod
    def from_url(
        cls,
        url: str,
        schema: str = "public",
        pool_size: int = 5,
        timeout: int = 10
    ) -> "PostgresDataSource":
        engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=pool_size,
            max_overflow=pool_size * 2,
            pool_pre_ping=True,
            connect_args={'connect_timeout': timeout}
        )
        return cls(engine, schema=schema)

    def list_tables(self) -> List[TableInfo]:
        with self.engine.connect() as conn:
            result = conn.execute(text(LIST_TABLES_SQL), {"schema": self.schema})
            return [
                TableInfo(table_name=row.table_name, table_schema=row.table_schema)
                for row in result
            ]

    def get_primary_key_columns(self, table: str) -> List[str]:
        with self.engine.connect() as conn:
            result = conn.execute(text(PRIMARY_KEY_SQL), {"schema": self.schema, "table": table})
            return [row[0] for row in result]

    def get_table_schema(self, table: str) -> TableSchema:
        pk_columns = self.get_primary_key_columns(table)

        with self.engine.connect() as conn:
            result = conn.execute(text(COLUMNS_SQL), {"schema": self.schema, "table": table})
            columns = [
                ColumnInfo(
                    column_name=row.column_name,
                    data_type=row.data_type,
                    is_nullable=row.is_nullable == "YES",
                    column_default=row.column_default,
                    is_primary_key=row.column_name in pk_columns,
                    max_length=row.character_maximum_length
                )
                for row in result
            ]

        return TableSchema(table_name=table, columns=columns, primary_key_columns=pk_columns)
