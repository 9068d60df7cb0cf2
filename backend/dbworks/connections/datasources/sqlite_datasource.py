"""
SQLite DataSource
"""
import re
from typing import List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from dbworks.connections.datasources.base_datasource import (
    ColumnInfo,
    TableInfo,
    TableSchema,
)
from dbworks.connections.datasources.sql_datasource import SqlDataSource

SQLITE_SCHEMA = "main"

LIST_TABLES_SQL = """
    SELECT name FROM sqlite_master
    WHERE type = 'table' AND name NOT LIKE 'sqlite_%'
    ORDER BY name
"""

TABLE_INFO_SQL = "SELECT cid, name, type, \"notnull\", dflt_value, pk FROM pragma_table_info(:table) ORDER BY cid"

_LENGTH_RE = re.compile(r"CHAR[A-Z ]*\(\s*(\d+)\s*\)", re.IGNORECASE)


def declared_max_length(declared_type: str) -> Optional[int]:
    """Length bound of a declared character type, e.g. VARCHAR(50) -> 50."""
    match = _LENGTH_RE.search(declared_type or "")
    return int(match.group(1)) if match else None


class SQLiteDataSource(SqlDataSource):
    """SQLite data source. Table names are unqualified; the schema reported is 'main'."""

    like_operator = "LIKE"

    def __init__(self, engine: Engine):
        super().__init__(engine, schema=None)

    @classmethod
    def from_url(cls, url: str, timeout: int = 10) -> "SQLiteDataSource":
        engine = create_engine(url, connect_args={'timeout': timeout})
        return cls(engine)

    def _table_info(self, table: str):
        with self.engine.connect() as conn:
            return conn.execute(text(TABLE_INFO_SQL), {"table": table}).all()

    def list_tables(self) -> List[TableInfo]:
        with self.engine.connect() as conn:
            result = conn.execute(text(LIST_TABLES_SQL))
            return [TableInfo(table_name=row[0], table_schema=SQLITE_SCHEMA) for row in result]

    def get_primary_key_columns(self, table: str) -> List[str]:
        # pk holds the 1-based position within the primary key, 0 otherwise
        pk_rows = sorted((row for row in self._table_info(table) if row.pk), key=lambda r: r.pk)
        return [row.name for row in pk_rows]

    def get_table_schema(self, table: str) -> TableSchema:
        info = self._table_info(table)
        pk_columns = [row.name for row in sorted((r for r in info if r.pk), key=lambda r: r.pk)]
        # A lone INTEGER PRIMARY KEY aliases the rowid and can never hold NULL
        rowid_alias = None
        if len(pk_columns) == 1:
            pk_row = next(r for r in info if r.pk)
            if (pk_row.type or "").strip().upper() == "INTEGER":
                rowid_alias = pk_row.name

        columns = [
            ColumnInfo(
                column_name=row.name,
                data_type=row.type,
                is_nullable=not row.notnull and row.name != rowid_alias,
                column_default=row.dflt_value,
                is_primary_key=bool(row.pk),
                max_length=declared_max_length(row.type)
            )
            for row in info
        ]

        return TableSchema(table_name=table, columns=columns, primary_key_columns=pk_columns)
