"""
Data source backends
"""
from dbworks.connections.datasources.base_datasource import (
    DataSource,
    TableInfo,
    ColumnInfo,
    TableSchema,
    RowsQuery,
    RowsPage,
    Row,
)
from dbworks.connections.datasources.sql_datasource import SqlDataSource
from dbworks.connections.datasources.postgres_datasource import PostgresDataSource
from dbworks.connections.datasources.sqlite_datasource import SQLiteDataSource

__all__ = [
    "DataSource",
    "TableInfo",
    "ColumnInfo",
    "TableSchema",
    "RowsQuery",
    "RowsPage",
    "Row",
    "SqlDataSource",
    "PostgresDataSource",
    "SQLiteDataSource",
]
