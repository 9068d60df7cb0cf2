"""
Tests for the PostgreSQL data source catalog queries, run against a recording engine
"""
from contextlib import contextmanager
from types import SimpleNamespace

import pytest

from dbworks.connections.datasources import PostgresDataSource
from dbworks.connections.datasources.sql_datasource import json_safe_value


class RecordingEngine:
    """Stands in for an Engine; answers catalog queries from canned rows."""

    def __init__(self, responses):
        self.responses = responses
        self.executed = []

    @contextmanager
    def connect(self):
        yield self

    def execute(self, statement, params=None):
        sql = str(statement)
        self.executed.append((sql, params))
        for marker, rows in self.responses.items():
            if marker in sql:
                return iter(rows)
        return iter([])


@pytest.fixture
def engine():
    return RecordingEngine({
        "information_schema.tables": [
            SimpleNamespace(table_name="invoices", table_schema="public"),
            SimpleNamespace(table_name="orders", table_schema="public"),
        ],
        "PRIMARY KEY": [("id",)],
        "information_schema.columns": [
            SimpleNamespace(
                column_name="id", data_type="integer", is_nullable="NO",
                column_default="nextval('orders_id_seq'::regclass)", character_maximum_length=None
            ),
            SimpleNamespace(
                column_name="customer", data_type="character varying", is_nullable="YES",
                column_default=None, character_maximum_length=120
            ),
        ],
    })


class TestPostgresCatalog:
    """information_schema queries"""

    def test_list_tables_binds_schema(self, engine):
        datasource = PostgresDataSource(engine, schema="sales")
        tables = datasource.list_tables()

        assert [t.table_name for t in tables] == ["invoices", "orders"]
        sql, params = engine.executed[0]
        assert "table_type = 'BASE TABLE'" in sql
        assert "ORDER BY table_name" in sql
        assert params == {"schema": "sales"}

    def test_primary_key_columns(self, engine):
        datasource = PostgresDataSource(engine)
        assert datasource.get_primary_key_columns("orders") == ["id"]
        assert engine.executed[0][1] == {"schema": "public", "table": "orders"}

    def test_table_schema(self, engine):
        schema = PostgresDataSource(engine).get_table_schema("orders")

        assert schema.primary_key_columns == ["id"]
        id_col, customer = schema.columns
        assert id_col.is_primary_key and not id_col.is_nullable
        assert id_col.column_default.startswith("nextval")
        assert not customer.is_primary_key and customer.is_nullable
        assert customer.max_length == 120

    def test_row_statements_use_ilike_and_schema(self, engine):
        builder = PostgresDataSource(engine, schema="sales").builder
        assert builder.like_operator == "ILIKE"
        assert builder.table_ref("orders") == '"sales"."orders"'


@pytest.mark.parametrize("value,expected", [
    (memoryview(b"\xde\xad"), "\\xdead"),
    (b"\x00\x01", "\\x0001"),
    (bytearray(b""), "\\x"),
    ("text", "text"),
    (42, 42),
    (None, None),
])
def test_bytea_values_are_json_safe(value, expected):
    # psycopg2 returns bytea columns as memoryview
    assert json_safe_value(value) == expected
