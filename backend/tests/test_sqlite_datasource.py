"""
Tests for the SQLite data source (introspection and row gateway)
"""
import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from dbworks.connections.datasources import RowsQuery
from dbworks.connections.datasources.sqlite_datasource import declared_max_length
from dbworks.core.exceptions import BadRequestError, NotFoundError


class TestIntrospection:
    """Catalog discovery"""

    def test_list_tables_sorted(self, datasource):
        tables = datasource.list_tables()
        assert [t.table_name for t in tables] == ["audit_log", "orders"]
        assert {t.table_schema for t in tables} == {"main"}

    def test_primary_key_columns(self, datasource):
        assert datasource.get_primary_key_columns("orders") == ["id"]
        assert datasource.get_primary_key_columns("audit_log") == []

    def test_table_schema(self, datasource):
        schema = datasource.get_table_schema("orders")

        assert schema.table_name == "orders"
        assert schema.primary_key_columns == ["id"]
        assert [c.column_name for c in schema.columns] == ["id", "customer", "amount", "status", "note"]

        columns = {c.column_name: c for c in schema.columns}
        assert columns["id"].is_primary_key
        assert columns["id"].is_nullable is False
        assert not columns["customer"].is_primary_key
        assert columns["customer"].is_nullable is False
        assert columns["customer"].max_length == 50
        assert columns["amount"].is_nullable is True
        assert columns["amount"].max_length is None
        assert columns["status"].column_default == "'new'"

    def test_text_primary_key_stays_nullable(self, datasource):
        # only a lone INTEGER PRIMARY KEY aliases the rowid
        with datasource.engine.begin() as conn:
            conn.execute(text("CREATE TABLE tags (code TEXT PRIMARY KEY, label TEXT NOT NULL)"))

        columns = {c.column_name: c for c in datasource.get_table_schema("tags").columns}
        assert columns["code"].is_primary_key
        assert columns["code"].is_nullable is True
        assert columns["label"].is_nullable is False

    def test_unknown_table_has_no_columns(self, datasource):
        schema = datasource.get_table_schema("missing")
        assert schema.columns == []
        assert schema.primary_key_columns == []

    @pytest.mark.parametrize("declared,expected", [
        ("VARCHAR(50)", 50),
        ("character varying( 12 )", 12),
        ("NCHAR(3)", 3),
        ("INTEGER", None),
        ("DECIMAL(10,2)", None),
        ("", None),
    ])
    def test_declared_max_length(self, declared, expected):
        assert declared_max_length(declared) == expected


class TestListRows:
    """Pagination, filtering and sorting"""

    def test_defaults(self, datasource):
        page = datasource.list_rows("orders", RowsQuery())
        assert (page.page, page.per_page) == (1, 20)
        assert len(page.rows) == 20
        assert page.total_count == 150

    def test_per_page_is_clamped_to_100(self, datasource):
        page = datasource.list_rows("orders", RowsQuery(per_page=500))
        assert page.per_page == 100
        assert len(page.rows) == 100

    def test_page_zero_is_first_page(self, datasource):
        first = datasource.list_rows("orders", RowsQuery(page=1, sort_by="id"))
        zero = datasource.list_rows("orders", RowsQuery(page=0, sort_by="id"))
        assert zero.page == 1
        assert zero.rows == first.rows

    def test_last_partial_page(self, datasource):
        page = datasource.list_rows("orders", RowsQuery(page=8, per_page=20, sort_by="id"))
        assert [r["id"] for r in page.rows] == list(range(141, 151))
        assert page.total_count == 150

    def test_sort_descending(self, datasource):
        page = datasource.list_rows("orders", RowsQuery(per_page=3, sort_by="amount", sort_order="DESC"))
        assert [r["id"] for r in page.rows] == [150, 149, 148]

    def test_eq_filter_counts_all_matches(self, datasource):
        page = datasource.list_rows("orders", RowsQuery(per_page=10, filter="status:eq:paid"))
        assert page.total_count == 50
        assert len(page.rows) == 10
        assert all(r["status"] == "paid" for r in page.rows)

    def test_like_filter_is_case_insensitive(self, datasource):
        page = datasource.list_rows("orders", RowsQuery(filter="customer:like:CUSTOMER-01"))
        assert page.total_count == 10

    def test_comparisons_are_lexicographic(self, datasource):
        # "100" < "90" as text, so only 900..990 qualify
        page = datasource.list_rows("orders", RowsQuery(filter="amount:gt:90", sort_by="amount"))
        assert [r["amount"] for r in page.rows] == list(range(900, 1000, 10))

    def test_malformed_filter(self, datasource):
        with pytest.raises(BadRequestError):
            datasource.list_rows("orders", RowsQuery(filter="status"))


class TestRowCrud:
    """Single-row operations"""

    def test_get_row(self, datasource):
        row = datasource.get_row("orders", "7")
        assert row["customer"] == "customer-007"
        assert row["amount"] == 70

    def test_binary_values_render_as_hex(self, datasource):
        with datasource.engine.begin() as conn:
            conn.execute(text("CREATE TABLE blobs (id INTEGER PRIMARY KEY, payload BLOB)"))
            conn.execute(text("INSERT INTO blobs (id, payload) VALUES (1, X'FF00')"))

        assert datasource.get_row("blobs", "1") == {"id": 1, "payload": "\\xff00"}
        assert datasource.list_rows("blobs", RowsQuery()).rows == [{"id": 1, "payload": "\\xff00"}]

        row = datasource.insert_row("blobs", {"id": 2})
        assert row["payload"] is None

    def test_get_missing_row(self, datasource):
        with pytest.raises(NotFoundError):
            datasource.get_row("orders", "999")

    def test_table_without_primary_key(self, datasource):
        with pytest.raises(BadRequestError):
            datasource.get_row("audit_log", "1")
        with pytest.raises(BadRequestError):
            datasource.delete_row("audit_log", "1")

    def test_insert_returns_stored_row(self, datasource):
        row = datasource.insert_row("orders", {"customer": "new co", "amount": 5, "note": None})
        assert row["id"] == 151
        assert row["amount"] == 5
        assert row["status"] == "new"
        assert row["note"] is None

    def test_insert_requires_object(self, datasource):
        with pytest.raises(BadRequestError):
            datasource.insert_row("orders", [{"customer": "x"}])

    def test_insert_default_values(self, datasource):
        assert datasource.insert_row("audit_log", {}) == {"message": None}

    def test_insert_constraint_violation_propagates(self, datasource):
        with pytest.raises(IntegrityError):
            datasource.insert_row("orders", {"amount": 1})

    def test_update_row(self, datasource):
        row = datasource.update_row("orders", "3", {"id": 99, "status": "refunded", "note": None})
        assert row["id"] == 3
        assert row["status"] == "refunded"
        assert datasource.get_row("orders", "3")["status"] == "refunded"

    def test_update_missing_row(self, datasource):
        with pytest.raises(NotFoundError):
            datasource.update_row("orders", "999", {"status": "paid"})

    def test_update_nothing_to_set(self, datasource):
        with pytest.raises(BadRequestError):
            datasource.update_row("orders", "3", {"id": 3})

    def test_delete_row(self, datasource):
        datasource.delete_row("orders", "4")
        with pytest.raises(NotFoundError):
            datasource.get_row("orders", "4")
        assert datasource.list_rows("orders", RowsQuery()).total_count == 149

    def test_delete_missing_row_is_silent(self, datasource):
        datasource.delete_row("orders", "999")
        assert datasource.list_rows("orders", RowsQuery()).total_count == 150
