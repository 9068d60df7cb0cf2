"""
Tests for SQL statement building
"""
import pytest

from dbworks.connections.datasources.query_builder import (
    QueryBuilder,
    clamp_pagination,
    parse_filter,
    quote_ident,
    to_bind_text,
)
from dbworks.core.exceptions import BadRequestError


@pytest.fixture
def pg():
    return QueryBuilder(schema="public", like_operator="ILIKE")


class TestHelpers:
    """Quoting, pagination and filter parsing"""

    def test_quote_ident(self):
        assert quote_ident("orders") == '"orders"'
        assert quote_ident('we"ird') == '"we""ird"'
        assert quote_ident('x"; DROP TABLE t; --') == '"x""; DROP TABLE t; --"'

    @pytest.mark.parametrize("page,per_page,expected", [
        (None, None, (1, 20)),
        (0, 500, (1, 100)),
        (-3, 0, (1, 1)),
        (4, 25, (4, 25)),
    ])
    def test_clamp_pagination(self, page, per_page, expected):
        assert clamp_pagination(page, per_page) == expected

    def test_parse_filter_splits_on_first_two_colons(self):
        f = parse_filter("created_at:gte:2024-01-01T10:00:00")
        assert (f.column, f.op, f.value) == ("created_at", "gte", "2024-01-01T10:00:00")

    def test_parse_filter_unknown_op_is_eq(self):
        assert parse_filter("status:between:x").op == "eq"

    @pytest.mark.parametrize("expression", ["status", "status:eq", ":eq:x"])
    def test_parse_filter_malformed(self, expression):
        with pytest.raises(BadRequestError):
            parse_filter(expression)

    def test_to_bind_text(self):
        assert to_bind_text("abc") == "abc"
        assert to_bind_text(5) == "5"
        assert to_bind_text(True) == "true"
        assert to_bind_text({"a": [1, 2]}) == '{"a": [1, 2]}'


class TestSelectStatements:
    """Listing and lookup"""

    def test_select_with_like_filter_and_sort(self, pg):
        sql, params = pg.select_rows(
            "orders",
            column_filter=parse_filter("customer:like:acme"),
            sort_by="amount",
            sort_order="DESC",
            limit=10,
            offset=20
        )
        assert sql == (
            'SELECT * FROM "public"."orders" WHERE CAST("customer" AS TEXT) ILIKE :filter_value '
            'ORDER BY "amount" DESC LIMIT :limit OFFSET :offset'
        )
        assert params == {"filter_value": "%acme%", "limit": 10, "offset": 20}

    def test_sort_order_other_than_desc_is_asc(self, pg):
        sql, _ = pg.select_rows("orders", sort_by="id", sort_order="sideways")
        assert 'ORDER BY "id" ASC' in sql

    def test_no_order_without_sort_by(self, pg):
        sql, _ = pg.select_rows("orders", sort_order="desc")
        assert "ORDER BY" not in sql

    @pytest.mark.parametrize("op,symbol", [
        ("eq", "="), ("neq", "!="), ("gt", ">"), ("gte", ">="), ("lt", "<"), ("lte", "<="),
    ])
    def test_comparison_operators(self, pg, op, symbol):
        sql, params = pg.count_rows("orders", parse_filter(f"amount:{op}:100"))
        assert sql.endswith(f'WHERE CAST("amount" AS TEXT) {symbol} :filter_value')
        assert params == {"filter_value": "100"}

    def test_count_without_filter(self, pg):
        assert pg.count_rows("orders") == ('SELECT COUNT(*) AS cnt FROM "public"."orders"', {})

    def test_value_is_never_interpolated(self, pg):
        sql, params = pg.count_rows("orders", parse_filter("name:eq:x' OR '1'='1"))
        assert "OR" not in sql
        assert params["filter_value"] == "x' OR '1'='1"

    def test_unqualified_tables(self):
        sql, _ = QueryBuilder().select_row_by_pk("orders", "id", "7")
        assert sql == 'SELECT * FROM "orders" WHERE CAST("id" AS TEXT) = :pk_value'


class TestWriteStatements:
    """Insert, update and delete"""

    def test_insert_skips_nulls(self, pg):
        sql, params = pg.insert_row("orders", {"customer": "acme", "amount": 12, "note": None})
        assert sql == (
            'INSERT INTO "public"."orders" ("customer", "amount") VALUES (:v0, :v1) RETURNING *'
        )
        assert params == {"v0": "acme", "v1": "12"}

    def test_insert_empty_uses_default_values(self, pg):
        sql, params = pg.insert_row("orders", {"note": None})
        assert sql == 'INSERT INTO "public"."orders" DEFAULT VALUES RETURNING *'
        assert params == {}

    def test_update_skips_pk_and_sets_nulls(self, pg):
        sql, params = pg.update_row("orders", "id", "5", {"id": 9, "status": "paid", "note": None})
        assert sql == (
            'UPDATE "public"."orders" SET "status" = :v0, "note" = NULL '
            'WHERE CAST("id" AS TEXT) = :pk_value RETURNING *'
        )
        assert params == {"v0": "paid", "pk_value": "5"}

    def test_update_with_nothing_to_set(self, pg):
        with pytest.raises(BadRequestError):
            pg.update_row("orders", "id", "5", {"id": 5})

    def test_delete(self, pg):
        sql, params = pg.delete_row("orders", "id", "5")
        assert sql == 'DELETE FROM "public"."orders" WHERE CAST("id" AS TEXT) = :pk_value'
        assert params == {"pk_value": "5"}
