"""
Query Builder
Builds parameterized SQL for tables and columns only known at request time.

Identifiers are quoted into the SQL text; values are always bound
parameters. Comparisons cast the column to text so one operator syntax works
for every column type. The cost is that numeric and date comparisons (gt, lt,
...) and text-cast equality are lexicographic.
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from dbworks.core.exceptions import BadRequestError

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100

FILTER_OPERATORS = {
    "eq": "=",
    "neq": "!=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "like": "LIKE",
}

Statement = Tuple[str, Dict[str, Any]]


def quote_ident(name: str) -> str:
    """Double-quote an identifier, doubling any embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


def to_bind_text(value: Any) -> str:
    """Render a payload value as the text that gets bound: strings as-is, the rest as JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


def clamp_pagination(page: Optional[int], per_page: Optional[int]) -> Tuple[int, int]:
    """Apply defaults and bounds: page >= 1, 1 <= per_page <= MAX_PER_PAGE."""
    page = DEFAULT_PAGE if page is None else max(page, 1)
    per_page = DEFAULT_PER_PAGE if per_page is None else min(max(per_page, 1), MAX_PER_PAGE)
    return page, per_page


@dataclass(frozen=True)
class ColumnFilter:
    column: str
    op: str
    value: str


def parse_filter(expression: str) -> ColumnFilter:
    """
    Parse "column:op:value".

    Only the first two colons split, so the value may itself contain colons.
    Unknown operators fall back to eq.
    """
    parts = expression.split(":", 2)
    if len(parts) != 3 or not parts[0]:
        raise BadRequestError(
            f"Invalid filter '{expression}': expected 'column:op:value'"
        )
    column, op, value = parts
    if op not in FILTER_OPERATORS:
        op = "eq"
    return ColumnFilter(column=column, op=op, value=value)


class QueryBuilder:
    """
    Statement factory for one backend.

    Args:
        schema: Namespace to qualify table names with, or None for unqualified
        like_operator: Case-insensitive LIKE of the backend (ILIKE on PostgreSQL)
    """

    def __init__(self, schema: Optional[str] = None, like_operator: str = "LIKE"):
        self.schema = schema
        self.like_operator = like_operator

    def table_ref(self, table: str) -> str:
        if self.schema:
            return f"{quote_ident(self.schema)}.{quote_ident(table)}"
        return quote_ident(table)

    @staticmethod
    def text_cast(column: str) -> str:
        return f"CAST({quote_ident(column)} AS TEXT)"

    def _where(self, column_filter: Optional[ColumnFilter]) -> Tuple[str, Dict[str, Any]]:
        if column_filter is None:
            return "", {}
        if column_filter.op == "like":
            operator = self.like_operator
            value = f"%{column_filter.value}%"
        else:
            operator = FILTER_OPERATORS[column_filter.op]
            value = column_filter.value
        clause = f" WHERE {self.text_cast(column_filter.column)} {operator} :filter_value"
        return clause, {"filter_value": value}

    def count_rows(self, table: str, column_filter: Optional[ColumnFilter] = None) -> Statement:
        where, params = self._where(column_filter)
        return f"SELECT COUNT(*) AS cnt FROM {self.table_ref(table)}{where}", params

    def select_rows(
        self,
        table: str,
        column_filter: Optional[ColumnFilter] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        limit: int = DEFAULT_PER_PAGE,
        offset: int = 0
    ) -> Statement:
        where, params = self._where(column_filter)

        order = ""
        if sort_by:
            direction = "DESC" if (sort_order or "").lower() == "desc" else "ASC"
            order = f" ORDER BY {quote_ident(sort_by)} {direction}"

        sql = f"SELECT * FROM {self.table_ref(table)}{where}{order} LIMIT :limit OFFSET :offset"
        params.update({"limit": limit, "offset": offset})
        return sql, params

    def select_row_by_pk(self, table: str, pk_column: str, pk_value: str) -> Statement:
        sql = f"SELECT * FROM {self.table_ref(table)} WHERE {self.text_cast(pk_column)} = :pk_value"
        return sql, {"pk_value": pk_value}

    def insert_row(self, table: str, data: Dict[str, Any]) -> Statement:
        """INSERT ... RETURNING *. Null fields are left out so store defaults apply."""
        columns: List[str] = []
        placeholders: List[str] = []
        params: Dict[str, Any] = {}

        for key, value in data.items():
            if value is None:
                continue
            name = f"v{len(params)}"
            columns.append(quote_ident(key))
            placeholders.append(f":{name}")
            params[name] = to_bind_text(value)

        if not columns:
            return f"INSERT INTO {self.table_ref(table)} DEFAULT VALUES RETURNING *", params

        sql = (
            f"INSERT INTO {self.table_ref(table)} ({', '.join(columns)}) "
            f"VALUES ({', '.join(placeholders)}) RETURNING *"
        )
        return sql, params

    def update_row(self, table: str, pk_column: str, pk_value: str, data: Dict[str, Any]) -> Statement:
        """UPDATE ... RETURNING *. The primary key column is never set; nulls become SET col = NULL."""
        set_clauses: List[str] = []
        params: Dict[str, Any] = {}

        for key, value in data.items():
            if key == pk_column:
                continue
            if value is None:
                set_clauses.append(f"{quote_ident(key)} = NULL")
                continue
            name = f"v{len(params)}"
            set_clauses.append(f"{quote_ident(key)} = :{name}")
            params[name] = to_bind_text(value)

        if not set_clauses:
            raise BadRequestError("No updatable columns in payload")

        params["pk_value"] = pk_value
        sql = (
            f"UPDATE {self.table_ref(table)} SET {', '.join(set_clauses)} "
            f"WHERE {self.text_cast(pk_column)} = :pk_value RETURNING *"
        )
        return sql, params

    def delete_row(self, table: str, pk_column: str, pk_value: str) -> Statement:
        sql = f"DELETE FROM {self.table_ref(table)} WHERE {self.text_cast(pk_column)} = :pk_value"
        return sql, {"pk_value": pk_value}
