"""
Base DataSource Interface for Multi-Database Support
All data source backends must implement this interface
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field


Row = Dict[str, Any]


@dataclass
class TableInfo:
    """Table metadata."""
    table_name: str
    table_schema: str


@dataclass
class ColumnInfo:
    """Column metadata."""
    column_name: str
    data_type: str
    is_nullable: bool
    column_default: Optional[str] = None
    is_primary_key: bool = False
    max_length: Optional[int] = None


@dataclass
class TableSchema:
    """Columns of a table in ordinal order plus its primary key."""
    table_name: str
    columns: List[ColumnInfo]
    primary_key_columns: List[str]


@dataclass
class RowsQuery:
    """
    Listing options.

    `filter` has the form "column:op:value" with op one of
    eq, neq, gt, gte, lt, lte, like.
    """
    page: Optional[int] = None
    per_page: Optional[int] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    filter: Optional[str] = None


@dataclass
class RowsPage:
    """One page of rows plus the filtered total."""
    rows: List[Row] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    per_page: int = 20


class DataSource(ABC):
    """
    Abstract base class for data sources.

    Implementations receive table and column names at call time; callers are
    expected to have checked permissions already.
    """

    # Schema introspection

    @abstractmethod
    def list_tables(self) -> List[TableInfo]:
        """
        List base tables, ordered by name.

        Returns:
            List of TableInfo objects
        """
        pass

    @abstractmethod
    def get_primary_key_columns(self, table: str) -> List[str]:
        """
        Resolve the primary key column names in ordinal order.

        Returns:
            Column names, empty if the table has no primary key
        """
        pass

    @abstractmethod
    def get_table_schema(self, table: str) -> TableSchema:
        """
        Get complete table schema.

        Args:
            table: Table name

        Returns:
            TableSchema with columns in ordinal position
        """
        pass

    # Row access

    @abstractmethod
    def list_rows(self, table: str, query: RowsQuery) -> RowsPage:
        """List rows with pagination, sorting, and a single filter predicate."""
        pass

    @abstractmethod
    def get_row(self, table: str, pk_value: str) -> Row:
        """Get a single row by the text value of its first primary key column."""
        pass

    @abstractmethod
    def insert_row(self, table: str, data: Any) -> Row:
        """Insert a row and return it as stored."""
        pass

    @abstractmethod
    def update_row(self, table: str, pk_value: str, data: Any) -> Row:
        """Update a row by primary key and return it as stored."""
        pass

    @abstractmethod
    def delete_row(self, table: str, pk_value: str) -> None:
        """Delete a row by primary key."""
        pass

    def ping(self) -> None:
        """Check the source is reachable; raises on failure."""
        pass

    def close(self) -> None:
        """Release pooled resources."""
        pass
