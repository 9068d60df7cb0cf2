"""
Data Access Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Any, Dict


class TableInfoResponse(BaseModel):
    """Table listing entry."""
    table_name: str
    table_schema: str

    class Config:
        from_attributes = True


class ColumnInfoResponse(BaseModel):
    """Column metadata."""
    column_name: str
    data_type: str
    is_nullable: bool
    column_default: Optional[str] = None
    is_primary_key: bool = False
    max_length: Optional[int] = None

    class Config:
        from_attributes = True


class TableSchemaResponse(BaseModel):
    """Columns in ordinal order plus the primary key."""
    table_name: str
    columns: List[ColumnInfoResponse] = []
    primary_key_columns: List[str] = []

    class Config:
        from_attributes = True


class RowsResponse(BaseModel):
    """One page of rows."""
    rows: List[Dict[str, Any]] = []
    total_count: int = 0
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1, le=100)

    class Config:
        from_attributes = True
