"""Table schemas for grid browsing and editing."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from tableedit.schemas.base import WireModel

# Probed in order against the schema's column names
PRIMARY_KEY_CANDIDATES = ("ID", "%ID", "RowID", "ROWID", "Id", "id")

SortDirection = Optional[Literal["asc", "desc"]]


class ColumnInfo(WireModel):
    """Column information schema."""

    name: str
    data_type: str
    nullable: bool = True
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    read_only: bool = False


class TableSchema(WireModel):
    """Table schema: qualified table name, namespace and ordered columns."""

    table_name: str
    namespace: str
    columns: List[ColumnInfo] = Field(default_factory=list)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def get_column(self, name: str) -> Optional[ColumnInfo]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def column_index(self, name: str) -> Optional[int]:
        for index, column in enumerate(self.columns):
            if column.name == name:
                return index
        return None

    def primary_key_column(self) -> Optional[str]:
        """Infer the primary-key column, or None when the table has none we know."""
        names = set(self.column_names)
        for candidate in PRIMARY_KEY_CANDIDATES:
            if candidate in names:
                return candidate
        return None


class FilterCriterion(WireModel):
    """Column filter as typed by the user."""

    column: str
    value: str


class TablePage(WireModel):
    """One page of rows plus the filtered row count."""

    rows: List[Dict[str, Any]] = Field(default_factory=list)
    total_rows: int = 0
