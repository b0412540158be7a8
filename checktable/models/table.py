# checktable/models/table.py
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

Row = Dict[str, Any]


class ColumnType(str, Enum):
    TEXT = "text"
    CHECKBOX = "checkbox"


# Column whose empty text cells render blank instead of a placeholder
NAME_COLUMN_KEY = "name"


class Column(BaseModel):
    """
    Schema entry for one column of the table.

    ``type`` stays a plain string so documents with a type this version does
    not know about still load and render.
    """
    model_config = ConfigDict(extra="allow")

    key: str
    label: str
    type: str

    @property
    def is_checkbox(self) -> bool:
        return self.type == ColumnType.CHECKBOX.value


class Table(BaseModel):
    """The whole persisted document: columns in display order plus rows"""
    model_config = ConfigDict(extra="allow")

    columns: List[Column]
    rows: List[Row]

    @field_validator("rows")
    @classmethod
    def rows_have_ids(cls, rows: List[Row]) -> List[Row]:
        for index, row in enumerate(rows):
            if not isinstance(row.get("id"), str):
                raise ValueError(f"row {index} has no string id")
        return rows

    def find_column(self, key: str) -> Optional[Column]:
        for column in self.columns:
            if column.key == key:
                return column
        return None

    def find_row(self, row_id: str) -> Optional[Row]:
        for row in self.rows:
            if row.get("id") == row_id:
                return row
        return None

    def to_document(self) -> Dict[str, Any]:
        """Plain data ready to be written back or sent over the wire"""
        return self.model_dump(mode="json")
