"""
Column registry for invoice tables.

An invoice table always starts with the fixed columns Description, Qty and
Price, followed by the user's custom columns in the order the user arranged
them. Each custom column carries a behavior tag that decides how its values
take part in a line item's total.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from invoicer.exceptions import (
    ColumnNotFoundError,
    DuplicateColumnError,
    InvalidColumnNameError,
    InvalidReferenceError,
)

FIXED_COLUMNS: Tuple[str, ...] = ("Description", "Qty", "Price")

# Alternate labels clients use for the fixed columns
FIXED_COLUMN_ALIASES = {
    "Quantity": "Qty",
    "Unit Price": "Price",
}


class ColumnBehavior(str, Enum):
    """How a custom column's value affects the line total"""
    NEUTRAL = "text"
    ADDITIVE = "additive"
    SUBTRACTIVE = "subtractive"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str) and value.lower() == "neutral":
            return cls.NEUTRAL
        return None


class InsertPosition(str, Enum):
    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class Column:
    name: str
    behavior: ColumnBehavior = ColumnBehavior.NEUTRAL

    def __post_init__(self):
        object.__setattr__(self, "behavior", ColumnBehavior(self.behavior))

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.behavior.value}

    @classmethod
    def from_dict(cls, data: dict) -> "Column":
        return cls(name=data["name"], behavior=ColumnBehavior(data.get("type") or ColumnBehavior.NEUTRAL.value))


def is_fixed_column(name: str) -> bool:
    return name in FIXED_COLUMNS or name in FIXED_COLUMN_ALIASES


class ColumnRegistry:
    """Ordered custom columns of one invoice"""

    def __init__(self, columns: Optional[Iterable[Column]] = None):
        self._columns: List[Column] = []
        for column in columns or []:
            if self.index_of(column.name) is not None:
                raise DuplicateColumnError(column.name)
            self._columns.append(column)

    def __len__(self) -> int:
        return len(self._columns)

    def __iter__(self):
        return iter(self._columns)

    @property
    def custom_columns(self) -> List[Column]:
        return list(self._columns)

    @property
    def names(self) -> List[str]:
        return [column.name for column in self._columns]

    def all_columns(self) -> List[str]:
        """Fixed column names followed by custom column names, in render order"""
        return list(FIXED_COLUMNS) + self.names

    def index_of(self, name: str) -> Optional[int]:
        for index, column in enumerate(self._columns):
            if column.name == name:
                return index
        return None

    def get(self, name: str) -> Optional[Column]:
        index = self.index_of(name)
        return self._columns[index] if index is not None else None

    def resolve_insert_index(
        self,
        reference_column_name: Optional[str],
        position: InsertPosition = InsertPosition.AFTER,
    ) -> int:
        """
        Work out where a new custom column goes.

        Fixed columns cannot host a custom column between them, so any fixed
        reference maps to the start of the custom columns. Without a reference
        the column is appended.
        """
        position = InsertPosition(position)
        if reference_column_name is None:
            return len(self._columns)
        if is_fixed_column(reference_column_name):
            return 0

        ref_index = self.index_of(reference_column_name)
        if ref_index is None:
            raise InvalidReferenceError(reference_column_name)
        return ref_index if position == InsertPosition.BEFORE else ref_index + 1

    def insert_column(
        self,
        name: str,
        behavior: ColumnBehavior = ColumnBehavior.NEUTRAL,
        reference_column_name: Optional[str] = None,
        position: InsertPosition = InsertPosition.AFTER,
    ) -> int:
        """
        Insert a custom column and return its index among custom columns.

        Raises:
            InvalidColumnNameError: name is empty
            DuplicateColumnError: a custom column already has this exact name
            InvalidReferenceError: the reference column does not exist
        """
        if not name or not name.strip():
            raise InvalidColumnNameError(name)
        if self.index_of(name) is not None:
            raise DuplicateColumnError(name)

        insert_index = self.resolve_insert_index(reference_column_name, position)
        self._columns.insert(insert_index, Column(name=name, behavior=ColumnBehavior(behavior)))
        return insert_index

    def remove_column(self, name: str) -> int:
        """Remove a custom column and return the index it occupied"""
        index = self.index_of(name)
        if index is None:
            raise ColumnNotFoundError(name)
        del self._columns[index]
        return index

    def to_list(self) -> List[dict]:
        return [column.to_dict() for column in self._columns]

    @classmethod
    def from_list(cls, data: Optional[Iterable[dict]]) -> "ColumnRegistry":
        return cls(Column.from_dict(item) for item in data or [])
