"""Generic sortable table and the search filter callers apply before it."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, List, Mapping, Optional, Sequence, Tuple, TypeVar

Row = TypeVar("Row")


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass
class Column(Generic[Row]):
    header: str
    key: str
    sortable: bool = False
    render: Optional[Callable[[Row], Any]] = None


def cell_value(row: Any, key: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


def _sort_key(value: Any) -> Tuple:
    # numbers before strings so mixed columns still have a total order
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (int, float)):
        return (0, value)
    if isinstance(value, str):
        return (1, value)
    return (1, str(value))


def search_filter(rows: Sequence[Row], query: str, fields: Sequence[str]) -> List[Row]:
    """Rows where any of ``fields`` contains ``query``, ignoring case."""
    needle = query.lower()
    if not needle:
        return list(rows)
    return [
        row for row in rows
        if any(needle in str(cell_value(row, field) or "").lower() for field in fields)
    ]


class SortableTable(Generic[Row]):
    """Renders rows under column descriptors and owns the sort state.

    Clicking a sortable header cycles that column through ascending, descending
    and unsorted; clicking another column starts it at ascending. Sorting is
    stable and null values always go last.
    """

    def __init__(self, columns: Sequence[Column], on_row_click: Optional[Callable[[Row], Any]] = None):
        self.columns = list(columns)
        self.on_row_click = on_row_click
        self.sort_key: Optional[str] = None
        self.sort_direction: Optional[SortDirection] = None

    def column(self, key: str) -> Column:
        for column in self.columns:
            if column.key == key:
                return column
        raise KeyError(key)

    def toggle_sort(self, key: str) -> None:
        if not self.column(key).sortable:
            return
        if self.sort_key != key:
            self.sort_key, self.sort_direction = key, SortDirection.ASC
        elif self.sort_direction is SortDirection.ASC:
            self.sort_direction = SortDirection.DESC
        else:
            self.sort_key, self.sort_direction = None, None

    def rows(self, data: Sequence[Row]) -> List[Row]:
        if self.sort_key is None:
            return list(data)
        key = self.sort_key
        present = [row for row in data if cell_value(row, key) is not None]
        missing = [row for row in data if cell_value(row, key) is None]
        ordered = sorted(
            present,
            key=lambda row: _sort_key(cell_value(row, key)),
            reverse=self.sort_direction is SortDirection.DESC,
        )
        return ordered + missing

    def header_labels(self) -> List[str]:
        labels = []
        for column in self.columns:
            marker = ""
            if column.key == self.sort_key:
                marker = " ▲" if self.sort_direction is SortDirection.ASC else " ▼"
            labels.append(column.header + marker)
        return labels

    def render_cell(self, column: Column, row: Row) -> str:
        if column.render is not None:
            return str(column.render(row))
        value = cell_value(row, column.key)
        if isinstance(value, Enum):
            value = value.value
        return "" if value is None else str(value)

    def render(self, data: Sequence[Row]) -> List[List[str]]:
        """Header row followed by one row of cell strings per data row."""
        grid = [self.header_labels()]
        for row in self.rows(data):
            grid.append([self.render_cell(column, row) for column in self.columns])
        return grid

    def click_row(self, row: Row) -> Any:
        if self.on_row_click is None:
            return None
        return self.on_row_click(row)
