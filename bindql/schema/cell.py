"""Storage cells and the record store.

A :class:`Cell` is the mutable slot shared between caller code and the
engine: the caller writes input values into it, the engine reads them when
executing and writes fetched column values back into it.

A :class:`Record` maps uppercase column names to cells for one logical
table (or alias).  The :class:`RecordStore` holds every record a session
can resolve bind tokens against.
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

#: Names starting with this prefix are internal and never resolvable.
RESERVED_PREFIX = "_"


def is_reserved(name: str) -> bool:
    """True for internal bookkeeping names."""
    return name.startswith(RESERVED_PREFIX)


class Cell:
    """A single mutable scalar value.

    Cells compare by identity: two cells holding the same value are still
    distinct storage.
    """

    __slots__ = ("value",)

    def __init__(self, value: Any = None) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Cell({self.value!r})"


class Record(Mapping[str, Cell]):
    """Column name -> :class:`Cell` mapping for one logical table.

    Column names are canonicalised to uppercase.  Reading a missing column
    raises ``KeyError`` like any mapping.

    Args:
        name: Record (table or alias) name.
        columns: Column names, or an existing ``name -> Cell`` mapping whose
            cells are shared rather than copied.
    """

    def __init__(self, name: str, columns: Iterable[str] | Mapping[str, Cell] = ()) -> None:
        self.name = name.upper()
        self._cells: dict[str, Cell] = {}
        if isinstance(columns, Mapping):
            for column, cell in columns.items():
                self._cells[column.upper()] = cell
        else:
            for column in columns:
                self.add_column(column)

    def add_column(self, column: str, value: Any = None) -> Cell:
        """Add ``column`` (if absent) and return its cell."""
        key = column.upper()
        cell = self._cells.get(key)
        if cell is None:
            cell = self._cells[key] = Cell(value)
        return cell

    def values_dict(self) -> dict[str, Any]:
        """Snapshot of the current cell values keyed by column."""
        return {column: cell.value for column, cell in self._cells.items()}

    def __getitem__(self, column: str) -> Cell:
        return self._cells[column.upper()]

    def __contains__(self, column: object) -> bool:
        return isinstance(column, str) and column.upper() in self._cells

    def __iter__(self) -> Iterator[str]:
        return iter(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return f"Record({self.name!r}, {self.values_dict()!r})"


class RecordStore:
    """Named records owned by a session."""

    def __init__(self) -> None:
        self._records: dict[str, Record] = {}

    def add(self, record: Record) -> Record:
        self._records[record.name] = record
        return record

    def get(self, name: str) -> Record | None:
        """Returns the record called ``name``, or ``None``.

        Reserved names never resolve.
        """
        name = name.upper()
        if is_reserved(name):
            return None
        return self._records.get(name)

    def remove(self, name: str) -> None:
        self._records.pop(name.upper(), None)

    def tables_with_column(self, column: str) -> list[str]:
        """Names of every non-reserved record holding a resolvable ``column``."""
        if is_reserved(column):
            return []
        return [
            name
            for name, record in self._records.items()
            if not is_reserved(name) and column in record
        ]

    @property
    def names(self) -> list[str]:
        return list(self._records)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __len__(self) -> int:
        return len(self._records)
