"""Pydantic models for the schema registry.

The schema registry records the declared type of table columns (e.g.
``VARCHAR2(30)``).  The compiler consults it for the size hint of every
input binding resolved to a record column; a missing entry means "use the
default size".
"""
from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Type name followed directly by its first parameter: VARCHAR2(30), NUMBER(10,2).
_DECLARED_SIZE = re.compile(r"^\s*([A-Za-z_][\w ]*?)\s*\(\s*(\d+)")

# The parameter of these types is a precision of fractional seconds or of an
# interval field, not a value length.
_TEMPORAL_TYPES = frozenset(
    {
        "TIME",
        "TIMETZ",
        "TIMESTAMP",
        "TIMESTAMPTZ",
        "DATETIME",
        "DATETIME2",
        "DATETIMEOFFSET",
        "INTERVAL",
    }
)


class ColumnInfo(BaseModel):
    """Metadata for a single column.

    Attributes:
        name: Column name (stored uppercase).
        type: SQL type string (e.g. ``'VARCHAR2(30)'``, ``'NUMBER(10,2)'``).
        nullable: Whether the column can be NULL.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    type: str
    nullable: bool = True

    @field_validator("name")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()

    @property
    def declared_size(self) -> int | None:
        """Length from a ``TYPE(N)`` declaration, or ``None`` if there is none.

        For ``TYPE(P,S)`` the precision ``P`` is returned.  Date and time
        types such as ``TIMESTAMP(6)`` have no size.
        """
        match = _DECLARED_SIZE.match(self.type)
        if match is None or match.group(1).split()[0].upper() in _TEMPORAL_TYPES:
            return None
        return int(match.group(2))


class TableInfo(BaseModel):
    """Metadata for a single table.

    Attributes:
        name: Table name (stored uppercase).
        columns: Ordered list of column metadata.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    columns: list[ColumnInfo] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()

    @property
    def column_names(self) -> list[str]:
        """Returns all column names for this table."""
        return [c.name for c in self.columns]


class SchemaSnapshot(BaseModel):
    """Declared column types for the tables a session works with.

    Attributes:
        tables: Every table with at least one registered column.
    """

    model_config = ConfigDict(extra="forbid")

    tables: list[TableInfo] = Field(default_factory=list)

    def get_table(self, name: str) -> TableInfo | None:
        """Returns the TableInfo for the given table name, or ``None``."""
        name = name.upper()
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def get_column(self, table_name: str, column_name: str) -> ColumnInfo | None:
        """Returns the ColumnInfo for a table.column pair, or ``None``."""
        table = self.get_table(table_name)
        if table is None:
            return None
        column_name = column_name.upper()
        for col in table.columns:
            if col.name == column_name:
                return col
        return None

    def register(self, table_name: str, column_name: str, type_: str) -> ColumnInfo:
        """Add or replace the declared type of ``table_name.column_name``."""
        table = self.get_table(table_name)
        if table is None:
            table = TableInfo(name=table_name)
            self.tables.append(table)
        info = ColumnInfo(name=column_name, type=type_)
        table.columns = [c for c in table.columns if c.name != info.name] + [info]
        return info

    def declared_size(self, table_name: str, column_name: str) -> int | None:
        """Declared length of ``table_name.column_name``, or ``None``."""
        col = self.get_column(table_name, column_name)
        return col.declared_size if col is not None else None

    def merge(self, other: SchemaSnapshot) -> None:
        """Register every column of ``other``, replacing existing entries."""
        for table in other.tables:
            for col in table.columns:
                self.register(table.name, col.name, col.type)

    @property
    def table_names(self) -> list[str]:
        """Returns all table names in the snapshot."""
        return [t.name for t in self.tables]
