"""bindQL data model: cells, records, schema registry, column rules."""
from bindql.schema.bind_name import BindName
from bindql.schema.cell import Cell, Record, RecordStore
from bindql.schema.rules import ColumnRule, ColumnRuleRegistry, parse_rule, sql_safe
from bindql.schema.snapshot import (
    ColumnInfo,
    SchemaSnapshot,
    TableInfo,
)

__all__ = [
    "BindName",
    "Cell",
    "Record",
    "RecordStore",
    "ColumnRule",
    "ColumnRuleRegistry",
    "parse_rule",
    "sql_safe",
    "ColumnInfo",
    "SchemaSnapshot",
    "TableInfo",
]
