"""Unit tests for cells, records, bind names and the schema registry."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from bindql.config import SessionConfig
from bindql.schema.bind_name import BindName
from bindql.schema.cell import Cell, Record, RecordStore
from bindql.schema.snapshot import ColumnInfo, SchemaSnapshot
from tests.fixtures import load_schema_snapshot

# ---------------------------------------------------------------------------
# Cells and records
# ---------------------------------------------------------------------------


def test_cells_compare_by_identity():
    assert Cell(1) is not Cell(1)
    assert Cell(1) != Cell(1)


def test_record_uppercases_columns():
    rec = Record("cust", ["name", "Zip"])
    assert rec.name == "CUST"
    assert list(rec) == ["NAME", "ZIP"]
    assert "zip" in rec
    assert rec["zip"] is rec["ZIP"]


def test_record_shares_mapping_cells():
    cell = Cell("x")
    rec = Record("T", {"a": cell})
    assert rec["A"] is cell


def test_record_add_column_is_idempotent():
    rec = Record("T")
    first = rec.add_column("a", 1)
    assert rec.add_column("A", 2) is first
    assert rec.values_dict() == {"A": 1}


def test_record_store_lookup():
    store = RecordStore()
    store.add(Record("T1", ["X", "Y"]))
    store.add(Record("T2", ["X"]))
    store.add(Record("_HIDDEN", ["X"]))
    assert "t1" in store
    assert "_HIDDEN" not in store
    assert sorted(store.tables_with_column("X")) == ["T1", "T2"]
    assert store.tables_with_column("Y") == ["T1"]
    assert store.tables_with_column("_Y") == []


def test_record_store_remove():
    store = RecordStore()
    store.add(Record("T", ["X"]))
    store.remove("t")
    assert store.get("T") is None
    assert len(store) == 0


# ---------------------------------------------------------------------------
# Bind names
# ---------------------------------------------------------------------------


def test_bind_name_unqualified():
    b = BindName.parse(":min_zip")
    assert b.is_input
    assert b.name == "MIN_ZIP"
    assert b.table is None
    assert not b.qualified
    assert str(b) == ":MIN_ZIP"


def test_bind_name_qualified_output():
    b = BindName.parse(";cust.zip")
    assert not b.is_input
    assert (b.table, b.column) == ("CUST", "ZIP")
    assert not b.malformed


@pytest.mark.parametrize("token", [":a.b.c", ":a."])
def test_bind_name_malformed(token):
    assert BindName.parse(token).malformed


# ---------------------------------------------------------------------------
# Schema registry
# ---------------------------------------------------------------------------


def test_declared_size():
    assert ColumnInfo(name="a", type="VARCHAR2(30)").declared_size == 30
    assert ColumnInfo(name="a", type="NUMBER( 10 , 2)").declared_size == 10
    assert ColumnInfo(name="a", type="DATE").declared_size is None


@pytest.mark.parametrize(
    "type_, size",
    [
        ("varchar2(30 char)", 30),
        ("CHARACTER VARYING (64)", 64),
        ('VARCHAR(30) COLLATE "C"', 30),
        ("TIMESTAMP(6) WITH TIME ZONE", None),
        ("timestamp(3)", None),
        ("INTERVAL DAY(2) TO SECOND(6)", None),
        ("DATETIME2(7)", None),
        ("ARRAY<VARCHAR(10)>", None),
    ],
)
def test_declared_size_only_from_leading_type(type_, size):
    assert ColumnInfo(name="a", type=type_).declared_size == size


def test_snapshot_lookup_is_case_insensitive():
    snap = load_schema_snapshot()
    assert snap.get_table("customer") is not None
    assert snap.declared_size("customer", "name") == 40
    assert snap.declared_size("customer", "missing") is None
    assert snap.declared_size("ghost", "name") is None


def test_snapshot_register_replaces_entry():
    snap = SchemaSnapshot()
    snap.register("t", "a", "CHAR(1)")
    snap.register("T", "A", "CHAR(8)")
    assert snap.table_names == ["T"]
    assert snap.get_table("T").column_names == ["A"]
    assert snap.declared_size("T", "A") == 8


def test_snapshot_merge():
    snap = SchemaSnapshot()
    snap.register("CUSTOMER", "NAME", "VARCHAR(1)")
    snap.merge(load_schema_snapshot())
    assert snap.declared_size("CUSTOMER", "NAME") == 40
    assert snap.declared_size("ORDERS", "NOTE") == 200


def test_snapshot_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        SchemaSnapshot.model_validate({"tables": [], "views": []})


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


def test_config_defaults():
    config = SessionConfig()
    assert config.default_size == 2000
    assert config.schema_sizing
    assert config.row_cache_size == 1000
    assert not config.trace


def test_config_rejects_bad_values():
    with pytest.raises(ValidationError):
        SessionConfig(default_size=0)
    with pytest.raises(ValidationError):
        SessionConfig(unknown=True)
