"""Integration tests: prepare → execute → fetch against a real SQLite in-memory DB.

Covers the fetch loop into record cells, re-execution with new input values,
writes with commit and rollback, ad-hoc record bindings, qualified and
ambiguous names, string literals, NULL values and the list builders.
"""
from __future__ import annotations

import pytest

from bindql import Cell, Phase, Session
from bindql.errors import (
    AmbiguousColumnError,
    CompileRejectedError,
    ExecuteFailedError,
    NoStatementPreparedError,
    NotConnectedError,
)
from tests.fixtures import load_schema_snapshot

ORDER_COLUMNS = ["ID", "CUSTOMER_ID", "TOTAL", "NOTE"]


def _rows(session: Session, *cells: Cell) -> list[tuple]:
    """Execute the live statement and collect every row from ``cells``."""
    assert session.execute()
    rows = []
    while session.fetch():
        rows.append(tuple(cell.value for cell in cells))
    session.finish()
    return rows


def _count(session: Session, table: str) -> int:
    n = Cell()
    session.prepare("count", f"select count(*);n from {table}", n=n)
    return _rows(session, n)[0][0]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def test_select_into_record(session, customer):
    min_zip = Cell(60000)
    session.prepare(
        "customers",
        "select name;name, zip;zip from customer where zip > :minzip order by id",
        {"MINZIP": min_zip},
    )
    assert session.sql == "SELECT NAME, ZIP FROM CUSTOMER WHERE ZIP > ? ORDER BY ID"
    assert _rows(session, customer["NAME"], customer["ZIP"]) == [
        ("Ada", 61820),
        ("Edsger", 60601),
    ]


def test_reexecute_reads_new_input_values(session, customer):
    state = Cell("IL")
    session.prepare(
        "by_state", "select id;id from customer where state = :st order by id", st=state
    )
    assert session.execute()
    ids = []
    while session.fetch():
        ids.append(customer["ID"].value)
    state.value = "NY"
    assert session.execute()
    while session.fetch():
        ids.append(customer["ID"].value)
    session.finish()
    assert ids == [1, 3, 4]


def test_record_binding_round_trip(session):
    c = Session.record("c", ["name", "zip"])
    session.prepare(
        "one",
        "select name;c.name, zip;c.zip from customer where id = :id",
        Session.binding(c),
        id=Cell(2),
    )
    assert _rows(session, c["C.NAME"], c["C.ZIP"]) == [("Grace", 40202)]


def test_string_literals_are_not_scanned(session, customer):
    session.prepare(
        "literal",
        "select name;name from customer where name <> ':zip' and state = 'IL' order by id",
    )
    assert session.compiled.inputs == ()
    assert _rows(session, customer["NAME"]) == [("Ada",), ("Edsger",)]


def test_doubled_quote_literal(session):
    order = session.register_record("ORDERS", ORDER_COLUMNS)
    session.prepare("quoted", "select id;id from orders where note = 'it''s big'")
    assert _rows(session, order["ID"]) == [(12,)]


def test_null_values_are_fetched(session):
    order = session.register_record("ORDERS", ORDER_COLUMNS)
    session.prepare("nulls", "select id;id, note;note from orders where customer_id = 1 order by id")
    assert _rows(session, order["ID"], order["NOTE"]) == [(10, "first"), (11, None)]


def test_ambiguous_then_qualified(session, customer):
    orders = session.register_record("ORDERS", ORDER_COLUMNS)
    with pytest.raises(AmbiguousColumnError):
        session.prepare("join", "select c.id;id from customer c where c.id = 1")

    session.prepare(
        "join",
        "select c.name;customer.name, o.total;orders.total"
        " from customer c join orders o on o.customer_id = c.id"
        " where o.id = :orders.id",
    )
    orders["ID"].value = 12
    assert _rows(session, customer["NAME"], orders["TOTAL"]) == [("Edsger", 99.99)]


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def test_insert_commit_and_rollback(session):
    orders = session.register_record("ORDERS", ORDER_COLUMNS)
    session.prepare(
        "insert",
        "insert into orders values"
        " (:orders.id, :orders.customer_id, :orders.total, :orders.note)",
    )
    for column, value in zip(ORDER_COLUMNS, (13, 2, 5.0, "kept")):
        orders[column].value = value
    assert session.execute()
    session.finish()
    assert session.commit()

    session.prepare(
        "insert",
        "insert into orders values"
        " (:orders.id, :orders.customer_id, :orders.total, :orders.note)",
    )
    orders["ID"].value = 14
    assert session.execute()
    session.finish()
    assert _count(session, "orders") == 5
    assert session.rollback()
    assert _count(session, "orders") == 4


def test_list_builders_update(session, customer):
    schema = load_schema_snapshot()
    session.load_schema(schema)
    session.prepare(
        "rename",
        f"update customer set {session.update_list(['name'])}"
        f" where {session.where_list(['id'])}",
    )
    assert [b.size for b in session.compiled.inputs] == [40, 2000]
    customer["NAME"].value = "Ada L."
    customer["ID"].value = 1
    assert session.execute()
    session.finish()

    session.prepare("check", "select name;name from customer where id = 1")
    assert _rows(session, customer["NAME"]) == [("Ada L.",)]


def test_execute_failure_leaves_statement_prepared(session, lenient):
    orders = session.register_record("ORDERS", ORDER_COLUMNS)
    session.prepare("dup", f"insert into orders values ({session.values_list(ORDER_COLUMNS)})")
    orders["ID"].value, orders["CUSTOMER_ID"].value = 10, 1
    assert session.execute() is None
    assert session.err() != 0
    assert session.phase is Phase.PREPARED

    orders["ID"].value = 20
    assert session.execute() is True
    assert session.chk_error() == "OK"


def test_execute_failure_raises_by_default(session):
    session.prepare("bad", "insert into customer (id, name) values (1, 'dup')")
    with pytest.raises(ExecuteFailedError) as exc_info:
        session.execute()
    assert exc_info.value.last_error.code != 0


# ---------------------------------------------------------------------------
# Lifecycle edges
# ---------------------------------------------------------------------------


def test_fetch_without_statement(session):
    with pytest.raises(NoStatementPreparedError):
        session.fetch()


def test_prepare_after_disconnect(session, customer):
    session.disconnect()
    with pytest.raises(NotConnectedError):
        session.prepare("late", "select name;name from customer")


def test_bad_sql_is_rejected_at_prepare(session):
    with pytest.raises(CompileRejectedError) as exc_info:
        session.prepare("typo", "selec 1 frm nowhere")
    assert exc_info.value.details["sql"] == "SELEC 1 FRM NOWHERE"
    assert "syntax error" in session.errstr()
    assert session.phase is Phase.IDLE


def test_bad_sql_returns_none_when_lenient(lenient):
    assert lenient.prepare("typo", "select nope;nope from customer", nope=Cell()) is None
    assert lenient.err() != 0
    assert lenient.phase is Phase.IDLE
    assert lenient.sql is None
