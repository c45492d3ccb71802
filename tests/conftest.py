"""Shared pytest fixtures for bindQL unit and integration tests."""
from __future__ import annotations

from collections.abc import Iterator

import pytest

from bindql import LoggingErrorHandler, Record, Session
from tests.fixtures import CUSTOMERS, ORDERS, load_ddl


@pytest.fixture()
def session() -> Iterator[Session]:
    """A session connected to a seeded in-memory SQLite database."""
    s = Session("sqlite")
    conn = s.connect(":memory:")
    conn.executescript(load_ddl())
    conn.executemany("INSERT INTO customer VALUES (?,?,?,?)", CUSTOMERS)
    conn.executemany("INSERT INTO orders VALUES (?,?,?,?)", ORDERS)
    conn.commit()
    yield s
    if s.connected:
        s.disconnect()


@pytest.fixture()
def lenient(session: Session) -> Session:
    """The seeded session with a non-raising error handler."""
    session.set_error_handler(LoggingErrorHandler())
    return session


@pytest.fixture()
def customer(session: Session) -> Record:
    return session.register_record("CUSTOMER", ["ID", "NAME", "STATE", "ZIP"])
