"""Test fixtures: sample schema DDL, seed rows and SchemaSnapshot JSON."""

from __future__ import annotations

import json
from pathlib import Path

from bindql.schema.snapshot import SchemaSnapshot

_FIXTURES_DIR = Path(__file__).parent

#: (id, name, state, zip) ordered by id.
CUSTOMERS = [
    (1, "Ada", "IL", 61820),
    (2, "Grace", "KY", 40202),
    (3, "Edsger", "IL", 60601),
    (4, "Barbara", "NY", 10001),
]

#: (id, customer_id, total, note)
ORDERS = [
    (10, 1, 25.5, "first"),
    (11, 1, 12.0, None),
    (12, 3, 99.99, "it's big"),
]


def load_schema_snapshot() -> SchemaSnapshot:
    """Load the canonical sample SchemaSnapshot from schema.json."""
    data = json.loads((_FIXTURES_DIR / "schema.json").read_text())
    return SchemaSnapshot.model_validate(data)


def load_ddl() -> str:
    """Return the sample SQLite DDL."""
    return (_FIXTURES_DIR / "ddl_sqlite.sql").read_text()
