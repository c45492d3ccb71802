"""Utilities for building a SchemaSnapshot from external sources.

SQLAlchemy converter
--------------------
:func:`schema_from_sqlalchemy` reflects a live database engine and returns a
:class:`~bindql.schema.snapshot.SchemaSnapshot` whose declared column types
drive the size hints of input bindings.

Install the optional dependency before using this module::

    pip install "bindql[sqlalchemy]"

Example::

    from sqlalchemy import create_engine
    from bindql.schema.converters import schema_from_sqlalchemy

    engine = create_engine("sqlite:///mydb.db")
    session.load_schema(schema_from_sqlalchemy(engine))
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bindql.schema.snapshot import ColumnInfo, SchemaSnapshot, TableInfo

if TYPE_CHECKING:
    from sqlalchemy import Engine, MetaData


def schema_from_sqlalchemy(
    engine: Engine,
    *,
    include_tables: list[str] | None = None,
    schema: str | None = None,
) -> SchemaSnapshot:
    """Build a :class:`SchemaSnapshot` by reflecting a SQLAlchemy engine.

    All tables visible to the engine (or a subset via *include_tables*) are
    reflected using SQLAlchemy's :class:`~sqlalchemy.schema.MetaData`.  Each
    column's type is rendered with its length, so ``String(30)`` becomes
    ``VARCHAR(30)`` and yields a size hint of 30.

    Args:
        engine: A connected :class:`sqlalchemy.engine.Engine` instance.
        include_tables: Optional allowlist of table names to reflect.
            When ``None`` all tables in the schema are reflected.
        schema: Optional database schema name (e.g. ``"public"`` for
            PostgreSQL).  Passed directly to
            :meth:`sqlalchemy.schema.MetaData.reflect`.

    Returns:
        A fully populated :class:`SchemaSnapshot`.

    Raises:
        ImportError: If ``sqlalchemy`` is not installed.
    """
    try:
        from sqlalchemy import MetaData as _MetaData
    except ImportError as exc:
        raise ImportError(
            "SQLAlchemy is required for schema_from_sqlalchemy(). "
            'Install it with: pip install "bindql[sqlalchemy]"'
        ) from exc

    metadata = _MetaData()
    with engine.connect() as conn:
        metadata.reflect(bind=conn, only=include_tables, schema=schema)

    return _metadata_to_snapshot(metadata)


def _metadata_to_snapshot(metadata: MetaData) -> SchemaSnapshot:
    """Convert a reflected :class:`~sqlalchemy.schema.MetaData` into a
    :class:`SchemaSnapshot`.

    Separated from :func:`schema_from_sqlalchemy` so callers that already
    hold a ``MetaData`` (declarative models, for instance) can reuse it.
    """
    tables = [
        TableInfo(
            name=table.name,
            columns=[
                ColumnInfo(
                    name=col.name,
                    type=str(col.type),
                    nullable=col.nullable is not False,
                )
                for col in table.columns
            ],
        )
        for table in metadata.sorted_tables
    ]
    return SchemaSnapshot(tables=tables)
