"""bindQL – bind-token SQL templates over records of storage cells.

Write SQL once, bind it to your variables.

Public API
----------
``Session``
    Owns a connection, the records bind tokens resolve against, and one
    live statement: ``prepare`` -> ``execute`` -> ``fetch`` -> ``finish``.

``compile_template``
    Compile a template against a set of records without a database.

Re-exported types
-----------------
``Cell``, ``Record``, ``CompiledStatement``, ``SessionConfig``,
``SchemaSnapshot``, the error handlers, and all error classes.

Template language
-----------------
``:NAME`` / ``:TABLE.COLUMN``
    Input parameter; becomes a ``?`` placeholder bound to the cell.
``;NAME`` / ``;TABLE.COLUMN``
    Output column; removed from the SQL, the preceding expression is
    fetched into the cell.
``'...'``
    String literal; copied verbatim, never scanned for tokens.

Extensibility
-------------
New database layers can be registered via::

    from bindql.driver.registry import DriverFactory

    @DriverFactory.register("oracle")
    class OracleDriver(DBAPIDriver):
        ...

After registration, ``Session("oracle")`` picks it up automatically.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from bindql.compile.base import CompiledStatement, InputBinding
from bindql.compile.builder import TemplateCompiler
from bindql.compile.context import CompilationContext
from bindql.compile.lists import ListBuilder
from bindql.config import SessionConfig
from bindql.driver import (
    DatabaseDriver,
    DBAPIDriver,
    DriverError,
    DriverFactory,
    SQLiteDriver,
    StatementHandle,
)
from bindql.errors import (
    AmbiguousColumnError,
    BindQLError,
    BindRegistrationError,
    ColumnRuleFormatError,
    CompileRejectedError,
    ConnectError,
    ExecuteFailedError,
    FetchFailedError,
    FetchSetupError,
    LastError,
    MalformedBindNameError,
    NoStatementPreparedError,
    NotConnectedError,
    OperationFailedError,
    ReservedNameError,
    UnknownColumnError,
    UnknownColumnRuleTypeError,
    UnknownTableError,
)
from bindql.handlers import (
    CallableErrorHandler,
    ErrorHandler,
    LoggingErrorHandler,
    RaisingErrorHandler,
)
from bindql.schema.cell import Cell, Record, RecordStore
from bindql.schema.converters import schema_from_sqlalchemy
from bindql.schema.rules import ColumnRule, sql_safe
from bindql.schema.snapshot import ColumnInfo, SchemaSnapshot, TableInfo
from bindql.session import Phase, Session, SessionState

__all__ = [
    # Core
    "Session",
    "SessionState",
    "Phase",
    "compile_template",
    # Data model
    "Cell",
    "Record",
    "RecordStore",
    "SchemaSnapshot",
    "TableInfo",
    "ColumnInfo",
    "ColumnRule",
    "sql_safe",
    "schema_from_sqlalchemy",
    # Compilation
    "CompiledStatement",
    "InputBinding",
    "TemplateCompiler",
    "CompilationContext",
    "ListBuilder",
    # Config
    "SessionConfig",
    # Drivers
    "DatabaseDriver",
    "StatementHandle",
    "DBAPIDriver",
    "SQLiteDriver",
    "DriverFactory",
    "DriverError",
    # Error handling
    "ErrorHandler",
    "RaisingErrorHandler",
    "LoggingErrorHandler",
    "CallableErrorHandler",
    "LastError",
    # Errors
    "BindQLError",
    "NotConnectedError",
    "ConnectError",
    "NoStatementPreparedError",
    "CompileRejectedError",
    "UnknownTableError",
    "UnknownColumnError",
    "AmbiguousColumnError",
    "MalformedBindNameError",
    "BindRegistrationError",
    "ExecuteFailedError",
    "FetchSetupError",
    "FetchFailedError",
    "OperationFailedError",
    "ColumnRuleFormatError",
    "UnknownColumnRuleTypeError",
    "ReservedNameError",
]


def compile_template(
    template: str,
    records: Iterable[Record] = (),
    bindings: Mapping[str, Cell] | None = None,
    *,
    schema: SchemaSnapshot | None = None,
    config: SessionConfig | None = None,
    statement_id: object = None,
) -> CompiledStatement:
    """Compile ``template`` against ``records`` without touching a database.

    Example::

        customer = Record("CUSTOMER", ["NAME", "ZIP"])
        compiled = bindql.compile_template(
            "select name;name from customer where zip > :minzip",
            [customer],
            {"MINZIP": Cell(60000)},
        )
        compiled.sql  # 'SELECT NAME FROM CUSTOMER WHERE ZIP > ?'

    Args:
        template: SQL with bind tokens.
        records: Records bind tokens resolve against.
        bindings: Ad-hoc ``name -> Cell`` bindings, checked first.
        schema: Declared column types for size hints.
        config: Default size and schema sizing settings.
        statement_id: Id attached to the result.

    Returns:
        The :class:`CompiledStatement`.

    Raises:
        BindQLError: (or subclass) when a bind token cannot be resolved.
    """
    store = RecordStore()
    for record in records:
        store.add(record)
    ctx = CompilationContext(
        records=store,
        schema=schema if schema is not None else SchemaSnapshot(),
        config=config or SessionConfig(),
    )
    return TemplateCompiler(ctx).compile(statement_id, template, bindings)
