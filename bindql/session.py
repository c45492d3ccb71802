"""The statement session: records, compilation and the execution lifecycle.

A :class:`Session` owns one database connection, the records bind tokens
resolve against, and at most one live compiled statement::

    session = Session("sqlite")
    session.connect(":memory:")

    customer = session.register_record("CUSTOMER", ["NAME", "ZIP"])
    min_zip = Cell(60000)

    session.prepare(
        "customers",
        "select name;name, zip;zip from customer where zip > :minzip",
        {"MINZIP": min_zip},
    )
    session.execute()
    while session.fetch():
        print(customer["NAME"].value, customer["ZIP"].value)
    session.finish()

Lifecycle
---------
``IDLE --prepare--> PREPARED --execute--> EXECUTED --finish--> IDLE``

Every failure goes through :meth:`Session.report`, which records the
:class:`~bindql.errors.LastError` and hands the error to the installed
:class:`~bindql.handlers.ErrorHandler`.  With the default handler the error
is raised; with a non-raising handler the operation returns ``None``.
"""
from __future__ import annotations

import contextlib
import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from bindql.compile.base import CompiledStatement
from bindql.compile.builder import TemplateCompiler
from bindql.compile.context import CompilationContext
from bindql.compile.lists import ListBuilder
from bindql.config import SessionConfig
from bindql.driver import DatabaseDriver, DriverError, DriverFactory, StatementHandle
from bindql.errors import (
    GENERIC_ERROR_CODE,
    NO_ERROR,
    BindQLError,
    BindRegistrationError,
    CompileRejectedError,
    ConnectError,
    ExecuteFailedError,
    FetchFailedError,
    FetchSetupError,
    LastError,
    NoStatementPreparedError,
    NotConnectedError,
    OperationFailedError,
    ReservedNameError,
)
from bindql.handlers import ErrorHandler, RaisingErrorHandler, as_error_handler
from bindql.schema.cell import Cell, Record, RecordStore, is_reserved
from bindql.schema.rules import ColumnRuleRegistry
from bindql.schema.snapshot import SchemaSnapshot

logger = logging.getLogger("bindql")

_CONNECT_STRING = re.compile(r"[/@]")


class Phase(Enum):
    IDLE = "idle"
    PREPARED = "prepared"
    EXECUTED = "executed"


@dataclass(frozen=True)
class SessionState:
    """The live statement of a session, replaced as a whole on every transition."""

    phase: Phase = Phase.IDLE
    statement: StatementHandle | None = None
    compiled: CompiledStatement | None = None

    @property
    def sql(self) -> str | None:
        return self.compiled.sql if self.compiled else None


IDLE = SessionState()


class Session:
    """Binds SQL templates to records and runs them through one driver.

    Args:
        driver: A :class:`~bindql.driver.base.DatabaseDriver` instance or the
            name of a registered driver (``"sqlite"``).
        config: Session tunables; defaults to ``SessionConfig()``.
        error_handler: Strategy receiving every reported error; defaults to
            :class:`~bindql.handlers.RaisingErrorHandler`.
        schema: Initial schema registry contents.
    """

    def __init__(
        self,
        driver: DatabaseDriver | str = "sqlite",
        *,
        config: SessionConfig | None = None,
        error_handler: ErrorHandler | Callable[[Any, BindQLError], Any] | None = None,
        schema: SchemaSnapshot | None = None,
    ) -> None:
        self.driver = DriverFactory.create(driver) if isinstance(driver, str) else driver
        self.config = config or SessionConfig()
        self.records = RecordStore()
        self.schema = schema if schema is not None else SchemaSnapshot()
        self.rules = ColumnRuleRegistry()
        self.lists = ListBuilder(self.rules)
        self._compiler = TemplateCompiler(
            CompilationContext(records=self.records, schema=self.schema, config=self.config)
        )
        self._handler = as_error_handler(error_handler or RaisingErrorHandler())
        self._state = IDLE
        self._statement_id: Any = None
        self._last_error = NO_ERROR
        self._trace = False
        if self.config.trace:
            self.trace_on()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def compiled(self) -> CompiledStatement | None:
        return self._state.compiled

    @property
    def sql(self) -> str | None:
        return self._state.sql

    @property
    def connected(self) -> bool:
        return self.driver.connected

    @property
    def statement_id(self) -> Any:
        return self._statement_id

    # ------------------------------------------------------------------
    # Error reporting
    # ------------------------------------------------------------------

    @property
    def last_error(self) -> LastError:
        return self._last_error

    def err(self) -> int | str:
        """Code of the last error, ``0`` when the last operation succeeded."""
        return self._last_error.code

    def errstr(self) -> str:
        return self._last_error.text

    def chk_error(self) -> str:
        """``"OK"`` or ``"<code> - <text>"`` for the last error."""
        return str(self._last_error)

    def set_error_handler(
        self, handler: ErrorHandler | Callable[[Any, BindQLError], Any]
    ) -> None:
        """Replace the error handler.

        Args:
            handler: An :class:`ErrorHandler` or a ``(statement_id, error)``
                callable.
        """
        self._handler = as_error_handler(handler)

    def report(self, error: BindQLError) -> None:
        """Record ``error`` as the last error and pass it to the handler.

        The database layer's code and text are kept when the error carries
        them; otherwise the error's own message is stored under
        ``GENERIC_ERROR_CODE``.

        Returns:
            ``None`` when the handler returns instead of raising.
        """
        last = error.last_error
        if last is not None and not last.ok:
            self._last_error = last
        else:
            self._last_error = LastError(code=GENERIC_ERROR_CODE, text=str(error))
        self._handler.handle(self._statement_id, error)
        return None

    # ------------------------------------------------------------------
    # Records, schema and column rules
    # ------------------------------------------------------------------

    @staticmethod
    def record(table: str, columns: Iterable[str]) -> dict[str, Cell]:
        """Return fresh cells keyed by column name.

        Args:
            table: Optional table or alias prefix.  When non-empty, keys take
                the form ``TABLE.COLUMN``.
            columns: Column names.

        Returns:
            ``{"COLUMN": Cell()}`` or ``{"TABLE.COLUMN": Cell()}``, uppercased.
        """
        prefix = table.upper()
        if prefix and not prefix.endswith("."):
            prefix += "."
        return {f"{prefix}{column.upper()}": Cell() for column in columns}

    @staticmethod
    def binding(record: Mapping[str, Cell]) -> dict[str, Cell]:
        """Return a ``name -> Cell`` map for :meth:`prepare` sharing ``record``'s cells."""
        return {name.upper(): cell for name, cell in record.items()}

    def register_record(
        self, name: str, columns: Iterable[str] | Mapping[str, Cell]
    ) -> Record | None:
        """Install a named record that bind tokens resolve against.

        Args:
            name: Record (table or alias) name.
            columns: Column names, or a ``name -> Cell`` mapping whose cells
                are shared.

        Returns:
            The installed record.
        """
        self._debug("register_record(%r)", name)
        if is_reserved(name):
            return self.report(ReservedNameError(name))
        return self.records.add(Record(name, columns))

    def remove_record(self, name: str) -> None:
        self.records.remove(name)

    def col_size(self, table: str, column: str, declared_type: str) -> None:
        """Register the declared type (``VARCHAR2(30)``) of ``table.column``."""
        self.schema.register(table, column, declared_type)

    def load_schema(self, snapshot: SchemaSnapshot) -> None:
        """Register every column of ``snapshot``."""
        self.schema.merge(snapshot)

    def col_type(self, rules: Mapping[str, str] | None = None, **named: str) -> bool | None:
        """Register column rules such as ``CREATED="DATE(yyyymmdd)"``.

        Registration stops at the first malformed rule.

        Returns:
            ``True`` when every rule was registered.
        """
        for column, rule in {**(rules or {}), **named}.items():
            self._debug("col_type(%s=%r)", column, rule)
            try:
                self.rules.register(column, rule)
            except BindQLError as exc:
                return self.report(exc)
        return True

    def select_list(self, columns: Iterable[str]) -> str:
        return self.lists.select_list(columns)

    def select_list_alias(self, alias: str, columns: Iterable[str]) -> str:
        return self.lists.select_list_alias(alias, columns)

    def where_list(self, columns: Iterable[str]) -> str:
        return self.lists.where_list(columns)

    def where_list_alias(self, alias: str, columns: Iterable[str]) -> str:
        return self.lists.where_list_alias(alias, columns)

    def values_list(self, columns: Iterable[str]) -> str:
        return self.lists.values_list(columns)

    def update_list(self, columns: Iterable[str]) -> str:
        return self.lists.update_list(columns)

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def connect(
        self, descriptor: str, user: str | None = None, password: str | None = None
    ) -> Any:
        """Open the database connection.

        Returns:
            The driver's connection object.
        """
        self._debug("connect(%r, %r)", descriptor, user)
        self._last_error = NO_ERROR
        try:
            connection = self.driver.connect(descriptor, user, password)
        except DriverError as exc:
            return self.report(ConnectError(descriptor, user, exc.last_error))
        self.driver.set_row_cache_size(self.config.row_cache_size)
        return connection

    def connect_string(self, value: str) -> Any:
        """Connect with a ``user/password@descriptor`` string."""
        parts = _CONNECT_STRING.split(value, maxsplit=2)
        if len(parts) < 3:
            return self.connect(parts[-1])
        user, password, descriptor = parts
        return self.connect(descriptor, user, password)

    def commit(self) -> bool | None:
        return self._delegate("commit", self.driver.commit)

    def rollback(self) -> bool | None:
        return self._delegate("rollback", self.driver.rollback)

    def disconnect(self) -> bool | None:
        return self._delegate("disconnect", self.driver.disconnect)

    def _delegate(self, operation: str, call: Callable[[], None]) -> bool | None:
        self._debug("%s()", operation)
        self._last_error = NO_ERROR
        if not self.driver.connected:
            return self.report(NotConnectedError(operation))
        try:
            call()
        except DriverError as exc:
            return self.report(OperationFailedError(operation, exc.last_error))
        return True

    # ------------------------------------------------------------------
    # Statement lifecycle
    # ------------------------------------------------------------------

    def prepare(
        self,
        statement_id: Any,
        template: str,
        bindings: Mapping[str, Cell] | None = None,
        **cells: Cell,
    ) -> CompiledStatement | None:
        """Compile ``template`` and prepare it with the database layer.

        Args:
            statement_id: Id reported with every error concerning this
                statement.
            template: SQL with ``:NAME`` input and ``;NAME`` output tokens.
            bindings: Ad-hoc ``name -> Cell`` bindings that take priority
                over record columns.
            **cells: More ad-hoc bindings, merged over ``bindings``.

        Returns:
            The compiled statement, now live on the session.
        """
        self._debug("prepare(%r, %r)", statement_id, template)
        self._statement_id = statement_id
        self._last_error = NO_ERROR
        if self._state.statement is not None:
            logger.warning(
                "prepare(%r) discards live statement without finish(): %s",
                statement_id,
                self._state.sql,
            )
        self._state = IDLE

        try:
            compiled = self._compiler.compile(statement_id, template, {**(bindings or {}), **cells})
        except BindQLError as exc:
            return self.report(exc)

        if not self.driver.connected:
            return self.report(NotConnectedError("prepare"))

        try:
            statement = self.driver.prepare(compiled.sql)
        except DriverError as exc:
            return self.report(CompileRejectedError(compiled.sql, template, exc.last_error))

        for position, binding in enumerate(compiled.inputs, start=1):
            try:
                statement.bind_param_inout(position, binding.cell, binding.size)
            except DriverError as exc:
                with contextlib.suppress(DriverError):
                    statement.finish()
                return self.report(BindRegistrationError(position, template, exc.last_error))

        self._state = SessionState(phase=Phase.PREPARED, statement=statement, compiled=compiled)
        return compiled

    def execute(self) -> bool | None:
        """Execute the live statement with the current input cell values.

        For SELECT statements the output cells are attached to the result
        columns so each :meth:`fetch` writes straight into them.
        """
        state = self._state
        self._debug("execute() %s", state.sql)
        self._last_error = NO_ERROR
        if state.statement is None or state.compiled is None:
            return self.report(NoStatementPreparedError("execute"))

        try:
            state.statement.execute()
        except DriverError as exc:
            return self.report(ExecuteFailedError(state.compiled.sql, exc.last_error))

        if state.compiled.is_select:
            try:
                state.statement.bind_columns(state.compiled.outputs)
            except DriverError as exc:
                return self.report(FetchSetupError(state.compiled.sql, exc.last_error))

        self._state = replace(state, phase=Phase.EXECUTED)
        return True

    def fetch(self) -> bool | None:
        """Load the next row into the output cells.

        Returns:
            ``True`` when a row was loaded, ``False`` at the end of the
            result set.
        """
        state = self._state
        self._last_error = NO_ERROR
        if state.statement is None or state.compiled is None:
            return self.report(NoStatementPreparedError("fetch"))
        try:
            return state.statement.fetch()
        except DriverError as exc:
            return self.report(FetchFailedError(state.compiled.sql, exc.last_error))

    def finish(self) -> bool | None:
        """Release the live statement and return the session to idle."""
        state = self._state
        self._debug("finish() %s", state.sql)
        self._last_error = NO_ERROR
        if state.statement is None:
            return self.report(NoStatementPreparedError("finish"))
        self._state = IDLE
        try:
            state.statement.finish()
        except DriverError as exc:
            return self.report(OperationFailedError("finish", exc.last_error))
        return True

    # ------------------------------------------------------------------
    # Tracing
    # ------------------------------------------------------------------

    def trace_on(self, level: int = 0) -> None:
        """Log this session's calls at DEBUG; ``level > 0`` also traces driver SQL.

        Only this session is affected.  Whether DEBUG records are emitted is
        still up to the logging configuration of the application.
        """
        self._trace = True
        if level > 0:
            self.driver.trace(level)
        self._debug("trace on")

    def trace_off(self) -> None:
        self._debug("trace off")
        self._trace = False
        self.driver.trace(0)

    @property
    def tracing(self) -> bool:
        return self._trace

    def _debug(self, msg: str, *args: Any) -> None:
        if self._trace:
            logger.debug(msg, *args)
