"""PEP 249 (DB-API 2.0) database layer.

:class:`DBAPIDriver` wraps any DB-API module.  Placeholders in compiled SQL
are ``?``; for modules with another ``paramstyle`` they are rewritten
outside string literals before the statement reaches the module.

PEP 249 has no portable in/out parameters, so in/out bindings only carry
values into the statement; size hints are kept on the handle.

PEP 249 has no prepare step either.  :meth:`DBAPIDriver.check_sql` is the
hook that rejects bad SQL before a handle exists; :class:`SQLiteDriver`
implements it with ``EXPLAIN``.  Other modules accept every statement at
prepare time and report syntax errors on execute.
"""
from __future__ import annotations

import logging
import re
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from types import ModuleType
from typing import Any

from bindql.driver.base import DatabaseDriver, DriverError, StatementHandle
from bindql.errors import GENERIC_ERROR_CODE
from bindql.schema.cell import Cell

logger = logging.getLogger("bindql.driver")

_PLACEHOLDER_SPLIT = re.compile(r"('|\?)")

SUPPORTED_PARAMSTYLES = frozenset({"qmark", "numeric", "named", "format", "pyformat"})


def convert_placeholders(sql: str, paramstyle: str) -> str:
    """Rewrite ``?`` placeholders outside string literals for ``paramstyle``.

    ``numeric`` and ``named`` use ``:1, :2, ...``; ``format`` and
    ``pyformat`` use ``%s`` and double every literal ``%``.
    """
    if paramstyle == "qmark":
        return sql
    percent = paramstyle in ("format", "pyformat")
    out: list[str] = []
    position = 0
    in_literal = False
    for part in _PLACEHOLDER_SPLIT.split(sql):
        if part == "'":
            in_literal = not in_literal
            out.append(part)
        elif part == "?" and not in_literal:
            position += 1
            out.append("%s" if percent else f":{position}")
        else:
            out.append(part.replace("%", "%%") if percent else part)
    return "".join(out)


def count_placeholders(sql: str) -> int:
    """Number of ``?`` placeholders outside string literals."""
    count = 0
    in_literal = False
    for part in _PLACEHOLDER_SPLIT.split(sql):
        if part == "'":
            in_literal = not in_literal
        elif part == "?" and not in_literal:
            count += 1
    return count


def error_code(exc: BaseException) -> int | str:
    """Best-effort extraction of a vendor error code from a DB-API exception."""
    for attr in ("sqlite_errorcode", "errno", "pgcode"):
        code = getattr(exc, attr, None)
        if code:
            return code
    if exc.args:
        first = exc.args[0]
        if isinstance(first, int) and first:
            return first
        code = getattr(first, "code", None)
        if code:
            return code
    return GENERIC_ERROR_CODE


class DBAPIStatement(StatementHandle):
    """A cursor plus the cells bound to it."""

    def __init__(self, driver: DBAPIDriver, sql: str, cursor: Any) -> None:
        self.sql = sql
        self._driver = driver
        self._cursor = cursor
        self._params: dict[int, tuple[Cell, int]] = {}
        self._columns: tuple[Cell, ...] = ()

    @property
    def sizes(self) -> list[int]:
        return [size for _, size in self._ordered_params()]

    def bind_param_inout(self, position: int, cell: Cell, size: int) -> None:
        if position < 1 or position > len(self._params) + 1:
            raise DriverError(
                GENERIC_ERROR_CODE,
                f"bind_param_inout: parameter {position} out of sequence",
            )
        self._params[position] = (cell, size)

    def bind_columns(self, cells: Sequence[Cell]) -> None:
        description = self._cursor.description
        width = len(description) if description else 0
        if width != len(cells):
            raise DriverError(
                GENERIC_ERROR_CODE,
                f"bind_columns called with {len(cells)} values"
                f" but {width} are needed",
            )
        self._columns = tuple(cells)

    def execute(self) -> None:
        values = [cell.value for cell, _ in self._ordered_params()]
        with self._driver.translate_errors():
            self._cursor.execute(self.sql, values)

    def fetch(self) -> bool:
        with self._driver.translate_errors():
            row = self._cursor.fetchone()
        if row is None:
            return False
        for cell, value in zip(self._columns, row):
            cell.value = value
        return True

    def finish(self) -> None:
        with self._driver.translate_errors():
            self._cursor.close()

    def _ordered_params(self) -> list[tuple[Cell, int]]:
        return [self._params[position] for position in sorted(self._params)]


class DBAPIDriver(DatabaseDriver):
    """Database layer over a PEP 249 module.

    Args:
        module: The DB-API module (``sqlite3``, ``psycopg``, ``oracledb``...).
        **connect_kwargs: Extra keyword arguments for ``module.connect``.
    """

    def __init__(self, module: ModuleType, **connect_kwargs: Any) -> None:
        paramstyle = getattr(module, "paramstyle", "qmark")
        if paramstyle not in SUPPORTED_PARAMSTYLES:
            raise ValueError(f"Unsupported DB-API paramstyle: '{paramstyle}'")
        self.module = module
        self.paramstyle = paramstyle
        self._connect_kwargs = connect_kwargs
        self._connection: Any = None
        self._row_cache_size: int | None = None

    @property
    def connection(self) -> Any:
        return self._connection

    @property
    def connected(self) -> bool:
        return self._connection is not None

    @contextmanager
    def translate_errors(self) -> Iterator[None]:
        """Re-raise ``module.Error`` as :class:`DriverError`."""
        try:
            yield
        except self.module.Error as exc:
            raise DriverError(error_code(exc), str(exc)) from exc

    def connect(self, descriptor: str, user: str | None = None, password: str | None = None) -> Any:
        kwargs = dict(self._connect_kwargs)
        if user:
            kwargs["user"] = user
        if password:
            kwargs["password"] = password
        with self.translate_errors():
            self._connection = self.module.connect(descriptor, **kwargs)
        logger.debug("connected to %s", descriptor)
        return self._connection

    def prepare(self, sql: str) -> DBAPIStatement:
        with self.translate_errors():
            self.check_sql(sql)
            cursor = self._connection.cursor()
        if self._row_cache_size:
            cursor.arraysize = self._row_cache_size
        return DBAPIStatement(self, convert_placeholders(sql, self.paramstyle), cursor)

    def check_sql(self, sql: str) -> None:
        """Reject ``sql`` before a handle is created for it.

        PEP 249 has no separate prepare step, so the base driver accepts
        every statement and syntax errors surface on execute.  Subclasses
        with a way to parse SQL without running it override this and let
        ``module.Error`` propagate.
        """

    def commit(self) -> None:
        with self.translate_errors():
            self._connection.commit()

    def rollback(self) -> None:
        with self.translate_errors():
            self._connection.rollback()

    def disconnect(self) -> None:
        with self.translate_errors():
            self._connection.close()
        self._connection = None

    def set_row_cache_size(self, rows: int) -> None:
        self._row_cache_size = rows

    def trace(self, level: int) -> None:
        set_trace = getattr(self._connection, "set_trace_callback", None)
        if set_trace is None:
            return
        set_trace(_trace_sql if level > 0 else None)


class SQLiteDriver(DBAPIDriver):
    """:class:`DBAPIDriver` bound to the standard library ``sqlite3`` module."""

    def __init__(self, **connect_kwargs: Any) -> None:
        super().__init__(sqlite3, **connect_kwargs)

    def connect(self, descriptor: str, user: str | None = None, password: str | None = None) -> Any:
        # sqlite has no authentication
        return super().connect(descriptor)

    def check_sql(self, sql: str) -> None:
        """Compile ``sql`` through ``EXPLAIN`` so bad SQL fails at prepare time."""
        params = [None] * count_placeholders(sql)
        self._connection.execute(f"EXPLAIN {sql}", params).close()


def _trace_sql(statement: str) -> None:
    logger.debug("sql: %s", statement)
