"""Database layer abstractions: DatabaseDriver and StatementHandle ABCs.

These are the only seams between bindQL and a real database.  The session
compiles templates itself and drives the driver through the primitive
operations below; every failure is raised as :class:`DriverError` carrying
the layer's own error code and text.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from bindql.errors import GENERIC_ERROR_CODE, LastError
from bindql.schema.cell import Cell


class DriverError(Exception):
    """A failure reported by the database layer.

    Args:
        code: The layer's error code (non-zero).
        text: The layer's error message.
    """

    def __init__(self, code: int | str, text: str) -> None:
        super().__init__(text)
        self.code = code
        self.text = text

    @property
    def last_error(self) -> LastError:
        return LastError(code=self.code or GENERIC_ERROR_CODE, text=self.text)


class StatementHandle(ABC):
    """A statement prepared by the database layer."""

    @abstractmethod
    def bind_param_inout(self, position: int, cell: Cell, size: int) -> None:
        """Bind ``cell`` in/out to the 1-based placeholder ``position``.

        Args:
            position: Placeholder position, starting at 1.
            cell: Cell read on execute and updated if the database returns
                a value for this position.
            size: Maximum size hint for returned values.
        """

    @abstractmethod
    def bind_columns(self, cells: Sequence[Cell]) -> None:
        """Attach ``cells`` to the result columns, in column order."""

    @abstractmethod
    def execute(self) -> None:
        """Execute the statement with the current values of the bound cells."""

    @abstractmethod
    def fetch(self) -> bool:
        """Advance to the next row, writing it into the bound cells.

        Returns:
            ``False`` at the end of the result set.
        """

    @abstractmethod
    def finish(self) -> None:
        """Release the statement."""


class DatabaseDriver(ABC):
    """Abstract base for database connectivity layers."""

    @abstractmethod
    def connect(self, descriptor: str, user: str | None = None, password: str | None = None) -> Any:
        """Open the connection.

        Returns:
            The underlying connection object.
        """

    @property
    @abstractmethod
    def connected(self) -> bool:
        """True while a connection is open."""

    @abstractmethod
    def prepare(self, sql: str) -> StatementHandle:
        """Prepare ``sql`` (``?`` placeholders) for execution."""

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...

    @abstractmethod
    def disconnect(self) -> None: ...

    def set_row_cache_size(self, rows: int) -> None:
        """Hint how many rows to fetch per round trip.  Ignored by default."""

    def trace(self, level: int) -> None:
        """Enable (``level > 0``) or disable driver-level SQL tracing.  Ignored by default."""
