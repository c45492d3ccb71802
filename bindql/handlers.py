"""Error handler strategies.

The session's error reporter hands every failure to one
:class:`ErrorHandler`.  The default, :class:`RaisingErrorHandler`, raises
the error so an unhandled failure stops the program with its message.
Install :class:`LoggingErrorHandler` (or any callable taking
``(statement_id, error)``) to make failures recoverable; operations then
return ``None`` and the caller checks the result::

    session.set_error_handler(LoggingErrorHandler())
    if session.prepare("q1", sql) is None:
        print(session.chk_error())
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from bindql.errors import BindQLError

logger = logging.getLogger("bindql")


class ErrorHandler(ABC):
    """Receives every error reported by a session."""

    @abstractmethod
    def handle(self, statement_id: Any, error: BindQLError) -> None:
        """Handle ``error`` raised while working on ``statement_id``.

        Returning normally makes the failing operation return ``None``.
        """


class RaisingErrorHandler(ErrorHandler):
    """Raise the reported error.  This is the default."""

    def handle(self, statement_id: Any, error: BindQLError) -> None:
        raise error


class LoggingErrorHandler(ErrorHandler):
    """Log the reported error and let the caller carry on.

    Args:
        log: Logger to write to; defaults to the ``bindql`` logger.
        level: Logging level for reported errors.
    """

    def __init__(self, log: logging.Logger | None = None, level: int = logging.ERROR) -> None:
        self._log = log or logger
        self._level = level

    def handle(self, statement_id: Any, error: BindQLError) -> None:
        self._log.log(self._level, "%s: %s", statement_id, error)


class CallableErrorHandler(ErrorHandler):
    """Adapts a plain ``(statement_id, error)`` function."""

    def __init__(self, func: Callable[[Any, BindQLError], Any]) -> None:
        self._func = func

    def handle(self, statement_id: Any, error: BindQLError) -> None:
        self._func(statement_id, error)


def as_error_handler(handler: ErrorHandler | Callable[[Any, BindQLError], Any]) -> ErrorHandler:
    """Wrap ``handler`` in :class:`CallableErrorHandler` unless it already is an ErrorHandler."""
    if isinstance(handler, ErrorHandler):
        return handler
    return CallableErrorHandler(handler)
