"""Custom exception hierarchy for bindQL.

All public errors inherit from BindQLError so callers can catch the base
class for any bindQL-specific failure.  Every error carries a
machine-readable ``code`` and, when the database layer supplied one, the
:class:`LastError` reported by that layer.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

#: Error code stored when the failure did not originate in the database layer.
GENERIC_ERROR_CODE = -1


@dataclass(frozen=True)
class LastError:
    """The code and text of the most recent failure.

    Attributes:
        code: Database error code, or ``GENERIC_ERROR_CODE`` for failures
            detected by bindQL itself.  ``0`` means no error.
        text: Error message.
    """

    code: int | str
    text: str

    @property
    def ok(self) -> bool:
        return self.code == 0

    def __str__(self) -> str:
        if self.ok:
            return "OK"
        return f"{self.code} - {self.text}"


#: Sentinel value meaning "no error recorded".
NO_ERROR = LastError(code=0, text="")


class BindQLError(Exception):
    """Base exception for all bindQL errors.

    Args:
        message: Human-readable description.
        code: Machine-readable error code (e.g. ``UNKNOWN_COLUMN``).
        details: Extra context about the failure.
        last_error: Error reported by the database layer, if any.
    """

    code: str = "BINDQL_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        last_error: LastError | None = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.details: dict[str, Any] = details or {}
        self.last_error = last_error

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response."""
        return {
            "error": self.code,
            "message": str(self),
            "details": self.details,
        }


class NotConnectedError(BindQLError):
    """Raised when an operation needs a database connection and has none."""

    code = "NOT_CONNECTED"

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"{operation} - Not connected to a database",
            details={"operation": operation},
        )


class ConnectError(BindQLError):
    """Raised when the database layer refuses a connection."""

    code = "CONNECT_FAILED"

    def __init__(
        self, descriptor: str, user: str | None, last_error: LastError | None = None
    ) -> None:
        super().__init__(
            f"Cannot connect to database '{descriptor}' as user '{user or ''}'",
            details={"descriptor": descriptor, "user": user},
            last_error=last_error,
        )


class NoStatementPreparedError(BindQLError):
    """Raised when execute / fetch / finish is called with no live statement."""

    code = "NO_STATEMENT_PREPARED"

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation} - no SQL prepared", details={"operation": operation})


class CompileRejectedError(BindQLError):
    """Raised when the database layer refuses to prepare the compiled SQL."""

    code = "COMPILE_REJECTED"

    def __init__(self, sql: str, template: str, last_error: LastError | None = None) -> None:
        super().__init__(
            f"Database rejected statement '{template}'",
            details={"sql": sql, "template": template},
            last_error=last_error,
        )


class UnknownTableError(BindQLError):
    """Raised when a qualified bind token names a record that does not exist."""

    code = "UNKNOWN_TABLE"

    def __init__(self, table: str, token: str, template: str) -> None:
        super().__init__(
            f"Unknown table '{table}' in variable binding '{token}'"
            f" in statement '{template}'",
            details={"table": table, "token": token},
        )


class UnknownColumnError(BindQLError):
    """Raised when a bind token names a column no record provides."""

    code = "UNKNOWN_COLUMN"

    def __init__(
        self, column: str, token: str, template: str, table: str | None = None
    ) -> None:
        where = f" for table '{table}'" if table else ""
        super().__init__(
            f"Unknown column name '{column}'{where} in variable binding '{token}'"
            f" in statement '{template}'",
            details={"table": table, "column": column, "token": token},
        )


class AmbiguousColumnError(BindQLError):
    """Raised when an unqualified bind token matches columns in several records."""

    code = "AMBIGUOUS_COLUMN"

    def __init__(self, column: str, tables: list[str], template: str) -> None:
        super().__init__(
            f"Ambiguous column '{column}' in variable binding in statement '{template}'",
            details={"column": column, "tables": tables},
        )


class MalformedBindNameError(BindQLError):
    """Raised when a bind token has more than one ``.`` qualifier or an empty part."""

    code = "MALFORMED_BIND_NAME"

    def __init__(self, token: str, template: str) -> None:
        super().__init__(
            f"Invalid variable binding '{token}' in statement '{template}'",
            details={"token": token},
        )


class BindRegistrationError(BindQLError):
    """Raised when the database layer refuses an in/out parameter binding."""

    code = "BIND_REGISTRATION_FAILED"

    def __init__(self, position: int, template: str, last_error: LastError | None = None) -> None:
        super().__init__(
            f"Binding parameter {position} failed in statement '{template}'",
            details={"position": position},
            last_error=last_error,
        )


class ExecuteFailedError(BindQLError):
    """Raised when the database layer fails to execute the live statement."""

    code = "EXECUTE_FAILED"

    def __init__(self, sql: str, last_error: LastError | None = None) -> None:
        super().__init__(f"Execute failed\n{sql}", details={"sql": sql}, last_error=last_error)


class FetchSetupError(BindQLError):
    """Raised when output cells cannot be attached to the result columns."""

    code = "FETCH_SETUP_FAILED"

    def __init__(self, sql: str, last_error: LastError | None = None) -> None:
        super().__init__(
            f"Binding result columns failed\n{sql}", details={"sql": sql}, last_error=last_error
        )


class FetchFailedError(BindQLError):
    """Raised when advancing to the next result row fails."""

    code = "FETCH_FAILED"

    def __init__(self, sql: str, last_error: LastError | None = None) -> None:
        super().__init__(f"Fetch failed\n{sql}", details={"sql": sql}, last_error=last_error)


class OperationFailedError(BindQLError):
    """Raised when finish, commit, rollback or disconnect fails in the database layer."""

    code = "OPERATION_FAILED"

    def __init__(self, operation: str, last_error: LastError | None = None) -> None:
        super().__init__(
            f"{operation} failed", details={"operation": operation}, last_error=last_error
        )


class ColumnRuleFormatError(BindQLError):
    """Raised when a column rule is not of the form ``TYPE(ARGS)``."""

    code = "COLUMN_RULE_MALFORMED"

    def __init__(self, column: str, rule: str) -> None:
        super().__init__(
            f"Format '{rule}' for column '{column}' is not in the correct"
            " format of '{type}({args})'",
            details={"column": column, "rule": rule},
        )


class UnknownColumnRuleTypeError(BindQLError):
    """Raised when a column rule names a type other than DATE, SYSDATE or SINCE."""

    code = "UNKNOWN_COLUMN_RULE_TYPE"

    def __init__(self, column: str, rule: str, rule_type: str) -> None:
        super().__init__(
            f"Format '{rule}' for column '{column}' contains an unknown datatype '{rule_type}'",
            details={"column": column, "rule": rule, "type": rule_type},
        )


class ReservedNameError(BindQLError):
    """Raised when a record is registered under a reserved (``_``-prefixed) name."""

    code = "RESERVED_NAME"

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Record name '{name}' is reserved for internal use",
            details={"name": name},
        )
