"""Column substitution rules.

A column rule rewrites how one column appears in the fragments produced by
the list builders (:mod:`bindql.compile.lists`).  Rules are registered as
``TYPE(ARGS)`` strings::

    registry.register("CREATED", "DATE(yyyymmddhh24miss)")
    registry.register("LAST_SEEN", "SINCE(19700101000000)")

Supported types:

``DATE(fmt)``
    Selected through ``to_char`` and written through ``to_date`` with the
    vendor format ``fmt``.
``SYSDATE(fmt)``
    Like ``DATE`` but inserts and updates write ``SYSDATE``.
``SINCE(yyyymmddhh24miss)``
    Exposed as whole seconds elapsed since the given base timestamp.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from bindql.errors import ColumnRuleFormatError, UnknownColumnRuleTypeError

_RULE = re.compile(r"^(\w+)\((.*)\)$", re.DOTALL)

#: Placeholder replaced by the table alias in :attr:`ColumnRule.alias`.
ALIAS_MARKER = "_ALIAS_"

_SECONDS_PER_DAY = 24 * 60 * 60


def sql_safe(value: object) -> str:
    """Escape ``value`` for embedding inside a single-quoted SQL string.

    All-digit values are returned unchanged; otherwise backslashes and single
    quotes are backslash-escaped.
    """
    text = str(value)
    if text.isdigit():
        return text
    return text.replace("\\", "\\\\").replace("'", "\\'")


@dataclass(frozen=True)
class ColumnRule:
    """SQL fragments used in place of the plain column / placeholder text."""

    select: str
    insert: str
    update: str
    where: str
    alias: str

    def aliased(self, alias: str) -> str:
        """The SELECT fragment qualified with ``alias``."""
        return self.alias.replace(ALIAS_MARKER, alias)


def _date_rule(column: str, fmt: str) -> ColumnRule:
    return ColumnRule(
        select=f"to_char({column}, '{fmt}')",
        insert=f"to_date(:{column}, '{fmt}')",
        update=f"to_date(:{column}, '{fmt}')",
        where=f"to_date(:{column}, '{fmt}')",
        alias=f"to_char({ALIAS_MARKER}.{column}, '{fmt}')",
    )


def _sysdate_rule(column: str, fmt: str) -> ColumnRule:
    return ColumnRule(
        select=f"to_char({column}, '{fmt}')",
        insert="SYSDATE",
        update="SYSDATE",
        where=f"to_date(:{column}, '{fmt}')",
        alias=f"to_char({ALIAS_MARKER}.{column}, '{fmt}')",
    )


def _since_rule(column: str, base_ts: str) -> ColumnRule:
    base = f"to_date('{base_ts}','yyyymmddhh24miss')"
    secs = _SECONDS_PER_DAY
    to_date = f"({base} + (:{column} / {secs}))"
    return ColumnRule(
        select=f"floor(({column} - {base}) * {secs})",
        insert=to_date,
        update=to_date,
        where=to_date,
        alias=f"floor(({ALIAS_MARKER}.{column} - {base}) * {secs})",
    )


_BUILDERS = {
    "DATE": _date_rule,
    "SYSDATE": _sysdate_rule,
    "SINCE": _since_rule,
}


def parse_rule(column: str, rule: str) -> ColumnRule:
    """Build the :class:`ColumnRule` for ``column`` from a ``TYPE(ARGS)`` string.

    Raises:
        ColumnRuleFormatError: If ``rule`` is not ``TYPE(ARGS)``.
        UnknownColumnRuleTypeError: If ``TYPE`` is not DATE, SYSDATE or SINCE.
    """
    match = _RULE.match(rule.strip())
    if match is None:
        raise ColumnRuleFormatError(column, rule)
    rule_type, args = match.group(1), match.group(2)
    builder = _BUILDERS.get(rule_type.upper())
    if builder is None:
        raise UnknownColumnRuleTypeError(column, rule, rule_type)
    return builder(column, sql_safe(args))


class ColumnRuleRegistry:
    """Column name -> :class:`ColumnRule`."""

    def __init__(self) -> None:
        self._rules: dict[str, ColumnRule] = {}

    def register(self, column: str, rule: str) -> ColumnRule:
        """Parse and store ``rule`` for ``column``.

        Nothing is stored when parsing fails.
        """
        column = column.upper()
        parsed = parse_rule(column, rule)
        self._rules[column] = parsed
        return parsed

    def get(self, column: str) -> ColumnRule | None:
        return self._rules.get(column.upper())

    def __contains__(self, column: object) -> bool:
        return isinstance(column, str) and column.upper() in self._rules

    def __len__(self) -> int:
        return len(self._rules)
