"""Column-list builders for SELECT / WHERE / VALUES / UPDATE clauses.

Each builder returns a template fragment that already carries the bind
tokens for its columns, so a full statement can be assembled as::

    cols = ["NAME", "ZIP"]
    sql = f"SELECT {lists.select_list(cols)} FROM CUSTOMER"
    # SELECT NAME;NAME, ZIP;ZIP FROM CUSTOMER

Columns with a registered :class:`~bindql.schema.rules.ColumnRule` use the
rule's fragment instead of the plain column / placeholder text.
"""
from __future__ import annotations

from collections.abc import Iterable

from bindql.schema.rules import ColumnRuleRegistry


class ListBuilder:
    """Builds bind-token column lists.

    Args:
        rules: Column rules consulted for every column.
    """

    def __init__(self, rules: ColumnRuleRegistry | None = None) -> None:
        self._rules = rules if rules is not None else ColumnRuleRegistry()

    def select_list(self, columns: Iterable[str]) -> str:
        """``C1;C1, C2;C2, ...``"""
        parts = []
        for column in _upper(columns):
            rule = self._rules.get(column)
            expr = rule.select if rule else column
            parts.append(f"{expr};{column}")
        return ", ".join(parts)

    def select_list_alias(self, alias: str, columns: Iterable[str]) -> str:
        """``A.C1;C1, A.C2;C2, ...``"""
        parts = []
        for column in _upper(columns):
            rule = self._rules.get(column)
            expr = rule.aliased(alias) if rule else f"{alias}.{column}"
            parts.append(f"{expr};{column}")
        return ", ".join(parts)

    def where_list(self, columns: Iterable[str]) -> str:
        """``C1 = :C1 and C2 = :C2 ...``"""
        return self._where(columns, prefix="")

    def where_list_alias(self, alias: str, columns: Iterable[str]) -> str:
        """``A.C1 = :C1 and A.C2 = :C2 ...``"""
        return self._where(columns, prefix=f"{alias}.")

    def values_list(self, columns: Iterable[str]) -> str:
        """``:C1, :C2, ...`` for an INSERT VALUES clause."""
        parts = []
        for column in _upper(columns):
            rule = self._rules.get(column)
            parts.append(rule.insert if rule else f":{column}")
        return ", ".join(parts)

    def update_list(self, columns: Iterable[str]) -> str:
        """``C1 = :C1, C2 = :C2, ...`` for an UPDATE SET clause."""
        parts = []
        for column in _upper(columns):
            rule = self._rules.get(column)
            parts.append(f"{column} = {rule.update if rule else ':' + column}")
        return ", ".join(parts)

    def _where(self, columns: Iterable[str], prefix: str) -> str:
        parts = []
        for column in _upper(columns):
            rule = self._rules.get(column)
            parts.append(f"{prefix}{column} = {rule.where if rule else ':' + column}")
        return " and ".join(parts)


def _upper(columns: Iterable[str]) -> list[str]:
    return [c.upper() for c in columns]
