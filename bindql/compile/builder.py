"""Core template -> SQL compilation logic.

``TemplateCompiler`` turns a SQL template with embedded bind tokens into a
:class:`~bindql.compile.base.CompiledStatement`:

* input tokens (``:NAME``) become ``?`` placeholders and append their cell
  to the input list;
* output tokens (``;NAME``) are removed and append their cell to the output
  list;
* text outside string literals is uppercased, literal text is kept as is.

Resolution order
----------------
For each token the first match wins:

1. the caller-supplied external bindings, keyed by the full name
   (``MINZIP`` or ``CUST.ZIP``);
2. for qualified names, the named record's column;
3. for unqualified names, the one record holding that column.

Any failure aborts the whole compilation; nothing is returned.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from bindql.compile.base import CompiledStatement, InputBinding
from bindql.compile.context import CompilationContext
from bindql.compile.tokenizer import SegmentKind, tokenize
from bindql.errors import (
    AmbiguousColumnError,
    MalformedBindNameError,
    UnknownColumnError,
    UnknownTableError,
)
from bindql.schema.bind_name import BindName
from bindql.schema.cell import Cell, is_reserved

logger = logging.getLogger("bindql.compile")

PLACEHOLDER = "?"


class TemplateCompiler:
    """Compiles bind-token templates against a record store.

    Args:
        ctx: Records, schema and config to resolve against.
    """

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compile(
        self,
        statement_id: Any,
        template: str,
        external: Mapping[str, Cell] | None = None,
    ) -> CompiledStatement:
        """Compile ``template``.

        Args:
            statement_id: Id attached to the result and to error reports.
            template: SQL text containing bind tokens.
            external: Ad-hoc ``name -> Cell`` bindings; these take priority
                over record columns.  Names are matched case-insensitively.

        Returns:
            The compiled statement.

        Raises:
            MalformedBindNameError: A token has more than one qualifier.
            UnknownTableError: A qualified token names an unknown record.
            UnknownColumnError: No record provides the token's column.
            AmbiguousColumnError: An unqualified token matches several records.
        """
        bindings = {name.upper(): cell for name, cell in (external or {}).items()}

        sql_parts: list[str] = []
        inputs: list[InputBinding] = []
        outputs: list[Cell] = []

        for segment in tokenize(template):
            if segment.kind is SegmentKind.LITERAL:
                sql_parts.append(segment.text)
            elif segment.kind is SegmentKind.TEXT:
                sql_parts.append(segment.text.upper())
            else:
                bind = BindName.parse(segment.text)
                cell, table = self._resolve(bind, bindings, template)
                if bind.is_input:
                    inputs.append(
                        InputBinding(name=bind.name, cell=cell, size=self._size_hint(table, bind))
                    )
                    sql_parts.append(PLACEHOLDER)
                else:
                    outputs.append(cell)

        compiled = CompiledStatement(
            statement_id=statement_id,
            template=template,
            sql="".join(sql_parts),
            inputs=tuple(inputs),
            outputs=tuple(outputs),
        )
        logger.debug(
            "compiled %r: %d input(s), %d output(s): %s",
            statement_id,
            len(inputs),
            len(outputs),
            compiled.sql,
        )
        return compiled

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _resolve(
        self, bind: BindName, bindings: Mapping[str, Cell], template: str
    ) -> tuple[Cell, str | None]:
        """Return the cell for ``bind`` and the record it came from (if any)."""
        if bind.name in bindings:
            return bindings[bind.name], None
        if bind.qualified:
            return self._resolve_qualified(bind, template), bind.table
        return self._resolve_unqualified(bind, template)

    def _resolve_qualified(self, bind: BindName, template: str) -> Cell:
        if bind.malformed:
            raise MalformedBindNameError(str(bind), template)
        assert bind.table is not None
        record = self._ctx.records.get(bind.table)
        if record is None:
            raise UnknownTableError(bind.table, str(bind), template)
        if is_reserved(bind.column) or bind.column not in record:
            raise UnknownColumnError(bind.column, str(bind), template, table=bind.table)
        return record[bind.column]

    def _resolve_unqualified(self, bind: BindName, template: str) -> tuple[Cell, str]:
        tables = self._ctx.records.tables_with_column(bind.column)
        if not tables:
            raise UnknownColumnError(bind.column, str(bind), template)
        if len(tables) > 1:
            raise AmbiguousColumnError(bind.column, sorted(tables), template)
        table = tables[0]
        record = self._ctx.records.get(table)
        assert record is not None
        return record[bind.column], table

    # ------------------------------------------------------------------
    # Size hints
    # ------------------------------------------------------------------

    def _size_hint(self, table: str | None, bind: BindName) -> int:
        config = self._ctx.config
        if table is None or not config.schema_sizing:
            return config.default_size
        declared = self._ctx.schema.declared_size(table, bind.column)
        return declared or config.default_size
