"""Compiler output: CompiledStatement and InputBinding."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from bindql.schema.cell import Cell

_SELECT = re.compile(r"^\s*SELECT")


@dataclass(frozen=True)
class InputBinding:
    """One ``?`` placeholder of a compiled statement.

    Attributes:
        name: The bind name that produced the placeholder (``"MINZIP"``).
        cell: The cell bound in/out at this position.
        size: Size hint passed to the database layer.
    """

    name: str
    cell: Cell
    size: int


@dataclass(frozen=True)
class CompiledStatement:
    """The output of a successful template compilation.

    Attributes:
        statement_id: Caller-chosen id reported with every error.
        template: The template as written by the caller.
        sql: The compiled SQL; input tokens replaced by ``?``, output tokens
            removed, text outside string literals uppercased.
        inputs: Input bindings in placeholder order.
        outputs: Output cells in result-column order.
    """

    statement_id: Any
    template: str
    sql: str
    inputs: tuple[InputBinding, ...] = field(default_factory=tuple)
    outputs: tuple[Cell, ...] = field(default_factory=tuple)

    @property
    def input_cells(self) -> list[Cell]:
        return [binding.cell for binding in self.inputs]

    @property
    def is_select(self) -> bool:
        """True when the compiled SQL is a read that produces rows."""
        return _SELECT.match(self.sql) is not None

    def input_values(self) -> list[Any]:
        """Current values of the input cells, in placeholder order."""
        return [binding.cell.value for binding in self.inputs]
