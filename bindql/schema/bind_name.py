"""Typed bind-name class.

Owns the parsing of the name part of a bind token (``COLUMN`` or
``TABLE.COLUMN``) so the compiler never splits strings itself.
"""

from __future__ import annotations

from dataclasses import dataclass

INPUT = ":"
OUTPUT = ";"


@dataclass(frozen=True)
class BindName:
    """A parsed bind token.

    Attributes:
        kind: ``":"`` for input tokens, ``";"`` for output tokens.
        name: The full uppercase name after the marker (``"CUST.ZIP"``).
        table: Table qualifier, or ``None`` for unqualified names.
        column: Column name.
        malformed: True when the name has more than one qualifier or an
            empty part (``A.B.C``, ``A.``).
    """

    kind: str
    name: str
    table: str | None
    column: str
    malformed: bool = False

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, token: str) -> BindName:
        """Parse a raw token such as ``":min_zip"`` or ``";cust.zip"``.

        Args:
            token: The token text including its leading marker.

        Returns:
            A :class:`BindName` with every part uppercased.
        """
        kind, name = token[0], token[1:].upper()
        if "." not in name:
            return cls(kind=kind, name=name, table=None, column=name)
        parts = name.split(".")
        malformed = len(parts) != 2 or not all(parts)
        return cls(kind=kind, name=name, table=parts[0], column=parts[1], malformed=malformed)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def is_input(self) -> bool:
        return self.kind == INPUT

    @property
    def qualified(self) -> bool:
        """True when the name includes a table qualifier."""
        return self.table is not None

    def __str__(self) -> str:
        return f"{self.kind}{self.name}"
