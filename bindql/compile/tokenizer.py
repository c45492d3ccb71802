"""Quote-aware template tokenizer.

A template is split into segments on single quotes and bind tokens.  A
single quote toggles string-literal mode; everything inside a literal
(quotes included) is emitted as :attr:`SegmentKind.LITERAL` and never
scanned for tokens.  Outside literals, ``:NAME`` / ``;NAME`` /
``:TABLE.COLUMN`` markers become :attr:`SegmentKind.TOKEN` and the
remaining text :attr:`SegmentKind.TEXT`.

    >>> [s.kind.name for s in tokenize("a = ':X' and b = :Y")]
    ['TEXT', 'LITERAL', 'LITERAL', 'LITERAL', 'TEXT', 'TOKEN']
"""
from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

QUOTE = "'"

# A bind token starts with an alphabetic character; dots are captured
# greedily so malformed qualifiers (A.B.C) can be reported.
_SPLIT = re.compile(r"('|[:;][A-Za-z][A-Za-z0-9_.]*)")


class SegmentKind(Enum):
    TEXT = "text"
    LITERAL = "literal"
    TOKEN = "token"


@dataclass(frozen=True)
class Segment:
    kind: SegmentKind
    text: str


def tokenize(template: str) -> Iterator[Segment]:
    """Yield the segments of ``template`` left to right.

    Concatenating the ``text`` of every segment reproduces ``template``.
    """
    in_literal = False
    for part in _SPLIT.split(template):
        if not part:
            continue
        if part == QUOTE:
            in_literal = not in_literal
            yield Segment(SegmentKind.LITERAL, part)
        elif in_literal:
            yield Segment(SegmentKind.LITERAL, part)
        elif part[0] in ":;":
            yield Segment(SegmentKind.TOKEN, part)
        else:
            yield Segment(SegmentKind.TEXT, part)
