"""bindQL compilation layer: bind-token template -> placeholder SQL."""
from bindql.compile.base import CompiledStatement, InputBinding
from bindql.compile.builder import TemplateCompiler
from bindql.compile.context import CompilationContext
from bindql.compile.lists import ListBuilder
from bindql.compile.tokenizer import Segment, SegmentKind, tokenize

__all__ = [
    "CompiledStatement",
    "InputBinding",
    "TemplateCompiler",
    "CompilationContext",
    "ListBuilder",
    "Segment",
    "SegmentKind",
    "tokenize",
]
