"""Compilation context value object.

Packages the ``(records, schema, config)`` data clump the template compiler
resolves against into a single cohesive object.
"""
from __future__ import annotations

from dataclasses import dataclass

from bindql.config import SessionConfig
from bindql.schema.cell import RecordStore
from bindql.schema.snapshot import SchemaSnapshot


@dataclass(frozen=True)
class CompilationContext:
    """Context for template compilation.

    The record store and schema are shared with the owning session, so
    records registered after the context is built are still visible.

    Attributes:
        records: Records bind tokens resolve against.
        schema: Declared column types used for size hints.
        config: Session tunables (default size, schema sizing).
    """

    records: RecordStore
    schema: SchemaSnapshot
    config: SessionConfig
