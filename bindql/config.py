"""Session configuration.

``SessionConfig`` is a plain pydantic model; build one in code and pass it
to :class:`~bindql.session.Session`::

    from bindql import Session, SessionConfig

    session = Session("sqlite", config=SessionConfig(default_size=4000))
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SessionConfig(BaseModel):
    """Tunables for a single :class:`~bindql.session.Session`.

    Attributes:
        default_size: Size hint passed with every input binding that has no
            declared length in the schema registry.
        schema_sizing: When ``True``, input bindings resolved to a record
            column with a declared ``TYPE(N)`` in the schema registry use
            ``N`` as their size hint.  When ``False`` every binding uses
            ``default_size``.
        row_cache_size: Number of rows the driver fetches per round trip.
        trace: Start the session with DEBUG tracing enabled.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    default_size: int = Field(default=2000, gt=0)
    schema_sizing: bool = True
    row_cache_size: int = Field(default=1000, gt=0)
    trace: bool = False
