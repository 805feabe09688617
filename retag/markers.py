"""
Field markers carrying struct tag metadata on pydantic fields.

Uses the Annotated pattern (Pydantic v2 recommended approach):

    class User(BaseModel):
        name: Annotated[str, StructTag('json:"name"')]
        Base: Annotated[Base, Embedded()]
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StructTag:
    """Raw struct tag of a field, e.g. 'json:"name,omitempty"'."""

    value: str = ''


@dataclass(frozen=True)
class Embedded:
    """Mark field as embedded (anonymous)."""

    pass
