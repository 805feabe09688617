"""
Type descriptors - composite type shapes as plain immutable data.

The transformer only ever sees these values. Converting from and to pydantic
model classes happens in introspection.py.

Kinds:
- StructType: composite with ordered, named fields
- PointerType: reference to another type (`Model | None` on the pydantic side)
- ScalarType: any other concrete type, treated as opaque
- InterfaceType: a capability (protocol) type; never recursed into
- TypeRef: back-reference to a named composite enclosing this position,
  which keeps self-referential types finite
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

import pydantic

from retag.base_model import StrictModel


class StructType(StrictModel):
    """Composite type: ordered sequence of fields."""

    kind: Literal['struct'] = 'struct'
    name: str | None = None  # None for anonymous composites
    fields: tuple[FieldDescriptor, ...] = ()
    capabilities: frozenset[str] = frozenset()
    py_type: Any = None  # Host class this was described from, if any

    @property
    def display_name(self) -> str:
        return self.name or '<anonymous struct>'

    def field(self, name: str) -> FieldDescriptor:
        """Get a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)


class PointerType(StrictModel):
    """Pointer to (optional reference to) another type."""

    kind: Literal['pointer'] = 'pointer'
    elem: TypeDescriptor


class ScalarType(StrictModel):
    """Opaque concrete type (str, int, list[str], a wrapper class...)."""

    kind: Literal['scalar'] = 'scalar'
    name: str
    capabilities: frozenset[str] = frozenset()
    py_type: Any = None


class InterfaceType(StrictModel):
    """Capability type. Fields declared with a protocol type are never recursed into."""

    kind: Literal['interface'] = 'interface'
    name: str
    capabilities: frozenset[str] = frozenset()
    py_type: Any = None


class TypeRef(StrictModel):
    """Reference to the named composite `name` that encloses this position."""

    kind: Literal['ref'] = 'ref'
    name: str
    capabilities: frozenset[str] = frozenset()
    py_type: Any = None


TypeDescriptor = Annotated[
    StructType | PointerType | ScalarType | InterfaceType | TypeRef,
    pydantic.Field(discriminator='kind'),
]


class FieldDescriptor(StrictModel):
    """One field of a composite type."""

    name: str
    type: TypeDescriptor
    tag: str = ''
    anonymous: bool = False  # Embedded field
    exported: bool = True


def pointer_to(elem: TypeDescriptor) -> PointerType:
    return PointerType(elem=elem)


def deref(t: TypeDescriptor) -> TypeDescriptor:
    """Return the pointee of a pointer type, or t itself."""
    if isinstance(t, PointerType):
        return t.elem
    return t


def capabilities_of(t: TypeDescriptor) -> frozenset[str]:
    """Capabilities the type itself declares. Pointers declare none of their own."""
    if isinstance(t, PointerType):
        return frozenset()
    return t.capabilities


StructType.model_rebuild()
PointerType.model_rebuild()
FieldDescriptor.model_rebuild()
