"""
Introspection adapters between pydantic models and type descriptors.

describe_model turns a model class into a StructType the transformer can work
on; build_model turns a (transformed) StructType back into a brand-new model
class whose fields carry the rewritten StructTag markers. Nothing else in the
package touches pydantic classes.

Shapes:
    Model                -> StructType
    X | None             -> PointerType(X)
    typing.Protocol type -> InterfaceType
    Model already being described (self reference) -> TypeRef
    anything else        -> ScalarType
"""

from __future__ import annotations

import copy
import types
from collections.abc import Sequence
from typing import Annotated, Any, Optional, TypeAliasType, Union, get_args, get_origin

import pydantic
from pydantic.fields import FieldInfo

from retag.descriptors import (
    FieldDescriptor,
    InterfaceType,
    PointerType,
    ScalarType,
    StructType,
    TypeDescriptor,
    TypeRef,
)
from retag.markers import Embedded, StructTag
from retag.skippers import capability_name
from retag.tags.codec import lookup, parse_struct_tag

_MARKER_TYPES = (StructTag, Embedded)


def get_struct_tag(field_info: FieldInfo) -> str:
    """
    Get the raw struct tag of a pydantic field, or '' if it has none.

    Handles markers attached directly (moved into FieldInfo.metadata by
    pydantic) and markers inside Python 3.12+ type aliases.

    Example:
        >>> class User(BaseModel):
        ...     name: Annotated[str, StructTag('json:"name"')]
        >>> get_struct_tag(User.model_fields['name'])
        'json:"name"'
    """
    marker = _find_marker(field_info, StructTag)
    return marker.value if marker is not None else ''


def is_embedded(field_info: FieldInfo) -> bool:
    """Check if a pydantic field is marked Embedded."""
    return _find_marker(field_info, Embedded) is not None


def get_tagged_fields(model: type[pydantic.BaseModel], key: str) -> dict[str, str]:
    """
    Map field names to the value of their `key` tag entry.

    Fields without such an entry are left out.

    Example:
        >>> get_tagged_fields(User, 'json')
        {'name': 'name'}
    """
    tagged = {}
    for field_name, field_info in model.model_fields.items():
        value = lookup(parse_struct_tag(get_struct_tag(field_info)), key)
        if value is not None:
            tagged[field_name] = value
    return tagged


def describe_model(model: type[pydantic.BaseModel], capabilities: Sequence[type] = ()) -> StructType:
    """
    Describe a pydantic model class as a StructType.

    Args:
        model: Pydantic model class to inspect
        capabilities: Runtime-checkable protocols (or plain classes) to test
            every described type against with issubclass

    Returns:
        StructType mirroring the model's fields, in declaration order
    """
    described = _describe_model(model, capabilities, ())
    if not isinstance(described, StructType):
        raise TypeError(f'Expected a StructType for {model.__qualname__}, got {type(described).__name__}')
    return described


def describe_type(annotation: Any, capabilities: Sequence[type] = ()) -> TypeDescriptor:
    """Describe a single field annotation."""
    return _describe(annotation, capabilities, ())


def build_model(struct: StructType) -> type[pydantic.BaseModel]:
    """
    Create a new pydantic model from a StructType.

    The model keeps the source model's name and config when struct was
    described from one. Every setting of the source fields (defaults, aliases,
    discriminators, constraints, schema extras) is carried over; the StructTag
    marker of every field is replaced by the descriptor's tag.
    """
    source = struct.py_type if _is_model(struct.py_type) else None

    field_definitions: dict[str, Any] = {}
    for field in struct.fields:
        original = source.model_fields.get(field.name) if source is not None else None
        metadata = [m for m in original.metadata if not isinstance(m, _MARKER_TYPES)] if original else []
        metadata.append(StructTag(field.tag))
        if field.anonymous:
            metadata.append(Embedded())
        if not field.exported and (original is None or original.exclude is not True):
            metadata.append(pydantic.Field(exclude=True))

        annotation = Annotated[(_annotation_of(field.type), *metadata)]
        field_definitions[field.name] = (annotation, _field_info_for(original))

    if source is not None:
        return pydantic.create_model(source.__name__, __config__=source.model_config, **field_definitions)
    name = (struct.name or 'AnonymousStruct').rsplit('.', 1)[-1]
    return pydantic.create_model(name, **field_definitions)


# =============================================================================
# Describing
# =============================================================================


def _describe(annotation: Any, capabilities: Sequence[type], path: tuple[type, ...]) -> TypeDescriptor:
    annotation = _strip(annotation)

    if _is_union(annotation):
        args = get_args(annotation)
        non_none = [a for a in args if a is not type(None)]
        if len(args) == 2 and len(non_none) == 1:
            return PointerType(elem=_describe(non_none[0], capabilities, path))
        return ScalarType(name=_type_name(annotation), py_type=annotation)

    if _is_model(annotation):
        return _describe_model(annotation, capabilities, path)

    if _is_protocol(annotation):
        return InterfaceType(
            name=_type_name(annotation),
            capabilities=_capabilities(annotation, capabilities),
            py_type=annotation,
        )

    return ScalarType(
        name=_type_name(annotation),
        capabilities=_capabilities(annotation, capabilities),
        py_type=annotation,
    )


def _describe_model(
    model: type[pydantic.BaseModel],
    capabilities: Sequence[type],
    path: tuple[type, ...],
) -> StructType | TypeRef:
    name = f'{model.__module__}.{model.__qualname__}'
    caps = _capabilities(model, capabilities)
    if model in path:
        return TypeRef(name=name, capabilities=caps, py_type=model)

    path = (*path, model)
    fields = tuple(
        FieldDescriptor(
            name=field_name,
            type=_describe(field_info.annotation, capabilities, path),
            tag=get_struct_tag(field_info),
            anonymous=is_embedded(field_info),
            exported=field_info.exclude is not True,
        )
        for field_name, field_info in model.model_fields.items()
    )
    return StructType(name=name, fields=fields, capabilities=caps, py_type=model)


def _capabilities(py_type: Any, capabilities: Sequence[type]) -> frozenset[str]:
    if not _is_class(py_type):
        return frozenset()
    return frozenset(capability_name(cap) for cap in capabilities if issubclass(py_type, cap))


# =============================================================================
# Building
# =============================================================================


def _annotation_of(t: TypeDescriptor) -> Any:
    if isinstance(t, StructType):
        return t.py_type if _is_unchanged(t) else build_model(t)
    if isinstance(t, PointerType):
        return Optional[_annotation_of(t.elem)]  # noqa: UP007 - elem may be Any or an alias
    return t.py_type if t.py_type is not None else Any


def _is_unchanged(t: TypeDescriptor) -> bool:
    """True when t still matches the model it was described from, so that model can be reused."""
    if isinstance(t, PointerType):
        return _is_unchanged(t.elem)
    if not isinstance(t, StructType):
        return True
    if not _is_model(t.py_type):
        return False
    model_fields = t.py_type.model_fields
    return all(
        field.name in model_fields
        and field.tag == get_struct_tag(model_fields[field.name])
        and _is_unchanged(field.type)
        for field in t.fields
    )


def _field_info_for(original: FieldInfo | None) -> FieldInfo:
    if original is None:
        return pydantic.Field()
    field_info = copy.copy(original)
    # Constraint and marker metadata travel in the Annotated annotation
    field_info.metadata = []
    return field_info


# =============================================================================
# Helpers
# =============================================================================


def _find_marker[M](field_info: FieldInfo, marker_type: type[M]) -> M | None:
    for item in field_info.metadata:
        if isinstance(item, marker_type):
            return item

    # Python 3.12+ type alias (pydantic leaves its metadata in the annotation)
    annotation = field_info.annotation
    if isinstance(annotation, TypeAliasType):
        annotation = annotation.__value__
    if get_origin(annotation) is Annotated:
        for arg in get_args(annotation)[1:]:
            if isinstance(arg, marker_type):
                return arg
    return None


def _strip(annotation: Any) -> Any:
    """Unwrap type aliases and Annotated down to the underlying type."""
    while True:
        if isinstance(annotation, TypeAliasType):
            annotation = annotation.__value__
        elif get_origin(annotation) is Annotated:
            annotation = get_args(annotation)[0]
        else:
            return annotation


def _is_union(annotation: Any) -> bool:
    return isinstance(annotation, types.UnionType) or get_origin(annotation) is Union


def _is_class(annotation: Any) -> bool:
    return isinstance(annotation, type) and get_origin(annotation) is None


def _is_model(annotation: Any) -> bool:
    return _is_class(annotation) and issubclass(annotation, pydantic.BaseModel)


def _is_protocol(annotation: Any) -> bool:
    return _is_class(annotation) and getattr(annotation, '_is_protocol', False)


def _type_name(annotation: Any) -> str:
    if _is_class(annotation):
        return annotation.__qualname__
    return repr(annotation)
