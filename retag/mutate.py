"""
Type transformer - builds a new composite type whose field tags have been rewritten.

mutate_type walks a StructType's fields in order, descends into nested
composites (and pointers to composites) the skipper lets through, and asks a
TagMutator for every field's new tag. The source descriptor is never modified.
"""

from __future__ import annotations

from collections.abc import Callable

from retag.config.base import CyclePolicy, settings
from retag.descriptors import FieldDescriptor, PointerType, StructType, TypeDescriptor, TypeRef, deref
from retag.exceptions import CyclicTypeError, TagError
from retag.protocols import LoggerProtocol, NullLogger
from retag.skippers import Skipper
from retag.tags.options import add_tag_option

type TagMutator = Callable[[FieldDescriptor], str]


def add_option(
    key: str,
    option: str,
    ignore_if: Skipper,
    *,
    strict: bool | None = None,
    logger: LoggerProtocol | None = None,
) -> TagMutator:
    """
    Build a mutator that adds option to the key entry of every field's tag.

    Fields whose type matches ignore_if keep their tag as is.

    A field whose tag cannot be parsed or merged either aborts the transform
    (strict) or keeps its original tag and is reported as a warning
    (best-effort), so one bad tag does not block the rest of the type.

    Args:
        key: Tag key, e.g. 'json'
        option: Option to add, e.g. 'omitzero' or ',omitzero'
        ignore_if: Skipper over the field's original type
        strict: Re-raise tag errors. Defaults to settings.STRICT_TAGS
        logger: Receives best-effort warnings. Defaults to NullLogger

    Returns:
        TagMutator for mutate_type
    """
    strict = settings.STRICT_TAGS if strict is None else strict
    log = logger or NullLogger()

    def mutator(field: FieldDescriptor) -> str:
        if ignore_if(field.type):
            return field.tag
        try:
            return add_tag_option(field.tag, key, option)
        except TagError as e:
            if strict:
                raise
            log.warning(f'Keeping original tag of field {field.name!r}: {e}')
            return field.tag

    return mutator


def chain_mutators(*mutators: TagMutator) -> TagMutator:
    """Apply mutators in order, each one seeing the tag the previous one produced."""

    def mutator(field: FieldDescriptor) -> str:
        for m in mutators:
            field = field.model_copy(update={'tag': m(field)})
        return field.tag

    return mutator


def mutate_type(
    struct: StructType,
    skip_advancing: Skipper,
    mutate_tag: TagMutator,
    *,
    on_cycle: CyclePolicy | None = None,
) -> StructType:
    """
    Return a new composite with the same fields as struct and rewritten tags.

    Args:
        struct: Source composite
        skip_advancing: Field types it returns True for are not descended into
        mutate_tag: Computes each field's new tag from the original field
            (original type and original tag)
        on_cycle: 'error' raises CyclicTypeError when a named composite is
            reached again inside itself, 'keep' leaves that field's type
            unchanged. Defaults to settings.CYCLE_POLICY

    Returns:
        New StructType with identical field count, names and order

    Raises:
        CyclicTypeError: On a recursive composite when on_cycle is 'error'
        TagError: Whatever mutate_tag raises
    """
    policy = on_cycle or settings.CYCLE_POLICY
    return _mutate(struct, skip_advancing, mutate_tag, policy, ())


def _mutate(
    struct: StructType,
    skip_advancing: Skipper,
    mutate_tag: TagMutator,
    policy: CyclePolicy,
    path: tuple[str, ...],
) -> StructType:
    if struct.name is not None:
        path = (*path, struct.name)

    fields = []
    for field in struct.fields:
        typ = field.type
        if not skip_advancing(typ):
            typ = _advance(typ, skip_advancing, mutate_tag, policy, path)

        fields.append(
            FieldDescriptor(
                name=field.name,
                type=typ,
                tag=mutate_tag(field),
                anonymous=field.anonymous,
                exported=field.exported,
            )
        )

    return StructType(
        name=struct.name,
        fields=tuple(fields),
        capabilities=struct.capabilities,
        py_type=struct.py_type,
    )


def _advance(
    typ: TypeDescriptor,
    skip_advancing: Skipper,
    mutate_tag: TagMutator,
    policy: CyclePolicy,
    path: tuple[str, ...],
) -> TypeDescriptor:
    target = deref(typ)
    if not isinstance(target, StructType | TypeRef):
        return typ

    if target.name is not None and target.name in path:
        if policy == 'error':
            raise CyclicTypeError((*path, target.name))
        return typ
    if isinstance(target, TypeRef):
        return typ

    mutated = _mutate(target, skip_advancing, mutate_tag, policy, path)
    if isinstance(typ, PointerType):
        return PointerType(elem=mutated)
    return mutated
