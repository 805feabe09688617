"""
Skip predicates - decide which field types the transformer must not descend into.

A Skipper is a pure function of a type descriptor. Base predicates test for a
capability or for embedded fields; skip_not and combine_skipper compose them.
All predicates are stateless and safe to share across calls.
"""

from __future__ import annotations

from collections.abc import Callable

from retag.descriptors import PointerType, StructType, TypeDescriptor, capabilities_of

type Skipper = Callable[[TypeDescriptor], bool]


def capability_name(capability: str | type) -> str:
    """
    Normalize a capability given as a protocol/class to the name descriptors carry.

    Classes are named module.qualname, so same-named protocols from different
    modules stay distinct. Strings are taken as already normalized.
    """
    if isinstance(capability, str):
        return capability
    return f'{capability.__module__}.{capability.__qualname__}'


def satisfies(t: TypeDescriptor, capability: str | type) -> bool:
    """Report whether t, or the type t points to, carries capability."""
    name = capability_name(capability)
    if name in capabilities_of(t):
        return True
    return isinstance(t, PointerType) and name in capabilities_of(t.elem)


def skip_implementor(capability: str | type) -> Skipper:
    """
    Skip types that satisfy capability, directly or through their pointee.

    A pointer carries exactly the capabilities of its element, so a pointer to
    the type never satisfies more than the type itself.
    """
    name = capability_name(capability)

    def skipper(t: TypeDescriptor) -> bool:
        return satisfies(t, name)

    return skipper


def skip_anonymous() -> Skipper:
    """Skip composites (or pointers to composites) that have at least one embedded field."""

    def skipper(t: TypeDescriptor) -> bool:
        if isinstance(t, PointerType):
            t = t.elem
        if not isinstance(t, StructType):
            return False
        return any(f.anonymous for f in t.fields)

    return skipper


def skip_not(s: Skipper) -> Skipper:
    """Negate a skipper."""

    def skipper(t: TypeDescriptor) -> bool:
        return not s(t)

    return skipper


def combine_skipper(*skippers: Skipper) -> Skipper:
    """Skip when any of skippers does. Evaluated left to right, stopping at the first hit."""

    def skipper(t: TypeDescriptor) -> bool:
        return any(s(t) for s in skippers)

    return skipper


def skip_never() -> Skipper:
    """Never skip; the transformer descends into every composite."""

    def skipper(t: TypeDescriptor) -> bool:
        return False

    return skipper
