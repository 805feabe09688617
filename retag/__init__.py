"""retag - rewrite struct tags of composite types without touching the originals."""

from retag.cache import TransformCache
from retag.descriptors import FieldDescriptor, InterfaceType, PointerType, ScalarType, StructType, TypeRef
from retag.exceptions import (
    CyclicTypeError,
    MalformedOptionError,
    MalformedTagError,
    RetagError,
    TagError,
    UnterminatedEscapeError,
)
from retag.introspection import build_model, describe_model, describe_type, get_struct_tag, get_tagged_fields
from retag.logger import ConsoleLogger
from retag.markers import Embedded, StructTag
from retag.mutate import TagMutator, add_option, chain_mutators, mutate_type
from retag.protocols import LoggerProtocol, NullLogger
from retag.services import ModelRetagService
from retag.skippers import (
    Skipper,
    combine_skipper,
    satisfies,
    skip_anonymous,
    skip_implementor,
    skip_never,
    skip_not,
)
from retag.tags import Tag, add_tag_option, parse_struct_tag, struct_tag_of

__all__ = [
    'ConsoleLogger',
    'CyclicTypeError',
    'Embedded',
    'FieldDescriptor',
    'InterfaceType',
    'LoggerProtocol',
    'MalformedOptionError',
    'MalformedTagError',
    'ModelRetagService',
    'NullLogger',
    'PointerType',
    'RetagError',
    'ScalarType',
    'Skipper',
    'StructTag',
    'StructType',
    'Tag',
    'TagError',
    'TagMutator',
    'TransformCache',
    'TypeRef',
    'UnterminatedEscapeError',
    'add_option',
    'add_tag_option',
    'build_model',
    'chain_mutators',
    'combine_skipper',
    'describe_model',
    'describe_type',
    'get_struct_tag',
    'get_tagged_fields',
    'mutate_type',
    'parse_struct_tag',
    'satisfies',
    'skip_anonymous',
    'skip_implementor',
    'skip_never',
    'skip_not',
    'struct_tag_of',
]
