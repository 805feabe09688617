"""Struct tag grammar: codec, quoting and option merging."""

from retag.tags.codec import Tag, lookup, parse_struct_tag, struct_tag_of
from retag.tags.options import add_option_to_tags, add_tag_option, has_option, read_tag_option, unescape
from retag.tags.quoting import quote, unquote

__all__ = [
    'Tag',
    'add_option_to_tags',
    'add_tag_option',
    'has_option',
    'lookup',
    'parse_struct_tag',
    'quote',
    'read_tag_option',
    'struct_tag_of',
    'unescape',
    'unquote',
]
