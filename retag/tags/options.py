"""
Tag option merging.

A tag value is read as `name,opt,opt:arg,...`. The name slot (everything
before the first comma) is never touched; options are appended after it only
when neither the option nor an option with the same `name:` prefix is present.

Names and options may be written as single-quoted tokens ('a,b' or '\\'x\\'')
to carry characters the option grammar otherwise reserves.
"""

from __future__ import annotations

from collections.abc import Sequence

from retag.exceptions import MalformedOptionError, UnterminatedEscapeError
from retag.tags.codec import Tag, parse_struct_tag, struct_tag_of
from retag.tags.quoting import unquote

# Characters that end an unquoted name slot
_RESERVED_NAME_CHARS = frozenset(',\\\'"`')


def add_tag_option(tag: str, key: str, option: str) -> str:
    """
    Return a new struct tag which has option added to the entry named key.

    Assumes tag values are formatted as `key:"name,opt,opt"`. If there is no
    entry named key, a new entry `key:"option"` is appended.

    Args:
        tag: Raw struct tag text
        key: Entry key to add the option to, e.g. 'json'
        option: Option to add, e.g. 'omitempty' or 'format:RFC3339'. A leading
            comma (',omitzero') only matters when a new entry is created: it
            leaves that entry's name slot empty.
            Adding the same option twice is a no-op except for a bare option on a
            missing key, which is appended again; pass ',option' there when
            repeated calls must not change the tag.

    Returns:
        The rewritten struct tag

    Raises:
        MalformedTagError: If tag itself cannot be parsed
        MalformedOptionError: If the existing entry's option list cannot be scanned
        UnterminatedEscapeError: If a single-quoted token in the entry is not closed

    Example:
        >>> add_tag_option('json:"foo"', 'json', 'omitempty')
        'json:"foo,omitempty"'
    """
    return struct_tag_of(add_option_to_tags(parse_struct_tag(tag), key, option))


def add_option_to_tags(tags: Sequence[Tag], key: str, option: str) -> list[Tag]:
    """
    Entry-level form of add_tag_option. The input sequence is not mutated.

    Only the first entry named key is considered.
    """
    bare_option = option.removeprefix(',')
    if not bare_option:
        raise MalformedOptionError('empty option', option)

    out = list(tags)
    for i, tag in enumerate(out):
        if tag.key != key:
            continue
        if not has_option(tag.value, bare_option):
            out[i] = Tag(key=tag.key, value=f'{tag.value},{bare_option}')
        return out

    out.append(Tag(key=key, value=option))
    return out


def has_option(value: str, option: str) -> bool:
    """
    Report whether a tag value already carries option.

    An option of the form `name:arg` counts as present when any option named
    `name` is present, whatever its argument is.

    Raises:
        MalformedOptionError: If the option list cannot be scanned
        UnterminatedEscapeError: If a single-quoted token is not closed
    """
    prefix = option.split(':', 1)[0] if ':' in option else None
    original = value

    # First, skip name.
    if value and not value.startswith(','):
        n = 0
        while n < len(value) and value[n] not in _RESERVED_NAME_CHARS:
            n += 1
        if n == 0:
            _, n = read_tag_option(value)
        value = value[n:]

    while value:
        if value[0] != ',':
            raise MalformedOptionError('option must follow a comma', original)
        value = value[1:]
        if not value:
            raise MalformedOptionError('trailing comma', original)

        opt, n = read_tag_option(value)
        value = value[n:]
        if opt == option or opt == prefix:
            return True

        if value.startswith(':'):
            _, n = read_tag_option(value[1:])
            value = value[1 + n :]

    return False


def read_tag_option(s: str) -> tuple[str, int]:
    """
    Read one option token from the start of s.

    A token is either an identifier (letter or underscore, then letters,
    digits and underscores) or a single-quoted escaped string.

    Returns:
        Tuple of (decoded token, number of characters consumed)

    Raises:
        MalformedOptionError: If s is empty or starts with any other character
        UnterminatedEscapeError: If a single-quoted token is not closed
    """
    if not s:
        raise MalformedOptionError('unexpected end of option list', s)

    c = s[0]
    if c == '_' or c.isalpha():
        n = 1
        while n < len(s) and (s[n] == '_' or s[n].isalnum()):
            n += 1
        return s[:n], n
    if c == "'":
        return unescape(s)
    raise MalformedOptionError(f'invalid character {c!r}', s)


def unescape(s: str) -> tuple[str, int]:
    """
    Decode a single-quoted token at the start of s.

    Inside the quotes the usual backslash escapes apply, `\\'` stands for a
    literal single quote and a bare double quote is taken literally.

    Returns:
        Tuple of (decoded token, number of characters consumed including both quotes)

    Raises:
        UnterminatedEscapeError: If the closing quote is missing or an escape is invalid
    """
    i = 1 if s.startswith("'") else 0

    escaping = False
    escaped = ['"']
    while i < len(s):
        c = s[i]
        if escaping:
            if c == "'":
                escaped.pop()
            escaping = False
        elif c == '\\':
            escaping = True
        elif c == '"':
            escaped.append('\\')
        elif c == "'":
            escaped.append('"')
            i += 1
            try:
                return unquote(''.join(escaped)), i
            except ValueError as e:
                raise UnterminatedEscapeError(s, reason=f'string must be escaped by single quotes ({e})') from e
        escaped.append(c)
        i += 1

    raise UnterminatedEscapeError(s)
