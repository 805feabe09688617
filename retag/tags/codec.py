"""
Struct tag codec.

Parses a raw struct tag (`json:"foo,omitempty" yaml:"foo"`) into ordered
key/value entries and renders entries back into the canonical string form.
This is the only module that scans the raw tag grammar.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from retag.exceptions import MalformedTagError
from retag.tags.quoting import quote, unquote


@dataclass(frozen=True)
class Tag:
    """One key:"value" entry of a struct tag. value is the decoded (unquoted) text."""

    key: str
    value: str

    def flatten(self) -> str:
        """Render this entry as key:"value" with the value re-quoted."""
        return f'{self.key}:{quote(self.value)}'


def _is_key_char(c: str) -> bool:
    # A space, a quote, a colon or a control character ends the key.
    return c > ' ' and c != ':' and c != '"' and c != '\x7f'


def parse_struct_tag(tag: str) -> list[Tag]:
    """
    Parse a struct tag into its entries, in order.

    Args:
        tag: Raw struct tag text

    Returns:
        List of Tag entries (empty for an empty or all-space tag)

    Raises:
        MalformedTagError: If a key has no paired quoted value, the quoted
            value is unterminated, or the value has an invalid escape
    """
    out: list[Tag] = []

    while tag:
        # Skip leading space.
        i = 0
        while i < len(tag) and tag[i] == ' ':
            i += 1
        tag = tag[i:]
        if not tag:
            break

        # Scan to colon.
        i = 0
        while i < len(tag) and _is_key_char(tag[i]):
            i += 1
        if i == 0 or i + 1 >= len(tag) or tag[i] != ':' or tag[i + 1] != '"':
            raise MalformedTagError('input has no paired value', tag)
        key = tag[:i]
        tag = tag[i + 1 :]

        # Scan quoted string to find value.
        i = 1
        while i < len(tag) and tag[i] != '"':
            if tag[i] == '\\':
                i += 1
            i += 1
        if i >= len(tag):
            raise MalformedTagError('key has no paired value', tag, key=key)
        quoted_value = tag[: i + 1]
        rest = tag
        tag = tag[i + 1 :]

        try:
            value = unquote(quoted_value)
        except ValueError as e:
            raise MalformedTagError(f'invalid quoted value ({e})', rest, key=key) from e
        out.append(Tag(key=key, value=value))

    return out


def struct_tag_of(tags: Iterable[Tag]) -> str:
    """Render entries back into a struct tag, separated by single spaces."""
    return ' '.join(tag.flatten() for tag in tags)


def lookup(tags: Iterable[Tag], key: str) -> str | None:
    """Return the value of the first entry named key, or None if there is none."""
    for tag in tags:
        if tag.key == key:
            return tag.value
    return None
