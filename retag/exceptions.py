"""
Shared exceptions for retag.

Exception Hierarchy:
    RetagError (base)
    ├── TagError (struct tag grammar violations)
    │   ├── MalformedTagError (unpaired key, unterminated quote, bad escape)
    │   ├── MalformedOptionError (bad option list inside one tag value)
    │   └── UnterminatedEscapeError (single-quoted option token not closed)
    └── CyclicTypeError (composite type nested inside itself)
"""

from __future__ import annotations

from collections.abc import Sequence


class RetagError(Exception):
    """Base exception for all retag errors."""


class TagError(RetagError):
    """Base exception for struct tag parsing and option merging failures."""


class MalformedTagError(TagError):
    """Raised when a struct tag does not follow the key:"value" grammar."""

    def __init__(self, reason: str, rest: str, key: str | None = None) -> None:
        self.reason = reason
        self.rest = rest
        self.key = key
        if key is None:
            super().__init__(f'malformed tag: {reason}, rest = {rest}')
        else:
            super().__init__(f'malformed tag: {reason}, key = {key}, rest = {rest}')


class MalformedOptionError(TagError):
    """Raised when a tag value's comma separated option list cannot be scanned."""

    def __init__(self, reason: str, value: str) -> None:
        self.reason = reason
        self.value = value
        super().__init__(f'malformed option: {reason}, value = {value}')


class UnterminatedEscapeError(TagError):
    """Raised when a single-quoted option token is missing its closing quote or is badly escaped."""

    def __init__(self, text: str, reason: str = 'single-quoted string missing terminating single-quote') -> None:
        self.text = text
        self.reason = reason
        super().__init__(f'invalid escaped string: {reason}: {text}')


class CyclicTypeError(RetagError):
    """Raised when a composite type is reached again while it is still being transformed."""

    def __init__(self, path: Sequence[str]) -> None:
        self.path = tuple(path)
        super().__init__(f'cyclic composite type: {" -> ".join(self.path)}')
