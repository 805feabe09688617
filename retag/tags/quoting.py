"""
Go string-literal quoting for struct tag values.

Struct tag values are double-quoted Go string literals. These helpers produce
and consume exactly that syntax so rewritten tags stay byte-compatible with the
tags Go tooling writes. Python has no built-in codec for it: repr() and
json.dumps() escape differently.

Bytes written as \\xHH or \\OOO decode to the code point of the same value.
"""

from __future__ import annotations

_SIMPLE_ESCAPES: dict[str, str] = {
    'a': '\a',
    'b': '\b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
    'v': '\v',
    '\\': '\\',
}

_CONTROL_ESCAPES: dict[str, str] = {value: f'\\{key}' for key, value in _SIMPLE_ESCAPES.items() if key != '\\'}

_HEX_DIGITS = frozenset('0123456789abcdefABCDEF')
_OCTAL_DIGITS = frozenset('01234567')

_MAX_CODE_POINT = 0x10FFFF


def quote(s: str) -> str:
    """
    Return s as a double-quoted Go string literal.

    Printable characters are kept as they are; quotes, backslashes and
    non-printable characters are escaped the way Go's strconv.Quote does.
    """
    out = ['"']
    for c in s:
        if c == '"' or c == '\\':
            out.append('\\' + c)
        elif c.isprintable():
            out.append(c)
        elif c in _CONTROL_ESCAPES:
            out.append(_CONTROL_ESCAPES[c])
        elif ord(c) < 0x20 or ord(c) == 0x7F:
            out.append(f'\\x{ord(c):02x}')
        elif ord(c) < 0x10000:
            out.append(f'\\u{ord(c):04x}')
        else:
            out.append(f'\\U{ord(c):08x}')
    out.append('"')
    return ''.join(out)


def unquote(s: str) -> str:
    """
    Decode a double-quoted Go string literal.

    Raises:
        ValueError: If s is not a valid double-quoted literal
    """
    if len(s) < 2 or s[0] != '"' or s[-1] != '"':
        raise ValueError(f'invalid syntax: not a double-quoted string: {s}')

    body = s[1:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        c = body[i]
        if c == '"':
            raise ValueError(f'invalid syntax: unescaped quote: {s}')
        if c == '\n':
            raise ValueError(f'invalid syntax: newline in string: {s}')
        if c != '\\':
            out.append(c)
            i += 1
            continue

        i += 1
        if i >= len(body):
            raise ValueError(f'invalid syntax: trailing backslash: {s}')
        esc = body[i]
        i += 1

        if esc in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[esc])
        elif esc == '"':
            out.append('"')
        elif esc in 'xuU':
            width = {'x': 2, 'u': 4, 'U': 8}[esc]
            digits = body[i : i + width]
            if len(digits) != width or not all(d in _HEX_DIGITS for d in digits):
                raise ValueError(f'invalid syntax: bad \\{esc} escape: {s}')
            value = int(digits, 16)
            if esc != 'x' and (value > _MAX_CODE_POINT or 0xD800 <= value <= 0xDFFF):
                raise ValueError(f'invalid syntax: invalid code point {digits}: {s}')
            out.append(chr(value))
            i += width
        elif esc in _OCTAL_DIGITS:
            digits = body[i - 1 : i + 2]
            if len(digits) != 3 or not all(d in _OCTAL_DIGITS for d in digits):
                raise ValueError(f'invalid syntax: bad octal escape: {s}')
            value = int(digits, 8)
            if value > 0xFF:
                raise ValueError(f'invalid syntax: octal escape out of range: {s}')
            out.append(chr(value))
            i += 2
        else:
            raise ValueError(f'invalid syntax: unknown escape \\{esc}: {s}')

    return ''.join(out)
