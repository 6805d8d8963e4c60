"""
String codec: unescaping JSON string literals and escaping them for output.

Parsing works on UTF-8 bytes terminated by a NUL sentinel. ``\\uXXXX`` escapes
are transcoded from UTF-16 (including surrogate pairs) to UTF-8. Errors are
raised with the offset of the literal's opening quote and an empty document;
the parser re-anchors them to the caller's input.
"""

from __future__ import annotations

import re

from jtree._allocator import DEFAULT_ALLOCATOR
from jtree._allocator import Allocator
from jtree._errors import InvalidEscapeError
from jtree._errors import InvalidSurrogatePairError
from jtree._errors import MalformedInputError
from jtree._errors import OutOfMemoryError
from jtree._errors import UnexpectedTokenError
from jtree._node import Node
from jtree._node import NodeType
from jtree._node import encode_text
from jtree._profile import ProfileContext

QUOTE = 0x22
BACKSLASH = 0x5C
_U = 0x75

_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")

_UNESCAPES = {
    ord("b"): 0x08,
    ord("f"): 0x0C,
    ord("n"): 0x0A,
    ord("r"): 0x0D,
    ord("t"): 0x09,
    QUOTE: QUOTE,
    BACKSLASH: BACKSLASH,
    ord("/"): ord("/"),
}

# Lead-byte marks indexed by encoded length.
_FIRST_BYTE_MARK = (0x00, 0x00, 0xC0, 0xE0, 0xF0)

_ESCAPES = {
    QUOTE: b'\\"',
    BACKSLASH: b"\\\\",
    0x08: b"\\b",
    0x0C: b"\\f",
    0x0A: b"\\n",
    0x0D: b"\\r",
    0x09: b"\\t",
}
for _byte in range(32):
    _ESCAPES.setdefault(_byte, b"\\u%04x" % _byte)
del _byte

_NEEDS_ESCAPE = re.compile(rb'[\x00-\x1f"\\]')


def parse_hex4(data: bytes, pos: int) -> int | None:
    """Decodes four hex digits at ``pos``; None if any is not a hex digit."""
    digits = data[pos : pos + 4]
    if len(digits) != 4 or not _HEX_DIGITS.issuperset(digits):
        return None
    return int(digits, 16)


def utf8_length(code_point: int) -> int:
    if code_point < 0x80:
        return 1
    if code_point < 0x800:
        return 2
    if code_point < 0x10000:
        return 3
    return 4


def encode_utf8(code_point: int, out: bytearray, cursor: int) -> int:
    """
    Writes ``code_point`` as UTF-8 at ``cursor`` and returns the new cursor.

    Continuation bytes are filled from the last one backwards, six bits at a
    time, then the lead byte takes the remaining bits and the length mark.
    """
    length = utf8_length(code_point)
    for index in range(cursor + length - 1, cursor, -1):
        out[index] = (code_point | 0x80) & 0xBF
        code_point >>= 6
    out[cursor] = code_point | _FIRST_BYTE_MARK[length]
    return cursor + length


def _scan_literal(data: bytes, start: int) -> tuple[int, int]:
    """
    Finds the closing quote of the literal opening at ``start``.

    Returns the quote's index and an upper bound on the decoded length;
    escape sequences only ever shrink, so counting one byte per escape is
    always enough.
    """
    end = start + 1
    length = 0
    while True:
        byte = data[end]
        if byte == QUOTE:
            return end, length
        if byte == 0:
            raise MalformedInputError(
                "Unterminated string starting at", b"", start
            )
        length += 1
        end += 1
        if byte == BACKSLASH:
            if data[end] == 0:
                raise MalformedInputError(
                    "Trailing backslash in string starting at", b"", start
                )
            end += 1


def _decode_unicode_escape(
    data: bytes, pos: int, end: int, start: int
) -> tuple[int, int]:
    """Decodes the ``\\uXXXX`` escape (or pair) at ``pos``; returns (code point, next pos)."""
    if pos + 5 >= end:
        raise InvalidEscapeError(
            "Incomplete \\u escape in string starting at", b"", start
        )
    unit = parse_hex4(data, pos + 2)
    if unit is None:
        raise InvalidEscapeError(
            "Invalid \\u escape in string starting at", b"", start
        )
    pos += 6

    if unit == 0:
        raise InvalidEscapeError(
            "Invalid \\u0000 escape in string starting at", b"", start
        )
    if 0xDC00 <= unit <= 0xDFFF:
        raise InvalidSurrogatePairError(
            "Lone low surrogate in string starting at", b"", start
        )
    if unit < 0xD800 or unit > 0xDBFF:
        return unit, pos

    if pos + 6 > end or data[pos] != BACKSLASH or data[pos + 1] != _U:
        raise InvalidSurrogatePairError(
            "Missing low surrogate in string starting at", b"", start
        )
    low = parse_hex4(data, pos + 2)
    if low is None:
        raise InvalidEscapeError(
            "Invalid \\u escape in string starting at", b"", start
        )
    if not 0xDC00 <= low <= 0xDFFF:
        raise InvalidSurrogatePairError(
            "Invalid low surrogate in string starting at", b"", start
        )
    return 0x10000 + (((unit & 0x3FF) << 10) | (low & 0x3FF)), pos + 6


def parse_string(
    node: Node, data: bytes, start: int, allocator: Allocator
) -> int:
    """
    Unescapes the literal at ``start`` into ``node`` and returns the offset
    just past its closing quote.

    The output block is attached to the node before decoding so that a
    failure part-way through leaves it for the tree's owner to release.
    """
    if data[start] != QUOTE:
        raise UnexpectedTokenError("Expecting string", b"", start)

    with ProfileContext("parse_string"):
        end, length = _scan_literal(data, start)
        out = allocator.allocate(length)
        if out is None:
            raise OutOfMemoryError(f"could not allocate {length} bytes")
        node.value = out
        node.type = NodeType.STRING

        pos = start + 1
        cursor = 0
        while pos < end:
            if data[pos] != BACKSLASH:
                run_end = data.find(b"\\", pos, end)
                if run_end < 0:
                    run_end = end
                out[cursor : cursor + run_end - pos] = data[pos:run_end]
                cursor += run_end - pos
                pos = run_end
                continue

            letter = data[pos + 1]
            if letter in _UNESCAPES:
                out[cursor] = _UNESCAPES[letter]
                cursor += 1
                pos += 2
            elif letter == _U:
                code_point, pos = _decode_unicode_escape(data, pos, end, start)
                cursor = encode_utf8(code_point, out, cursor)
            else:
                raise InvalidEscapeError(
                    f"Invalid \\escape {chr(letter)!r} in string starting at",
                    b"",
                    start,
                )

        del out[cursor:]
        return end + 1


def escaped_size(data: bytes | bytearray | None) -> int:
    """Exact size of the quoted, escaped rendering of ``data``."""
    if not data:
        return 2
    size = len(data) + 2
    if _NEEDS_ESCAPE.search(data) is None:
        return size
    for match in _NEEDS_ESCAPE.finditer(data):
        size += len(_ESCAPES[match.group()[0]]) - 1
    return size


def write_escaped(
    data: bytes | bytearray | None, out: bytearray | memoryview, cursor: int = 0
) -> int:
    """
    Writes the quoted, escaped rendering of ``data`` into ``out`` at
    ``cursor`` and returns the cursor past the closing quote.

    ``out`` must have room for ``escaped_size(data)`` bytes.
    """
    out[cursor] = QUOTE
    cursor += 1
    if data:
        literal_start = 0
        for match in _NEEDS_ESCAPE.finditer(data):
            run = match.start() - literal_start
            out[cursor : cursor + run] = data[literal_start : match.start()]
            cursor += run
            replacement = _ESCAPES[data[match.start()]]
            out[cursor : cursor + len(replacement)] = replacement
            cursor += len(replacement)
            literal_start = match.end()
        run = len(data) - literal_start
        out[cursor : cursor + run] = data[literal_start:]
        cursor += run
    out[cursor] = QUOTE
    return cursor + 1


def escape(data: str | bytes | bytearray | None) -> bytes:
    """Returns ``data`` as a quoted JSON string literal."""
    if data is not None:
        data = encode_text(data)
    out = bytearray(escaped_size(data))
    write_escaped(data, out)
    return bytes(out)


def unescape(literal: str | bytes | bytearray) -> bytes:
    """Decodes a complete quoted literal (``"..."``) to its UTF-8 payload."""
    data = encode_text(literal) + b"\0"
    node = Node()
    parse_string(node, data, 0, DEFAULT_ALLOCATOR)
    return bytes(node.value)  # type: ignore[arg-type]
