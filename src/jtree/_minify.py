"""Whitespace and comment stripping for raw JSON text."""

from __future__ import annotations

_SPACE = frozenset(b" \t\r\n")
_SLASH = 0x2F
_STAR = 0x2A
_NEWLINE = 0x0A
_QUOTE = 0x22
_BACKSLASH = 0x5C


def _minify_bytes(data: bytes) -> bytes:
    out = bytearray()
    pos = 0
    length = len(data)
    while pos < length:
        byte = data[pos]
        following = data[pos + 1] if pos + 1 < length else 0
        if byte in _SPACE:
            pos += 1
        elif byte == _SLASH and following == _SLASH:
            end = data.find(b"\n", pos)
            pos = length if end < 0 else end
        elif byte == _SLASH and following == _STAR:
            end = data.find(b"*/", pos + 2)
            pos = length if end < 0 else end + 2
        elif byte == _QUOTE:
            # string literals are copied verbatim, escapes included
            start = pos
            pos += 1
            while pos < length and data[pos] != _QUOTE:
                pos += 2 if data[pos] == _BACKSLASH else 1
            pos = min(pos + 1, length)
            out += data[start:pos]
        else:
            out.append(byte)
            pos += 1
    return bytes(out)


def minify(text: str | bytes) -> str | bytes:
    """
    Removes insignificant whitespace and ``//`` or ``/* */`` comments.

    Text inside string literals is left untouched. Returns the same type it
    was given.
    """
    if isinstance(text, str):
        return _minify_bytes(text.encode("utf-8", "surrogateescape")).decode(
            "utf-8", "surrogateescape"
        )
    if isinstance(text, bytes | bytearray | memoryview):
        return _minify_bytes(bytes(text))
    raise TypeError(f"expected str or bytes, not {type(text).__name__}")
