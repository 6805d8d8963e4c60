"""
Recursive-descent parser building a node tree from JSON text.

The input is copied once into a NUL-terminated byte string; the NUL marks the
end of text, so every production can look one byte ahead without bounds
checks. Any byte from 1 to 32 counts as whitespace, and a bare scalar is a
valid document.

Productions never clean up after themselves: nodes are linked into the tree
before they are filled, so when any production raises, the top-level entry
deletes the whole partial tree exactly once and re-raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from jtree._allocator import Allocator
from jtree._errors import JSONDecodeError
from jtree._errors import NestingLimitError
from jtree._errors import TrailingGarbageError
from jtree._errors import UnexpectedTokenError
from jtree._node import NESTING_LIMIT
from jtree._node import TEXT_ENCODING
from jtree._node import TEXT_ERRORS
from jtree._node import Node
from jtree._node import NodeType
from jtree._node import new_node
from jtree._numbers import parse_number
from jtree._profile import ProfileContext
from jtree._strings import QUOTE
from jtree._strings import parse_string
from jtree._utf8_mapper import UTF8PositionMapper

logger = logging.getLogger(__name__)

_NULL = b"null"
_FALSE = b"false"
_TRUE = b"true"
_MINUS = 0x2D
_COMMA = 0x2C
_COLON = 0x3A
_OPEN_BRACKET = 0x5B
_CLOSE_BRACKET = 0x5D
_OPEN_BRACE = 0x7B
_CLOSE_BRACE = 0x7D
_ZERO = 0x30
_NINE = 0x39


@dataclass(frozen=True)
class ParseResult:
    """A parsed tree and the offset just past the text it consumed."""

    node: Node
    end: int


def skip_whitespace(data: bytes, pos: int) -> int:
    """Advances past every byte in 1..32; NUL stops the scan."""
    byte = data[pos]
    while 0 < byte <= 32:
        pos += 1
        byte = data[pos]
    return pos


class JsonParser:
    """
    Recursive-descent parser over a NUL-terminated UTF-8 buffer.

    Each ``parse_*`` method fills the node it is given and returns the
    offset of the first byte after the production.
    """

    def __init__(self, data: bytes, allocator: Allocator):
        self.data = data
        self.allocator = allocator
        self.depth = 0

    def parse_value(self, node: Node, pos: int) -> int:
        """Dispatches on the first byte of a value."""
        data = self.data
        with ProfileContext("parse_value"):
            if data.startswith(_NULL, pos):
                node.type = NodeType.NULL
                return pos + 4
            if data.startswith(_FALSE, pos):
                node.type = NodeType.FALSE
                return pos + 5
            if data.startswith(_TRUE, pos):
                node.type = NodeType.TRUE
                return pos + 4

            byte = data[pos]
            if byte == QUOTE:
                return parse_string(node, data, pos, self.allocator)
            if byte == _MINUS or _ZERO <= byte <= _NINE:
                return parse_number(node, data, pos)
            if byte == _OPEN_BRACKET or byte == _OPEN_BRACE:
                if self.depth >= NESTING_LIMIT:
                    raise NestingLimitError(
                        f"Exceeded maximum nesting depth of {NESTING_LIMIT}", b"", pos
                    )
                self.depth += 1
                if byte == _OPEN_BRACKET:
                    pos = self.parse_array(node, pos)
                else:
                    pos = self.parse_object(node, pos)
                self.depth -= 1
                return pos

            raise UnexpectedTokenError("Expecting value", b"", pos)

    def parse_array(self, node: Node, pos: int) -> int:
        data = self.data
        if data[pos] != _OPEN_BRACKET:
            raise UnexpectedTokenError("Expecting '['", b"", pos)

        node.type = NodeType.ARRAY
        pos = skip_whitespace(data, pos + 1)
        if data[pos] == _CLOSE_BRACKET:
            return pos + 1

        child = node.child = new_node(self.allocator)
        pos = skip_whitespace(data, self.parse_value(child, pos))

        while data[pos] == _COMMA:
            child.next = new_node(self.allocator)
            child = child.next
            pos = skip_whitespace(data, pos + 1)
            pos = skip_whitespace(data, self.parse_value(child, pos))

        if data[pos] == _CLOSE_BRACKET:
            return pos + 1
        raise UnexpectedTokenError("Expecting ',' delimiter", b"", pos)

    def _parse_member(self, child: Node, pos: int) -> int:
        data = self.data
        pos = skip_whitespace(data, pos)
        if data[pos] != QUOTE:
            raise UnexpectedTokenError(
                "Expecting property name enclosed in double quotes", b"", pos
            )
        pos = skip_whitespace(
            data, parse_string(child, data, pos, self.allocator)
        )
        # The key was decoded into the value slot; it belongs in the name.
        child.name = child.value  # type: ignore[assignment]
        child.value = None
        child.type = NodeType.INVALID

        if data[pos] != _COLON:
            raise UnexpectedTokenError("Expecting ':' delimiter", b"", pos)
        pos = skip_whitespace(data, pos + 1)
        return skip_whitespace(data, self.parse_value(child, pos))

    def parse_object(self, node: Node, pos: int) -> int:
        data = self.data
        if data[pos] != _OPEN_BRACE:
            raise UnexpectedTokenError("Expecting '{'", b"", pos)

        node.type = NodeType.OBJECT
        pos = skip_whitespace(data, pos + 1)
        if data[pos] == _CLOSE_BRACE:
            return pos + 1

        child = node.child = new_node(self.allocator)
        pos = self._parse_member(child, pos)

        while data[pos] == _COMMA:
            child.next = new_node(self.allocator)
            child = child.next
            pos = self._parse_member(child, pos + 1)

        if data[pos] == _CLOSE_BRACE:
            return pos + 1
        raise UnexpectedTokenError("Expecting ',' delimiter", b"", pos)


def _as_bytes(text: str | bytes | bytearray | memoryview) -> bytes:
    if isinstance(text, str):
        return text.encode(TEXT_ENCODING, TEXT_ERRORS)
    if isinstance(text, bytes | bytearray | memoryview):
        return bytes(text)
    raise TypeError(
        f"the JSON document must be str or bytes-like, not {type(text).__name__}"
    )


def _reanchor(
    error: JSONDecodeError, text: str | bytes | bytearray | memoryview
) -> JSONDecodeError:
    """Rebuilds ``error`` against the caller's document and offsets."""
    byte_offset = error.byte_offset
    if isinstance(text, str):
        doc: str | bytes = text
        pos = UTF8PositionMapper(text).byte_to_char(byte_offset)
    else:
        doc = bytes(text)
        pos = byte_offset
    return type(error)(error.msg, doc, pos, byte_offset)


def parse_document(
    text: str | bytes | bytearray | memoryview,
    allocator: Allocator,
    strict: bool = False,
) -> ParseResult:
    """
    Parses ``text`` into a new tree.

    In permissive mode the value may be followed by anything; ``end`` reports
    where it stopped. In strict mode only whitespace may follow.
    """
    data = _as_bytes(text) + b"\0"
    parser = JsonParser(data, allocator)
    root = new_node(allocator)
    try:
        with ProfileContext("parse_document", len(data) - 1):
            try:
                end = parser.parse_value(root, skip_whitespace(data, 0))
                if strict:
                    end = skip_whitespace(data, end)
                    if data[end] != 0:
                        raise TrailingGarbageError("Extra data", b"", end)
            except Exception:
                root.delete()
                raise
    except JSONDecodeError as exc:
        logger.debug(
            "parse failed with %s at byte %d", type(exc).__name__, exc.byte_offset
        )
        raise _reanchor(exc, text) from None
    end_pos = end
    if isinstance(text, str):
        end_pos = UTF8PositionMapper(text).byte_to_char(end)
    return ParseResult(root, end_pos)
